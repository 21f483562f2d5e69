"""Proportional-integral controller with output clamping and anti-windup."""

from pcsctl.fixedpoint import from_int, to_int


def _trunc_div(numerator, denominator):
    quotient = abs(numerator) // abs(denominator)
    return -quotient if (numerator < 0) != (denominator < 0) else quotient


class PiController:
    """PI controller working on fixed point errors and producing integer outputs.

    ``ref`` is the fixed point set point and ``frequency`` the calling
    frequency used to scale the integral part.
    """

    def __init__(self):
        self.kp = 0
        self.ki = 0
        self.esum = 0
        self.ref = 0
        self.frequency = 1
        self.max_y = 0
        self.min_y = 0

    def set_gains(self, kp, ki):
        """Set proportional and integral gain."""
        self.kp = int(kp)
        self.ki = int(ki)

    def set_min_max(self, min_y, max_y):
        """Set the actuator saturation limits."""
        self.min_y = int(min_y)
        self.max_y = int(max_y)

    def _clamp(self, y):
        return min(max(y, self.min_y), self.max_y)

    def run(self, current):
        """Return a new actuator value for the measured fixed point value ``current``.

        The integrator only accumulates while the output is not saturated.
        """
        err = self.ref - current
        esum_next = self.esum + err
        y = to_int(err * self.kp + _trunc_div(esum_next, self.frequency) * self.ki)
        ylim = self._clamp(y)
        if ylim == y:
            self.esum = esum_next
        return ylim

    def run_proportional_only(self, current):
        """Return a clamped output from the proportional part alone."""
        return self._clamp(to_int((self.ref - current) * self.kp))

    def reset_integrator(self):
        self.esum = 0

    def preload_integrator(self, output):
        """Preload the integrator so that the integral part yields ``output``."""
        if self.ki != 0:
            self.esum = from_int(_trunc_div(int(output) * self.frequency, self.ki))
        else:
            self.esum = 0