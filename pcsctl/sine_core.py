"""Space vector PWM duty cycle generation and fixed point trigonometry."""

from pcsctl.sinetable import SINLU_ONEREV, lookup

BITS = 16
MAXAMP = 37813
SINTAB_MAX = 1 << BITS
ZERO_OFFSET = SINTAB_MAX // 2
BRAD_PI = 1 << (BITS - 1)
MIN_PULSE = 1000

PHASE_SHIFT90 = SINLU_ONEREV // 4
PHASE_SHIFT120 = SINLU_ONEREV // 3
PHASE_SHIFT240 = 2 * (SINLU_ONEREV // 3)

_FIX_SHIFT = 15


def _int32(value):
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


def sine(angle):
    """Sine of a 16-bit angle, scaled to +-32767."""
    return lookup(int(angle) & 0xFFFF)


def cosine(angle):
    """Cosine of a 16-bit angle, scaled to +-32767."""
    return lookup((PHASE_SHIFT90 + (int(angle) & 0xFFFF)) & 0xFFFF)


def atan2(x, y):
    """Angle of the vector (x, y) as a 16-bit angle (65536 = one revolution)."""
    x = int(x)
    y = int(y)
    if y == 0:
        return 0 if x >= 0 else BRAD_PI

    phi = 0
    if y < 0:
        x, y = -x, -y
        phi += 4
    if x <= 0:
        x, y = y, -x
        phi += 2
    if x <= y:
        x, y = x + y, y - x
        phi += 1

    phi *= BRAD_PI // 4

    t = (y << _FIX_SHIFT) // x
    t2 = (-t * t) >> _FIX_SHIFT

    dphi = 0x0470
    dphi = 0x1029 + ((t2 * dphi) >> _FIX_SHIFT)
    dphi = 0x1F0B + ((t2 * dphi) >> _FIX_SHIFT)
    dphi = 0x364C + ((t2 * dphi) >> _FIX_SHIFT)
    dphi = 0xA2FC + ((t2 * dphi) >> _FIX_SHIFT)
    dphi = (dphi * t) >> _FIX_SHIFT

    return (phi + ((dphi + 2) >> 2)) & 0xFFFF


def svpwm_offset(a, b, c):
    """Common mode offset that centres three phase values (space vector PWM)."""
    return (min(a, b, c) + max(a, b, c)) >> 1


def _multiply_amplitude(amplitude, base):
    """Scale a table value by an amplitude where 32768 means 1; allows overmodulation."""
    return _int32((amplitude & 0xFFFF) * base) >> (BITS - 1)


class SineCore:
    """Generates three phase duty cycles for a given rotor angle and amplitude."""

    def __init__(self):
        self.amp = 0
        self.duty_cycles = (0, 0, 0)

    def set_amp(self, amp):
        """Set the amplitude in digits; MAXAMP is the largest sensible value."""
        self.amp = int(amp)

    def calc(self, angle):
        """Compute and store the duty cycles for ``angle``; return them as a tuple."""
        angle = int(angle) & 0xFFFF
        phases = (
            sine(angle),
            sine((angle + PHASE_SHIFT120) & 0xFFFF),
            sine((angle + PHASE_SHIFT240) & 0xFFFF),
        )
        scaled = [_multiply_amplitude(self.amp, value) for value in phases]
        offset = svpwm_offset(*scaled)

        duties = []
        for value in scaled:
            duty = (value - offset + ZERO_OFFSET) & 0xFFFFFFFF
            if duty < MIN_PULSE:
                duty = 0
            elif duty > SINTAB_MAX - MIN_PULSE:
                duty = SINTAB_MAX
            duties.append(duty)

        self.duty_cycles = tuple(duties)
        return self.duty_cycles