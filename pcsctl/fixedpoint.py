"""Fixed point arithmetic with five fractional bits, plus small integer math helpers."""

FRAC_DIGITS = 5
FRAC_FAC = 1 << FRAC_DIGITS
UTOA_FRACDEC = 100
FP_DECIMALS = 2


def from_float(value):
    """Convert a float to fixed point, truncating toward zero."""
    return int(value * FRAC_FAC)


def from_int(value):
    """Convert an integer to fixed point."""
    return int(value) << FRAC_DIGITS


def to_int(value):
    """Convert a fixed point value to an integer (arithmetic shift)."""
    return int(value) >> FRAC_DIGITS


def to_float(value):
    """Convert a fixed point value to a float."""
    return value / FRAC_FAC


def fp_mul(a, b):
    """Multiply two fixed point values."""
    return (a * b) >> FRAC_DIGITS


def _trunc_div(numerator, denominator):
    quotient = abs(numerator) // abs(denominator)
    return -quotient if (numerator < 0) != (denominator < 0) else quotient


def fp_div(a, b):
    """Divide two fixed point values, truncating toward zero."""
    return _trunc_div(a << FRAC_DIGITS, b)


def format_fixed(value):
    """Render a fixed point value with two decimals, e.g. ``1.50``."""
    negative = value < 0
    magnitude = -value if negative else value
    whole = magnitude >> FRAC_DIGITS
    frac = (UTOA_FRACDEC * (magnitude & (FRAC_FAC - 1))) >> FRAC_DIGITS
    sign = "-" if negative else ""
    return f"{sign}{whole}.{frac:0{FP_DECIMALS}d}"


def parse_fixed(text, frac_digits):
    """Parse a decimal string into fixed point with ``frac_digits`` fractional bits.

    Parsing stops at the first character that does not fit; the single
    character after the integer part is taken as the decimal separator.
    """
    sign = 1
    pos = 0
    if text.startswith("-"):
        sign = -1
        pos = 1

    whole = 0
    while pos < len(text) and text[pos].isdigit():
        whole = whole * 10 + int(text[pos])
        pos += 1

    frac = 0
    if pos < len(text):
        pos += 1
        divisor = 10
        while pos < len(text) and text[pos].isdigit():
            frac += (int(text[pos]) << frac_digits) // divisor
            divisor *= 10
            pos += 1

    return sign * ((whole << frac_digits) + frac)


def median3(a, b, c):
    """Return the median of three values."""
    if a > b:
        if b > c:
            return b
        return c if a > c else a
    if a > c:
        return a
    return c if b > c else b


def ramp_up(current, target, rate):
    """Step ``current`` up toward ``target`` by at most ``rate``."""
    if target < current or current + rate > target:
        return target
    return current + rate


def ramp_down(current, target, rate):
    """Step ``current`` down toward ``target`` by at most ``rate``."""
    if target > current or current - rate < target:
        return target
    return current - rate


def iir_filter(last, new, constant):
    """First order IIR low pass with a power-of-two time constant."""
    return (new + (last << constant) - last) >> constant