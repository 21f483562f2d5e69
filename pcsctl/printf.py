"""Minimal printf-style formatting with fixed point support (``%f``)."""

import re

from pcsctl.fixedpoint import format_fixed

_PAD_RIGHT = 1
_PAD_ZERO = 2

_SPEC = re.compile(r"%(?:(%)|(-?)(0*)([0-9]*)(.?))", re.DOTALL)


def _int32(value):
    value = int(value) & 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


def _pad(text, width, flags):
    fill = ("0" if flags & _PAD_ZERO else " ") * max(width - len(text), 0)
    return text + fill if flags & _PAD_RIGHT else fill + text


def _format_int(value, base, signed, width, flags, upper=False):
    value = _int32(value)
    if value == 0:
        return _pad("0", width, flags)

    negative = signed and base == 10 and value < 0
    magnitude = -value if negative else value & 0xFFFFFFFF
    if base == 16:
        digits = format(magnitude, "X" if upper else "x")
    else:
        digits = str(magnitude)

    if negative:
        if width and flags & _PAD_ZERO:
            return "-" + _pad(digits, width - 1, flags)
        digits = "-" + digits
    return _pad(digits, width, flags)


def _format_char(value):
    if isinstance(value, str):
        return value[:1]
    char = chr(int(value) & 0xFF)
    return "" if char == "\0" else char


def sprintf(fmt, *args):
    """Format ``args`` according to ``fmt`` and return the resulting string.

    Supports ``%s %d %u %x %X %c %f %%`` with ``-``, ``0`` and width
    modifiers; ``%f`` prints a fixed point value. Unknown conversions are
    dropped.
    """
    remaining = iter(args)

    def next_arg():
        try:
            return next(remaining)
        except StopIteration:
            raise TypeError("not enough arguments for format string") from None

    def convert(match):
        if match.group(1):
            return "%"
        flags = _PAD_RIGHT if match.group(2) else 0
        if match.group(3):
            flags |= _PAD_ZERO
        width = int(match.group(4) or 0)
        conv = match.group(5)

        if conv == "s":
            value = next_arg()
            return _pad("(null)" if value is None else str(value), width, flags)
        if conv == "d":
            return _format_int(next_arg(), 10, True, width, flags)
        if conv == "x":
            return _format_int(next_arg(), 16, False, width, flags)
        if conv == "X":
            return _format_int(next_arg(), 16, False, width, flags, upper=True)
        if conv == "u":
            return _format_int(next_arg(), 10, False, width, flags)
        if conv == "f":
            return _pad(format_fixed(_int32(next_arg())), width, flags)
        if conv == "c":
            return _pad(_format_char(next_arg()), width, flags)
        return ""

    return _SPEC.sub(convert, fmt)


def fprintf(out, fmt, *args):
    """Format like :func:`sprintf` and write to ``out``; return the character count."""
    text = sprintf(fmt, *args)
    out.write(text)
    return len(text)