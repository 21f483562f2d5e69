"""Sine lookup table: 2048 signed 16-bit samples over one revolution."""

import math
from functools import lru_cache

SINLU_ARGDIGITS = 16
SINLU_ONEREV = 1 << SINLU_ARGDIGITS
SINTAB_ARGDIGITS = 11
SINTAB_ENTRIES = 1 << SINTAB_ARGDIGITS
SINTAB_PEAK = 32767

_QUARTER = SINTAB_ENTRIES // 4
_HALF = SINTAB_ENTRIES // 2


@lru_cache(maxsize=None)
def sine_table():
    """Return the table as a tuple; entry ``i`` is ``sin(2*pi*i/2048)`` scaled to 32767.

    The table is exactly symmetric: the second quarter mirrors the first and
    the second half is the negated first half.
    """
    quarter = [
        int(math.floor(SINTAB_PEAK * math.sin(2 * math.pi * i / SINTAB_ENTRIES) + 0.5))
        for i in range(_QUARTER + 1)
    ]
    half = quarter + quarter[-2:0:-1]
    return tuple(half + [-value for value in half])


def lookup(angle):
    """Look up the sine of a 16-bit angle (0 = 0, 65536 = one revolution).

    Angles outside 0..65535 wrap around; no interpolation is done.
    """
    index = (int(angle) & (SINLU_ONEREV - 1)) >> (SINLU_ARGDIGITS - SINTAB_ARGDIGITS)
    return sine_table()[index]