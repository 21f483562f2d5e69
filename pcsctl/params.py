"""Parameter and display value table with range checking and flags."""

import enum
from dataclasses import dataclass
from typing import Optional

from pcsctl.fixedpoint import from_float, from_int, to_float, to_int


class ParamFlag(enum.IntFlag):
    """Per-parameter flags."""

    NONE = 0
    HIDDEN = 1


@dataclass(frozen=True)
class Attributes:
    """Static description of a parameter or display value; limits are fixed point."""

    category: Optional[str]
    name: str
    unit: str
    minimum: int
    maximum: int
    default: int
    uid: int


def param_entry(category, name, unit, minimum, maximum, default, uid):
    """Describe a settable parameter; limits and default are given as numbers."""
    return Attributes(
        category,
        name,
        unit,
        from_float(minimum),
        from_float(maximum),
        from_float(default),
        uid,
    )


def value_entry(name, unit, uid):
    """Describe a read-only display value."""
    return Attributes(None, name, unit, 0, 0, 0, uid)


class ParamTable:
    """Holds the current fixed point values and flags of a list of entries."""

    def __init__(self, entries, on_change=None):
        self._attribs = tuple(entries)
        self._values = [attr.default for attr in self._attribs]
        self._flags = [0] * len(self._attribs)
        self._on_change = on_change
        self._by_name = {}
        self._by_uid = {}
        for index, attr in enumerate(self._attribs):
            self._by_name.setdefault(attr.name, index)
            self._by_uid.setdefault(attr.uid, index)

    def __len__(self):
        return len(self._attribs)

    def _check(self, index):
        if not 0 <= index < len(self._attribs):
            raise IndexError(f"parameter index {index} out of range")
        return index

    def set(self, index, value):
        """Set a fixed point value after a range check and notify the change callback.

        Raises ValueError if the value lies outside the parameter's limits.
        """
        attr = self._attribs[self._check(index)]
        if not attr.minimum <= value <= attr.maximum:
            raise ValueError(f"value {value} out of range for {attr.name}")
        self._values[index] = value
        if self._on_change is not None:
            self._on_change(index)

    def get(self, index):
        return self._values[self._check(index)]

    def get_int(self, index):
        return to_int(self.get(index))

    def get_float(self, index):
        return to_float(self.get(index))

    def get_bool(self, index):
        return self.get_int(index) == 1

    def set_int(self, index, value):
        """Set an integer value without range check or callback."""
        self._values[self._check(index)] = from_int(value)

    def set_fixed(self, index, value):
        """Set a fixed point value without range check or callback."""
        self._values[self._check(index)] = value

    def set_float(self, index, value):
        """Set a float value without range check or callback."""
        self._values[self._check(index)] = from_float(value)

    def num_from_string(self, name):
        """Return the index of the entry called ``name``; KeyError if unknown."""
        try:
            return self._by_name[name]
        except KeyError:
            raise KeyError(f"unknown parameter {name!r}") from None

    def num_from_id(self, uid):
        """Return the index of the entry with unique id ``uid``; KeyError if unknown."""
        try:
            return self._by_uid[uid]
        except KeyError:
            raise KeyError(f"unknown parameter id {uid}") from None

    def get_attrib(self, index):
        return self._attribs[self._check(index)]

    def is_param(self, index):
        """True for settable parameters, False for display values."""
        attr = self.get_attrib(index)
        return attr.minimum != attr.maximum

    def load_defaults(self):
        """Restore the default of every entry that has a non-zero unique id."""
        for index, attr in enumerate(self._attribs):
            if attr.uid > 0:
                self._values[index] = attr.default

    def set_flags_raw(self, index, raw):
        self._flags[self._check(index)] = raw & 0xFF

    def set_flag(self, index, flag):
        self._flags[self._check(index)] |= int(flag) & 0xFF

    def clear_flag(self, index, flag):
        self._flags[self._check(index)] &= ~int(flag) & 0xFF

    def get_flag(self, index):
        return ParamFlag(self._flags[self._check(index)])