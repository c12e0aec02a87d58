from __future__ import annotations
import re

from .model import SizeParseError

# binary multiples, as used for chunk sizes on the command line
_UNITS = {
    "b": 1,
    "k": 1 << 10,
    "m": 1 << 20,
    "g": 1 << 30,
    "t": 1 << 40,
    "p": 1 << 50,
}
_FORMAT_ORDER = (("P", 1 << 50), ("T", 1 << 40), ("G", 1 << 30), ("M", 1 << 20), ("k", 1 << 10))

_SIZE_RE = re.compile(r"^(\d+(?:\.\d*)?|\.\d+)\s*([bkmgtp]?)(i?b?)$", re.IGNORECASE)


def parse_size(text: str) -> int:
    """Parse '2M', '1.5G', '512b', '10MiB' or 'off' into a byte count.

    A number without a unit is taken as KiB. 'off' returns -1.
    """
    s = text.strip()
    if s.lower() == "off":
        return -1
    m = _SIZE_RE.match(s)
    if m is None:
        raise SizeParseError(f"bad size {text!r}")
    number, unit, tail = m.groups()
    if not unit:
        if tail:
            raise SizeParseError(f"bad size {text!r}")
        unit = "k"
    elif unit.lower() == "b" and tail:
        raise SizeParseError(f"bad size {text!r}")
    mult = _UNITS[unit.lower()]
    if "." in number:
        return int(float(number) * mult)
    return int(number) * mult


def format_size(size: int) -> str:
    """Render `size` so that parse_size() gives back exactly the same value."""
    if size < 0:
        return "off"
    if size == 0:
        return "0"
    for suffix, mult in _FORMAT_ORDER:
        if size % mult == 0:
            return f"{size // mult}{suffix}"
    return f"{size}B"
