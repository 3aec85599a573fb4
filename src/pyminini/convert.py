"""Text conversions behind the typed getters and setters.

Parsing is lenient in the way of C's ``strtol``/``atof``: leading garbage
yields zero, trailing garbage is ignored.
"""

from __future__ import annotations

import re

UINT_MASK = 0xFFFFFFFF

# buffer sizes used when reading typed values; the value is cut to size - 1
INT_BUFFER_SIZE = 16
FLOAT_BUFFER_SIZE = 64
BOOL_BUFFER_SIZE = 2

_INT_RX = {
    10: re.compile(r"\s*([+-]?)([0-9]+)"),
    16: re.compile(r"\s*([+-]?)(?:0[xX])?([0-9a-fA-F]+)"),
}
_FLOAT_RX = re.compile(
    r"\s*[+-]?(?:"
    r"(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
    r"|inf(?:inity)?|nan"
    r")",
    re.IGNORECASE,
)


def _parse_long(text: str, base: int) -> int:
    match = _INT_RX[base].match(text)
    if match is None:
        return 0
    sign, digits = match.groups()
    value = int(digits, base)
    return -value if sign == "-" else value


def int_base(text: str) -> int:
    """Return 16 when the second character marks a ``0x`` prefix, else 10."""
    return 16 if text[1:2] in ("x", "X") else 10


def parse_int(text: str) -> int:
    return _parse_long(text, int_base(text))


def parse_uint(text: str) -> int:
    return parse_int(text) & UINT_MASK


def parse_float(text: str) -> float:
    match = _FLOAT_RX.match(text)
    if match is None:
        return 0.0
    return float(match.group(0))


def parse_bool(text: str, default: bool) -> bool:
    first = text[:1]
    if first in ("y", "Y", "t", "T", "1"):
        return True
    if first in ("n", "N", "f", "F", "0"):
        return False
    return default


def format_int(value: int) -> str:
    return str(int(value))


def format_uint(value: int) -> str:
    return str(int(value) & UINT_MASK)


def format_float(value: float) -> str:
    return repr(float(value))


def format_bool(value: bool) -> str:
    return "true" if value else "false"
