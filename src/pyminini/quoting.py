"""Quote and comment handling for values.

Reading goes through :func:`resolve` (strip a trailing comment and the
surrounding quotes) followed by :func:`dequote`.  Writing goes through
:func:`needs_quoting` and :func:`enquote`.  Every output is bounded by a
``capacity`` that counts a terminator slot, so at most ``capacity - 1`` bytes
come back; longer results are cut silently.
"""

from __future__ import annotations

from .lines import skip_trailing

QUOTE = ord('"')
BACKSLASH = ord("\\")
COMMENT_CHARS = frozenset(b";#")
LINE_BREAKS = frozenset(b"\r\n")


def copy(text: bytes, capacity: int) -> bytes:
    return text[:max(capacity - 1, 0)]


def single_line(text: bytes) -> bytes:
    """Cut *text* at its first CR or LF; a written field never spans lines."""
    for i, ch in enumerate(text):
        if ch in LINE_BREAKS:
            return text[:i]
    return text


def resolve(text: bytes) -> tuple[bytes, bool]:
    """Return ``(clean_value, was_quoted)`` for the text after a separator."""
    in_quote = False
    end = len(text)
    i = 0
    while i < end:
        ch = text[i]
        if ch in COMMENT_CHARS and not in_quote:
            break
        following = text[i + 1] if i + 1 < end else None
        if ch == QUOTE:
            if following == QUOTE:
                i += 1
            else:
                in_quote = not in_quote
        elif ch == BACKSLASH and following == QUOTE:
            i += 1
        i += 1
    text = text[:skip_trailing(text, i)]
    if text[:1] == b'"' and text[-1:] == b'"':
        return text[1:-1], True
    return text, False


def dequote(text: bytes, capacity: int) -> bytes:
    out = bytearray()
    limit = capacity - 1
    s = 0
    while s < len(text) and len(out) < limit:
        if text[s] in (QUOTE, BACKSLASH) and text[s + 1:s + 2] == b'"':
            s += 1
        out.append(text[s])
        s += 1
    return bytes(out)


def decode_value(text: bytes, capacity: int) -> bytes:
    clean, quoted = resolve(text)
    return dequote(clean, capacity) if quoted else copy(clean, capacity)


def needs_quoting(value: bytes) -> bool:
    return any(ch in value for ch in (b'"', b";", b"#")) or value.endswith(b" ")


def enquote(value: bytes, capacity: int) -> bytes:
    if capacity < 3:
        # no room for two quotes and the terminator slot
        return copy(value, capacity)
    out = bytearray(b'"')
    for ch in value:
        if len(out) >= capacity - 2:
            break
        if ch == QUOTE:
            if len(out) >= capacity - 3:
                break
            out.append(BACKSLASH)
        out.append(ch)
    out.append(QUOTE)
    return bytes(out)


def format_value(value: bytes, capacity: int) -> bytes:
    return enquote(value, capacity) if needs_quoting(value) else copy(value, capacity)


def format_key_line(key: bytes, value: bytes, capacity: int, terminator: bytes) -> bytes:
    """Return the canonical ``key = value`` line, terminator included."""
    key, value = single_line(key), single_line(value)
    prefix = copy(key, capacity - 3 - len(terminator)) + b" = "
    return prefix + format_value(value, capacity - len(prefix) - len(terminator)) + terminator


def format_section_line(section: bytes, capacity: int, terminator: bytes) -> bytes:
    return b"[" + copy(single_line(section), capacity - 2 - len(terminator)) + b"]" + terminator
