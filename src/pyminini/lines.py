from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .storage import StorageHandle


def is_space(byte: int) -> bool:
    """Return ``True`` for control characters and the space (``0x01..0x20``)."""
    return 0 < byte <= 0x20


def skip_leading(text: bytes, start: int = 0, end: int | None = None) -> int:
    end = len(text) if end is None else end
    while start < end and is_space(text[start]):
        start += 1
    return start


def skip_trailing(text: bytes, end: int, start: int = 0) -> int:
    while end > start and is_space(text[end - 1]):
        end -= 1
    return end


def strip(text: bytes) -> bytes:
    start = skip_leading(text)
    return text[start:skip_trailing(text, len(text), start)]


def names_equal(a: bytes, b: bytes) -> bool:
    """Compare two section or key names, ignoring ASCII case."""
    return len(a) == len(b) and a.lower() == b.lower()


class LineKind(Enum):
    BLANK = "blank"
    COMMENT = "comment"
    SECTION = "section"
    KEY_VALUE = "key_value"
    OTHER = "other"


@dataclass(frozen=True)
class ClassifiedLine:
    raw: bytes
    kind: LineKind
    name: bytes = b""
    # text after the separator, leading whitespace skipped, comment still attached
    value: bytes = b""

    @property
    def is_section(self) -> bool:
        return self.kind is LineKind.SECTION

    @property
    def is_key(self) -> bool:
        return self.kind is LineKind.KEY_VALUE

    def matches(self, name: bytes) -> bool:
        return names_equal(self.name, name)


def classify(line: bytes) -> ClassifiedLine:
    start = skip_leading(line)
    end = skip_trailing(line, len(line), start)
    if start == end:
        return ClassifiedLine(line, LineKind.BLANK)
    first = line[start:start + 1]
    if first in (b";", b"#"):
        return ClassifiedLine(line, LineKind.COMMENT)
    if first == b"[":
        close = line.rfind(b"]", start)
        if close != -1:
            return ClassifiedLine(line, LineKind.SECTION, name=strip(line[start + 1:close]))
    sep = line.find(b"=", start)
    if sep == -1:
        sep = line.find(b":", start)
    if sep == -1:
        return ClassifiedLine(line, LineKind.OTHER)
    return ClassifiedLine(
        line,
        LineKind.KEY_VALUE,
        name=strip(line[start:sep]),
        value=line[skip_leading(line, sep + 1):],
    )


class LineBuffer:
    """Fixed-capacity holder for one raw line.

    A line never holds more than ``capacity - 1`` bytes.  Anything beyond
    that stays in the stream and comes back from the next :meth:`read` as if
    it were a line of its own.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 2:
            raise ValueError("line buffer capacity must be at least 2")
        self.capacity = capacity
        self.line = b""

    def read(self, handle: StorageHandle) -> bool:
        self.line = handle.read_line(self.capacity - 1)
        return bool(self.line)

    def classify(self) -> ClassifiedLine:
        return classify(self.line)
