from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from .lines import LineBuffer
from .quoting import copy, decode_value
from .storage import StorageHandle


@dataclass(frozen=True)
class Span:
    """Storage positions around the raw bytes of one line."""

    head: int
    tail: int

    @property
    def length(self) -> int:
        return self.tail - self.head


@dataclass(frozen=True)
class Found:
    # decoded value, or the name when browsing by ordinal
    text: bytes
    span: Span | None = None
    raw: bytes = b""


def find_section(
    handle: StorageHandle,
    buffer: LineBuffer,
    section: bytes | None = None,
    section_index: int = -1,
) -> bytes | None:
    """Advance past the header of ``section`` (or the ``section_index``-th
    header) and return its name, or ``None`` once the stream runs out."""
    idx = -1
    while buffer.read(handle):
        line = buffer.classify()
        if not line.is_section:
            continue
        if section_index >= 0:
            idx += 1
            if idx == section_index:
                return line.name
        elif section is not None and line.matches(section):
            return line.name
    return None


def find(
    handle: StorageHandle,
    buffer: LineBuffer,
    section: bytes | None = None,
    key: bytes | None = None,
    section_index: int = -1,
    key_index: int = -1,
    value_capacity: int | None = None,
) -> Found | None:
    """Locate a key (or a section name) by forward scanning.

    With an empty ``section`` and no ``section_index`` only the keys before
    the first section header are searched.  ``section_index`` returns the
    name of that section; ``key_index`` with ``key=None`` returns the name of
    that key within the section.  Otherwise the decoded value of ``key`` is
    returned along with the span of its raw line.
    """
    capacity = buffer.capacity if value_capacity is None else value_capacity
    if section or section_index >= 0:
        name = find_section(handle, buffer, section, section_index)
        if name is None:
            return None
        if section_index >= 0:
            return Found(copy(name, capacity))
    if key is None and key_index < 0:
        raise ValueError("either key or key_index must be given")

    idx = -1
    while True:
        head = handle.tell()
        if not buffer.read(handle):
            return None
        line = buffer.classify()
        if line.is_section:
            return None
        if not line.is_key:
            continue
        if key is not None:
            if line.matches(key):
                span = Span(head, handle.tell())
                return Found(decode_value(line.value, capacity), span, line.raw)
            continue
        idx += 1
        if idx == key_index:
            return Found(copy(line.name, capacity), Span(head, handle.tell()), line.raw)


def iter_entries(
    handle: StorageHandle, buffer: LineBuffer, capacity: int | None = None
) -> Iterator[tuple[bytes, bytes, bytes]]:
    """Yield ``(section, key, value)`` for every key in file order.

    Keys above the first section header come with an empty section name.
    """
    capacity = buffer.capacity if capacity is None else capacity
    section = b""
    while buffer.read(handle):
        line = buffer.classify()
        if line.is_section:
            section = copy(line.name, capacity)
        elif line.is_key:
            yield section, copy(line.name, capacity), decode_value(line.value, capacity)
