"""Write path: merge one edit into an INI file without loading it.

An edit is ``(section, key, value)``; ``value=None`` deletes ``key`` and
``key=None`` deletes the whole section.  The engine first probes the file and
may finish without rewriting it (nothing changed, or the new line has the
exact length of the old one and is patched in place).  Otherwise it streams
the file into a temporary copy, splices the edit in, and swaps the copy in
with remove+rename.
"""

from __future__ import annotations

import logging
from enum import Enum

from .config import IniSettings
from .errors import StorageNotFoundError
from .lines import LineBuffer
from .quoting import format_key_line, format_section_line, single_line
from .scanner import find, find_section
from .storage import Storage, StorageHandle

logger = logging.getLogger(__name__)


class EditOutcome(Enum):
    NOOP = "noop"
    INPLACE = "inplace"
    REWRITE = "rewrite"
    CREATED = "created"


def temp_name(name: str) -> str:
    """Return ``name`` with its last character replaced by ``~``."""
    if not name:
        raise ValueError("file name must not be empty")
    return name[:-1] + "~"


class AccumulationCache:
    """Batches verbatim lines so they reach the destination in few writes."""

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        self._data = bytearray()

    def __len__(self) -> int:
        return len(self._data)

    def accumulate(self, line: bytes) -> bool:
        if len(self._data) + len(line) >= self.capacity:
            return False
        self._data += line
        return True

    def flush(self, dest: Destination) -> None:
        if self._data:
            dest.write(bytes(self._data))
            self._data.clear()


class Destination:
    """Write side of a rewrite that remembers whether output ends a line."""

    def __init__(self, handle: StorageHandle, terminator: bytes) -> None:
        self.handle = handle
        self.terminator = terminator
        self.size = 0
        self._last = b""

    def write(self, data: bytes) -> None:
        if not data:
            return
        self.handle.write(data)
        self.size += len(data)
        self._last = data[-1:]

    def ensure_terminator(self) -> None:
        if self.size and self._last != b"\n":
            self.write(self.terminator)


class SpliceEngine:
    def __init__(self, storage: Storage, settings: IniSettings) -> None:
        self.storage = storage
        self.settings = settings

    @property
    def capacity(self) -> int:
        return self.settings.buffer_size

    def _key_line(self, key: bytes, value: bytes) -> bytes:
        return format_key_line(key, value, self.capacity, self.settings.terminator)

    def _section_line(self, section: bytes) -> bytes:
        return format_section_line(section, self.capacity, self.settings.terminator)

    def put(
        self,
        name: str,
        section: bytes | None,
        key: bytes | None,
        value: bytes | None,
    ) -> EditOutcome:
        """Apply one edit to the file ``name``.

        Raises :class:`~pyminini.errors.StorageError` when the storage layer
        fails.  Nothing is repaired: a temporary file may be left behind,
        and after a failed rename it is the only copy.
        """
        # fields are matched exactly as they will be written
        section, key, value = (None if f is None else single_line(f) for f in (section, key, value))
        upsert = key is not None and value is not None
        try:
            src = self.storage.open_read(name)
        except StorageNotFoundError:
            if not upsert:
                logger.debug("%s does not exist, nothing to delete", name)
                return EditOutcome.NOOP
            with self.storage.open_write(name) as wfd:
                self._write_new(Destination(wfd, self.settings.terminator), section, key, value)
            logger.debug("created %s", name)
            return EditOutcome.CREATED

        with src:
            outcome = self._probe(src, name, section, key, value)
        if outcome is not None:
            return outcome
        return self._rewrite(name, section, key, value)

    # ------------------------------------------------------------------
    # probe and in-place fast path
    # ------------------------------------------------------------------

    def _probe(
        self,
        src: StorageHandle,
        name: str,
        section: bytes | None,
        key: bytes | None,
        value: bytes | None,
    ) -> EditOutcome | None:
        buffer = LineBuffer(self.capacity)
        if key is None:
            if section:
                present = find_section(src, buffer, section) is not None
            else:
                present = find(src, buffer, key_index=0) is not None
            if not present:
                logger.debug("section %r not in %s, nothing to delete", section, name)
                return EditOutcome.NOOP
            return None

        found = find(src, buffer, section, key)
        if value is None:
            if found is None:
                logger.debug("key %r not in %s, nothing to delete", key, name)
                return EditOutcome.NOOP
            return None
        if found is None:
            return None
        if found.text == value:
            logger.debug("%s already holds %r = %r", name, key, value)
            return EditOutcome.NOOP

        line = self._key_line(key, value)
        # a raw line cut by the buffer does not end in a newline; never patch it
        if len(line) != found.span.length or not found.raw.endswith(b"\n"):
            return None
        src.close()
        with self.storage.open_rewrite(name) as fd:
            fd.seek(found.span.head)
            fd.write(line)
        logger.debug("rewrote %r in place in %s", key, name)
        return EditOutcome.INPLACE

    # ------------------------------------------------------------------
    # full rewrite
    # ------------------------------------------------------------------

    def _write_new(
        self, dest: Destination, section: bytes | None, key: bytes, value: bytes
    ) -> None:
        if section:
            dest.write(self._section_line(section))
        dest.write(self._key_line(key, value))

    def _rewrite(
        self,
        name: str,
        section: bytes | None,
        key: bytes | None,
        value: bytes | None,
    ) -> EditOutcome:
        tmp = temp_name(name)
        with self.storage.open_write(tmp) as wfd:
            dest = Destination(wfd, self.settings.terminator)
            # the file may have been renamed or removed while open_write()
            # waited on a lock, so it is opened again here
            try:
                src = self.storage.open_read(name)
            except StorageNotFoundError:
                src = None
            if src is None:
                if key is not None and value is not None:
                    self._write_new(dest, section, key, value)
                    outcome = EditOutcome.CREATED
                else:
                    outcome = EditOutcome.NOOP
            else:
                with src:
                    self._splice(src, dest, section, key, value)
                outcome = EditOutcome.REWRITE

        if outcome is EditOutcome.NOOP:
            self.storage.remove(tmp)
            logger.debug("%s vanished before rewrite, nothing to delete", name)
            return outcome
        self._install(tmp, name)
        logger.debug("%s %s via %s", outcome.value, name, tmp)
        return outcome

    def _install(self, tmp: str, name: str) -> None:
        try:
            self.storage.remove(name)
        except StorageNotFoundError:
            logger.debug("%s already gone before rename", name)
        self.storage.rename(tmp, name)

    def _splice(
        self,
        src: StorageHandle,
        dest: Destination,
        section: bytes | None,
        key: bytes | None,
        value: bytes | None,
    ) -> None:
        buffer = LineBuffer(self.capacity)
        cache = AccumulationCache(self.capacity)
        upsert = key is not None and value is not None
        key_line = self._key_line(key, value) if upsert else b""

        def keep(raw: bytes) -> None:
            if not cache.accumulate(raw):
                cache.flush(dest)
                cache.accumulate(raw)

        if section:
            while True:
                if not buffer.read(src):
                    cache.flush(dest)
                    if upsert:
                        dest.ensure_terminator()
                        dest.write(self._section_line(section))
                        dest.write(key_line)
                    return
                line = buffer.classify()
                match = line.is_section and line.matches(section)
                # the header of a section being deleted is dropped
                if not match or key is not None:
                    keep(line.raw)
                if match:
                    break

        while True:
            if not buffer.read(src):
                cache.flush(dest)
                if upsert:
                    dest.ensure_terminator()
                    dest.write(key_line)
                return
            line = buffer.classify()
            if line.is_section:
                break
            if key is not None and line.is_key and line.matches(key):
                break
            if key is not None:
                keep(line.raw)

        cache.flush(dest)
        if upsert:
            dest.ensure_terminator()
            dest.write(key_line)
        if line.is_section:
            keep(line.raw)
        while buffer.read(src):
            keep(buffer.line)
        cache.flush(dest)
