from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator
from typing import Any

from .config import IniSettings
from .convert import (
    BOOL_BUFFER_SIZE,
    FLOAT_BUFFER_SIZE,
    INT_BUFFER_SIZE,
    format_bool,
    format_float,
    format_int,
    format_uint,
    parse_bool,
    parse_float,
    parse_int,
    parse_uint,
)
from .errors import StorageError, StorageNotFoundError
from .lines import LineBuffer
from .paths import DEFAULT_FILENAME, user_config_file
from .scanner import find, find_section, iter_entries
from .splice import EditOutcome, SpliceEngine
from .storage import FileStorage, Storage, StorageHandle

logger = logging.getLogger("pyminini")

EntryCallback = Callable[[str, str, str], Any]


class MinIni:
    """Read and edit one INI file without loading it into memory.

    Every operation opens the file, does a single forward pass and closes it
    again.  Nothing raises on a missing file, section or key: getters return
    their ``default`` and setters report success as a ``bool``.  Storage
    failures are logged and reported the same way.
    """

    def __init__(
        self,
        filename: str | os.PathLike[str],
        *,
        storage: Storage | None = None,
        settings: IniSettings | None = None,
    ) -> None:
        self.filename = os.fspath(filename)
        self.storage: Storage = storage if storage is not None else FileStorage()
        self.settings = settings if settings is not None else IniSettings()
        self._engine = SpliceEngine(self.storage, self.settings)
        self.last_outcome: EditOutcome | None = None

    @classmethod
    def for_app(
        cls, app_name: str, filename: str = DEFAULT_FILENAME, **kwargs: Any
    ) -> MinIni:
        """Open the per-user INI file of *app_name* (see :mod:`pyminini.paths`)."""
        return cls(user_config_file(app_name, filename), **kwargs)

    def __repr__(self) -> str:
        return f"MinIni({self.filename!r})"

    # ----- helpers -----

    def _encode(self, text: str | None) -> bytes | None:
        return None if text is None else self.settings.encode(text)

    def _buffer(self) -> LineBuffer:
        return LineBuffer(self.settings.buffer_size)

    def _open(self) -> StorageHandle | None:
        try:
            return self.storage.open_read(self.filename)
        except StorageNotFoundError:
            logger.debug("%s does not exist", self.filename)
        except StorageError as exc:
            logger.warning("Failed to open config %s: %s", self.filename, exc)
        return None

    def _lookup(
        self,
        section: str | None,
        key: str | None,
        *,
        section_index: int = -1,
        key_index: int = -1,
        size: int | None = None,
    ) -> str | None:
        fd = self._open()
        if fd is None:
            return None
        try:
            with fd:
                found = find(
                    fd,
                    self._buffer(),
                    self._encode(section),
                    self._encode(key),
                    section_index,
                    key_index,
                    size,
                )
        except StorageError as exc:
            logger.warning("Failed to read config %s: %s", self.filename, exc)
            return None
        return None if found is None else self.settings.decode(found.text)

    # ----- getters -----

    def get_string(
        self, section: str | None, key: str, default: str = "", *, size: int | None = None
    ) -> str:
        """Return the value of *key* in *section*, or *default*.

        ``size`` bounds the value like a caller-provided buffer: at most
        ``size - 1`` bytes are returned.  It defaults to the line buffer size;
        a ``size`` below 1 leaves no room and gives *default*.
        """
        if key is None or (size is not None and size < 1):
            return default
        value = self._lookup(section, key, size=size)
        return default if value is None else value

    def get_int(self, section: str | None, key: str, default: int = 0) -> int:
        text = self.get_string(section, key, "", size=INT_BUFFER_SIZE)
        return default if not text else parse_int(text)

    def get_uint(self, section: str | None, key: str, default: int = 0) -> int:
        text = self.get_string(section, key, "", size=INT_BUFFER_SIZE)
        return default if not text else parse_uint(text)

    def get_float(self, section: str | None, key: str, default: float = 0.0) -> float:
        text = self.get_string(section, key, "", size=FLOAT_BUFFER_SIZE)
        return default if not text else parse_float(text)

    def get_bool(self, section: str | None, key: str, default: bool = False) -> bool:
        """Interpret the first character: ``y``/``t``/``1`` is true, ``n``/``f``/``0``
        is false, anything else (including a missing key) gives *default*."""
        text = self.get_string(section, key, "", size=BOOL_BUFFER_SIZE)
        return parse_bool(text, default)

    def get_section_name(self, index: int) -> str:
        """Return the name of the *index*-th section, or ``""`` past the last one."""
        if index < 0:
            return ""
        return self._lookup(None, None, section_index=index) or ""

    def get_key_name(self, section: str | None, index: int) -> str:
        """Return the name of the *index*-th key of *section*, or ``""``.

        With ``section=None`` the keys above the first section are browsed.
        """
        if index < 0:
            return ""
        return self._lookup(section, None, key_index=index) or ""

    def has_section(self, section: str | None) -> bool:
        fd = self._open()
        if fd is None:
            return False
        name = self._encode(section)
        try:
            with fd:
                if name:
                    return find_section(fd, self._buffer(), name) is not None
                return find(fd, self._buffer(), key_index=0) is not None
        except StorageError as exc:
            logger.warning("Failed to read config %s: %s", self.filename, exc)
            return False

    def has_key(self, section: str | None, key: str) -> bool:
        if key is None:
            return False
        return self._lookup(section, key) is not None

    # ----- setters -----

    def put_string(self, section: str | None, key: str | None, value: str | None) -> bool:
        """Set *key* in *section* to *value*.

        ``value=None`` deletes the key and ``key=None`` deletes the whole
        section.  Returns ``False`` only when the storage layer failed.
        """
        try:
            self.last_outcome = self._engine.put(
                self.filename,
                self._encode(section),
                self._encode(key),
                self._encode(value),
            )
        except StorageError as exc:
            self.last_outcome = None
            logger.warning("Failed to write config %s: %s", self.filename, exc)
            return False
        return True

    def put_int(self, section: str | None, key: str | None, value: int | None) -> bool:
        return self.put_string(section, key, None if value is None else format_int(value))

    def put_uint(self, section: str | None, key: str | None, value: int | None) -> bool:
        return self.put_string(section, key, None if value is None else format_uint(value))

    def put_float(self, section: str | None, key: str | None, value: float | None) -> bool:
        return self.put_string(section, key, None if value is None else format_float(value))

    def put_bool(self, section: str | None, key: str | None, value: bool | None) -> bool:
        return self.put_string(section, key, None if value is None else format_bool(value))

    def delete_key(self, section: str | None, key: str) -> bool:
        return self.put_string(section, key, None)

    def delete_section(self, section: str | None) -> bool:
        return self.put_string(section, None, None)

    # ----- browsing -----

    def _decoded_entries(self, fd: StorageHandle) -> Iterator[tuple[str, str, str]]:
        decode = self.settings.decode
        try:
            for section, key, value in iter_entries(fd, self._buffer()):
                yield decode(section), decode(key), decode(value)
        except StorageError as exc:
            logger.warning("Failed to read config %s: %s", self.filename, exc)

    def entries(self) -> Iterator[tuple[str, str, str]]:
        """Lazily yield ``(section, key, value)`` for every key in file order.

        Closing the generator early releases the file.  A missing file yields
        nothing.
        """
        fd = self._open()
        if fd is None:
            return
        with fd:
            yield from self._decoded_entries(fd)

    def for_each(self, callback: EntryCallback) -> bool:
        """Call ``callback(section, key, value)`` for every key until it returns
        a falsy value.  Returns ``False`` only if the file could not be opened."""
        fd = self._open()
        if fd is None:
            return False
        with fd:
            for section, key, value in self._decoded_entries(fd):
                if not callback(section, key, value):
                    break
        return True
