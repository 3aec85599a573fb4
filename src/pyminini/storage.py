"""Storage collaborators used by the scanner and the splice engine.

The engine never touches the filesystem directly; it goes through a
:class:`Storage` which hands out :class:`StorageHandle` objects.  Two
implementations are provided: :class:`FileStorage` for the local filesystem
and :class:`MemoryStorage` for hosts without one (and for tests).
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import BinaryIO, Protocol

from .errors import StorageError, StorageNotFoundError

logger = logging.getLogger(__name__)


class StorageHandle(Protocol):
    """Protocol for an open file."""

    def read_line(self, limit: int) -> bytes:
        """Return the next line of at most ``limit`` bytes, ``b""`` at the end."""

    def write(self, data: bytes) -> None:
        """Write ``data`` at the current position."""

    def tell(self) -> int:
        """Return an opaque position that :meth:`seek` can restore."""

    def seek(self, position: int) -> None:
        """Move to a position obtained from :meth:`tell`."""

    def close(self) -> None:
        """Release the handle; calling it twice is harmless."""

    def __enter__(self) -> StorageHandle: ...

    def __exit__(self, *exc_info: object) -> None: ...


class Storage(Protocol):
    """Protocol for the file-level operations the engine relies on."""

    def open_read(self, name: str) -> StorageHandle:
        """Open an existing file positioned at its start."""

    def open_write(self, name: str) -> StorageHandle:
        """Create or truncate a file for writing."""

    def open_rewrite(self, name: str) -> StorageHandle:
        """Open an existing file for seek and write without truncating it."""

    def remove(self, name: str) -> None:
        """Delete a file."""

    def rename(self, old: str, new: str) -> None:
        """Rename ``old`` to ``new``."""


class _StreamHandle:
    """Handle over a binary stream; subclasses decide what closing means."""

    def __init__(self, name: str, stream: BinaryIO) -> None:
        self.name = name
        self._stream = stream
        self._closed = False

    def read_line(self, limit: int) -> bytes:
        try:
            return self._stream.readline(limit)
        except (OSError, ValueError) as exc:
            raise StorageError(f"cannot read {self.name}: {exc}") from exc

    def write(self, data: bytes) -> None:
        try:
            self._stream.write(data)
        except (OSError, ValueError) as exc:
            raise StorageError(f"cannot write {self.name}: {exc}") from exc

    def tell(self) -> int:
        try:
            return self._stream.tell()
        except (OSError, ValueError) as exc:
            raise StorageError(f"cannot get position in {self.name}: {exc}") from exc

    def seek(self, position: int) -> None:
        try:
            self._stream.seek(position)
        except (OSError, ValueError) as exc:
            raise StorageError(f"cannot seek in {self.name}: {exc}") from exc

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._release()

    def _release(self) -> None:
        try:
            self._stream.close()
        except OSError as exc:
            raise StorageError(f"cannot close {self.name}: {exc}") from exc

    def __enter__(self) -> _StreamHandle:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


# ---------------------------------------------------------------------------
# Local filesystem
# ---------------------------------------------------------------------------


class FileStorage:
    """Storage backed by the local filesystem."""

    def _open(self, name: str, mode: str) -> _StreamHandle:
        try:
            fh = Path(name).open(mode)
        except FileNotFoundError as exc:
            raise StorageNotFoundError(str(exc)) from exc
        except OSError as exc:
            raise StorageError(str(exc)) from exc
        return _StreamHandle(name, fh)

    def open_read(self, name: str) -> StorageHandle:
        return self._open(name, "rb")

    def open_write(self, name: str) -> StorageHandle:
        return self._open(name, "wb")

    def open_rewrite(self, name: str) -> StorageHandle:
        return self._open(name, "r+b")

    def remove(self, name: str) -> None:
        try:
            Path(name).unlink()
        except FileNotFoundError as exc:
            raise StorageNotFoundError(str(exc)) from exc
        except OSError as exc:
            raise StorageError(str(exc)) from exc

    def rename(self, old: str, new: str) -> None:
        try:
            Path(old).rename(new)
        except FileNotFoundError as exc:
            raise StorageNotFoundError(str(exc)) from exc
        except OSError as exc:
            raise StorageError(str(exc)) from exc


# ---------------------------------------------------------------------------
# In-memory
# ---------------------------------------------------------------------------


class _MemoryHandle(_StreamHandle):
    def __init__(self, owner: MemoryStorage, name: str, initial: bytes, commit: bool) -> None:
        super().__init__(name, io.BytesIO(initial))
        self._owner = owner
        self._commit = commit

    def _release(self) -> None:
        if self._commit:
            self._owner.files[self.name] = self._stream.getvalue()
        self._stream.close()


class MemoryStorage:
    """Storage keeping every file as ``bytes`` in :attr:`files`.

    Content written through a handle becomes visible when the handle is
    closed.
    """

    def __init__(self, files: dict[str, bytes] | None = None) -> None:
        self.files: dict[str, bytes] = dict(files or {})

    def _existing(self, name: str) -> bytes:
        try:
            return self.files[name]
        except KeyError as exc:
            raise StorageNotFoundError(f"no such file: {name}") from exc

    def open_read(self, name: str) -> StorageHandle:
        return _MemoryHandle(self, name, self._existing(name), commit=False)

    def open_write(self, name: str) -> StorageHandle:
        self.files[name] = b""
        return _MemoryHandle(self, name, b"", commit=True)

    def open_rewrite(self, name: str) -> StorageHandle:
        return _MemoryHandle(self, name, self._existing(name), commit=True)

    def remove(self, name: str) -> None:
        self._existing(name)
        del self.files[name]

    def rename(self, old: str, new: str) -> None:
        data = self._existing(old)
        if new in self.files:
            raise StorageError(f"rename target exists: {new}")
        del self.files[old]
        self.files[new] = data
        logger.debug("renamed %s to %s", old, new)
