from .config import IniSettings
from .core import MinIni
from .errors import MinIniError, StorageError, StorageNotFoundError
from .splice import EditOutcome
from .storage import FileStorage, MemoryStorage, Storage, StorageHandle


__all__ = [
    "MinIni",
    "IniSettings",
    "EditOutcome",
    "MinIniError",
    "StorageError",
    "StorageNotFoundError",
    "Storage",
    "StorageHandle",
    "FileStorage",
    "MemoryStorage",
]
