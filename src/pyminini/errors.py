class MinIniError(Exception):
    """Base class for pyminini errors."""


class StorageError(MinIniError):
    """Raised when the storage layer fails to open, read, write or rename."""


class StorageNotFoundError(StorageError):
    """Raised when a file to be read does not exist."""
