"""Errors raised by the storage core."""


class StorageError(Exception):
    """Base class for storage core failures."""


class NotFoundError(StorageError):
    """Raised when an operation addresses a missing item, goal or favorite."""

    def __init__(self, kind: str, key: object) -> None:
        super().__init__(f"{kind} not found: {key}")
        self.kind = kind
        self.key = key


class BackendError(StorageError):
    """Raised when the persistence backend fails to read or write."""


class ValidationError(StorageError):
    """Raised when a caller supplies a malformed payload."""
