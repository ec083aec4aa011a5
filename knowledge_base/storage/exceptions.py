class BlobStorageError(Exception):
    """Raised when a blob cannot be written, read or deleted."""


class BlobNotFoundError(BlobStorageError):
    """Raised when no blob exists at the requested path."""
