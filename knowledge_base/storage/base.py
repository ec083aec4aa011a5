from abc import ABC, abstractmethod


class BaseBlobStore(ABC):
    """Contract for binary storage addressed by a path key."""

    @abstractmethod
    def put(self, path: str, data: bytes, content_type: str) -> None:
        """Write data at path, replacing any existing blob.

        Raises:
            BlobStorageError: if the blob cannot be written.
        """

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Return True if a blob exists at path."""

    @abstractmethod
    def get(self, path: str) -> bytes:
        """Read the blob at path.

        Raises:
            BlobNotFoundError: if no blob exists at path.
            BlobStorageError: if the blob cannot be read.
        """

    @abstractmethod
    def delete(self, path: str) -> None:
        """Remove the blob at path.

        Raises:
            BlobNotFoundError: if no blob exists at path.
            BlobStorageError: if the blob cannot be removed.
        """

    @abstractmethod
    def content_type(self, path: str) -> str | None:
        """Return the content type recorded by put, if any."""
