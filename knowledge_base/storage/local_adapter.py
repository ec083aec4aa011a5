import json
import os
import tempfile
from pathlib import Path

from knowledge_base.storage.base import BaseBlobStore
from knowledge_base.storage.exceptions import BlobNotFoundError, BlobStorageError


class LocalBlobStore(BaseBlobStore):
    """Stores blobs as files under a root directory.

    The content type of each blob lives in a ``<blob>.meta.json`` sidecar.
    """

    META_SUFFIX = ".meta.json"

    def __init__(self, root: Path) -> None:
        self._root = root.resolve()

    def put(self, path: str, data: bytes, content_type: str) -> None:
        target = self._resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            self._write_atomic(target, data)
            meta = json.dumps({"content_type": content_type}).encode("utf-8")
            self._write_atomic(self._meta_path(target), meta)
        except OSError as exc:
            raise BlobStorageError(f"Failed to write blob {path}: {exc}") from exc

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def get(self, path: str) -> bytes:
        target = self._resolve(path)
        if not target.is_file():
            raise BlobNotFoundError(f"Blob not found: {path}")
        try:
            return target.read_bytes()
        except OSError as exc:
            raise BlobStorageError(f"Failed to read blob {path}: {exc}") from exc

    def delete(self, path: str) -> None:
        target = self._resolve(path)
        if not target.is_file():
            raise BlobNotFoundError(f"Blob not found: {path}")
        try:
            target.unlink()
            self._meta_path(target).unlink(missing_ok=True)
        except OSError as exc:
            raise BlobStorageError(f"Failed to delete blob {path}: {exc}") from exc

    def content_type(self, path: str) -> str | None:
        meta_path = self._meta_path(self._resolve(path))
        if not meta_path.is_file():
            return None
        try:
            meta = json.loads(meta_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise BlobStorageError(f"Failed to read metadata for {path}: {exc}") from exc
        value = meta.get("content_type")
        return value if isinstance(value, str) else None

    def _resolve(self, path: str) -> Path:
        parts = path.replace("\\", "/").split("/")
        if any(part in ("", ".", "..") for part in parts):
            raise BlobStorageError(f"Invalid blob path: {path}")
        target = (self._root / path).resolve()
        if target == self._root or not target.is_relative_to(self._root):
            raise BlobStorageError(f"Blob path escapes storage root: {path}")
        return target

    def _meta_path(self, target: Path) -> Path:
        return target.with_name(target.name + self.META_SUFFIX)

    @staticmethod
    def _write_atomic(target: Path, data: bytes) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=".tmp-")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
