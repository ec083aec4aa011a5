import threading
import uuid
from datetime import datetime, timedelta, timezone

import pytest

from knowledge_base.database.models import AggregatedArtifact, DocumentRecord, NewDocument
from knowledge_base.knowledge.exceptions import DocumentNotFoundError
from knowledge_base.pdf.base import BaseTextExtractor
from knowledge_base.pdf.exceptions import TextExtractionError
from knowledge_base.storage.base import BaseBlobStore
from knowledge_base.storage.exceptions import BlobNotFoundError, BlobStorageError

BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


class InMemoryBlobStore(BaseBlobStore):
    def __init__(self) -> None:
        self.blobs: dict[str, bytes] = {}
        self.content_types: dict[str, str] = {}
        self.fail_put_on: set[str] = set()
        self.fail_delete = False

    def put(self, path: str, data: bytes, content_type: str) -> None:
        if any(marker in path for marker in self.fail_put_on):
            raise BlobStorageError(f"disk full writing {path}")
        self.blobs[path] = data
        self.content_types[path] = content_type

    def exists(self, path: str) -> bool:
        return path in self.blobs

    def get(self, path: str) -> bytes:
        if path not in self.blobs:
            raise BlobNotFoundError(f"Blob not found: {path}")
        return self.blobs[path]

    def delete(self, path: str) -> None:
        if self.fail_delete:
            raise BlobStorageError(f"permission denied deleting {path}")
        if path not in self.blobs:
            raise BlobNotFoundError(f"Blob not found: {path}")
        del self.blobs[path]
        self.content_types.pop(path, None)

    def content_type(self, path: str) -> str | None:
        return self.content_types.get(path)


class InMemoryDocumentsRepository:
    """Stands in for DocumentsRepository; each insert gets a later timestamp."""

    def __init__(self) -> None:
        self.records: dict[str, DocumentRecord] = {}
        self.fail_create = False
        self.fail_list = False
        self.fail_delete = False
        self._clock = 0

    def add(self, file_name: str, blob_path: str) -> DocumentRecord:
        self._clock += 1
        record = DocumentRecord(
            id=str(uuid.uuid4()),
            file_name=file_name,
            blob_path=blob_path,
            uploaded_at=BASE_TIME + timedelta(seconds=self._clock),
        )
        self.records[record.id] = record
        return record

    def create_batch(self, documents: list[NewDocument]) -> list[str]:
        if self.fail_create:
            raise RuntimeError("batch commit failed")
        return [self.add(d.file_name, d.blob_path).id for d in documents]

    def list_all(self) -> list[DocumentRecord]:
        if self.fail_list:
            raise RuntimeError("connection refused")
        return sorted(
            self.records.values(),
            key=lambda record: record.uploaded_at or BASE_TIME,
            reverse=True,
        )

    def find_by_id(self, document_id: str) -> DocumentRecord:
        if document_id not in self.records:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return self.records[document_id]

    def delete_by_id(self, document_id: str) -> None:
        if self.fail_delete:
            raise RuntimeError("connection reset")
        if self.records.pop(document_id, None) is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")


class InMemoryArtifactRepository:
    def __init__(self) -> None:
        self.artifact = AggregatedArtifact()
        self.writes: list[str] = []
        self.fail_replace = False
        self._lock = threading.Lock()

    def replace(self, content: str) -> None:
        if self.fail_replace:
            raise RuntimeError("write failed")
        with self._lock:
            self.writes.append(content)
            self.artifact = AggregatedArtifact(
                content=content,
                last_updated_at=BASE_TIME + timedelta(minutes=len(self.writes)),
            )

    def get(self) -> AggregatedArtifact:
        with self._lock:
            return self.artifact


class EchoExtractor(BaseTextExtractor):
    """Returns the blob bytes as text; payloads listed in failing raise."""

    def __init__(self) -> None:
        self.failing: set[bytes] = set()
        self.calls: list[bytes] = []
        self._lock = threading.Lock()

    def _extract_pages(self, data: bytes, mime_type: str) -> list[str]:
        with self._lock:
            self.calls.append(data)
        if data in self.failing:
            raise TextExtractionError(f"corrupt document {data!r}")
        return [data.decode("utf-8")]


@pytest.fixture()
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture()
def doc_repo() -> InMemoryDocumentsRepository:
    return InMemoryDocumentsRepository()


@pytest.fixture()
def artifact_repo() -> InMemoryArtifactRepository:
    return InMemoryArtifactRepository()


@pytest.fixture()
def extractor() -> EchoExtractor:
    return EchoExtractor()
