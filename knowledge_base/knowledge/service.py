import uuid
from pathlib import Path

from knowledge_base.config.settings import Settings
from knowledge_base.database.models import AggregatedArtifact, DocumentRecord, NewDocument
from knowledge_base.database.repositories.artifact_repository import ArtifactRepository
from knowledge_base.database.repositories.documents_repository import DocumentsRepository
from knowledge_base.knowledge.coordinator import RebuildCoordinator
from knowledge_base.knowledge.exceptions import ArtifactStoreError, DocumentNotFoundError
from knowledge_base.knowledge.models import OperationResult, PdfUpload
from knowledge_base.knowledge.rebuilder import KnowledgeBaseRebuilder
from knowledge_base.logging.logger import Log
from knowledge_base.pdf.base import PDF_MIME_TYPE
from knowledge_base.pdf.factory import TextExtractorFactory
from knowledge_base.storage.base import BaseBlobStore
from knowledge_base.storage.exceptions import BlobNotFoundError
from knowledge_base.storage.local_adapter import LocalBlobStore


def storage_name(file_name: str) -> str:
    """Reduce a display file name to a single safe path segment."""
    name = file_name.replace("\\", "/").rsplit("/", 1)[-1].strip()
    if name in ("", ".", ".."):
        return "document.pdf"
    return name


def build_blob_path(namespace: str, file_name: str, unique_id: str | None = None) -> str:
    """Build a storage key: {namespace}/{uuid}_{file_name}"""
    return f"{namespace}/{unique_id or uuid.uuid4()}_{storage_name(file_name)}"


class KnowledgeBaseService:
    """Admin operations on the knowledge base: upload, delete, rebuild, read.

    Every operation returns an OperationResult; collaborator errors are
    logged and converted at this boundary.
    """

    def __init__(
        self,
        doc_repo: DocumentsRepository,
        artifact_repo: ArtifactRepository,
        blob_store: BaseBlobStore,
        coordinator: RebuildCoordinator,
        namespace: str = "knowledge_base",
    ) -> None:
        self._doc_repo = doc_repo
        self._artifact_repo = artifact_repo
        self._blob_store = blob_store
        self._coordinator = coordinator
        self._namespace = namespace

    def upload_documents(self, uploads: list[PdfUpload]) -> OperationResult:
        if not uploads:
            return OperationResult.fail("No documents provided.")

        written: list[str] = []
        staged: list[NewDocument] = []
        try:
            for upload in uploads:
                data = upload.decode()
                blob_path = build_blob_path(self._namespace, upload.file_name)
                self._blob_store.put(blob_path, data, content_type=PDF_MIME_TYPE)
                written.append(blob_path)
                staged.append(NewDocument(file_name=upload.file_name, blob_path=blob_path))
                Log.debug(f"Stored {len(data)} bytes at {blob_path}")

            self._doc_repo.create_batch(staged)
        except Exception as exc:
            Log.error(f"Error processing PDFs: {exc}")
            for blob_path in written:
                Log.warning(f"Orphaned blob left for reconciliation: {blob_path}")
            return OperationResult.fail(str(exc) or "Failed to process PDFs.")

        Log.info(f"Committed {len(staged)} document record(s), triggering rebuild")
        rebuild_result = self._coordinator.run()
        if not rebuild_result.success:
            Log.error(
                f"Knowledge base rebuild failed after upload of {len(staged)} document(s); "
                "records are committed and will be picked up by the next rebuild"
            )
            return OperationResult.fail(
                f"Knowledge base rebuild failed: {rebuild_result.message}"
            )

        return OperationResult.ok(
            f"{len(uploads)} PDF(s) uploaded. Knowledge base is being updated.",
            count=len(uploads),
        )

    def delete_document(self, document_id: str) -> OperationResult:
        try:
            document = self._doc_repo.find_by_id(document_id)
        except DocumentNotFoundError:
            return OperationResult.fail("Document not found.")
        except Exception as exc:
            Log.error(f"Error deleting document {document_id}: {exc}")
            return OperationResult.fail("Failed to delete document.")

        try:
            self._blob_store.delete(document.blob_path)
        except BlobNotFoundError:
            Log.warning(f"Blob {document.blob_path} already missing, removing record only")
        except Exception as exc:
            Log.error(f"Error deleting blob {document.blob_path}: {exc}")
            return OperationResult.fail("Failed to delete document.")

        try:
            self._doc_repo.delete_by_id(document_id)
        except Exception as exc:
            Log.error(
                f"Blob {document.blob_path} deleted but record {document_id} was not: {exc}"
            )
            return OperationResult.fail("Failed to delete document.")

        rebuild_result = self._coordinator.run()
        if not rebuild_result.success:
            Log.warning(f"Rebuild after deleting {document_id} failed: {rebuild_result.message}")

        return OperationResult.ok(
            f"Document '{document.file_name}' deleted. Knowledge base is being updated."
        )

    def rebuild(self) -> OperationResult:
        return self._coordinator.run()

    def close(self) -> None:
        """Release the extraction client."""
        self._coordinator.close()

    def list_documents(self) -> list[DocumentRecord]:
        """Return all documents, newest first; empty on read errors."""
        try:
            return self._doc_repo.list_all()
        except Exception as exc:
            Log.error(f"Error fetching knowledge documents: {exc}")
            return []

    def get_knowledge_base(self) -> AggregatedArtifact:
        """Return the current aggregated corpus.

        Raises:
            ArtifactStoreError: if the artifact cannot be read.
        """
        try:
            return self._artifact_repo.get()
        except Exception as exc:
            raise ArtifactStoreError(f"Failed to read knowledge base: {exc}") from exc


def build_service(settings: Settings, blob_root: Path | None = None) -> KnowledgeBaseService:
    """Build a KnowledgeBaseService with all required adapters."""
    doc_repo = DocumentsRepository()
    artifact_repo = ArtifactRepository()
    blob_store = LocalBlobStore(blob_root if blob_root is not None else Path(settings.blob_root))
    rebuilder = KnowledgeBaseRebuilder(
        doc_repo=doc_repo,
        artifact_repo=artifact_repo,
        blob_store=blob_store,
        extractor=TextExtractorFactory.create(settings),
        max_workers=settings.rebuild_max_workers,
        task_timeout_seconds=settings.extraction_timeout_seconds,
        max_attempts=settings.extraction_max_attempts,
    )
    return KnowledgeBaseService(
        doc_repo=doc_repo,
        artifact_repo=artifact_repo,
        blob_store=blob_store,
        coordinator=RebuildCoordinator(rebuilder),
        namespace=settings.blob_namespace,
    )
