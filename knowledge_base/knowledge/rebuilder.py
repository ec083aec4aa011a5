import time
from collections import deque
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait

from knowledge_base.database.models import DocumentRecord
from knowledge_base.database.repositories.artifact_repository import ArtifactRepository
from knowledge_base.database.repositories.documents_repository import DocumentsRepository
from knowledge_base.knowledge.models import OperationResult
from knowledge_base.logging.logger import Log
from knowledge_base.pdf.base import PDF_MIME_TYPE, BaseTextExtractor
from knowledge_base.pdf.exceptions import TextExtractionError
from knowledge_base.storage.base import BaseBlobStore


def format_contribution(file_name: str, text: str) -> str:
    """Render one document's section of the aggregated content."""
    return f"\n\n--- Content from {file_name} ---\n\n{text}"


class KnowledgeBaseRebuilder:
    """Rebuilds the aggregated artifact from every current document.

    Per-document failures (missing blob, download or extraction error,
    timeout) only drop that document's contribution. Only failing to read
    the document list or to write the artifact fails the rebuild.
    """

    def __init__(
        self,
        doc_repo: DocumentsRepository,
        artifact_repo: ArtifactRepository,
        blob_store: BaseBlobStore,
        extractor: BaseTextExtractor,
        *,
        max_workers: int = 8,
        task_timeout_seconds: float = 120.0,
        max_attempts: int = 1,
    ) -> None:
        self._doc_repo = doc_repo
        self._artifact_repo = artifact_repo
        self._blob_store = blob_store
        self._extractor = extractor
        self._max_workers = max_workers
        self._task_timeout_seconds = task_timeout_seconds
        self._max_attempts = max_attempts

    def rebuild(self) -> OperationResult:
        try:
            documents = self._doc_repo.list_all()
        except Exception as exc:
            Log.error(f"Failed to list knowledge documents for rebuild: {exc}")
            return OperationResult.fail("Failed to rebuild knowledge base.")

        if not documents:
            return self._write(
                "", OperationResult.ok("Knowledge base is empty and has been cleared.")
            )

        contributions = self._collect_contributions(documents)
        skipped = sum(1 for contribution in contributions if not contribution)
        content = "".join(contributions)

        message = "Knowledge base rebuilt successfully."
        if skipped:
            message = (
                f"Knowledge base rebuilt successfully "
                f"({skipped} of {len(documents)} document(s) skipped)."
            )
        Log.info(
            f"Rebuilt knowledge base from {len(documents) - skipped} of "
            f"{len(documents)} document(s), {len(content)} chars"
        )
        return self._write(content, OperationResult.ok(message))

    def _collect_contributions(self, documents: list[DocumentRecord]) -> list[str]:
        """Fan out one task per document and gather results by position.

        At most max_workers documents are in flight. Each document's deadline
        starts when its task is submitted; a task past its deadline is
        abandoned (left running, not awaited) and its slot goes to the next
        queued document, so hung extractions cannot starve the rest.
        """
        contributions = [""] * len(documents)
        queued = deque(range(len(documents)))
        in_flight: dict[Future[str], tuple[int, float]] = {}
        # One thread per document: a submitted task never waits for a thread.
        executor = ThreadPoolExecutor(max_workers=len(documents), thread_name_prefix="kb-rebuild")
        try:
            while queued or in_flight:
                while queued and len(in_flight) < self._max_workers:
                    index = queued.popleft()
                    future = executor.submit(self._contribution_for, documents[index])
                    in_flight[future] = (index, time.monotonic() + self._task_timeout_seconds)

                next_deadline = min(deadline for _, deadline in in_flight.values())
                done, _ = wait(
                    in_flight,
                    timeout=max(0.0, next_deadline - time.monotonic()),
                    return_when=FIRST_COMPLETED,
                )
                for future in done:
                    index, _ = in_flight.pop(future)
                    try:
                        contributions[index] = future.result()
                    except Exception as exc:
                        Log.warning(
                            f"Error processing {documents[index].file_name}, skipping: {exc}"
                        )

                now = time.monotonic()
                for future, (index, deadline) in list(in_flight.items()):
                    if deadline <= now and not future.done():
                        del in_flight[future]
                        Log.warning(
                            f"Timed out extracting {documents[index].file_name} "
                            f"after {self._task_timeout_seconds}s, skipping"
                        )
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
        return contributions

    def _contribution_for(self, document: DocumentRecord) -> str:
        """Fetch and extract one document. Never raises."""
        try:
            if not self._blob_store.exists(document.blob_path):
                Log.warning(
                    f"File {document.blob_path} not found in storage for rebuild, skipping"
                )
                return ""
            data = self._blob_store.get(document.blob_path)
            text = self._extract_with_retry(document, data)
        except Exception as exc:
            Log.warning(f"Error processing file {document.file_name} for rebuild, skipping: {exc}")
            return ""
        return format_contribution(document.file_name, text)

    def _extract_with_retry(self, document: DocumentRecord, data: bytes) -> str:
        attempt = 1
        while True:
            try:
                return self._extractor.extract_text(data, mime_type=PDF_MIME_TYPE)
            except TextExtractionError as exc:
                if attempt >= self._max_attempts:
                    raise
                Log.debug(
                    f"Extraction of {document.file_name} failed "
                    f"(attempt {attempt}/{self._max_attempts}), retrying: {exc}"
                )
                attempt += 1

    def _write(self, content: str, result: OperationResult) -> OperationResult:
        try:
            self._artifact_repo.replace(content)
        except Exception as exc:
            Log.error(f"Failed to write knowledge base artifact: {exc}")
            return OperationResult.fail("Failed to rebuild knowledge base.")
        return result

    def close(self) -> None:
        self._extractor.close()
