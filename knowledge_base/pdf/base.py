from abc import ABC, abstractmethod

from knowledge_base.pdf.exceptions import UnsupportedMimeTypeError

PDF_MIME_TYPE = "application/pdf"


class BaseTextExtractor(ABC):
    """Contract for all text extraction adapters."""

    SUPPORTED_MIME_TYPES: frozenset[str] = frozenset({PDF_MIME_TYPE})

    def extract_text(self, data: bytes, mime_type: str = PDF_MIME_TYPE) -> str:
        """Extract plain text from a binary document.

        Args:
            data: Raw document content.
            mime_type: Declared type of ``data``.

        Returns:
            Page texts joined by newlines, stripped.

        Raises:
            UnsupportedMimeTypeError: if mime_type is not handled by the adapter.
            TextExtractionError: if extraction fails for any other reason.
        """
        if mime_type not in self.SUPPORTED_MIME_TYPES:
            raise UnsupportedMimeTypeError(
                f"{type(self).__name__} cannot extract '{mime_type}'"
            )
        return "\n".join(self._extract_pages(data, mime_type)).strip()

    @abstractmethod
    def _extract_pages(self, data: bytes, mime_type: str) -> list[str]:
        """Return the text of each page in document order."""

    def close(self) -> None:
        """Release resources held by the adapter. Local adapters hold none."""
