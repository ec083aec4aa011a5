import pymupdf

from knowledge_base.pdf.base import BaseTextExtractor
from knowledge_base.pdf.exceptions import TextExtractionError


class PyMuPdfAdapter(BaseTextExtractor):
    """Extracts text from PDF using PyMuPDF."""

    def _extract_pages(self, data: bytes, mime_type: str) -> list[str]:
        try:
            with pymupdf.open(stream=data, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                return [page.get_text() for page in doc]
        except Exception as exc:
            raise TextExtractionError(f"pymupdf extraction failed: {exc}") from exc
