import io

import pdfplumber

from knowledge_base.pdf.base import BaseTextExtractor
from knowledge_base.pdf.exceptions import TextExtractionError


class PdfPlumberAdapter(BaseTextExtractor):
    """Extracts text from PDF using pdfplumber."""

    def _extract_pages(self, data: bytes, mime_type: str) -> list[str]:
        try:
            with pdfplumber.open(io.BytesIO(data)) as pdf:
                return [page.extract_text() or "" for page in pdf.pages]
        except Exception as exc:
            raise TextExtractionError(f"pdfplumber extraction failed: {exc}") from exc
