from knowledge_base.config.settings import Settings
from knowledge_base.pdf.base import BaseTextExtractor
from knowledge_base.pdf.pdfplumber_adapter import PdfPlumberAdapter
from knowledge_base.pdf.pymupdf_adapter import PyMuPdfAdapter
from knowledge_base.pdf.tika_adapter import TikaAdapter


class TextExtractorFactory:
    """Creates the correct text extractor based on settings."""

    LOCAL_ADAPTERS: dict[str, type[BaseTextExtractor]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseTextExtractor:
        engine = settings.pdf_engine.lower()
        if engine == "tika":
            return TikaAdapter(
                base_url=settings.tika_url,
                timeout_seconds=settings.tika_timeout_seconds,
            )
        adapter_cls = cls.LOCAL_ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. "
                f"Choose from: {[*cls.LOCAL_ADAPTERS, 'tika']}"
            )
        return adapter_cls()
