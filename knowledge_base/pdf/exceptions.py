class TextExtractionError(Exception):
    """Raised when text cannot be extracted from a document."""


class UnsupportedMimeTypeError(TextExtractionError):
    """Raised when an extractor is given a MIME type it cannot handle."""
