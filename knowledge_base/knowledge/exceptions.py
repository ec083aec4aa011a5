class KnowledgeBaseError(Exception):
    """Base exception for all knowledge base errors."""


class DocumentNotFoundError(KnowledgeBaseError):
    """Raised when a document record cannot be found in the database."""


class PayloadDecodeError(KnowledgeBaseError):
    """Raised when an uploaded payload is not valid base64."""


class ArtifactStoreError(KnowledgeBaseError):
    """Raised when the aggregated artifact cannot be read or written."""
