from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class DocumentRecord:
    """Represents a row from the knowledge_documents table."""

    id: str
    file_name: str
    blob_path: str
    uploaded_at: datetime | None = None


@dataclass(frozen=True)
class NewDocument:
    """A document staged for the batched metadata commit."""

    file_name: str
    blob_path: str


@dataclass(frozen=True)
class AggregatedArtifact:
    """Represents the single row of the knowledge_base table."""

    content: str = ""
    last_updated_at: datetime | None = None
