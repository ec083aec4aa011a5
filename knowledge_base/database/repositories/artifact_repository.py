from psycopg.rows import dict_row

from knowledge_base.database.connection import get_connection
from knowledge_base.database.models import AggregatedArtifact


class ArtifactRepository:
    """Database operations for the single-row knowledge_base table."""

    ARTIFACT_ID = "main_document"

    def replace(self, content: str) -> None:
        """Overwrite the artifact content and stamp last_updated_at.

        A single upsert statement inside one transaction, so readers see
        either the previous content or the new one.
        """
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO knowledge_base (id, content, last_updated_at)
                VALUES (%s, %s, NOW())
                ON CONFLICT (id) DO UPDATE
                SET content = EXCLUDED.content,
                    last_updated_at = EXCLUDED.last_updated_at
                """,
                (self.ARTIFACT_ID, content),
            )
            conn.commit()

    def get(self) -> AggregatedArtifact:
        """Return the current artifact, or the empty one before any rebuild."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    "SELECT content, last_updated_at FROM knowledge_base WHERE id = %s",
                    (self.ARTIFACT_ID,),
                )
                row = cur.fetchone()

        if row is None:
            return AggregatedArtifact()

        return AggregatedArtifact(
            content=row["content"],
            last_updated_at=row["last_updated_at"],
        )
