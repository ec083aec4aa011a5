from typing import Any

from psycopg.rows import dict_row

from knowledge_base.database.connection import get_connection
from knowledge_base.database.models import DocumentRecord, NewDocument
from knowledge_base.knowledge.exceptions import DocumentNotFoundError


def _to_record(row: dict[str, Any]) -> DocumentRecord:
    return DocumentRecord(
        id=str(row["id"]),
        file_name=row["file_name"],
        blob_path=row["blob_path"],
        uploaded_at=row["uploaded_at"],
    )


class DocumentsRepository:
    """Database operations for the knowledge_documents table."""

    def create_batch(self, documents: list[NewDocument]) -> list[str]:
        """Insert all documents in a single transaction.

        Either every row becomes visible or none does. uploaded_at is
        assigned by the server with clock_timestamp(), so rows within one
        batch still get distinct, increasing timestamps.

        Returns:
            The ids of the created rows, in input order.
        """
        created: list[str] = []
        with get_connection() as conn:
            with conn.transaction():
                with conn.cursor() as cur:
                    for document in documents:
                        cur.execute(
                            """
                            INSERT INTO knowledge_documents (file_name, blob_path, uploaded_at)
                            VALUES (%s, %s, clock_timestamp())
                            RETURNING id
                            """,
                            (document.file_name, document.blob_path),
                        )
                        row = cur.fetchone()
                        if row is None:
                            raise RuntimeError(
                                f"Insert returned no id for {document.blob_path}"
                            )
                        created.append(str(row[0]))
        return created

    def list_all(self) -> list[DocumentRecord]:
        """Return every document, most recently uploaded first."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, file_name, blob_path, uploaded_at
                    FROM knowledge_documents
                    ORDER BY uploaded_at DESC, id
                    """
                )
                rows = cur.fetchall()
        return [_to_record(row) for row in rows]

    def find_by_id(self, document_id: str) -> DocumentRecord:
        """Find a document by ID.

        Raises:
            DocumentNotFoundError: if no document with this ID exists.
        """
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, file_name, blob_path, uploaded_at
                    FROM knowledge_documents
                    WHERE id::text = %s
                    """,
                    (document_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")

        return _to_record(row)

    def delete_by_id(self, document_id: str) -> None:
        """Delete a document row.

        Raises:
            DocumentNotFoundError: if no document with this ID exists.
        """
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "DELETE FROM knowledge_documents WHERE id::text = %s",
                    (document_id,),
                )
                if cur.rowcount == 0:
                    raise DocumentNotFoundError(f"Document {document_id} not found")
            conn.commit()
