import base64
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

import typer

from knowledge_base.config.settings import Settings
from knowledge_base.database.connection import close_pool, init_pool, init_schema
from knowledge_base.knowledge.exceptions import ArtifactStoreError
from knowledge_base.knowledge.models import OperationResult, PdfUpload
from knowledge_base.knowledge.service import KnowledgeBaseService, build_service
from knowledge_base.logging.logger import Log

app = typer.Typer(help="Knowledge base administration CLI")

T = TypeVar("T")


def _with_service(action: Callable[[KnowledgeBaseService], T]) -> T:
    """Initialize pool -> build service -> run action -> close service and pool."""
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)
    try:
        service = build_service(settings)
        try:
            return action(service)
        finally:
            service.close()
    finally:
        close_pool()


def _report(result: OperationResult) -> None:
    typer.echo(result.message)
    if not result.success:
        raise typer.Exit(code=1)


@app.command("init-db")
def init_db() -> None:
    """Create the knowledge base tables."""
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)
    try:
        init_schema()
    finally:
        close_pool()
    typer.echo("Schema initialized")


@app.command()
def upload(
    files: list[Path] = typer.Argument(..., exists=True, dir_okay=False, readable=True),
) -> None:
    """Upload one or more PDF files and rebuild the knowledge base."""
    uploads = [
        PdfUpload(
            encoded_data=base64.b64encode(path.read_bytes()).decode("ascii"),
            file_name=path.name,
        )
        for path in files
    ]
    _report(_with_service(lambda service: service.upload_documents(uploads)))


@app.command()
def delete(document_id: str = typer.Argument(..., help="Document ID")) -> None:
    """Delete a document and rebuild the knowledge base."""
    _report(_with_service(lambda service: service.delete_document(document_id)))


@app.command()
def rebuild() -> None:
    """Rebuild the knowledge base from all stored documents."""
    _report(_with_service(lambda service: service.rebuild()))


@app.command("list")
def list_documents() -> None:
    """List documents, most recently uploaded first."""
    documents = _with_service(lambda service: service.list_documents())
    if not documents:
        typer.echo("No documents")
        return
    for document in documents:
        uploaded = document.uploaded_at.isoformat() if document.uploaded_at else "pending"
        typer.echo(f"{document.id}\t{uploaded}\t{document.file_name}")


@app.command()
def show() -> None:
    """Print the aggregated knowledge base content."""
    try:
        artifact = _with_service(lambda service: service.get_knowledge_base())
    except ArtifactStoreError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    updated = artifact.last_updated_at.isoformat() if artifact.last_updated_at else "never"
    typer.echo(f"Last updated: {updated}")
    typer.echo(artifact.content)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
