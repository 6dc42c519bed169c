"""
Command-line interface for ConflictGuard.
"""

from pathlib import Path
from typing import Optional

import click
import structlog

from conflictguard.config import get_settings
from conflictguard.exceptions import ConflictGuardError
from conflictguard.logging_config import configure_logging
from conflictguard.models import ConflictSeverity, DocumentType

logger = structlog.get_logger(__name__)

DOCUMENT_TYPES = [t.value for t in DocumentType]
SEVERITIES = [s.value for s in ConflictSeverity]


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--in-memory", is_flag=True, help="Use a throwaway in-memory graph store")
@click.pass_context
def cli(ctx: click.Context, debug: bool, in_memory: bool) -> None:
    """ConflictGuard: conflict detection for legal documents."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug

    settings = get_settings()
    store = None
    if in_memory:
        from conflictguard.storage import InMemoryGraphStore

        settings = settings.model_copy(update={"graph_backend": "memory"})
        store = InMemoryGraphStore()
    ctx.obj["settings"] = settings
    ctx.obj["store"] = store

    configure_logging("DEBUG" if debug else settings.log_level)


def _fail(error: ConflictGuardError) -> click.ClickException:
    logger.error("command_failed", code=error.code, error=str(error))
    return click.ClickException(f"{error.code}: {error}")


def _document_service(ctx: click.Context):
    from conflictguard.services.document_service import DocumentService, get_document_service

    store = ctx.obj["store"]
    return DocumentService(store=store) if store is not None else get_document_service()


def _conflict_service(ctx: click.Context):
    from conflictguard.services.conflict_service import ConflictService, get_conflict_service

    store = ctx.obj["store"]
    return ConflictService(store=store) if store is not None else get_conflict_service()


def _print_conflicts(conflicts) -> None:
    for conflict in conflicts:
        names = ", ".join(e.name for e in conflict.entities)
        click.echo(f"[{conflict.severity.value}] {conflict.description}")
        click.echo(f"    id: {conflict.id}")
        click.echo(f"    entities: {names}")
        if conflict.legal_principle:
            click.echo(f"    principle: {conflict.legal_principle}")


# =========================================================================
# Server Commands
# =========================================================================


@cli.command()
@click.option("--host", default=None, help="Host to bind to")
@click.option("--port", default=None, type=int, help="Port to bind to")
@click.option("--reload", is_flag=True, help="Enable auto-reload")
@click.pass_context
def serve(ctx: click.Context, host: Optional[str], port: Optional[int], reload: bool) -> None:
    """Start the API server."""
    import uvicorn

    settings = ctx.obj["settings"]
    store = ctx.obj["store"]
    host = host or settings.api_host
    port = port or settings.api_port

    if store is not None and reload:
        raise click.UsageError("--reload cannot be combined with --in-memory")

    app = "conflictguard.api.main:app"
    if store is not None:
        from conflictguard.api.main import create_app

        app = create_app(store=store)

    click.echo(f"Starting ConflictGuard API server on {host}:{port}")
    uvicorn.run(app, host=host, port=port, reload=reload)


@cli.command("init-schema")
@click.pass_context
def init_schema(ctx: click.Context) -> None:
    """Create graph constraints and indexes."""
    from conflictguard.storage import get_graph_store

    click.echo("Initializing graph schema...")
    try:
        (ctx.obj["store"] or get_graph_store()).setup_schema()
    except ConflictGuardError as e:
        raise _fail(e)
    click.echo("Schema ready.")


# =========================================================================
# Document Commands
# =========================================================================


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--name", default=None, help="Document name (defaults to the file name)")
@click.option(
    "--type",
    "document_type",
    type=click.Choice(DOCUMENT_TYPES, case_sensitive=False),
    default=DocumentType.CONTRACT.value,
    show_default=True,
    help="Document type",
)
@click.pass_context
def ingest(ctx: click.Context, file: Path, name: Optional[str], document_type: str) -> None:
    """Ingest a text document and extract its entities."""
    from conflictguard.validation import validate_document_input

    name = name or file.name
    content = file.read_text(encoding="utf-8")
    doc_type = DocumentType(document_type)

    try:
        validate_document_input(name, content, doc_type, ctx.obj["settings"])
        document = _document_service(ctx).ingest_document(name, content, doc_type)
    except ConflictGuardError as e:
        raise _fail(e)

    click.echo(f"Document: {document.id}")
    click.echo(f"Entities extracted: {len(document.entities)}")
    for entity in document.entities:
        click.echo(f"  - {entity.name} ({entity.entity_type.value}): {entity.value}")


@cli.command()
@click.option("--id", "document_ids", multiple=True, help="Only show this document (repeatable)")
@click.pass_context
def documents(ctx: click.Context, document_ids: tuple[str, ...]) -> None:
    """List stored documents, newest first."""
    service = _document_service(ctx)
    try:
        docs = (
            service.get_documents_by_ids(list(document_ids))
            if document_ids
            else service.get_all_documents()
        )
    except ConflictGuardError as e:
        raise _fail(e)

    if not docs:
        click.echo("No documents stored.")
        return
    for doc in docs:
        click.echo(
            f"{doc.id}  {doc.document_type.value:<22} {doc.name} "
            f"({len(doc.entities)} entities, {doc.created_at:%Y-%m-%d %H:%M})"
        )


# =========================================================================
# Conflict Commands
# =========================================================================


@cli.command()
@click.argument("document_ids", nargs=-1)
@click.pass_context
def analyze(ctx: click.Context, document_ids: tuple[str, ...]) -> None:
    """Analyze stored documents for conflicts."""
    from conflictguard.validation import validate_document_ids

    try:
        validate_document_ids(list(document_ids), ctx.obj["settings"])
        result = _conflict_service(ctx).analyze_conflicts(list(document_ids))
    except ConflictGuardError as e:
        raise _fail(e)

    click.echo(f"Summary: {result.summary}")
    click.echo(f"New conflicts: {len(result.conflicts)}\n")
    _print_conflicts(result.conflicts)


@cli.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--type",
    "document_type",
    type=click.Choice(DOCUMENT_TYPES, case_sensitive=False),
    default=DocumentType.CONTRACT.value,
    show_default=True,
    help="Document type applied to every file",
)
@click.pass_context
def check(ctx: click.Context, files: tuple[Path, ...], document_type: str) -> None:
    """Ingest FILES and analyze them together in one run."""
    from conflictguard.validation import validate_document_ids, validate_document_input

    settings = ctx.obj["settings"]
    doc_type = DocumentType(document_type)
    try:
        validate_document_ids([str(f) for f in files], settings)
        ids = []
        for path in files:
            content = path.read_text(encoding="utf-8")
            validate_document_input(path.name, content, doc_type, settings)
            document = _document_service(ctx).ingest_document(path.name, content, doc_type)
            click.echo(f"Ingested {path.name}: {len(document.entities)} entities")
            ids.append(document.id)
        result = _conflict_service(ctx).analyze_conflicts(ids)
    except ConflictGuardError as e:
        raise _fail(e)

    click.echo(f"\nSummary: {result.summary}")
    _print_conflicts(result.conflicts)


@cli.command()
@click.option(
    "--severity",
    type=click.Choice(SEVERITIES, case_sensitive=False),
    default=None,
    help="Only show conflicts of this severity",
)
@click.pass_context
def conflicts(ctx: click.Context, severity: Optional[str]) -> None:
    """List stored conflicts, newest first."""
    try:
        found = _conflict_service(ctx).get_conflicts(
            ConflictSeverity(severity) if severity else None
        )
    except ConflictGuardError as e:
        raise _fail(e)

    if not found:
        click.echo("No conflicts found.")
        return
    _print_conflicts(found)


# =========================================================================
# Config Commands
# =========================================================================


@cli.command()
@click.pass_context
def config(ctx: click.Context) -> None:
    """Show current configuration."""
    settings = ctx.obj["settings"]

    click.echo("\n=== ConflictGuard Configuration ===\n")
    click.echo(f"Environment: {settings.environment}")
    click.echo(f"Debug: {settings.debug}")
    click.echo(f"\nPrimary LLM: {settings.primary_llm_provider} ({settings.primary_llm_model})")
    click.echo(f"Fallback LLM: {settings.fallback_llm_provider} ({settings.fallback_llm_model})")
    click.echo(f"\nGraph backend: {settings.graph_backend}")
    if settings.graph_backend == "neo4j":
        click.echo(f"Neo4j: {settings.neo4j_uri} (database {settings.neo4j_database})")


def main() -> None:
    """Entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
