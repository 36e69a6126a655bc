"""CLI command for (re)building the knowledge index."""

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from config.settings import get_settings
from src.ingestion.indexer import ReindexError
from src.ingestion.loader import load_documents
from src.services import build_services

console = Console()


def ingest(
    knowledge_path: Annotated[
        str | None,
        typer.Option("--knowledge-path", "-k", help="Support-data JSON file (defaults to settings)"),
    ] = None,
    keep_existing: Annotated[
        bool,
        typer.Option("--keep-existing", help="Upsert without clearing the index first"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging"),
    ] = False,
):
    """Load the knowledge file and reindex it into the vector store."""
    if verbose:
        logging.basicConfig(level=logging.INFO)
    else:
        logging.basicConfig(level=logging.WARNING)

    settings = get_settings()
    path = Path(knowledge_path) if knowledge_path else settings.knowledge_path

    try:
        documents = load_documents(path)
    except ValueError as e:
        console.print(f"[bold red]{e}[/bold red]")
        raise typer.Exit(1)

    console.print("[bold]SupportRAG Ingestion[/bold]")
    console.print(f"Knowledge file: {path}")
    console.print(f"Documents: {len(documents)}")
    console.print(
        f"Chunk size: {settings.supportrag_chunk_size} chars, "
        f"overlap: {settings.supportrag_chunk_overlap} chars"
    )
    console.print()

    services = build_services(settings)
    try:
        with console.status("[bold green]Indexing documents..."):
            summary = asyncio.run(services.indexer.reindex(
                documents,
                clear=not keep_existing,
                timeout=settings.supportrag_index_timeout,
            ))
    except ReindexError as e:
        console.print(f"[bold red]Reindexing failed:[/bold red] {e}")
        console.print(
            f"  Documents indexed before failure: {e.summary.documents_processed}\n"
            f"  Vectors upserted before failure: {e.summary.vectors_upserted}"
        )
        raise typer.Exit(1)
    finally:
        services.close()

    console.print("[bold green]Ingestion complete![/bold green]")
    console.print(f"  Documents processed: {summary.documents_processed}")
    console.print(f"  Vectors upserted: {summary.vectors_upserted}")
