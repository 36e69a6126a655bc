"""CLI command for showing vector index statistics."""

from rich.console import Console
from rich.table import Table

from config.settings import get_settings
from src.vectorstore.chroma_store import ChromaVectorIndex

console = Console()


def stats():
    """Show vector index statistics."""
    settings = get_settings()
    index = ChromaVectorIndex(
        path=str(settings.chroma_path),
        dimension=settings.supportrag_embedding_dimension,
        collection_name=settings.supportrag_collection,
    )
    info = index.describe_stats()

    table = Table(title="Vector Index")
    table.add_column("Property", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Path", str(settings.chroma_path))
    table.add_row("Collection", settings.supportrag_collection)
    table.add_row("Dimension", str(info.dimension))
    table.add_row("Vectors", str(info.total_vector_count))
    table.add_row("Fullness", f"{info.index_fullness:.2%}")
    console.print(table)

    if info.total_vector_count == 0:
        console.print("[yellow]Index is empty. Run 'supportrag ingest' first.[/yellow]")
