"""SupportRAG CLI entry point."""

import typer

from src.cli.ask import ask
from src.cli.chat import chat
from src.cli.evaluate import evaluate
from src.cli.ingest import ingest
from src.cli.screen import screen
from src.cli.stats import stats

app = typer.Typer(
    name="supportrag",
    help="Customer-support RAG assistant - index a knowledge base and answer safety-screened questions.",
)

app.command(name="ingest")(ingest)
app.command(name="ask")(ask)
app.command(name="chat")(chat)
app.command(name="screen")(screen)
app.command(name="stats")(stats)
app.command(name="evaluate")(evaluate)


if __name__ == "__main__":
    app()
