"""CLI command for asking a single support question."""

import asyncio
import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from config.settings import Settings, get_settings
from src.models.conversation import ChatReply
from src.services import build_services

console = Console()


def require_llm_credentials(settings: Settings) -> None:
    """Exit with a hint if the configured provider has no API key."""
    provider = settings.supportrag_llm_provider.lower()
    if provider == "anthropic" and not settings.anthropic_api_key:
        console.print(
            "[bold red]ANTHROPIC_API_KEY not set.[/bold red]\n"
            "Export your API key: export ANTHROPIC_API_KEY='sk-ant-...'"
        )
        raise typer.Exit(1)
    if provider == "google" and not settings.google_api_key:
        console.print(
            "[bold red]GOOGLE_API_KEY not set.[/bold red]\n"
            "Export your API key: export GOOGLE_API_KEY='...'"
        )
        raise typer.Exit(1)


def print_reply(reply: ChatReply, show_sources: bool = True) -> None:
    if reply.error:
        color = "red"
    elif reply.safety is not None and not reply.safety.overall_safe:
        color = "yellow"
    else:
        color = "green"

    header = Text()
    header.append(reply.agent_name, style="bold")
    if reply.safety is not None:
        header.append("  Safety confidence: ", style="dim")
        header.append(f"{reply.safety.confidence:.0f}%", style=f"bold {color}")

    console.print()
    console.print(Panel(reply.message, title=header, border_style=color, padding=(1, 2)))

    if show_sources and reply.sources:
        table = Table(title="Sources", show_lines=False)
        table.add_column("#", justify="right")
        table.add_column("Title")
        table.add_column("Source")
        table.add_column("Score", justify="right")
        for i, source in enumerate(reply.sources, 1):
            table.add_row(
                str(i),
                source.get("title", ""),
                source.get("source", ""),
                f"{source.get('relevance_score', 0.0):.3f}",
            )
        console.print(table)


def ask(
    question: Annotated[
        str,
        typer.Argument(help="Your question for the support assistant"),
    ],
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging"),
    ] = False,
):
    """Ask the support assistant one question."""
    if verbose:
        logging.basicConfig(level=logging.INFO)
    else:
        logging.basicConfig(level=logging.WARNING)

    settings = get_settings()
    require_llm_credentials(settings)

    services = build_services(settings)
    try:
        with console.status("[bold green]Thinking..."):
            reply = asyncio.run(services.chat.process_message(question))
    finally:
        services.close()

    print_reply(reply)
