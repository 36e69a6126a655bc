"""CLI command for an interactive support chat session."""

import asyncio
import logging
from typing import Annotated, Callable

import typer
from rich.console import Console

from config.settings import get_settings
from src.agent.chat_service import SupportChatService
from src.cli.ask import print_reply, require_llm_credentials
from src.models.conversation import ChatReply
from src.services import build_services

console = Console()

EXIT_COMMANDS = {"exit", "quit", "/exit", "/quit"}


def _prompt() -> str:
    return console.input("\n[bold cyan]You:[/bold cyan] ")


async def run_session(
    service: SupportChatService,
    read_message: Callable[[], str] = _prompt,
    show_reply: Callable[[ChatReply], None] = print_reply,
) -> str | None:
    """Run chat turns until the user quits. Returns the last session id.

    Every turn runs on the caller's event loop: chat model clients keep
    connection pools that are bound to the loop they were first used on.
    """
    session_id = None
    while True:
        # Read on the loop thread so Ctrl-C interrupts the prompt directly
        try:
            message = read_message().strip()
        except (EOFError, KeyboardInterrupt):
            break
        if not message:
            continue
        if message.lower() in EXIT_COMMANDS:
            break
        if message == "/clear":
            if session_id:
                service.clear_history(session_id)
            console.print("[dim]History cleared.[/dim]")
            continue

        service.cleanup()
        with console.status("[bold green]Thinking..."):
            reply = await service.process_message(message, session_id=session_id)
        if reply.safety is None or reply.safety.overall_safe:
            session_id = reply.session_id
        show_reply(reply)
    return session_id


def chat(
    show_sources: Annotated[
        bool,
        typer.Option("--sources/--no-sources", help="Show retrieved sources after each answer"),
    ] = True,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging"),
    ] = False,
):
    """Chat with the support assistant. Type /clear to reset, exit to quit."""
    if verbose:
        logging.basicConfig(level=logging.INFO)
    else:
        logging.basicConfig(level=logging.WARNING)

    settings = get_settings()
    require_llm_credentials(settings)

    services = build_services(settings)
    service = services.chat

    console.print(f"[bold]Chatting with {service.agent_name}[/bold] (type 'exit' to quit)")
    console.print("[dim]Try asking:[/dim]")
    for suggestion in service.suggested_questions()[:3]:
        console.print(f"  [dim]- {suggestion}[/dim]")

    try:
        asyncio.run(run_session(
            service,
            show_reply=lambda reply: print_reply(reply, show_sources=show_sources),
        ))
    except KeyboardInterrupt:
        console.print("\n[dim]Interrupted.[/dim]")
    finally:
        services.close()
