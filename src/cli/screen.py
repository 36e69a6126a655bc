"""CLI command for screening a message with the safety checks."""

from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from config.settings import get_settings
from src.safety.screener import SafetyScreener
from src.services import policy_from_settings

console = Console()


def screen(
    message: Annotated[
        str,
        typer.Argument(help="Message to screen"),
    ],
):
    """Run every safety check over a message and show the verdict."""
    screener = SafetyScreener(policy_from_settings(get_settings()))
    verdict = screener.screen(message)

    color = "green" if verdict.overall_safe else "red"
    console.print(
        f"[bold {color}]{'SAFE' if verdict.overall_safe else 'UNSAFE'}[/bold {color}]"
        f"  confidence: {verdict.confidence:.1f}%"
    )

    if verdict.issues:
        table = Table(title="Issues")
        table.add_column("Category", style="bold")
        table.add_column("Details")
        table.add_column("Reason")
        for issue in verdict.issues:
            table.add_row(issue.category.value, ", ".join(issue.subcategories), issue.reason)
        console.print(table)
        console.print()
        console.print(screener.generate_response(verdict.issues))
