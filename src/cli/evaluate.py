"""CLI command for running end-to-end answer quality evaluation."""

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from config.settings import get_settings
from src.cli.ask import require_llm_credentials
from src.evaluation.eval_runner import load_questions, run_evaluation
from src.models.evaluation import EvaluationReport
from src.services import build_services

console = Console()


def _format_report(report: EvaluationReport, verbose: bool = False) -> None:
    """Print a Rich-formatted evaluation report."""
    overall = report.overall_metrics
    console.print(f"\n[bold]Evaluation Report: {report.config_label}[/bold]")
    console.print(
        f"Questions: {overall.get('num_questions', 0)} "
        f"(valid responses: {overall.get('valid_responses', 0)}) "
        f"in {report.duration_seconds:.1f}s"
    )
    if report.parameters:
        for key, val in report.parameters.items():
            console.print(f"  {key}: {val}")
    console.print()

    k_values = sorted(overall.get("avg_keyword_recall_at_k", {}).keys())

    table = Table(title="Overall Metrics")
    table.add_column("Metric", style="bold")
    table.add_column("Score", justify="right")
    for metric_name, metric_key in [
        ("Accuracy", "avg_accuracy"),
        ("Helpfulness", "avg_helpfulness"),
        ("Citation Quality", "avg_citation_quality"),
        ("Overall", "avg_overall"),
        ("Keyword MRR", "avg_reciprocal_rank"),
    ]:
        table.add_row(metric_name, f"{overall.get(metric_key, 0.0):.2f}")
    for k in k_values:
        table.add_row(f"Keyword Recall@{k}", f"{overall['avg_keyword_recall_at_k'][k]:.2f}")
    console.print(table)

    if report.per_category:
        cat_table = Table(title="Metrics by Category")
        cat_table.add_column("Category", style="bold")
        cat_table.add_column("N", justify="right")
        cat_table.add_column("Acc", justify="right")
        cat_table.add_column("Help", justify="right")
        cat_table.add_column("Cite", justify="right")
        cat_table.add_column("Overall", justify="right")
        for k in k_values:
            cat_table.add_column(f"KR@{k}", justify="right")

        for cat in report.per_category:
            row = [
                cat.category,
                str(cat.count),
                f"{cat.avg_accuracy:.2f}",
                f"{cat.avg_helpfulness:.2f}",
                f"{cat.avg_citation_quality:.2f}",
                f"{cat.avg_overall:.2f}",
            ]
            row.extend(f"{cat.avg_keyword_recall_at_k.get(k, 0.0):.2f}" for k in k_values)
            cat_table.add_row(*row)
        console.print(cat_table)

    if verbose and report.per_question:
        detail_table = Table(title="Per-Question Results")
        detail_table.add_column("ID", style="bold")
        detail_table.add_column("Category")
        detail_table.add_column("Overall", justify="right")
        detail_table.add_column("Error")
        for qr in report.per_question:
            detail_table.add_row(
                str(qr.question_id),
                qr.category,
                f"{qr.scores.overall:.2f}",
                qr.error or "",
            )
        console.print(detail_table)


def evaluate(
    top_k: Annotated[
        str,
        typer.Option("--top-k", help="Comma-separated k values for keyword recall (e.g., '3,5')"),
    ] = "3,5",
    questions_path: Annotated[
        str | None,
        typer.Option("--questions-path", help="Path to golden questions (defaults to settings)"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show per-question details"),
    ] = False,
):
    """Evaluate answer quality against a golden question set."""
    if verbose:
        logging.basicConfig(level=logging.INFO)
    else:
        logging.basicConfig(level=logging.WARNING)

    settings = get_settings()
    k_values = [int(k.strip()) for k in top_k.split(",")]
    path = Path(questions_path) if questions_path else settings.eval_path

    try:
        questions = load_questions(path)
    except ValueError as e:
        console.print(f"[bold red]{e}[/bold red]")
        raise typer.Exit(1)

    require_llm_credentials(settings)
    services = build_services(settings)
    try:
        corpus_size = services.index.describe_stats().total_vector_count
        if corpus_size == 0:
            console.print(
                "[bold red]No documents in the vector store.[/bold red]\n"
                "Run 'supportrag ingest' first."
            )
            raise typer.Exit(1)

        console.print("[bold]SupportRAG Evaluation[/bold]")
        console.print(f"Corpus size: {corpus_size} chunks, questions: {len(questions)}")

        with console.status("[bold green]Running evaluation..."):
            report = asyncio.run(run_evaluation(
                questions,
                services.chat,
                services.retriever,
                top_k_values=k_values,
                config_label="baseline",
                parameters={
                    "embedding_model": settings.supportrag_embedding_model,
                    "llm_model": settings.supportrag_llm_model,
                    "chunk_size": settings.supportrag_chunk_size,
                    "chunk_overlap": settings.supportrag_chunk_overlap,
                    "corpus_chunks": corpus_size,
                },
                company_name=settings.supportrag_company_name,
            ))
    finally:
        services.close()

    _format_report(report, verbose)
