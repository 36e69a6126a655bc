"""Evaluation runner for end-to-end answer quality.

Loads golden questions, sends each through the chat service, scores the
answer heuristically, measures retrieval keyword recall, and aggregates
by category.
"""

import asyncio
import json
import logging
import time
from collections import defaultdict
from pathlib import Path

from src.agent.chat_service import SupportChatService
from src.evaluation.response_metrics import score_response
from src.evaluation.retrieval_metrics import keyword_recall_at_k, reciprocal_rank
from src.models.evaluation import (
    CategoryMetrics,
    EvalQuestion,
    EvaluationReport,
    QuestionResult,
    ResponseScores,
)
from src.retrieval.retriever import KnowledgeRetriever

logger = logging.getLogger(__name__)

DEFAULT_QUESTIONS_PATH = Path("data/eval/questions.json")


def load_questions(path: Path = DEFAULT_QUESTIONS_PATH) -> list[EvalQuestion]:
    """Load golden questions from a JSON list.

    Raises:
        ValueError: If the file is missing, malformed, or an entry is invalid.
    """
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ValueError(f"Failed to load evaluation questions: {e}") from e

    try:
        return [
            EvalQuestion(
                id=entry["id"],
                category=entry["category"],
                question=entry["question"],
                expected_keywords=list(entry["expected_keywords"]),
                difficulty=entry.get("difficulty", "medium"),
                type=entry.get("type", "factual"),
            )
            for entry in raw
        ]
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid evaluation question: {e}") from e


async def evaluate_question(
    question: EvalQuestion,
    chat: SupportChatService,
    retriever: KnowledgeRetriever,
    top_k_values: list[int],
    company_name: str = "Aven",
) -> QuestionResult:
    """Score one question; failures produce zero scores and an error."""
    max_k = max(top_k_values)
    try:
        reply = await chat.process_message(question.question)
        # Each question is a one-off conversation
        chat.end_session(reply.session_id)
        if reply.error:
            raise RuntimeError(reply.error)
        results = await retriever.search(question.question, top_k=max_k)
    except Exception as e:
        logger.error("Failed to evaluate question %s: %s", question.id, e)
        return QuestionResult(
            question_id=question.id,
            question=question.question,
            category=question.category,
            response="",
            scores=ResponseScores(),
            keyword_recall_at_k={k: 0.0 for k in top_k_values},
            error=str(e) or type(e).__name__,
        )

    texts = [r.content for r in results]
    return QuestionResult(
        question_id=question.id,
        question=question.question,
        category=question.category,
        response=reply.message,
        scores=score_response(reply.message, question.expected_keywords, reply.sources, company_name),
        keyword_recall_at_k={
            k: keyword_recall_at_k(texts, question.expected_keywords, k)
            for k in top_k_values
        },
        reciprocal_rank=reciprocal_rank(texts, question.expected_keywords),
        sources=reply.sources,
    )


async def run_evaluation(
    questions: list[EvalQuestion],
    chat: SupportChatService,
    retriever: KnowledgeRetriever,
    top_k_values: list[int] | None = None,
    config_label: str = "baseline",
    parameters: dict | None = None,
    delay: float = 0.1,
    company_name: str = "Aven",
) -> EvaluationReport:
    """Run every question sequentially and build the report.

    Args:
        questions: Golden questions.
        chat: Chat service producing the answers.
        retriever: Retriever used for keyword recall@k.
        top_k_values: k values for recall (default [3, 5]).
        config_label: Label for this evaluation configuration.
        parameters: Optional configuration parameters recorded in the report.
        delay: Seconds to pause between questions (rate limiting).
    """
    if top_k_values is None:
        top_k_values = [3, 5]

    start = time.monotonic()
    results: list[QuestionResult] = []
    for i, question in enumerate(questions):
        logger.info("Evaluating question %s: %s", question.id, question.question[:50])
        results.append(await evaluate_question(question, chat, retriever, top_k_values, company_name))
        if delay > 0 and i < len(questions) - 1:
            await asyncio.sleep(delay)

    return EvaluationReport(
        config_label=config_label,
        parameters=parameters or {},
        overall_metrics=_compute_overall(results, top_k_values),
        per_category=_aggregate_by_category(results, top_k_values),
        per_question=results,
        duration_seconds=round(time.monotonic() - start, 2),
    )


def _mean(values: list[float]) -> float:
    return round(sum(values) / len(values), 2) if values else 0.0


def _aggregate_by_category(
    results: list[QuestionResult],
    top_k_values: list[int],
) -> list[CategoryMetrics]:
    """Group successful results by category and compute averages."""
    by_cat: dict[str, list[QuestionResult]] = defaultdict(list)
    for r in results:
        if r.error is None:
            by_cat[r.category].append(r)

    return [
        CategoryMetrics(
            category=cat,
            count=len(cat_results),
            avg_accuracy=_mean([r.scores.accuracy for r in cat_results]),
            avg_helpfulness=_mean([r.scores.helpfulness for r in cat_results]),
            avg_citation_quality=_mean([r.scores.citation_quality for r in cat_results]),
            avg_overall=_mean([r.scores.overall for r in cat_results]),
            avg_keyword_recall_at_k={
                k: _mean([r.keyword_recall_at_k[k] for r in cat_results])
                for k in top_k_values
            },
            avg_reciprocal_rank=_mean([r.reciprocal_rank for r in cat_results]),
        )
        for cat, cat_results in sorted(by_cat.items())
    ]


def _compute_overall(
    results: list[QuestionResult],
    top_k_values: list[int],
) -> dict:
    """Overall averages; failed questions are counted but not averaged."""
    valid = [r for r in results if r.error is None]
    return {
        "num_questions": len(results),
        "valid_responses": len(valid),
        "avg_accuracy": _mean([r.scores.accuracy for r in valid]),
        "avg_helpfulness": _mean([r.scores.helpfulness for r in valid]),
        "avg_citation_quality": _mean([r.scores.citation_quality for r in valid]),
        "avg_overall": _mean([r.scores.overall for r in valid]),
        "avg_keyword_recall_at_k": {
            k: _mean([r.keyword_recall_at_k[k] for r in valid])
            for k in top_k_values
        },
        "avg_reciprocal_rank": _mean([r.reciprocal_rank for r in valid]),
    }
