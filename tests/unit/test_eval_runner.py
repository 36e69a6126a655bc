"""Unit tests for the evaluation runner."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.agent.chat_service import SupportChatService
from src.evaluation.eval_runner import load_questions, run_evaluation
from src.models.conversation import ChatReply
from src.models.evaluation import EvalQuestion
from src.models.search import SearchResult
from src.retrieval.retriever import KnowledgeRetriever
from src.safety.screener import SafetyScreener
from src.sessions.store import ConversationStore

QUESTIONS = [
    EvalQuestion(id=1, category="fees", question="Are there fees?", expected_keywords=["annual fee"]),
    EvalQuestion(id=2, category="fees", question="Closing costs?", expected_keywords=["closing fee"]),
    EvalQuestion(id=3, category="rates", question="What is the APR?", expected_keywords=["apr", "prime"]),
]


def _chat(replies: dict[str, ChatReply]):
    chat = MagicMock()
    chat.process_message = AsyncMock(side_effect=lambda question: replies[question])
    return chat


def _reply(message: str, error: str | None = None) -> ChatReply:
    return ChatReply(
        message=message,
        session_id="s",
        agent_name="Sarah",
        sources=[{"title": "Fees", "source": "faq", "relevance_score": 0.8}],
        error=error,
    )


def _retriever():
    retriever = MagicMock()
    retriever.search = AsyncMock(return_value=[
        SearchResult(id="a", score=0.9, title="Fees", content="No annual fee and no closing fee.", source="faq"),
        SearchResult(id="b", score=0.5, title="Rates", content="Variable APR tied to the prime rate.", source="faq"),
    ])
    return retriever


class TestRunEvaluation:
    def test_aggregates_by_category(self):
        chat = _chat({
            "Are there fees?": _reply("There is no annual fee."),
            "Closing costs?": _reply("There is no closing fee."),
            "What is the APR?": _reply("The APR follows the prime rate."),
        })

        report = asyncio.run(run_evaluation(QUESTIONS, chat, _retriever(), top_k_values=[1, 2], delay=0))

        assert report.overall_metrics["num_questions"] == 3
        assert report.overall_metrics["valid_responses"] == 3
        assert [c.category for c in report.per_category] == ["fees", "rates"]
        fees = report.per_category[0]
        assert fees.count == 2
        assert fees.avg_keyword_recall_at_k == {1: 1.0, 2: 1.0}
        rates = report.per_category[1]
        assert rates.avg_keyword_recall_at_k == {1: 0.0, 2: 1.0}
        assert rates.avg_reciprocal_rank == 0.5
        assert all(qr.error is None for qr in report.per_question)

    def test_failed_questions_are_excluded_from_averages(self):
        chat = _chat({
            "Are there fees?": _reply("There is no annual fee."),
            "Closing costs?": _reply("Hi, I'm Sarah! Technical difficulties.", error="LLM down"),
            "What is the APR?": _reply("The APR follows the prime rate."),
        })

        report = asyncio.run(run_evaluation(QUESTIONS, chat, _retriever(), top_k_values=[2], delay=0))

        failed = report.per_question[1]
        assert failed.error == "LLM down"
        assert failed.scores.overall == 0.0
        assert report.overall_metrics["valid_responses"] == 2
        assert report.per_category[0].count == 1

    def test_all_failed(self):
        chat = MagicMock()
        chat.process_message = AsyncMock(side_effect=RuntimeError("down"))

        report = asyncio.run(run_evaluation(QUESTIONS, chat, _retriever(), delay=0))

        assert report.overall_metrics["valid_responses"] == 0
        assert report.overall_metrics["avg_overall"] == 0.0
        assert report.per_category == []

    def test_sessions_are_not_left_behind(self, embedding_provider, memory_index, completion):
        retriever = KnowledgeRetriever(embedding_provider, memory_index)
        service = SupportChatService(SafetyScreener(), retriever, completion, store=ConversationStore())

        report = asyncio.run(run_evaluation(QUESTIONS, service, retriever, top_k_values=[2], delay=0))

        assert report.overall_metrics["valid_responses"] == 3
        assert len(service.store) == 0


class TestLoadQuestions:
    def test_loads_entries(self, tmp_path):
        path = tmp_path / "q.json"
        path.write_text(json.dumps([
            {"id": 1, "category": "fees", "question": "Fees?", "expected_keywords": ["fee"]},
        ]))

        questions = load_questions(path)

        assert questions[0].difficulty == "medium"
        assert questions[0].type == "factual"

    def test_missing_field(self, tmp_path):
        path = tmp_path / "q.json"
        path.write_text(json.dumps([{"id": 1, "question": "Fees?"}]))
        with pytest.raises(ValueError, match="Invalid evaluation question"):
            load_questions(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValueError):
            load_questions(tmp_path / "none.json")
