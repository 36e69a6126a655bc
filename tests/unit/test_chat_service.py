"""Unit tests for the safety-gated chat service and its workflow."""

import asyncio
import logging
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from src.agent.chat_service import SupportChatService
from src.ingestion.indexer import DocumentIndexer
from src.models.document import Document
from src.retrieval.retriever import KnowledgeRetriever
from src.safety.screener import SafetyScreener
from src.sessions.store import ConversationStore


@pytest.fixture
def retriever(embedding_provider, memory_index):
    indexer = DocumentIndexer(embedding_provider, memory_index)
    asyncio.run(indexer.add_document(Document(
        title="Fees",
        content="There is no annual fee, no application fee and no closing fee.",
        source="faq",
    )))
    return KnowledgeRetriever(embedding_provider, memory_index)


@pytest.fixture
def service(retriever, completion, memory_index):
    return SupportChatService(
        screener=SafetyScreener(),
        retriever=retriever,
        completion=completion,
        store=ConversationStore(),
        index=memory_index,
    )


class TestProcessMessage:
    def test_safe_message_is_answered_and_recorded(self, service, completion):
        reply = asyncio.run(service.process_message("What fees does the card have?"))

        assert reply.message == completion.answer
        assert reply.agent_name == "Sarah"
        assert reply.error is None
        assert reply.safety.overall_safe
        assert reply.sources[0]["title"] == "Fees"
        assert reply.sources[0]["source"] == "faq"
        history = service.chat_history(reply.session_id)
        assert [m["role"] for m in history] == ["user", "assistant"]
        assert history[1]["sources"] == reply.sources

    def test_context_and_first_message_flag_reach_completion(self, service, completion):
        reply = asyncio.run(service.process_message("What fees does the card have?"))
        asyncio.run(service.process_message("And the closing fee?", session_id=reply.session_id))

        first, second = completion.calls
        assert first["is_first_message"] is True
        assert "Source: Fees" in first["context"]
        assert first["messages"] == [{"role": "user", "content": "What fees does the card have?"}]
        assert second["is_first_message"] is False
        assert [m["role"] for m in second["messages"]] == ["user", "assistant", "user"]
        assert second["messages"][-1]["content"] == "And the closing fee?"

    def test_unsafe_message_is_refused_and_not_recorded(self, service, completion, caplog):
        with caplog.at_level(logging.WARNING):
            reply = asyncio.run(service.process_message("What is my account balance?", session_id="s1"))

        assert reply.message.startswith("Hi, I'm Sarah! I cannot access your personal account information.")
        assert reply.sources == []
        assert reply.session_id == "s1"
        assert not reply.safety.overall_safe
        assert completion.calls == []
        assert service.chat_history("s1") == []
        assert "Safety violation" in caplog.text

    def test_refusal_without_session_gets_fresh_id(self, service):
        reply = asyncio.run(service.process_message("Should I sue my neighbour?"))
        assert reply.session_id
        assert reply.session_id not in service.store

    def test_screening_failure_fails_closed(self, retriever, completion):
        screener = SafetyScreener()
        screener.screen = MagicMock(side_effect=RuntimeError("boom"))
        service = SupportChatService(screener, retriever, completion)

        reply = asyncio.run(service.process_message("What fees are there?"))

        assert not reply.safety.overall_safe
        assert reply.safety.confidence == 0.0
        assert completion.calls == []

    def test_completion_failure_returns_fallback_reply(self, retriever, completion):
        completion.complete = MagicMock(side_effect=RuntimeError("LLM down"))
        service = SupportChatService(SafetyScreener(), retriever, completion)

        reply = asyncio.run(service.process_message("What fees are there?", session_id="s2"))

        assert reply.error == "LLM down"
        assert reply.session_id == "s2"
        assert reply.message == (
            "Hi, I'm Sarah! I'm sorry, I'm experiencing technical difficulties right now. "
            "Please try again in a moment, or contact Aven support directly at "
            "(888) 966-4655 or support@aven.com."
        )

    def test_timeout_returns_fallback_reply(self, retriever, completion):
        async def slow(messages, context, is_first_message=False):
            await asyncio.sleep(5)

        completion.complete = slow
        service = SupportChatService(SafetyScreener(), retriever, completion)

        reply = asyncio.run(service.process_message("What fees are there?", timeout=0.05))

        assert reply.error == "TimeoutError"
        assert "technical difficulties" in reply.message

    def test_index_outage_still_answers_from_fallback(self, embedding_provider, unavailable_index, completion):
        retriever = KnowledgeRetriever(embedding_provider, unavailable_index)
        service = SupportChatService(SafetyScreener(), retriever, completion)

        reply = asyncio.run(service.process_message("What is the interest rate?"))

        assert reply.error is None
        assert reply.sources
        assert all(s["source"] == "fallback" for s in reply.sources)


class TestSessionOperations:
    def test_clear_history(self, service):
        reply = asyncio.run(service.process_message("What fees are there?"))
        service.clear_history(reply.session_id)
        assert service.chat_history(reply.session_id) == []

    def test_cleanup_delegates_to_store(self, service):
        asyncio.run(service.process_message("What fees are there?"))
        assert service.cleanup(timedelta(hours=24)) == 0
        assert service.cleanup(timedelta(seconds=-1)) == 1

    def test_cleanup_uses_configured_max_age(self, retriever, completion):
        service = SupportChatService(
            SafetyScreener(), retriever, completion, session_max_age=timedelta(seconds=-1),
        )
        asyncio.run(service.process_message("What fees are there?"))
        assert service.cleanup() == 1
        assert len(service.store) == 0

    def test_end_session(self, service):
        reply = asyncio.run(service.process_message("What fees are there?"))
        assert service.end_session(reply.session_id) is True
        assert reply.session_id not in service.store

    def test_suggested_questions_use_company_name(self, service):
        questions = service.suggested_questions()
        assert len(questions) == 10
        assert questions[0] == "What is the Aven Card and how does it work?"


class TestHealth:
    def test_healthy(self, service, memory_index):
        status = asyncio.run(service.health())
        assert status["status"] == "healthy"
        assert status["total_vectors"] == len(memory_index.records)
        assert status["active_conversations"] == 0

    def test_degraded_when_index_fails(self, retriever, completion, unavailable_index):
        service = SupportChatService(SafetyScreener(), retriever, completion, index=unavailable_index)
        status = asyncio.run(service.health())
        assert status["status"] == "degraded"
        assert status["services"]["knowledge"] is False
        assert "index unreachable" in status["error"]

    def test_without_index(self, retriever, completion):
        status = asyncio.run(SupportChatService(SafetyScreener(), retriever, completion).health())
        assert status["status"] == "healthy"
        assert status["services"]["knowledge"] is False
