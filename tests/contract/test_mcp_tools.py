"""Contract tests for the MCP tool handlers."""

import asyncio
import json
import uuid

import pytest

from src.ingestion.indexer import DocumentIndexer
from src.mcp_server.server import (
    NO_RESULTS_SUMMARY,
    SUMMARY_LENGTH,
    create_server,
    handle_get_document,
    handle_screen_message,
    handle_search_knowledge,
    voice_summary,
)
from src.models.document import Document
from src.models.search import SearchResult
from src.retrieval.retriever import KnowledgeRetriever
from src.safety.screener import SafetyScreener
from src.vectorstore.chroma_store import ChromaVectorIndex


def _payload(contents):
    assert len(contents) == 1
    assert contents[0].type == "text"
    return json.loads(contents[0].text)


@pytest.fixture
def chroma_index():
    return ChromaVectorIndex(path=":memory:", dimension=384, collection_name=f"mcp_{uuid.uuid4().hex}")


@pytest.fixture
def retriever(embedding_provider, chroma_index):
    indexer = DocumentIndexer(embedding_provider, chroma_index, batch_delay=0)
    docs = [
        Document(title="Fees", content="There is no annual fee and no closing fee.\nAutopay is free.", source="faq"),
        Document(title="Rates", content="The APR is variable and follows the prime rate.", source="faq"),
    ]
    for doc in docs:
        asyncio.run(indexer.add_document(doc))
    return KnowledgeRetriever(embedding_provider, chroma_index)


class TestSearchKnowledge:
    def test_response_schema(self, retriever):
        payload = _payload(asyncio.run(handle_search_knowledge(retriever, {"query": "annual fee", "top_k": 2})))

        assert set(payload) == {"summary", "confidence", "results"}
        assert len(payload["results"]) == 2
        for result in payload["results"]:
            assert set(result) == {"id", "title", "content", "source", "chunk_index", "relevance_score"}
            assert 0.0 <= result["relevance_score"] <= 1.0
        assert payload["results"][0]["title"] == "Fees"
        assert "\n" not in payload["summary"]

    def test_top_k_capped(self, retriever):
        payload = _payload(asyncio.run(handle_search_knowledge(retriever, {"query": "fee", "top_k": 500})))
        assert len(payload["results"]) <= 20

    @pytest.mark.parametrize("query", ["", "   ", "x" * 1001])
    def test_invalid_query(self, retriever, query):
        payload = _payload(asyncio.run(handle_search_knowledge(retriever, {"query": query})))
        assert payload == {"error": "invalid_query"}

    def test_invalid_top_k(self, retriever):
        payload = _payload(asyncio.run(handle_search_knowledge(retriever, {"query": "fee", "top_k": 0})))
        assert payload == {"error": "invalid_top_k"}

    def test_empty_index(self, embedding_provider, memory_index):
        retriever = KnowledgeRetriever(embedding_provider, memory_index)
        payload = _payload(asyncio.run(handle_search_knowledge(retriever, {"query": "fee"})))
        assert payload["summary"] == NO_RESULTS_SUMMARY
        assert payload["results"] == []


class TestVoiceSummary:
    def test_long_content_is_truncated(self):
        result = SearchResult(id="a", score=0.9, title="T", content="word " * 100, source="faq")
        summary = voice_summary(result)
        assert len(summary) <= SUMMARY_LENGTH
        assert summary.endswith("...")

    def test_short_content_kept(self):
        result = SearchResult(id="a", score=0.9, title="T", content="Line one\nline two", source="faq")
        assert voice_summary(result) == "Line one line two"


class TestScreenMessage:
    def test_unsafe_message(self):
        payload = _payload(asyncio.run(handle_screen_message(SafetyScreener(), {"message": "What is my account balance?"})))
        assert payload["overall_safe"] is False
        assert payload["issues"][0]["category"] == "account_specific"
        assert payload["response"].startswith("Hi, I'm Sarah!")

    def test_safe_message(self):
        payload = _payload(asyncio.run(handle_screen_message(SafetyScreener(), {"message": "What is the interest rate?"})))
        assert payload["overall_safe"] is True
        assert payload["confidence"] == 100.0
        assert payload["response"] is None

    def test_invalid_message(self):
        payload = _payload(asyncio.run(handle_screen_message(SafetyScreener(), {"message": ""})))
        assert payload == {"error": "invalid_message"}


class TestGetDocument:
    def test_returns_all_chunks(self, retriever, chroma_index):
        payload = _payload(asyncio.run(handle_get_document(chroma_index, {"document_id": "faq_Fees"})))
        assert payload["title"] == "Fees"
        assert payload["chunk_count"] == 1
        assert "no annual fee" in payload["full_text"]

    def test_not_found(self, chroma_index):
        payload = _payload(asyncio.run(handle_get_document(chroma_index, {"document_id": "missing"})))
        assert payload == {"error": "not_found"}


class TestCreateServer:
    def test_builds_named_server(self, retriever):
        server = create_server(retriever, SafetyScreener())
        assert server.name == "support-knowledge"
