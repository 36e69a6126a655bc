"""Shared test doubles: deterministic embeddings, in-memory index, canned LLM."""

import hashlib
import math
import re

import pytest

from src.embedding.provider import EmbeddingProvider
from src.llm.completion import CompletionProvider
from src.models.chunk import VectorRecord
from src.models.safety import SafetyPolicy
from src.models.search import IndexMatch, IndexStats
from src.vectorstore.index import VectorIndex

TEST_DIMENSION = 384


class HashingEmbeddingProvider(EmbeddingProvider):
    """Bag-of-words vectors hashed into a fixed dimension and L2-normalised.

    Texts that share words get similar vectors, which is enough to make
    retrieval results meaningful without loading a model.
    """

    def __init__(self, dimension: int = TEST_DIMENSION):
        self._dimension = dimension
        self.calls: list[list[str]] = []

    def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            raise ValueError("texts must not be empty")
        self.calls.append(list(texts))
        return [self._vector(t) for t in texts]

    def _vector(self, text: str) -> list[float]:
        vec = [0.0] * self._dimension
        for word in re.findall(r"\w+", text.lower()):
            idx = int(hashlib.md5(word.encode()).hexdigest(), 16) % self._dimension
            vec[idx] += 1.0
        norm = math.sqrt(sum(v * v for v in vec))
        if norm == 0:
            vec[0] = 1.0
            return vec
        return [v / norm for v in vec]

    @property
    def dimension(self) -> int:
        return self._dimension


class InMemoryVectorIndex(VectorIndex):
    """Dict-backed index scoring by cosine similarity mapped to [0, 1]."""

    def __init__(self, dimension: int = TEST_DIMENSION):
        self._dimension = dimension
        self.records: dict[str, VectorRecord] = {}
        self.upsert_calls = 0

    @property
    def dimension(self) -> int:
        return self._dimension

    def upsert(self, records: list[VectorRecord]) -> int:
        self.upsert_calls += 1
        for record in records:
            if len(record.embedding) != self._dimension:
                raise ValueError("dimension mismatch")
            self.records[record.id] = record
        return len(records)

    def query(self, vector: list[float], top_k: int = 5) -> list[IndexMatch]:
        matches = []
        for record in self.records.values():
            cosine = sum(a * b for a, b in zip(vector, record.embedding))
            matches.append(IndexMatch(
                id=record.id,
                score=max(0.0, min(1.0, (1.0 + cosine) / 2.0)),
                metadata=dict(record.metadata),
            ))
        matches.sort(key=lambda m: m.score, reverse=True)
        return matches[:top_k]

    def delete_stale(self, document_id: str, keep_ids: list[str]) -> int:
        stale = [
            record_id for record_id, record in self.records.items()
            if record.metadata.get("document_id") == document_id and record_id not in keep_ids
        ]
        for record_id in stale:
            del self.records[record_id]
        return len(stale)

    def delete_all(self) -> None:
        self.records.clear()

    def describe_stats(self) -> IndexStats:
        return IndexStats(dimension=self._dimension, total_vector_count=len(self.records))


class UnavailableVectorIndex(InMemoryVectorIndex):
    """Index whose every network call fails."""

    def upsert(self, records):
        raise ConnectionError("index unreachable")

    def query(self, vector, top_k=5):
        raise ConnectionError("index unreachable")

    def delete_stale(self, document_id, keep_ids):
        raise ConnectionError("index unreachable")

    def delete_all(self):
        raise ConnectionError("index unreachable")

    def describe_stats(self):
        raise ConnectionError("index unreachable")


class CannedCompletionProvider(CompletionProvider):
    """Returns a fixed answer and records what it was asked."""

    def __init__(self, answer: str = "The Aven Card has no annual fee. Please contact support for more."):
        self.answer = answer
        self.calls: list[dict] = []

    async def complete(self, messages, context, is_first_message=False):
        self.calls.append({
            "messages": [dict(m) for m in messages],
            "context": context,
            "is_first_message": is_first_message,
        })
        return self.answer


@pytest.fixture
def embedding_provider():
    return HashingEmbeddingProvider()


@pytest.fixture
def memory_index():
    return InMemoryVectorIndex()


@pytest.fixture
def policy():
    return SafetyPolicy()


@pytest.fixture
def unavailable_index():
    return UnavailableVectorIndex()


@pytest.fixture
def completion():
    return CannedCompletionProvider()
