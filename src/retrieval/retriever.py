"""Knowledge retriever with a static fallback for index outages."""

import asyncio
import logging

from src.embedding.provider import EmbeddingProvider
from src.models.search import IndexMatch, SearchResult
from src.retrieval.fallback import FALLBACK_CORPUS, FallbackEntry, rank_fallback
from src.vectorstore.index import VectorIndex

logger = logging.getLogger(__name__)


def match_to_result(match: IndexMatch) -> SearchResult:
    """Map a raw index match to a SearchResult, defaulting missing metadata."""
    metadata = match.metadata or {}
    try:
        chunk_index = int(metadata.get("chunk_index") or 0)
    except (TypeError, ValueError):
        chunk_index = 0
    return SearchResult(
        id=match.id,
        score=max(0.0, min(1.0, float(match.score))),
        title=metadata.get("title") or "Unknown",
        content=metadata.get("content") or "",
        source=metadata.get("source") or "unknown",
        chunk_index=chunk_index,
    )


class KnowledgeRetriever:
    """Semantic search over the support knowledge base.

    If the embedding model or vector index fails (or the call times out),
    search() serves the fallback corpus instead of raising.
    """

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        index: VectorIndex,
        fallback_corpus: tuple[FallbackEntry, ...] = FALLBACK_CORPUS,
        timeout: float | None = None,
    ):
        self._embedder = embedding_provider
        self._index = index
        self._fallback_corpus = fallback_corpus
        self._timeout = timeout

    async def _search_index(self, query: str, top_k: int) -> list[SearchResult]:
        vector = await asyncio.to_thread(self._embedder.embed_search_query, query)
        matches = await asyncio.to_thread(self._index.query, vector, top_k)
        results = [match_to_result(m) for m in matches[:top_k]]
        results.sort(key=lambda r: r.score, reverse=True)
        return results

    async def search(
        self,
        query: str,
        top_k: int = 5,
        timeout: float | None = None,
    ) -> list[SearchResult]:
        """Return up to top_k results for the query, highest score first.

        Args:
            query: Natural language question.
            top_k: Maximum number of results (>= 1).
            timeout: Seconds to wait for the live path; overrides the
                retriever default.
        """
        if top_k < 1:
            raise ValueError("top_k must be >= 1")
        if not query.strip():
            return []

        try:
            return await asyncio.wait_for(
                self._search_index(query, top_k),
                timeout=timeout if timeout is not None else self._timeout,
            )
        except Exception as e:
            logger.warning(
                "Knowledge search failed, serving fallback answers: %s",
                str(e) or type(e).__name__,
            )
            return rank_fallback(query, top_k, self._fallback_corpus)
