"""Document indexer: chunk → embed → upsert into the vector index."""

import asyncio
import logging

from src.embedding.provider import EmbeddingProvider
from src.ingestion.chunker import (
    DEFAULT_MAX_CHUNK_SIZE,
    DEFAULT_MIN_CHUNK_LENGTH,
    DEFAULT_OVERLAP_CHARS,
    chunk_document,
)
from src.models.chunk import Chunk, VectorRecord
from src.models.document import Document
from src.models.search import IndexResult, ReindexSummary
from src.vectorstore.index import VectorIndex

logger = logging.getLogger(__name__)


class IndexingError(RuntimeError):
    """A document could not be indexed; nothing was written for it."""


class ReindexError(RuntimeError):
    """Reindexing stopped partway. ``summary`` holds what was committed."""

    def __init__(self, message: str, summary: ReindexSummary):
        super().__init__(message)
        self.summary = summary


def build_records(
    document: Document,
    chunks: list[Chunk],
    embeddings: list[list[float]],
) -> list[VectorRecord]:
    """Pair chunks with their embeddings as deterministic-id vector records."""
    return [
        VectorRecord(
            id=document.vector_id(chunk.index),
            embedding=embedding,
            metadata={
                "title": document.title,
                "content": chunk.text,
                "source": document.source,
                "chunk_index": chunk.index,
                "total_chunks": chunk.total_chunks,
                "document_id": document.document_id,
                **document.metadata,
            },
        )
        for chunk, embedding in zip(chunks, embeddings)
    ]


class DocumentIndexer:
    """Turns documents into vector records in an external index.

    Embedding batches for one document are requested sequentially with a
    short pause between them to stay under provider rate limits.
    """

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        index: VectorIndex,
        chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
        chunk_overlap: int = DEFAULT_OVERLAP_CHARS,
        min_chunk_length: int = DEFAULT_MIN_CHUNK_LENGTH,
        batch_size: int = 100,
        batch_delay: float = 0.1,
    ):
        if batch_size <= 0:
            raise ValueError("batch_size must be > 0")
        self._embedder = embedding_provider
        self._index = index
        self._chunk_size = chunk_size
        self._chunk_overlap = chunk_overlap
        self._min_chunk_length = min_chunk_length
        self._batch_size = batch_size
        self._batch_delay = batch_delay

    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """Embed texts in sequential batches, preserving input order."""
        embeddings: list[list[float]] = []
        for start in range(0, len(texts), self._batch_size):
            batch = texts[start:start + self._batch_size]
            vectors = await asyncio.to_thread(self._embedder.embed, batch)
            if len(vectors) != len(batch):
                raise ValueError(
                    f"embedding provider returned {len(vectors)} vectors for {len(batch)} texts"
                )
            embeddings.extend(vectors)
            if start + self._batch_size < len(texts) and self._batch_delay > 0:
                await asyncio.sleep(self._batch_delay)
        return embeddings

    async def _prepare_records(self, document: Document) -> list[VectorRecord]:
        chunks = chunk_document(
            document,
            max_chunk_size=self._chunk_size,
            overlap_chars=self._chunk_overlap,
            min_chunk_length=self._min_chunk_length,
        )
        logger.info("Processing document %r: %d chunks", document.title, len(chunks))
        if not chunks:
            return []

        embeddings = await self.embed_texts([c.text for c in chunks])
        return build_records(document, chunks, embeddings)

    async def _prune_stale(self, document: Document, records: list[VectorRecord]) -> None:
        keep_ids = [r.id for r in records]
        try:
            removed = await asyncio.to_thread(self._index.delete_stale, document.document_id, keep_ids)
        except Exception as e:
            # New records are already written
            logger.warning("Could not remove stale chunks of %r: %s", document.title, e)
            return
        if removed:
            logger.info("Removed %d stale chunks of %r", removed, document.title)

    async def add_document(
        self,
        document: Document,
        timeout: float | None = None,
        prune: bool = True,
    ) -> IndexResult:
        """Chunk, embed and upsert one document.

        All embeddings are computed before the single upsert, so a failure
        leaves the index untouched for this document. The timeout bounds
        chunking and embedding only: once started, the upsert runs to
        completion, since a worker thread cannot be cancelled.

        Args:
            document: Document to index.
            timeout: Seconds allowed for chunking and embedding.
            prune: Delete chunks left over from an earlier, longer version
                of the same document.

        Raises:
            IndexingError: wrapping any embedding, upsert or timeout failure.
        """
        try:
            records = await asyncio.wait_for(self._prepare_records(document), timeout=timeout)
            written = await asyncio.to_thread(self._index.upsert, records) if records else 0
        except Exception as e:
            logger.error("Failed to add document %r: %s", document.title, e)
            raise IndexingError(f"Failed to add document: {str(e) or type(e).__name__}") from e

        if prune and records:
            await self._prune_stale(document, records)

        return IndexResult(
            document_id=document.document_id,
            chunks_processed=len(records),
            vectors_created=written,
        )

    async def reindex(
        self,
        documents: list[Document],
        clear: bool = True,
        timeout: float | None = None,
    ) -> ReindexSummary:
        """Rebuild the index from a document set.

        Not transactional: if a document fails, the ones before it stay
        indexed. Ids are deterministic, so re-running is safe.
        """
        summary = ReindexSummary()
        if clear:
            try:
                await asyncio.to_thread(self._index.delete_all)
            except Exception as e:
                raise ReindexError(f"Failed to clear index: {e}", summary) from e

        for document in documents:
            try:
                result = await self.add_document(document, timeout=timeout, prune=not clear)
            except IndexingError as e:
                raise ReindexError(
                    f"Reindexing stopped at {document.title!r} after "
                    f"{summary.documents_processed} documents: {e}",
                    summary,
                ) from e
            summary.documents_processed += 1
            summary.vectors_upserted += result.vectors_created

        logger.info(
            "Reindexed %d documents, %d vectors",
            summary.documents_processed, summary.vectors_upserted,
        )
        return summary
