"""ChromaDB vector index for support knowledge chunks."""

import json
import logging
from typing import Any

import chromadb
from chromadb.config import Settings as ChromaSettings

from src.models.chunk import VectorRecord
from src.models.search import IndexMatch, IndexStats
from src.vectorstore.index import VectorIndex

logger = logging.getLogger(__name__)

COLLECTION_NAME = "support_knowledge"
SCALAR_TYPES = (str, int, float, bool)


def _sanitize_metadata(metadata: dict[str, Any]) -> dict[str, Any]:
    """Coerce metadata to the scalar types ChromaDB accepts.

    None values are dropped; lists and dicts are stored as JSON strings.
    """
    clean = {}
    for key, value in metadata.items():
        if value is None:
            continue
        if isinstance(value, SCALAR_TYPES):
            clean[key] = value
        else:
            clean[key] = json.dumps(value, default=str)
    return clean


def distance_to_score(distance: float) -> float:
    """Map ChromaDB cosine distance [0, 2] to a similarity score in [0, 1]."""
    return max(0.0, min(1.0, 1.0 - distance / 2.0))


class ChromaVectorIndex(VectorIndex):
    """ChromaDB-backed vector index.

    Manages a single cosine-distance collection. Use path=":memory:" for an
    ephemeral in-process client.
    """

    def __init__(
        self,
        path: str = "./data/chroma",
        dimension: int = 384,
        collection_name: str = COLLECTION_NAME,
    ):
        if path == ":memory:":
            self._client = chromadb.Client()
        else:
            self._client = chromadb.PersistentClient(
                path=path,
                settings=ChromaSettings(anonymized_telemetry=False),
            )
        self._dimension = dimension
        self._collection_name = collection_name
        self._collection = self._get_or_create_collection()

    def _get_or_create_collection(self):
        return self._client.get_or_create_collection(
            name=self._collection_name,
            metadata={"hnsw:space": "cosine"},
        )

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def count(self) -> int:
        """Return the number of vectors in the collection."""
        return self._collection.count()

    def upsert(self, records: list[VectorRecord]) -> int:
        if not records:
            return 0

        for record in records:
            if len(record.embedding) != self._dimension:
                raise ValueError(
                    f"embedding dimension must be {self._dimension}, "
                    f"got {len(record.embedding)} for {record.id}"
                )

        self._collection.upsert(
            ids=[r.id for r in records],
            embeddings=[r.embedding for r in records],
            documents=[str(r.metadata.get("content", "")) for r in records],
            metadatas=[_sanitize_metadata(r.metadata) for r in records],
        )
        logger.info("Upserted %d vectors into %s", len(records), self._collection_name)
        return len(records)

    def query(self, vector: list[float], top_k: int = 5) -> list[IndexMatch]:
        total = self._collection.count()
        if total == 0 or top_k <= 0:
            return []

        results = self._collection.query(
            query_embeddings=[vector],
            n_results=min(top_k, total),
            include=["metadatas", "distances"],
        )

        matches = []
        if results["ids"] and results["ids"][0]:
            for i, vector_id in enumerate(results["ids"][0]):
                metadata = results["metadatas"][0][i] if results["metadatas"] else {}
                distance = results["distances"][0][i] if results["distances"] else 2.0
                matches.append(IndexMatch(
                    id=vector_id,
                    score=distance_to_score(distance),
                    metadata=dict(metadata or {}),
                ))
        return matches

    def get_document_chunks(self, document_id: str) -> list[IndexMatch]:
        """Return every stored chunk of a document, ordered by chunk index."""
        results = self._collection.get(
            where={"document_id": document_id},
            include=["metadatas"],
        )
        chunks = [
            IndexMatch(id=vector_id, score=1.0, metadata=dict(metadata or {}))
            for vector_id, metadata in zip(results["ids"], results["metadatas"] or [])
        ]
        chunks.sort(key=lambda m: m.metadata.get("chunk_index", 0))
        return chunks

    def delete_stale(self, document_id: str, keep_ids: list[str]) -> int:
        existing = self._collection.get(where={"document_id": document_id}, include=[])
        keep = set(keep_ids)
        stale = [vector_id for vector_id in existing["ids"] if vector_id not in keep]
        if stale:
            self._collection.delete(ids=stale)
            logger.info("Deleted %d stale vectors of %s", len(stale), document_id)
        return len(stale)

    def delete_all(self) -> None:
        logger.info("Clearing collection %s", self._collection_name)
        self._client.delete_collection(self._collection_name)
        self._collection = self._get_or_create_collection()

    def describe_stats(self) -> IndexStats:
        return IndexStats(
            dimension=self._dimension,
            total_vector_count=self._collection.count(),
            index_fullness=0.0,
        )
