"""Abstract vector index interface."""

from abc import ABC, abstractmethod

from src.models.chunk import VectorRecord
from src.models.search import IndexMatch, IndexStats


class VectorIndex(ABC):
    """Storage for (vector, metadata) records answering similarity queries.

    Upserts are idempotent: writing a record whose id already exists replaces
    it. Implementations are synchronous; async callers run them in a worker
    thread.
    """

    @property
    @abstractmethod
    def dimension(self) -> int:
        """The configured vector dimension."""
        ...

    @abstractmethod
    def upsert(self, records: list[VectorRecord]) -> int:
        """Insert or replace records. Returns the number written."""
        ...

    @abstractmethod
    def query(self, vector: list[float], top_k: int = 5) -> list[IndexMatch]:
        """Return up to top_k matches, most similar first, scores in [0, 1]."""
        ...

    @abstractmethod
    def delete_stale(self, document_id: str, keep_ids: list[str]) -> int:
        """Delete a document's records whose ids are not in keep_ids.

        Returns the number deleted.
        """
        ...

    @abstractmethod
    def delete_all(self) -> None:
        ...

    @abstractmethod
    def describe_stats(self) -> IndexStats:
        ...

    def close(self) -> None:
        """Release client resources. Default is a no-op."""
