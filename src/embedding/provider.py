"""Embedding provider interface used by the indexer and the retriever."""

from abc import ABC, abstractmethod


class EmbeddingProvider(ABC):
    """Turns support text into fixed-length vectors.

    Every vector has ``dimension`` entries, which must equal the dimension
    of the vector index the records are written to.
    """

    @property
    @abstractmethod
    def dimension(self) -> int:
        ...

    @abstractmethod
    def embed(self, texts: list[str]) -> list[list[float]]:
        """Embed knowledge-base chunks.

        Returns one vector per text, in input order. Raises ValueError for
        an empty batch.
        """
        ...

    def embed_query(self, texts: list[str]) -> list[list[float]]:
        """Embed user queries. Same as embed() unless the model is asymmetric."""
        return self.embed(texts)

    def embed_search_query(self, query: str) -> list[float]:
        """Single-query convenience for the retriever."""
        vectors = self.embed_query([query])
        if len(vectors) != 1:
            raise ValueError(f"expected one query vector, got {len(vectors)}")
        return vectors[0]
