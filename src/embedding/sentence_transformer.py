"""Sentence Transformer embedding provider implementation."""

import logging

from sentence_transformers import SentenceTransformer

from src.embedding.provider import EmbeddingProvider

logger = logging.getLogger(__name__)

# Instruction prefixes for asymmetric retrieval models: (passage, query)
MODEL_PREFIXES = {
    "intfloat/e5": ("passage: ", "query: "),
    "BAAI/bge": ("", "Represent this sentence for searching relevant passages: "),
}


def _prefixes_for(model_name: str) -> tuple[str, str]:
    for family, prefixes in MODEL_PREFIXES.items():
        if model_name.startswith(family):
            return prefixes
    return "", ""


class SentenceTransformerEmbeddingProvider(EmbeddingProvider):
    """Embedding provider wrapping sentence-transformers models.

    Default model: all-MiniLM-L6-v2 (384 dimensions).
    """

    def __init__(self, model_name: str = "all-MiniLM-L6-v2"):
        logger.info("Loading embedding model: %s", model_name)
        try:
            self._model = SentenceTransformer(model_name, local_files_only=True)
        except OSError:
            self._model = SentenceTransformer(model_name)
        self._passage_prefix, self._query_prefix = _prefixes_for(model_name)
        self._dimension = self._model.get_sentence_embedding_dimension()

    def embed(self, texts: list[str]) -> list[list[float]]:
        return self._encode([self._passage_prefix + t for t in texts])

    def embed_query(self, texts: list[str]) -> list[list[float]]:
        return self._encode([self._query_prefix + t for t in texts])

    def _encode(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            raise ValueError("texts must not be empty")
        embeddings = self._model.encode(texts, show_progress_bar=False)
        return embeddings.tolist()

    @property
    def dimension(self) -> int:
        return self._dimension
