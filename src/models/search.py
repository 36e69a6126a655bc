"""Search result and vector index data models."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class SearchResult:
    """A ranked knowledge chunk returned for a query."""

    id: str
    score: float
    title: str
    content: str
    source: str
    chunk_index: int = 0

    def __post_init__(self):
        if not 0.0 <= self.score <= 1.0:
            raise ValueError(f"score must be between 0.0 and 1.0, got {self.score}")


@dataclass
class IndexMatch:
    """A raw nearest-neighbour match from the vector index."""

    id: str
    score: float
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class IndexStats:
    dimension: int
    total_vector_count: int
    index_fullness: float = 0.0


@dataclass
class IndexResult:
    """Outcome of indexing a single document."""

    document_id: str
    chunks_processed: int
    vectors_created: int


@dataclass
class ReindexSummary:
    documents_processed: int = 0
    vectors_upserted: int = 0
