"""Chunk and vector record data models."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Chunk:
    """A segment of a support document sized for embedding."""

    text: str
    index: int
    total_chunks: int
    document_id: str

    def __post_init__(self):
        if not self.text:
            raise ValueError("text must not be empty")
        if self.index < 0:
            raise ValueError("index must be >= 0")
        if self.total_chunks <= self.index:
            raise ValueError("total_chunks must be greater than index")


@dataclass
class VectorRecord:
    """The durable form of a chunk: its embedding plus retrieval metadata."""

    id: str
    embedding: list[float]
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.id:
            raise ValueError("id must not be empty")
        if not self.embedding:
            raise ValueError("embedding must not be empty")
