"""Knowledge Document data model."""

import re
from dataclasses import dataclass, field
from typing import Any


def title_slug(title: str) -> str:
    """Replace every whitespace run in a title with a single underscore."""
    return re.sub(r"\s+", "_", title)


@dataclass(frozen=True)
class Document:
    """A piece of support knowledge (FAQ, product overview, policy page)."""

    title: str
    content: str
    source: str = "manual"
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.title:
            raise ValueError("title must not be empty")
        if not self.source:
            raise ValueError("source must not be empty")

    @property
    def document_id(self) -> str:
        return f"{self.source}_{title_slug(self.title)}"

    def vector_id(self, chunk_index: int) -> str:
        """Deterministic vector id for one chunk of this document."""
        return f"{self.document_id}_chunk_{chunk_index}"
