"""Sentence-based text chunker with word-level overlap."""

import re

from src.models.chunk import Chunk
from src.models.document import Document

SENTENCE_TERMINATORS = re.compile(r"[.!?]+")

# Average English word length including the trailing space, used to turn an
# overlap budget in characters into a number of trailing words.
AVERAGE_WORD_LENGTH = 6

DEFAULT_MAX_CHUNK_SIZE = 1000
DEFAULT_OVERLAP_CHARS = 200
DEFAULT_MIN_CHUNK_LENGTH = 20


def split_sentences(text: str) -> list[str]:
    """Split text on sentence terminators, dropping empty sentences."""
    return [s.strip() for s in SENTENCE_TERMINATORS.split(text) if s.strip()]


def _get_overlap_words(chunk: str, overlap_chars: int) -> list[str]:
    """Trailing words of a closed chunk that seed the next one."""
    n_words = overlap_chars // AVERAGE_WORD_LENGTH
    if n_words <= 0:
        return []
    return chunk.split()[-n_words:]


def _seed_buffer(overlap_words: list[str], sentence: str, max_chunk_size: int) -> str:
    """Start a new buffer with as much overlap as fits next to the sentence."""
    words = list(overlap_words)
    while words:
        candidate = " ".join(words) + " " + sentence + ". "
        if len(candidate.rstrip()) <= max_chunk_size:
            return candidate
        words.pop(0)
    return sentence + ". "


def chunk_text(
    text: str,
    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
    overlap_chars: int = DEFAULT_OVERLAP_CHARS,
    min_chunk_length: int = DEFAULT_MIN_CHUNK_LENGTH,
) -> list[str]:
    """Split text into bounded, overlapping chunks on sentence boundaries.

    Args:
        text: Raw document text.
        max_chunk_size: Maximum characters per chunk. A single sentence longer
            than this is emitted verbatim as its own chunk.
        overlap_chars: Approximate characters of trailing context carried from
            one chunk into the next, rounded to whole words.
        min_chunk_length: Chunks shorter than this are dropped as noise,
            unless that would drop every chunk.

    Returns:
        List of chunk strings, in document order. Empty for empty input.
    """
    if max_chunk_size <= 0:
        raise ValueError("max_chunk_size must be > 0")

    stripped = text.strip()
    sentences = split_sentences(stripped)
    if not sentences:
        return []

    if len(stripped) <= max_chunk_size:
        return [stripped]

    chunks: list[str] = []
    current = ""

    for sentence in sentences:
        if len(sentence) + 1 > max_chunk_size:
            # Oversized sentence: flush what we have and keep it whole
            if current:
                chunks.append(current.strip())
                current = ""
            chunks.append(sentence + ".")
            continue

        candidate = current + sentence + ". "
        if len(candidate.rstrip()) <= max_chunk_size:
            current = candidate
        else:
            closed = current.strip()
            chunks.append(closed)
            overlap_words = _get_overlap_words(closed, overlap_chars)
            current = _seed_buffer(overlap_words, sentence, max_chunk_size)

    if current.strip():
        chunks.append(current.strip())

    kept = [c for c in chunks if len(c) >= min_chunk_length]
    return kept or chunks[:1]


def chunk_document(
    document: Document,
    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
    overlap_chars: int = DEFAULT_OVERLAP_CHARS,
    min_chunk_length: int = DEFAULT_MIN_CHUNK_LENGTH,
) -> list[Chunk]:
    """Split a document's content into indexed chunks."""
    texts = chunk_text(
        document.content,
        max_chunk_size=max_chunk_size,
        overlap_chars=overlap_chars,
        min_chunk_length=min_chunk_length,
    )
    return [
        Chunk(
            text=text,
            index=idx,
            total_chunks=len(texts),
            document_id=document.document_id,
        )
        for idx, text in enumerate(texts)
    ]
