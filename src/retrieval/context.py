"""Prompt context assembly from ranked search results."""

from src.models.search import SearchResult

DEFAULT_CONTEXT_MAX_LENGTH = 3000


def format_block(result: SearchResult) -> str:
    return f"Source: {result.title}\n{result.content}\n\n"


def build_context(
    results: list[SearchResult],
    max_length: int = DEFAULT_CONTEXT_MAX_LENGTH,
) -> str:
    """Concatenate result blocks in rank order without exceeding max_length.

    Stops before the first block that does not fit; blocks are never
    truncated. Returns an empty string if even the first block is too long.
    """
    blocks = []
    length = 0
    for result in results:
        block = format_block(result)
        if length + len(block) > max_length:
            break
        blocks.append(block)
        length += len(block)
    return "".join(blocks).strip()
