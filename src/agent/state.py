"""Chat workflow state definition for the LangGraph workflow."""

from typing import TypedDict

from src.models.safety import SafetyVerdict
from src.models.search import SearchResult


class ChatState(TypedDict, total=False):
    """State object passed through the chat workflow."""
    message: str
    session_id: str
    history: list[dict]  # prior turns plus the current user message
    is_first_message: bool
    verdict: SafetyVerdict
    results: list[SearchResult]
    context: str
    sources: list[dict]
    answer: str | None
    refused: bool
