"""In-memory conversation store with bounded history and explicit eviction."""

import logging
from datetime import datetime, timedelta
from typing import Callable

from src.models.conversation import ChatMessage, Conversation
from src.models.enums import MessageRole

logger = logging.getLogger(__name__)

DEFAULT_MAX_MESSAGES = 10


class ConversationStore:
    """Per-session message logs keyed by session id.

    History is capped at ``max_messages`` (oldest dropped first). Nothing is
    evicted implicitly; call evict_expired() to sweep idle sessions.
    """

    def __init__(
        self,
        max_messages: int = DEFAULT_MAX_MESSAGES,
        clock: Callable[[], datetime] = datetime.now,
    ):
        if max_messages <= 0:
            raise ValueError("max_messages must be > 0")
        self._max_messages = max_messages
        self._clock = clock
        self._conversations: dict[str, Conversation] = {}

    def __len__(self) -> int:
        return len(self._conversations)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._conversations

    def get_or_create(self, session_id: str | None = None) -> Conversation:
        """Return the session, creating it (with a fresh id if None) if needed."""
        if session_id is not None and session_id in self._conversations:
            return self._conversations[session_id]

        now = self._clock()
        conversation = Conversation(created_at=now, last_activity=now)
        if session_id is not None:
            conversation.id = session_id
        self._conversations[conversation.id] = conversation
        return conversation

    def add_message(
        self,
        session_id: str,
        role: MessageRole | str,
        content: str,
        sources: list[dict] | None = None,
    ) -> Conversation:
        conversation = self.get_or_create(session_id)
        now = self._clock()
        conversation.messages.append(ChatMessage(
            role=role,
            content=content,
            timestamp=now,
            sources=list(sources or []),
        ))
        conversation.last_activity = now
        if len(conversation.messages) > self._max_messages:
            conversation.messages = conversation.messages[-self._max_messages:]
        return conversation

    def messages(self, session_id: str) -> list[ChatMessage]:
        conversation = self._conversations.get(session_id)
        return list(conversation.messages) if conversation else []

    def history(self, session_id: str, exclude_system: bool = True) -> list[dict]:
        """Role/content pairs in order, ready for a completion call."""
        return [
            {"role": m.role.value, "content": m.content}
            for m in self.messages(session_id)
            if not (exclude_system and m.role == MessageRole.SYSTEM)
        ]

    def clear(self, session_id: str) -> None:
        conversation = self._conversations.get(session_id)
        if conversation:
            conversation.messages = []
            conversation.last_activity = self._clock()

    def remove(self, session_id: str) -> bool:
        """Forget a session entirely. Returns False if it did not exist."""
        return self._conversations.pop(session_id, None) is not None

    def stats(self, session_id: str) -> dict | None:
        conversation = self._conversations.get(session_id)
        if conversation is None:
            return None
        roles = [m.role for m in conversation.messages]
        return {
            "session_id": session_id,
            "total_messages": len(roles),
            "user_messages": roles.count(MessageRole.USER),
            "assistant_messages": roles.count(MessageRole.ASSISTANT),
            "created_at": conversation.created_at,
            "last_activity": conversation.last_activity,
            "duration": self._clock() - conversation.created_at,
        }

    def evict_expired(self, max_age: timedelta) -> int:
        """Delete sessions idle for longer than max_age. Returns the count."""
        cutoff = self._clock() - max_age
        expired = [
            session_id
            for session_id, conversation in self._conversations.items()
            if conversation.last_activity < cutoff
        ]
        for session_id in expired:
            del self._conversations[session_id]
        if expired:
            logger.info("Evicted %d idle conversations", len(expired))
        return len(expired)
