"""Conversation and chat reply data models."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime

from src.models.enums import MessageRole
from src.models.safety import SafetyVerdict


@dataclass
class ChatMessage:
    role: MessageRole
    content: str
    timestamp: datetime = field(default_factory=datetime.now)
    sources: list[dict] = field(default_factory=list)

    def __post_init__(self):
        if not isinstance(self.role, MessageRole):
            self.role = MessageRole(self.role)


@dataclass
class Conversation:
    """A chat session and its bounded message history."""

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    messages: list[ChatMessage] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)
    last_activity: datetime = field(default_factory=datetime.now)


@dataclass
class ChatReply:
    """What the user-facing layer returns for one turn."""

    message: str
    session_id: str
    agent_name: str
    sources: list[dict] = field(default_factory=list)
    safety: SafetyVerdict | None = None
    error: str | None = None

    def __post_init__(self):
        if not self.message:
            raise ValueError("message must not be empty")
