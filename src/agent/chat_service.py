"""Support chat service: safety-gated RAG turns over per-session history."""

import asyncio
import logging
import uuid
from datetime import datetime, timedelta

from src.agent.graph import build_graph
from src.agent.state import ChatState
from src.llm.completion import CompletionProvider
from src.models.conversation import ChatReply
from src.models.enums import MessageRole
from src.retrieval.context import DEFAULT_CONTEXT_MAX_LENGTH
from src.retrieval.retriever import KnowledgeRetriever
from src.safety.screener import SafetyScreener
from src.sessions.store import ConversationStore
from src.vectorstore.index import VectorIndex

logger = logging.getLogger(__name__)

DEFAULT_SESSION_MAX_AGE = timedelta(hours=24)

SUGGESTED_QUESTIONS = (
    "What is the {company} Card and how does it work?",
    "What are the eligibility requirements for the {company} Card?",
    "How does the interest rate work on the {company} Card?",
    "Can I use my {company} Card for cash advances?",
    "How do I make payments on my {company} Card?",
    "What is the maximum credit line available?",
    "How do I apply for a {company} Card?",
    "What fees are associated with the {company} Card?",
    "How do balance transfers work?",
    "Can I get cashback rewards with the {company} Card?",
)


class SupportChatService:
    """User-facing entry point for one chat turn.

    process_message() never raises: screening failures refuse the message
    and any other failure returns a fixed technical-difficulties reply.
    """

    def __init__(
        self,
        screener: SafetyScreener,
        retriever: KnowledgeRetriever,
        completion: CompletionProvider,
        store: ConversationStore | None = None,
        index: VectorIndex | None = None,
        top_k: int = 5,
        context_max_length: int = DEFAULT_CONTEXT_MAX_LENGTH,
        search_timeout: float | None = None,
        session_max_age: timedelta = DEFAULT_SESSION_MAX_AGE,
    ):
        self._screener = screener
        self._session_max_age = session_max_age
        self._store = store or ConversationStore()
        self._index = index
        self._graph = build_graph(
            screener,
            retriever,
            completion,
            top_k=top_k,
            context_max_length=context_max_length,
            search_timeout=search_timeout,
        )

    @property
    def agent_name(self) -> str:
        return self._screener.policy.agent_name

    @property
    def store(self) -> ConversationStore:
        return self._store

    def fallback_message(self) -> str:
        policy = self._screener.policy
        return (
            f"Hi, I'm {policy.agent_name}! I'm sorry, I'm experiencing technical difficulties "
            f"right now. Please try again in a moment, or contact {policy.company_name} support "
            f"directly at {policy.support_phone} or {policy.support_email}."
        )

    async def _run_turn(self, message: str, session_id: str | None) -> ChatReply:
        prior = self._store.history(session_id) if session_id in self._store else []
        state: ChatState = {
            "message": message,
            "session_id": session_id or "",
            "history": prior + [{"role": MessageRole.USER.value, "content": message}],
            "is_first_message": not prior,
        }
        result = await self._graph.ainvoke(state)
        verdict = result["verdict"]

        if result.get("refused"):
            return ChatReply(
                message=result["answer"],
                session_id=session_id or str(uuid.uuid4()),
                agent_name=self.agent_name,
                sources=[],
                safety=verdict,
            )

        conversation = self._store.get_or_create(session_id)
        sources = result.get("sources", [])
        self._store.add_message(conversation.id, MessageRole.USER, message)
        self._store.add_message(conversation.id, MessageRole.ASSISTANT, result["answer"], sources=sources)
        logger.info("%s processed message for session %s", self.agent_name, conversation.id)

        return ChatReply(
            message=result["answer"],
            session_id=conversation.id,
            agent_name=self.agent_name,
            sources=sources,
            safety=verdict,
        )

    async def process_message(
        self,
        message: str,
        session_id: str | None = None,
        timeout: float | None = None,
    ) -> ChatReply:
        """Screen, retrieve and answer one user message.

        Args:
            message: The user's message.
            session_id: Existing session to continue; a new one is created if None.
            timeout: Overall seconds allowed for the turn.

        Returns:
            ChatReply. Refusals carry the failing verdict and are not written
            to history. On an unexpected error ``error`` is set and the
            message is the technical-difficulties reply.
        """
        try:
            return await asyncio.wait_for(self._run_turn(message, session_id), timeout=timeout)
        except Exception as e:
            logger.error("Failed to process message: %s", str(e) or type(e).__name__, exc_info=True)
            return ChatReply(
                message=self.fallback_message(),
                session_id=session_id or str(uuid.uuid4()),
                agent_name=self.agent_name,
                sources=[],
                error=str(e) or type(e).__name__,
            )

    def suggested_questions(self) -> list[str]:
        company = self._screener.policy.company_name
        return [q.format(company=company) for q in SUGGESTED_QUESTIONS]

    def chat_history(self, session_id: str) -> list[dict]:
        return [
            {
                "role": m.role.value,
                "content": m.content,
                "timestamp": m.timestamp,
                "sources": m.sources,
            }
            for m in self._store.messages(session_id)
        ]

    def clear_history(self, session_id: str) -> None:
        self._store.clear(session_id)

    def end_session(self, session_id: str) -> bool:
        return self._store.remove(session_id)

    def cleanup(self, max_age: timedelta | None = None) -> int:
        """Drop sessions idle for longer than max_age (default: the configured max age)."""
        if max_age is None:
            max_age = self._session_max_age
        return self._store.evict_expired(max_age)

    async def health(self) -> dict:
        """Report service status; the index is probed when one is attached."""
        status = {
            "status": "healthy",
            "active_conversations": len(self._store),
            "services": {"chat": True, "knowledge": self._index is not None},
            "timestamp": datetime.now(),
        }
        if self._index is None:
            return status
        try:
            stats = await asyncio.to_thread(self._index.describe_stats)
        except Exception as e:
            logger.warning("Vector index health check failed: %s", e)
            status["status"] = "degraded"
            status["services"]["knowledge"] = False
            status["error"] = str(e) or type(e).__name__
        else:
            status["total_vectors"] = stats.total_vector_count
        return status
