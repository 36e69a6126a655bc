"""Chat workflow nodes: screen, refuse, retrieve, assemble, generate."""

import logging

from src.agent.state import ChatState
from src.llm.completion import CompletionProvider
from src.retrieval.context import build_context
from src.retrieval.retriever import KnowledgeRetriever
from src.safety.screener import SafetyScreener

logger = logging.getLogger(__name__)


def screen_message(state: ChatState, screener: SafetyScreener) -> dict:
    """Run the safety screener; a screener failure counts as unsafe."""
    try:
        verdict = screener.screen(state["message"], {"session_id": state.get("session_id")})
    except Exception:
        logger.exception("Safety screening failed; refusing message")
        verdict = screener.fail_closed()
    return {"verdict": verdict}


def refuse(state: ChatState, screener: SafetyScreener) -> dict:
    """Log the violation and answer with the refusal for the first issue."""
    verdict = state["verdict"]
    screener.log_violation(verdict, state["message"], state.get("session_id"))
    return {
        "answer": screener.generate_response(verdict.issues),
        "sources": [],
        "refused": True,
    }


async def search_knowledge(
    state: ChatState,
    retriever: KnowledgeRetriever,
    top_k: int = 5,
    timeout: float | None = None,
) -> dict:
    results = await retriever.search(state["message"], top_k=top_k, timeout=timeout)
    logger.info("Retrieved %d knowledge chunks", len(results))
    return {"results": results}


def assemble_context(state: ChatState, max_length: int) -> dict:
    """Format retrieved results into prompt context and user-facing sources."""
    results = state.get("results", [])
    return {
        "context": build_context(results, max_length=max_length),
        "sources": [
            {"title": r.title, "source": r.source, "relevance_score": r.score}
            for r in results
        ],
    }


async def generate_answer(state: ChatState, completion: CompletionProvider) -> dict:
    answer = await completion.complete(
        state.get("history") or [{"role": "user", "content": state["message"]}],
        state.get("context", ""),
        is_first_message=state.get("is_first_message", False),
    )
    return {"answer": answer, "refused": False}
