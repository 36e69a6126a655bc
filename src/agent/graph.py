"""LangGraph workflow definition for the support chat agent."""

from langgraph.graph import END, StateGraph

from src.agent.nodes import (
    assemble_context,
    generate_answer,
    refuse,
    screen_message,
    search_knowledge,
)
from src.agent.state import ChatState
from src.llm.completion import CompletionProvider
from src.retrieval.context import DEFAULT_CONTEXT_MAX_LENGTH
from src.retrieval.retriever import KnowledgeRetriever
from src.safety.screener import SafetyScreener


def _route_after_screen(state: ChatState) -> str:
    """Unsafe messages never reach retrieval or the model."""
    if state["verdict"].overall_safe:
        return "search_knowledge"
    return "refuse"


def build_graph(
    screener: SafetyScreener,
    retriever: KnowledgeRetriever,
    completion: CompletionProvider,
    top_k: int = 5,
    context_max_length: int = DEFAULT_CONTEXT_MAX_LENGTH,
    search_timeout: float | None = None,
):
    """Build the chat workflow.

    screen_message → refuse → END for unsafe messages, otherwise
    screen_message → search_knowledge → assemble_context → generate_answer → END.

    Returns:
        A compiled LangGraph StateGraph.
    """

    def _screen(state: ChatState) -> dict:
        return screen_message(state, screener)

    def _refuse(state: ChatState) -> dict:
        return refuse(state, screener)

    async def _search(state: ChatState) -> dict:
        return await search_knowledge(state, retriever, top_k=top_k, timeout=search_timeout)

    def _assemble(state: ChatState) -> dict:
        return assemble_context(state, max_length=context_max_length)

    async def _generate(state: ChatState) -> dict:
        return await generate_answer(state, completion)

    graph = StateGraph(ChatState)

    graph.add_node("screen_message", _screen)
    graph.add_node("refuse", _refuse)
    graph.add_node("search_knowledge", _search)
    graph.add_node("assemble_context", _assemble)
    graph.add_node("generate_answer", _generate)

    graph.set_entry_point("screen_message")

    graph.add_conditional_edges("screen_message", _route_after_screen)
    graph.add_edge("refuse", END)
    graph.add_edge("search_knowledge", "assemble_context")
    graph.add_edge("assemble_context", "generate_answer")
    graph.add_edge("generate_answer", END)

    return graph.compile()
