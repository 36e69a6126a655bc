"""MCP server exposing support knowledge search and safety screening tools."""

import asyncio
import json
import logging

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from src.models.search import SearchResult
from src.retrieval.retriever import KnowledgeRetriever
from src.safety.screener import SafetyScreener
from src.vectorstore.chroma_store import ChromaVectorIndex

logger = logging.getLogger(__name__)

MAX_TOP_K = 20
MAX_QUERY_LENGTH = 1000
SUMMARY_LENGTH = 200

NO_RESULTS_SUMMARY = (
    "I don't have specific information about that topic in my knowledge base. "
    "Let me connect you with a human agent who can provide more detailed assistance."
)


def _text(payload) -> list[TextContent]:
    return [TextContent(type="text", text=json.dumps(payload))]


def voice_summary(result: SearchResult) -> str:
    """Top hit shortened to a single line of at most SUMMARY_LENGTH chars."""
    summary = result.content
    if len(summary) > SUMMARY_LENGTH:
        summary = summary[:SUMMARY_LENGTH - 3] + "..."
    return summary.replace("\n", " ").strip()


async def handle_search_knowledge(retriever: KnowledgeRetriever, arguments: dict) -> list[TextContent]:
    query = arguments.get("query", "")
    try:
        top_k = min(int(arguments.get("top_k", 5)), MAX_TOP_K)
    except (TypeError, ValueError):
        return _text({"error": "invalid_top_k"})

    if not isinstance(query, str) or not query.strip() or len(query) > MAX_QUERY_LENGTH:
        return _text({"error": "invalid_query"})
    if top_k < 1:
        return _text({"error": "invalid_top_k"})

    results = await retriever.search(query, top_k=top_k)
    if not results:
        return _text({"summary": NO_RESULTS_SUMMARY, "confidence": 0.0, "results": []})

    return _text({
        "summary": voice_summary(results[0]),
        "confidence": results[0].score,
        "results": [
            {
                "id": r.id,
                "title": r.title,
                "content": r.content,
                "source": r.source,
                "chunk_index": r.chunk_index,
                "relevance_score": round(r.score, 4),
            }
            for r in results
        ],
    })


async def handle_screen_message(screener: SafetyScreener, arguments: dict) -> list[TextContent]:
    message = arguments.get("message", "")
    if not isinstance(message, str) or not message.strip():
        return _text({"error": "invalid_message"})

    verdict = screener.screen(message)
    payload = verdict.to_dict()
    payload["response"] = screener.generate_response(verdict.issues)
    return _text(payload)


async def handle_get_document(index: ChromaVectorIndex, arguments: dict) -> list[TextContent]:
    doc_id = arguments.get("document_id", "")
    if not doc_id:
        return _text({"error": "not_found"})

    chunks = await asyncio.to_thread(index.get_document_chunks, doc_id)
    if not chunks:
        return _text({"error": "not_found"})

    metadata = chunks[0].metadata
    return _text({
        "id": doc_id,
        "title": metadata.get("title", ""),
        "source": metadata.get("source", ""),
        "full_text": "\n\n".join(str(c.metadata.get("content", "")) for c in chunks),
        "chunk_count": len(chunks),
    })


TOOLS = [
    Tool(
        name="search_knowledge",
        description="Search the support knowledge base by semantic similarity.",
        inputSchema={
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Natural language search query"},
                "top_k": {"type": "integer", "default": 5, "description": f"Number of results (max {MAX_TOP_K})"},
            },
            "required": ["query"],
        },
    ),
    Tool(
        name="screen_message",
        description="Run the content safety checks over a user message.",
        inputSchema={
            "type": "object",
            "properties": {
                "message": {"type": "string", "description": "The user message to screen"},
            },
            "required": ["message"],
        },
    ),
]

GET_DOCUMENT_TOOL = Tool(
    name="get_document",
    description="Retrieve every indexed chunk of a knowledge document.",
    inputSchema={
        "type": "object",
        "properties": {
            "document_id": {"type": "string", "description": "Document identifier (source_title)"},
        },
        "required": ["document_id"],
    },
)


def create_server(
    retriever: KnowledgeRetriever,
    screener: SafetyScreener,
    index: ChromaVectorIndex | None = None,
) -> Server:
    """Build an MCP server bound to the given services.

    get_document is only offered when a Chroma index is supplied.
    """
    server = Server("support-knowledge")
    tools = TOOLS + ([GET_DOCUMENT_TOOL] if index is not None else [])

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return tools

    @server.call_tool()
    async def call_tool(name: str, arguments: dict) -> list[TextContent]:
        logger.info("Tool call: %s", name)
        if name == "search_knowledge":
            return await handle_search_knowledge(retriever, arguments)
        elif name == "screen_message":
            return await handle_screen_message(screener, arguments)
        elif name == "get_document" and index is not None:
            return await handle_get_document(index, arguments)
        else:
            return [TextContent(type="text", text=f"Unknown tool: {name}")]

    return server


async def main():
    from src.services import build_services

    services = build_services()
    index = services.index if isinstance(services.index, ChromaVectorIndex) else None
    server = create_server(services.retriever, services.screener, index)
    try:
        async with stdio_server() as (read, write):
            await server.run(read, write, server.create_initialization_options())
    finally:
        services.close()


if __name__ == "__main__":
    asyncio.run(main())
