"""Composition root: wires concrete providers into the service objects."""

import logging
from dataclasses import dataclass, field
from datetime import timedelta

from langchain_core.language_models.chat_models import BaseChatModel

from config.settings import Settings, get_settings
from src.agent.chat_service import SupportChatService
from src.embedding.provider import EmbeddingProvider
from src.ingestion.indexer import DocumentIndexer
from src.llm.completion import ChatModelCompletionProvider
from src.models.safety import SafetyPolicy
from src.retrieval.retriever import KnowledgeRetriever
from src.safety.screener import SafetyScreener
from src.sessions.store import ConversationStore
from src.vectorstore.index import VectorIndex

logger = logging.getLogger(__name__)


def policy_from_settings(settings: Settings) -> SafetyPolicy:
    return SafetyPolicy(
        agent_name=settings.supportrag_agent_name,
        company_name=settings.supportrag_company_name,
        support_phone=settings.supportrag_support_phone,
        support_email=settings.supportrag_support_email,
    )


@dataclass
class Services:
    """Everything a CLI command or the tool server needs.

    The chat model is only created on first use of ``chat`` so commands that
    never generate answers (ingest, stats, screen) need no LLM credentials.
    """

    settings: Settings
    embedding_provider: EmbeddingProvider
    index: VectorIndex
    indexer: DocumentIndexer
    retriever: KnowledgeRetriever
    screener: SafetyScreener
    store: ConversationStore
    llm: BaseChatModel | None = None
    _chat: SupportChatService | None = field(default=None, repr=False)

    @property
    def chat(self) -> SupportChatService:
        if self._chat is None:
            if self.llm is None:
                from src.llm.config import get_llm

                self.llm = get_llm(self.settings)
            self._chat = SupportChatService(
                screener=self.screener,
                retriever=self.retriever,
                completion=ChatModelCompletionProvider(self.llm, self.screener.policy),
                store=self.store,
                index=self.index,
                top_k=self.settings.supportrag_top_k,
                context_max_length=self.settings.supportrag_context_max_length,
                search_timeout=self.settings.supportrag_search_timeout,
                session_max_age=timedelta(hours=self.settings.supportrag_session_max_age_hours),
            )
        return self._chat

    def close(self) -> None:
        self.index.close()


def build_services(
    settings: Settings | None = None,
    embedding_provider: EmbeddingProvider | None = None,
    index: VectorIndex | None = None,
    llm: BaseChatModel | None = None,
) -> Services:
    """Build the service graph from settings.

    Any collaborator passed in is used instead of the configured default.
    """
    settings = settings or get_settings()

    if embedding_provider is None:
        from src.embedding.sentence_transformer import SentenceTransformerEmbeddingProvider

        embedding_provider = SentenceTransformerEmbeddingProvider(settings.supportrag_embedding_model)

    if index is None:
        from src.vectorstore.chroma_store import ChromaVectorIndex

        index = ChromaVectorIndex(
            path=str(settings.chroma_path),
            dimension=settings.supportrag_embedding_dimension,
            collection_name=settings.supportrag_collection,
        )

    if embedding_provider.dimension != index.dimension:
        raise ValueError(
            f"Embedding dimension {embedding_provider.dimension} does not match "
            f"index dimension {index.dimension}"
        )

    screener = SafetyScreener(policy_from_settings(settings))
    logger.info("Services built (collection=%s)", settings.supportrag_collection)

    return Services(
        settings=settings,
        embedding_provider=embedding_provider,
        index=index,
        indexer=DocumentIndexer(
            embedding_provider,
            index,
            chunk_size=settings.supportrag_chunk_size,
            chunk_overlap=settings.supportrag_chunk_overlap,
            min_chunk_length=settings.supportrag_min_chunk_length,
            batch_size=settings.supportrag_embedding_batch_size,
            batch_delay=settings.supportrag_embedding_batch_delay,
        ),
        retriever=KnowledgeRetriever(
            embedding_provider,
            index,
            timeout=settings.supportrag_search_timeout,
        ),
        screener=screener,
        store=ConversationStore(max_messages=settings.supportrag_history_limit),
        llm=llm,
    )
