"""Application configuration management."""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """SupportRAG application settings loaded from environment variables."""

    # LLM credentials
    anthropic_api_key: str = ""
    google_api_key: str = ""

    # Embedding
    supportrag_embedding_model: str = "all-MiniLM-L6-v2"
    supportrag_embedding_dimension: int = 384
    supportrag_embedding_batch_size: int = 100
    supportrag_embedding_batch_delay: float = 0.1

    # LLM
    supportrag_llm_provider: str = "anthropic"
    supportrag_llm_model: str = "claude-sonnet-4-5-20250929"
    supportrag_llm_temperature: float = 0.7
    supportrag_llm_max_tokens: int = 1000

    # Storage
    supportrag_chroma_path: str = "./data/chroma"
    supportrag_collection: str = "support_knowledge"
    supportrag_knowledge_path: str = "./data/knowledge/support_data.json"
    supportrag_eval_path: str = "./data/eval/questions.json"

    # Ingestion
    supportrag_chunk_size: int = 1000
    supportrag_chunk_overlap: int = 200
    supportrag_min_chunk_length: int = 20

    # Retrieval
    supportrag_top_k: int = 5
    supportrag_context_max_length: int = 3000
    supportrag_search_timeout: float = 10.0
    supportrag_index_timeout: float = 120.0

    # Agent persona and escalation contact
    supportrag_agent_name: str = "Sarah"
    supportrag_company_name: str = "Aven"
    supportrag_support_phone: str = "(888) 966-4655"
    supportrag_support_email: str = "support@aven.com"

    # Sessions
    supportrag_history_limit: int = 10
    supportrag_session_max_age_hours: float = 24.0

    @property
    def chroma_path(self) -> Path:
        return Path(self.supportrag_chroma_path)

    @property
    def knowledge_path(self) -> Path:
        return Path(self.supportrag_knowledge_path)

    @property
    def eval_path(self) -> Path:
        return Path(self.supportrag_eval_path)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
