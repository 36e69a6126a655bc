"""LLM provider configuration using LangChain abstractions."""

from langchain_core.language_models.chat_models import BaseChatModel

from config.settings import Settings, get_settings


def get_llm(settings: Settings | None = None) -> BaseChatModel:
    """Create and return the configured chat model.

    Default: Anthropic Claude via langchain-anthropic.
    """
    settings = settings or get_settings()
    provider = settings.supportrag_llm_provider.lower()

    if provider == "anthropic":
        from langchain_anthropic import ChatAnthropic

        return ChatAnthropic(
            model=settings.supportrag_llm_model,
            temperature=settings.supportrag_llm_temperature,
            max_tokens=settings.supportrag_llm_max_tokens,
            api_key=settings.anthropic_api_key,
        )
    elif provider == "google":
        from langchain_google_genai import ChatGoogleGenerativeAI

        return ChatGoogleGenerativeAI(
            model=settings.supportrag_llm_model,
            temperature=settings.supportrag_llm_temperature,
            max_output_tokens=settings.supportrag_llm_max_tokens,
            google_api_key=settings.google_api_key or None,
        )
    else:
        raise ValueError(
            f"Unsupported LLM provider: {provider}. "
            "Supported: 'anthropic', 'google'"
        )
