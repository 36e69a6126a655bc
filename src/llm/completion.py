"""Completion provider: turns a conversation plus retrieved context into a reply."""

import logging
from abc import ABC, abstractmethod

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from src.models.enums import MessageRole
from src.models.safety import SafetyPolicy

logger = logging.getLogger(__name__)


class CompletionProvider(ABC):
    """Abstract interface for answer generation."""

    @abstractmethod
    async def complete(
        self,
        messages: list[dict],
        context: str,
        is_first_message: bool = False,
    ) -> str:
        """Generate the assistant's next message.

        Args:
            messages: Conversation so far as ``{"role", "content"}`` dicts,
                ending with the user's current message.
            context: Retrieved knowledge formatted for the prompt.
            is_first_message: Whether this is the opening turn of the session.
        """


def build_system_prompt(policy: SafetyPolicy, context: str, is_first_message: bool = False) -> str:
    name = policy.agent_name
    company = policy.company_name
    if is_first_message:
        intro = (
            f"- This is the first message in the conversation. Introduce yourself as {name} with: "
            f"\"Hi! I am {name}, I am here to answer all the questions about {company}. How can I help you?\""
        )
    else:
        intro = (
            "- This is not the first message. Do NOT introduce yourself again; "
            "focus on being helpful without mentioning your name"
        )

    return (
        f"You are {name}, an AI customer support agent for {company}.\n\n"
        "IMPORTANT GUIDELINES:\n"
        f"{intro}\n"
        f"- Only answer questions about {company}, their products, and services\n"
        "- Use the provided context to answer questions accurately\n"
        "- If you don't know something, say so; don't make up information\n"
        "- Be helpful, professional, and concise\n"
        "- If a question is about legal/financial advice, direct them to speak with a qualified professional\n"
        f"- For account-specific issues, direct them to contact {company} support at "
        f"{policy.support_phone} or {policy.support_email}\n"
        "- Always maintain a friendly, professional tone\n\n"
        f"Context about {company}:\n{context or 'No relevant context was found.'}\n\n"
        f"Remember: You are representing {company}, so maintain their professional tone "
        "and always prioritize accuracy over completeness."
    )


def to_langchain_messages(messages: list[dict]) -> list[BaseMessage]:
    converted: list[BaseMessage] = []
    for message in messages:
        role = MessageRole(message["role"])
        if role == MessageRole.SYSTEM:
            converted.append(SystemMessage(content=message["content"]))
        elif role == MessageRole.ASSISTANT:
            converted.append(AIMessage(content=message["content"]))
        else:
            converted.append(HumanMessage(content=message["content"]))
    return converted


class ChatModelCompletionProvider(CompletionProvider):
    """Completion provider backed by a LangChain chat model."""

    def __init__(self, llm: BaseChatModel, policy: SafetyPolicy | None = None):
        self._llm = llm
        self._policy = policy or SafetyPolicy()

    async def complete(
        self,
        messages: list[dict],
        context: str,
        is_first_message: bool = False,
    ) -> str:
        prompt = [
            SystemMessage(content=build_system_prompt(self._policy, context, is_first_message)),
            *to_langchain_messages(messages),
        ]
        response = await self._llm.ainvoke(prompt)
        content = response.content
        if isinstance(content, list):
            # Some providers return content blocks
            content = "".join(
                block.get("text", "") if isinstance(block, dict) else str(block)
                for block in content
            )
        text = content.strip()
        if not text:
            raise ValueError("LLM returned an empty response")
        logger.debug("Generated %d-character reply", len(text))
        return text
