"""Enumeration types for SupportRAG data models."""

from enum import Enum


class SafetyCategory(str, Enum):
    """Safety check categories, in the order the screener evaluates them."""

    TOXICITY = "toxicity"
    PERSONAL_DATA = "personal_data"
    LEGAL_ADVICE = "legal_advice"
    FINANCIAL_ADVICE = "financial_advice"
    ACCOUNT_SPECIFIC = "account_specific"
    MEDICAL_ADVICE = "medical_advice"
    POLITICAL_CONTENT = "political_content"
    SPAM = "spam"
    IMPERSONATION = "impersonation"


class MessageRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
