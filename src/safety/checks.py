"""Content safety checks.

Each check is a pure function ``(message, policy) -> SafetyIssue | None``.
SAFETY_CHECKS fixes the order the screener runs them in, which is also the
order issues are reported in.
"""

import re
from typing import Callable

from src.models.enums import SafetyCategory
from src.models.safety import SafetyIssue, SafetyPolicy

SafetyCheck = Callable[[str, SafetyPolicy], SafetyIssue | None]

TOXICITY_KEYWORDS = {
    "hate": ["hate", "racist", "sexist", "homophobic", "bigot", "discrimination"],
    "violence": ["kill", "murder", "attack", "violence", "weapon", "bomb", "terrorist"],
    "harassment": ["harass", "bully", "stalk", "threaten", "intimidate"],
    "profanity": ["fuck", "shit", "bitch", "asshole", "damn", "curse", "swear"],
    "inappropriate": ["inappropriate", "offensive", "disgusting", "vulgar"],
}

# Keywords match at the start of a word, so "harass" catches "harassment"
# but "kill" does not fire on "skill".
TOXICITY_PATTERNS = {
    category: re.compile(r"\b(?:" + "|".join(map(re.escape, keywords)) + ")", re.IGNORECASE)
    for category, keywords in TOXICITY_KEYWORDS.items()
}

PERSONAL_DATA_PATTERNS = {
    "ssn": re.compile(r"\bssn\b|social\s*security(?:\s*number)?|\b\d{3}-\d{2}-\d{4}\b", re.IGNORECASE),
    "credit_card": re.compile(
        r"credit\s*card\s*number|card\s*number|\bcc\s*number|card\s*#|\b(?:\d[ -]?){13,16}\b",
        re.IGNORECASE,
    ),
    "bank_account": re.compile(r"bank\s*account\s*number|routing\s*number|account\s*#", re.IGNORECASE),
    "password": re.compile(r"password|passwd|\bpwd\b", re.IGNORECASE),
    "pin": re.compile(r"\bpin\s*number|\bpin\s*code|personal\s*identification", re.IGNORECASE),
    "dob": re.compile(r"date\s*of\s*birth|birthday|birth\s*date|\bdob\b", re.IGNORECASE),
    "license": re.compile(r"driver'?s?\s*license|license\s*number|\bdl\s*number", re.IGNORECASE),
    "passport": re.compile(r"passport\s*number|passport\s*#", re.IGNORECASE),
    "address": re.compile(r"home\s*address|street\s*address|mailing\s*address", re.IGNORECASE),
    "phone": re.compile(r"phone\s*number|mobile\s*number|cell\s*number", re.IGNORECASE),
    "email": re.compile(r"email\s*address|e-mail|\b[\w.+-]+@[\w-]+\.[\w.-]+\b", re.IGNORECASE),
}

LEGAL_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"legal\s*advice|legal\s*counsel",
        r"should\s+i\s+sue|can\s+i\s+sue|lawsuit",
        r"legal\s*action|legal\s*proceedings",
        r"contract\s*review|legal\s*document",
        r"legal\s*rights|legal\s*obligations",
        r"attorney|lawyer|legal\s*representative",
        r"legal\s*liability|legal\s*responsibility",
        r"legal\s*compliance|regulatory\s*requirements",
    )
]

FINANCIAL_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"should\s+i\s+(invest|buy|sell|trade|borrow)",
        r"what\s+should\s+i\s+do\s+with\s+my\s+money",
        r"financial\s+advice|investment\s+advice",
        r"tax\s+advice|tax\s+planning",
        r"financial\s+planning|retirement\s+planning",
        r"should\s+i\s+refinance|should\s+i\s+consolidate",
        r"what\s+is\s+the\s+best\s+(investment|strategy)",
        r"financial\s+advisor|financial\s+planner",
    )
]

ACCOUNT_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\bmy\s+(account|balance|payment|statement|transactions)",
        r"\bmy\s+(credit\s*line|credit\s*limit|rate|apr)\b",
        r"\bmy\s+(card|account\s*number|account\s*details)\b",
        r"check\s+my\s+(balance|account|transactions)",
        r"what\s+is\s+my\s+(balance|payment|rate)",
        r"\bmy\s+(personal|private)\s+information",
    )
]

MEDICAL_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"medical\s+advice|health\s+advice",
        r"should\s+i\s+(take|use|stop)\s+(medication|medicine)",
        r"medical\s+condition|health\s+condition",
        r"symptoms|diagnosis|treatment",
        r"doctor|physician|medical\s+professional",
    )
]

POLITICAL_KEYWORDS = [
    "politics", "political", "election", "vote", "voting", "candidate",
    "democrat", "republican", "liberal", "conservative", "government",
    "legislation", "congress", "senate", "president", "public policy",
]

# Whole-word match: "party" and "policy" on their own are left out so that
# "privacy policy" or "third party" questions are not refused.
POLITICAL_PATTERN = re.compile(
    r"\b(?:" + "|".join(r"\s+".join(map(re.escape, k.split())) for k in POLITICAL_KEYWORDS) + r")\b",
    re.IGNORECASE,
)

SPAM_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"buy\s+now|limited\s+time|act\s+now",
        r"click\s+here|visit\s+website|free\s+offer",
        r"make\s+money|earn\s+money|get\s+rich",
        r"weight\s+loss|diet\s+pill|miracle\s+cure",
        r"lottery|winner|prize|claim\s+your",
    )
]


def _impersonation_patterns(policy: SafetyPolicy) -> list[re.Pattern]:
    names = "|".join(re.escape(n) for n in (policy.agent_name, policy.company_name) if n)
    identities = f"{names}|support|agent" if names else "support|agent"
    company = re.escape(policy.company_name) if policy.company_name else "company"
    return [
        re.compile(rf"\bi\s+am\s+({identities})\b", re.IGNORECASE),
        re.compile(rf"\bi\s+work\s+for\s+({company}|company)\b", re.IGNORECASE),
        re.compile(r"\bi\s+am\s+an?\s+(representative|agent|employee)\b", re.IGNORECASE),
        re.compile(r"\bi\s+can\s+(help|assist)\s+you\s+with\s+(anything|everything)\b", re.IGNORECASE),
    ]


def _any_match(patterns: list[re.Pattern], message: str) -> bool:
    return any(p.search(message) for p in patterns)


def check_toxicity(message: str, policy: SafetyPolicy) -> SafetyIssue | None:
    found = [category for category, pattern in TOXICITY_PATTERNS.items() if pattern.search(message)]
    if not found:
        return None
    return SafetyIssue(
        category=SafetyCategory.TOXICITY,
        reason=(
            f"I cannot respond to {', '.join(found)} content. "
            "Please keep our conversation respectful and professional."
        ),
        subcategories=tuple(found),
    )


def check_personal_data(message: str, policy: SafetyPolicy) -> SafetyIssue | None:
    found = [data_type for data_type, pattern in PERSONAL_DATA_PATTERNS.items() if pattern.search(message)]
    if not found:
        return None
    return SafetyIssue(
        category=SafetyCategory.PERSONAL_DATA,
        reason=(
            f"I cannot handle {', '.join(found)} information. For security reasons, "
            f"please contact {policy.company_name} support directly at {policy.support_phone}."
        ),
        subcategories=tuple(found),
    )


def check_legal_advice(message: str, policy: SafetyPolicy) -> SafetyIssue | None:
    if not _any_match(LEGAL_PATTERNS, message):
        return None
    return SafetyIssue(
        category=SafetyCategory.LEGAL_ADVICE,
        reason="I cannot provide legal advice. Please consult with a qualified attorney for legal matters.",
    )


def check_financial_advice(message: str, policy: SafetyPolicy) -> SafetyIssue | None:
    if not _any_match(FINANCIAL_PATTERNS, message):
        return None
    return SafetyIssue(
        category=SafetyCategory.FINANCIAL_ADVICE,
        reason="I cannot provide personalized financial advice. Please consult with a qualified financial advisor.",
    )


def check_account_specific(message: str, policy: SafetyPolicy) -> SafetyIssue | None:
    if not _any_match(ACCOUNT_PATTERNS, message):
        return None
    return SafetyIssue(
        category=SafetyCategory.ACCOUNT_SPECIFIC,
        reason=(
            f"I cannot access your personal account information. Please log into your "
            f"{policy.company_name} account or contact support at {policy.support_phone}."
        ),
    )


def check_medical_advice(message: str, policy: SafetyPolicy) -> SafetyIssue | None:
    if not _any_match(MEDICAL_PATTERNS, message):
        return None
    return SafetyIssue(
        category=SafetyCategory.MEDICAL_ADVICE,
        reason="I cannot provide medical advice. Please consult with a qualified healthcare professional.",
    )


def check_political_content(message: str, policy: SafetyPolicy) -> SafetyIssue | None:
    if not POLITICAL_PATTERN.search(message):
        return None
    return SafetyIssue(
        category=SafetyCategory.POLITICAL_CONTENT,
        reason=(
            f"I cannot discuss political topics. I'm here to help with "
            f"{policy.company_name}-related questions only."
        ),
    )


def check_spam(message: str, policy: SafetyPolicy) -> SafetyIssue | None:
    if not _any_match(SPAM_PATTERNS, message):
        return None
    return SafetyIssue(
        category=SafetyCategory.SPAM,
        reason=(
            f"I cannot process spam or promotional content. Please ask questions "
            f"related to {policy.company_name} products and services."
        ),
    )


def check_impersonation(message: str, policy: SafetyPolicy) -> SafetyIssue | None:
    if not _any_match(_impersonation_patterns(policy), message):
        return None
    return SafetyIssue(
        category=SafetyCategory.IMPERSONATION,
        reason=(
            f"I cannot respond to impersonation attempts. I am {policy.agent_name}, "
            f"the AI assistant for {policy.company_name}."
        ),
    )


SAFETY_CHECKS: tuple[tuple[SafetyCategory, SafetyCheck], ...] = (
    (SafetyCategory.TOXICITY, check_toxicity),
    (SafetyCategory.PERSONAL_DATA, check_personal_data),
    (SafetyCategory.LEGAL_ADVICE, check_legal_advice),
    (SafetyCategory.FINANCIAL_ADVICE, check_financial_advice),
    (SafetyCategory.ACCOUNT_SPECIFIC, check_account_specific),
    (SafetyCategory.MEDICAL_ADVICE, check_medical_advice),
    (SafetyCategory.POLITICAL_CONTENT, check_political_content),
    (SafetyCategory.SPAM, check_spam),
    (SafetyCategory.IMPERSONATION, check_impersonation),
)
