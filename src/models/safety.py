"""Safety screening data models."""

from dataclasses import dataclass

from src.models.enums import SafetyCategory


@dataclass(frozen=True)
class SafetyPolicy:
    """Persona and escalation contact interpolated into refusal messages."""

    agent_name: str = "Sarah"
    company_name: str = "Aven"
    support_phone: str = "(888) 966-4655"
    support_email: str = "support@aven.com"


@dataclass(frozen=True)
class SafetyIssue:
    """A single failed safety check."""

    category: SafetyCategory
    reason: str
    subcategories: tuple[str, ...] = ()


@dataclass(frozen=True)
class SafetyVerdict:
    """Aggregated result of running every safety check over one message.

    ``confidence`` is the percentage of checks that passed and is reported
    independently of ``overall_safe``.
    """

    issues: tuple[SafetyIssue, ...]
    confidence: float

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 100.0:
            raise ValueError(f"confidence must be between 0 and 100, got {self.confidence}")

    @property
    def overall_safe(self) -> bool:
        return not self.issues

    @property
    def categories(self) -> list[SafetyCategory]:
        return [issue.category for issue in self.issues]

    def to_dict(self) -> dict:
        return {
            "overall_safe": self.overall_safe,
            "confidence": self.confidence,
            "issues": [
                {
                    "category": issue.category.value,
                    "reason": issue.reason,
                    "subcategories": list(issue.subcategories),
                }
                for issue in self.issues
            ],
        }
