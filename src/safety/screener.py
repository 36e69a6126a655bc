"""Safety screener: runs every content check and aggregates a verdict."""

import logging
from collections.abc import Mapping

from src.models.enums import SafetyCategory
from src.models.safety import SafetyIssue, SafetyPolicy, SafetyVerdict
from src.safety.checks import SAFETY_CHECKS, SafetyCheck

logger = logging.getLogger(__name__)

RESPONSE_LEADS = {
    SafetyCategory.TOXICITY: "I aim to maintain a professional and respectful environment. ",
    SafetyCategory.PERSONAL_DATA: "For security reasons, I cannot handle sensitive information. ",
    SafetyCategory.LEGAL_ADVICE: "I cannot provide legal advice. ",
    SafetyCategory.FINANCIAL_ADVICE: "I cannot provide personalized financial advice. ",
    SafetyCategory.ACCOUNT_SPECIFIC: "I cannot access your personal account information. ",
}
DEFAULT_RESPONSE_LEAD = "I cannot process this type of request. "

UNVERIFIED_REASON = "I couldn't verify that this message is safe to answer."


class SafetyScreener:
    """Gate in front of every model call.

    All checks run on every message so the issue list and confidence are
    independent of evaluation order. A check that raises counts as a failed
    check for its category.
    """

    def __init__(
        self,
        policy: SafetyPolicy | None = None,
        checks: tuple[tuple[SafetyCategory, SafetyCheck], ...] = SAFETY_CHECKS,
    ):
        if not checks:
            raise ValueError("checks must not be empty")
        self._policy = policy or SafetyPolicy()
        self._checks = checks

    @property
    def policy(self) -> SafetyPolicy:
        return self._policy

    def screen(self, message: str, context: Mapping | None = None) -> SafetyVerdict:
        """Run the full check battery over a message.

        Args:
            message: The user's message.
            context: Optional request context (e.g. session_id), used for logging.

        Returns:
            SafetyVerdict with issues in check order and the percentage of
            checks that passed.
        """
        issues: list[SafetyIssue] = []
        passed = 0
        for category, check in self._checks:
            try:
                issue = check(message, self._policy)
            except Exception:
                logger.exception(
                    "Safety check %s raised; treating message as unsafe (context=%s)",
                    category.value, dict(context or {}),
                )
                issue = SafetyIssue(category=category, reason=UNVERIFIED_REASON)
            if issue is None:
                passed += 1
            else:
                issues.append(issue)

        return SafetyVerdict(
            issues=tuple(issues),
            confidence=passed / len(self._checks) * 100,
        )

    def fail_closed(self) -> SafetyVerdict:
        """Verdict to use when screening could not run at all."""
        return SafetyVerdict(
            issues=tuple(SafetyIssue(category=c, reason=UNVERIFIED_REASON) for c, _ in self._checks),
            confidence=0.0,
        )

    def generate_response(
        self,
        issues: tuple[SafetyIssue, ...] | list[SafetyIssue],
        agent_name: str | None = None,
    ) -> str | None:
        """Build a refusal for the first issue only; None if there are none."""
        if not issues:
            return None

        first = issues[0]
        name = agent_name or self._policy.agent_name
        if first.reason == UNVERIFIED_REASON:
            lead = DEFAULT_RESPONSE_LEAD
        else:
            lead = RESPONSE_LEADS.get(first.category, DEFAULT_RESPONSE_LEAD)
        return (
            f"Hi, I'm {name}! "
            + lead
            + first.reason
            + f" For account-specific questions, please contact {self._policy.company_name} "
            f"support at {self._policy.support_phone} or {self._policy.support_email}."
        )

    def log_violation(self, verdict: SafetyVerdict, message: str, session_id: str | None = None) -> None:
        if verdict.overall_safe:
            return
        preview = message[:100] + ("..." if len(message) > 100 else "")
        logger.warning(
            "Safety violation in session %s: issues=%s message=%r",
            session_id or "unknown",
            [c.value for c in verdict.categories],
            preview,
        )
