"""Static fallback answers served when the vector index is unavailable.

The corpus is deliberately small and hand-authored: when live retrieval
fails, partial and possibly stale answers beat a hard failure. Bump
FALLBACK_CORPUS_VERSION whenever an entry's facts change.
"""

from dataclasses import dataclass

from src.models.search import SearchResult

FALLBACK_CORPUS_VERSION = "2024.1"
FALLBACK_SOURCE = "fallback"
FALLBACK_KEYWORD_BOOST = 0.1


@dataclass(frozen=True)
class FallbackEntry:
    id: str
    title: str
    content: str
    category: str
    base_score: float


FALLBACK_CORPUS: tuple[FallbackEntry, ...] = (
    FallbackEntry(
        id="fallback_product_overview",
        title="Aven Card Overview",
        content=(
            "The Aven Card is a Visa credit card backed by the equity in your home, "
            "combining the low rates of a home equity line of credit (HELOC) with the "
            "convenience of a credit card. Credit lines go up to $250,000 depending on "
            "home value and equity."
        ),
        category="overview",
        base_score=0.8,
    ),
    FallbackEntry(
        id="fallback_rates_and_fees",
        title="Rates and Fees",
        content=(
            "The Aven Card has a variable APR tied to the Prime Rate, so it adjusts "
            "when the Federal Reserve moves rates. There is no annual fee, no "
            "application fee and no closing fee. Cardholders with autopay enabled "
            "earn 2% cashback on eligible purchases."
        ),
        category="rates",
        base_score=0.75,
    ),
    FallbackEntry(
        id="fallback_contact",
        title="Contact Aven Support",
        content=(
            "Aven customer support is available by phone at (888) 966-4655 and by "
            "e-mail at support@aven.com. For anything about your own account, "
            "balance or payments, contact support or log into your Aven account."
        ),
        category="contact",
        base_score=0.7,
    ),
    FallbackEntry(
        id="fallback_application",
        title="Applying for the Aven Card",
        content=(
            "You can apply online in minutes. Checking your offer uses a soft credit "
            "pull that does not affect your credit score. Eligibility depends on home "
            "ownership, available home equity, income and credit history."
        ),
        category="application",
        base_score=0.65,
    ),
    FallbackEntry(
        id="fallback_usage_restrictions",
        title="Where the Card Can Be Used",
        content=(
            "The Aven Card works anywhere Visa is accepted for everyday purchases. "
            "Cash advances, ATM withdrawals, gambling and casino transactions and "
            "cryptocurrency purchases are not permitted."
        ),
        category="restrictions",
        base_score=0.6,
    ),
)

# category -> query substrings (lower-case) that signal interest in it
CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "overview": ("what is", "how does", "heloc", "home equity", "aven card", "credit line", "limit"),
    "rates": ("rate", "apr", "interest", "fee", "cost", "cashback", "cash back", "reward"),
    "contact": ("contact", "phone", "call", "email", "e-mail", "support", "speak", "talk to"),
    "application": ("apply", "application", "eligib", "qualify", "requirement", "credit score"),
    "restrictions": ("restrict", "casino", "gambl", "cash advance", "atm", "crypto", "allowed", "where can"),
}


def matched_categories(query: str) -> set[str]:
    """Categories with at least one keyword occurring in the query."""
    query_lower = query.lower()
    return {
        category
        for category, keywords in CATEGORY_KEYWORDS.items()
        if any(keyword in query_lower for keyword in keywords)
    }


def rank_fallback(
    query: str,
    top_k: int,
    corpus: tuple[FallbackEntry, ...] = FALLBACK_CORPUS,
) -> list[SearchResult]:
    """Re-score the fallback corpus against a query and return the top_k.

    Entries whose category matches the query gain FALLBACK_KEYWORD_BOOST,
    capped at 1.0. Ties keep corpus order.
    """
    matched = matched_categories(query)
    scored = [
        (
            min(1.0, entry.base_score + (FALLBACK_KEYWORD_BOOST if entry.category in matched else 0.0)),
            entry,
        )
        for entry in corpus
    ]
    scored.sort(key=lambda pair: pair[0], reverse=True)

    return [
        SearchResult(
            id=entry.id,
            score=round(score, 4),
            title=entry.title,
            content=entry.content,
            source=FALLBACK_SOURCE,
            chunk_index=0,
        )
        for score, entry in scored[:top_k]
    ]
