"""Heuristic answer-quality scores on a 0-1 scale.

These are cheap lexical proxies, not judgments: they reward keyword
coverage, reasonable length, actionable wording and well-attributed
sources.
"""

from src.models.evaluation import ResponseScores

NON_ANSWER_PHRASES = ("i don't know", "cannot help")
STRUCTURE_WORDS = ("first", "second", "finally")
ACTION_WORDS = ("call", "contact", "visit")
POLITE_WORDS = ("please", "thank you")
HIGH_RELEVANCE = 0.7


def _clamp(score: float) -> float:
    return max(0.0, min(1.0, score))


def score_accuracy(response: str, expected_keywords: list[str]) -> float:
    text = response.lower()
    if expected_keywords:
        matches = sum(1 for k in expected_keywords if k.lower() in text)
        score = matches / len(expected_keywords) * 0.8
    else:
        score = 0.0

    if len(text) > 100:
        score += 0.1
    if len(text) > 200:
        score += 0.1
    if any(p in text for p in NON_ANSWER_PHRASES):
        score -= 0.3
    return _clamp(score)


def score_helpfulness(response: str) -> float:
    text = response.lower()
    score = 0.5

    if 50 < len(text) < 500:
        score += 0.2
    elif len(text) >= 500:
        score += 0.1
    if any(w in text for w in STRUCTURE_WORDS):
        score += 0.1
    if any(w in text for w in ACTION_WORDS):
        score += 0.1
    if any(w in text for w in POLITE_WORDS):
        score += 0.05

    if len(text) < 30:
        score -= 0.3
    # Bare "contact support" deflections
    if "contact support" in text and len(text) < 100:
        score -= 0.2
    return _clamp(score)


def _source_quality(source: dict) -> float:
    quality = 0.0
    if source.get("title"):
        quality += 0.3
    if source.get("source") and source.get("source") != "unknown":
        quality += 0.3
    if (source.get("relevance_score") or 0.0) > HIGH_RELEVANCE:
        quality += 0.4
    return quality


def score_citation_quality(response: str, sources: list[dict], company_name: str = "Aven") -> float:
    score = 0.0
    if sources:
        score += 0.4
        score += sum(_source_quality(s) for s in sources) / len(sources) * 0.6

    text = response.lower()
    if company_name.lower() in text or "support" in text:
        score += 0.1
    return _clamp(score)


def score_response(
    response: str,
    expected_keywords: list[str],
    sources: list[dict],
    company_name: str = "Aven",
) -> ResponseScores:
    """Score one answer. overall is the mean of the three, rounded to 2 dp."""
    accuracy = score_accuracy(response, expected_keywords)
    helpfulness = score_helpfulness(response)
    citation_quality = score_citation_quality(response, sources, company_name)
    return ResponseScores(
        accuracy=accuracy,
        helpfulness=helpfulness,
        citation_quality=citation_quality,
        overall=round((accuracy + helpfulness + citation_quality) / 3, 2),
    )
