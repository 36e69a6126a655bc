"""IR metrics for evaluating retrieval quality.

All functions are pure computation on search outputs, no LLM required.
"""


def keyword_recall_at_k(
    retrieved_texts: list[str],
    expected_keywords: list[str],
    k: int,
) -> float:
    """Fraction of expected keywords found as substrings in the top-k chunks.

    Case-insensitive substring matching. Returns 1.0 if there are no expected
    keywords (vacuous truth for out-of-scope questions).
    """
    if not expected_keywords:
        return 1.0
    if k <= 0 or not retrieved_texts:
        return 0.0

    combined = " ".join(t.lower() for t in retrieved_texts[:k])
    hits = sum(1 for keyword in expected_keywords if keyword.lower() in combined)
    return hits / len(expected_keywords)


def reciprocal_rank(
    retrieved_texts: list[str],
    expected_keywords: list[str],
) -> float:
    """1/rank of the first chunk mentioning any expected keyword.

    Returns 0.0 if no chunk mentions one.
    """
    keywords = [k.lower() for k in expected_keywords]
    for i, text in enumerate(retrieved_texts):
        lowered = text.lower()
        if any(k in lowered for k in keywords):
            return 1.0 / (i + 1)
    return 0.0
