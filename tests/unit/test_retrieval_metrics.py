"""Unit tests for retrieval keyword metrics."""

import pytest

from src.evaluation.retrieval_metrics import keyword_recall_at_k, reciprocal_rank

TEXTS = [
    "The card has a variable APR.",
    "There is no annual fee.",
    "Use autopay to earn cashback.",
]


class TestKeywordRecallAtK:
    def test_counts_keywords_in_top_k(self):
        assert keyword_recall_at_k(TEXTS, ["apr", "annual fee", "cashback"], 2) == pytest.approx(2 / 3)
        assert keyword_recall_at_k(TEXTS, ["apr", "annual fee", "cashback"], 3) == pytest.approx(1.0)

    def test_case_insensitive(self):
        assert keyword_recall_at_k(TEXTS, ["AUTOPAY"], 3) == 1.0

    def test_no_keywords_is_vacuous(self):
        assert keyword_recall_at_k(TEXTS, [], 3) == 1.0

    def test_nothing_retrieved(self):
        assert keyword_recall_at_k([], ["apr"], 3) == 0.0
        assert keyword_recall_at_k(TEXTS, ["apr"], 0) == 0.0


class TestReciprocalRank:
    def test_first_hit_rank(self):
        assert reciprocal_rank(TEXTS, ["cashback"]) == pytest.approx(1 / 3)
        assert reciprocal_rank(TEXTS, ["fee", "cashback"]) == pytest.approx(1 / 2)

    def test_no_hit(self):
        assert reciprocal_rank(TEXTS, ["mortgage"]) == 0.0
