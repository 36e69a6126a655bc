"""Evaluation data models."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class EvalQuestion:
    """A golden question with the keywords a good answer should mention."""

    id: int
    category: str
    question: str
    expected_keywords: list[str]
    difficulty: str = "medium"
    type: str = "factual"

    def __post_init__(self):
        if not self.question:
            raise ValueError("question must not be empty")
        if not self.expected_keywords:
            raise ValueError("expected_keywords must not be empty")


@dataclass
class ResponseScores:
    """Heuristic 0-1 scores for one answer."""

    accuracy: float = 0.0
    helpfulness: float = 0.0
    citation_quality: float = 0.0
    overall: float = 0.0


@dataclass
class QuestionResult:
    """Metrics for a single evaluation question."""

    question_id: int
    question: str
    category: str
    response: str
    scores: ResponseScores
    keyword_recall_at_k: dict[int, float]  # k -> score
    reciprocal_rank: float = 0.0
    sources: list[dict] = field(default_factory=list)
    error: str | None = None


@dataclass
class CategoryMetrics:
    """Aggregated metrics for a question category."""

    category: str
    count: int
    avg_accuracy: float
    avg_helpfulness: float
    avg_citation_quality: float
    avg_overall: float
    avg_keyword_recall_at_k: dict[int, float]
    avg_reciprocal_rank: float = 0.0


@dataclass
class EvaluationReport:
    """Complete evaluation report."""

    config_label: str
    timestamp: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    parameters: dict = field(default_factory=dict)
    overall_metrics: dict = field(default_factory=dict)
    per_category: list[CategoryMetrics] = field(default_factory=list)
    per_question: list[QuestionResult] = field(default_factory=list)
    duration_seconds: float = 0.0
