from .schema import CategoryScore, QuestionPoint, ScoreSummary
from .service import (
    MAX_RAW_SCORE,
    category_percentage,
    category_rollup,
    compute_totals,
    percentage,
    question_max,
    question_series,
    rollup_by_category_name,
    score_answer,
)

__all__ = [
    "CategoryScore",
    "QuestionPoint",
    "ScoreSummary",
    "MAX_RAW_SCORE",
    "category_percentage",
    "category_rollup",
    "compute_totals",
    "percentage",
    "question_max",
    "question_series",
    "rollup_by_category_name",
    "score_answer",
]
