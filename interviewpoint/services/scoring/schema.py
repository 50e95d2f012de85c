from __future__ import annotations

from pydantic import Field

from interviewpoint.services.common import CamelModel


class ScoreSummary(CamelModel):
    total: float
    max: float
    percentage: float


class CategoryScore(CamelModel):
    category_id: str
    name: str
    score: float
    max: float
    percentage: float
    answered: int
    question_count: int


class QuestionPoint(CamelModel):
    name: str
    question_id: str
    short_text: str
    score: float
    missed: float
    max: float = Field(ge=0)
