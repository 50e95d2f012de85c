from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import Field

from interviewpoint.services.common import CamelModel, Timestamp
from interviewpoint.services.settings.schema import QuestionType


class CustomFeedback(CamelModel):
    id: str
    label: str
    score: float


class Question(CamelModel):
    id: str
    text: str
    type: QuestionType = "DIRECT"
    multiplier: float = Field(default=1.0, gt=0)
    category_id: str
    order: int = 0
    custom_feedbacks: List[CustomFeedback] = Field(default_factory=list)


class Category(CamelModel):
    id: str
    name: str
    order: int = 0


class InterviewTemplate(CamelModel):
    id: str
    name: str
    created_at: Timestamp
    categories: List[Category] = Field(default_factory=list)
    questions: List[Question] = Field(default_factory=list)


class CategoryView(CamelModel):
    category: Category
    questions: List[Question]


class TemplateCreate(CamelModel):
    name: Optional[str] = None


class TemplateRename(CamelModel):
    name: str = Field(min_length=1)


class CategoryIn(CamelModel):
    name: str


class CategoryReorder(CamelModel):
    source_id: str
    target_id: str


class QuestionIn(CamelModel):
    category_id: str
    text: str = "New Question"
    type: QuestionType = "DIRECT"
    multiplier: float = Field(default=1.0, gt=0)


class QuestionPatch(CamelModel):
    text: Optional[str] = None
    type: Optional[QuestionType] = None
    multiplier: Optional[float] = Field(default=None, gt=0)
    category_id: Optional[str] = None


class QuestionMove(CamelModel):
    direction: Literal["up", "down"]


class CustomFeedbackIn(CamelModel):
    label: str = "New Feedback"
    score: float = 50


class CustomFeedbackPatch(CamelModel):
    label: Optional[str] = None
    score: Optional[float] = None
