from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import Field

from interviewpoint.services.common import CamelModel, Timestamp
from interviewpoint.services.scoring.schema import CategoryScore, QuestionPoint, ScoreSummary
from interviewpoint.services.settings.schema import FeedbackOption
from interviewpoint.services.templates.schema import Category, Question


class AnswerData(CamelModel):
    feedback: str
    score: float
    note: Optional[str] = None
    is_custom: bool = False


class QuestionResult(Question):
    answer: Optional[AnswerData] = None


class InterviewResult(CamelModel):
    id: str
    template_name: str
    candidate_name: str
    date: Timestamp
    completed_at: Optional[Timestamp] = None
    categories: List[Category]
    questions: List[QuestionResult]
    total_score: float
    max_possible_score: float
    summary: Optional[str] = None
    recruitment_run_id: Optional[str] = None

    def answer_scores(self) -> Dict[str, float]:
        return {q.id: q.answer.score for q in self.questions if q.answer is not None}


class InterviewDraft(CamelModel):
    id: str
    template_id: str
    template_name: str
    started_at: Timestamp
    categories: List[Category]
    questions: List[Question]
    answers: Dict[str, AnswerData] = Field(default_factory=dict)
    candidate_name: str = ""
    summary: str = ""
    recruitment_run_id: Optional[str] = None

    def answer_scores(self) -> Dict[str, float]:
        return {qid: answer.score for qid, answer in self.answers.items()}


class DraftView(CamelModel):
    draft: InterviewDraft
    score: ScoreSummary
    categories: List[CategoryScore]


class AnswerIn(CamelModel):
    feedback: str
    note: Optional[str] = None


class DraftDetails(CamelModel):
    candidate_name: Optional[str] = None
    summary: Optional[str] = None
    recruitment_run_id: Optional[str] = None


class ResultPatch(CamelModel):
    candidate_name: Optional[str] = None
    summary: Optional[str] = None
    recruitment_run_id: Optional[str] = None


class QuestionOptions(CamelModel):
    question_id: str
    standard: List[FeedbackOption]
    custom: List[FeedbackOption]


class Scorecard(CamelModel):
    result_id: str
    candidate_name: str
    template_name: str
    score: ScoreSummary
    categories: List[CategoryScore]
    questions: List[QuestionPoint]
