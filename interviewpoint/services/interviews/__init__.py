from .schema import (
    AnswerData,
    AnswerIn,
    DraftDetails,
    DraftView,
    InterviewDraft,
    InterviewResult,
    QuestionOptions,
    QuestionResult,
    ResultPatch,
    Scorecard,
)
from .service import InterviewService, ResultsService

__all__ = [
    "AnswerData",
    "AnswerIn",
    "DraftDetails",
    "DraftView",
    "InterviewDraft",
    "InterviewResult",
    "InterviewService",
    "QuestionOptions",
    "QuestionResult",
    "ResultPatch",
    "ResultsService",
    "Scorecard",
]
