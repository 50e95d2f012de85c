from .schema import Category, CustomFeedback, InterviewTemplate, Question
from .service import TemplatesService, check_references, sorted_view

__all__ = [
    "Category",
    "CustomFeedback",
    "InterviewTemplate",
    "Question",
    "TemplatesService",
    "check_references",
    "sorted_view",
]
