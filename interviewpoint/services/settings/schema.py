from __future__ import annotations

from enum import Enum
from typing import Dict, List, Literal

from pydantic import BaseModel, field_validator

from interviewpoint.services.common import CamelModel

QuestionType = Literal["DIRECT", "INDIRECT"]


class DirectFeedback(str, Enum):
    CORRECT = "CORRECT"
    TRIED = "TRIED"
    WRONG = "WRONG"
    SILENT = "SILENT"


class IndirectFeedback(str, Enum):
    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    NOT_GOOD = "NOT_GOOD"
    BAD = "BAD"


class FeedbackSetting(BaseModel):
    label: str
    score: float


DEFAULT_DIRECT: Dict[DirectFeedback, FeedbackSetting] = {
    DirectFeedback.CORRECT: FeedbackSetting(label="Correct Answer", score=100),
    DirectFeedback.TRIED: FeedbackSetting(label="Tried but Failed", score=40),
    DirectFeedback.WRONG: FeedbackSetting(label="Wrong Answer", score=0),
    DirectFeedback.SILENT: FeedbackSetting(label="Silent / No Answer", score=0),
}

DEFAULT_INDIRECT: Dict[IndirectFeedback, FeedbackSetting] = {
    IndirectFeedback.EXCELLENT: FeedbackSetting(label="Excellent", score=100),
    IndirectFeedback.GOOD: FeedbackSetting(label="Good", score=75),
    IndirectFeedback.NOT_GOOD: FeedbackSetting(label="Not Good", score=25),
    IndirectFeedback.BAD: FeedbackSetting(label="Bad", score=0),
}


class AppSettings(CamelModel):
    direct: Dict[DirectFeedback, FeedbackSetting]
    indirect: Dict[IndirectFeedback, FeedbackSetting]

    @field_validator("direct")
    @classmethod
    def _fill_direct(cls, value: Dict[DirectFeedback, FeedbackSetting]) -> Dict[DirectFeedback, FeedbackSetting]:
        return {key: value[key] if key in value else default.model_copy() for key, default in DEFAULT_DIRECT.items()}

    @field_validator("indirect")
    @classmethod
    def _fill_indirect(
        cls, value: Dict[IndirectFeedback, FeedbackSetting]
    ) -> Dict[IndirectFeedback, FeedbackSetting]:
        return {key: value[key] if key in value else default.model_copy() for key, default in DEFAULT_INDIRECT.items()}


class FeedbackOption(BaseModel):
    key: str
    label: str
    score: float


def default_settings() -> AppSettings:
    return AppSettings(
        direct={key: setting.model_copy() for key, setting in DEFAULT_DIRECT.items()},
        indirect={key: setting.model_copy() for key, setting in DEFAULT_INDIRECT.items()},
    )


def standard_options(settings: AppSettings, question_type: QuestionType) -> List[FeedbackOption]:
    scale = settings.direct if question_type == "DIRECT" else settings.indirect
    return [FeedbackOption(key=key.value, label=item.label, score=item.score) for key, item in scale.items()]
