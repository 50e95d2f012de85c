from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import Field, model_validator

from interviewpoint.services.common import CamelModel

RunStatus = Literal["ACTIVE", "COMPLETED", "ARCHIVED"]


class RecruitmentRun(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    status: RunStatus = "ACTIVE"

    @model_validator(mode="after")
    def _check_range(self) -> "RecruitmentRun":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("Run end date must not precede its start date")
        return self


class RunIn(CamelModel):
    name: str = Field(min_length=1)
    start_date: date
    end_date: Optional[date] = None
    description: Optional[str] = None
    status: RunStatus = "ACTIVE"


class RunStatusIn(CamelModel):
    status: RunStatus


class CalendarEvent(CamelModel):
    id: str
    title: str
    start: date
    end: Optional[date] = None
    all_day: bool = True
    count: int
    background_color: str
    border_color: str = "transparent"
