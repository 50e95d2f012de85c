from .schema import CalendarEvent, RecruitmentRun, RunIn, RunStatusIn
from .service import RunsService, run_color

__all__ = ["CalendarEvent", "RecruitmentRun", "RunIn", "RunStatusIn", "RunsService", "run_color"]
