from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING, Dict, List

from sqlalchemy.exc import NoResultFound

from interviewpoint.services.common import new_id
from interviewpoint.services.interviews.schema import InterviewResult
from interviewpoint.services.storage import RUNS_KEY, StorageService

from .schema import CalendarEvent, RecruitmentRun, RunIn, RunStatus

if TYPE_CHECKING:
    from interviewpoint.services.interviews.service import ResultsService

logger = logging.getLogger(__name__)

CALENDAR_COLORS = [
    "#3b82f6",
    "#10b981",
    "#8b5cf6",
    "#f59e0b",
    "#ec4899",
    "#6366f1",
    "#14b8a6",
    "#f43f5e",
]


def _int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value >= 0x80000000 else value


def run_color(run_id: str) -> str:
    """Stable palette pick for a run id (same hash the browser calendar used)."""

    acc = 0
    for ch in run_id:
        acc = ord(ch) + (_int32(_int32(acc) << 5) - acc)
    return CALENDAR_COLORS[abs(acc) % len(CALENDAR_COLORS)]


class RunsService:
    """Recruitment runs grouping results for reporting."""

    def __init__(self, storage: StorageService, results: ResultsService) -> None:
        self._storage = storage
        self._results = results

    def list(self) -> List[RecruitmentRun]:
        return [RecruitmentRun.model_validate(item) for item in self._storage.get(RUNS_KEY, [])]

    def get(self, run_id: str) -> RecruitmentRun:
        for run in self.list():
            if run.id == run_id:
                return run
        raise NoResultFound(f"Recruitment run {run_id} not found")

    def create(self, payload: RunIn) -> RecruitmentRun:
        run = RecruitmentRun(id=new_id(), **payload.model_dump())
        return self.add(run, keep_id=True)

    def add(self, run: RecruitmentRun, *, keep_id: bool = False) -> RecruitmentRun:
        if not keep_id:
            run = run.model_copy(update={"id": new_id()})
        runs = self.list()
        runs.append(run)
        self._save(runs)
        logger.info("run %s created (%s)", run.id, run.name)
        return run

    def update(self, run_id: str, payload: RunIn) -> RecruitmentRun:
        runs = self.list()
        for idx, run in enumerate(runs):
            if run.id == run_id:
                runs[idx] = RecruitmentRun(id=run_id, **payload.model_dump())
                self._save(runs)
                return runs[idx]
        raise NoResultFound(f"Recruitment run {run_id} not found")

    def set_status(self, run_id: str, status: RunStatus) -> RecruitmentRun:
        runs = self.list()
        for run in runs:
            if run.id == run_id:
                run.status = status
                self._save(runs)
                logger.info("run %s marked %s", run_id, status)
                return run
        raise NoResultFound(f"Recruitment run {run_id} not found")

    def delete(self, run_id: str) -> None:
        runs = self.list()
        remaining = [r for r in runs if r.id != run_id]
        if len(remaining) == len(runs):
            raise NoResultFound(f"Recruitment run {run_id} not found")
        self._save(remaining)
        unlinked = self._results.unlink_run(run_id)
        logger.info("run %s deleted; %d results unlinked", run_id, unlinked)

    def results_for(self, run_id: str) -> List[InterviewResult]:
        self.get(run_id)
        return self._results.list(run_id=run_id)

    def calendar_events(self) -> List[CalendarEvent]:
        counts: Dict[str, int] = {}
        for result in self._results.list():
            if result.recruitment_run_id:
                counts[result.recruitment_run_id] = counts.get(result.recruitment_run_id, 0) + 1
        events: List[CalendarEvent] = []
        for run in self.list():
            # all-day event ends are exclusive
            end = run.end_date + timedelta(days=1) if run.end_date else None
            events.append(
                CalendarEvent(
                    id=run.id,
                    title=run.name,
                    start=run.start_date,
                    end=end,
                    count=counts.get(run.id, 0),
                    background_color=run_color(run.id),
                )
            )
        return events

    def replace_all(self, runs: List[RecruitmentRun]) -> None:
        self._save(runs)

    def _save(self, runs: List[RecruitmentRun]) -> None:
        self._storage.put(RUNS_KEY, [r.to_document() for r in runs])


__all__ = ["RunsService", "run_color", "CALENDAR_COLORS"]
