from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy.exc import NoResultFound

from interviewpoint.services.common import new_id, utc_now
from interviewpoint.services.runs.schema import RecruitmentRun
from interviewpoint.services.scoring import category_rollup, compute_totals, question_series, score_answer
from interviewpoint.services.settings import SettingsService
from interviewpoint.services.settings.schema import FeedbackOption
from interviewpoint.services.storage import RESULTS_KEY, RUNS_KEY, StorageService
from interviewpoint.services.templates import TemplatesService
from interviewpoint.services.templates.schema import Question

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

logger = logging.getLogger(__name__)


class ResultsService:
    """Saved interview results; newest first."""

    def __init__(self, storage: StorageService) -> None:
        self._storage = storage

    def list(self, run_id: Optional[str] = None) -> List[InterviewResult]:
        results = [InterviewResult.model_validate(item) for item in self._storage.get(RESULTS_KEY, [])]
        if run_id is not None:
            results = [r for r in results if r.recruitment_run_id == run_id]
        return results

    def get(self, result_id: str) -> InterviewResult:
        for result in self.list():
            if result.id == result_id:
                return result
        raise NoResultFound(f"Result {result_id} not found")

    def add(self, result: InterviewResult, *, keep_id: bool = False) -> InterviewResult:
        if not keep_id:
            result = result.model_copy(update={"id": new_id()})
        self._save([result] + self.list())
        logger.info("result %s stored for %s", result.id, result.candidate_name)
        return result

    def update(self, result_id: str, patch: ResultPatch) -> InterviewResult:
        results = self.list()
        for result in results:
            if result.id != result_id:
                continue
            fields = patch.model_fields_set
            if "candidate_name" in fields:
                if not (patch.candidate_name or "").strip():
                    raise ValueError("Candidate name must not be blank")
                result.candidate_name = patch.candidate_name
            if "summary" in fields:
                result.summary = patch.summary
            if "recruitment_run_id" in fields:
                if patch.recruitment_run_id is not None:
                    _require_run(self._storage, patch.recruitment_run_id, allow_inactive=True)
                result.recruitment_run_id = patch.recruitment_run_id
            self._save(results)
            return result
        raise NoResultFound(f"Result {result_id} not found")

    def delete(self, result_id: str) -> None:
        results = self.list()
        remaining = [r for r in results if r.id != result_id]
        if len(remaining) == len(results):
            raise NoResultFound(f"Result {result_id} not found")
        self._save(remaining)
        logger.info("result %s deleted", result_id)

    def unlink_run(self, run_id: str) -> int:
        results = self.list()
        touched = 0
        for result in results:
            if result.recruitment_run_id == run_id:
                result.recruitment_run_id = None
                touched += 1
        if touched:
            self._save(results)
        return touched

    def scorecard(self, result_id: str) -> Scorecard:
        result = self.get(result_id)
        answers = result.answer_scores()
        return Scorecard(
            result_id=result.id,
            candidate_name=result.candidate_name,
            template_name=result.template_name,
            score=compute_totals(result.questions, answers),
            categories=category_rollup(result.categories, result.questions, answers),
            questions=question_series(result.categories, result.questions, answers),
        )

    def replace_all(self, results: List[InterviewResult]) -> None:
        self._save(results)

    def _save(self, results: List[InterviewResult]) -> None:
        self._storage.put(RESULTS_KEY, [r.to_document() for r in results])


class InterviewService:
    """Interviews in progress. Drafts live in memory until finished."""

    def __init__(
        self,
        templates: TemplatesService,
        settings: SettingsService,
        results: ResultsService,
        storage: StorageService,
    ) -> None:
        self._templates = templates
        self._settings = settings
        self._results = results
        self._storage = storage
        self._drafts: Dict[str, InterviewDraft] = {}

    def start(self, template_id: str) -> DraftView:
        template = self._templates.get(template_id)
        snapshot = template.model_copy(deep=True)
        draft = InterviewDraft(
            id=new_id(),
            template_id=template.id,
            template_name=snapshot.name,
            started_at=utc_now(),
            categories=snapshot.categories,
            questions=snapshot.questions,
        )
        self._drafts[draft.id] = draft
        logger.info("interview %s started from template %s", draft.id, template.id)
        return self._view(draft)

    def get(self, draft_id: str) -> DraftView:
        return self._view(self._draft(draft_id))

    def drafts(self) -> List[InterviewDraft]:
        return list(self._drafts.values())

    def options(self, draft_id: str, question_id: str) -> QuestionOptions:
        question = _question(self._draft(draft_id), question_id)
        return QuestionOptions(
            question_id=question.id,
            standard=self._settings.options_for(question.type),
            custom=[FeedbackOption(key=f.id, label=f.label, score=f.score) for f in question.custom_feedbacks],
        )

    def record_answer(self, draft_id: str, question_id: str, payload: AnswerIn) -> DraftView:
        draft = self._draft(draft_id)
        question = _question(draft, question_id)
        raw_score, is_custom = self._resolve_feedback(question, payload.feedback)
        draft.answers[question.id] = AnswerData(
            feedback=payload.feedback,
            score=score_answer(raw_score, question.multiplier),
            note=payload.note,
            is_custom=is_custom,
        )
        return self._view(draft)

    def clear_answer(self, draft_id: str, question_id: str) -> DraftView:
        draft = self._draft(draft_id)
        _question(draft, question_id)
        draft.answers.pop(question_id, None)
        return self._view(draft)

    def set_details(self, draft_id: str, details: DraftDetails) -> DraftView:
        draft = self._draft(draft_id)
        fields = details.model_fields_set
        if "candidate_name" in fields and details.candidate_name is not None:
            draft.candidate_name = details.candidate_name
        if "summary" in fields and details.summary is not None:
            draft.summary = details.summary
        if "recruitment_run_id" in fields:
            if details.recruitment_run_id is not None:
                _require_run(self._storage, details.recruitment_run_id)
            draft.recruitment_run_id = details.recruitment_run_id
        return self._view(draft)

    def finish(self, draft_id: str) -> InterviewResult:
        draft = self._draft(draft_id)
        if not draft.candidate_name.strip():
            raise ValueError("Please enter candidate name")
        if draft.recruitment_run_id is not None:
            _require_run(self._storage, draft.recruitment_run_id)
        totals = compute_totals(draft.questions, draft.answer_scores())
        snapshot = draft.model_copy(deep=True)
        result = InterviewResult(
            id=new_id(),
            template_name=snapshot.template_name,
            candidate_name=snapshot.candidate_name,
            date=snapshot.started_at,
            completed_at=utc_now(),
            categories=snapshot.categories,
            questions=[
                QuestionResult(**q.model_dump(), answer=snapshot.answers.get(q.id)) for q in snapshot.questions
            ],
            total_score=totals.total,
            max_possible_score=totals.max,
            summary=snapshot.summary,
            recruitment_run_id=snapshot.recruitment_run_id,
        )
        self._results.add(result, keep_id=True)
        del self._drafts[draft_id]
        return result

    def discard(self, draft_id: str) -> None:
        self._draft(draft_id)
        del self._drafts[draft_id]
        logger.info("interview %s discarded", draft_id)

    def _resolve_feedback(self, question: Question, label: str) -> Tuple[float, bool]:
        for feedback in question.custom_feedbacks:
            if feedback.label == label:
                return feedback.score, True
        for option in self._settings.options_for(question.type):
            if option.label == label:
                return option.score, False
        raise ValueError(f"Unknown feedback '{label}' for question {question.id}")

    def _draft(self, draft_id: str) -> InterviewDraft:
        draft = self._drafts.get(draft_id)
        if draft is None:
            raise NoResultFound(f"Interview {draft_id} not found")
        return draft

    def _view(self, draft: InterviewDraft) -> DraftView:
        answers = draft.answer_scores()
        return DraftView(
            draft=draft,
            score=compute_totals(draft.questions, answers),
            categories=category_rollup(draft.categories, draft.questions, answers),
        )


def _question(draft: InterviewDraft, question_id: str) -> Question:
    for question in draft.questions:
        if question.id == question_id:
            return question
    raise NoResultFound(f"Question {question_id} not found in interview {draft.id}")


def _require_run(storage: StorageService, run_id: str, *, allow_inactive: bool = False) -> RecruitmentRun:
    for item in storage.get(RUNS_KEY, []):
        run = RecruitmentRun.model_validate(item)
        if run.id != run_id:
            continue
        if not allow_inactive and run.status != "ACTIVE":
            raise ValueError(f"Recruitment run {run.name} is not active")
        return run
    raise NoResultFound(f"Recruitment run {run_id} not found")


__all__ = ["InterviewService", "ResultsService"]
