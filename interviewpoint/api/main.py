from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional
from urllib.parse import quote

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse, Response
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.exc import NoResultFound

from interviewpoint.services.interchange import ExportDocument, ImportOutcome, InterchangeService
from interviewpoint.services.interviews import (
    AnswerIn,
    DraftDetails,
    DraftView,
    InterviewResult,
    InterviewService,
    QuestionOptions,
    ResultPatch,
    ResultsService,
    Scorecard,
)
from interviewpoint.services.runs import CalendarEvent, RecruitmentRun, RunIn, RunStatusIn, RunsService
from interviewpoint.services.settings import AppSettings, SettingsService
from interviewpoint.services.statistics import StatisticsReport, StatisticsService
from interviewpoint.services.storage import StorageService
from interviewpoint.services.templates import InterviewTemplate, TemplatesService, sorted_view
from interviewpoint.services.templates.schema import (
    CategoryIn,
    CategoryReorder,
    CategoryView,
    CustomFeedbackIn,
    CustomFeedbackPatch,
    QuestionIn,
    QuestionMove,
    QuestionPatch,
    TemplateCreate,
    TemplateRename,
)


load_dotenv()
logger = logging.getLogger("interviewpoint.api")


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./interviewpoint.db"
    SEED_DEMO_TEMPLATE: bool = True
    LOG_LEVEL: str = "INFO"
    APP_TITLE: str = "InterViewPoint"
    MAX_IMPORT_BYTES: int = 5_000_000

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


settings = Settings()
app = FastAPI(title=settings.APP_TITLE)
storage_service = StorageService(database_url=settings.DATABASE_URL)
settings_service = SettingsService(storage_service)
templates_service = TemplatesService(storage_service, seed_demo=settings.SEED_DEMO_TEMPLATE)
results_service = ResultsService(storage_service)
interview_service = InterviewService(
    templates=templates_service,
    settings=settings_service,
    results=results_service,
    storage=storage_service,
)
runs_service = RunsService(storage_service, results_service)
statistics_service = StatisticsService(results_service)
interchange_service = InterchangeService(
    templates=templates_service,
    results=results_service,
    runs=runs_service,
    settings=settings_service,
)


def get_settings() -> Settings:
    return settings


@app.on_event("startup")
async def _startup() -> None:
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    logger.info("InterViewPoint API ready (%d templates)", len(templates_service.list()))


@app.exception_handler(NoResultFound)
async def not_found_handler(request: Request, exc: NoResultFound) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ValueError)
async def invalid_operation_handler(request: Request, exc: ValueError) -> JSONResponse:
    logger.info("rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/healthz", response_class=JSONResponse)
async def healthz() -> Dict[str, str]:
    return {"status": "ok"}


# ------------------------- Settings Endpoints --------------------------


@app.get("/settings", response_model=AppSettings)
async def get_feedback_settings() -> AppSettings:
    return settings_service.get()


@app.put("/settings", response_model=AppSettings)
async def save_feedback_settings(body: AppSettings) -> AppSettings:
    return settings_service.save(body)


@app.post("/settings/reset", response_model=AppSettings)
async def reset_feedback_settings() -> AppSettings:
    return settings_service.reset()


# ------------------------- Template Endpoints --------------------------


@app.get("/templates", response_model=List[InterviewTemplate])
async def list_templates() -> List[InterviewTemplate]:
    return templates_service.list()


@app.post("/templates", response_model=InterviewTemplate, status_code=201)
async def create_template(body: Optional[TemplateCreate] = None) -> InterviewTemplate:
    return templates_service.create(body.name if body else None)


@app.get("/templates/{template_id}", response_model=InterviewTemplate)
async def get_template(template_id: str) -> InterviewTemplate:
    return templates_service.get(template_id)


@app.get("/templates/{template_id}/outline", response_model=List[CategoryView])
async def template_outline(template_id: str) -> List[CategoryView]:
    return sorted_view(templates_service.get(template_id))


@app.put("/templates/{template_id}", response_model=InterviewTemplate)
async def replace_template(template_id: str, body: InterviewTemplate) -> InterviewTemplate:
    if body.id != template_id:
        raise HTTPException(status_code=400, detail="Template id does not match the path")
    return templates_service.update(body)


@app.patch("/templates/{template_id}", response_model=InterviewTemplate)
async def rename_template(template_id: str, body: TemplateRename) -> InterviewTemplate:
    return templates_service.rename(template_id, body.name)


@app.delete("/templates/{template_id}", status_code=204)
async def delete_template(template_id: str) -> Response:
    templates_service.delete(template_id)
    return Response(status_code=204)


@app.post("/templates/{template_id}/duplicate", response_model=InterviewTemplate, status_code=201)
async def duplicate_template(template_id: str) -> InterviewTemplate:
    return templates_service.duplicate(template_id)


@app.post("/templates/{template_id}/categories", response_model=InterviewTemplate)
async def add_category(template_id: str, body: CategoryIn) -> InterviewTemplate:
    return templates_service.add_category(template_id, body.name)


@app.post("/templates/{template_id}/categories/reorder", response_model=InterviewTemplate)
async def reorder_category(template_id: str, body: CategoryReorder) -> InterviewTemplate:
    return templates_service.reorder_category(template_id, body.source_id, body.target_id)


@app.patch("/templates/{template_id}/categories/{category_id}", response_model=InterviewTemplate)
async def rename_category(template_id: str, category_id: str, body: CategoryIn) -> InterviewTemplate:
    return templates_service.rename_category(template_id, category_id, body.name)


@app.delete("/templates/{template_id}/categories/{category_id}", response_model=InterviewTemplate)
async def remove_category(template_id: str, category_id: str) -> InterviewTemplate:
    return templates_service.remove_category(template_id, category_id)


@app.post("/templates/{template_id}/questions", response_model=InterviewTemplate)
async def add_question(template_id: str, body: QuestionIn) -> InterviewTemplate:
    return templates_service.add_question(template_id, body)


@app.patch("/templates/{template_id}/questions/{question_id}", response_model=InterviewTemplate)
async def update_question(template_id: str, question_id: str, body: QuestionPatch) -> InterviewTemplate:
    return templates_service.update_question(template_id, question_id, body)


@app.delete("/templates/{template_id}/questions/{question_id}", response_model=InterviewTemplate)
async def remove_question(template_id: str, question_id: str) -> InterviewTemplate:
    return templates_service.remove_question(template_id, question_id)


@app.post("/templates/{template_id}/questions/{question_id}/move", response_model=InterviewTemplate)
async def move_question(template_id: str, question_id: str, body: QuestionMove) -> InterviewTemplate:
    return templates_service.move_question(template_id, question_id, body.direction)


@app.post("/templates/{template_id}/questions/{question_id}/feedbacks", response_model=InterviewTemplate)
async def add_custom_feedback(
    template_id: str, question_id: str, body: Optional[CustomFeedbackIn] = None
) -> InterviewTemplate:
    return templates_service.add_custom_feedback(template_id, question_id, body)


@app.patch(
    "/templates/{template_id}/questions/{question_id}/feedbacks/{feedback_id}",
    response_model=InterviewTemplate,
)
async def update_custom_feedback(
    template_id: str, question_id: str, feedback_id: str, body: CustomFeedbackPatch
) -> InterviewTemplate:
    return templates_service.update_custom_feedback(template_id, question_id, feedback_id, body)


@app.delete(
    "/templates/{template_id}/questions/{question_id}/feedbacks/{feedback_id}",
    response_model=InterviewTemplate,
)
async def remove_custom_feedback(template_id: str, question_id: str, feedback_id: str) -> InterviewTemplate:
    return templates_service.remove_custom_feedback(template_id, question_id, feedback_id)


# ------------------------- Interview Endpoints -------------------------


@app.post("/interviews", response_model=DraftView, status_code=201)
async def start_interview(template_id: str = Query(..., alias="templateId")) -> DraftView:
    return interview_service.start(template_id)


@app.get("/interviews/{draft_id}", response_model=DraftView)
async def get_interview(draft_id: str) -> DraftView:
    return interview_service.get(draft_id)


@app.get("/interviews/{draft_id}/questions/{question_id}/options", response_model=QuestionOptions)
async def question_options(draft_id: str, question_id: str) -> QuestionOptions:
    return interview_service.options(draft_id, question_id)


@app.put("/interviews/{draft_id}/answers/{question_id}", response_model=DraftView)
async def record_answer(draft_id: str, question_id: str, body: AnswerIn) -> DraftView:
    return interview_service.record_answer(draft_id, question_id, body)


@app.delete("/interviews/{draft_id}/answers/{question_id}", response_model=DraftView)
async def clear_answer(draft_id: str, question_id: str) -> DraftView:
    return interview_service.clear_answer(draft_id, question_id)


@app.patch("/interviews/{draft_id}", response_model=DraftView)
async def update_interview(draft_id: str, body: DraftDetails) -> DraftView:
    return interview_service.set_details(draft_id, body)


@app.post("/interviews/{draft_id}/finish", response_model=InterviewResult, status_code=201)
async def finish_interview(draft_id: str) -> InterviewResult:
    return interview_service.finish(draft_id)


@app.delete("/interviews/{draft_id}", status_code=204)
async def discard_interview(draft_id: str) -> Response:
    interview_service.discard(draft_id)
    return Response(status_code=204)


# --------------------------- Result Endpoints --------------------------


@app.get("/results", response_model=List[InterviewResult])
async def list_results(run_id: Optional[str] = Query(default=None)) -> List[InterviewResult]:
    return results_service.list(run_id=run_id)


@app.get("/results/{result_id}", response_model=InterviewResult)
async def get_result(result_id: str) -> InterviewResult:
    return results_service.get(result_id)


@app.patch("/results/{result_id}", response_model=InterviewResult)
async def update_result(result_id: str, body: ResultPatch) -> InterviewResult:
    return results_service.update(result_id, body)


@app.delete("/results/{result_id}", status_code=204)
async def delete_result(result_id: str) -> Response:
    results_service.delete(result_id)
    return Response(status_code=204)


@app.get("/results/{result_id}/scorecard", response_model=Scorecard)
async def result_scorecard(result_id: str) -> Scorecard:
    return results_service.scorecard(result_id)


# ---------------------------- Run Endpoints ----------------------------


@app.get("/runs", response_model=List[RecruitmentRun])
async def list_runs() -> List[RecruitmentRun]:
    return runs_service.list()


@app.post("/runs", response_model=RecruitmentRun, status_code=201)
async def create_run(body: RunIn) -> RecruitmentRun:
    return runs_service.create(body)


@app.get("/runs/{run_id}", response_model=RecruitmentRun)
async def get_run(run_id: str) -> RecruitmentRun:
    return runs_service.get(run_id)


@app.put("/runs/{run_id}", response_model=RecruitmentRun)
async def update_run(run_id: str, body: RunIn) -> RecruitmentRun:
    return runs_service.update(run_id, body)


@app.post("/runs/{run_id}/status", response_model=RecruitmentRun)
async def set_run_status(run_id: str, body: RunStatusIn) -> RecruitmentRun:
    return runs_service.set_status(run_id, body.status)


@app.delete("/runs/{run_id}", status_code=204)
async def delete_run(run_id: str) -> Response:
    runs_service.delete(run_id)
    return Response(status_code=204)


@app.get("/runs/{run_id}/results", response_model=List[InterviewResult])
async def run_results(run_id: str) -> List[InterviewResult]:
    return runs_service.results_for(run_id)


@app.get("/runs/{run_id}/statistics", response_model=StatisticsReport)
async def run_statistics(run_id: str) -> StatisticsReport:
    runs_service.get(run_id)
    return statistics_service.report(run_id=run_id)


@app.get("/calendar", response_model=List[CalendarEvent])
async def calendar() -> List[CalendarEvent]:
    return runs_service.calendar_events()


@app.get("/statistics", response_model=StatisticsReport)
async def statistics() -> StatisticsReport:
    return statistics_service.report()


# ------------------------ Interchange Endpoints ------------------------


def _content_disposition(filename: str) -> str:
    # plain ASCII fallback for old clients, RFC 5987 form for the real name
    fallback = re.sub(r'[^\x20-\x7e]|["\\]', "_", filename)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


def _yaml_response(document: ExportDocument) -> Response:
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={"Content-Disposition": _content_disposition(document.filename)},
    )


@app.get("/export/templates/{template_id}")
async def export_template(template_id: str) -> Response:
    return _yaml_response(interchange_service.export_template(template_id))


@app.get("/export/results/{result_id}")
async def export_result(result_id: str) -> Response:
    return _yaml_response(interchange_service.export_result(result_id))


@app.get("/export/settings")
async def export_settings() -> Response:
    return _yaml_response(interchange_service.export_settings())


@app.get("/export/runs/{run_id}")
async def export_run(run_id: str) -> Response:
    return _yaml_response(interchange_service.export_run(run_id))


@app.get("/export/backup")
async def export_backup() -> Response:
    return _yaml_response(interchange_service.export_backup())


@app.post("/import", response_model=ImportOutcome)
async def import_document(request: Request, cfg: Settings = Depends(get_settings)) -> ImportOutcome:
    raw = await request.body()
    if len(raw) > cfg.MAX_IMPORT_BYTES:
        logger.warning("rejected import of %d bytes", len(raw))
        raise HTTPException(status_code=413, detail=f"Import file exceeds {cfg.MAX_IMPORT_BYTES} bytes")
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise HTTPException(status_code=400, detail="Import file must be UTF-8 text") from exc
    outcome = interchange_service.import_document(text)
    logger.info("import finished: %s", outcome.message)
    return outcome


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000)
