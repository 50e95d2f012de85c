from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from interviewpoint.services.common import new_id, utc_now
from interviewpoint.services.interviews.schema import InterviewResult
from interviewpoint.services.interviews.service import ResultsService
from interviewpoint.services.runs.schema import RecruitmentRun
from interviewpoint.services.runs.service import RunsService
from interviewpoint.services.settings import AppSettings, SettingsService
from interviewpoint.services.templates import InterviewTemplate, TemplatesService, check_references

from .schema import DocumentKind, ExportDocument, ImportFormatError, ImportOutcome

logger = logging.getLogger(__name__)

BACKUP_COLLECTIONS = ("templates", "results", "runs")


def dump_yaml(data: Any) -> str:
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)


def parse_yaml(text: str) -> Any:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        logger.warning("rejected malformed YAML upload: %s", exc)
        raise ImportFormatError(f"Could not parse YAML: {exc}") from exc


def detect_kind(data: Any) -> Optional[DocumentKind]:
    if not isinstance(data, dict):
        return None
    if isinstance(data.get("runInfo"), dict) and isinstance(data.get("results"), list):
        return "run"
    if data.get("candidateName") and isinstance(data.get("questions"), list):
        return "result"
    if "categories" in data and "questions" in data:
        return "template"
    if "direct" in data and "indirect" in data:
        return "settings"
    if all(key in data for key in BACKUP_COLLECTIONS):
        return "backup"
    return None


def safe_filename(name: str) -> str:
    return re.sub(r"\s+", "_", name)


def _validation_message(kind: str, exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"Invalid {kind} file: {location or 'document'}: {first.get('msg')}"


class InterchangeService:
    """YAML export and shape-detected import for every persisted document."""

    def __init__(
        self,
        templates: TemplatesService,
        results: ResultsService,
        runs: RunsService,
        settings: SettingsService,
    ) -> None:
        self._templates = templates
        self._results = results
        self._runs = runs
        self._settings = settings

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------
    def export_template(self, template_id: str) -> ExportDocument:
        template = self._templates.get(template_id)
        return ExportDocument(
            filename=f"{safe_filename(template.name)}_template.yaml",
            content=dump_yaml(template.to_document()),
        )

    def export_result(self, result_id: str) -> ExportDocument:
        result = self._results.get(result_id)
        return ExportDocument(
            filename=f"{safe_filename(result.candidate_name)}_interview.yaml",
            content=dump_yaml(result.to_document()),
        )

    def export_settings(self) -> ExportDocument:
        return ExportDocument(
            filename="interview_settings.yaml",
            content=dump_yaml(self._settings.get().to_document()),
        )

    def export_run(self, run_id: str) -> ExportDocument:
        run = self._runs.get(run_id)
        bundle = {
            "runInfo": run.to_document(),
            "results": [r.to_document() for r in self._runs.results_for(run_id)],
        }
        return ExportDocument(filename=f"Run_{safe_filename(run.name)}.yaml", content=dump_yaml(bundle))

    def export_backup(self) -> ExportDocument:
        backup = {
            "templates": [t.to_document() for t in self._templates.list()],
            "results": [r.to_document() for r in self._results.list()],
            "runs": [r.to_document() for r in self._runs.list()],
            "settings": self._settings.get().to_document(),
        }
        return ExportDocument(filename="interviewpoint_backup.yaml", content=dump_yaml(backup))

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------
    def import_document(self, text: str) -> ImportOutcome:
        return self.import_data(parse_yaml(text))

    def import_data(self, data: Any) -> ImportOutcome:
        kind = detect_kind(data)
        if kind is None:
            logger.warning("rejected upload with unknown shape")
            raise ImportFormatError("Unknown file format")
        handlers = {
            "run": self._import_run,
            "result": self._import_result,
            "template": self._import_template,
            "settings": self._import_settings,
            "backup": self._import_backup,
        }
        try:
            outcome = handlers[kind](data)
        except ValidationError as exc:
            logger.warning("rejected %s upload: %s", kind, exc)
            raise ImportFormatError(_validation_message(kind, exc)) from exc
        logger.info("imported %s document (%d ids)", kind, len(outcome.ids))
        return outcome

    def _import_template(self, data: Dict[str, Any]) -> ImportOutcome:
        template = self._checked_template({"id": new_id(), "createdAt": utc_now(), **data})
        stored = self._templates.add(template)
        return ImportOutcome(kind="template", message="Template Imported Successfully", ids=[stored.id])

    def _import_result(self, data: Dict[str, Any]) -> ImportOutcome:
        result = InterviewResult.model_validate({"id": new_id(), **data})
        stored = self._results.add(result)
        return ImportOutcome(kind="result", message="Result Imported Successfully", ids=[stored.id])

    def _import_settings(self, data: Dict[str, Any]) -> ImportOutcome:
        self._settings.save(AppSettings.model_validate(data))
        return ImportOutcome(kind="settings", message="Settings imported successfully!")

    def _import_run(self, data: Dict[str, Any]) -> ImportOutcome:
        run = RecruitmentRun.model_validate({"id": new_id(), **data["runInfo"]})
        results = [InterviewResult.model_validate(item) for item in data["results"]]
        stored_run = self._runs.add(run)
        ids: List[str] = []
        for result in reversed(results):
            relinked = result.model_copy(update={"recruitment_run_id": stored_run.id})
            ids.append(self._results.add(relinked).id)
        ids.reverse()
        return ImportOutcome(
            kind="run",
            message=f"Run imported with {len(ids)} results",
            ids=ids,
            run_id=stored_run.id,
        )

    def _import_backup(self, data: Dict[str, Any]) -> ImportOutcome:
        # validate everything before anything is replaced
        for key in BACKUP_COLLECTIONS:
            if not isinstance(data[key], list):
                raise ImportFormatError(f"Invalid backup file: {key} must be a list")
        if data.get("settings") is not None and not isinstance(data["settings"], dict):
            raise ImportFormatError("Invalid backup file: settings must be a mapping")
        templates = [self._checked_template(item) for item in data["templates"]]
        results = [InterviewResult.model_validate(item) for item in data["results"]]
        runs = [RecruitmentRun.model_validate(item) for item in data["runs"]]
        settings = AppSettings.model_validate(data["settings"]) if data.get("settings") else None

        self._templates.replace_all(templates)
        self._results.replace_all(results)
        self._runs.replace_all(runs)
        if settings is not None:
            self._settings.save(settings)
        return ImportOutcome(
            kind="backup",
            message=f"Backup restored: {len(templates)} templates, {len(results)} results, {len(runs)} runs",
            ids=[t.id for t in templates],
        )

    def _checked_template(self, data: Dict[str, Any]) -> InterviewTemplate:
        template = InterviewTemplate.model_validate(data)
        try:
            check_references(template)
        except ValueError as exc:
            raise ImportFormatError(f"Invalid template file: {exc}") from exc
        return template


__all__ = ["InterchangeService", "detect_kind", "dump_yaml", "parse_yaml", "safe_filename"]
