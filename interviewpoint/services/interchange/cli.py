from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from sqlalchemy.exc import NoResultFound

from interviewpoint.services.interviews import ResultsService
from interviewpoint.services.runs import RunsService
from interviewpoint.services.settings import SettingsService
from interviewpoint.services.storage import StorageService
from interviewpoint.services.templates import TemplatesService

from .schema import ExportDocument
from .service import InterchangeService

logger = logging.getLogger(__name__)

EXPORT_KINDS = ("template", "result", "settings", "run", "backup")


def build_service(database_url: Optional[str] = None) -> InterchangeService:
    storage = StorageService(database_url=database_url)
    results = ResultsService(storage)
    return InterchangeService(
        templates=TemplatesService(storage, seed_demo=False),
        results=results,
        runs=RunsService(storage, results),
        settings=SettingsService(storage),
    )


def export_document(service: InterchangeService, kind: str, item_id: Optional[str]) -> ExportDocument:
    if kind == "settings":
        return service.export_settings()
    if kind == "backup":
        return service.export_backup()
    if not item_id:
        raise ValueError(f"Exporting a {kind} needs an id")
    exporters = {
        "template": service.export_template,
        "result": service.export_result,
        "run": service.export_run,
    }
    return exporters[kind](item_id)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Import and export InterViewPoint YAML documents")
    parser.add_argument("--db", dest="database_url", default=None, help="Database URL (defaults to env DATABASE_URL)")
    sub = parser.add_subparsers(dest="command", required=True)

    importer = sub.add_parser("import", help="Import a template, result, settings, run or backup file")
    importer.add_argument("path", help="YAML file to import")

    exporter = sub.add_parser("export", help="Write a YAML export")
    exporter.add_argument("kind", choices=EXPORT_KINDS)
    exporter.add_argument("item_id", nargs="?", default=None, help="Template, result or run id")
    exporter.add_argument("-o", "--output", default=None, help="Target file (defaults to the suggested file name)")

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    service = build_service(args.database_url)

    try:
        if args.command == "import":
            outcome = service.import_document(Path(args.path).read_text(encoding="utf-8"))
            print(outcome.message)
            return 0
        document = export_document(service, args.kind, args.item_id)
    except (ValueError, NoResultFound, OSError) as exc:
        logger.error("%s", exc)
        return 1

    target = Path(args.output or document.filename)
    target.write_text(document.content, encoding="utf-8")
    print(f"wrote {target}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
