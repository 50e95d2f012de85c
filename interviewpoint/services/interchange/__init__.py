from .schema import ExportDocument, ImportFormatError, ImportOutcome
from .service import InterchangeService, detect_kind, dump_yaml, parse_yaml

__all__ = [
    "ExportDocument",
    "ImportFormatError",
    "ImportOutcome",
    "InterchangeService",
    "detect_kind",
    "dump_yaml",
    "parse_yaml",
]
