from __future__ import annotations

from typing import List, Literal, Optional

from interviewpoint.services.common import CamelModel

DocumentKind = Literal["run", "result", "template", "settings", "backup"]


class ImportFormatError(ValueError):
    """Raised when an uploaded YAML document cannot be imported."""


class ExportDocument(CamelModel):
    filename: str
    content: str
    media_type: str = "text/yaml"


class ImportOutcome(CamelModel):
    kind: DocumentKind
    message: str
    ids: List[str] = []
    run_id: Optional[str] = None
