from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for every stored document; camelCase on the wire and in YAML files."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


def _iso_text(value: Any) -> Any:
    # YAML loaders hand back date/datetime objects for unquoted timestamps.
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


Timestamp = Annotated[str, BeforeValidator(_iso_text)]


def new_id() -> str:
    return uuid.uuid4().hex


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


__all__ = ["CamelModel", "Timestamp", "new_id", "utc_now"]
