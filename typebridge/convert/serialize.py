"""Type-tagging serializer: typed values back to plain JSON values.

Every record instance gets a leading ``_type`` tag so the value can be embedded
in later prompt context and still resolve unions when it comes back.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable

from pydantic import BaseModel

from typebridge.core.registry import AnonymousRecord
from typebridge.core.types import TYPE_KEY


ANONYMOUS_RECORD_NAME = "AnonymousRecord"


def type_name(model: type[BaseModel]) -> str:
    """Tag written for instances of ``model``."""

    if issubclass(model, AnonymousRecord):
        return ANONYMOUS_RECORD_NAME
    return model.__name__


def _serialize_model(value: BaseModel) -> dict[str, Any]:
    out: dict[str, Any] = {TYPE_KEY: type_name(type(value))}
    for name, info in type(value).model_fields.items():
        item = getattr(value, name)
        # Absent means None where None is also the declared default.
        if item is None and not info.is_required() and info.default is None:
            continue
        out[info.alias or name] = serialize(item)
    return out


def serialize(value: Any) -> Any:
    """Return a plain JSON-ready value with ``_type`` on every record."""

    if isinstance(value, BaseModel):
        return _serialize_model(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {serialize(k): serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [serialize(item) for item in value]
    return value


def serialize_for_prompt(value: Any, *, indent: int | None = 2) -> str:
    """Serialized value as JSON text for prompt embedding."""

    return json.dumps(serialize(value), indent=indent, ensure_ascii=False)


def serialize_history(entries: Iterable[Any]) -> list[Any]:
    """Serialize history entries for follow-up prompts, dropping ``None`` entries."""

    return [serialize(entry) for entry in entries if entry is not None]
