"""Gemini response-schema subset.

Gemini accepts no ``$ref`` and no ``const``; references are inlined and a
recursive edge is cut to a bare object node.
"""

from __future__ import annotations

import logging

from typebridge.core.types import TYPE_KEY
from typebridge.schema.compiler import CompiledSchema

logger = logging.getLogger(__name__)


_PASSTHROUGH_KEYS = ("description", "format", "enum")


def _convert(node: dict, definitions: dict[str, dict], expanding: tuple[str, ...]) -> dict:
    ref = node.get("$ref")
    if isinstance(ref, str):
        name = ref.rsplit("/", 1)[-1]
        if name in expanding or name not in definitions:
            logger.debug("Cutting recursive reference to %s", name)
            return {"type": "object"}
        return _convert(definitions[name], definitions, expanding + (name,))

    out: dict = {}
    if "anyOf" in node:
        members = [m for m in node["anyOf"] if m.get("type") != "null"]
        nullable = len(members) < len(node["anyOf"])
        if len(members) == 1:
            out = _convert(members[0], definitions, expanding)
        else:
            out["anyOf"] = [_convert(m, definitions, expanding) for m in members]
        if nullable:
            out["nullable"] = True
        if node.get("description"):
            out["description"] = node["description"]
        return out

    schema_type = node.get("type")
    if isinstance(schema_type, list):
        non_null = [t for t in schema_type if t != "null"]
        out["type"] = non_null[0] if non_null else "string"
        if len(non_null) < len(schema_type):
            out["nullable"] = True
    elif schema_type is not None:
        out["type"] = schema_type

    for key in _PASSTHROUGH_KEYS:
        if key in node:
            out[key] = node[key]
    if "const" in node:
        out["enum"] = [node["const"]]

    if isinstance(node.get("properties"), dict):
        out["properties"] = {
            key: _convert(child, definitions, expanding)
            for key, child in node["properties"].items()
        }
        if "required" in node:
            out["required"] = list(node["required"])
    if isinstance(node.get("items"), dict):
        out["items"] = _convert(node["items"], definitions, expanding)
    return out


def to_gemini_schema(compiled: CompiledSchema) -> dict:
    """Shape a compiled schema into Gemini's response-schema subset."""

    root = compiled.schema.get("properties", {}).get(TYPE_KEY, {}).get("const")
    expanding = (root,) if root in compiled.definitions else ()
    return _convert(compiled.schema, compiled.definitions, expanding)
