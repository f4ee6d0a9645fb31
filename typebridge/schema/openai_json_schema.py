"""OpenAI strict ``json_schema`` response format."""

from __future__ import annotations

from collections.abc import Iterator
from copy import deepcopy

from typebridge.core.config import SchemaOptions
from typebridge.schema.compiler import CompiledSchema
from typebridge.utils.naming import schema_name


_BRANCH_KEYS = ("anyOf", "oneOf", "allOf")


def _is_object_node(node: dict) -> bool:
    schema_type = node.get("type")
    if isinstance(schema_type, list):
        return "object" in schema_type
    return schema_type == "object"


def _subschemas(node: dict, defs_key: str) -> Iterator[dict]:
    properties = node.get("properties")
    if isinstance(properties, dict):
        yield from properties.values()
    if isinstance(node.get("items"), dict):
        yield node["items"]
    if isinstance(node.get("additionalProperties"), dict):
        yield node["additionalProperties"]
    definitions = node.get(defs_key)
    if isinstance(definitions, dict):
        yield from definitions.values()
    for key in _BRANCH_KEYS:
        branches = node.get(key)
        if isinstance(branches, list):
            yield from (branch for branch in branches if isinstance(branch, dict))


def _close_objects(node: dict, defs_key: str) -> None:
    if _is_object_node(node) and isinstance(node.get("properties"), dict):
        node["additionalProperties"] = False
        node["required"] = list(node["properties"])
    for child in _subschemas(node, defs_key):
        _close_objects(child, defs_key)


def sanitize_openai_strict_schema(schema: dict, *, defs_key: str = "$defs") -> dict:
    """Return a copy of ``schema`` that satisfies OpenAI strict mode.

    Every object node that declares properties is closed
    (``additionalProperties: false``) and requires all of its properties.
    Shared definitions are read from ``defs_key``.
    """

    out = deepcopy(schema)
    _close_objects(out, defs_key)
    return out


def to_openai_response_format(
    compiled: CompiledSchema | dict,
    *,
    name: str | None = None,
    strict: bool = True,
    options: SchemaOptions | None = None,
) -> dict:
    """Wrap a compiled schema in OpenAI's ``response_format`` envelope.

    A plain dict schema keeps its definitions under ``options.defs_key``;
    a ``CompiledSchema`` carries its own key.
    """

    if isinstance(compiled, CompiledSchema):
        schema = compiled.to_json_schema()
        defs_key = compiled.defs_key
    else:
        schema = deepcopy(compiled)
        defs_key = (options or SchemaOptions()).defs_key
    schema.pop("$schema", None)
    if strict:
        schema = sanitize_openai_strict_schema(schema, defs_key=defs_key)
    return {
        "type": "json_schema",
        "json_schema": {
            "name": schema_name(name),
            "strict": strict,
            "schema": schema,
        },
    }
