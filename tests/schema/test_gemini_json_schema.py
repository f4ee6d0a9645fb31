"""Gemini response-schema subset."""

from __future__ import annotations

import json

from pydantic import BaseModel

from typebridge.core.config import SchemaOptions
from typebridge.core.registry import StructRegistry
from typebridge.core.types import (
    INT,
    STRING,
    EnumType,
    FieldSpec,
    FixedRecord,
    OptionalOf,
    UnionOf,
)
from typebridge.schema.compiler import compile_schema
from typebridge.schema.gemini_json_schema import to_gemini_schema


class Peek(BaseModel):
    start_line: int
    end_line: int


class Finish(BaseModel):
    answer: str


class TreeNode(BaseModel):
    label: str
    child: TreeNode | None = None


REGISTRY = StructRegistry()


def _gemini(descriptor) -> dict:
    return to_gemini_schema(compile_schema(descriptor, options=SchemaOptions()))


def test_no_refs_or_consts() -> None:
    peek = REGISTRY.from_model(Peek)
    record = FixedRecord(
        fields=(
            FieldSpec("first", peek),
            FieldSpec("second", peek),
            FieldSpec("action", UnionOf((peek, REGISTRY.from_model(Finish)))),
        )
    )

    schema = _gemini(record)
    text = json.dumps(schema)

    assert "$ref" not in text
    assert "const" not in text
    assert schema["properties"]["second"]["properties"]["_type"] == {
        "type": "string",
        "enum": ["Peek"],
    }
    assert len(schema["properties"]["action"]["anyOf"]) == 2


def test_nullable_scalars() -> None:
    record = FixedRecord(
        fields=(
            FieldSpec("note", OptionalOf(STRING)),
            FieldSpec("count", UnionOf((INT, STRING))),
            FieldSpec("level", EnumType(("low", "high"))),
        )
    )

    schema = _gemini(record)

    assert schema["properties"]["note"] == {"type": "string", "nullable": True}
    assert schema["properties"]["count"] == {
        "anyOf": [{"type": "integer"}, {"type": "string"}]
    }
    assert schema["properties"]["level"] == {"type": "string", "enum": ["low", "high"]}
    assert schema["required"] == ["note", "count", "level"]
    assert "additionalProperties" not in schema


def test_recursive_reference_is_cut() -> None:
    schema = _gemini(REGISTRY.from_model(TreeNode))

    assert schema["properties"]["child"] == {"type": "object", "nullable": True}
    assert schema["properties"]["label"] == {"type": "string"}
