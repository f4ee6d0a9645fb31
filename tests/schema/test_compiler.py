"""Tests for descriptor -> JSON schema compilation."""

from __future__ import annotations

import json

import pytest
from pydantic import BaseModel, Field

from typebridge.core.config import SchemaOptions
from typebridge.core.errors import SchemaCompilationError
from typebridge.core.registry import StructRegistry
from typebridge.core.types import (
    DATE,
    DATETIME,
    FLOAT,
    INT,
    NULL,
    STRING,
    ArrayOf,
    EnumType,
    FieldSpec,
    FixedRecord,
    MapOf,
    OptionalOf,
    UnionOf,
)
from typebridge.schema.compiler import SchemaCompiler, compile_node, compile_schema


REGISTRY = StructRegistry()
OPTIONS = SchemaOptions()


class Peek(BaseModel):
    start_line: int
    end_line: int


class Grep(BaseModel):
    pattern: str = Field(description="Regular expression")


class Finish(BaseModel):
    """Stop and answer."""

    answer: str


class TreeNode(BaseModel):
    label: str
    child: TreeNode | None = None


class Aliased(BaseModel):
    kind: str = Field(alias="_type")


PEEK = REGISTRY.from_model(Peek)
GREP = REGISTRY.from_model(Grep)
FINISH = REGISTRY.from_model(Finish)


def _schema(descriptor) -> dict:
    return compile_schema(descriptor, options=OPTIONS).schema


@pytest.mark.parametrize(
    ("descriptor", "expected"),
    [
        (FLOAT, {"type": "number"}),
        (INT, {"type": "integer"}),
        (DATE, {"type": "string", "format": "date"}),
        (DATETIME, {"type": "string", "format": "date-time"}),
        (OptionalOf(STRING), {"type": ["string", "null"]}),
        (
            EnumType(("low", "medium", "high")),
            {"type": "string", "enum": ["low", "medium", "high"]},
        ),
        (ArrayOf(INT), {"type": "array", "items": {"type": "integer"}}),
        (
            OptionalOf(ArrayOf(INT)),
            {"type": ["array", "null"], "items": {"type": "integer"}},
        ),
        (UnionOf((STRING, NULL)), {"type": ["string", "null"]}),
        (
            UnionOf((STRING, INT, NULL)),
            {"anyOf": [{"type": "string"}, {"type": "integer"}, {"type": "null"}]},
        ),
    ],
)
def test_compile_simple_descriptors(descriptor: object, expected: dict) -> None:
    assert _schema(descriptor) == expected


def test_map_description_and_no_property_names() -> None:
    schema = _schema(MapOf(STRING, INT))

    assert schema == {
        "type": "object",
        "additionalProperties": {"type": "integer"},
        "description": "string→integer mapping",
    }
    assert "propertyNames" not in schema


def test_named_fixed_record_carries_type_discriminator() -> None:
    record = FixedRecord(name="Result", fields=(FieldSpec("items", ArrayOf(INT)),))

    schema = _schema(record)

    assert schema == {
        "type": "object",
        "properties": {
            "_type": {"type": "string", "const": "Result"},
            "items": {"type": "array", "items": {"type": "integer"}},
        },
        "required": ["_type", "items"],
        "additionalProperties": False,
    }


def test_anonymous_record_requires_every_field() -> None:
    record = FixedRecord(
        fields=(
            FieldSpec("query", STRING, description="What to look for"),
            FieldSpec("limit", INT, required=False),
        )
    )

    schema = _schema(record)

    assert "_type" not in schema["properties"]
    assert schema["required"] == ["query", "limit"]
    assert schema["properties"]["query"] == {"type": "string", "description": "What to look for"}


def test_struct_schema_shape() -> None:
    schema = _schema(GREP)

    assert list(schema["properties"]) == ["_type", "pattern"]
    assert schema["properties"]["_type"] == {"type": "string", "const": "Grep"}
    assert schema["properties"]["pattern"]["description"] == "Regular expression"
    assert schema["required"] == ["_type", "pattern"]
    assert schema["description"] == "Grep struct"
    assert _schema(FINISH)["description"] == "Stop and answer."


def test_struct_descriptions_can_be_disabled() -> None:
    schema = compile_schema(GREP, options=SchemaOptions(struct_descriptions=False)).schema

    assert "description" not in schema


def test_union_of_structs_uses_any_of() -> None:
    compiled = compile_schema(UnionOf((PEEK, GREP, FINISH)), options=OPTIONS)

    members = compiled.schema["anyOf"]
    assert [m["properties"]["_type"]["const"] for m in members] == ["Peek", "Grep", "Finish"]
    assert "oneOf" not in json.dumps(compiled.schema)
    assert set(compiled.definitions) == {"Peek", "Grep", "Finish"}


def test_every_struct_definition_requires_type_first() -> None:
    compiled = compile_schema(UnionOf((PEEK, GREP, FINISH, NULL)), options=OPTIONS)

    for name, node in compiled.definitions.items():
        assert node["required"][0] == "_type"
        assert node["properties"]["_type"]["const"] == name


def test_self_reference_terminates_with_one_back_reference() -> None:
    tree = REGISTRY.from_model(TreeNode)

    compiled = compile_schema(tree, options=OPTIONS)

    assert json.dumps(compiled.schema).count('"$ref"') == 1
    assert compiled.schema["properties"]["child"] == {
        "anyOf": [{"$ref": "#/$defs/TreeNode"}, {"type": "null"}]
    }
    assert set(compiled.definitions) == {"TreeNode"}


def test_repeated_struct_in_one_pass_becomes_ref() -> None:
    record = FixedRecord(fields=(FieldSpec("first", PEEK), FieldSpec("second", PEEK)))

    schema = _schema(record)

    assert schema["properties"]["first"]["properties"]["_type"]["const"] == "Peek"
    assert schema["properties"]["second"] == {"$ref": "#/$defs/Peek"}


def test_compilation_is_idempotent() -> None:
    descriptor = FixedRecord(
        fields=(
            FieldSpec("tree", REGISTRY.from_model(TreeNode)),
            FieldSpec("action", UnionOf((PEEK, GREP, FINISH))),
        )
    )

    first = compile_schema(descriptor, options=OPTIONS)
    second = compile_schema(descriptor, options=OPTIONS)

    assert first.to_json_schema() == second.to_json_schema()


def test_to_json_schema_mounts_definitions() -> None:
    compiled = compile_schema(FixedRecord(fields=(FieldSpec("action", PEEK),)), options=OPTIONS)

    schema = compiled.to_json_schema(title="Output")

    assert schema["title"] == "Output"
    assert set(schema["$defs"]) == {"Peek"}
    assert "$defs" not in compiled.schema


def test_custom_definitions_key() -> None:
    tree = REGISTRY.from_model(TreeNode)
    compiler = SchemaCompiler(SchemaOptions(defs_key="definitions"))

    schema = compiler.to_json_schema(tree)

    assert "definitions" in schema
    assert schema["properties"]["child"]["anyOf"][0] == {"$ref": "#/definitions/TreeNode"}


def test_compile_node_uses_caller_pass_state() -> None:
    definitions: dict[str, dict] = {}

    assert compile_node(PEEK, {"Peek"}, definitions) == {"$ref": "#/$defs/Peek"}
    assert definitions == {}

    compile_node(PEEK, set(), definitions)
    assert set(definitions) == {"Peek"}


def test_type_field_collision_is_a_compilation_error() -> None:
    ref = StructRegistry().from_model(Aliased)

    with pytest.raises(SchemaCompilationError, match="_type"):
        compile_schema(ref, options=OPTIONS)


def test_named_record_type_field_collision() -> None:
    record = FixedRecord(name="Bad", fields=(FieldSpec("_type", STRING),))

    with pytest.raises(SchemaCompilationError):
        compile_schema(record, options=OPTIONS)


def test_distinct_structs_with_same_name_raise() -> None:
    first = StructRegistry().define_struct("Dup", [FieldSpec("a", STRING)])
    second = StructRegistry().define_struct("Dup", [FieldSpec("b", INT)])

    with pytest.raises(SchemaCompilationError, match="Dup"):
        compile_schema(UnionOf((first, second)), options=OPTIONS)


def test_compiler_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TYPEBRIDGE_STRUCT_DESCRIPTIONS", "false")

    schema = SchemaCompiler().compile(PEEK).schema

    assert "description" not in schema


def test_optional_field_without_nullable_type_accepts_null() -> None:
    record = FixedRecord(
        fields=(
            FieldSpec("answer", STRING),
            FieldSpec("score", INT, required=False),
            FieldSpec("note", OptionalOf(STRING), required=False),
            FieldSpec("peek", PEEK, required=False),
        )
    )

    properties = _schema(record)["properties"]

    assert properties["answer"] == {"type": "string"}
    assert properties["score"] == {"type": ["integer", "null"]}
    assert properties["note"] == {"type": ["string", "null"]}
    assert properties["peek"]["type"] == ["object", "null"]


@pytest.mark.parametrize(
    ("descriptor", "expected"),
    [
        (EnumType.from_literal(1, 2), {"type": "integer", "enum": [1, 2]}),
        (EnumType.from_literal(True), {"type": "boolean", "enum": [True]}),
        (EnumType.from_literal("a", 1), {"type": ["string", "integer"], "enum": ["a", 1]}),
    ],
)
def test_non_string_literal_enums_keep_their_json_type(descriptor: object, expected: dict) -> None:
    assert _schema(descriptor) == expected
