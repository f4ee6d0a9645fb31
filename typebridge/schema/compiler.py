"""Compile type descriptors into JSON-Schema-shaped nodes.

Each compile pass owns a private ``visited`` set (the cycle guard) and a
``definitions`` table (one node per struct name). A struct already visited or
already defined in the pass compiles to a ``$ref`` back-reference.
"""

from __future__ import annotations

import logging
from copy import deepcopy
from dataclasses import dataclass, field
from enum import Enum

from typebridge.core.config import SchemaOptions
from typebridge.core.errors import SchemaCompilationError
from typebridge.core.types import (
    TYPE_KEY,
    ArrayOf,
    EnumType,
    FieldSpec,
    FixedRecord,
    MapOf,
    NullType,
    OptionalOf,
    Scalar,
    ScalarKind,
    StructRef,
    TypeDescriptor,
    UnionOf,
)

logger = logging.getLogger(__name__)


_SCALAR_SCHEMAS: dict[ScalarKind, dict] = {
    ScalarKind.STRING: {"type": "string"},
    ScalarKind.INT: {"type": "integer"},
    ScalarKind.FLOAT: {"type": "number"},
    ScalarKind.BOOL: {"type": "boolean"},
    ScalarKind.DATE: {"type": "string", "format": "date"},
    ScalarKind.DATETIME: {"type": "string", "format": "date-time"},
}


@dataclass(frozen=True)
class CompiledSchema:
    """Result of one compile pass."""

    schema: dict
    definitions: dict[str, dict] = field(default_factory=dict)
    defs_key: str = "$defs"

    def to_json_schema(self, *, title: str | None = None) -> dict:
        """Return the root node with definitions mounted under ``defs_key``."""

        out = deepcopy(self.schema)
        if title is not None:
            out = {"title": title, **out}
        if self.definitions:
            out[self.defs_key] = deepcopy(self.definitions)
        return out


def _json_type(value: object) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    return "string"


def _enum_schema(descriptor: EnumType) -> dict:
    if not descriptor.literals:
        return {"type": "string", "enum": list(descriptor.values)}
    choices = [v.value if isinstance(v, Enum) else v for v in descriptor.literals]
    kinds = list(dict.fromkeys(_json_type(v) for v in choices))
    node: dict = {"type": kinds[0] if len(kinds) == 1 else kinds}
    node["enum"] = choices
    return node


def _null_schema() -> dict:
    return {"type": "null"}


def _accepts_null(compiled: dict) -> bool:
    schema_type = compiled.get("type")
    if schema_type == "null" or (isinstance(schema_type, list) and "null" in schema_type):
        return True
    return any(member.get("type") == "null" for member in compiled.get("anyOf", ()))


def _nullable(compiled: dict) -> dict:
    schema_type = compiled.get("type")
    if isinstance(schema_type, str):
        rest = {k: v for k, v in compiled.items() if k != "type"}
        return {"type": [schema_type, "null"], **rest}
    return {"anyOf": [compiled, _null_schema()]}


def _kind_label(compiled: dict) -> str:
    schema_type = compiled.get("type")
    if isinstance(schema_type, list):
        return "|".join(str(t) for t in schema_type)
    if isinstance(schema_type, str):
        return schema_type
    if "$ref" in compiled:
        return compiled["$ref"].rsplit("/", 1)[-1]
    return "value"


class _Pass:
    """State of a single compilation."""

    def __init__(
        self,
        options: SchemaOptions,
        visited: set[str],
        definitions: dict[str, dict],
    ) -> None:
        self.options = options
        self.visited = visited
        self.definitions = definitions
        self.structs: dict[str, StructRef] = {}

    def compile(self, descriptor: TypeDescriptor) -> dict:
        if isinstance(descriptor, Scalar):
            return dict(_SCALAR_SCHEMAS[descriptor.kind])

        if isinstance(descriptor, EnumType):
            return _enum_schema(descriptor)

        if isinstance(descriptor, ArrayOf):
            return {"type": "array", "items": self.compile(descriptor.element)}

        if isinstance(descriptor, MapOf):
            key_schema = self.compile(descriptor.key)
            value_schema = self.compile(descriptor.value)
            # No propertyNames: some providers reject key constraints.
            return {
                "type": "object",
                "additionalProperties": value_schema,
                "description": f"{_kind_label(key_schema)}→{_kind_label(value_schema)} mapping",
            }

        if isinstance(descriptor, OptionalOf):
            return _nullable(self.compile(descriptor.inner))

        if isinstance(descriptor, UnionOf):
            return self._compile_union(descriptor)

        if isinstance(descriptor, NullType):
            return _null_schema()

        if isinstance(descriptor, StructRef):
            return self._compile_struct(descriptor)

        if isinstance(descriptor, FixedRecord):
            return self._compile_record(descriptor)

        raise TypeError(f"Not a type descriptor: {descriptor!r}")

    def _compile_union(self, union: UnionOf) -> dict:
        members = union.non_null_members
        if not members:
            return _null_schema()
        if len(members) == 1:
            compiled = self.compile(members[0])
            return _nullable(compiled) if union.nilable else compiled

        # anyOf, never oneOf: strict-mode providers reject oneOf.
        any_of = [self.compile(member) for member in members]
        if union.nilable:
            any_of.append(_null_schema())
        return {"anyOf": any_of}

    def _compile_fields(self, owner: str, fields: tuple[FieldSpec, ...]) -> dict[str, dict]:
        properties: dict[str, dict] = {}
        for spec in fields:
            if spec.name == TYPE_KEY:
                raise SchemaCompilationError(
                    struct=owner,
                    field=TYPE_KEY,
                    message=(
                        f"{owner} already declares a {TYPE_KEY} field; {TYPE_KEY} is reserved "
                        "for union type detection."
                    ),
                )
            compiled = self.compile(spec.type)
            # Strict providers require every property; null stands in for absent.
            if not spec.required and not _accepts_null(compiled):
                compiled = _nullable(compiled)
            if spec.description:
                compiled = {**compiled, "description": spec.description}
            properties[spec.name] = compiled
        return properties

    def _compile_struct(self, struct: StructRef) -> dict:
        name = struct.name
        known = self.structs.get(name)
        if known is not None and known is not struct:
            raise SchemaCompilationError(
                struct=name,
                message=f"Two different structs are named {name!r} in one schema.",
            )
        if name in self.visited or name in self.definitions:
            logger.debug("Struct %s already compiled in this pass; emitting $ref", name)
            return {"$ref": f"{self.options.ref_prefix}{name}"}

        self.structs[name] = struct
        self.visited.add(name)
        try:
            properties = {TYPE_KEY: {"type": "string", "const": name}}
            properties.update(self._compile_fields(name, struct.fields))
        finally:
            self.visited.discard(name)

        node = {
            "type": "object",
            "properties": properties,
            "required": [TYPE_KEY, *struct.required_field_names()],
        }
        if self.options.struct_descriptions:
            node["description"] = struct.description or f"{name} struct"
        self.definitions[name] = node
        return node

    def _compile_record(self, record: FixedRecord) -> dict:
        owner = record.name or "record"
        properties: dict[str, dict] = {}
        required: list[str] = []
        if record.name is not None:
            properties[TYPE_KEY] = {"type": "string", "const": record.name}
            required.append(TYPE_KEY)
        properties.update(self._compile_fields(owner, record.fields))
        required.extend(record.field_names())

        node = {
            "type": "object",
            "properties": properties,
            "required": required,
            "additionalProperties": False,
        }
        if record.description:
            node["description"] = record.description
        return node


def compile_node(
    descriptor: TypeDescriptor,
    visited: set[str],
    definitions: dict[str, dict],
    *,
    options: SchemaOptions | None = None,
) -> dict:
    """Compile one descriptor against caller-owned pass state."""

    return _Pass(options or SchemaOptions(), visited, definitions).compile(descriptor)


class SchemaCompiler:
    """Compile descriptors; every ``compile`` call is an independent pass."""

    def __init__(self, options: SchemaOptions | None = None) -> None:
        self.options = options or SchemaOptions.from_env()

    def compile(self, descriptor: TypeDescriptor) -> CompiledSchema:
        definitions: dict[str, dict] = {}
        schema = _Pass(self.options, set(), definitions).compile(descriptor)
        return CompiledSchema(
            schema=schema,
            definitions=definitions,
            defs_key=self.options.defs_key,
        )

    def to_json_schema(self, descriptor: TypeDescriptor, *, title: str | None = None) -> dict:
        return self.compile(descriptor).to_json_schema(title=title)


def compile_schema(
    descriptor: TypeDescriptor,
    *,
    options: SchemaOptions | None = None,
) -> CompiledSchema:
    """Compile a descriptor in a fresh pass."""

    return SchemaCompiler(options).compile(descriptor)
