"""Discriminator inference for union fields in an ordered field list.

A union-typed field directly preceded by a string- or enum-typed field treats
that predecessor as its discriminator, e.g. ``action: ActionKind`` followed by
``action_input: Peek | Grep | Finish``.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from typebridge.core.types import (
    EnumType,
    FieldSpec,
    FixedRecord,
    OptionalOf,
    Scalar,
    ScalarKind,
    StructRef,
    TypeDescriptor,
    UnionOf,
)
from typebridge.utils.naming import snake_case

logger = logging.getLogger(__name__)


def _unwrap_optional(descriptor: TypeDescriptor) -> TypeDescriptor:
    if isinstance(descriptor, OptionalOf):
        return descriptor.inner
    return descriptor


def _is_discriminator_type(descriptor: TypeDescriptor) -> bool:
    inner = _unwrap_optional(descriptor)
    if isinstance(inner, Scalar):
        return inner.kind is ScalarKind.STRING
    return isinstance(inner, EnumType)


def union_struct_members(union: UnionOf) -> list[StructRef | FixedRecord]:
    """Named record members of a union, optional wrappers removed."""

    out: list[StructRef | FixedRecord] = []
    for member in union.non_null_members:
        member = _unwrap_optional(member)
        if isinstance(member, (StructRef, FixedRecord)) and member.name:
            out.append(member)
    return out


def build_type_mapping(
    union: UnionOf,
    discriminator_type: TypeDescriptor,
) -> dict[str, StructRef | FixedRecord]:
    """Map discriminator values onto the union's struct members."""

    mapping: dict[str, StructRef | FixedRecord] = {}
    discriminator = _unwrap_optional(discriminator_type)
    enum_class = discriminator.enum_class if isinstance(discriminator, EnumType) else None

    for struct in union_struct_members(union):
        name = struct.name
        mapping.setdefault(name, struct)
        mapping.setdefault(name.lower(), struct)
        if enum_class is not None:
            for member in enum_class:
                if member.name == name or member.name.lower() == name.lower():
                    mapping.setdefault(str(member.value), struct)
        mapping.setdefault(snake_case(name), struct)
    return mapping


def detect_discriminators(
    fields: tuple[FieldSpec, ...],
) -> dict[str, tuple[str, dict[str, StructRef | FixedRecord]]]:
    """Return ``{union_field: (discriminator_field, mapping)}`` for a field list."""

    found: dict[str, tuple[str, dict[str, StructRef | FixedRecord]]] = {}
    for index in range(1, len(fields)):
        spec = fields[index]
        union = _unwrap_optional(spec.type)
        if not isinstance(union, UnionOf):
            continue
        previous = fields[index - 1]
        if not _is_discriminator_type(previous.type):
            continue
        mapping = build_type_mapping(union, previous.type)
        if mapping:
            found[spec.name] = (previous.name, mapping)
    return found


def resolve_discriminator(
    value: Any,
    mapping: dict[str, StructRef | FixedRecord],
) -> StructRef | FixedRecord | None:
    """Resolve a discriminator's actual value against a type mapping."""

    if isinstance(value, Enum):
        value = value.value
    if not isinstance(value, str):
        return None
    struct = mapping.get(value) or mapping.get(value.lower())
    if struct is None:
        logger.debug("Discriminator value %r matches none of %s", value, sorted(mapping))
    return struct
