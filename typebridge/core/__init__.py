"""Type descriptors, errors, options and the struct registry."""

from typebridge.core.config import SchemaOptions
from typebridge.core.types import (
    BOOL,
    DATE,
    DATETIME,
    FLOAT,
    INT,
    NULL,
    STRING,
    TYPE_KEY,
    ArrayOf,
    EnumType,
    FieldSpec,
    FixedRecord,
    MapOf,
    OptionalOf,
    Scalar,
    ScalarKind,
    StructRef,
    UnionOf,
)

__all__ = [
    "ArrayOf",
    "BOOL",
    "DATE",
    "DATETIME",
    "EnumType",
    "FLOAT",
    "FieldSpec",
    "FixedRecord",
    "INT",
    "MapOf",
    "NULL",
    "OptionalOf",
    "STRING",
    "Scalar",
    "ScalarKind",
    "SchemaOptions",
    "StructRef",
    "TYPE_KEY",
    "UnionOf",
]
