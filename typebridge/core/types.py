"""Type descriptors for declared structured contracts.

Descriptors are immutable and built once when a contract is declared. The
compiler, reconstructor and registry only ever read them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


TYPE_KEY = "_type"


class ScalarKind(str, Enum):
    """Scalar value kind."""

    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    DATE = "date"
    DATETIME = "datetime"


class _Missing:
    """Sentinel for fields declared without a default."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


@dataclass(frozen=True, slots=True)
class Scalar:
    """String, number, boolean or calendar scalar."""

    kind: ScalarKind


@dataclass(frozen=True, slots=True)
class EnumType:
    """Closed set of values, optionally backed by a Python ``Enum``.

    ``values`` are the string forms used in messages and discriminator maps.
    ``literals`` keeps the original values of a non-string ``Literal``
    (e.g. ``Literal[1, 2]``); it is empty for string enums.
    """

    values: tuple[str, ...]
    enum_class: type[Enum] | None = None
    literals: tuple[Any, ...] = ()

    @classmethod
    def from_literal(cls, *args: Any) -> "EnumType":
        if all(isinstance(arg, str) for arg in args):
            return cls(values=tuple(args))
        return cls(values=tuple(str(arg) for arg in args), literals=tuple(args))

    @property
    def choices(self) -> tuple[Any, ...]:
        """Values as they appear on the wire."""

        return self.literals or self.values

    @classmethod
    def from_enum(cls, enum_class: type[Enum]) -> "EnumType":
        return cls(
            values=tuple(str(member.value) for member in enum_class),
            enum_class=enum_class,
        )


@dataclass(frozen=True, slots=True)
class ArrayOf:
    """Homogeneous list."""

    element: "TypeDescriptor"


@dataclass(frozen=True, slots=True)
class MapOf:
    """Mapping with typed keys and values."""

    key: "TypeDescriptor"
    value: "TypeDescriptor"


@dataclass(frozen=True, slots=True)
class OptionalOf:
    """Value that may be null."""

    inner: "TypeDescriptor"


@dataclass(frozen=True, slots=True)
class UnionOf:
    """One of several member types; ``NULL`` among members marks nilability."""

    members: tuple["TypeDescriptor", ...]

    @property
    def nilable(self) -> bool:
        return any(isinstance(member, NullType) for member in self.members)

    @property
    def non_null_members(self) -> tuple["TypeDescriptor", ...]:
        return tuple(m for m in self.members if not isinstance(m, NullType))


@dataclass(frozen=True, slots=True)
class NullType:
    """Bare null marker used inside unions."""


NULL = NullType()


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """One declared field of a record."""

    name: str
    type: "TypeDescriptor"
    required: bool = True
    description: str | None = None
    default: Any = MISSING

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING


@dataclass(frozen=True, slots=True)
class FixedRecord:
    """Record with a fixed field list, e.g. a contract's input or output shape.

    ``model`` is the record class values are constructed with; records without
    one reconstruct to plain dicts.
    """

    fields: tuple[FieldSpec, ...]
    name: str | None = None
    model: type | None = field(default=None, compare=False)
    description: str | None = None

    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def required_field_names(self) -> list[str]:
        return [f.name for f in self.fields if f.required]


@dataclass(frozen=True, eq=False, slots=True)
class StructRef:
    """Named record type.

    Compared by identity: the registry hands out one instance per declared
    class, and the field list may refer back to the struct itself.
    """

    name: str
    model: type | None = None
    fields: tuple[FieldSpec, ...] = field(default=(), repr=False)
    description: str | None = None

    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def required_field_names(self) -> list[str]:
        return [f.name for f in self.fields if f.required]


TypeDescriptor = Union[
    Scalar,
    EnumType,
    ArrayOf,
    MapOf,
    FixedRecord,
    OptionalOf,
    UnionOf,
    StructRef,
    NullType,
]

RecordDescriptor = Union[FixedRecord, StructRef]


STRING = Scalar(ScalarKind.STRING)
INT = Scalar(ScalarKind.INT)
FLOAT = Scalar(ScalarKind.FLOAT)
BOOL = Scalar(ScalarKind.BOOL)
DATE = Scalar(ScalarKind.DATE)
DATETIME = Scalar(ScalarKind.DATETIME)


def is_record(descriptor: object) -> bool:
    """Return True for struct and fixed-record descriptors."""

    return isinstance(descriptor, (FixedRecord, StructRef))


def describe_kind(descriptor: object) -> str:
    """Short human-readable kind of a descriptor, used in messages."""

    if isinstance(descriptor, Scalar):
        return descriptor.kind.value
    if isinstance(descriptor, EnumType):
        return "enum(" + "|".join(descriptor.values) + ")"
    if isinstance(descriptor, ArrayOf):
        return f"array<{describe_kind(descriptor.element)}>"
    if isinstance(descriptor, MapOf):
        return f"map<{describe_kind(descriptor.key)},{describe_kind(descriptor.value)}>"
    if isinstance(descriptor, OptionalOf):
        return f"{describe_kind(descriptor.inner)}?"
    if isinstance(descriptor, UnionOf):
        return " | ".join(describe_kind(m) for m in descriptor.members)
    if isinstance(descriptor, NullType):
        return "null"
    if isinstance(descriptor, StructRef):
        return descriptor.name
    if isinstance(descriptor, FixedRecord):
        return descriptor.name or "record"
    return type(descriptor).__name__
