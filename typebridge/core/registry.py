"""Struct registry: descriptors derived once from declared record classes.

Record classes are pydantic models. A model is introspected a single time and
its ``StructRef`` cached; field-list declarations build their model once with
``pydantic.create_model``.
"""

from __future__ import annotations

import inspect
import logging
import threading
import types
from collections.abc import Iterable
from datetime import date, datetime
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union, get_args, get_origin

from pydantic import BaseModel, Field, create_model
from pydantic.fields import FieldInfo

from typebridge.core.errors import SchemaCompilationError
from typebridge.core.types import (
    BOOL,
    DATE,
    DATETIME,
    FLOAT,
    INT,
    MISSING,
    NULL,
    STRING,
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


# bool before int and datetime before date: issubclass order matters.
_SCALAR_ANNOTATIONS: tuple[tuple[type, Scalar], ...] = (
    (bool, BOOL),
    (int, INT),
    (float, FLOAT),
    (str, STRING),
    (datetime, DATETIME),
    (date, DATE),
)

_SCALAR_TYPES: dict[ScalarKind, type] = {
    ScalarKind.STRING: str,
    ScalarKind.INT: int,
    ScalarKind.FLOAT: float,
    ScalarKind.BOOL: bool,
    ScalarKind.DATE: date,
    ScalarKind.DATETIME: datetime,
}


class AnonymousRecord(BaseModel):
    """Base class of record models built for unnamed records."""


def annotation_for(descriptor: TypeDescriptor) -> Any:
    """Return the Python annotation a record model uses for a descriptor."""

    if isinstance(descriptor, Scalar):
        return _SCALAR_TYPES[descriptor.kind]
    if isinstance(descriptor, EnumType):
        if descriptor.enum_class is not None:
            return descriptor.enum_class
        return Literal[descriptor.choices]
    if isinstance(descriptor, ArrayOf):
        return list[annotation_for(descriptor.element)]
    if isinstance(descriptor, MapOf):
        return dict[annotation_for(descriptor.key), annotation_for(descriptor.value)]
    if isinstance(descriptor, OptionalOf):
        return Optional[annotation_for(descriptor.inner)]
    if isinstance(descriptor, UnionOf):
        return Union[tuple(annotation_for(member) for member in descriptor.members)]
    if isinstance(descriptor, NullType):
        return type(None)
    if isinstance(descriptor, (StructRef, FixedRecord)):
        return descriptor.model if descriptor.model is not None else dict
    return Any


def build_model(
    name: str,
    fields: tuple[FieldSpec, ...],
    *,
    description: str | None = None,
    base: type[BaseModel] | None = None,
) -> type[BaseModel]:
    """Build the record class for a field list."""

    definitions: dict[str, Any] = {}
    for spec in fields:
        annotation = annotation_for(spec.type)
        if spec.required:
            definitions[spec.name] = (annotation, Field(..., description=spec.description))
        else:
            default = None if spec.default is MISSING else spec.default
            definitions[spec.name] = (
                Optional[annotation],
                Field(default=default, description=spec.description),
            )
    return create_model(name, __base__=base, __doc__=description, **definitions)


def _check_field_names(name: str, fields: tuple[FieldSpec, ...]) -> None:
    for spec in fields:
        if spec.name == TYPE_KEY:
            raise SchemaCompilationError(
                struct=name,
                field=TYPE_KEY,
                message=(
                    f"{name} already declares a {TYPE_KEY} field; {TYPE_KEY} is reserved "
                    "for union type detection."
                ),
            )


def _model_description(model: type[BaseModel]) -> str | None:
    doc = model.__dict__.get("__doc__")
    if not doc:
        return None
    return inspect.cleandoc(doc)


class StructRegistry:
    """Thread-safe cache of struct descriptors keyed by record class and name."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._by_model: dict[type, StructRef] = {}
        self._by_name: dict[str, StructRef] = {}

    def from_model(self, model: type[BaseModel]) -> StructRef:
        """Return the descriptor for a pydantic model, deriving it on first use."""

        with self._lock:
            cached = self._by_model.get(model)
            if cached is not None:
                return cached

            ref = StructRef(
                name=model.__name__,
                model=model,
                description=_model_description(model),
            )
            # Registered before the fields are derived so self-references
            # resolve to this same instance.
            self._by_model[model] = ref
            try:
                fields = tuple(
                    self._field_from_info(name, info) for name, info in model.model_fields.items()
                )
            except Exception:
                del self._by_model[model]
                raise
            object.__setattr__(ref, "fields", fields)
            self._by_name[ref.name] = ref
            return ref

    def define_struct(
        self,
        name: str,
        fields: Iterable[FieldSpec],
        *,
        description: str | None = None,
    ) -> StructRef:
        """Declare a struct from a field list, building its record class once."""

        fields = tuple(fields)
        _check_field_names(name, fields)
        with self._lock:
            model = build_model(name, fields, description=description)
            ref = StructRef(name=name, model=model, fields=fields, description=description)
            self._by_model[model] = ref
            self._by_name[name] = ref
            return ref

    def record(
        self,
        fields: Iterable[FieldSpec],
        *,
        name: str | None = None,
        description: str | None = None,
    ) -> FixedRecord:
        """Declare a fixed record (e.g. a contract's output) with a bound record class."""

        fields = tuple(fields)
        if name is not None:
            _check_field_names(name, fields)
            model = build_model(name, fields, description=description)
        else:
            model = build_model(
                "AnonymousRecord", fields, description=description, base=AnonymousRecord
            )
        return FixedRecord(fields=fields, name=name, model=model, description=description)

    def get(self, name: str) -> StructRef | None:
        """Lookup a registered struct by simple name."""

        with self._lock:
            return self._by_name.get(name)

    def names(self) -> set[str]:
        with self._lock:
            return set(self._by_name)

    def descriptor_for(self, annotation: Any) -> TypeDescriptor:
        """Map a Python annotation onto a type descriptor."""

        if annotation is None or annotation is type(None):
            return NULL

        origin = get_origin(annotation)
        if origin is Annotated:
            return self.descriptor_for(get_args(annotation)[0])
        if origin is Union or origin is types.UnionType:
            args = get_args(annotation)
            members = tuple(self.descriptor_for(arg) for arg in args if arg is not type(None))
            nilable = len(members) < len(args)
            if len(members) == 1:
                return OptionalOf(members[0]) if nilable else members[0]
            return UnionOf(members + (NULL,) if nilable else members)
        if origin is Literal:
            return EnumType.from_literal(*get_args(annotation))
        if origin in (list, tuple, set, frozenset):
            args = [arg for arg in get_args(annotation) if arg is not Ellipsis]
            return ArrayOf(self.descriptor_for(args[0]) if args else STRING)
        if origin is dict:
            args = get_args(annotation)
            if len(args) == 2:
                return MapOf(self.descriptor_for(args[0]), self.descriptor_for(args[1]))
            return MapOf(STRING, STRING)

        if isinstance(annotation, type):
            if issubclass(annotation, BaseModel):
                return self.from_model(annotation)
            if issubclass(annotation, Enum):
                return EnumType.from_enum(annotation)
            for py_type, scalar in _SCALAR_ANNOTATIONS:
                if issubclass(annotation, py_type):
                    return scalar
            if annotation in (list, tuple, set, frozenset):
                return ArrayOf(STRING)
            if annotation is dict:
                return MapOf(STRING, STRING)

        logger.debug("No descriptor for annotation %r; using string", annotation)
        return STRING

    def _field_from_info(self, name: str, info: FieldInfo) -> FieldSpec:
        required = info.is_required()
        default = MISSING if required else info.get_default(call_default_factory=True)
        return FieldSpec(
            name=info.alias or name,
            type=self.descriptor_for(info.annotation),
            required=required,
            description=info.description,
            default=default,
        )


DEFAULT_REGISTRY = StructRegistry()


def struct_from_model(model: type[BaseModel]) -> StructRef:
    """Descriptor for a pydantic model from the default registry."""

    return DEFAULT_REGISTRY.from_model(model)


def define_struct(
    name: str,
    fields: Iterable[FieldSpec],
    *,
    description: str | None = None,
) -> StructRef:
    """Declare a struct in the default registry."""

    return DEFAULT_REGISTRY.define_struct(name, fields, description=description)


def record(
    fields: Iterable[FieldSpec],
    *,
    name: str | None = None,
    description: str | None = None,
) -> FixedRecord:
    """Declare a fixed record through the default registry."""

    return DEFAULT_REGISTRY.record(fields, name=name, description=description)


def descriptor_for(annotation: Any) -> TypeDescriptor:
    """Map a Python annotation onto a descriptor using the default registry."""

    return DEFAULT_REGISTRY.descriptor_for(annotation)
