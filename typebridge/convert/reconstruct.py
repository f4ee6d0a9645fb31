"""Reconstruct typed values from a model's untyped JSON reply.

Unions resolve in this order: an explicit ``_type`` tag, an inferred sibling
discriminator (see ``typebridge.convert.discriminator``), then structural
matching on required-field presence. An untagged value that matches no member
is returned unchanged.
"""

from __future__ import annotations

import logging
from copy import deepcopy
from typing import Any

from pydantic import ValidationError

from typebridge.convert.discriminator import (
    detect_discriminators,
    resolve_discriminator,
    union_struct_members,
)
from typebridge.convert.scalars import coerce_enum, coerce_scalar, matches_enum, matches_scalar
from typebridge.core.errors import DeserializationError, TypeMismatchError, kind_of
from typebridge.core.types import (
    TYPE_KEY,
    ArrayOf,
    EnumType,
    FixedRecord,
    MapOf,
    NullType,
    OptionalOf,
    RecordDescriptor,
    Scalar,
    StructRef,
    TypeDescriptor,
    UnionOf,
    describe_kind,
    is_record,
)

logger = logging.getLogger(__name__)


def _exact_match(raw: Any, descriptor: TypeDescriptor) -> bool:
    if isinstance(descriptor, Scalar):
        return matches_scalar(raw, descriptor.kind)
    if isinstance(descriptor, EnumType):
        return matches_enum(raw, descriptor)
    if isinstance(descriptor, ArrayOf):
        return isinstance(raw, (list, tuple))
    if isinstance(descriptor, NullType):
        return raw is None
    if isinstance(descriptor, OptionalOf):
        return raw is None or _exact_match(raw, descriptor.inner)
    return False


def _accepts_none(descriptor: TypeDescriptor) -> bool:
    if isinstance(descriptor, UnionOf):
        return descriptor.nilable
    return _exact_match(None, descriptor)


def _required_present(raw: dict, record: RecordDescriptor) -> bool:
    return all(name in raw for name in record.required_field_names())


def _construction_error(
    exc: ValidationError,
    record: RecordDescriptor,
    values: dict,
    path: tuple,
) -> DeserializationError:
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = tuple(first.get("loc", ()))
    received = first.get("input", values)
    return DeserializationError(
        path=path + loc,
        expected=describe_kind(record),
        received=received,
        message=f"Cannot construct {describe_kind(record)}: {first.get('msg', exc)}",
    )


class ValueReconstructor:
    """Convert parsed JSON into typed values; holds no state across calls."""

    def convert(self, raw: Any, descriptor: TypeDescriptor) -> Any:
        return self._convert(raw, descriptor, ())

    def _convert(self, raw: Any, descriptor: TypeDescriptor, path: tuple) -> Any:
        if isinstance(descriptor, Scalar):
            return coerce_scalar(raw, descriptor, path)

        if isinstance(descriptor, EnumType):
            return coerce_enum(raw, descriptor, path)

        if isinstance(descriptor, ArrayOf):
            if not isinstance(raw, (list, tuple)):
                raise TypeMismatchError(
                    path=path,
                    expected=describe_kind(descriptor),
                    received=raw,
                    message=f"Expected an array, got {kind_of(raw)}",
                )
            return [
                self._convert(item, descriptor.element, path + (idx,))
                for idx, item in enumerate(raw)
            ]

        if isinstance(descriptor, MapOf):
            if not isinstance(raw, dict):
                raise TypeMismatchError(
                    path=path,
                    expected=describe_kind(descriptor),
                    received=raw,
                    message=f"Expected an object, got {kind_of(raw)}",
                )
            return {
                self._convert(key, descriptor.key, path + (str(key),)): self._convert(
                    value, descriptor.value, path + (str(key),)
                )
                for key, value in raw.items()
            }

        if isinstance(descriptor, OptionalOf):
            if raw is None:
                return None
            inner = descriptor.inner
            if is_record(inner) and inner.name and isinstance(raw, dict) and TYPE_KEY in raw:
                return self._convert_tagged(raw, [inner], path)
            return self._convert(raw, inner, path)

        if isinstance(descriptor, UnionOf):
            return self._convert_union(raw, descriptor, path)

        if isinstance(descriptor, NullType):
            if raw is None:
                return None
            raise TypeMismatchError(
                path=path,
                expected="null",
                received=raw,
                message=f"Expected null, got {kind_of(raw)}",
            )

        if isinstance(descriptor, (StructRef, FixedRecord)):
            return self._convert_record(raw, descriptor, path)

        raise TypeError(f"Not a type descriptor: {descriptor!r}")

    def _convert_tagged(
        self,
        raw: dict,
        candidates: list[RecordDescriptor],
        path: tuple,
    ) -> Any:
        tag = raw[TYPE_KEY]
        for candidate in candidates:
            if candidate.name == tag:
                return self._convert_record(raw, candidate, path)
        names = tuple(c.name for c in candidates if c.name)
        raise DeserializationError(
            path=path + (TYPE_KEY,),
            expected=" | ".join(names),
            received=tag,
            message=f"Unknown {TYPE_KEY} {tag!r}; valid names are {list(names)}",
            valid_names=names,
        )

    def _convert_union(self, raw: Any, union: UnionOf, path: tuple) -> Any:
        if raw is None and union.nilable:
            return None

        members = union.non_null_members
        structs = union_struct_members(union)
        if isinstance(raw, dict):
            if TYPE_KEY in raw and structs:
                return self._convert_tagged(raw, structs, path)

            for member in members:
                target = member.inner if isinstance(member, OptionalOf) else member
                if is_record(target) and _required_present(raw, target):
                    return self._convert_record(raw, target, path)
            for member in members:
                if isinstance(member, MapOf):
                    return self._convert(raw, member, path)
        else:
            for member in members:
                if _exact_match(raw, member):
                    return self._convert(raw, member, path)
            for member in members:
                if is_record(member) or isinstance(member, MapOf):
                    continue
                try:
                    return self._convert(raw, member, path)
                except DeserializationError:
                    continue

        logger.debug(
            "No member of %s matched %s at %s; returning it unchanged",
            describe_kind(union),
            kind_of(raw),
            path,
        )
        return raw

    def _convert_record(self, raw: Any, record: RecordDescriptor, path: tuple) -> Any:
        model = record.model
        if model is not None and isinstance(raw, model):
            return raw
        if not isinstance(raw, dict):
            raise TypeMismatchError(
                path=path,
                expected=describe_kind(record),
                received=raw,
                message=f"Expected an object, got {kind_of(raw)}",
            )

        discriminators = detect_discriminators(record.fields)
        values: dict[str, Any] = {}
        for spec in record.fields:
            field_path = path + (spec.name,)
            if spec.name not in raw:
                if spec.has_default:
                    values[spec.name] = deepcopy(spec.default)
                elif not spec.required:
                    values[spec.name] = None
                else:
                    raise DeserializationError(
                        path=field_path,
                        expected=describe_kind(spec.type),
                        received=None,
                        message=f"Missing required field {spec.name!r}",
                    )
                continue

            value = raw[spec.name]
            if value is None and not spec.required and not _accepts_none(spec.type):
                values[spec.name] = deepcopy(spec.default) if spec.has_default else None
                continue

            if spec.name in discriminators and isinstance(value, dict) and TYPE_KEY not in value:
                discriminator_field, mapping = discriminators[spec.name]
                target = resolve_discriminator(raw.get(discriminator_field), mapping)
                if target is not None:
                    values[spec.name] = self._convert_record(value, target, field_path)
                    continue

            values[spec.name] = self._convert(value, spec.type, field_path)

        if model is None:
            return values
        try:
            return model.model_validate(values)
        except ValidationError as exc:
            raise _construction_error(exc, record, values, path) from exc


_DEFAULT = ValueReconstructor()


def convert(raw: Any, descriptor: TypeDescriptor) -> Any:
    """Convert an already-parsed JSON value into the declared type."""

    return _DEFAULT.convert(raw, descriptor)
