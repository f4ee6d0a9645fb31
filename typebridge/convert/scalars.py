"""Scalar and enum coercion for model replies."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any

from typebridge.core.errors import TypeMismatchError, kind_of
from typebridge.core.types import EnumType, Scalar, ScalarKind


_TRUE_STRINGS = {"true", "yes", "1"}
_FALSE_STRINGS = {"false", "no", "0"}


def matches_scalar(value: Any, kind: ScalarKind) -> bool:
    """Return True when ``value`` already has the declared kind."""

    if kind is ScalarKind.STRING:
        return isinstance(value, str) and not isinstance(value, Enum)
    if kind is ScalarKind.INT:
        return isinstance(value, int) and not isinstance(value, bool)
    if kind is ScalarKind.FLOAT:
        return isinstance(value, float)
    if kind is ScalarKind.BOOL:
        return isinstance(value, bool)
    if kind is ScalarKind.DATETIME:
        return isinstance(value, datetime)
    if kind is ScalarKind.DATE:
        return isinstance(value, date) and not isinstance(value, datetime)
    return False


def _mismatch(value: Any, kind: str, path: tuple, reason: str) -> TypeMismatchError:
    return TypeMismatchError(
        path=path,
        expected=kind,
        received=value,
        message=f"Cannot convert {kind_of(value)} to {kind}: {reason}",
    )


def _parse_datetime(text: str) -> datetime:
    stripped = text.strip()
    if stripped.endswith(("Z", "z")):
        stripped = stripped[:-1] + "+00:00"
    return datetime.fromisoformat(stripped)


def coerce_scalar(value: Any, descriptor: Scalar, path: tuple = ()) -> Any:
    """Return ``value`` as the declared scalar kind or raise TypeMismatchError."""

    kind = descriptor.kind
    if matches_scalar(value, kind):
        return value
    if value is None or isinstance(value, (dict, list, tuple)):
        raise _mismatch(value, kind.value, path, "not a scalar")

    if kind is ScalarKind.STRING:
        if isinstance(value, Enum):
            return str(value.value)
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return str(value)
        if isinstance(value, date):
            return value.isoformat()
        raise _mismatch(value, kind.value, path, "unsupported value")

    if kind is ScalarKind.INT:
        if isinstance(value, bool):
            raise _mismatch(value, kind.value, path, "booleans are not integers")
        if isinstance(value, float):
            if value.is_integer():
                return int(value)
            raise _mismatch(value, kind.value, path, "number has a fractional part")
        if isinstance(value, str):
            text = value.strip()
            try:
                return int(text)
            except ValueError:
                pass
            try:
                number = float(text)
            except ValueError:
                raise _mismatch(value, kind.value, path, "not a number") from None
            if number.is_integer():
                return int(number)
            raise _mismatch(value, kind.value, path, "number has a fractional part")
        raise _mismatch(value, kind.value, path, "unsupported value")

    if kind is ScalarKind.FLOAT:
        if isinstance(value, bool):
            raise _mismatch(value, kind.value, path, "booleans are not numbers")
        if isinstance(value, int):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                raise _mismatch(value, kind.value, path, "not a number") from None
        raise _mismatch(value, kind.value, path, "unsupported value")

    if kind is ScalarKind.BOOL:
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
            raise _mismatch(value, kind.value, path, "not a boolean literal")
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        raise _mismatch(value, kind.value, path, "unsupported value")

    if kind is ScalarKind.DATE:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str):
            try:
                return date.fromisoformat(value.strip())
            except ValueError:
                pass
            try:
                return _parse_datetime(value).date()
            except ValueError:
                raise _mismatch(value, kind.value, path, "not an ISO 8601 date") from None
        raise _mismatch(value, kind.value, path, "unsupported value")

    if kind is ScalarKind.DATETIME:
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day)
        if isinstance(value, str):
            try:
                return _parse_datetime(value)
            except ValueError:
                raise _mismatch(value, kind.value, path, "not an ISO 8601 datetime") from None
        raise _mismatch(value, kind.value, path, "unsupported value")

    raise _mismatch(value, str(kind), path, "unknown scalar kind")


def matches_enum(value: Any, descriptor: EnumType) -> bool:
    if descriptor.enum_class is not None:
        return isinstance(value, descriptor.enum_class)
    # type check keeps True from matching a literal 1
    return any(
        type(value) is type(choice) and value == choice for choice in descriptor.choices
    )


def coerce_enum(value: Any, descriptor: EnumType, path: tuple = ()) -> Any:
    """Deserialize an enum tag; values first, then member names, case-insensitively."""

    if matches_enum(value, descriptor):
        return value

    expected = "enum(" + "|".join(descriptor.values) + ")"
    if isinstance(value, Enum):
        value = value.value
    if not isinstance(value, (str, int, float)) or isinstance(value, bool):
        raise _mismatch(value, expected, path, "not an enum tag")
    tag = str(value).strip()

    enum_class = descriptor.enum_class
    if enum_class is not None:
        for member in enum_class:
            if str(member.value) == tag:
                return member
        lowered = tag.lower()
        for member in enum_class:
            if str(member.value).lower() == lowered or member.name.lower() == lowered:
                return member
    else:
        pairs = list(zip(descriptor.values, descriptor.choices))
        for text, choice in pairs:
            if text == tag:
                return choice
        lowered = tag.lower()
        for text, choice in pairs:
            if text.lower() == lowered:
                return choice

    raise TypeMismatchError(
        path=path,
        expected=expected,
        received=value,
        message=f"{tag!r} is not one of {list(descriptor.values)}",
    )
