"""Scalar and enum coercion."""

from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum

import pytest

from typebridge.convert.scalars import coerce_enum, coerce_scalar
from typebridge.core.errors import TypeMismatchError
from typebridge.core.types import BOOL, DATE, DATETIME, FLOAT, INT, STRING, EnumType


class Tool(str, Enum):
    SEARCHWEB = "web"
    SEARCHDOCS = "docs"


@pytest.mark.parametrize(
    ("value", "descriptor", "expected"),
    [
        ("hello", STRING, "hello"),
        (42, STRING, "42"),
        (True, STRING, "true"),
        (Tool.SEARCHWEB, STRING, "web"),
        ("42", INT, 42),
        (" 7 ", INT, 7),
        (3.0, INT, 3),
        ("3.0", INT, 3),
        ("2.5", FLOAT, 2.5),
        (2, FLOAT, 2.0),
        ("yes", BOOL, True),
        ("False", BOOL, False),
        (0, BOOL, False),
        ("2024-05-01", DATE, date(2024, 5, 1)),
        (datetime(2024, 5, 1, 9, 30), DATE, date(2024, 5, 1)),
        ("2024-05-01T09:30:00", DATETIME, datetime(2024, 5, 1, 9, 30)),
        ("2024-05-01T09:30:00Z", DATETIME, datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)),
        (date(2024, 5, 1), DATETIME, datetime(2024, 5, 1)),
    ],
)
def test_coerce_scalar(value: object, descriptor: object, expected: object) -> None:
    assert coerce_scalar(value, descriptor) == expected


def test_matching_values_are_returned_as_is() -> None:
    value = "already a string"

    assert coerce_scalar(value, STRING) is value
    assert coerce_scalar(True, BOOL) is True


@pytest.mark.parametrize(
    ("value", "descriptor"),
    [
        ("abc", INT),
        (2.5, INT),
        (True, INT),
        ("maybe", BOOL),
        (None, STRING),
        ({"a": 1}, FLOAT),
        (["x"], STRING),
        ("not a date", DATE),
        (True, FLOAT),
    ],
)
def test_coerce_scalar_mismatch(value: object, descriptor: object) -> None:
    with pytest.raises(TypeMismatchError) as excinfo:
        coerce_scalar(value, descriptor, ("answer",))

    assert excinfo.value.path == ("answer",)
    assert excinfo.value.expected == descriptor.kind.value
    assert excinfo.value.received == value


def test_coerce_enum_by_value_and_name() -> None:
    descriptor = EnumType.from_enum(Tool)

    assert coerce_enum("docs", descriptor) is Tool.SEARCHDOCS
    assert coerce_enum("DOCS", descriptor) is Tool.SEARCHDOCS
    assert coerce_enum("searchweb", descriptor) is Tool.SEARCHWEB
    assert coerce_enum(Tool.SEARCHWEB, descriptor) is Tool.SEARCHWEB


def test_coerce_enum_without_class() -> None:
    descriptor = EnumType(("low", "medium", "high"))

    assert coerce_enum("medium", descriptor) == "medium"
    assert coerce_enum("HIGH", descriptor) == "high"


def test_coerce_enum_mismatch_lists_values() -> None:
    with pytest.raises(TypeMismatchError, match="low"):
        coerce_enum("extreme", EnumType(("low", "high")), ("level",))


def test_coerce_enum_returns_original_literal() -> None:
    descriptor = EnumType.from_literal(1, 2)

    assert coerce_enum(1, descriptor) == 1
    assert coerce_enum("2", descriptor) == 2
    assert isinstance(coerce_enum("2", descriptor), int)
    with pytest.raises(TypeMismatchError):
        coerce_enum(True, descriptor)
