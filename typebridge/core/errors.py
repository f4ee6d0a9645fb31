"""Error taxonomy for schema compilation and value reconstruction."""

from __future__ import annotations

from typing import Any


def format_path(path: tuple) -> str:
    """Render a pydantic-like tuple path as ``a.b[2]``."""

    if not path:
        return "<root>"
    out = ""
    for part in path:
        if isinstance(part, int):
            out += f"[{part}]"
        elif out:
            out += f".{part}"
        else:
            out = str(part)
    return out


def kind_of(value: Any) -> str:
    """Return the JSON-ish kind name of a received value."""

    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


class TypeBridgeError(Exception):
    """Base class for all engine errors."""


class SchemaCompilationError(TypeBridgeError):
    """A declared type cannot be compiled; raised at schema-build time."""

    def __init__(self, *, struct: str, field: str | None = None, message: str) -> None:
        self.struct = struct
        self.field = field
        self.message = message
        super().__init__(self.__str__())

    def __str__(self) -> str:
        where = self.struct if self.field is None else f"{self.struct}.{self.field}"
        return f"SchemaCompilationError({where}): {self.message}"


class DeserializationError(TypeBridgeError):
    """A model reply does not fit the declared output type."""

    def __init__(
        self,
        *,
        path: tuple = (),
        expected: str,
        received: Any = None,
        message: str,
        valid_names: tuple[str, ...] = (),
    ) -> None:
        self.path = tuple(path)
        self.expected = expected
        self.received = received
        self.message = message
        self.valid_names = tuple(valid_names)
        super().__init__(self.__str__())

    @property
    def field_path(self) -> str:
        return format_path(self.path)

    @property
    def received_kind(self) -> str:
        return kind_of(self.received)

    def __str__(self) -> str:
        return (
            f"{type(self).__name__}(path={self.field_path!r}, expected={self.expected!r}, "
            f"received={self.received!r}): {self.message}"
        )


class TypeMismatchError(DeserializationError):
    """A scalar value could not be coerced into the declared kind."""
