"""Compiler options with environment-variable defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass


_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {raw!r}.")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}.") from exc


@dataclass(frozen=True, slots=True)
class SchemaOptions:
    """Options shared by the compiler and the provider schema shapers."""

    defs_key: str = "$defs"
    struct_descriptions: bool = True
    max_depth: int = 5

    @property
    def ref_prefix(self) -> str:
        return f"#/{self.defs_key}/"

    @classmethod
    def from_env(
        cls,
        *,
        defs_key: str | None = None,
        struct_descriptions: bool | None = None,
        max_depth: int | None = None,
    ) -> "SchemaOptions":
        """Build options; explicit arguments win over TYPEBRIDGE_* variables."""

        return cls(
            defs_key=defs_key or os.getenv("TYPEBRIDGE_DEFS_KEY") or "$defs",
            struct_descriptions=(
                struct_descriptions
                if struct_descriptions is not None
                else _env_bool("TYPEBRIDGE_STRUCT_DESCRIPTIONS", True)
            ),
            max_depth=(
                max_depth if max_depth is not None else _env_int("TYPEBRIDGE_MAX_SCHEMA_DEPTH", 5)
            ),
        )
