"""Name transliteration helpers."""

from __future__ import annotations

import re


_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z\d])([A-Z])")
_NON_IDENT = re.compile(r"[^a-zA-Z0-9_]")


def snake_case(name: str) -> str:
    """``HTTPRequest`` -> ``http_request``, ``SearchWeb`` -> ``search_web``."""

    out = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    out = _WORD_BOUNDARY.sub(r"\1_\2", out)
    return out.lower()


def schema_name(name: str | None, *, fallback: str = "typebridge_output") -> str:
    """Provider-safe schema name: ``[a-z0-9_]`` only."""

    if not name:
        return fallback
    return _NON_IDENT.sub("_", name).lower()
