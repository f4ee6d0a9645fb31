"""Schema export utilities."""

from __future__ import annotations

from pathlib import Path

from typebridge.core.types import TypeDescriptor
from typebridge.schema.compiler import SchemaCompiler
from typebridge.utils.canonicalize import to_stable_json


def export_schema(
    descriptor: TypeDescriptor,
    out_path: str | Path,
    *,
    title: str | None = None,
    compiler: SchemaCompiler | None = None,
) -> Path:
    """Compile ``descriptor`` and write its JSON schema to ``out_path``."""

    compiler = compiler or SchemaCompiler()
    schema = compiler.to_json_schema(descriptor, title=title)
    path = Path(out_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(to_stable_json(schema) + "\n", encoding="utf-8")
    return path
