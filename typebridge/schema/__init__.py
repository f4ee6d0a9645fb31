"""Schema compilation and provider shaping."""

from typebridge.schema.compat import validate_compatibility
from typebridge.schema.compiler import CompiledSchema, SchemaCompiler, compile_node, compile_schema
from typebridge.schema.export import export_schema
from typebridge.schema.gemini_json_schema import to_gemini_schema
from typebridge.schema.openai_json_schema import (
    sanitize_openai_strict_schema,
    to_openai_response_format,
)

__all__ = [
    "CompiledSchema",
    "SchemaCompiler",
    "compile_node",
    "compile_schema",
    "export_schema",
    "sanitize_openai_strict_schema",
    "to_gemini_schema",
    "to_openai_response_format",
    "validate_compatibility",
]
