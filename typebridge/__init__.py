"""Type <-> schema <-> value engine for LLM structured outputs."""

import logging

from typebridge.contract import StructuredContract
from typebridge.convert.reconstruct import ValueReconstructor, convert
from typebridge.convert.serialize import serialize, serialize_for_prompt, serialize_history
from typebridge.core.errors import (
    DeserializationError,
    SchemaCompilationError,
    TypeBridgeError,
    TypeMismatchError,
)
from typebridge.core.registry import (
    DEFAULT_REGISTRY,
    StructRegistry,
    define_struct,
    descriptor_for,
    record,
    struct_from_model,
)
from typebridge.schema.compiler import CompiledSchema, SchemaCompiler, compile_schema

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "CompiledSchema",
    "DEFAULT_REGISTRY",
    "DeserializationError",
    "SchemaCompilationError",
    "SchemaCompiler",
    "StructRegistry",
    "StructuredContract",
    "TypeBridgeError",
    "TypeMismatchError",
    "ValueReconstructor",
    "compile_schema",
    "convert",
    "define_struct",
    "descriptor_for",
    "record",
    "serialize",
    "serialize_for_prompt",
    "serialize_history",
    "struct_from_model",
]
