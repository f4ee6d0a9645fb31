"""Value reconstruction and type-tagging serialization."""

from typebridge.convert.reconstruct import ValueReconstructor, convert
from typebridge.convert.serialize import serialize, serialize_for_prompt, serialize_history

__all__ = [
    "ValueReconstructor",
    "convert",
    "serialize",
    "serialize_for_prompt",
    "serialize_history",
]
