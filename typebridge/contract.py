"""Structured contract: an instruction with typed input and output records."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from typebridge.convert.reconstruct import ValueReconstructor
from typebridge.convert.serialize import serialize
from typebridge.core.types import TYPE_KEY, FixedRecord
from typebridge.prompts import build_structured_prompt
from typebridge.schema.compat import validate_compatibility
from typebridge.schema.compiler import CompiledSchema, SchemaCompiler
from typebridge.schema.gemini_json_schema import to_gemini_schema
from typebridge.schema.openai_json_schema import to_openai_response_format
from typebridge.utils.canonicalize import schema_fingerprint

logger = logging.getLogger(__name__)


class StructuredContract:
    """Declared once; compiles its schemas on first use and reuses them."""

    def __init__(
        self,
        name: str,
        instruction: str,
        inputs: FixedRecord,
        outputs: FixedRecord,
        *,
        compiler: SchemaCompiler | None = None,
    ) -> None:
        self.name = name
        self.instruction = instruction
        self.inputs = inputs
        self.outputs = outputs
        self.compiler = compiler or SchemaCompiler()
        self._reconstructor = ValueReconstructor()
        self._compiled: dict[str, CompiledSchema] = {}

    def _compile(self, which: str) -> CompiledSchema:
        compiled = self._compiled.get(which)
        if compiled is None:
            descriptor = self.inputs if which == "inputs" else self.outputs
            compiled = self.compiler.compile(descriptor)
            self._compiled[which] = compiled
        return compiled

    def input_schema(self) -> dict:
        return self._compile("inputs").to_json_schema()

    def output_schema(self) -> dict:
        return self._compile("outputs").to_json_schema()

    def fingerprint(self) -> str:
        """Hash of both schemas and the instruction; changes when the contract does."""

        return schema_fingerprint(
            {
                "name": self.name,
                "instruction": self.instruction,
                "inputs": self.input_schema(),
                "outputs": self.output_schema(),
            }
        )

    def response_format(self, provider: str = "openai") -> dict:
        """Provider-shaped output schema."""

        compiled = self._compile("outputs")
        issues = validate_compatibility(
            compiled.to_json_schema(), provider, max_depth=self.compiler.options.max_depth
        )
        for issue in issues:
            logger.debug("%s schema for %s: %s", provider, self.name, issue)
        if provider == "openai":
            return to_openai_response_format(compiled, name=self.name)
        return to_gemini_schema(compiled)

    def _input_payload(self, values: Any) -> Any:
        model = self.inputs.model
        if not (model is not None and isinstance(values, model)):
            values = self._reconstructor.convert(values, self.inputs)
        payload = serialize(values)
        if self.inputs.name is None and isinstance(payload, dict):
            payload.pop(TYPE_KEY, None)
        return payload

    def render_prompt(self, values: Any, few_shot: Iterable[tuple[Any, Any]] = ()) -> str:
        """Render prompt text for one call with the given input values."""

        return build_structured_prompt(
            instruction=self.instruction,
            input_schema=self.input_schema(),
            output_schema=self.output_schema(),
            input_values=self._input_payload(values),
            few_shot=few_shot,
        )

    def parse_output(self, payload: dict) -> Any:
        """Reconstruct the typed output from an already-parsed JSON reply."""

        return self._reconstructor.convert(payload, self.outputs)
