"""Prompt text for structured contracts.

The compiled schemas are embedded verbatim; typed values pass through the
tagging serializer first so records keep their ``_type`` tags.
"""

from __future__ import annotations

import json
from typing import Any, Iterable

from typebridge.convert.serialize import serialize


_INSTRUCTIONS = [
    "Respond with a single JSON object only (no markdown, no prose).",
    "The JSON object MUST conform to the output schema.",
    "Every object described with a \"_type\" property MUST include \"_type\" set to its constant.",
    "Include every required field; use null for optional fields you cannot fill.",
]


def _pretty(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


def build_structured_prompt(
    *,
    instruction: str,
    input_schema: dict,
    output_schema: dict,
    input_values: Any,
    few_shot: Iterable[tuple[Any, Any]] = (),
) -> str:
    """Build prompt text from schemas, examples and input values."""

    lines = [
        "Your input schema fields are:",
        "```json",
        _pretty(input_schema),
        "```",
        "",
        "Your output schema fields are:",
        "```json",
        _pretty(output_schema),
        "```",
        "",
        *_INSTRUCTIONS,
    ]

    examples = list(few_shot)
    if examples:
        lines.extend(["", "Here are some examples:", ""])
        for index, (example_in, example_out) in enumerate(examples, start=1):
            lines.extend(
                [
                    f"### Example {index}",
                    "Input:",
                    "```json",
                    _pretty(serialize(example_in)),
                    "```",
                    "Output:",
                    "```json",
                    _pretty(serialize(example_out)),
                    "```",
                    "",
                ]
            )

    lines.extend(
        [
            "",
            f"Your objective is: {instruction}",
            "",
            "## Input Values",
            "```json",
            _pretty(serialize(input_values)),
            "```",
        ]
    )
    return "\n".join(lines)
