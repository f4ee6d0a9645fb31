"""Provider compatibility checks for compiled schemas."""

from __future__ import annotations

from typebridge.core.config import SchemaOptions

PROVIDERS = ("openai", "gemini")

_NESTED_KEYS = ("anyOf", "oneOf", "allOf")


def schema_depth(schema: dict, current: int = 0) -> int:
    """Nesting depth through properties, items and union members."""

    if not isinstance(schema, dict):
        return current
    deepest = current
    properties = schema.get("properties")
    if isinstance(properties, dict):
        for child in properties.values():
            deepest = max(deepest, schema_depth(child, current + 1))
    if isinstance(schema.get("items"), dict):
        deepest = max(deepest, schema_depth(schema["items"], current + 1))
    for key in _NESTED_KEYS:
        members = schema.get(key)
        if isinstance(members, list):
            for child in members:
                deepest = max(deepest, schema_depth(child, current + 1))
    return deepest


def _contains_key(schema: object, keys: tuple[str, ...]) -> bool:
    if isinstance(schema, dict):
        if any(key in schema for key in keys):
            return True
        properties = schema.get("properties")
        if isinstance(properties, dict) and any(
            _contains_key(child, keys) for child in properties.values()
        ):
            return True
        for key in ("items", "additionalProperties", "$defs", *_NESTED_KEYS):
            child = schema.get(key)
            if key == "$defs" and isinstance(child, dict):
                if any(_contains_key(d, keys) for d in child.values()):
                    return True
            elif _contains_key(child, keys):
                return True
    elif isinstance(schema, list):
        return any(_contains_key(item, keys) for item in schema)
    return False


def validate_compatibility(
    schema: dict,
    provider: str = "openai",
    *,
    max_depth: int | None = None,
) -> list[str]:
    """Return human-readable issues; an empty list means compatible."""

    if provider not in PROVIDERS:
        raise ValueError(f"Unknown provider {provider!r}; expected one of {list(PROVIDERS)}.")
    limit = max_depth if max_depth is not None else SchemaOptions.from_env().max_depth

    issues: list[str] = []
    depth = schema_depth(schema)
    if depth > limit:
        issues.append(f"Schema depth ({depth}) exceeds recommended limit of {limit} levels")
    if provider == "openai":
        if _contains_key(schema, ("patternProperties",)):
            issues.append("Pattern properties are not supported in OpenAI structured outputs")
        if _contains_key(schema, ("if", "then", "else")):
            issues.append("Conditional schemas (if/then/else) are not supported")
        if _contains_key(schema, ("oneOf",)):
            issues.append("oneOf is rejected in strict mode; use anyOf")
    return issues
