"""Deterministic JSON rendering for compiled schemas."""

from __future__ import annotations

import hashlib
import json


def to_stable_json(payload: object) -> str:
    """Serialize to stable JSON (sorted keys, indented)."""

    return json.dumps(payload, ensure_ascii=False, sort_keys=True, indent=2)


def schema_fingerprint(schema: dict) -> str:
    """Short content hash of a schema, independent of key order."""

    compact = json.dumps(schema, ensure_ascii=False, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(compact.encode("utf-8")).hexdigest()[:16]
