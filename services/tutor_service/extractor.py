"""
Best-effort extraction of a JSON object from free-form model text.

The span runs from the first "{" to the LAST "}" in the text. This is
permissive on purpose and mis-extracts when the reply holds several JSON
objects or stray braces in prose; callers depend on that exact behaviour,
so it is not a balanced-brace scan.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from shared.llm_adapter import StructuredGenerationError

logger = logging.getLogger(__name__)

_JSON_SPAN = re.compile(r"\{[\s\S]*\}")


def extract_json(text: str, strict: bool = False) -> dict[str, Any]:
    """
    Parse the greedy {...} span of text.

    Lenient mode returns {} when there is nothing parseable. Strict mode
    raises StructuredGenerationError instead.
    """
    match = _JSON_SPAN.search(text or "")
    if match is None:
        if strict:
            raise StructuredGenerationError("Model reply contained no JSON object")
        return {}

    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        logger.warning("Failed to parse model JSON: %s", exc)
        if strict:
            raise StructuredGenerationError(f"Model reply was not valid JSON: {exc}") from exc
        return {}

    if not isinstance(parsed, dict):
        if strict:
            raise StructuredGenerationError("Model reply JSON was not an object")
        return {}
    return parsed


def read_str(obj: dict[str, Any], key: str, default: str) -> str:
    value = obj.get(key)
    return value if isinstance(value, str) else default


def read_list(obj: dict[str, Any], key: str) -> list[Any]:
    value = obj.get(key)
    return list(value) if isinstance(value, list) else []


def read_objects(obj: dict[str, Any], key: str) -> list[dict[str, Any]]:
    """List field keeping only its object items."""
    return [item for item in read_list(obj, key) if isinstance(item, dict)]


def read_object(obj: dict[str, Any], key: str) -> dict[str, Any] | None:
    value = obj.get(key)
    return value if isinstance(value, dict) else None
