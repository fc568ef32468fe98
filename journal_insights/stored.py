"""Decoding of JSON text columns (``life_areas``, ``priorities``, ``traits``,
recap content).

Every loader either returns a value of the documented shape or raises
``MalformedStoredDataError``. Callers decide whether that is fatal.
"""
from __future__ import annotations

import json
from typing import Any


class MalformedStoredDataError(ValueError):
    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"malformed stored {field}: {reason}")
        self.field = field
        self.reason = reason


def _decode(field: str, raw: Any, empty: str) -> Any:
    if raw is None or raw == "":
        raw = empty
    if not isinstance(raw, str):
        raise MalformedStoredDataError(field, f"expected JSON text, got {type(raw).__name__}")
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedStoredDataError(field, str(e)) from e


def load_json_list(field: str, raw: Any) -> list[Any]:
    value = _decode(field, raw, "[]")
    if not isinstance(value, list):
        raise MalformedStoredDataError(field, "expected a JSON array")
    return value


def load_json_object(field: str, raw: Any) -> dict[str, Any]:
    value = _decode(field, raw, "{}")
    if not isinstance(value, dict):
        raise MalformedStoredDataError(field, "expected a JSON object")
    return value


def load_life_areas(raw: Any) -> list[dict[str, Any]]:
    """Wheel-of-Life areas: a list of objects, each with an ``id``."""
    areas = load_json_list("life_areas", raw)
    for i, area in enumerate(areas):
        if not isinstance(area, dict):
            raise MalformedStoredDataError("life_areas", f"item {i} is not an object")
        if "id" not in area:
            raise MalformedStoredDataError("life_areas", f"item {i} has no id")
    return areas


def load_priorities(raw: Any) -> list[str]:
    priorities = load_json_list("priorities", raw)
    if not all(isinstance(p, str) for p in priorities):
        raise MalformedStoredDataError("priorities", "expected a list of strings")
    return priorities


def load_traits(raw: Any) -> dict[str, Any]:
    return load_json_object("traits", raw)
