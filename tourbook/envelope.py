"""
Envelope peeling for backend responses.

Depending on endpoint and pagination state the backend wraps its payload as
``{"results": [...]}``, ``{"data": ...}`` or sends it bare. Nothing here
raises: an unknown shape comes back untouched.
"""

from __future__ import annotations

from typing import Any

# Bounds nested envelopes such as {"data": {"data": {...}}}.
_MAX_DEPTH = 3


def unwrap(value: Any) -> Any:
    """Peel one envelope layer, in priority order results → data → bare."""
    if isinstance(value, dict):
        results = value.get("results")
        if isinstance(results, list):
            return results
        data = value.get("data")
        if isinstance(data, (list, dict)):
            return data
    return value


def unwrap_list(value: Any) -> list:
    """Return the list carried by ``value`` or ``[]`` when there is none."""
    for _ in range(_MAX_DEPTH):
        if isinstance(value, list):
            return value
        peeled = unwrap(value)
        if peeled is value:
            break
        value = peeled
    return value if isinstance(value, list) else []


def unwrap_entity(value: Any) -> dict | None:
    """
    Return the single object carried by ``value``.

    Handles ``{"results": obj}``, ``{"data": obj}``, ``{"data": {"data": obj}}``
    and a bare object. Returns None for lists, scalars and empty bodies.
    """
    for _ in range(_MAX_DEPTH):
        if not isinstance(value, dict):
            return None
        if "results" not in value and "data" not in value:
            return value or None
        inner = value.get("results")
        if not isinstance(inner, dict):
            inner = value.get("data")
        if not isinstance(inner, dict):
            # an envelope carrying null or a list holds no single entity
            return None
        value = inner
    return value if isinstance(value, dict) and value else None
