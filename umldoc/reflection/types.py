"""Render TypeDoc JSON type expressions as display strings."""

from __future__ import annotations

import json
from typing import Any, List, Mapping, Optional

UNKNOWN = "unknown"


def render_type(payload: Any) -> Optional[str]:
    """Return the display string for a serialized type, or None when absent."""
    if payload is None:
        return None
    if isinstance(payload, str):
        return payload
    if not isinstance(payload, Mapping):
        return UNKNOWN
    return _render(payload)


def _render(payload: Mapping[str, Any]) -> str:
    kind = payload.get("type")

    if kind in {"intrinsic", "typeParameter", "unknown"}:
        return str(payload.get("name") or UNKNOWN)

    if kind == "reference":
        name = str(payload.get("name") or UNKNOWN)
        arguments = _items(payload.get("typeArguments"))
        if arguments:
            rendered = ", ".join(render_type(argument) or UNKNOWN for argument in arguments)
            return f"{name}<{rendered}>"
        return name

    if kind == "array":
        element = render_type(payload.get("elementType")) or UNKNOWN
        if _needs_parentheses(payload.get("elementType")):
            element = f"({element})"
        return f"{element}[]"

    if kind in {"union", "intersection"}:
        separator = " | " if kind == "union" else " & "
        parts = [render_type(item) or UNKNOWN for item in _items(payload.get("types"))]
        return separator.join(parts) if parts else UNKNOWN

    if kind == "literal":
        value = payload.get("value")
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, str):
            return json.dumps(value)
        if isinstance(value, Mapping) and "value" in value:
            # bigint literals are serialized as {"negative": bool, "value": "123"}
            sign = "-" if value.get("negative") else ""
            return f"{sign}{value['value']}n"
        return str(value)

    if kind == "tuple":
        elements = [render_type(item) or UNKNOWN for item in _items(payload.get("elements"))]
        return f"[{', '.join(elements)}]"

    if kind == "reflection":
        return "object"

    if kind == "typeOperator":
        target = render_type(payload.get("target")) or UNKNOWN
        return f"{payload.get('operator', 'keyof')} {target}"

    if kind == "indexedAccess":
        obj = render_type(payload.get("objectType")) or UNKNOWN
        index = render_type(payload.get("indexType")) or UNKNOWN
        return f"{obj}[{index}]"

    if kind == "query":
        return f"typeof {render_type(payload.get('queryType')) or UNKNOWN}"

    return UNKNOWN


def _needs_parentheses(payload: Any) -> bool:
    return isinstance(payload, Mapping) and payload.get("type") in {"union", "intersection"}


def _items(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


__all__ = ["UNKNOWN", "render_type"]
