"""Tests for rendering serialized type expressions."""

from __future__ import annotations

import pytest

from umldoc.reflection import UNKNOWN, render_type


def _ref(name: str, *arguments: dict) -> dict:
    payload: dict = {"type": "reference", "name": name}
    if arguments:
        payload["typeArguments"] = list(arguments)
    return payload


def _intrinsic(name: str) -> dict:
    return {"type": "intrinsic", "name": name}


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        (_intrinsic("string"), "string"),
        ({"type": "typeParameter", "name": "T"}, "T"),
        (_ref("Map", _intrinsic("string"), _ref("User")), "Map<string, User>"),
        ({"type": "array", "elementType": _intrinsic("number")}, "number[]"),
        (
            {
                "type": "array",
                "elementType": {"type": "union", "types": [_intrinsic("string"), _intrinsic("number")]},
            },
            "(string | number)[]",
        ),
        ({"type": "intersection", "types": [_ref("A"), _ref("B")]}, "A & B"),
        ({"type": "literal", "value": "on"}, '"on"'),
        ({"type": "literal", "value": None}, "null"),
        ({"type": "literal", "value": True}, "true"),
        ({"type": "literal", "value": 3}, "3"),
        ({"type": "literal", "value": {"negative": True, "value": "12"}}, "-12n"),
        ({"type": "tuple", "elements": [_intrinsic("string"), _intrinsic("number")]}, "[string, number]"),
        ({"type": "reflection", "declaration": {}}, "object"),
        ({"type": "typeOperator", "operator": "keyof", "target": _ref("User")}, "keyof User"),
        (
            {"type": "indexedAccess", "objectType": _ref("User"), "indexType": {"type": "literal", "value": "id"}},
            'User["id"]',
        ),
        ({"type": "query", "queryType": _ref("config")}, "typeof config"),
    ],
)
def test_render_type(payload: dict, expected: str) -> None:
    assert render_type(payload) == expected


def test_render_type_passes_strings_through_and_keeps_none() -> None:
    assert render_type("Promise<void>") == "Promise<void>"
    assert render_type(None) is None


def test_unsupported_shapes_render_as_unknown() -> None:
    assert render_type({"type": "conditional"}) == UNKNOWN
    assert render_type(42) == UNKNOWN


def test_non_list_type_collections_render_as_unknown() -> None:
    assert render_type({"type": "union", "types": 5}) == UNKNOWN
    assert render_type({"type": "reference", "name": "Box", "typeArguments": 3}) == "Box"
    assert render_type({"type": "tuple", "elements": "ab"}) == "[]"
