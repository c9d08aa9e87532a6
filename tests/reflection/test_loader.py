"""Tests for loading reflection models into the node graph."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path

import pytest

from tests._fixtures.model_builder import ModelBuilder, method, prop
from umldoc.models import NodeKind
from umldoc.reflection import ModelError, load_project, parse_project


def test_parse_project_links_relations_in_both_directions(model_builder: ModelBuilder) -> None:
    model_builder.add_interface("Printable")
    model_builder.add_class("Super", implements=["Printable"])
    model_builder.add_class("Sub", extends=["Super"])

    project = model_builder.project()
    printable = project.find("Printable")
    sup = project.find("Super")
    sub = project.find("Sub")

    assert printable.kind is NodeKind.INTERFACE
    assert sup.kind is NodeKind.CLASS
    assert [ref.target for ref in sub.extended_types] == [sup]
    assert [ref.target for ref in sup.extended_by] == [sub]
    assert [ref.target for ref in sup.implemented_types] == [printable]
    assert [ref.target for ref in printable.implemented_by] == [sup]


def test_unknown_targets_stay_unresolved(model_builder: ModelBuilder) -> None:
    model_builder.add_class("Widget", extends=[("EventEmitter", ["string"])])

    widget = model_builder.project().find("Widget")
    (reference,) = widget.extended_types

    assert reference.target is None
    assert reference.name == "EventEmitter"
    assert reference.type_arguments == ("string",)
    assert reference.key == ("name", "EventEmitter")


def test_members_type_parameters_and_flags_are_parsed(model_builder: ModelBuilder) -> None:
    model_builder.add_class(
        "Repo",
        type_parameters=["T", ("K", "string")],
        flags=["abstract"],
        members=[
            prop("items", "T[]", "protected"),
            method("find", [("key", "K")], "T", "abstract"),
        ],
    )

    repo = model_builder.project().find("Repo")

    assert repo.flags.is_abstract is True
    assert [(p.name, p.default) for p in repo.type_parameters] == [("T", None), ("K", "string")]
    items, find = repo.members
    assert items.kind is NodeKind.PROPERTY
    assert items.type == "T[]"
    assert items.flags.is_protected is True
    assert find.kind is NodeKind.METHOD
    (signature,) = find.signatures
    assert [(p.name, p.type) for p in signature.parameters] == [("key", "K")]
    assert signature.return_type == "T"


def test_nested_modules_build_qualified_names() -> None:
    data = {
        "id": 0,
        "name": "lib",
        "kind": 1,
        "children": [
            {
                "id": 1,
                "name": "shapes",
                "kind": 2,
                "children": [
                    {"id": 2, "name": "Shape", "kind": "class"},
                    {"id": 3, "name": "area", "kind": 2048},
                ],
            }
        ],
    }

    project = parse_project(data)

    assert [node.qualified_name for node in project.nodes] == ["shapes.Shape"]
    assert project.find("shapes.Shape") is project.find("Shape")


def test_other_declarations_become_other_nodes(model_builder: ModelBuilder) -> None:
    model_builder.add_other("Alias")
    project = model_builder.project()

    assert project.nodes[0].kind is NodeKind.OTHER
    assert project.class_like() == []
    with pytest.raises(LookupError):
        project.find("Missing")


def test_duplicate_ids_are_rejected() -> None:
    data = {
        "kind": 1,
        "children": [
            {"id": 5, "name": "A", "kind": 128},
            {"id": 5, "name": "B", "kind": 128},
        ],
    }
    with pytest.raises(ModelError, match="Duplicate reflection id 5"):
        parse_project(data)


@pytest.mark.parametrize(
    "data",
    [
        [],
        {"kind": 1, "children": "nope"},
        {"kind": 1, "children": [{"name": "NoId", "kind": 128}]},
        {"kind": 1, "children": [42]},
    ],
)
def test_malformed_models_raise_model_error(data: object) -> None:
    with pytest.raises(ModelError):
        parse_project(data)


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("extendedTypes", 5),
        ("implementedBy", "Base"),
        ("typeParameters", 7),
        ("typeParameter", {"name": "T"}),
        ("children", 3),
    ],
)
def test_relation_and_parameter_fields_must_be_lists(field: str, value: object) -> None:
    data = {"kind": 1, "children": [{"id": 1, "name": "A", "kind": 128, field: value}]}

    with pytest.raises(ModelError, match=f"'{field}' of 'A' must be a list"):
        parse_project(data)


@pytest.mark.parametrize(
    "method_payload",
    [
        {"id": 2, "name": "run", "kind": 2048, "signatures": 3},
        {"id": 2, "name": "run", "kind": 2048, "signatures": [{"name": "run", "parameters": 1}]},
    ],
)
def test_malformed_signatures_raise_model_error(method_payload: dict) -> None:
    data = {"kind": 1, "children": [{"id": 1, "name": "A", "kind": 128, "children": [method_payload]}]}

    with pytest.raises(ModelError, match="of 'run' must be a list"):
        parse_project(data)


def test_doc_comments_do_not_change_the_loaded_node() -> None:
    plain = {"id": 1, "name": "A", "kind": 128}
    commented = {**plain, "comment": {"summary": [{"kind": "text", "text": "An A."}]}}

    first = parse_project({"kind": 1, "children": [plain]}).find("A")
    second = parse_project({"kind": 1, "children": [commented]}).find("A")

    assert asdict(first) == asdict(second)


def test_load_project_reads_json_from_disk(tmp_path: Path, model_builder: ModelBuilder) -> None:
    model_builder.add_class("Only")
    path = model_builder.write(tmp_path / "model.json")

    project = load_project(path)

    assert project.name == "demo"
    assert [node.name for node in project.nodes] == ["Only"]


def test_load_project_reports_missing_and_invalid_files(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_project(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(ModelError, match="not valid JSON"):
        load_project(broken)


def test_single_declaration_document_is_accepted() -> None:
    project = parse_project(json.loads('{"id": 9, "name": "Solo", "kind": 128}'))

    assert [node.name for node in project.nodes] == ["Solo"]
