"""Build the umldoc node graph from a TypeDoc-style JSON project model."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..logging import get_logger
from ..models import (
    Flags,
    Member,
    Node,
    NodeKind,
    Parameter,
    Project,
    Signature,
    TypeParameter,
    TypeReference,
)
from .types import render_type

logger = get_logger("reflection")

# TypeDoc ReflectionKind values
KIND_PROJECT = 1
KIND_MODULE = 2
KIND_NAMESPACE = 4
KIND_CLASS = 128
KIND_INTERFACE = 256
KIND_PROPERTY = 1024
KIND_METHOD = 2048

_CONTAINER_KINDS = {KIND_PROJECT, KIND_MODULE, KIND_NAMESPACE}
_NAMED_KINDS = {
    "project": KIND_PROJECT,
    "module": KIND_MODULE,
    "namespace": KIND_NAMESPACE,
    "class": KIND_CLASS,
    "interface": KIND_INTERFACE,
    "property": KIND_PROPERTY,
    "method": KIND_METHOD,
}
_RELATION_FIELDS = ("extendedTypes", "implementedTypes", "extendedBy", "implementedBy")


class ModelError(RuntimeError):
    """Raised when the reflection model cannot be interpreted."""


@dataclass
class _PendingNode:
    node: Node
    relations: Dict[str, List[Any]] = field(default_factory=dict)


def load_project(path: Path) -> Project:
    """Read and parse a JSON reflection model from disk."""
    path = Path(path).expanduser()
    if not path.exists():
        raise FileNotFoundError(f"Reflection model not found at {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ModelError(f"{path.name} is not valid JSON: {exc}") from exc
    return parse_project(data)


def parse_project(data: Any) -> Project:
    """Convert an already-decoded JSON document into a :class:`Project`."""
    if not isinstance(data, Mapping):
        raise ModelError("Reflection model must contain a mapping at the root")

    pending: Dict[int, _PendingNode] = {}
    children = data.get("children") or []
    if _kind_of(data) not in _CONTAINER_KINDS and "kind" in data:
        # A single declaration was handed over instead of a whole project.
        children = [data]
    _collect(children, prefix="", pending=pending)

    by_id = {node_id: entry.node for node_id, entry in pending.items()}
    for entry in pending.values():
        _link(entry, by_id)

    name = str(data.get("name") or "project")
    logger.debug("Loaded %d reflections from model '%s'", len(by_id), name)
    return Project(name=name, nodes=tuple(entry.node for entry in pending.values()))


def _collect(children: Any, *, prefix: str, pending: Dict[int, _PendingNode]) -> None:
    if not isinstance(children, Sequence) or isinstance(children, (str, bytes)):
        raise ModelError("'children' must be a list of reflections")
    for raw in children:
        if not isinstance(raw, Mapping):
            raise ModelError("Every reflection must be a mapping")
        kind = _kind_of(raw)
        name = str(raw.get("name") or "")
        qualified = f"{prefix}.{name}" if prefix else name
        if kind in _CONTAINER_KINDS:
            _collect(raw.get("children") or [], prefix=qualified, pending=pending)
            continue
        if kind in {KIND_PROPERTY, KIND_METHOD}:
            # Members outside a class (e.g. module-level functions) carry no hierarchy.
            continue

        node_id = _require_id(raw)
        if node_id in pending:
            raise ModelError(f"Duplicate reflection id {node_id} ('{qualified}')")

        node = Node(
            id=node_id,
            name=name,
            kind=_node_kind(kind),
            flags=_parse_flags(raw.get("flags")),
            qualified_name=qualified,
            type_parameters=_parse_type_parameters(raw),
            members=_parse_members(raw) if kind in {KIND_CLASS, KIND_INTERFACE} else [],
        )
        relations = {key: _as_list(raw, key, qualified) for key in _RELATION_FIELDS}
        pending[node_id] = _PendingNode(node=node, relations=relations)


def _link(entry: _PendingNode, by_id: Mapping[int, Node]) -> None:
    node = entry.node
    node.extended_types = _references(entry.relations["extendedTypes"], by_id)
    node.implemented_types = _references(entry.relations["implementedTypes"], by_id)
    node.extended_by = _references(entry.relations["extendedBy"], by_id)
    node.implemented_by = _references(entry.relations["implementedBy"], by_id)


def _references(payloads: Sequence[Any], by_id: Mapping[int, Node]) -> List[TypeReference]:
    references: List[TypeReference] = []
    for payload in payloads:
        if isinstance(payload, str):
            references.append(TypeReference(name=payload))
            continue
        if not isinstance(payload, Mapping) or payload.get("type", "reference") != "reference":
            # Only named references can appear in a class diagram.
            continue
        target_id = payload.get("target", payload.get("id"))
        target = by_id.get(target_id) if _is_int(target_id) else None
        name = str(payload.get("name") or (target.name if target else ""))
        if not name:
            continue
        arguments = tuple(
            render_type(argument) or "unknown" for argument in _as_list(payload, "typeArguments", name)
        )
        references.append(TypeReference(name=name, target=target, type_arguments=arguments))
    return references


def _parse_members(owner: Mapping[str, Any]) -> List[Member]:
    members: List[Member] = []
    for raw in _as_list(owner, "children", str(owner.get("name") or "?")):
        if not isinstance(raw, Mapping):
            raise ModelError("Every member must be a mapping")
        kind = _kind_of(raw)
        name = str(raw.get("name") or "")
        flags = _parse_flags(raw.get("flags"))
        if kind == KIND_PROPERTY:
            members.append(
                Member(name=name, kind=NodeKind.PROPERTY, flags=flags, type=render_type(raw.get("type")))
            )
        elif kind == KIND_METHOD:
            signatures = tuple(_parse_signature(item, name) for item in _as_list(raw, "signatures", name))
            members.append(Member(name=name, kind=NodeKind.METHOD, flags=flags, signatures=signatures))
    return members


def _parse_signature(raw: Any, default_name: str) -> Signature:
    if not isinstance(raw, Mapping):
        raise ModelError(f"Signature of '{default_name}' must be a mapping")
    parameters = tuple(
        Parameter(name=str(item.get("name") or ""), type=render_type(item.get("type")))
        for item in _as_list(raw, "parameters", default_name)
        if isinstance(item, Mapping)
    )
    type_parameters = tuple(parameter.name for parameter in _parse_type_parameters(raw))
    return Signature(
        name=str(raw.get("name") or default_name),
        parameters=parameters,
        return_type=render_type(raw.get("type")),
        type_parameters=type_parameters,
    )


def _parse_type_parameters(raw: Mapping[str, Any]) -> List[TypeParameter]:
    # Older TypeDoc versions used the singular key.
    key = "typeParameters" if "typeParameters" in raw else "typeParameter"
    result: List[TypeParameter] = []
    for item in _as_list(raw, key, str(raw.get("name") or "?")):
        if isinstance(item, str):
            result.append(TypeParameter(name=item))
        elif isinstance(item, Mapping):
            result.append(
                TypeParameter(name=str(item.get("name") or ""), default=render_type(item.get("default")))
            )
    return result


def _parse_flags(raw: Any) -> Flags:
    if not isinstance(raw, Mapping):
        return Flags()
    return Flags(
        is_static=bool(raw.get("isStatic")),
        is_abstract=bool(raw.get("isAbstract")),
        is_private=bool(raw.get("isPrivate")),
        is_protected=bool(raw.get("isProtected")),
    )


def _kind_of(raw: Mapping[str, Any]) -> Optional[int]:
    kind = raw.get("kind")
    if isinstance(kind, str):
        return _NAMED_KINDS.get(kind.lower(), -1)
    return kind if _is_int(kind) else None


def _node_kind(kind: Optional[int]) -> NodeKind:
    if kind == KIND_CLASS:
        return NodeKind.CLASS
    if kind == KIND_INTERFACE:
        return NodeKind.INTERFACE
    return NodeKind.OTHER


def _require_id(raw: Mapping[str, Any]) -> int:
    node_id = raw.get("id")
    if not _is_int(node_id):
        raise ModelError(f"Reflection '{raw.get('name', '?')}' has no integer id")
    return node_id


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _as_list(raw: Mapping[str, Any], key: str, owner: str) -> List[Any]:
    value = raw.get(key)
    if value is None:
        return []
    if not isinstance(value, Sequence) or isinstance(value, (str, bytes)):
        raise ModelError(f"'{key}' of '{owner}' must be a list")
    return list(value)


__all__ = ["ModelError", "load_project", "parse_project"]
