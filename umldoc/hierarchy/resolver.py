"""Resolution of the inheritance neighbourhood drawn around one type."""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Set, Tuple

from ..logging import get_logger
from ..models import Edge, EdgeKind, Node, ResolvedGraph, TypeReference

_Key = Tuple[str, object]
_Neighbours = Callable[[Node], Iterable[TypeReference]]


class HierarchyResolver:
    """Computes the direct ancestors and descendants worth drawing for a node.

    Only direct relations become edges. Transitive closures are used to drop
    relations a reader can already infer: an interface implemented somewhere
    up the class chain, or an implementor that is itself a descendant of
    another direct descendant. Traversals track visited nodes so cyclic or
    self-referencing models terminate.
    """

    def __init__(self) -> None:
        self.logger = get_logger("hierarchy")

    def resolve(self, subject: Node) -> ResolvedGraph:
        """Return the subject together with its de-duplicated relation edges."""
        subject_ref = subject.reference()
        seen: Set[_Key] = {subject.key}
        edges: List[Edge] = []

        for reference in self.extended_types(subject):
            if _admit(reference, seen):
                edges.append(Edge(subject_ref, reference, EdgeKind.EXTENDS, upward=True))
        for reference in self.implemented_types(subject):
            if _admit(reference, seen):
                edges.append(Edge(subject_ref, reference, EdgeKind.IMPLEMENTS, upward=True))
        for reference in self.extended_by(subject):
            if _admit(reference, seen):
                edges.append(Edge(reference, subject_ref, EdgeKind.EXTENDS, upward=False))
        for reference in self.implemented_by(subject):
            if _admit(reference, seen):
                edges.append(Edge(reference, subject_ref, EdgeKind.IMPLEMENTS, upward=False))

        above = sum(1 for edge in edges if edge.upward)
        graph = ResolvedGraph(
            subject=subject,
            edges=edges,
            siblings_above=above,
            siblings_below=len(edges) - above,
        )
        self.logger.debug(
            "Resolved %s: %d ancestor(s), %d descendant(s)",
            subject.qualified_name or subject.name,
            graph.siblings_above,
            graph.siblings_below,
        )
        return graph

    def extended_types(self, node: Node) -> List[TypeReference]:
        return _unique(node.extended_types)

    def implemented_types(self, node: Node) -> List[TypeReference]:
        """Direct interfaces minus those already implemented up the class chain."""
        inherited: Set[_Key] = set()
        for reference in node.extended_types:
            if reference.target is not None:
                inherited.update(item.key for item in self.ancestors_of(reference.target))
        return [item for item in _unique(node.implemented_types) if item.key not in inherited]

    def extended_by(self, node: Node) -> List[TypeReference]:
        nested = self._nested_descendant_keys(node)
        return [item for item in _unique(node.extended_by) if item.key not in nested]

    def implemented_by(self, node: Node) -> List[TypeReference]:
        """Direct implementors minus those that descend from another direct descendant."""
        nested = self._nested_descendant_keys(node)
        return [item for item in _unique(node.implemented_by) if item.key not in nested]

    def ancestors_of(self, node: Node) -> List[TypeReference]:
        """Every type the node extends or implements, transitively."""
        return _closure(node, lambda current: [*current.extended_types, *current.implemented_types])

    def descendants_of(self, node: Node) -> List[TypeReference]:
        """Every type extending or implementing the node, transitively."""
        return _closure(node, lambda current: [*current.extended_by, *current.implemented_by])

    def _nested_descendant_keys(self, node: Node) -> Set[_Key]:
        nested: Set[_Key] = set()
        for reference in [*node.extended_by, *node.implemented_by]:
            if reference.target is not None:
                nested.update(item.key for item in self.descendants_of(reference.target))
        return nested


def _closure(start: Node, neighbours: _Neighbours) -> List[TypeReference]:
    found: Dict[_Key, TypeReference] = {}
    visited: Set[_Key] = {start.key}
    stack = [start]
    while stack:
        current = stack.pop()
        for reference in neighbours(current):
            found.setdefault(reference.key, reference)
            target = reference.target
            if target is not None and target.key not in visited:
                visited.add(target.key)
                stack.append(target)
    return list(found.values())


def _unique(references: Iterable[TypeReference]) -> List[TypeReference]:
    result: Dict[_Key, TypeReference] = {}
    for reference in references:
        result.setdefault(reference.key, reference)
    return list(result.values())


def _admit(reference: TypeReference, seen: Set[_Key]) -> bool:
    if reference.key in seen:
        return False
    seen.add(reference.key)
    return True


__all__ = ["HierarchyResolver"]
