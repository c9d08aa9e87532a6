"""Core data models shared across umldoc components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class NodeKind(str, Enum):
    """Kinds of reflections the diagram code cares about."""

    CLASS = "class"
    INTERFACE = "interface"
    PROPERTY = "property"
    METHOD = "method"
    OTHER = "other"


class Visibility(str, Enum):
    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"


class EdgeKind(str, Enum):
    EXTENDS = "extends"
    IMPLEMENTS = "implements"


@dataclass(frozen=True)
class Flags:
    """Modifier flags attached to a reflection."""

    is_static: bool = False
    is_abstract: bool = False
    is_private: bool = False
    is_protected: bool = False

    @property
    def visibility(self) -> Visibility:
        if self.is_private:
            return Visibility.PRIVATE
        if self.is_protected:
            return Visibility.PROTECTED
        return Visibility.PUBLIC


@dataclass(frozen=True)
class TypeParameter:
    name: str
    default: Optional[str] = None


@dataclass(frozen=True)
class Parameter:
    name: str
    type: Optional[str] = None


@dataclass(frozen=True)
class Signature:
    """One call signature of a method (overloads produce several)."""

    name: str
    parameters: Tuple[Parameter, ...] = ()
    return_type: Optional[str] = None
    type_parameters: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Member:
    """A property or method declared on a class or interface."""

    name: str
    kind: NodeKind
    flags: Flags = field(default_factory=Flags)
    type: Optional[str] = None
    signatures: Tuple[Signature, ...] = ()

    @property
    def visibility(self) -> Visibility:
        return self.flags.visibility


@dataclass(eq=False)
class TypeReference:
    """A (possibly generic) use of a type by name.

    ``target`` is the referenced node when the reflection model knows it;
    external types such as ``Error`` stay unresolved.
    """

    name: str
    target: Optional["Node"] = None
    type_arguments: Tuple[str, ...] = ()

    @property
    def key(self) -> Tuple[str, object]:
        """Stable identity used for de-duplication and cycle guards."""
        if self.target is not None:
            return self.target.key
        return ("name", self.name)


@dataclass(eq=False)
class Node:
    """A class, interface or other declaration from the reflection model.

    Nodes are compared by identity; the relation lists may form cycles.
    """

    id: int
    name: str
    kind: NodeKind
    flags: Flags = field(default_factory=Flags)
    qualified_name: str = ""
    type_parameters: List[TypeParameter] = field(default_factory=list)
    members: List[Member] = field(default_factory=list)
    extended_types: List[TypeReference] = field(default_factory=list)
    implemented_types: List[TypeReference] = field(default_factory=list)
    extended_by: List[TypeReference] = field(default_factory=list)
    implemented_by: List[TypeReference] = field(default_factory=list)

    @property
    def key(self) -> Tuple[str, object]:
        return ("id", self.id)

    @property
    def is_class_like(self) -> bool:
        return self.kind in (NodeKind.CLASS, NodeKind.INTERFACE)

    def reference(self) -> TypeReference:
        """Return a raw (template) reference to this node."""
        return TypeReference(name=self.name, target=self)

    def __repr__(self) -> str:
        return f"Node(id={self.id!r}, name={self.name!r}, kind={self.kind.value!r})"


@dataclass(frozen=True)
class Edge:
    """``source`` extends or implements ``target``.

    Ancestor edges have the subject as source, descendant edges have the
    subject as target.
    """

    source: TypeReference
    target: TypeReference
    kind: EdgeKind
    upward: bool

    @property
    def related(self) -> TypeReference:
        """The end of the edge that is not the diagram subject."""
        return self.target if self.upward else self.source


@dataclass
class ResolvedGraph:
    """A subject node together with its directly relevant relations."""

    subject: Node
    edges: List[Edge] = field(default_factory=list)
    siblings_above: int = 0
    siblings_below: int = 0

    @property
    def ancestors(self) -> List[Edge]:
        return [edge for edge in self.edges if edge.upward]

    @property
    def descendants(self) -> List[Edge]:
        return [edge for edge in self.edges if not edge.upward]

    @property
    def is_isolated(self) -> bool:
        return self.siblings_above + self.siblings_below == 0


@dataclass(frozen=True)
class Project:
    """All reflections loaded from one documentation model."""

    name: str
    nodes: Tuple[Node, ...] = ()

    def class_like(self) -> List[Node]:
        return [node for node in self.nodes if node.is_class_like]

    def find(self, name: str) -> Node:
        """Look a node up by qualified or display name."""
        for node in self.nodes:
            if node.qualified_name == name:
                return node
        matches = [node for node in self.nodes if node.name == name and node.is_class_like]
        if not matches:
            raise LookupError(f"No class or interface named '{name}' in the model")
        return matches[0]


__all__ = [
    "Edge",
    "EdgeKind",
    "Flags",
    "Member",
    "Node",
    "NodeKind",
    "Parameter",
    "Project",
    "ResolvedGraph",
    "Signature",
    "TypeParameter",
    "TypeReference",
    "Visibility",
]
