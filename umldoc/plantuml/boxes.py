"""Formatting of single class/interface boxes in PlantUML syntax."""

from __future__ import annotations

import re
from typing import Dict, Mapping, Optional, Protocol, Sequence

from ..models import Member, Node, NodeKind, Signature, TypeReference, Visibility
from ..reflection.types import UNKNOWN
from ..stores.codegen_cache import CacheKey, CodeGenCache, Lines
from .members import sort_members
from .options import DiagramOptions, MethodParameterOutput

INDENT = "    "
_BARE_NAME = re.compile(r"[A-Za-z_$][\w$.]*")
_VISIBILITY_GLYPHS = {
    Visibility.PUBLIC: "+",
    Visibility.PROTECTED: "#",
    Visibility.PRIVATE: "-",
}


class BoxFormatter(Protocol):
    """Anything able to turn a node into box lines."""

    def format_reflection(
        self,
        node: Node,
        type_arguments: Sequence[str] = (),
        *,
        is_type: bool = False,
    ) -> Lines:
        """Return the box lines for ``node``.

        ``is_type`` tells a use of a generic type (``Base<string>``, or
        ``Base`` with default arguments) apart from the template itself.
        """


class PlantUmlBoxFormatter:
    """Formats a node header plus, in detailed mode, its members."""

    def __init__(self, options: DiagramOptions) -> None:
        self.options = options

    def format_reflection(
        self,
        node: Node,
        type_arguments: Sequence[str] = (),
        *,
        is_type: bool = False,
    ) -> Lines:
        if not node.is_class_like:
            return ()

        mapping = type_parameter_mapping(node, type_arguments) if is_type else {}
        lines = [f"{_class_header(node, mapping)} {{"]

        if self.options.include_members:
            properties = [m for m in node.members if m.kind is NodeKind.PROPERTY]
            for member in sort_members(properties, self.options.member_order):
                lines.append(_property_line(member, mapping))

            methods = [m for m in node.members if m.kind is NodeKind.METHOD]
            for member in sort_members(methods, self.options.member_order):
                for signature in member.signatures:
                    lines.append(self._method_line(member, signature, mapping))

        lines.append("}")
        return tuple(lines)

    def _method_line(
        self, member: Member, signature: Signature, mapping: Mapping[str, str]
    ) -> str:
        line = INDENT
        if member.flags.is_static:
            line += "{static} "
        if member.flags.is_abstract:
            line += "{abstract} "
        line += _VISIBILITY_GLYPHS[member.visibility] + signature.name

        local_mapping = dict(mapping)
        if signature.type_parameters:
            line += "<" + ", ".join(signature.type_parameters) + ">"
            # Method type parameters shadow the ones of the class.
            for name in signature.type_parameters:
                local_mapping.pop(name, None)

        line += "(" + self._parameters(signature, local_mapping) + ")"
        if signature.return_type:
            line += " : " + substitute_type_parameters(signature.return_type, local_mapping)
        else:
            line += " : void"
        return line

    def _parameters(self, signature: Signature, mapping: Mapping[str, str]) -> str:
        mode = self.options.method_parameter_output
        if mode is MethodParameterOutput.ONLY_NAMES:
            return ", ".join(parameter.name for parameter in signature.parameters)
        if mode is MethodParameterOutput.ONLY_TYPES:
            return ", ".join(_typed(parameter.type, mapping) for parameter in signature.parameters)
        if mode is MethodParameterOutput.COMPLETE:
            return ", ".join(
                f"{parameter.name}: {_typed(parameter.type, mapping)}"
                for parameter in signature.parameters
            )
        return ""


class CachingBoxFormatter:
    """Decorates a formatter so every distinct box is formatted once per run."""

    def __init__(self, inner: BoxFormatter, cache: CodeGenCache | None = None) -> None:
        self.inner = inner
        self.cache = cache if cache is not None else CodeGenCache()

    def format_reflection(
        self,
        node: Node,
        type_arguments: Sequence[str] = (),
        *,
        is_type: bool = False,
    ) -> Lines:
        key = cache_key(node, type_arguments, is_type=is_type)
        return self.cache.get_or_create(
            key, lambda: self.inner.format_reflection(node, type_arguments, is_type=is_type)
        )


def cache_key(node: Node, type_arguments: Sequence[str] = (), *, is_type: bool = False) -> CacheKey:
    mapping = type_parameter_mapping(node, type_arguments) if is_type else {}
    pairs = [f"{name}={argument}" for name, argument in mapping.items()]
    signature = "<" + ", ".join(pairs) + ">" if pairs else ""
    return CacheKey(node_id=node.id, type_arguments=signature)


def type_parameter_mapping(node: Node, type_arguments: Sequence[str] = ()) -> Dict[str, str]:
    """Map each type parameter to its argument, falling back to the declared default."""
    mapping: Dict[str, str] = {}
    for index, parameter in enumerate(node.type_parameters):
        argument: Optional[str] = type_arguments[index] if index < len(type_arguments) else None
        if not argument:
            argument = parameter.default
        if argument:
            mapping[parameter.name] = argument
    return mapping


def substitute_type_parameters(type_name: str, mapping: Mapping[str, str]) -> str:
    for parameter, argument in mapping.items():
        pattern = r"(?<![\w])" + re.escape(parameter) + r"(?![\w])"
        type_name = re.sub(pattern, lambda _match: argument, type_name)
    return type_name


def node_display_name(node: Node, mapping: Mapping[str, str] | None = None) -> str:
    """``Name``, ``Name<T, U>`` for templates or ``Name<string, U>`` for bound uses."""
    if not node.type_parameters:
        return node.name
    mapping = mapping or {}
    arguments = [mapping.get(parameter.name, parameter.name) for parameter in node.type_parameters]
    return f"{node.name}<{', '.join(arguments)}>"


def reference_display_name(reference: TypeReference) -> str:
    target = reference.target
    if target is not None:
        return node_display_name(target, type_parameter_mapping(target, reference.type_arguments))
    if reference.type_arguments:
        return f"{reference.name}<{', '.join(reference.type_arguments)}>"
    return reference.name


def escape_name(name: str) -> str:
    """Quote names PlantUML cannot read bare.

    Generic names are always quoted: bare, PlantUML reads ``Foo<T>`` as ``Foo``,
    which would merge a template with its bound uses.
    """
    if _BARE_NAME.fullmatch(name):
        return name
    return '"' + name.replace('"', "'") + '"'


def placeholder_box(reference: TypeReference) -> Lines:
    """Box for a type outside the model; its kind is unknown, so the glyph is hidden."""
    name = escape_name(reference_display_name(reference))
    return (f"class {name}", f"hide {name} circle")


def _class_header(node: Node, mapping: Mapping[str, str]) -> str:
    header = ""
    if node.flags.is_static:
        header += "static "
    if node.flags.is_abstract:
        header += "abstract "
    header += "class " if node.kind is NodeKind.CLASS else "interface "
    return header + escape_name(node_display_name(node, mapping))


def _property_line(member: Member, mapping: Mapping[str, str]) -> str:
    line = INDENT
    if member.flags.is_static:
        line += "{static} "
    line += _VISIBILITY_GLYPHS[member.visibility]
    return f"{line}{member.name} : {_typed(member.type, mapping)}"


def _typed(type_name: Optional[str], mapping: Mapping[str, str]) -> str:
    if not type_name:
        return UNKNOWN
    return substitute_type_parameters(type_name, mapping)


__all__ = [
    "BoxFormatter",
    "CachingBoxFormatter",
    "PlantUmlBoxFormatter",
    "cache_key",
    "escape_name",
    "node_display_name",
    "placeholder_box",
    "reference_display_name",
    "substitute_type_parameters",
    "type_parameter_mapping",
]
