"""PlantUML class diagram generation for one subject type."""

from __future__ import annotations

from typing import List, Sequence, Set, Tuple

from ..hierarchy.resolver import HierarchyResolver
from ..logging import get_logger
from ..models import Edge, EdgeKind, Node, ResolvedGraph, TypeReference
from ..stores.codegen_cache import CodeGenCache, Lines
from .boxes import (
    BoxFormatter,
    CachingBoxFormatter,
    PlantUmlBoxFormatter,
    escape_name,
    node_display_name,
    placeholder_box,
    reference_display_name,
)
from .options import DiagramOptions, FontStyle, VisibilityStyle

_ARROWS = {EdgeKind.EXTENDS: "<|--", EdgeKind.IMPLEMENTS: "<|.."}


class DiagramCodeGenerator:
    """Turns a resolved hierarchy into ordered PlantUML lines.

    Boxes come first (ancestors, the subject, then descendants, each once),
    followed by one relationship line per edge. Style directives selected by
    the options are stacked in front of everything.
    """

    def __init__(
        self,
        options: DiagramOptions | None = None,
        box_formatter: BoxFormatter | None = None,
        resolver: HierarchyResolver | None = None,
    ) -> None:
        self.options = options or DiagramOptions()
        self.box_formatter = box_formatter or PlantUmlBoxFormatter(self.options)
        self.resolver = resolver or HierarchyResolver()
        self.logger = get_logger("plantuml.generator")

    @classmethod
    def caching(
        cls,
        options: DiagramOptions | None = None,
        cache: CodeGenCache | None = None,
        resolver: HierarchyResolver | None = None,
    ) -> "DiagramCodeGenerator":
        """Build a generator whose box formatting goes through a run-scoped cache."""
        options = options or DiagramOptions()
        cache = cache if cache is not None else CodeGenCache()
        formatter = CachingBoxFormatter(PlantUmlBoxFormatter(options), cache)
        return cls(options, formatter, resolver)

    def generate_for(self, subject: Node) -> List[str]:
        """Resolve ``subject`` and generate its diagram lines."""
        return self.generate(self.resolver.resolve(subject))

    def generate(self, graph: ResolvedGraph) -> List[str]:
        """Return the diagram lines, or an empty list for types without relations."""
        if graph.is_isolated:
            self.logger.debug("Skipping %s: no inheritance relations", graph.subject.name)
            return []

        lines: List[str] = []
        emitted: Set[Tuple[str, object]] = {graph.subject.key}

        for edge in graph.ancestors:
            lines.extend(self._related_box(edge.related, emitted))
        lines.extend(self.box_formatter.format_reflection(graph.subject))
        for edge in graph.descendants:
            lines.extend(self._related_box(edge.related, emitted))

        subject_name = node_display_name(graph.subject)
        for edge in graph.edges:
            lines.append(relationship_line(edge, subject_name))

        return self.style_directives(graph) + lines

    def style_directives(self, graph: ResolvedGraph) -> List[str]:
        """Directives in output order.

        They are considered one by one and each is stacked on top of the
        previous ones, so the output order is the reverse of the order below.
        """
        options = self.options
        stacked: List[str] = []

        if options.hide_empty_members:
            stacked.append("hide empty fields")
            stacked.append("hide empty methods")
        if options.hide_circled_char:
            stacked.append("hide circle")
        limit = options.top_down_layout_max_siblings
        if graph.siblings_above > limit or graph.siblings_below > limit:
            stacked.append("left to right direction")
        if options.visibility_style is VisibilityStyle.TEXT:
            stacked.append("skinparam ClassAttributeIconSize 0")
        if options.hide_shadow:
            stacked.append("skinparam Shadowing false")
        if options.background_color:
            stacked.append(f"skinparam BackgroundColor {options.background_color}")
        if options.box_background_color:
            stacked.append(f"skinparam ClassBackgroundColor {options.box_background_color}")
        if options.box_border_color:
            stacked.append(f"skinparam ClassBorderColor {options.box_border_color}")
        if options.box_border_radius:
            stacked.append(f"skinparam RoundCorner {options.box_border_radius}")
        if options.box_border_width >= 0:
            stacked.append(f"skinparam ClassBorderThickness {options.box_border_width}")
        if options.arrow_color:
            stacked.append(f"skinparam ClassArrowColor {options.arrow_color}")
        if options.class_font_name:
            stacked.append(f"skinparam ClassFontName {options.class_font_name}")
        if options.class_font_size:
            stacked.append(f"skinparam ClassFontSize {options.class_font_size}")
        if _font_style_set(options.class_font_style):
            stacked.append(f"skinparam ClassFontStyle {options.class_font_style.value}")
        if options.class_font_color:
            stacked.append(f"skinparam ClassFontColor {options.class_font_color}")
        if options.attribute_font_name:
            stacked.append(f"skinparam ClassAttributeFontName {options.attribute_font_name}")
        if options.attribute_font_size:
            stacked.append(f"skinparam ClassAttributeFontSize {options.attribute_font_size}")
        if _font_style_set(options.attribute_font_style):
            stacked.append(f"skinparam ClassAttributeFontStyle {options.attribute_font_style.value}")
        if options.attribute_font_color:
            stacked.append(f"skinparam ClassAttributeFontColor {options.attribute_font_color}")

        return list(reversed(stacked))

    def _related_box(self, reference: TypeReference, emitted: Set[Tuple[str, object]]) -> Lines:
        if reference.key in emitted:
            return ()
        emitted.add(reference.key)
        target = reference.target
        if target is None:
            return placeholder_box(reference)
        return self.box_formatter.format_reflection(target, reference.type_arguments, is_type=True)


def relationship_line(edge: Edge, subject_name: str | None = None) -> str:
    """``<general> <arrow> <specific>`` for one edge."""
    source = _end_name(edge.source, subject_name if edge.upward else None)
    target = _end_name(edge.target, None if edge.upward else subject_name)
    return f"{escape_name(target)} {_ARROWS[edge.kind]} {escape_name(source)}"


def markup_text(lines: Sequence[str]) -> str:
    """Frame generated lines as a complete PlantUML document."""
    if not lines:
        return ""
    return "\n".join(["@startuml", *lines, "@enduml"])


def _end_name(reference: TypeReference, subject_name: str | None) -> str:
    if subject_name is not None:
        return subject_name
    return reference_display_name(reference)


def _font_style_set(style: FontStyle) -> bool:
    return style is not FontStyle.NORMAL


__all__ = ["DiagramCodeGenerator", "markup_text", "relationship_line"]
