"""PlantUML markup generation and encoding."""

from .boxes import BoxFormatter, CachingBoxFormatter, PlantUmlBoxFormatter
from .encoder import MarkupEncoder
from .generator import DiagramCodeGenerator, markup_text
from .options import (
    DiagramOptions,
    DiagramType,
    FontStyle,
    MemberOrder,
    MethodParameterOutput,
    VisibilityStyle,
)

__all__ = [
    "BoxFormatter",
    "CachingBoxFormatter",
    "DiagramCodeGenerator",
    "DiagramOptions",
    "DiagramType",
    "FontStyle",
    "MarkupEncoder",
    "MemberOrder",
    "MethodParameterOutput",
    "PlantUmlBoxFormatter",
    "VisibilityStyle",
    "markup_text",
]
