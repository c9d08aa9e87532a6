"""Options controlling the generated class diagram markup."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DiagramType(str, Enum):
    NONE = "none"
    SIMPLE = "simple"
    DETAILED = "detailed"


class MethodParameterOutput(str, Enum):
    NONE = "none"
    ONLY_NAMES = "only-names"
    ONLY_TYPES = "only-types"
    COMPLETE = "complete"


class MemberOrder(str, Enum):
    ABC = "abc"
    PUBLIC_TO_PRIVATE = "public-to-private"
    PRIVATE_TO_PUBLIC = "private-to-public"


class VisibilityStyle(str, Enum):
    TEXT = "text"
    ICON = "icon"


class FontStyle(str, Enum):
    NORMAL = "normal"
    PLAIN = "plain"
    ITALIC = "italic"
    BOLD = "bold"


@dataclass(frozen=True)
class DiagramOptions:
    """Content and style settings for one diagram generator.

    Empty strings and zero sizes mean "leave the renderer default". A border
    width of ``-1`` means unset because ``0`` hides borders.
    """

    type: DiagramType = DiagramType.DETAILED
    method_parameter_output: MethodParameterOutput = MethodParameterOutput.COMPLETE
    member_order: MemberOrder = MemberOrder.PUBLIC_TO_PRIVATE
    hide_empty_members: bool = True
    top_down_layout_max_siblings: int = 6
    visibility_style: VisibilityStyle = VisibilityStyle.ICON
    hide_circled_char: bool = False
    hide_shadow: bool = False
    background_color: str = ""
    box_background_color: str = ""
    box_border_color: str = ""
    box_border_radius: int = 0
    box_border_width: int = -1
    arrow_color: str = ""
    class_font_name: str = ""
    class_font_size: int = 0
    class_font_style: FontStyle = FontStyle.NORMAL
    class_font_color: str = ""
    attribute_font_name: str = ""
    attribute_font_size: int = 0
    attribute_font_style: FontStyle = FontStyle.NORMAL
    attribute_font_color: str = ""

    @property
    def include_members(self) -> bool:
        return self.type is DiagramType.DETAILED


__all__ = [
    "DiagramOptions",
    "DiagramType",
    "FontStyle",
    "MemberOrder",
    "MethodParameterOutput",
    "VisibilityStyle",
]
