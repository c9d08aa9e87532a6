"""Configuration loading for umldoc (.umldoc.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

import yaml

from .logging import get_logger
from .plantuml.options import (
    DiagramOptions,
    DiagramType,
    FontStyle,
    MemberOrder,
    MethodParameterOutput,
    VisibilityStyle,
)
from .render.images import DEFAULT_SERVER_URL, ImageFormat, ImageLocation

CONFIG_FILENAME = ".umldoc.yml"

_E = TypeVar("_E", bound=Enum)

logger = get_logger("config")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class OutputConfig:
    """Where rendered diagrams go and in which format."""

    location: ImageLocation = ImageLocation.LOCAL
    format: ImageFormat = ImageFormat.SVG
    remote_base_url: str = DEFAULT_SERVER_URL
    create_plantuml_files: bool = False


@dataclass
class RenderConfig:
    """Settings of the local PlantUML process pool."""

    process_count: int = 0
    plantuml_jar: Optional[str] = None
    command: List[str] = field(default_factory=list)
    timeout: float = 60.0

    @property
    def pool_size(self) -> int:
        """Configured process count, or the host's CPU count when unset or not positive."""
        if self.process_count > 0:
            return self.process_count
        return os.cpu_count() or 1


@dataclass
class UmlDocConfig:
    """Represents the settings defined in .umldoc.yml."""

    root: Path
    diagram: DiagramOptions = field(default_factory=DiagramOptions)
    output: OutputConfig = field(default_factory=OutputConfig)
    render: RenderConfig = field(default_factory=RenderConfig)


def load_config(config_path: Path) -> UmlDocConfig:
    """Load configuration from disk; a missing file yields the defaults."""
    config_file = _resolve_config_path(Path(config_path))
    root = config_file.parent.resolve()

    if not config_file.exists():
        logger.debug("No %s found under %s, using defaults", CONFIG_FILENAME, root)
        return UmlDocConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")
    return parse_config(data, root=root)


def parse_config(data: Dict[str, Any], *, root: Path) -> UmlDocConfig:
    """Build a config object from an already-decoded mapping."""
    return UmlDocConfig(
        root=root,
        diagram=_parse_diagram(_as_dict(data.get("diagram")), _as_dict(data.get("style"))),
        output=_parse_output(_as_dict(data.get("output"))),
        render=_parse_render(_as_dict(data.get("render"))),
    )


def _parse_diagram(diagram: Dict[str, Any], style: Dict[str, Any]) -> DiagramOptions:
    defaults = DiagramOptions()
    return replace(
        defaults,
        type=_as_enum(DiagramType, diagram.get("type"), defaults.type, "diagram.type"),
        method_parameter_output=_as_enum(
            MethodParameterOutput,
            diagram.get("method_parameter_output"),
            defaults.method_parameter_output,
            "diagram.method_parameter_output",
        ),
        member_order=_as_enum(
            MemberOrder, diagram.get("member_order"), defaults.member_order, "diagram.member_order"
        ),
        hide_empty_members=_or(_as_bool(diagram.get("hide_empty_members")), defaults.hide_empty_members),
        top_down_layout_max_siblings=_or(
            _as_int(diagram.get("top_down_layout_max_siblings")),
            defaults.top_down_layout_max_siblings,
        ),
        visibility_style=_as_enum(
            VisibilityStyle,
            diagram.get("visibility_style"),
            defaults.visibility_style,
            "diagram.visibility_style",
        ),
        hide_circled_char=_or(_as_bool(diagram.get("hide_circled_char")), defaults.hide_circled_char),
        hide_shadow=_or(_as_bool(style.get("hide_shadow")), defaults.hide_shadow),
        background_color=_as_str(style.get("background_color")) or "",
        box_background_color=_as_str(style.get("box_background_color")) or "",
        box_border_color=_as_str(style.get("box_border_color")) or "",
        box_border_radius=_or(_as_int(style.get("box_border_radius")), defaults.box_border_radius),
        box_border_width=_or(_as_int(style.get("box_border_width")), defaults.box_border_width),
        arrow_color=_as_str(style.get("arrow_color")) or "",
        class_font_name=_as_str(style.get("class_font_name")) or "",
        class_font_size=_or(_as_int(style.get("class_font_size")), defaults.class_font_size),
        class_font_style=_as_enum(
            FontStyle, style.get("class_font_style"), defaults.class_font_style, "style.class_font_style"
        ),
        class_font_color=_as_str(style.get("class_font_color")) or "",
        attribute_font_name=_as_str(style.get("attribute_font_name")) or "",
        attribute_font_size=_or(_as_int(style.get("attribute_font_size")), defaults.attribute_font_size),
        attribute_font_style=_as_enum(
            FontStyle,
            style.get("attribute_font_style"),
            defaults.attribute_font_style,
            "style.attribute_font_style",
        ),
        attribute_font_color=_as_str(style.get("attribute_font_color")) or "",
    )


def _parse_output(data: Dict[str, Any]) -> OutputConfig:
    defaults = OutputConfig()
    return OutputConfig(
        location=_as_enum(ImageLocation, data.get("location"), defaults.location, "output.location"),
        format=_as_enum(ImageFormat, data.get("format"), defaults.format, "output.format"),
        remote_base_url=_as_str(data.get("remote_base_url")) or defaults.remote_base_url,
        create_plantuml_files=_or(_as_bool(data.get("create_plantuml_files")), False),
    )


def _parse_render(data: Dict[str, Any]) -> RenderConfig:
    defaults = RenderConfig()
    return RenderConfig(
        process_count=_or(_as_int(data.get("process_count")), defaults.process_count),
        plantuml_jar=_as_str(data.get("plantuml_jar")),
        command=_as_str_list(data.get("command")),
        timeout=_positive(_as_float(data.get("timeout")), defaults.timeout, "render.timeout"),
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _or(value: Any, default: Any) -> Any:
    return default if value is None else value


def _positive(value: Optional[float], default: float, name: str) -> float:
    if value is None:
        return default
    if value <= 0:
        logger.warning("Ignoring %s=%r (expected a positive number)", name, value)
        return default
    return value


def _as_enum(enum_cls: Type[_E], value: Any, default: _E, name: str) -> _E:
    if value is None:
        return default
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        logger.warning("Ignoring %s=%r (expected one of: %s)", name, value, allowed)
        return default


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "OutputConfig",
    "RenderConfig",
    "UmlDocConfig",
    "load_config",
    "parse_config",
]
