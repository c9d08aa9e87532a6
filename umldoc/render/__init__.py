"""Turning diagram markup into images or image references."""

from .dispatcher import DEFAULT_DELIMITER, ProcessSlot, RenderDispatcher, RenderError, plantuml_command
from .images import (
    ImageFormat,
    ImageLocation,
    ImageWriter,
    create_embedded_image_url,
    create_server_url,
    relative_url,
)

__all__ = [
    "DEFAULT_DELIMITER",
    "ImageFormat",
    "ImageLocation",
    "ImageWriter",
    "ProcessSlot",
    "RenderDispatcher",
    "RenderError",
    "create_embedded_image_url",
    "create_server_url",
    "plantuml_command",
    "relative_url",
]
