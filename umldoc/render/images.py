"""Image formats, image references and local image files."""

from __future__ import annotations

import base64
import os
import threading
from enum import Enum
from pathlib import Path

from ..logging import get_logger

DEFAULT_SERVER_URL = "http://www.plantuml.com"
FILE_PREFIX = "umlClassDiagram-"


class ImageFormat(str, Enum):
    SVG = "svg"
    PNG = "png"

    @property
    def mime_type(self) -> str:
        return "image/png" if self is ImageFormat.PNG else "image/svg+xml"


class ImageLocation(str, Enum):
    LOCAL = "local"
    REMOTE = "remote"
    EMBED = "embed"


def create_server_url(
    token: str, image_format: ImageFormat | str, base_url: str = DEFAULT_SERVER_URL
) -> str:
    """URL under which a PlantUML server renders the encoded diagram."""
    fmt = ImageFormat(image_format).value
    return f"{base_url.rstrip('/')}/plantuml/{fmt}/{token}"


def create_embedded_image_url(data: bytes, image_format: ImageFormat | str) -> str:
    """``data:`` URL carrying the image bytes inline."""
    mime = ImageFormat(image_format).mime_type
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def relative_url(page_path: Path, image_path: Path) -> str:
    """Link from a page file to an image file, with forward slashes."""
    relative = os.path.relpath(Path(image_path), Path(page_path).parent)
    return Path(relative).as_posix()


class ImageWriter:
    """Writes diagram images into one directory under sequential file names."""

    def __init__(self, output_dir: Path, prefix: str = FILE_PREFIX) -> None:
        self.output_dir = Path(output_dir)
        self.prefix = prefix
        self._count = 0
        self._lock = threading.Lock()
        self.logger = get_logger("render.images")

    @property
    def count(self) -> int:
        return self._count

    def write(self, data: bytes, image_format: ImageFormat | str) -> Path:
        """Persist ``data`` and return the path of the new file."""
        fmt = ImageFormat(image_format).value
        with self._lock:
            self._count += 1
            number = self._count
        path = self.output_dir / f"{self.prefix}{number}.{fmt}"
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        self.logger.debug("Wrote %s (%d bytes)", path, len(data))
        return path

    def write_source(self, image_path: Path, markup: str) -> Path:
        """Store the PlantUML source next to an image."""
        source_path = Path(image_path).with_suffix(".puml")
        source_path.parent.mkdir(parents=True, exist_ok=True)
        source_path.write_text(markup + "\n", encoding="utf-8")
        return source_path


__all__ = [
    "DEFAULT_SERVER_URL",
    "ImageFormat",
    "ImageLocation",
    "ImageWriter",
    "create_embedded_image_url",
    "create_server_url",
    "relative_url",
]
