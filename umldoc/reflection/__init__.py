"""Reflection model input: JSON documents in, node graphs out."""

from .loader import ModelError, load_project, parse_project
from .types import UNKNOWN, render_type

__all__ = ["ModelError", "UNKNOWN", "load_project", "parse_project", "render_type"]
