"""In-memory stores scoped to a generation run."""

from .codegen_cache import CacheKey, CodeGenCache

__all__ = ["CacheKey", "CodeGenCache"]
