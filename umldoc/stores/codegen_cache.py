"""Run-scoped memo table for formatted class boxes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional, Tuple

from ..logging import get_logger

Lines = Tuple[str, ...]


@dataclass(frozen=True)
class CacheKey:
    """Identifies one formatted box.

    ``type_arguments`` is empty for non-generic nodes and for generic nodes
    drawn as raw templates.
    """

    node_id: int
    type_arguments: str = ""

    def __str__(self) -> str:
        return f"{self.node_id}{self.type_arguments}"


class CodeGenCache:
    """Stores box lines keyed by node identity and type-argument signature.

    Entries are written at most once per key and never evicted. A cache
    belongs to one generation run; create a new one for the next run.
    """

    def __init__(self) -> None:
        self._entries: Dict[CacheKey, Lines] = {}
        self.hits = 0
        self.misses = 0
        self.logger = get_logger("stores.codegen_cache")

    def get(self, key: CacheKey) -> Optional[Lines]:
        return self._entries.get(key)

    def get_or_create(self, key: CacheKey, compute: Callable[[], Iterable[str]]) -> Lines:
        """Return cached lines for ``key``, calling ``compute`` only on the first request."""
        cached = self._entries.get(key)
        if cached is not None:
            self.hits += 1
            return cached
        self.misses += 1
        lines = tuple(compute())
        self._entries[key] = lines
        self.logger.debug("Cached box %s (%d lines)", key, len(lines))
        return lines

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["CacheKey", "CodeGenCache", "Lines"]
