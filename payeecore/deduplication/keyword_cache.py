"""Cache for custom generic keywords (extra corporate suffixes and filler tokens)."""

import logging
import threading
import time
from typing import Callable, FrozenSet, Iterable, List, Optional

from .tokenization import tokenize

logger = logging.getLogger(__name__)

KeywordLoader = Callable[[], Iterable[str]]


def keyword_tokens(keyword: str) -> List[str]:
    """
    Split a keyword exactly the way payee names are split.

    A multi-word keyword ("and sons", "S.A.") contributes each of its
    tokens, since names are compared token by token.
    """
    return tokenize(str(keyword))


class KeywordCache:
    """
    Owned, explicitly invalidated cache of custom keywords.

    The loader is called lazily on the first ``get()`` and again once the
    TTL has passed or after ``invalidate()``/``clear()``. If the loader
    fails, the last successfully loaded keywords are served.
    """

    def __init__(self, loader: KeywordLoader, ttl_seconds: float = 300.0):
        self.loader = loader
        self.ttl_seconds = ttl_seconds
        self._keywords: FrozenSet[str] = frozenset()
        self._loaded_at: Optional[float] = None
        self._lock = threading.Lock()

    def get(self) -> FrozenSet[str]:
        """Return the cached keywords, reloading them if stale."""
        with self._lock:
            if self._is_fresh():
                return self._keywords

            try:
                loaded = frozenset(
                    token for keyword in self.loader() for token in keyword_tokens(keyword)
                )
            except Exception as e:
                logger.error(f"Error loading custom keywords: {e}")
                return self._keywords

            self._keywords = loaded
            self._loaded_at = time.monotonic()
            logger.debug(f"Loaded {len(loaded)} custom keywords")
            return self._keywords

    def invalidate(self) -> None:
        """Force a reload on the next ``get()`` while keeping the fallback data."""
        with self._lock:
            self._loaded_at = None

    def clear(self) -> None:
        """Drop all cached keywords."""
        with self._lock:
            self._keywords = frozenset()
            self._loaded_at = None

    def _is_fresh(self) -> bool:
        if self._loaded_at is None:
            return False
        return time.monotonic() - self._loaded_at < self.ttl_seconds
