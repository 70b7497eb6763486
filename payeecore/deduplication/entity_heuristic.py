"""
Obvious Entity Match Heuristic

Rule-based pre-check for name pairs that plainly denote the same payee
even when the statistical score under-rates them ("Christa INC" vs
"CHRISTA"). A match only raises the pair's score floor; scoring and
tiering still run.

Rules, applied to the raw names:

1. Both names are reduced to their core tokens: casefolded, punctuation
   removed, generic tokens (corporate suffixes, "the", "and", custom
   keywords) dropped.
2. Same core: both cores are non-empty and identical.
3. Contained core: the cores differ in length, the shorter one has at
   least ``min_subset_tokens`` tokens of two or more characters, and each
   of them occurs in the longer core.

Anything else is not an obvious match. In particular a single-token core
never matches by containment ("John" vs "John Smith") and equal-length
cores must be identical ("John Smith" vs "Jane Smith").
"""

import logging
from typing import Any, FrozenSet, Iterable, List, Optional

from .keyword_cache import KeywordCache
from .name_cleaning import GENERIC_TOKENS
from .tokenization import tokenize

logger = logging.getLogger(__name__)


class EntityHeuristic:
    """Cheap, deterministic obvious-match detector."""

    def __init__(
        self,
        generic_tokens: Iterable[str] = GENERIC_TOKENS,
        min_subset_tokens: int = 2,
        keyword_cache: Optional[KeywordCache] = None,
    ):
        self.generic_tokens = frozenset(generic_tokens)
        self.min_subset_tokens = min_subset_tokens
        self.keyword_cache = keyword_cache

    def core_tokens(self, name: Any) -> List[str]:
        """Identity-bearing tokens of a raw name, in order."""
        generic = self._generic_tokens()
        return [token for token in tokenize(name) if token not in generic]

    def is_obvious_match(self, name_a: Any, name_b: Any) -> bool:
        """Check whether two raw names denote the same entity by rule."""
        core_a = self.core_tokens(name_a)
        core_b = self.core_tokens(name_b)

        if not core_a or not core_b:
            return False

        if core_a == core_b:
            return True

        if len(core_a) == len(core_b):
            return False

        shorter, longer = (core_a, core_b) if len(core_a) < len(core_b) else (core_b, core_a)
        if len(shorter) < self.min_subset_tokens:
            return False
        if any(len(token) < 2 for token in shorter):
            return False

        return set(shorter).issubset(longer)

    def _generic_tokens(self) -> FrozenSet[str]:
        if self.keyword_cache is None:
            return self.generic_tokens
        return self.generic_tokens | self.keyword_cache.get()
