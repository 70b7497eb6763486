"""
Payee Name Cleaning

Normalizes raw payee names into the canonical form used for similarity
scoring: accents folded, case folded, punctuation stripped, whitespace
collapsed and trailing corporate suffixes dropped.
"""

from typing import Any, FrozenSet, Iterable, List, Optional

from .keyword_cache import KeywordCache
from .models import CleanedRecord, DuplicateRecord
from .tokenization import tokenize

CORPORATE_SUFFIXES: FrozenSet[str] = frozenset({
    "inc", "incorporated", "corp", "corporation", "co", "company", "companies",
    "llc", "llp", "lp", "pllc", "pc", "ltd", "limited", "plc", "gmbh",
    "enterprise", "enterprises", "group", "partners", "partnership", "holdings",
})

# Tokens that carry no identity when comparing two payee names
GENERIC_TOKENS: FrozenSet[str] = CORPORATE_SUFFIXES | frozenset({"the", "and", "dba"})


class NameCleaner:
    """Deterministic, side-effect-free payee name normalizer."""

    def __init__(
        self,
        strip_suffixes: bool = True,
        suffixes: Iterable[str] = CORPORATE_SUFFIXES,
        keyword_cache: Optional[KeywordCache] = None,
    ):
        self.strip_suffixes = strip_suffixes
        self.suffixes = frozenset(suffixes)
        self.keyword_cache = keyword_cache

    def clean(self, name: Any) -> str:
        """
        Clean a raw payee name.

        None and blank input clean to an empty string. Trailing suffix tokens
        are removed one at a time but the last remaining token is kept, so
        "Inc" on its own cleans to "inc".
        """
        tokens = tokenize(name)

        if self.strip_suffixes:
            suffixes = self._suffixes()
            while len(tokens) > 1 and tokens[-1] in suffixes:
                tokens.pop()

        return " ".join(tokens)

    def clean_records(self, records: Iterable[DuplicateRecord]) -> List[CleanedRecord]:
        """Clean every record, recording its position in the batch."""
        return [
            CleanedRecord(record=record, index=index, cleaned_name=self.clean(record.name))
            for index, record in enumerate(records)
        ]

    def _suffixes(self) -> FrozenSet[str]:
        if self.keyword_cache is None:
            return self.suffixes
        return self.suffixes | self.keyword_cache.get()
