"""Token splitting shared by name cleaning, keywords and the entity heuristic."""

import re
import unicodedata
from typing import Any, List

_APOSTROPHES = re.compile(r"['’`]")
_NON_WORD = re.compile(r"[\W_]+")


def tokenize(name: Any) -> List[str]:
    """Split a raw name into accent-free, casefolded, punctuation-free tokens.

    Anything that is not a string has no tokens.
    """
    if not isinstance(name, str):
        return []
    text = unicodedata.normalize("NFKD", name)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = _APOSTROPHES.sub("", text.casefold())
    return _NON_WORD.sub(" ", text).split()
