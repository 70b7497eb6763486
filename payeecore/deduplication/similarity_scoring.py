"""
Similarity Scoring System

Fuzzy matching of cleaned payee names with multiple complementary string
similarity metrics combined into a single weighted duplicate score.
"""

import logging
from typing import Optional

import jellyfish
from fuzzywuzzy import fuzz

from .config import AlgorithmWeights
from .models import SimilarityScoreSet

logger = logging.getLogger(__name__)


class SimilarityScorer:
    """
    Weighted similarity scoring over three metrics.

    - Jaro-Winkler: character alignment, rewards shared prefixes
    - token sort ratio: insensitive to word order
    - token set ratio: robust to repeated or extra words

    Scores are on a 0-100 scale. The scorer is symmetric and deterministic;
    any pair involving an empty name scores zero.
    """

    def __init__(self, weights: Optional[AlgorithmWeights] = None):
        """Initialize the similarity scorer."""
        self.weights = weights or AlgorithmWeights()

    def score(self, name_a: str, name_b: str) -> SimilarityScoreSet:
        """
        Calculate similarity scores between two cleaned names.

        Args:
            name_a: First cleaned name
            name_b: Second cleaned name

        Returns:
            SimilarityScoreSet with each metric and the weighted combination
        """
        if not name_a or not name_b:
            return SimilarityScoreSet()

        # Score the ordered pair so score(a, b) == score(b, a) exactly
        first, second = sorted((name_a, name_b))

        jaro_winkler = jellyfish.jaro_winkler_similarity(first, second) * 100
        token_sort = float(fuzz.token_sort_ratio(first, second))
        token_set = float(fuzz.token_set_ratio(first, second))

        return SimilarityScoreSet(
            jaro_winkler=jaro_winkler,
            token_sort=token_sort,
            token_set=token_set,
            combined=self._calculate_weighted_score(jaro_winkler, token_sort, token_set),
        )

    def _calculate_weighted_score(
        self, jaro_winkler: float, token_sort: float, token_set: float
    ) -> float:
        weighted_sum = (
            jaro_winkler * self.weights.jaro_winkler
            + token_sort * self.weights.token_sort
            + token_set * self.weights.token_set
        )
        return max(0.0, min(100.0, weighted_sum))
