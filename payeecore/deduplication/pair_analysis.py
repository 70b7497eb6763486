"""
Candidate Pair Analysis

Enumerates every unordered record pair, scores it, applies the obvious-match
floor and assigns a confidence tier. Pairs at or below the low threshold are
dropped here and never reach the tiered funnel.

Pair generation is O(n^2) in the batch size. ``candidate_filter`` is the
extension point for blocking strategies: it is consulted before a pair is
scored and may only remove pairs, never change how kept pairs are tiered.
"""

import logging
from typing import Callable, List, Optional, Sequence

from .config import DuplicateDetectionConfig
from .entity_heuristic import EntityHeuristic
from .models import CandidatePair, CleanedRecord, ConfidenceTier
from .similarity_scoring import SimilarityScorer

logger = logging.getLogger(__name__)

CandidateFilter = Callable[[CleanedRecord, CleanedRecord], bool]


def classify_tier(final_score: float, config: DuplicateDetectionConfig) -> ConfidenceTier:
    """Tier a score: >= high is High, <= low is Low, anything between is Ambiguous."""
    if final_score >= config.high_confidence_threshold:
        return ConfidenceTier.HIGH
    if final_score <= config.low_confidence_threshold:
        return ConfidenceTier.LOW
    return ConfidenceTier.AMBIGUOUS


class PairAnalyzer:
    """Generates scored, tiered candidate pairs."""

    def __init__(
        self,
        scorer: Optional[SimilarityScorer] = None,
        heuristic: Optional[EntityHeuristic] = None,
        candidate_filter: Optional[CandidateFilter] = None,
    ):
        self.scorer = scorer or SimilarityScorer()
        self.heuristic = heuristic or EntityHeuristic()
        self.candidate_filter = candidate_filter

    def find_pairs(
        self, records: Sequence[CleanedRecord], config: DuplicateDetectionConfig
    ) -> List[CandidatePair]:
        """
        Find potential duplicate pairs.

        Args:
            records: Cleaned records in batch order
            config: Thresholds and obvious-match floor

        Returns:
            Candidate pairs in generation order (i < j)
        """
        pairs: List[CandidatePair] = []
        comparisons = 0

        for i, record_a in enumerate(records):
            for record_b in records[i + 1:]:
                if self.candidate_filter and not self.candidate_filter(record_a, record_b):
                    continue
                comparisons += 1

                pair = self.analyze_pair(record_a, record_b, config)
                if (
                    pair.final_score > config.low_confidence_threshold
                    or pair.tier == ConfidenceTier.AMBIGUOUS
                ):
                    pairs.append(pair)

        logger.debug(f"Compared {comparisons} pairs, kept {len(pairs)} candidates")
        return pairs

    def analyze_pair(
        self,
        record_a: CleanedRecord,
        record_b: CleanedRecord,
        config: DuplicateDetectionConfig,
    ) -> CandidatePair:
        """Score and tier a single pair of records."""
        scores = self.scorer.score(record_a.cleaned_name, record_b.cleaned_name)
        final_score = scores.combined

        obvious = self.heuristic.is_obvious_match(record_a.name, record_b.name)
        if obvious:
            final_score = max(final_score, config.obvious_match_floor)
            logger.debug(
                f"Obvious duplicate: '{record_a.name}' vs '{record_b.name}' "
                f"- boosted to {final_score:.1f}%"
            )

        return CandidatePair(
            record_a=record_a,
            record_b=record_b,
            scores=scores,
            final_score=final_score,
            tier=classify_tier(final_score, config),
            obvious_match=obvious,
        )
