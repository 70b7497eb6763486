"""Aggregate statistics for a detection run."""

from collections import Counter
from typing import Optional, Sequence

from .models import (
    DetectionStatistics,
    DuplicateGroup,
    EnrichedRecord,
    JudgedPair,
    JudgmentMethod,
)


class StatisticsGenerator:
    """Pure aggregation over enriched output; no side effects."""

    def generate(
        self,
        enriched: Sequence[EnrichedRecord],
        elapsed_ms: float,
        judged_pairs: Optional[Sequence[JudgedPair]] = None,
        groups: Optional[Sequence[DuplicateGroup]] = None,
    ) -> DetectionStatistics:
        method_counts = Counter(record.method for record in enriched)
        judged_pairs = judged_pairs or []

        return DetectionStatistics(
            total_processed=len(enriched),
            duplicates_found=sum(1 for record in enriched if record.is_potential_duplicate),
            high_confidence_matches=method_counts[JudgmentMethod.ALGORITHMIC_HIGH],
            low_confidence_matches=method_counts[JudgmentMethod.ALGORITHMIC_LOW],
            ai_judgments_made=method_counts[JudgmentMethod.AI],
            ai_failures=sum(
                1 for p in judged_pairs if p.ai_judgment is not None and p.ai_judgment.failed
            ),
            duplicate_groups=len(groups) if groups is not None else 0,
            candidate_pairs=len(judged_pairs),
            method_breakdown={method.value: method_counts[method] for method in JudgmentMethod},
            processing_time_ms=elapsed_ms,
        )
