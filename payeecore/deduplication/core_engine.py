"""
Core Duplicate Detection Engine

Orchestrates the detection pipeline: name cleaning, pairwise similarity
analysis, the three-tier confidence funnel with AI judgment for ambiguous
pairs, group consolidation and statistics.
"""

import asyncio
import logging
from collections import Counter
from typing import Any, Iterable, List, Optional

from ..logging_config import Timer, log_context, log_performance
from .ai_judge import AIJudge
from .config import ConfigInput, DuplicateDetectionConfig, build_config
from .entity_heuristic import EntityHeuristic
from .group_manager import GroupManager
from .keyword_cache import KeywordCache
from .models import DuplicateDetectionResult, DuplicateRecord
from .name_cleaning import NameCleaner
from .pair_analysis import CandidateFilter, PairAnalyzer
from .similarity_scoring import SimilarityScorer
from .statistics import StatisticsGenerator
from .tiered_processing import TieredProcessor

logger = logging.getLogger(__name__)


class DuplicateDetectionEngine:
    """
    Duplicate detection for payee names.

    An engine holds configuration and collaborators only; every call to
    ``detect_duplicates`` is an independent single-pass run.
    """

    def __init__(
        self,
        config: ConfigInput = None,
        ai_judge: Optional[AIJudge] = None,
        keyword_cache: Optional[KeywordCache] = None,
        scorer: Optional[SimilarityScorer] = None,
        candidate_filter: Optional[CandidateFilter] = None,
    ):
        """
        Initialize the engine.

        Args:
            config: Full config, partial mapping of overrides, or None for defaults
            ai_judge: Async judge for ambiguous pairs
            keyword_cache: Custom generic keywords for cleaning and the heuristic
            scorer: Similarity scorer (defaults to the configured weights)
            candidate_filter: Optional blocking predicate applied before scoring

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        self.config: DuplicateDetectionConfig = build_config(config)
        self.ai_judge = ai_judge

        self.cleaner = NameCleaner(keyword_cache=keyword_cache)
        self.pair_analyzer = PairAnalyzer(
            scorer=scorer or SimilarityScorer(self.config.algorithm_weights),
            heuristic=EntityHeuristic(keyword_cache=keyword_cache),
            candidate_filter=candidate_filter,
        )
        self.tiered_processor = TieredProcessor(self.config, ai_judge)
        self.group_manager = GroupManager()
        self.statistics_generator = StatisticsGenerator()

        logger.debug(f"Duplicate detection engine initialized with config: {self.config}")

    async def detect_duplicates(self, records: Iterable[Any]) -> DuplicateDetectionResult:
        """
        Detect duplicate payees in a batch of records.

        Args:
            records: DuplicateRecords or mappings with payee_id/payee_name

        Returns:
            DuplicateDetectionResult with enriched records, groups and statistics
        """
        with Timer() as timer:
            payees = [DuplicateRecord.coerce(raw) for raw in records]

            with log_context(batch_size=len(payees)):
                logger.info(f"🔍 Starting duplicate detection for {len(payees)} records")
                self._check_batch(payees)

                cleaned = self.cleaner.clean_records(payees)
                pairs = self.pair_analyzer.find_pairs(cleaned, self.config)
                logger.info(f"   🔍 Found {len(pairs)} potential duplicate pairs")

                judged = await self.tiered_processor.process(pairs)

                grouping = self.group_manager.build_groups(payees, judged)
                statistics = self.statistics_generator.generate(
                    grouping.enriched,
                    timer.elapsed_ms,
                    judged_pairs=judged,
                    groups=grouping.groups,
                )

        log_performance(__name__, "duplicate_detection", timer.duration_ms)
        logger.info("✅ Duplicate detection complete")
        logger.info(f"   🎯 Duplicates found: {statistics.duplicates_found}")
        logger.info(f"   👥 Duplicate groups: {len(grouping.groups)}")
        logger.info(f"   🤖 AI judgments made: {statistics.ai_judgments_made}")

        return DuplicateDetectionResult(
            processed_records=grouping.enriched,
            duplicate_groups=grouping.groups,
            statistics=statistics,
        )

    def _check_batch(self, payees: List[DuplicateRecord]) -> None:
        repeated = [record_id for record_id, count in Counter(p.id for p in payees).items() if count > 1]
        if repeated:
            logger.warning(f"⚠️  Duplicate payee ids in batch: {repeated[:10]}")

        if len(payees) > self.config.large_batch_warning:
            comparisons = len(payees) * (len(payees) - 1) // 2
            logger.warning(
                f"⚠️  Large batch: {len(payees)} records need {comparisons} pairwise comparisons"
            )


async def detect_duplicates(
    records: Iterable[Any],
    config: ConfigInput = None,
    ai_judge: Optional[AIJudge] = None,
) -> DuplicateDetectionResult:
    """Convenience function for one-off duplicate detection."""
    engine = DuplicateDetectionEngine(config=config, ai_judge=ai_judge)
    return await engine.detect_duplicates(records)


def run_detection(
    records: Iterable[Any],
    config: ConfigInput = None,
    ai_judge: Optional[AIJudge] = None,
) -> DuplicateDetectionResult:
    """Blocking wrapper around ``detect_duplicates`` for synchronous callers."""
    return asyncio.run(detect_duplicates(records, config=config, ai_judge=ai_judge))
