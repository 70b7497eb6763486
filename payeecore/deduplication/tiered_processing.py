"""
Tiered Logic Processor

Applies the three-tier funnel to candidate pairs:

- High confidence: duplicate, no AI call
- Low confidence: not a duplicate, no AI call
- Ambiguous: one AI judgment when enabled, otherwise not a duplicate

AI calls for ambiguous pairs fan out under a concurrency cap and are all
awaited before the judged pairs are returned. A failing judgment resolves
its own pair to "not a duplicate" and never affects any other pair.
Cancellation is not caught and propagates to the caller.
"""

import asyncio
import logging
from typing import List, Optional, Sequence

from ..logging_config import Timer, log_event
from .ai_judge import AIJudge
from .config import DuplicateDetectionConfig
from .models import AIJudgment, CandidatePair, ConfidenceTier, JudgedPair, JudgmentMethod

logger = logging.getLogger(__name__)

FAILED_JUDGMENT_CONFIDENCE = 50.0


class TieredProcessor:
    """Resolves every candidate pair to exactly one judged pair."""

    def __init__(self, config: DuplicateDetectionConfig, ai_judge: Optional[AIJudge] = None):
        self.config = config
        self.ai_judge = ai_judge

    @property
    def ai_enabled(self) -> bool:
        return self.config.enable_ai_judgment and self.ai_judge is not None

    async def process(self, pairs: Sequence[CandidatePair]) -> List[JudgedPair]:
        """
        Judge all pairs.

        Args:
            pairs: Candidate pairs from the pair analyzer

        Returns:
            Judged pairs in the same order as the input
        """
        if self.config.enable_ai_judgment and self.ai_judge is None:
            logger.warning("AI judgment enabled but no AI judge configured - ambiguous pairs default to non-duplicate")

        semaphore = asyncio.Semaphore(self.config.max_concurrent_ai_requests)

        with Timer() as timer:
            judged = await asyncio.gather(
                *(self._judge_pair(pair, semaphore) for pair in pairs)
            )

        log_event(
            __name__,
            "tiered_processing_completed",
            pairs=len(pairs),
            duplicates=sum(1 for j in judged if j.is_duplicate),
            ai_judgments=sum(1 for j in judged if j.method == JudgmentMethod.AI),
            duration_ms=timer.duration_ms,
        )
        return list(judged)

    async def _judge_pair(
        self, pair: CandidatePair, semaphore: asyncio.Semaphore
    ) -> JudgedPair:
        if pair.tier == ConfidenceTier.HIGH:
            logger.debug(
                f"High confidence duplicate: '{pair.record_a.name}' = '{pair.record_b.name}' "
                f"({pair.final_score:.1f}%)"
            )
            return JudgedPair(pair=pair, is_duplicate=True, method=JudgmentMethod.ALGORITHMIC_HIGH)

        if pair.tier == ConfidenceTier.LOW or not self.ai_enabled:
            return JudgedPair(pair=pair, is_duplicate=False, method=JudgmentMethod.ALGORITHMIC_LOW)

        async with semaphore:
            judgment = await self._request_judgment(pair)

        return JudgedPair(
            pair=pair,
            is_duplicate=judgment.is_duplicate,
            method=JudgmentMethod.AI,
            ai_judgment=judgment,
        )

    async def _request_judgment(self, pair: CandidatePair) -> AIJudgment:
        name_a, name_b = pair.record_a.name, pair.record_b.name
        logger.debug(
            f"Ambiguous case, requesting AI judgment: '{name_a}' vs '{name_b}' "
            f"({pair.final_score:.1f}%)"
        )

        try:
            response = await self.ai_judge(name_a, name_b)
            return AIJudgment.from_response(response, name_a=name_a, name_b=name_b)
        except Exception as e:
            logger.warning(
                f"AI judgment failed for '{name_a}' ({pair.record_a.id}) vs "
                f"'{name_b}' ({pair.record_b.id}), defaulting to non-duplicate: {e}"
            )
            return AIJudgment(
                is_duplicate=False,
                confidence=FAILED_JUDGMENT_CONFIDENCE,
                reasoning=f"AI analysis failed: {e}",
                failed=True,
            )
