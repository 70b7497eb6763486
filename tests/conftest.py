"""Test configuration and fixtures for payee duplicate detection tests."""

from typing import Dict, FrozenSet, List, Optional
from unittest.mock import AsyncMock

import pytest

from payeecore.deduplication.config import DuplicateDetectionConfig
from payeecore.deduplication.models import (
    AIJudgment,
    CandidatePair,
    CleanedRecord,
    ConfidenceTier,
    DuplicateRecord,
    JudgedPair,
    JudgmentMethod,
    SimilarityScoreSet,
)
from payeecore.deduplication.name_cleaning import NameCleaner
from payeecore.deduplication.similarity_scoring import SimilarityScorer


class FixedScorer(SimilarityScorer):
    """Scorer returning preset combined scores keyed by the cleaned name pair."""

    def __init__(self, default: float = 0.0, scores: Optional[Dict[FrozenSet[str], float]] = None):
        super().__init__()
        self.default = default
        self.scores = scores or {}

    def score(self, name_a: str, name_b: str) -> SimilarityScoreSet:
        combined = self.scores.get(frozenset((name_a, name_b)), self.default)
        return SimilarityScoreSet(
            jaro_winkler=combined, token_sort=combined, token_set=combined, combined=combined
        )


@pytest.fixture
def config():
    """Default detection configuration."""
    return DuplicateDetectionConfig()


@pytest.fixture
def fixed_scorer():
    """Factory for scorers with preset scores."""
    return FixedScorer


@pytest.fixture
def christa_records():
    """The three Christa variants in boundary format."""
    return [
        {"payee_id": "c1", "payee_name": "Christa INC"},
        {"payee_id": "c2", "payee_name": "CHRISTA"},
        {"payee_id": "c3", "payee_name": "Christa"},
    ]


@pytest.fixture
def make_cleaned():
    """Factory turning (id, name) tuples into cleaned records."""

    def _make(*items) -> List[CleanedRecord]:
        records = [DuplicateRecord(id=record_id, name=name) for record_id, name in items]
        return NameCleaner().clean_records(records)

    return _make


@pytest.fixture
def make_pair():
    """Factory for candidate pairs with a given score and tier."""

    def _make(
        record_a: CleanedRecord,
        record_b: CleanedRecord,
        score: float,
        tier: ConfidenceTier,
    ) -> CandidatePair:
        return CandidatePair(
            record_a=record_a,
            record_b=record_b,
            scores=SimilarityScoreSet(combined=score),
            final_score=score,
            tier=tier,
        )

    return _make


@pytest.fixture
def make_judged(make_pair):
    """Factory for judged pairs."""

    def _make(
        record_a: CleanedRecord,
        record_b: CleanedRecord,
        score: float,
        is_duplicate: bool = True,
        method: JudgmentMethod = JudgmentMethod.ALGORITHMIC_HIGH,
        ai_judgment: Optional[AIJudgment] = None,
    ) -> JudgedPair:
        tier = {
            JudgmentMethod.ALGORITHMIC_HIGH: ConfidenceTier.HIGH,
            JudgmentMethod.ALGORITHMIC_LOW: ConfidenceTier.LOW,
            JudgmentMethod.AI: ConfidenceTier.AMBIGUOUS,
        }[method]
        return JudgedPair(
            pair=make_pair(record_a, record_b, score, tier),
            is_duplicate=is_duplicate,
            method=method,
            ai_judgment=ai_judgment,
        )

    return _make


@pytest.fixture
def duplicate_judge():
    """AI judge that always answers duplicate."""
    return AsyncMock(
        return_value={
            "is_duplicate": True,
            "confidence": 88,
            "reasoning": "Same business with a different location suffix",
        }
    )
