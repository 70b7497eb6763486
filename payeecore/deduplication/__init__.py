"""
Payee Duplicate Detection

Three-tier duplicate detection for payee names: fuzzy similarity scoring
decides clear matches and clear non-matches, ambiguous pairs are escalated
to an AI judge, and pairwise verdicts are consolidated into groups with a
canonical record and audit metadata.

Components:
- Core Engine: Orchestrates the detection pipeline
- Name Cleaning: Normalization and corporate suffix removal
- Similarity Scoring: Weighted Jaro-Winkler and token ratios
- Entity Heuristic: Rule-based obvious match detection
- Pair Analysis: Candidate pair generation and tiering
- AI Judge: LLM judgment for ambiguous pairs
- Tiered Processing: The confidence funnel with fail-soft AI calls
- Group Manager: Union-find consolidation into duplicate groups
- Statistics: Run summaries

Usage:
    from payeecore.deduplication import DuplicateDetectionEngine, LLMDuplicateJudge

    engine = DuplicateDetectionEngine(ai_judge=LLMDuplicateJudge())
    result = await engine.detect_duplicates(records)
"""

from .core_engine import DuplicateDetectionEngine, detect_duplicates, run_detection
from .config import AlgorithmWeights, DuplicateDetectionConfig, build_config, load_config
from .models import (
    AIJudgment,
    CandidatePair,
    CleanedRecord,
    ConfidenceTier,
    DetectionStatistics,
    DuplicateAnnotation,
    DuplicateDetectionResult,
    DuplicateGroup,
    DuplicateRecord,
    EnrichedRecord,
    JudgedPair,
    JudgmentMethod,
    SimilarityScoreSet,
)
from .name_cleaning import NameCleaner
from .keyword_cache import KeywordCache
from .similarity_scoring import SimilarityScorer
from .entity_heuristic import EntityHeuristic
from .pair_analysis import PairAnalyzer, classify_tier
from .ai_judge import AIJudge, JudgmentCache, LLMDuplicateJudge
from .tiered_processing import TieredProcessor
from .group_manager import GroupManager, GroupingResult
from .statistics import StatisticsGenerator
from .validation import DUPLICATE_VALIDATION_CASES, ValidationCase, ValidationReport, run_validation_cases

__all__ = [
    # Core engine
    "DuplicateDetectionEngine",
    "detect_duplicates",
    "run_detection",
    # Configuration
    "AlgorithmWeights",
    "DuplicateDetectionConfig",
    "build_config",
    "load_config",
    # Data model
    "AIJudgment",
    "CandidatePair",
    "CleanedRecord",
    "ConfidenceTier",
    "DetectionStatistics",
    "DuplicateAnnotation",
    "DuplicateDetectionResult",
    "DuplicateGroup",
    "DuplicateRecord",
    "EnrichedRecord",
    "JudgedPair",
    "JudgmentMethod",
    "SimilarityScoreSet",
    # Pipeline stages
    "NameCleaner",
    "KeywordCache",
    "SimilarityScorer",
    "EntityHeuristic",
    "PairAnalyzer",
    "classify_tier",
    "TieredProcessor",
    "GroupManager",
    "GroupingResult",
    "StatisticsGenerator",
    # AI judgment
    "AIJudge",
    "JudgmentCache",
    "LLMDuplicateJudge",
    # Validation
    "DUPLICATE_VALIDATION_CASES",
    "ValidationCase",
    "ValidationReport",
    "run_validation_cases",
]
