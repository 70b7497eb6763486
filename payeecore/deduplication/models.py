"""
Duplicate Detection Data Model

Value types flowing through one detection run: input records, cleaned
records, candidate and judged pairs, enriched output records, groups and
statistics. Nothing here is mutated after construction.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ValidationError, field_validator

from ..errors import AIJudgmentError, InputError


class ConfidenceTier(str, Enum):
    """Confidence bucket of a candidate pair."""

    HIGH = "High"
    LOW = "Low"
    AMBIGUOUS = "Ambiguous"


class JudgmentMethod(str, Enum):
    """How the verdict for a pair was reached."""

    ALGORITHMIC_HIGH = "Algorithmic-High"
    ALGORITHMIC_LOW = "Algorithmic-Low"
    AI = "AI"


@dataclass(frozen=True)
class DuplicateRecord:
    """A payee record as supplied by the caller."""

    id: str
    name: str

    @classmethod
    def coerce(cls, raw: Any) -> "DuplicateRecord":
        """
        Build a record from a DuplicateRecord or a mapping.

        Accepts the boundary format ``{"payee_id", "payee_name"}`` as well as
        ``{"id", "name"}``. A missing or non-string name becomes a string
        (empty for None) so one bad row never aborts a batch.
        """
        if isinstance(raw, DuplicateRecord):
            return raw
        if not isinstance(raw, Mapping):
            raise InputError(f"Unsupported record type: {type(raw).__name__}", record=raw)

        record_id = raw.get("payee_id", raw.get("id"))
        if record_id is None or record_id == "":
            raise InputError("Record is missing an id", record=raw)

        name = raw.get("payee_name", raw.get("name"))
        if name is None:
            name = ""
        elif not isinstance(name, str):
            name = str(name)

        return cls(id=str(record_id), name=name)


@dataclass(frozen=True)
class CleanedRecord:
    """A record with its normalized comparison name and batch position."""

    record: DuplicateRecord
    index: int
    cleaned_name: str

    @property
    def id(self) -> str:
        return self.record.id

    @property
    def name(self) -> str:
        return self.record.name


@dataclass(frozen=True)
class SimilarityScoreSet:
    """Sub-metric scores and their weighted combination, each in [0, 100]."""

    jaro_winkler: float = 0.0
    token_sort: float = 0.0
    token_set: float = 0.0
    combined: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "jaro_winkler": self.jaro_winkler,
            "token_sort": self.token_sort,
            "token_set": self.token_set,
            "combined": self.combined,
        }


@dataclass(frozen=True)
class CandidatePair:
    """An unordered pair of records (record_a precedes record_b in the batch)."""

    record_a: CleanedRecord
    record_b: CleanedRecord
    scores: SimilarityScoreSet
    final_score: float
    tier: ConfidenceTier
    obvious_match: bool = False


class AIJudgment(BaseModel):
    """Verdict returned by an AI judge for one name pair."""

    is_duplicate: bool
    confidence: float
    reasoning: str
    failed: bool = False

    @field_validator("confidence")
    @classmethod
    def clamp_confidence(cls, v: float) -> float:
        return max(0.0, min(100.0, v))

    @classmethod
    def from_response(
        cls, response: Any, name_a: Optional[str] = None, name_b: Optional[str] = None
    ) -> "AIJudgment":
        """Validate whatever a judge returned into an AIJudgment."""
        if isinstance(response, AIJudgment):
            return response
        if not isinstance(response, Mapping):
            raise AIJudgmentError(
                f"AI judge returned {type(response).__name__}, expected a mapping",
                name_a=name_a,
                name_b=name_b,
            )
        try:
            return cls.model_validate(
                {
                    "is_duplicate": response.get("is_duplicate"),
                    "confidence": response.get("confidence"),
                    "reasoning": response.get("reasoning"),
                },
                strict=True,
            )
        except ValidationError as e:
            raise AIJudgmentError(
                f"Invalid response format from AI judge: {e.error_count()} field error(s)",
                name_a=name_a,
                name_b=name_b,
                cause=e,
            ) from e

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_duplicate": self.is_duplicate,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
        }


@dataclass(frozen=True)
class JudgedPair:
    """A candidate pair with its terminal verdict."""

    pair: CandidatePair
    is_duplicate: bool
    method: JudgmentMethod
    ai_judgment: Optional[AIJudgment] = None

    @property
    def record_a(self) -> CleanedRecord:
        return self.pair.record_a

    @property
    def record_b(self) -> CleanedRecord:
        return self.pair.record_b

    @property
    def final_score(self) -> float:
        return self.pair.final_score

    @property
    def tier(self) -> ConfidenceTier:
        return self.pair.tier


@dataclass(frozen=True)
class DuplicateAnnotation:
    """Typed duplicate metadata attached to a payee."""

    is_potential_duplicate: bool
    group_id: str
    final_score: float = 0.0
    method: JudgmentMethod = JudgmentMethod.ALGORITHMIC_LOW
    duplicate_of_id: Optional[str] = None
    duplicate_of_name: Optional[str] = None
    ai_is_duplicate: Optional[bool] = None
    ai_reasoning: Optional[str] = None


@dataclass(frozen=True)
class EnrichedRecord:
    """One output record per input record."""

    record: DuplicateRecord
    annotation: DuplicateAnnotation

    @property
    def id(self) -> str:
        return self.record.id

    @property
    def name(self) -> str:
        return self.record.name

    @property
    def is_potential_duplicate(self) -> bool:
        return self.annotation.is_potential_duplicate

    @property
    def duplicate_of_id(self) -> Optional[str]:
        return self.annotation.duplicate_of_id

    @property
    def duplicate_of_name(self) -> Optional[str]:
        return self.annotation.duplicate_of_name

    @property
    def final_score(self) -> float:
        return self.annotation.final_score

    @property
    def method(self) -> JudgmentMethod:
        return self.annotation.method

    @property
    def ai_is_duplicate(self) -> Optional[bool]:
        return self.annotation.ai_is_duplicate

    @property
    def ai_reasoning(self) -> Optional[str]:
        return self.annotation.ai_reasoning

    @property
    def group_id(self) -> str:
        return self.annotation.group_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "payee_id": self.id,
            "payee_name": self.name,
            "is_potential_duplicate": self.is_potential_duplicate,
            "duplicate_of_payee_id": self.duplicate_of_id,
            "duplicate_of_payee_name": self.duplicate_of_name,
            "final_duplicate_score": self.final_score,
            "judgement_method": self.method.value,
            "ai_judgement_is_duplicate": self.ai_is_duplicate,
            "ai_judgement_reasoning": self.ai_reasoning,
            "duplicate_group_id": self.group_id,
        }


@dataclass(frozen=True)
class DuplicateGroup:
    """A canonical record together with the records judged its duplicates."""

    group_id: str
    canonical_id: str
    canonical_name: str
    members: List[EnrichedRecord]
    average_score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "group_id": self.group_id,
            "canonical_payee_id": self.canonical_id,
            "canonical_payee_name": self.canonical_name,
            "members": [member.to_dict() for member in self.members],
            "total_score": self.average_score,
        }


@dataclass(frozen=True)
class DetectionStatistics:
    """Aggregate counts for one detection run."""

    total_processed: int = 0
    duplicates_found: int = 0
    high_confidence_matches: int = 0
    low_confidence_matches: int = 0
    ai_judgments_made: int = 0
    ai_failures: int = 0
    duplicate_groups: int = 0
    candidate_pairs: int = 0
    method_breakdown: Dict[str, int] = field(default_factory=dict)
    processing_time_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_processed": self.total_processed,
            "duplicates_found": self.duplicates_found,
            "high_confidence_matches": self.high_confidence_matches,
            "low_confidence_matches": self.low_confidence_matches,
            "ai_judgments_made": self.ai_judgments_made,
            "ai_failures": self.ai_failures,
            "duplicate_groups": self.duplicate_groups,
            "candidate_pairs": self.candidate_pairs,
            "method_breakdown": dict(self.method_breakdown),
            "processing_time_ms": self.processing_time_ms,
        }


@dataclass(frozen=True)
class DuplicateDetectionResult:
    """Full result of one detection run."""

    processed_records: List[EnrichedRecord]
    duplicate_groups: List[DuplicateGroup]
    statistics: DetectionStatistics

    def annotations_by_id(self) -> Dict[str, DuplicateAnnotation]:
        """Duplicate metadata keyed by payee id, for decorating other records."""
        return {record.id: record.annotation for record in self.processed_records}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "processed_records": [record.to_dict() for record in self.processed_records],
            "duplicate_groups": [group.to_dict() for group in self.duplicate_groups],
            "statistics": self.statistics.to_dict(),
        }
