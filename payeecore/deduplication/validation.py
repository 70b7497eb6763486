"""
Built-in Validation Cases

Known payee batches with the duplicate groups they must produce. Used as a
quick sanity check of thresholds and weights before running a real batch.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ..logging_config import log_error
from .core_engine import DuplicateDetectionEngine
from .models import DuplicateDetectionResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationCase:
    """A batch of records and the groups of ids expected from it."""

    description: str
    records: List[Dict[str, str]]
    expected_groups: List[List[str]]


@dataclass
class ValidationOutcome:
    """Result of running one validation case."""

    case: ValidationCase
    actual_groups: List[List[str]]
    passed: bool
    details: str


@dataclass
class ValidationReport:
    """Summary of a validation run."""

    outcomes: List[ValidationOutcome] = field(default_factory=list)

    @property
    def passed(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.passed)

    @property
    def failed(self) -> int:
        return len(self.outcomes) - self.passed

    @property
    def success(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passed": self.passed,
            "failed": self.failed,
            "results": [
                {
                    "description": outcome.case.description,
                    "expected_groups": normalize_groups(outcome.case.expected_groups),
                    "actual_groups": outcome.actual_groups,
                    "passed": outcome.passed,
                    "details": outcome.details,
                }
                for outcome in self.outcomes
            ],
        }


DUPLICATE_VALIDATION_CASES: List[ValidationCase] = [
    ValidationCase(
        description="Christa variants should all be detected as duplicates",
        records=[
            {"payee_id": "1", "payee_name": "Christa INC"},
            {"payee_id": "2", "payee_name": "CHRISTA"},
            {"payee_id": "3", "payee_name": "Christa"},
        ],
        expected_groups=[["1", "2", "3"]],
    ),
    ValidationCase(
        description="Apple with different business suffixes should be duplicates, Microsoft should be separate",
        records=[
            {"payee_id": "4", "payee_name": "Apple Inc"},
            {"payee_id": "5", "payee_name": "Apple Corporation"},
            {"payee_id": "6", "payee_name": "Apple LLC"},
            {"payee_id": "7", "payee_name": "Microsoft Corp"},
        ],
        expected_groups=[["4", "5", "6"]],
    ),
    ValidationCase(
        description="John Smith case variations should be duplicates, Jane Smith should be separate",
        records=[
            {"payee_id": "8", "payee_name": "john smith"},
            {"payee_id": "9", "payee_name": "John Smith"},
            {"payee_id": "10", "payee_name": "JOHN SMITH"},
            {"payee_id": "11", "payee_name": "Jane Smith"},
        ],
        expected_groups=[["8", "9", "10"]],
    ),
    ValidationCase(
        description="Completely different companies should not be duplicates",
        records=[
            {"payee_id": "12", "payee_name": "Apple Inc"},
            {"payee_id": "13", "payee_name": "Microsoft Corp"},
            {"payee_id": "14", "payee_name": "Google LLC"},
        ],
        expected_groups=[],
    ),
]


def normalize_groups(groups: Sequence[Sequence[str]]) -> List[List[str]]:
    """Sort ids within each group, then groups by their first id."""
    return sorted((sorted(group) for group in groups if group), key=lambda group: group[0])


def actual_groups(result: DuplicateDetectionResult) -> List[List[str]]:
    """Member id lists of every multi-member group in a result."""
    return normalize_groups(
        [member.id for member in group.members]
        for group in result.duplicate_groups
        if len(group.members) > 1
    )


async def run_validation_cases(
    engine: Optional[DuplicateDetectionEngine] = None,
    cases: Optional[Sequence[ValidationCase]] = None,
) -> ValidationReport:
    """
    Run validation cases against an engine.

    Args:
        engine: Engine to validate (defaults to one with AI judgment disabled)
        cases: Cases to run (defaults to DUPLICATE_VALIDATION_CASES)

    Returns:
        ValidationReport; an engine error fails its case instead of raising
    """
    engine = engine or DuplicateDetectionEngine(config={"enable_ai_judgment": False})
    cases = DUPLICATE_VALIDATION_CASES if cases is None else cases
    report = ValidationReport()

    logger.info(f"🧪 Running {len(cases)} duplicate detection validation cases")

    for case in cases:
        expected = normalize_groups(case.expected_groups)
        try:
            result = await engine.detect_duplicates(case.records)
        except Exception as e:
            log_error(__name__, "validation_case_errored", e, description=case.description)
            report.outcomes.append(
                ValidationOutcome(
                    case=case,
                    actual_groups=[],
                    passed=False,
                    details=f"ERROR: {case.description}: {e}",
                )
            )
            continue

        groups = actual_groups(result)
        passed = groups == expected
        details = (
            f"PASS: {case.description}"
            if passed
            else f"FAIL: {case.description} (expected {expected}, got {groups})"
        )
        logger.info(f"   {'✅' if passed else '❌'} {details}")
        report.outcomes.append(
            ValidationOutcome(case=case, actual_groups=groups, passed=passed, details=details)
        )

    logger.info(f"🧪 Validation complete: {report.passed} passed, {report.failed} failed")
    return report
