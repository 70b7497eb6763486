"""
Duplicate Group Management

Consolidates pairwise verdicts into duplicate groups and one enriched
output record per input record.

Pairwise judgments need not be consistent: C may be judged a duplicate of
both A and B while A and B were never linked. Duplicate links are therefore
merged with union-find over record positions, every connected component
becomes one group, and the earliest record in the batch is its canonical.
No link ever overwrites another.

Only duplicates carry a score, method and AI verdict. A canonical record
is annotated like a unique one (score 0, Algorithmic-Low) except that its
group id is its own id, so a group's average score counts it as zero.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .models import (
    DuplicateAnnotation,
    DuplicateGroup,
    DuplicateRecord,
    EnrichedRecord,
    JudgedPair,
    JudgmentMethod,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupingResult:
    """Enriched records (input order) and groups of two or more members."""

    enriched: List[EnrichedRecord]
    groups: List[DuplicateGroup]


class _DisjointSet:
    """Union-find whose root is always the smallest index in the set."""

    def __init__(self, size: int):
        self.parent = list(range(size))

    def find(self, index: int) -> int:
        root = index
        while self.parent[root] != root:
            root = self.parent[root]
        while self.parent[index] != root:
            self.parent[index], index = root, self.parent[index]
        return root

    def union(self, a: int, b: int) -> None:
        root_a, root_b = self.find(a), self.find(b)
        if root_a == root_b:
            return
        if root_a < root_b:
            self.parent[root_b] = root_a
        else:
            self.parent[root_a] = root_b


class GroupManager:
    """Builds enriched records and duplicate groups from judged pairs."""

    def build_groups(
        self, records: Sequence[DuplicateRecord], judged_pairs: Sequence[JudgedPair]
    ) -> GroupingResult:
        """
        Consolidate judged pairs into groups.

        Args:
            records: Input records in batch order
            judged_pairs: Every judged candidate pair of the run

        Returns:
            GroupingResult with exactly one enriched record per input record
        """
        duplicate_pairs = [p for p in judged_pairs if p.is_duplicate]
        logger.debug(f"Building groups from {len(duplicate_pairs)} duplicate pairs")

        components = _DisjointSet(len(records))
        links: Dict[int, List[JudgedPair]] = {}
        for judged in duplicate_pairs:
            a, b = judged.record_a.index, judged.record_b.index
            components.union(a, b)
            links.setdefault(a, []).append(judged)
            links.setdefault(b, []).append(judged)

        enriched = [
            self._enrich(index, record, records, components, links)
            for index, record in enumerate(records)
        ]

        groups = self._create_groups(enriched, components)
        return GroupingResult(enriched=enriched, groups=groups)

    def _enrich(
        self,
        index: int,
        record: DuplicateRecord,
        records: Sequence[DuplicateRecord],
        components: _DisjointSet,
        links: Dict[int, List[JudgedPair]],
    ) -> EnrichedRecord:
        record_links = links.get(index)
        root = components.find(index)

        # Canonical and unique records carry no duplicate evidence of their own
        if not record_links or index == root:
            return EnrichedRecord(
                record=record,
                annotation=DuplicateAnnotation(
                    is_potential_duplicate=False,
                    group_id=record.id if record_links else f"unique_{record.id}",
                    method=JudgmentMethod.ALGORITHMIC_LOW,
                ),
            )

        canonical = records[root]
        evidence = self._select_evidence(index, root, record_links)
        ai = evidence.ai_judgment

        return EnrichedRecord(
            record=record,
            annotation=DuplicateAnnotation(
                is_potential_duplicate=True,
                group_id=canonical.id,
                final_score=evidence.final_score,
                method=evidence.method,
                duplicate_of_id=canonical.id,
                duplicate_of_name=canonical.name,
                ai_is_duplicate=ai.is_duplicate if ai else None,
                ai_reasoning=ai.reasoning if ai else None,
            ),
        )

    def _select_evidence(
        self, index: int, root: int, record_links: List[JudgedPair]
    ) -> JudgedPair:
        """Pick the pair that explains a duplicate's membership in its group."""
        for judged in record_links:
            if {judged.record_a.index, judged.record_b.index} == {index, root}:
                return judged

        best: Optional[JudgedPair] = None
        for judged in record_links:
            if best is None or judged.final_score > best.final_score:
                best = judged
        return best

    def _create_groups(
        self, enriched: List[EnrichedRecord], components: _DisjointSet
    ) -> List[DuplicateGroup]:
        members_by_root: Dict[int, List[EnrichedRecord]] = {}
        for index, record in enumerate(enriched):
            members_by_root.setdefault(components.find(index), []).append(record)

        groups: List[DuplicateGroup] = []
        for root, members in members_by_root.items():
            if len(members) < 2:
                continue
            canonical = enriched[root]
            groups.append(
                DuplicateGroup(
                    group_id=canonical.group_id,
                    canonical_id=canonical.id,
                    canonical_name=canonical.name,
                    members=members,
                    average_score=sum(m.final_score for m in members) / len(members),
                )
            )

        # Stable sort keeps canonical batch order on equal scores
        return sorted(groups, key=lambda group: group.average_score, reverse=True)
