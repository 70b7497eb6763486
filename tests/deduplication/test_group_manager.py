"""Unit tests for duplicate group consolidation."""

import pytest

from payeecore.deduplication.group_manager import GroupManager
from payeecore.deduplication.models import AIJudgment, JudgmentMethod


@pytest.fixture
def records(make_cleaned):
    return make_cleaned(
        ("a", "Acme Inc"),
        ("b", "ACME"),
        ("c", "Acme Corp"),
        ("d", "Beta LLC"),
        ("e", "Beta"),
    )


def payees(cleaned):
    return [record.record for record in cleaned]


class TestEnrichment:
    """Test per-record duplicate metadata."""

    def test_one_output_per_input(self, records, make_judged):
        """Test output is 1:1 with input and keeps input order."""
        result = GroupManager().build_groups(
            payees(records), [make_judged(records[0], records[1], 95.0)]
        )

        assert [r.id for r in result.enriched] == ["a", "b", "c", "d", "e"]

    def test_unique_records(self, records):
        """Test records without duplicate pairs are unique."""
        result = GroupManager().build_groups(payees(records), [])

        unique = result.enriched[3]
        assert not unique.is_potential_duplicate
        assert unique.group_id == "unique_d"
        assert unique.final_score == 0
        assert unique.method == JudgmentMethod.ALGORITHMIC_LOW
        assert unique.duplicate_of_id is None
        assert result.groups == []

    def test_non_duplicate_pairs_do_not_group(self, records, make_judged):
        """Test pairs judged non-duplicate leave both records unique."""
        judged = make_judged(
            records[3], records[4], 70.0, is_duplicate=False, method=JudgmentMethod.AI
        )

        result = GroupManager().build_groups(payees(records), [judged])

        assert result.enriched[3].group_id == "unique_d"
        assert result.enriched[4].group_id == "unique_e"
        assert result.groups == []

    def test_canonical_and_duplicate(self, records, make_judged):
        """Test the earliest record is canonical and the other points to it."""
        result = GroupManager().build_groups(
            payees(records), [make_judged(records[0], records[1], 95.0)]
        )
        canonical, duplicate = result.enriched[0], result.enriched[1]

        assert not canonical.is_potential_duplicate
        assert canonical.group_id == "a"
        assert canonical.final_score == 0
        assert canonical.method == JudgmentMethod.ALGORITHMIC_LOW
        assert canonical.ai_is_duplicate is None
        assert canonical.duplicate_of_id is None

        assert duplicate.is_potential_duplicate
        assert duplicate.group_id == "a"
        assert duplicate.duplicate_of_id == "a"
        assert duplicate.duplicate_of_name == "Acme Inc"
        assert duplicate.final_score == 95.0

    def test_ai_metadata_carried(self, records, make_judged):
        """Test AI verdict and reasoning are attached to the duplicate only."""
        judgment = AIJudgment(is_duplicate=True, confidence=82, reasoning="Same supplier")
        judged = make_judged(
            records[3], records[4], 72.0, method=JudgmentMethod.AI, ai_judgment=judgment
        )

        result = GroupManager().build_groups(payees(records), [judged])

        duplicate = result.enriched[4]
        assert duplicate.method == JudgmentMethod.AI
        assert duplicate.ai_is_duplicate is True
        assert duplicate.ai_reasoning == "Same supplier"
        assert duplicate.duplicate_of_id == "d"
        assert result.enriched[3].method == JudgmentMethod.ALGORITHMIC_LOW
        assert result.enriched[3].ai_reasoning is None


class TestGrouping:
    """Test group construction."""

    def test_inconsistent_pairs_merge_into_one_group(self, records, make_judged):
        """Test a record linked to two unlinked records joins them in one group."""
        judged = [
            make_judged(records[0], records[2], 90.0),
            make_judged(records[1], records[2], 88.0),
        ]

        result = GroupManager().build_groups(payees(records), judged)

        assert len(result.groups) == 1
        group = result.groups[0]
        assert group.canonical_id == "a"
        assert [m.id for m in group.members] == ["a", "b", "c"]

        # b never paired with a directly, so its evidence is its own best pair
        assert result.enriched[1].duplicate_of_id == "a"
        assert result.enriched[1].final_score == 88.0
        assert result.enriched[2].final_score == 90.0

    def test_group_average_score(self, records, make_judged):
        """Test a group's score is the mean of its members' scores."""
        judged = [
            make_judged(records[0], records[1], 90.0),
            make_judged(records[0], records[2], 100.0),
        ]

        group = GroupManager().build_groups(payees(records), judged).groups[0]

        # canonical counts as 0, duplicates 90 and 100
        assert group.average_score == pytest.approx(190.0 / 3)

    def test_groups_sorted_by_score(self, records, make_judged):
        """Test higher scoring groups come first."""
        judged = [
            make_judged(records[0], records[1], 86.0),
            make_judged(records[3], records[4], 99.0),
        ]

        groups = GroupManager().build_groups(payees(records), judged).groups

        assert [g.group_id for g in groups] == ["d", "a"]

    def test_groups_with_equal_scores_keep_batch_order(self, records, make_judged):
        """Test ties keep the canonical batch order."""
        judged = [
            make_judged(records[3], records[4], 95.0),
            make_judged(records[0], records[1], 95.0),
        ]

        groups = GroupManager().build_groups(payees(records), judged).groups

        assert [g.group_id for g in groups] == ["a", "d"]

    def test_group_to_dict(self, records, make_judged):
        """Test the group wire format."""
        group = GroupManager().build_groups(
            payees(records), [make_judged(records[0], records[1], 95.0)]
        ).groups[0]

        data = group.to_dict()

        assert data["group_id"] == "a"
        assert data["canonical_payee_id"] == "a"
        assert data["canonical_payee_name"] == "Acme Inc"
        assert data["total_score"] == 47.5
        assert [m["payee_id"] for m in data["members"]] == ["a", "b"]
