"""Unit tests for the obvious entity match heuristic."""

import pytest

from payeecore.deduplication.entity_heuristic import EntityHeuristic
from payeecore.deduplication.keyword_cache import KeywordCache


class TestEntityHeuristic:
    """Test obvious match rules."""

    @pytest.mark.parametrize(
        "name_a,name_b",
        [
            ("Christa INC", "CHRISTA"),
            ("Apple Inc", "Apple Corporation"),
            ("john smith", "JOHN SMITH"),
            ("Acme Widgets", "The Acme Widgets Company Holdings"),
            ("Acme Widgets", "Acme Widgets Northwest"),
        ],
    )
    def test_obvious_matches(self, name_a, name_b):
        """Test same-core and contained-core names match."""
        heuristic = EntityHeuristic()

        assert heuristic.is_obvious_match(name_a, name_b)
        assert heuristic.is_obvious_match(name_b, name_a)

    @pytest.mark.parametrize(
        "name_a,name_b",
        [
            ("John Smith", "Jane Smith"),
            ("John", "John Smith"),
            ("J Smith", "J Smith Plumbing"),
            ("Apple Inc", "Microsoft Corp"),
            ("Inc", "LLC"),
            ("", "Christa"),
            (None, None),
        ],
    )
    def test_non_matches(self, name_a, name_b):
        """Test distinct, short or empty cores do not match."""
        assert not EntityHeuristic().is_obvious_match(name_a, name_b)

    def test_core_tokens_drop_generic_tokens(self):
        """Test generic tokens are removed from the core."""
        core = EntityHeuristic().core_tokens("The Smith and Jones Partners LLC")
        assert core == ["smith", "jones"]

    def test_min_subset_tokens(self):
        """Test lowering the subset size allows single-token containment."""
        heuristic = EntityHeuristic(min_subset_tokens=1)
        assert heuristic.is_obvious_match("John", "John Smith")

    def test_custom_keywords(self):
        """Test custom keywords count as generic tokens."""
        heuristic = EntityHeuristic(keyword_cache=KeywordCache(lambda: ["services"]))
        assert heuristic.is_obvious_match("Acme Services", "ACME")

    def test_accented_and_punctuated_keywords(self):
        """Test keywords are folded like names before they are treated as generic."""
        cache = KeywordCache(lambda: ["Société", "S.A."])
        heuristic = EntityHeuristic(keyword_cache=cache)

        assert heuristic.core_tokens("Acme Société S.A.") == ["acme"]
        assert heuristic.is_obvious_match("Acme Société", "ACME")
