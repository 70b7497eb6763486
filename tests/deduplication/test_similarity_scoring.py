"""Unit tests for similarity scoring."""

import pytest

from payeecore.deduplication.config import AlgorithmWeights
from payeecore.deduplication.models import SimilarityScoreSet
from payeecore.deduplication.similarity_scoring import SimilarityScorer


class TestSimilarityScorer:
    """Test weighted similarity scoring."""

    def test_identical_names_score_100(self):
        """Test identical names get a perfect score."""
        scores = SimilarityScorer().score("christa", "christa")

        assert scores.combined == pytest.approx(100.0)
        assert scores.jaro_winkler == pytest.approx(100.0)
        assert scores.token_sort == 100
        assert scores.token_set == 100

    def test_symmetry(self):
        """Test argument order does not change any score."""
        scorer = SimilarityScorer()

        for a, b in [("jane smith", "john smith"), ("acme", "acme widgets"), ("abc", "xyz")]:
            assert scorer.score(a, b) == scorer.score(b, a)

    def test_deterministic(self):
        """Test repeated scoring is stable."""
        scorer = SimilarityScorer()
        assert scorer.score("acme plumbing", "acme heating") == scorer.score(
            "acme plumbing", "acme heating"
        )

    @pytest.mark.parametrize("a,b", [("", "christa"), ("christa", ""), ("", "")])
    def test_empty_name_scores_zero(self, a, b):
        """Test any pair with an empty name scores zero."""
        assert SimilarityScorer().score(a, b) == SimilarityScoreSet()

    def test_scores_in_range(self):
        """Test every metric stays within 0-100."""
        scorer = SimilarityScorer()

        for a, b in [("a", "b"), ("apple", "microsoft"), ("john smith", "smith john")]:
            scores = scorer.score(a, b)
            for value in scores.to_dict().values():
                assert 0.0 <= value <= 100.0

    def test_word_order_ignored_by_token_sort(self):
        """Test token sort ratio ignores word order."""
        scores = SimilarityScorer().score("smith john", "john smith")
        assert scores.token_sort == 100

    def test_similar_names_outscore_distinct_names(self):
        """Test a near match ranks above unrelated names."""
        scorer = SimilarityScorer()

        near = scorer.score("jane smith", "john smith").combined
        far = scorer.score("apple", "microsoft").combined

        assert near > far

    def test_custom_weights(self):
        """Test weights select which metrics drive the combined score."""
        scorer = SimilarityScorer(AlgorithmWeights(jaro_winkler=1.0, token_sort=0.0, token_set=0.0))

        scores = scorer.score("jane smith", "john smith")

        assert scores.combined == pytest.approx(scores.jaro_winkler)
