"""
Tests for title similarity used to rank provider candidates.

Covers:
- Normalisation (case, apostrophes, punctuation)
- Exact matches, prefix completions, edit-distance fallback
- Score bounds and prefix asymmetry
"""

import pytest

from mediastack.services.matcher import is_prefix_completion, normalize_title, similarity


class TestNormalizeTitle:
    """Tests for normalize_title."""

    def test_lowercases_and_trims(self):
        assert normalize_title("  The MATRIX ") == "the matrix"

    def test_removes_straight_and_curly_apostrophes(self):
        """Apostrophes are dropped, not replaced by a space."""
        assert normalize_title("Schindler's List") == "schindlers list"
        assert normalize_title("Schindler’s List") == "schindlers list"

    def test_collapses_punctuation_runs(self):
        assert normalize_title("Spider-Man: No Way Home!!") == "spider man no way home"

    def test_empty_and_none(self):
        assert normalize_title("") == ""
        assert normalize_title("  --  ") == ""


class TestSimilarity:
    """Tests for similarity scoring."""

    def test_exact_match_after_normalisation(self):
        """Normalised-equal titles score exactly 1.0."""
        assert similarity("schindlers list", "Schindler's List") == 1.0

    def test_empty_query_scores_zero(self):
        assert similarity("", "Inception") == 0.0
        assert similarity("Inception", "") == 0.0

    def test_prefix_completion_score_range(self):
        """A candidate extending the query scores in [0.85, 1.0)."""
        score = similarity("The Lord", "The Lord of the Rings")
        assert 0.85 <= score < 1.0
        assert score == pytest.approx(0.85 + 0.15 * len("the lord") / len("the lord of the rings"))

    def test_longer_prefix_scores_higher(self):
        title = "Breaking Bad"
        assert similarity("Break", title) > similarity("Br", title)

    def test_prefix_is_asymmetric(self):
        """Query longer than the candidate uses edit distance, not the prefix branch."""
        forward = similarity("Alien", "Aliens")
        backward = similarity("Aliens", "Alien")
        assert forward >= 0.85
        assert backward == pytest.approx(1 - 1 / 6)
        assert forward > backward

    def test_edit_distance_fallback(self):
        """One substitution in a 6-letter title."""
        assert similarity("Matrox", "Matrix") == pytest.approx(1 - 1 / 6)

    def test_unrelated_titles_score_low(self):
        assert similarity("Inception", "Zootopia") < 0.5

    @pytest.mark.parametrize(
        "query,title",
        [("a", "b"), ("Dune", "Dune"), ("Dun", "Dune: Part Two"), ("xyz", "Inception")],
    )
    def test_score_within_bounds(self, query, title):
        assert 0.0 <= similarity(query, title) <= 1.0

    def test_deterministic(self):
        assert similarity("Interstelar", "Interstellar") == similarity("Interstelar", "Interstellar")


class TestIsPrefixCompletion:
    """Tests for is_prefix_completion."""

    def test_true_for_prefix(self):
        assert is_prefix_completion("the lord", "The Lord of the Rings")

    def test_false_for_non_prefix(self):
        assert not is_prefix_completion("lord", "The Lord of the Rings")

    def test_false_for_empty_query(self):
        assert not is_prefix_completion("  ", "Anything")
