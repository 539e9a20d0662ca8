"""Tests for the trigram name matcher.

Similarity values are approximate by nature; these tests only pin the best
match and simple bounds.
"""

from server_room.matcher import NameMatcher, similarity, trigrams


class TestTrigrams:
    def test_padded_trigrams(self):
        grams = trigrams("ab")
        assert set(grams) == {"  a", " ab", "ab "}

    def test_case_insensitive(self):
        assert trigrams("API") == trigrams("api")

    def test_identical_strings_score_one(self):
        assert similarity(trigrams("frontend"), trigrams("frontend")) == 1.0

    def test_disjoint_strings_score_zero(self):
        assert similarity(trigrams("abc"), trigrams("xyz")) == 0.0

    def test_score_is_bounded(self):
        score = similarity(trigrams("fronted"), trigrams("frontend"))
        assert 0.0 < score < 1.0


class TestNameMatcher:
    def test_empty_index_has_no_match(self):
        assert NameMatcher().closest("anything") is None

    def test_prefix_matches(self):
        matcher = NameMatcher(["foo", "bar"])
        assert matcher.closest("fo") == "foo"

    def test_typo_matches(self):
        matcher = NameMatcher(["api", "frontend", "docs"])
        assert matcher.closest("fronted") == "frontend"

    def test_single_name_is_always_suggested(self):
        matcher = NameMatcher(["api"])
        assert matcher.closest("zzz") == "api"

    def test_threshold_filters(self):
        matcher = NameMatcher(["api"])
        assert matcher.closest("zzz", threshold=0.5) is None

    def test_search_orders_best_first(self):
        matcher = NameMatcher(["remove", "run", "edit"])
        results = matcher.search("runn")
        assert results[0][0] == "run"
        scores = [score for _, score in results]
        assert scores == sorted(scores, reverse=True)

    def test_len(self):
        matcher = NameMatcher(["a", "b"])
        matcher.add("c")
        assert len(matcher) == 3
