"""Tests for the label similarity scorer."""

import pytest

from utils.similarity import digit_runs, levenshtein_distance, normalize_label, similarity_score


class TestNormalizeLabel:
    def test_strips_case_and_punctuation(self):
        assert normalize_label("  TCC_p50 (USD) ") == "tccp50usd"

    def test_none_is_empty(self):
        assert normalize_label(None) == ""


class TestLevenshtein:
    def test_classic_example(self):
        assert levenshtein_distance("kitten", "sitting") == 3

    def test_empty_side(self):
        assert levenshtein_distance("", "abc") == 3
        assert levenshtein_distance("abc", "") == 3

    def test_identical(self):
        assert levenshtein_distance("wrvu", "wrvu") == 0

    def test_single_substitution(self):
        assert levenshtein_distance("tccp50", "tccp90") == 1


def test_digit_runs():
    assert digit_runs("TCC P50") == ["50"]
    assert digit_runs("wrvu_p25 (2024)") == ["25", "2024"]
    assert digit_runs("Cardiology") == []


class TestSimilarityScore:
    def test_identical_after_normalization(self):
        assert similarity_score("tcc_p50", "TCC P50") == 1.0

    def test_percentile_suffixes_kept_apart(self):
        assert similarity_score("tcc_p50", "tcc_p90") == 0.2
        assert similarity_score("wrvu_p25", "wrvu_p75") == 0.2

    def test_different_letters_score_low(self):
        assert similarity_score("Cardiology", "Neurology") == 0.1
        assert similarity_score("tcc", "tcc_p50") == 0.1

    def test_edit_distance_when_only_digits_differ_in_presence(self):
        # "wrvup" vs "wrvup50": distance 2 over length 7
        assert similarity_score("wrvu_p", "wrvu_p50") == pytest.approx(5 / 7)

    def test_same_digits_in_different_place(self):
        assert similarity_score("a1b", "ab1") == pytest.approx(1 / 3)

    def test_matching_data_type_adds_bonus(self):
        assert similarity_score("wrvu_p", "wrvu_p50", "number", "number") == pytest.approx(5 / 7 + 0.1)

    def test_mismatched_or_missing_data_type_has_no_bonus(self):
        assert similarity_score("wrvu_p", "wrvu_p50", "number", "string") == pytest.approx(5 / 7)
        assert similarity_score("wrvu_p", "wrvu_p50", "number", None) == pytest.approx(5 / 7)

    def test_bonus_is_capped(self):
        assert similarity_score("tcc_p50", "tcc_p50", "number", "number") == 1.0

    def test_empty_against_text(self):
        assert similarity_score("", "Cardiology") == 0.1
        assert similarity_score(None, "") == 1.0
