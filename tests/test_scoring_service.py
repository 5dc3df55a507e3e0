"""Tests for codetype.services.scoring_service."""

import pytest

from codetype.services.scoring_service import (
    calculate_accuracy,
    calculate_wpm,
    compute_score,
    count_errors,
    display_wpm,
    progress_percent,
)


class TestCountErrors:
    def test_all_correct(self):
        assert count_errors("abc", "abc") == 0

    def test_substitution(self):
        assert count_errors("abXde", "abcde") == 1

    def test_overflow_counts_as_errors(self):
        assert count_errors("abcde", "abc") == 2

    def test_empty_reference_everything_is_extra(self):
        assert count_errors("hello", "") == 5

    def test_empty_typed(self):
        assert count_errors("", "abc") == 0

    def test_appending_match_does_not_increase_errors(self):
        reference = "def f(x):"
        typed = "dXf"
        before = count_errors(typed, reference)
        assert count_errors(typed + reference[len(typed)], reference) == before

    def test_appending_mismatch_increases_by_one(self):
        reference = "def f(x):"
        typed = "dXf"
        before = count_errors(typed, reference)
        assert count_errors(typed + "#", reference) == before + 1

    def test_appending_beyond_reference_increases_by_one(self):
        assert count_errors("abc" + "d", "abc") == count_errors("abc", "abc") + 1

    def test_newlines_and_whitespace_compared_verbatim(self):
        reference = "if x:\n    return 1"
        assert count_errors("if x:\n\treturn 1", reference) > 0
        assert count_errors(reference, reference) == 0


class TestAccuracy:
    def test_empty_input_is_100(self):
        assert calculate_accuracy(0, 0) == 100.0

    def test_formula(self):
        assert calculate_accuracy(5, 1) == 80.0

    @pytest.mark.parametrize(
        "typed, reference",
        [
            ("", ""),
            ("abc", ""),
            ("xxx", "abc"),
            ("abc", "abc"),
            ("abcdefgh", "ab"),
            ("a b\n", "a  b"),
        ],
    )
    def test_bounds(self, typed, reference):
        snap = compute_score(typed, reference, 1000)
        assert 0.0 <= snap.accuracy_percent <= 100.0


class TestWpm:
    def test_zero_elapsed_is_zero(self):
        assert calculate_wpm(100, 0) == 0.0

    def test_one_minute(self):
        assert calculate_wpm(50, 60_000) == 10.0

    def test_reflects_elapsed_time_not_just_keystrokes(self):
        assert calculate_wpm(50, 120_000) == pytest.approx(5.0)


class TestComputeScore:
    def test_zero_division_safety(self):
        snap = compute_score("", "abc", 0)
        assert snap.wpm == 0
        assert snap.accuracy_percent == 100
        assert snap.error_count == 0

    def test_full_mismatch(self):
        snap = compute_score("xxx", "abc", 60_000)
        assert snap.error_count == 3
        assert snap.accuracy_percent == 0

    def test_wpm_formula(self):
        snap = compute_score("a" * 50, "b" * 100, 60_000)
        assert snap.wpm == 10

    def test_exact_snippet(self):
        snap = compute_score("print(1)", "print(1)", 6000)
        assert snap.error_count == 0
        assert snap.accuracy_percent == 100
        assert snap.wpm == pytest.approx(16)

    def test_single_substitution(self):
        snap = compute_score("abXde", "abcde", 5000)
        assert snap.error_count == 1
        assert snap.accuracy_percent == 80

    def test_empty_reference(self):
        snap = compute_score("abcd", "", 1000)
        assert snap.error_count == 4
        assert snap.accuracy_percent == 0

    def test_overflow_uses_error_based_accuracy(self):
        # 3 correct + 1 extra
        snap = compute_score("abcd", "abc", 1000)
        assert snap.error_count == 1
        assert snap.accuracy_percent == 75

    def test_pure(self):
        first = compute_score("abX", "abc", 3000)
        second = compute_score("abX", "abc", 3000)
        assert first == second


class TestDisplayHelpers:
    def test_display_wpm_rounds_half_up(self):
        assert display_wpm(15.5) == 16
        assert display_wpm(16.4999) == 16
        assert display_wpm(0.2) == 0

    def test_progress(self):
        assert progress_percent("ab", "abcd") == 50.0

    def test_progress_empty_reference(self):
        assert progress_percent("abc", "") == 0.0

    def test_progress_can_exceed_100_on_paste(self):
        assert progress_percent("abcdef", "abc") == 200.0
