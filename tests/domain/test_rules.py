import pytest

from git_risk.domain.rules import (
    BUG_FIX_KEYWORDS,
    clamp_unit,
    round_half_up,
    classify_change_kind,
    classify_risk_level,
    is_bug_fix_commit,
)


class TestIsBugFixCommit:
    @pytest.mark.parametrize("keyword", BUG_FIX_KEYWORDS)
    def test_each_keyword_matches(self, keyword):
        assert is_bug_fix_commit(f"Some {keyword} here")

    def test_case_insensitive(self):
        assert is_bug_fix_commit("FIX login bug")
        assert is_bug_fix_commit("Hotfix for release")

    def test_substring_match(self):
        # "prefix" contains "fix"
        assert is_bug_fix_commit("Add prefix to names")

    def test_plain_feature(self):
        assert not is_bug_fix_commit("Add user authentication feature")
        assert not is_bug_fix_commit("Update user profile component")

    def test_empty_message(self):
        assert not is_bug_fix_commit("")


class TestClassifyChangeKind:
    def test_only_insertions_is_added(self):
        assert classify_change_kind(10, 0) == "added"

    def test_only_deletions_is_deleted(self):
        assert classify_change_kind(0, 7) == "deleted"

    def test_both_is_modified(self):
        assert classify_change_kind(3, 2) == "modified"

    def test_zero_zero_is_modified(self):
        assert classify_change_kind(0, 0) == "modified"


class TestClassifyRiskLevel:
    @pytest.mark.parametrize(
        "score, level",
        [
            (1.0, "critical"),
            (0.9, "critical"),
            (0.89, "high"),
            (0.7, "high"),
            (0.69, "medium"),
            (0.5, "medium"),
            (0.49, "low"),
            (0.0, "low"),
        ],
    )
    def test_cut_points(self, score, level):
        assert classify_risk_level(score) == level


class TestClampUnit:
    def test_inside(self):
        assert clamp_unit(0.4) == 0.4

    def test_above(self):
        assert clamp_unit(3.0) == 1.0

    def test_below(self):
        assert clamp_unit(-0.5) == 0.0


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        "value, expected",
        [(0.125, 0.13), (0.375, 0.38), (0.124, 0.12), (0.875, 0.88), (0.0, 0.0), (1.0, 1.0)],
    )
    def test_two_decimals(self, value, expected):
        assert round_half_up(value) == expected

    def test_differs_from_builtin_round_on_halves(self):
        assert round(0.125, 2) == 0.12
        assert round_half_up(0.125) == 0.13

    def test_digits(self):
        assert round_half_up(2.5, 0) == 3.0
