"""Tests for checking unions of intervals and sets."""

import pytest

from mathcheck.answer import UnionAnswerChecker
from mathcheck.math import compute


@pytest.fixture
def checker():
    return compute("(-1, 1) U (4, inf)").cmp()


class TestUnionChecker:
    def test_checker_class(self, checker):
        assert isinstance(checker, UnionAnswerChecker)

    def test_correct(self, checker):
        assert checker.evaluate("(-1, 1) U (4, infinity)").score == 1.0

    def test_any_order(self, checker):
        assert checker.evaluate("(4, inf) U (-1, 1)").score == 1.0

    def test_unreduced_union_is_rejected(self, checker):
        ans = checker.evaluate("(-1, 0] U (0, 1) U (4, infinity)")
        assert ans.score == 0.0
        assert ans.messages == ["Your union can be simplified by combining some of its intervals"]

    def test_unreduced_union_accepted_when_allowed(self):
        checker = compute("(-1, 1) U (4, inf)").cmp(studentsMustReduceUnions=0)
        assert checker.evaluate("(-1, 0] U (0, 1) U (4, infinity)").score == 1.0

    def test_redundant_points(self, checker):
        ans = checker.evaluate("(-1, 1) U {0} U (4, inf)")
        assert ans.score == 0.0
        assert ans.messages == ["Your union can be simplified by removing redundant points"]

    def test_reduce_warnings_can_be_hidden(self):
        ans = compute("(-1, 1) U (4, inf)").cmp(showUnionReduceWarnings=0).evaluate("(-1, 0] U (0, 1) U (4, inf)")
        assert ans.score == 0.0
        assert ans.messages == []

    def test_single_interval(self, checker):
        ans = checker.evaluate("(-1, 1)")
        assert ans.score == pytest.approx(1 / 2)
        assert ans.messages == ["There should be more intervals in your union"]

    def test_wrong_interval(self, checker):
        ans = checker.evaluate("(-1, 1) U [4, inf)")
        assert ans.score == pytest.approx(1 / 2)
        assert ans.messages == ["Your second interval is incorrect"]
