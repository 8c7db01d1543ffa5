"""Tests for checking numbers, infinities and words."""

from mathcheck.answer import ScalarAnswerChecker
from mathcheck.math import compute


class TestRealAnswers:
    def test_checker_class(self):
        assert isinstance(compute("3").cmp(), ScalarAnswerChecker)

    def test_relative_tolerance(self):
        checker = compute("100").cmp()
        assert checker.evaluate("100.09").score == 1.0
        assert checker.evaluate("100.2").score == 0.0

    def test_equivalent_expression(self):
        assert compute("1/2").cmp().evaluate("sin(pi/6)").score == 1.0

    def test_tolerance_flags(self):
        assert compute("100").cmp(tolerance=0.01).evaluate("100.9").score == 1.0
        assert compute("100").cmp(tolType="absolute", tolerance=0.5).evaluate("100.4").score == 1.0
        assert compute("100").cmp(tolType="absolute", tolerance=0.5).evaluate("100.6").score == 0.0

    def test_wrong_type_warning(self):
        ans = compute("3").cmp().evaluate("(1, 2)")
        assert ans.score == 0.0
        assert ans.type_error is True
        assert ans.messages == ["Your answer isn't a number (it looks like a point)"]

    def test_type_warnings_can_be_hidden(self):
        ans = compute("3").cmp(showTypeWarnings=0).evaluate("(1, 2)")
        assert ans.score == 0.0
        assert ans.messages == []

    def test_words_are_not_type_errors(self):
        ans = compute("3").cmp().evaluate("NONE")
        assert ans.score == 0.0
        assert ans.messages == []

    def test_infinity_is_just_wrong(self):
        ans = compute("3").cmp().evaluate("inf")
        assert ans.score == 0.0
        assert ans.type_error is False
        assert ans.messages == []

    def test_infinity_as_type_error(self):
        ans = compute("3").cmp(ignoreInfinity=0).evaluate("inf")
        assert ans.type_error is True
        assert ans.messages == ["Your answer isn't a number (it looks like infinity)"]


class TestOtherScalars:
    def test_complex(self):
        checker = compute("1+2i").cmp()
        assert checker.evaluate("1 + 2i").score == 1.0
        assert checker.evaluate("2i + 1").score == 1.0
        assert checker.evaluate("3").score == 0.0

    def test_infinity(self):
        checker = compute("-inf").cmp()
        assert checker.evaluate("-infinity").score == 1.0
        assert checker.evaluate("inf").score == 0.0

    def test_word(self):
        checker = compute("DNE").cmp()
        assert checker.evaluate("DNE").score == 1.0
        ans = checker.evaluate("3")
        assert ans.score == 0.0
        assert ans.messages == []


class TestCustomChecker:
    def test_checker_decides(self):
        checker = compute("4").cmp(checker=lambda correct, student, ans: student.value % 2 == 0)
        assert checker.evaluate("10").score == 1.0
        assert checker.evaluate("3").score == 0.0

    def test_checker_can_give_partial_credit(self):
        checker = compute("4").cmp(checker=lambda correct, student, ans: 0.5)
        assert checker.evaluate("7").score == 0.5

    def test_checker_can_add_messages(self):
        def checker(correct, student, ans):
            ans.add_message("Close, but not quite")
            return False

        ans = compute("4").cmp(checker=checker).evaluate("5")
        assert ans.messages == ["Close, but not quite"]

    def test_checker_error_is_reported(self):
        def checker(correct, student, ans):
            raise ValueError("Your answer should be even")

        ans = compute("4").cmp(checker=checker).evaluate("5")
        assert ans.score == 0.0
        assert ans.error_flag is True
        assert ans.messages == ["Your answer should be even"]
        assert ans.metadata["state"] == "score_computed"

    def test_checker_parse_error_is_reported(self):
        def checker(correct, student, ans):
            return student == compute("1+")

        ans = compute("4").cmp(checker=checker).evaluate("4")
        assert ans.score == 0.0
        assert ans.error_flag is True
        assert ans.messages == ["Missing operand after '+'"]
        assert ans.metadata["state"] == "score_computed"
