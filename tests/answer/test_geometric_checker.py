"""Tests for checking points, vectors and matrices."""

from mathcheck.math import compute


class TestPointChecker:
    def test_correct(self):
        assert compute("(1, 2, 3)").cmp().evaluate("(1, 2, 3)").score == 1.0

    def test_wrong_dimension(self):
        ans = compute("(1, 2, 3)").cmp().evaluate("(1, 2)")
        assert ans.score == 0.0
        assert ans.messages == ["The number of coordinates is incorrect"]

    def test_coordinate_hints(self):
        ans = compute("(1, 2, 3)").cmp().evaluate("(1, 5, 3)")
        assert ans.score == 0.0
        assert ans.messages == ["The second coordinate is incorrect"]

    def test_no_hints_when_everything_is_wrong(self):
        ans = compute("(1, 2, 3)").cmp().evaluate("(4, 5, 6)")
        assert ans.messages == []

    def test_coordinate_hints_can_be_hidden(self):
        ans = compute("(1, 2, 3)").cmp(showCoordinateHints=0).evaluate("(1, 5, 3)")
        assert ans.messages == []


class TestVectorChecker:
    def test_exact(self, vector_context):
        checker = compute("<1, 0, 0>", vector_context).cmp()
        assert checker.evaluate("<1, 0, 0>").score == 1.0
        assert checker.evaluate("<2, 0, 0>").score == 0.0

    def test_points_are_promoted(self, vector_context):
        assert compute("<1, 2, 3>", vector_context).cmp().evaluate("(1, 2, 3)").score == 1.0

    def test_points_can_be_refused(self, vector_context):
        ans = compute("<1, 2, 3>", vector_context).cmp(promotePoints=0).evaluate("(1, 2, 3)")
        assert ans.score == 0.0
        assert ans.messages == ["Your answer isn't a vector (it looks like a point)"]

    def test_parallel(self, vector_context):
        checker = compute("<1, 0, 0>", vector_context).cmp(parallel=1)
        assert checker.evaluate("(2, 0, 0)").score == 1.0
        assert checker.evaluate("(-2, 0, 0)").score == 1.0
        assert checker.evaluate("(1, 1, 0)").score == 0.0

    def test_same_direction(self, vector_context):
        checker = compute("<1, 0, 0>", vector_context).cmp(parallel=1, sameDirection=1)
        assert checker.evaluate("(2, 0, 0)").score == 1.0
        assert checker.evaluate("(-2, 0, 0)").score == 0.0


class TestMatrixChecker:
    def test_correct(self, matrix_context):
        checker = compute("[[1, 2], [3, 4]]", matrix_context).cmp()
        assert checker.evaluate("[[1, 2], [3, 4]]").score == 1.0
        assert checker.evaluate("[[1, 2], [3, 5]]").score == 0.0

    def test_wrong_dimensions(self, matrix_context):
        ans = compute("[[1, 2], [3, 4]]", matrix_context).cmp().evaluate("[[1, 2, 3], [4, 5, 6]]")
        assert ans.score == 0.0
        assert ans.messages == ["The dimensions of your matrix are incorrect (it should be 2 by 2)"]

    def test_dimension_hints_can_be_hidden(self, matrix_context):
        ans = compute("[[1, 2], [3, 4]]", matrix_context).cmp(showDimensionHints=0).evaluate("[[1, 2, 3], [4, 5, 6]]")
        assert ans.score == 0.0
        assert ans.messages == []
