"""Tests for Point, Vector and Matrix."""

import numpy as np
import pytest

from mathcheck.core.errors import DimensionError
from mathcheck.math.geometric import Matrix, Point, Vector
from mathcheck.math.numeric import Real


class TestPoint:
    def test_construction(self):
        assert Point(1, 2).to_python() == (1.0, 2.0)
        assert Point([1, 2, 3]).length() == 3
        assert Point("(1, 2)").to_string() == "(1, 2)"

    def test_coords_and_positional_are_exclusive(self):
        with pytest.raises(ValueError):
            Point(1, 2, coords=[1, 2])

    def test_coordinates_must_be_numbers(self):
        with pytest.raises(ValueError, match="Coordinates must be numbers"):
            Point(1, "DNE")

    def test_compare(self):
        assert Point(1, 2) == Point(1.0001, 2)
        assert Point(1, 2) != Point(2, 1)
        assert Point(1, 2) != Point(1, 2, 0)

    def test_point_is_not_a_vector(self):
        assert not Point(1, 2).compare(Vector(1, 2))

    def test_coordinate_matches(self):
        assert Point(1, 2, 3).coordinate_matches(Point(1, 0, 3)) == [True, False, True]
        with pytest.raises(DimensionError):
            Point(1, 2).coordinate_matches(Point(1, 2, 3))

    def test_indexing(self):
        assert Point(4, 5)[1] == Real(5)


class TestVector:
    def test_to_string(self):
        assert Vector(1, 0, 0).to_string() == "<1, 0, 0>"

    def test_from_numpy(self):
        assert Vector(np.array([3.0, 4.0])).norm().value == 5.0

    def test_unit_and_zero_vector(self):
        assert Vector(0, 3).unit() == Vector(0, 1)
        with pytest.raises(ValueError):
            Vector(0, 0).unit()

    def test_dot_and_cross(self):
        assert Vector(1, 2, 3).dot(Vector(4, 5, 6)).value == 32.0
        assert Vector(1, 0, 0).cross(Vector(0, 1, 0)) == Vector(0, 0, 1)
        with pytest.raises(DimensionError):
            Vector(1, 2).cross(Vector(3, 4))

    def test_parallel(self):
        assert Vector(2, 0, 0).is_parallel(Vector(1, 0, 0))
        assert Vector(-2, 0, 0).is_parallel(Vector(1, 0, 0))
        assert not Vector(-2, 0, 0).is_parallel(Vector(1, 0, 0), same_direction=True)
        assert not Vector(1, 1, 0).is_parallel(Vector(1, 0, 0))

    def test_zero_vector_is_not_parallel(self):
        assert not Vector(0, 0, 0).is_parallel(Vector(1, 0, 0))

    def test_promote_point(self):
        vector = Vector.from_point(Point(1, 2))
        assert isinstance(vector, Vector)
        assert vector == Vector(1, 2)


class TestMatrix:
    def test_construction(self):
        assert Matrix([[1, 2], [3, 4]]).shape == (2, 2)
        assert Matrix([1, 2], [3, 4]).shape == (2, 2)
        assert Matrix("[[1, 2], [3, 4]]").to_python() == [[1.0, 2.0], [3.0, 4.0]]

    def test_ragged_rows(self):
        with pytest.raises(ValueError, match="same length"):
            Matrix([[1, 2], [3]])

    def test_compare(self):
        assert Matrix([[1, 2], [3, 4]]) == Matrix([[1, 2], [3, 4.0001]])
        assert Matrix([[1, 2], [3, 4]]) != Matrix([[1, 2, 0], [3, 4, 0]])

    def test_to_string(self):
        assert Matrix([[1, 2], [3, 4]]).to_string() == "[[1, 2], [3, 4]]"
