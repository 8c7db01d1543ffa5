"""Tests for optimal assignment of student entries to reference entries."""

import numpy as np

from mathcheck.math.matching import assign, optimal_total


class TestOptimalTotal:
    def test_identity(self):
        assert optimal_total(np.eye(3)) == 3.0

    def test_permutation(self):
        weights = np.array([[0, 1, 0], [0, 0, 1], [1, 0, 0]], dtype=float)
        assert optimal_total(weights) == 3.0

    def test_rectangular(self):
        weights = np.array([[1, 0], [1, 0], [0, 0]], dtype=float)
        assert optimal_total(weights) == 1.0

    def test_prefers_global_optimum_over_greedy(self):
        weights = np.array([[1.0, 0.9], [0.8, 0.0]])
        assert np.isclose(optimal_total(weights), 1.7)

    def test_empty(self):
        assert optimal_total(np.zeros((0, 3))) == 0.0


class TestAssign:
    def test_unordered_pairs(self):
        weights = np.array([[0, 0, 1], [0, 1, 0], [1, 0, 0]], dtype=float)
        assert assign(weights) == [(0, 2), (1, 1), (2, 0)]

    def test_only_positive_pairs(self):
        weights = np.array([[1, 0], [0, 0]], dtype=float)
        assert assign(weights) == [(0, 0)]

    def test_earliest_reference_among_ties(self):
        weights = np.ones((2, 2))
        assert assign(weights) == [(0, 0), (1, 1)]

    def test_duplicate_student_entry_matches_once(self):
        weights = np.array([[1, 0], [1, 0], [0, 1]], dtype=float)
        assert assign(weights) == [(0, 0), (2, 1)]

    def test_tie_break_keeps_optimum(self):
        weights = np.array([[1.0, 1.0], [1.0, 0.0]])
        assert assign(weights) == [(0, 1), (1, 0)]

    def test_ordered(self):
        weights = np.array([[0, 1], [1, 0]], dtype=float)
        assert assign(weights, ordered=True) == []
        assert assign(np.eye(2), ordered=True) == [(0, 0), (1, 1)]

    def test_more_students_than_references(self):
        weights = np.array([[0.0], [1.0]])
        assert assign(weights) == [(1, 0)]
