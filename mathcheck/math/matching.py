"""
Optimal assignment of student entries to reference entries.

List, set and union answers (and ``Set.compare``) are scored by pairing each student entry with
at most one reference entry so that the total pair score is as large as
possible (the Hungarian algorithm on a padded square weight matrix).

Among optimal assignments the one chosen is deterministic: each student
entry, in order, takes the earliest reference entry that still allows an
optimal total.
"""

from __future__ import annotations

import math

import numpy as np


def _hungarian(cost: np.ndarray) -> list[int]:
    """
    Minimum-cost perfect matching on a square cost matrix.

    Returns:
        assignment[row] = column
    """
    n = cost.shape[0]
    inf = float("inf")
    u = [0.0] * (n + 1)
    v = [0.0] * (n + 1)
    p = [0] * (n + 1)
    way = [0] * (n + 1)

    for i in range(1, n + 1):
        p[0] = i
        j0 = 0
        minv = [inf] * (n + 1)
        used = [False] * (n + 1)
        while True:
            used[j0] = True
            i0 = p[j0]
            delta = inf
            j1 = 0
            for j in range(1, n + 1):
                if not used[j]:
                    cur = cost[i0 - 1, j - 1] - u[i0] - v[j]
                    if cur < minv[j]:
                        minv[j] = cur
                        way[j] = j0
                    if minv[j] < delta:
                        delta = minv[j]
                        j1 = j
            for j in range(n + 1):
                if used[j]:
                    u[p[j]] += delta
                    v[j] -= delta
                else:
                    minv[j] -= delta
            j0 = j1
            if p[j0] == 0:
                break
        while True:
            j1 = way[j0]
            p[j0] = p[j1]
            j0 = j1
            if j0 == 0:
                break

    assignment = [0] * n
    for j in range(1, n + 1):
        if p[j]:
            assignment[p[j] - 1] = j - 1
    return assignment


def optimal_total(weights: np.ndarray) -> float:
    """Largest total weight of any one-to-one pairing of rows and columns."""
    if weights.size == 0:
        return 0.0
    n, m = weights.shape
    size = max(n, m)
    padded = np.zeros((size, size))
    padded[:n, :m] = weights
    assignment = _hungarian(-padded)
    return float(sum(padded[i, assignment[i]] for i in range(size)))


def assign(weights: np.ndarray, ordered: bool = False) -> list[tuple[int, int]]:
    """
    Pair student entries (rows) with reference entries (columns).

    Args:
        weights: n x m matrix of pair scores in [0, 1]
        ordered: Only allow the identity pairing (entry i with entry i)

    Returns:
        (student index, reference index) pairs with positive weight, in
        student order
    """
    weights = np.asarray(weights, dtype=float)
    n, m = weights.shape if weights.ndim == 2 else (0, 0)

    if ordered:
        return [(i, i) for i in range(min(n, m)) if weights[i, i] > 0]

    best = optimal_total(weights)
    pairs: list[tuple[int, int]] = []
    fixed = 0.0
    free_rows = list(range(n))
    free_cols = list(range(m))

    for i in range(n):
        free_rows.remove(i)
        for j in list(free_cols):
            if weights[i, j] <= 0:
                continue
            rest = [c for c in free_cols if c != j]
            total = fixed + weights[i, j] + optimal_total(weights[np.ix_(free_rows, rest)])
            if math.isclose(total, best, rel_tol=1e-9, abs_tol=1e-9):
                pairs.append((i, j))
                fixed += weights[i, j]
                free_cols.remove(j)
                break

    return pairs
