"""Vectorized Pareto primitives.

Pure numpy helpers shared by the comparators, archives and indicators:
- dominates: scalar Pareto dominance check
- dominates_matrix: pairwise dominance for a whole objective matrix
- nondominated_mask: which rows are not dominated by any other row
- non_dominated_sort: front index of every row
- epsilon_box_index: epsilon-grid box of an objective vector
"""

from collections.abc import Sequence

import numpy as np


def dominates(a: np.ndarray, b: np.ndarray) -> bool:
    """Check if objective vector a Pareto-dominates b (minimization).

    a dominates b iff a[i] <= b[i] for every objective and a[i] < b[i] for at
    least one.

    Examples:
        >>> dominates(np.array([1.0, 2.0]), np.array([2.0, 3.0]))
        True
        >>> dominates(np.array([1.0, 3.0]), np.array([2.0, 2.0]))
        False
    """
    return bool(np.all(a <= b) and np.any(a < b))


def dominates_matrix(objectives: np.ndarray) -> np.ndarray:
    """Compute pairwise dominance for all rows.

    Args:
        objectives: Objective values, shape (n, n_obj).

    Returns:
        Boolean array of shape (n, n) where result[i, j] is True iff row i
        dominates row j.
    """
    a = objectives[:, np.newaxis, :]
    b = objectives[np.newaxis, :, :]
    return np.all(a <= b, axis=2) & np.any(a < b, axis=2)


def nondominated_mask(objectives: np.ndarray) -> np.ndarray:
    """Boolean mask of the rows no other row dominates.

    Duplicated rows do not dominate each other, so all copies are kept.
    """
    if objectives.shape[0] == 0:
        return np.zeros(0, dtype=bool)
    return ~np.any(dominates_matrix(objectives), axis=0)


def non_dominated_sort(objectives: np.ndarray) -> np.ndarray:
    """Assign each row to a Pareto front (Deb's fast non-dominated sort).

    Args:
        objectives: Objective values, shape (n, n_obj).

    Returns:
        Integer array of shape (n,); 0 marks the first (non-dominated) front.

    Examples:
        >>> non_dominated_sort(np.array([[1.0, 1.0], [2.0, 2.0], [3.0, 3.0]]))
        array([0, 1, 2])
    """
    n = objectives.shape[0]
    if n == 0:
        return np.array([], dtype=np.int64)

    dom = dominates_matrix(objectives)
    # domination_count[i] = number of rows dominating row i
    domination_count = dom.sum(axis=0)
    ranks = np.full(n, -1, dtype=np.int64)

    current_rank = 0
    remaining = np.arange(n)
    while len(remaining) > 0:
        front_mask = domination_count[remaining] == 0
        front = remaining[front_mask]
        ranks[front] = current_rank
        remaining = remaining[~front_mask]
        for idx in front:
            domination_count[remaining] -= dom[idx, remaining].astype(np.int64)
        current_rank += 1

    return ranks


def epsilon_box_index(objectives: np.ndarray, epsilons: Sequence[float] | np.ndarray) -> np.ndarray:
    """Return the epsilon-box coordinates ``floor(f_i / eps_i)``.

    Works on a single vector (n_obj,) or a matrix (n, n_obj); ``epsilons``
    must already be expanded to n_obj entries.
    """
    return np.floor(np.asarray(objectives, dtype=np.float64) / np.asarray(epsilons, dtype=np.float64)).astype(np.int64)
