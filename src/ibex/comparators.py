"""Dominance comparators.

Every comparator implements ``compare(a, b) -> {-1, 0, 1}`` (a better,
non-dominated/equal, b better) and can also be called directly. Pareto
dominance is only a partial order, so these relations are deliberately not
``functools.cmp_to_key`` material.

- ParetoDominanceComparator: plain Pareto dominance on the objectives
- AggregateConstraintComparator: feasibility first, then smaller violation
- EpsilonBoxDominanceComparator: dominance on epsilon-grid boxes, with a
  distance-to-corner tie break inside a box
- EpsilonBoxConstraintComparator: feasibility first, then epsilon boxes
- ChainedComparator: first non-zero answer of an ordered list
- FitnessComparator: scalar ``fitness`` attribute, used by IBEA
"""

from collections.abc import Sequence

import numpy as np

from ibex.population import Solution
from ibex.primitives import dominates, epsilon_box_index
from ibex.protocols import DominanceComparator

FITNESS_ATTRIBUTE = "fitness"


class _Comparator:
    def compare(self, a: Solution, b: Solution) -> int:
        raise NotImplementedError

    def __call__(self, a: Solution, b: Solution) -> int:
        return self.compare(a, b)


class ParetoDominanceComparator(_Comparator):
    """Pareto dominance under minimization.

    Example:
        >>> cmp = ParetoDominanceComparator()
        >>> cmp.compare(Solution([], [1.0, 1.0]), Solution([], [2.0, 2.0]))
        -1
        >>> cmp.compare(Solution([], [1.0, 2.0]), Solution([], [2.0, 1.0]))
        0
    """

    def compare(self, a: Solution, b: Solution) -> int:
        if dominates(a.objectives, b.objectives):
            return -1
        if dominates(b.objectives, a.objectives):
            return 1
        return 0


class AggregateConstraintComparator(_Comparator):
    """Orders solutions by total constraint violation.

    A feasible solution beats any infeasible one and the smaller violation
    wins between two infeasible ones. Two feasible solutions compare equal so
    the next comparator in a chain decides.
    """

    def compare(self, a: Solution, b: Solution) -> int:
        cv_a = a.constraint_violation
        cv_b = b.constraint_violation
        if cv_a == cv_b:
            return 0
        return -1 if cv_a < cv_b else 1


class EpsilonBoxDominanceComparator(_Comparator):
    """Pareto dominance on epsilon boxes.

    Objective space is cut into boxes of size ``epsilon[i]`` per objective and
    each solution is mapped to ``floor(f_i / epsilon_i)``. Different boxes
    are compared by Pareto dominance of their indices. Inside one box the
    solution closer (Euclidean) to the box's lower corner wins; on an exact
    distance tie plain Pareto dominance of the objectives decides.

    Args:
        epsilons: A single epsilon for every objective, or one per objective.
            A sequence shorter than the objective count repeats its last
            value. Every value must be strictly positive.

    Example:
        >>> cmp = EpsilonBoxDominanceComparator([1.0, 1.0])
        >>> cmp.compare(Solution([], [1.1, 1.9]), Solution([], [1.8, 1.8]))
        -1
    """

    def __init__(self, epsilons: float | Sequence[float] | np.ndarray) -> None:
        eps = np.atleast_1d(np.asarray(epsilons, dtype=np.float64))
        if eps.ndim != 1 or eps.size == 0:
            raise ValueError("epsilons must be a scalar or a non-empty 1D sequence")
        if np.any(eps <= 0) or not np.all(np.isfinite(eps)):
            raise ValueError(f"epsilons must be positive and finite, got {eps.tolist()}")
        self._epsilons = eps

    @property
    def epsilons(self) -> np.ndarray:
        return self._epsilons.copy()

    def epsilons_for(self, n_obj: int) -> np.ndarray:
        """Expand the configured epsilons to ``n_obj`` values."""
        if self._epsilons.size >= n_obj:
            return self._epsilons[:n_obj]
        return np.concatenate([self._epsilons, np.full(n_obj - self._epsilons.size, self._epsilons[-1])])

    def box_index(self, solution: Solution) -> np.ndarray:
        return epsilon_box_index(solution.objectives, self.epsilons_for(solution.n_obj))

    def same_box(self, a: Solution, b: Solution) -> bool:
        return bool(np.array_equal(self.box_index(a), self.box_index(b)))

    def _corner_distance(self, solution: Solution, box: np.ndarray) -> float:
        corner = box * self.epsilons_for(solution.n_obj)
        return float(np.linalg.norm(solution.objectives - corner))

    def compare(self, a: Solution, b: Solution) -> int:
        box_a = self.box_index(a)
        box_b = self.box_index(b)

        if not np.array_equal(box_a, box_b):
            if dominates(box_a, box_b):
                return -1
            if dominates(box_b, box_a):
                return 1
            return 0

        dist_a = self._corner_distance(a, box_a)
        dist_b = self._corner_distance(b, box_b)
        if dist_a < dist_b:
            return -1
        if dist_b < dist_a:
            return 1
        return ParetoDominanceComparator().compare(a, b)


class EpsilonBoxConstraintComparator(EpsilonBoxDominanceComparator):
    """Feasibility first, then epsilon-box dominance."""

    def __init__(self, epsilons: float | Sequence[float] | np.ndarray) -> None:
        super().__init__(epsilons)
        self._constraints = AggregateConstraintComparator()

    def compare(self, a: Solution, b: Solution) -> int:
        flag = self._constraints.compare(a, b)
        if flag != 0:
            return flag
        return super().compare(a, b)


class ChainedComparator(_Comparator):
    """Apply comparators in priority order, returning the first non-zero result.

    Example:
        >>> cmp = ChainedComparator(AggregateConstraintComparator(), ParetoDominanceComparator())
    """

    def __init__(self, *comparators: DominanceComparator) -> None:
        if not comparators:
            raise ValueError("ChainedComparator requires at least one comparator")
        self._comparators = tuple(comparators)

    @property
    def comparators(self) -> tuple[DominanceComparator, ...]:
        return self._comparators

    def compare(self, a: Solution, b: Solution) -> int:
        for comparator in self._comparators:
            flag = comparator.compare(a, b)
            if flag != 0:
                return flag
        return 0


class FitnessComparator(_Comparator):
    """Compare the scalar ``fitness`` attribute of two solutions.

    Args:
        larger_values_preferred: If True the larger fitness wins, otherwise the
            smaller one does.

    Raises:
        KeyError: When a compared solution carries no fitness attribute.
    """

    def __init__(self, larger_values_preferred: bool) -> None:
        self.larger_values_preferred = larger_values_preferred

    def compare(self, a: Solution, b: Solution) -> int:
        fa = a.attributes[FITNESS_ATTRIBUTE]
        fb = b.attributes[FITNESS_ATTRIBUTE]
        if fa == fb:
            return 0
        a_better = fa > fb if self.larger_values_preferred else fa < fb
        return -1 if a_better else 1
