"""Quality indicators for Pareto front approximations.

Each indicator is bound to its reference data at construction and exposes
``evaluate(approximation_set) -> float``. Approximation sets may be given as
a Population (or any sequence of solutions), in which case infeasible
solutions are dropped, or directly as an objective matrix. Dominated points
are filtered out before the indicator is computed.

- Hypervolume: dominated volume up to a reference point (larger is better)
- GenerationalDistance: approximation -> reference nearest distances
- InvertedGenerationalDistance: reference -> approximation nearest distances
- AdditiveEpsilonIndicator: smallest shift making the set cover the reference
- MaximumParetoFrontError: worst nearest distance from the reference set
- Spacing: spread of nearest-neighbour distances inside the set

An empty approximation set never raises: hypervolume and spacing give 0 and
the distance-based indicators give infinity.
"""

from collections.abc import Sequence

import numpy as np
from pymoo.indicators.hv import HV

from ibex.population import Population, Solution
from ibex.primitives import nondominated_mask

ApproximationSet = Population | Sequence[Solution] | np.ndarray


def as_front(approximation_set: ApproximationSet) -> np.ndarray:
    """Return the feasible, non-dominated objective vectors of a set.

    Returns:
        Array of shape (n, n_obj); (0, 0) when nothing remains.
    """
    if isinstance(approximation_set, np.ndarray):
        objectives = np.asarray(approximation_set, dtype=np.float64)
        if objectives.size == 0:
            return np.empty((0, 0), dtype=np.float64)
        objectives = np.atleast_2d(objectives)
    else:
        feasible = [s.objectives for s in approximation_set if s.feasible]
        if not feasible:
            return np.empty((0, 0), dtype=np.float64)
        objectives = np.stack(feasible)
    return objectives[nondominated_mask(objectives)]


def _pairwise_distances(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Euclidean distance matrix between the rows of a and b."""
    return np.sqrt(np.sum((a[:, np.newaxis, :] - b[np.newaxis, :, :]) ** 2, axis=2))


class Normalizer:
    """Min-max normalization to the bounds of a reference set.

    Objectives whose reference range is zero are shifted but not scaled.
    """

    def __init__(self, reference: np.ndarray) -> None:
        if reference.ndim != 2 or reference.shape[0] == 0:
            raise ValueError("cannot normalize against an empty reference set")
        self.minimum = reference.min(axis=0)
        span = reference.max(axis=0) - self.minimum
        self.span = np.where(span > 0, span, 1.0)

    def __call__(self, objectives: np.ndarray) -> np.ndarray:
        return (objectives - self.minimum) / self.span


class _ReferenceSetIndicator:
    """Shared plumbing for indicators that compare against a reference set."""

    def __init__(self, reference_set: ApproximationSet, normalize: bool = True) -> None:
        reference = as_front(reference_set)
        if reference.shape[0] == 0:
            raise ValueError(f"{type(self).__name__} requires a non-empty reference set")
        self._normalizer = Normalizer(reference) if normalize else None
        self.reference = self._scale(reference)

    def _scale(self, objectives: np.ndarray) -> np.ndarray:
        if self._normalizer is None or objectives.shape[0] == 0:
            return objectives
        return self._normalizer(objectives)

    def _front(self, approximation_set: ApproximationSet) -> np.ndarray:
        front = as_front(approximation_set)
        if front.shape[0] and front.shape[1] != self.reference.shape[1]:
            raise ValueError(
                f"approximation set has {front.shape[1]} objectives, reference set has {self.reference.shape[1]}"
            )
        return self._scale(front)

    def evaluate(self, approximation_set: ApproximationSet) -> float:
        raise NotImplementedError

    def __call__(self, approximation_set: ApproximationSet) -> float:
        return self.evaluate(approximation_set)


class Hypervolume(_ReferenceSetIndicator):
    """Hypervolume (S-metric), computed with pymoo.

    By default objectives are normalized to the reference set's bounds and the
    volume is measured up to the point (1, ..., 1). Passing ``reference_point``
    measures raw objectives up to that point instead.

    Args:
        reference_set: Reference front; only used for normalization.
        reference_point: Optional explicit reference point (disables
            normalization).
    """

    def __init__(
        self,
        reference_set: ApproximationSet | None = None,
        reference_point: Sequence[float] | np.ndarray | None = None,
    ) -> None:
        if reference_point is None:
            if reference_set is None:
                raise ValueError("Hypervolume requires a reference set or a reference point")
            super().__init__(reference_set, normalize=True)
            self.reference_point = np.ones(self.reference.shape[1])
        else:
            self._normalizer = None
            self.reference_point = np.asarray(reference_point, dtype=np.float64)
            self.reference = self.reference_point[np.newaxis, :]

    def evaluate(self, approximation_set: ApproximationSet) -> float:
        front = self._front(approximation_set)
        if front.shape[0] == 0:
            return 0.0
        inside = front[np.all(front < self.reference_point, axis=1)]
        if inside.shape[0] == 0:
            return 0.0
        return float(HV(ref_point=self.reference_point)(inside))


class GenerationalDistance(_ReferenceSetIndicator):
    """Distance from the approximation set to the reference set.

    ``(sum_i d_i ** power) ** (1 / power) / n`` where d_i is the distance from
    approximation point i to its nearest reference point. ``power=1`` (the
    default) is the plain mean distance.
    """

    def __init__(self, reference_set: ApproximationSet, power: float = 1.0, normalize: bool = True) -> None:
        super().__init__(reference_set, normalize=normalize)
        self.power = power

    def _aggregate(self, distances: np.ndarray) -> float:
        return float(np.sum(distances**self.power) ** (1.0 / self.power) / distances.shape[0])

    def evaluate(self, approximation_set: ApproximationSet) -> float:
        front = self._front(approximation_set)
        if front.shape[0] == 0:
            return float("inf")
        return self._aggregate(_pairwise_distances(front, self.reference).min(axis=1))


class InvertedGenerationalDistance(GenerationalDistance):
    """Distance from the reference set to the approximation set."""

    def evaluate(self, approximation_set: ApproximationSet) -> float:
        front = self._front(approximation_set)
        if front.shape[0] == 0:
            return float("inf")
        return self._aggregate(_pairwise_distances(self.reference, front).min(axis=1))


class AdditiveEpsilonIndicator(_ReferenceSetIndicator):
    """Smallest epsilon such that every reference point is additively
    epsilon-dominated by some approximation point.

    Zero when the approximation set equals the reference set; negative values
    mean the approximation set is strictly better.
    """

    def evaluate(self, approximation_set: ApproximationSet) -> float:
        front = self._front(approximation_set)
        if front.shape[0] == 0:
            return float("inf")
        # shift[r, a] = max_k (a_k - r_k)
        shift = np.max(front[np.newaxis, :, :] - self.reference[:, np.newaxis, :], axis=2)
        return float(np.max(np.min(shift, axis=1)))


class MaximumParetoFrontError(_ReferenceSetIndicator):
    """Largest nearest-neighbour distance from a reference point to the set."""

    def evaluate(self, approximation_set: ApproximationSet) -> float:
        front = self._front(approximation_set)
        if front.shape[0] == 0:
            return float("inf")
        return float(np.max(_pairwise_distances(self.reference, front).min(axis=1)))


class Spacing:
    """Schott's spacing metric; needs no reference set.

    For every point the Manhattan distance to its nearest neighbour is taken;
    the result is the sample standard deviation of those distances. Sets with
    fewer than two points have spacing 0.
    """

    def evaluate(self, approximation_set: ApproximationSet) -> float:
        front = as_front(approximation_set)
        n = front.shape[0]
        if n < 2:
            return 0.0
        manhattan = np.sum(np.abs(front[:, np.newaxis, :] - front[np.newaxis, :, :]), axis=2)
        np.fill_diagonal(manhattan, np.inf)
        nearest = manhattan.min(axis=1)
        return float(np.sqrt(np.sum((nearest.mean() - nearest) ** 2) / (n - 1)))

    def __call__(self, approximation_set: ApproximationSet) -> float:
        return self.evaluate(approximation_set)
