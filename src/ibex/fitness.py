"""Indicator-based fitness assignment for IBEA.

For a population x_1..x_n and a binary quality indicator I, the fitness of
x_i is

    F(x_i) = -sum_{j != i} exp(-I(x_j, x_i) / (c * kappa))

where c scales the indicator values and kappa controls selection pressure.
Larger fitness is better.

The exponentiated terms are cached as an (n, n) matrix, so that removing one
member only requires adding its row back into the survivors' fitness; no
other cached term is invalidated by a removal.

References:
    E. Zitzler and S. Künzli, "Indicator-Based Selection in Multiobjective
    Search," in Proc. PPSN VIII, 2004, pp. 832-842.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

import numpy as np

from ibex.comparators import FITNESS_ATTRIBUTE
from ibex.population import Population
from ibex.primitives import dominates_matrix


class IndicatorFitnessEvaluator(ABC):
    """Base class for pairwise indicator fitness.

    Args:
        kappa: Scaling factor controlling selection pressure (default 0.05).
        normalize: If True, objectives are min-max scaled to the evaluated
            population's bounds and indicator values are divided by their
            largest absolute value. Both scalings are frozen by ``evaluate``
            and reused by every subsequent ``remove_and_update``. If False,
            raw objectives are used with c = 1.

    Raises:
        ValueError: If kappa is not positive.
    """

    def __init__(self, kappa: float = 0.05, normalize: bool = True) -> None:
        if kappa <= 0:
            raise ValueError(f"kappa must be positive, got {kappa}")
        self.kappa = kappa
        self.normalize = normalize
        self._contributions: np.ndarray | None = None
        self._fitness: np.ndarray | None = None
        self._scale = 1.0

    @property
    def larger_values_preferred(self) -> bool:
        """Fitness is the negated sum of penalties, so larger is better."""
        return True

    @property
    def fitness(self) -> np.ndarray:
        """Fitness of the currently tracked population, in population order."""
        if self._fitness is None:
            raise RuntimeError("fitness has not been evaluated yet")
        return self._fitness.copy()

    @property
    def scale(self) -> float:
        """The indicator scaling constant c used by the last evaluation."""
        return self._scale

    @abstractmethod
    def indicator_matrix(self, objectives: np.ndarray) -> np.ndarray:
        """Return M with M[i, j] = I(x_i, x_j), shape (n, n)."""

    def _prepare(self, objectives: np.ndarray) -> np.ndarray:
        if not self.normalize:
            return objectives
        lower = objectives.min(axis=0)
        span = objectives.max(axis=0) - lower
        return (objectives - lower) / np.where(span > 0, span, 1.0)

    def evaluate(self, population: Population) -> None:
        """Assign fitness to every member of ``population``.

        Performs O(n^2) indicator evaluations and stores the result in each
        solution's ``fitness`` attribute.
        """
        n = len(population)
        if n == 0:
            self._contributions = np.empty((0, 0))
            self._fitness = np.empty(0)
            return

        matrix = self.indicator_matrix(self._prepare(population.objectives))
        self._scale = 1.0
        if self.normalize:
            max_abs = float(np.max(np.abs(matrix)))
            if max_abs > 0:
                self._scale = max_abs

        contributions = np.exp(-matrix / (self._scale * self.kappa))
        np.fill_diagonal(contributions, 0.0)
        self._contributions = contributions
        # column i holds the penalties every other member imposes on x_i
        self._fitness = -contributions.sum(axis=0)
        self._store(population, self._fitness)

    def remove_and_update(self, population: Population, index: int) -> None:
        """Remove the member at ``index`` and repair the survivors' fitness.

        Only the removed member's own contributions are undone, in O(n).

        Raises:
            RuntimeError: If ``evaluate`` has not been called for this
                population.
            IndexError: If ``index`` is out of range.
        """
        if self._contributions is None or self._fitness is None:
            raise RuntimeError("remove_and_update called before evaluate")
        n = len(population)
        if self._contributions.shape[0] != n:
            raise RuntimeError(
                f"population has {n} members but fitness was evaluated for {self._contributions.shape[0]}"
            )
        if index < -n or index >= n:
            raise IndexError(f"index {index} is out of bounds for population with {n} solutions")
        index %= n

        keep = np.arange(n) != index
        fitness = (self._fitness + self._contributions[index])[keep]
        self._fitness = fitness
        self._contributions = self._contributions[np.ix_(keep, keep)]
        population.remove_at(index)
        self._store(population, fitness)

    @staticmethod
    def _store(population: Population, fitness: np.ndarray) -> None:
        for solution, value in zip(population, fitness, strict=True):
            solution.attributes[FITNESS_ATTRIBUTE] = float(value)


class AdditiveEpsilonIndicatorFitnessEvaluator(IndicatorFitnessEvaluator):
    """IBEA fitness from the binary additive epsilon indicator.

    I(a, b) = max_k (a_k - b_k): the smallest shift for which a weakly
    dominates b.
    """

    def indicator_matrix(self, objectives: np.ndarray) -> np.ndarray:
        return np.max(objectives[:, np.newaxis, :] - objectives[np.newaxis, :, :], axis=2)


class HypervolumeFitnessEvaluator(IndicatorFitnessEvaluator):
    """IBEA fitness from the hypervolume difference indicator I_HD.

    I(a, b) = HV(b) - HV(a) if a dominates b, else HV({a, b}) - HV(a).

    Args:
        kappa: Scaling factor (default 0.05).
        normalize: See IndicatorFitnessEvaluator.
        rho: Reference point coordinate in normalized space (default 2.0).
        reference_point: Explicit reference point; overrides rho. Without it
            and without normalization the point max(F) + 1 is used.
    """

    def __init__(
        self,
        kappa: float = 0.05,
        normalize: bool = True,
        rho: float = 2.0,
        reference_point: Sequence[float] | np.ndarray | None = None,
    ) -> None:
        super().__init__(kappa=kappa, normalize=normalize)
        self.rho = rho
        self.reference_point = None if reference_point is None else np.asarray(reference_point, dtype=np.float64)

    def _reference(self, objectives: np.ndarray) -> np.ndarray:
        if self.reference_point is not None:
            return self.reference_point
        if self.normalize:
            return np.full(objectives.shape[1], self.rho)
        return objectives.max(axis=0) + 1.0

    def indicator_matrix(self, objectives: np.ndarray) -> np.ndarray:
        ref = self._reference(objectives)
        volume = np.prod(np.clip(ref - objectives, 0.0, None), axis=1)
        corner = np.maximum(objectives[:, np.newaxis, :], objectives[np.newaxis, :, :])
        overlap = np.prod(np.clip(ref - corner, 0.0, None), axis=2)
        union = volume[:, np.newaxis] + volume[np.newaxis, :] - overlap
        return np.where(
            dominates_matrix(objectives),
            volume[np.newaxis, :] - volume[:, np.newaxis],
            union - volume[:, np.newaxis],
        )
