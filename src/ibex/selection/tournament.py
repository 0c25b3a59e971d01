"""Comparator-driven tournament selection."""

import numpy as np

from ibex.population import Population, Solution
from ibex.protocols import DominanceComparator


class TournamentSelection:
    """Select parents by repeated tournaments under a comparator.

    Each tournament draws ``size`` members uniformly with replacement. A
    challenger replaces the current winner only when the comparator strictly
    prefers it, so ties keep the earlier draw.

    Args:
        comparator: Decides each pairing; in IBEA a FitnessComparator.
        size: Number of competitors per tournament (default: binary).
        rng: Random number generator.

    Example:
        >>> selection = TournamentSelection(FitnessComparator(larger_values_preferred=True), rng=rng)
        >>> parents = selection.select(2, population)
    """

    def __init__(
        self,
        comparator: DominanceComparator,
        size: int = 2,
        rng: np.random.Generator | None = None,
    ) -> None:
        if size < 1:
            raise ValueError(f"tournament size must be at least 1, got {size}")
        self.comparator = comparator
        self.size = size
        self.rng = rng if rng is not None else np.random.default_rng()

    def select(self, arity: int, population: Population) -> list[Solution]:
        """Run ``arity`` independent tournaments over ``population``.

        Raises:
            ValueError: If the population is empty.
        """
        if len(population) == 0:
            raise ValueError("cannot select from an empty population")
        return [self._tournament(population) for _ in range(arity)]

    def _tournament(self, population: Population) -> Solution:
        candidates = self.rng.integers(0, len(population), size=self.size)
        winner = population[int(candidates[0])]
        for c in candidates[1:]:
            challenger = population[int(c)]
            if self.comparator.compare(challenger, winner) < 0:
                winner = challenger
        return winner

    def __repr__(self) -> str:
        return f"TournamentSelection(comparator={self.comparator!r}, size={self.size})"
