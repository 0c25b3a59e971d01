"""Non-dominated archives.

- NondominatedPopulation: keeps only mutually non-dominated solutions
- EpsilonBoxDominanceArchive: additionally keeps at most one solution per
  epsilon box
- new_archive: builds the right archive for an (optional) epsilon vector

Insertion is two-phase: the candidate is compared against every member to
collect the members it dominates (or to reject it outright), and only then
are those members evicted and the candidate appended. Rejection is an
ordinary outcome reported by ``add`` returning False, never an exception.
"""

from collections.abc import Iterable, Sequence

import numpy as np

from ibex.comparators import (
    AggregateConstraintComparator,
    ChainedComparator,
    EpsilonBoxConstraintComparator,
    EpsilonBoxDominanceComparator,
    ParetoDominanceComparator,
)
from ibex.population import Population, Solution
from ibex.protocols import DominanceComparator


def default_comparator() -> ChainedComparator:
    """Feasibility first, then Pareto dominance."""
    return ChainedComparator(AggregateConstraintComparator(), ParetoDominanceComparator())


class NondominatedPopulation(Population):
    """Population restricted to mutually non-dominated solutions.

    Args:
        solutions: Initial candidates, added one at a time.
        comparator: Dominance relation used to accept or reject candidates.
            Defaults to feasibility-then-Pareto.
        duplicate_tolerance: Candidates within this Euclidean distance of a
            non-dominated member's objectives are treated as duplicates and
            rejected.

    Example:
        >>> archive = NondominatedPopulation()
        >>> archive.add(Solution([], [1.0, 1.0]))
        True
        >>> archive.add(Solution([], [2.0, 2.0]))
        False
        >>> archive.add(Solution([], [0.5, 0.5]))
        True
        >>> len(archive)
        1
    """

    def __init__(
        self,
        solutions: Iterable[Solution] = (),
        comparator: DominanceComparator | None = None,
        duplicate_tolerance: float = 1e-10,
    ) -> None:
        self.comparator = comparator if comparator is not None else default_comparator()
        self.duplicate_tolerance = duplicate_tolerance
        super().__init__(solutions)

    def _is_duplicate(self, a: Solution, b: Solution) -> bool:
        return bool(np.linalg.norm(a.objectives - b.objectives) <= self.duplicate_tolerance)

    def _reject(self, candidate: Solution, member: Solution) -> bool:
        """Whether a non-dominated ``member`` still blocks ``candidate``."""
        return self._is_duplicate(candidate, member)

    def _dominated_members(self, candidate: Solution) -> list[int] | None:
        """Indices of members the candidate dominates, or None to reject it."""
        evict: list[int] = []
        for i, member in enumerate(self._solutions):
            flag = self.comparator.compare(candidate, member)
            if flag < 0:
                evict.append(i)
            elif flag > 0:
                return None
            elif self._reject(candidate, member):
                return None
        return evict

    def add(self, solution: Solution) -> bool:
        """Insert ``solution`` if no member dominates it.

        Members dominated by the newcomer are evicted.

        Returns:
            True if the solution was inserted.
        """
        if not isinstance(solution, Solution):
            raise TypeError(f"expected a Solution, got {type(solution).__name__}")
        evict = self._dominated_members(solution)
        if evict is None:
            return False
        for i in reversed(evict):
            del self._solutions[i]
        self._solutions.append(solution)
        return True

    def copy(self) -> "NondominatedPopulation":
        clone = NondominatedPopulation(comparator=self.comparator, duplicate_tolerance=self.duplicate_tolerance)
        clone._solutions = list(self._solutions)
        return clone


class EpsilonBoxDominanceArchive(NondominatedPopulation):
    """Non-dominated archive holding at most one solution per epsilon box.

    Args:
        epsilons: Box sizes (scalar or per objective). Ignored when
            ``comparator`` is given.
        solutions: Initial candidates.
        comparator: A prepared epsilon-box comparator. Defaults to an
            EpsilonBoxConstraintComparator over ``epsilons``.

    Example:
        >>> archive = EpsilonBoxDominanceArchive([0.5, 0.5])
        >>> archive.add(Solution([], [0.4, 0.4]))
        True
        >>> archive.add(Solution([], [0.1, 0.1]))  # same box, closer to the corner
        True
        >>> archive.objectives
        array([[0.1, 0.1]])
    """

    def __init__(
        self,
        epsilons: float | Sequence[float] | np.ndarray | None = None,
        solutions: Iterable[Solution] = (),
        comparator: EpsilonBoxDominanceComparator | None = None,
    ) -> None:
        if comparator is None:
            if epsilons is None:
                raise ValueError("EpsilonBoxDominanceArchive requires epsilons or an epsilon-box comparator")
            comparator = EpsilonBoxConstraintComparator(epsilons)
        elif not isinstance(comparator, EpsilonBoxDominanceComparator):
            raise TypeError(f"comparator must be an EpsilonBoxDominanceComparator, got {type(comparator).__name__}")
        self.box_comparator: EpsilonBoxDominanceComparator = comparator
        super().__init__(solutions, comparator=comparator)

    def _reject(self, candidate: Solution, member: Solution) -> bool:
        return self.box_comparator.same_box(candidate, member) or self._is_duplicate(candidate, member)

    def box_indices(self) -> np.ndarray:
        """Box index of every member, shape (n, n_obj)."""
        if not self._solutions:
            return np.empty((0, 0), dtype=np.int64)
        return np.stack([self.box_comparator.box_index(s) for s in self._solutions])

    def copy(self) -> "EpsilonBoxDominanceArchive":
        clone = EpsilonBoxDominanceArchive(comparator=self.box_comparator)
        clone._solutions = list(self._solutions)
        return clone


def new_archive(epsilon: float | Sequence[float] | None = None) -> NondominatedPopulation:
    """Create an empty archive.

    Returns a plain feasibility-then-Pareto NondominatedPopulation when
    ``epsilon`` is None or empty, otherwise an EpsilonBoxDominanceArchive.
    """
    if epsilon is None or np.size(epsilon) == 0:
        return NondominatedPopulation()
    return EpsilonBoxDominanceArchive(epsilon)
