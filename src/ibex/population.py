"""Solution and population containers.

This module provides the two primitive data structures every other part of
ibex operates on:

- Solution: decision variables, objective values, constraint values and an
  open attribute map (e.g. the cached IBEA fitness)
- Population: a resizable, unordered collection of solutions

Solutions have a fixed shape: the number of variables, objectives and
constraints is decided at construction and can never change afterwards.
Membership in a Population is decided by identity, so two distinct solutions
with the same objective vector may coexist unless a subclass enforces
dominance (see ibex.archive).
"""

from collections.abc import Iterable, Iterator
from typing import Any

import numpy as np


class Solution:
    """A candidate solution to a multi-objective problem.

    Objectives follow the minimization convention. Constraints are stored as
    violation values where 0 means satisfied; any non-zero entry makes the
    solution infeasible.

    Attributes:
        variables: Decision variables, shape (n_vars,). The dtype is opaque to
            the optimizer; only the variation operators interpret it.
        objectives: Objective values, shape (n_obj,). NaN until evaluated.
        constraints: Constraint violation values, shape (n_constraints,).
        attributes: Free-form annotations keyed by name.

    Example:
        >>> s = Solution.blank(n_vars=3, n_obj=2)
        >>> s.set_objectives([1.0, 2.0])
        >>> s.objectives
        array([1., 2.])
        >>> s.feasible
        True
    """

    def __init__(
        self,
        variables: np.ndarray | Iterable[Any],
        objectives: np.ndarray | Iterable[float],
        constraints: np.ndarray | Iterable[float] | None = None,
        attributes: dict[str, Any] | None = None,
    ) -> None:
        self.variables = np.array(variables)
        self._objectives = np.array(objectives, dtype=np.float64)
        if self._objectives.ndim != 1:
            raise ValueError(f"objectives must be 1D, got shape {self._objectives.shape}")
        if constraints is None:
            self._constraints = np.zeros(0, dtype=np.float64)
        else:
            self._constraints = np.array(constraints, dtype=np.float64)
            if self._constraints.ndim != 1:
                raise ValueError(f"constraints must be 1D, got shape {self._constraints.shape}")
        self.attributes: dict[str, Any] = dict(attributes) if attributes else {}

    @classmethod
    def blank(cls, n_vars: int, n_obj: int, n_constraints: int = 0) -> "Solution":
        """Create an unevaluated solution of the given shape.

        Variables start at zero, objectives at NaN and constraints at zero.
        """
        if n_obj <= 0:
            raise ValueError(f"n_obj must be positive, got {n_obj}")
        return cls(
            variables=np.zeros(n_vars, dtype=np.float64),
            objectives=np.full(n_obj, np.nan),
            constraints=np.zeros(n_constraints, dtype=np.float64),
        )

    @property
    def objectives(self) -> np.ndarray:
        return self._objectives

    @property
    def constraints(self) -> np.ndarray:
        return self._constraints

    @property
    def n_vars(self) -> int:
        return int(self.variables.shape[0]) if self.variables.ndim else 0

    @property
    def n_obj(self) -> int:
        return int(self._objectives.shape[0])

    @property
    def n_constraints(self) -> int:
        return int(self._constraints.shape[0])

    def set_objectives(self, values: np.ndarray | Iterable[float]) -> None:
        """Overwrite all objective values.

        Raises:
            ValueError: If the number of values differs from n_obj.
        """
        arr = np.asarray(values, dtype=np.float64).reshape(-1)
        if arr.shape[0] != self.n_obj:
            raise ValueError(f"expected {self.n_obj} objective values, got {arr.shape[0]}")
        self._objectives = arr.copy()

    def set_constraints(self, values: np.ndarray | Iterable[float]) -> None:
        """Overwrite all constraint values.

        Raises:
            ValueError: If the number of values differs from n_constraints.
        """
        arr = np.asarray(values, dtype=np.float64).reshape(-1)
        if arr.shape[0] != self.n_constraints:
            raise ValueError(f"expected {self.n_constraints} constraint values, got {arr.shape[0]}")
        self._constraints = arr.copy()

    @property
    def evaluated(self) -> bool:
        """True once every objective holds a number."""
        return not bool(np.any(np.isnan(self._objectives)))

    @property
    def constraint_violation(self) -> float:
        """Aggregate constraint violation (sum of absolute non-zero values)."""
        return float(np.sum(np.abs(self._constraints)))

    @property
    def feasible(self) -> bool:
        return self.constraint_violation == 0.0

    def copy(self) -> "Solution":
        """Return an independent copy.

        Arrays are copied; the attribute map is copied shallowly so cached
        values are carried over but can be replaced without aliasing.
        """
        return Solution(
            variables=self.variables.copy(),
            objectives=self._objectives.copy(),
            constraints=self._constraints.copy(),
            attributes=self.attributes,
        )

    def __repr__(self) -> str:
        return f"Solution(objectives={self._objectives.tolist()}, constraints={self._constraints.tolist()})"


class Population:
    """Mutable, unordered collection of solutions.

    Solutions are held by reference. ``in`` and ``remove`` test identity,
    never value equality, so the same objective vector may appear more than
    once.

    Example:
        >>> pop = Population([Solution([0.0], [1.0, 2.0]), Solution([1.0], [2.0, 1.0])])
        >>> len(pop)
        2
        >>> pop.objectives
        array([[1., 2.],
               [2., 1.]])
    """

    def __init__(self, solutions: Iterable[Solution] = ()) -> None:
        self._solutions: list[Solution] = []
        self.add_all(solutions)

    def add(self, solution: Solution) -> bool:
        """Append a solution. Always succeeds for a plain population."""
        if not isinstance(solution, Solution):
            raise TypeError(f"expected a Solution, got {type(solution).__name__}")
        self._solutions.append(solution)
        return True

    def add_all(self, solutions: Iterable[Solution]) -> bool:
        """Add each solution in turn.

        Returns:
            True if at least one solution was added.
        """
        added = False
        for solution in solutions:
            added |= self.add(solution)
        return added

    def remove_at(self, index: int) -> Solution:
        """Remove and return the solution at ``index``."""
        return self._solutions.pop(index)

    def remove(self, solution: Solution) -> bool:
        """Remove ``solution`` (by identity). Returns False if absent."""
        for i, member in enumerate(self._solutions):
            if member is solution:
                del self._solutions[i]
                return True
        return False

    def clear(self) -> None:
        self._solutions.clear()

    def copy(self) -> "Population":
        """Shallow snapshot: a new container holding the same solutions."""
        return Population(self._solutions)

    @property
    def objectives(self) -> np.ndarray:
        """Objective matrix of shape (n, n_obj); (0, 0) when empty."""
        if not self._solutions:
            return np.empty((0, 0), dtype=np.float64)
        return np.stack([s.objectives for s in self._solutions])

    def __len__(self) -> int:
        return len(self._solutions)

    def __iter__(self) -> Iterator[Solution]:
        return iter(list(self._solutions))

    def __getitem__(self, idx: int) -> Solution:
        if not isinstance(idx, (int, np.integer)):
            raise TypeError(f"indices must be integers, got {type(idx).__name__}")
        n = len(self._solutions)
        if idx < -n or idx >= n:
            raise IndexError(f"index {idx} is out of bounds for population with {n} solutions")
        return self._solutions[idx]

    def __contains__(self, item: object) -> bool:
        return any(member is item for member in self._solutions)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(size={len(self)})"
