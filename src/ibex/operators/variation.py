"""Solution-level initialization and variation.

These adapt the array operators of ibex.operators.standard (or any user
callables with the same signatures) to the Initialization and Variation
protocols consumed by IBEA.
"""

from collections.abc import Callable, Sequence

import numpy as np

from ibex.operators.standard import Crossover, Mutation
from ibex.population import Solution
from ibex.protocols import Problem


def _offspring(parent: Solution, variables: np.ndarray) -> Solution:
    """Unevaluated child with the parent's shape and no cached attributes."""
    return Solution(
        variables=variables,
        objectives=np.full(parent.n_obj, np.nan),
        constraints=np.zeros(parent.n_constraints, dtype=np.float64),
    )


class GAVariation:
    """Crossover followed by mutation of every child.

    With a crossover the operator takes two parents and returns two
    children; without one it takes a single parent and returns one mutated
    child.

    Args:
        crossover: ``(p1, p2) -> (c1, c2)`` on variable vectors, or None.
        mutate: ``x -> x'`` on a variable vector.

    Example:
        >>> variation = GAVariation(sbx_crossover(seed=1), polynomial_mutation(seed=1))
        >>> variation.arity
        2
        >>> children = variation.evolve([a, b])
    """

    def __init__(self, crossover: Crossover | None, mutate: Mutation) -> None:
        self._crossover = crossover
        self._mutate = mutate

    @property
    def arity(self) -> int:
        return 1 if self._crossover is None else 2

    def evolve(self, parents: Sequence[Solution]) -> list[Solution]:
        if len(parents) != self.arity:
            raise ValueError(f"expected {self.arity} parents, got {len(parents)}")
        if self._crossover is None:
            variables = [parents[0].variables.copy()]
        else:
            variables = list(self._crossover(parents[0].variables, parents[1].variables))
        return [_offspring(parents[i % len(parents)], self._mutate(x)) for i, x in enumerate(variables)]


class RandomInitialization:
    """Create ``size`` solutions from a per-individual sampler.

    Injected solutions (e.g. known good designs, possibly already evaluated)
    come first; the sampler fills the remaining slots with unevaluated ones.

    Args:
        problem: Supplies correctly shaped blank solutions.
        size: Number of solutions to create.
        init: Sampler ``rng -> (n_vars,)``.
        rng: Generator passed to ``init``.
        injected: Solutions to include as-is.
    """

    def __init__(
        self,
        problem: Problem,
        size: int,
        init: Callable[[np.random.Generator], np.ndarray],
        rng: np.random.Generator | None = None,
        injected: Sequence[Solution] = (),
    ) -> None:
        if size <= 0:
            raise ValueError(f"size must be positive, got {size}")
        if len(injected) > size:
            raise ValueError(f"cannot inject {len(injected)} solutions into a population of {size}")
        self.injected = list(injected)
        self.problem = problem
        self.size = size
        self._init = init
        self._rng = rng if rng is not None else np.random.default_rng()

    def initialize(self) -> list[Solution]:
        solutions = list(self.injected)
        for _ in range(self.size - len(solutions)):
            solution = self.problem.new_solution()
            variables = np.asarray(self._init(self._rng))
            if variables.shape != (self.problem.n_vars,):
                raise ValueError(f"init must return shape ({self.problem.n_vars},), got {variables.shape}")
            solution.variables = variables
            solutions.append(solution)
        return solutions
