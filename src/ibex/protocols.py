"""Protocol definitions for the collaborators of the optimization core.

The evolutionary loop only talks to its surroundings through these
interfaces, so problems, operators and quality measures can be swapped
without touching the algorithm:

1. **Problem**: shapes blank solutions and evaluates them.
2. **Initialization**: produces the starting population.
3. **Selection**: picks parent tuples from a population.
4. **Variation**: turns parent tuples into offspring.
5. **DominanceComparator**: the {-1, 0, 1} relation used by archives,
   selection and truncation.
6. **Indicator**: scalar quality of an approximation set.

Example usage:
    ```python
    def one_generation(population, selection: Selection, variation: Variation):
        offspring = []
        while len(offspring) < len(population):
            parents = selection.select(variation.arity, population)
            offspring.extend(variation.evolve(parents))
        return offspring
    ```
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from ibex.population import Population, Solution


@runtime_checkable
class Problem(Protocol):
    """A multi-objective problem.

    ``evaluate`` fills in the objectives (and constraints) of a solution in
    place. It may raise on invalid input; the optimizer never catches it.
    ``close`` releases external resources such as simulator processes.
    """

    @property
    def n_vars(self) -> int: ...

    @property
    def n_obj(self) -> int: ...

    @property
    def n_constraints(self) -> int: ...

    def new_solution(self) -> Solution: ...

    def evaluate(self, solution: Solution) -> None: ...

    def close(self) -> None: ...


@runtime_checkable
class BatchProblem(Problem, Protocol):
    """A problem that can evaluate an ordered batch of solutions at once.

    Implementations may evaluate in parallel internally, but must return only
    after every solution of the batch has been evaluated.
    """

    def evaluate_all(self, solutions: Sequence[Solution]) -> None: ...


@runtime_checkable
class Initialization(Protocol):
    """Produces the starting population (called exactly once per run)."""

    def initialize(self) -> list[Solution]: ...


@runtime_checkable
class Selection(Protocol):
    """Selects ``arity`` parents from a population.

    The same solution may be returned more than once.
    """

    def select(self, arity: int, population: Population) -> list[Solution]: ...


@runtime_checkable
class Variation(Protocol):
    """Creates offspring from a tuple of parents.

    ``arity`` is the number of parents ``evolve`` expects; the number of
    offspring returned may differ from it.
    """

    @property
    def arity(self) -> int: ...

    def evolve(self, parents: Sequence[Solution]) -> list[Solution]: ...


@runtime_checkable
class DominanceComparator(Protocol):
    """Binary relation over two solutions.

    ``compare(a, b)`` returns -1 if a is better, 1 if b is better and 0 if
    they are equal or mutually non-dominated. Implementations must satisfy
    ``compare(a, a) == 0`` and ``compare(a, b) == -compare(b, a)``; they need
    not be transitive, so results must never be fed to a sorting routine.
    """

    def compare(self, a: Solution, b: Solution) -> int: ...


@runtime_checkable
class Indicator(Protocol):
    """Scalar quality of an approximation set.

    Reference data (if any) is bound at construction; ``evaluate`` must
    accept an empty approximation set and return the indicator's worst value.
    """

    def evaluate(self, approximation_set: Population | Sequence[Solution]) -> float: ...
