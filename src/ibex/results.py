"""Result type returned by IBEA runs.

IBEAResult is a frozen dataclass: the population it holds is a snapshot
container and the fitness array is copied on construction, so later
generations of a still-running optimizer never change a result that was
already handed out.
"""

from dataclasses import dataclass

import numpy as np

from ibex.archive import NondominatedPopulation
from ibex.population import Population
from ibex.primitives import non_dominated_sort


@dataclass(frozen=True)
class IBEAResult:
    """Results from an IBEA run.

    Attributes:
        population: The population after the last completed generation.
        fitness: IBEA fitness of each member, shape (n,). Larger is better.
        archive: Non-dominated solutions found during the run, or None if
            the run kept no archive.
        generations: Number of generations completed.
        evaluations: Total number of problem evaluations performed.

    Example:
        >>> result = ibea(init, evaluate, crossover, mutate, pop_size=20, n_generations=50, seed=1)
        >>> result.objectives.shape
        (20, 2)
        >>> front = result.pareto_front
    """

    population: Population
    fitness: np.ndarray
    archive: NondominatedPopulation | None
    generations: int
    evaluations: int

    def __post_init__(self) -> None:
        """Validate the fitness array and copy it.

        Raises:
            TypeError: If fitness is not a numpy array.
            ValueError: If fitness is not 1D or does not match the population size.
        """
        if not isinstance(self.fitness, np.ndarray):
            raise TypeError(f"fitness must be a numpy array, got {type(self.fitness).__name__}")
        if self.fitness.ndim != 1:
            raise ValueError(f"fitness must be 1D, got shape {self.fitness.shape}")
        n = len(self.population)
        if self.fitness.shape[0] != n:
            raise ValueError(f"fitness has {self.fitness.shape[0]} elements, expected {n} to match population size")
        object.__setattr__(self, "fitness", self.fitness.copy())

    @property
    def objectives(self) -> np.ndarray:
        """Objective matrix of the final population, shape (n, n_obj)."""
        return self.population.objectives

    @property
    def pareto_front(self) -> Population:
        """Rank-0 members of the final population as a new Population."""
        if len(self.population) == 0:
            return Population()
        rank = non_dominated_sort(self.population.objectives)
        return Population(s for s, r in zip(self.population, rank, strict=True) if r == 0)
