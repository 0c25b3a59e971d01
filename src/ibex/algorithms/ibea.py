"""Indicator-Based Evolutionary Algorithm (IBEA).

Two entry points are provided:

- IBEA: the algorithm as an explicit state machine over Problem,
  Initialization, Selection and Variation collaborators. ``initialize()``
  runs once; each ``iterate()`` performs one generation. Termination is
  decided by the caller between generations.
- ibea(): a functional API over plain per-individual callables for
  initialization, evaluation, crossover and mutation.

One generation:
    1. Select parents by binary fitness tournament and vary them until at
       least N offspring exist (N = current population size).
    2. Evaluate the offspring, each exactly once, as one ordered batch.
    3. Merge offspring into the population and recompute fitness.
    4. Remove the worst member, repairing the survivors' fitness
       incrementally, until N members remain.

Example:
    >>> from ibex.algorithms.ibea import ibea
    >>> from ibex.operators import polynomial_mutation, sbx_crossover
    >>>
    >>> def init(rng):
    ...     return rng.uniform(0, 1, size=3)
    >>>
    >>> def evaluate(x):
    ...     return np.array([x.sum(), (1 - x).sum()])
    >>>
    >>> result = ibea(
    ...     init=init,
    ...     evaluate=evaluate,
    ...     crossover=sbx_crossover(seed=42),
    ...     mutate=polynomial_mutation(seed=42),
    ...     pop_size=20,
    ...     n_generations=50,
    ...     seed=42,
    ... )
    >>> result.objectives.shape
    (20, 2)

References:
    Zitzler, E., & Kuenzli, S. (2004). Indicator-based selection in
    multiobjective search. PPSN VIII, LNCS 3242, 832-842.
"""

import logging
from collections.abc import Callable, Sequence

import numpy as np

from ibex.archive import NondominatedPopulation, new_archive
from ibex.comparators import FitnessComparator
from ibex.fitness import IndicatorFitnessEvaluator
from ibex.operators.standard import Crossover, Mutation
from ibex.operators.variation import GAVariation, RandomInitialization
from ibex.population import Population, Solution
from ibex.problem import FunctionProblem, evaluate_all
from ibex.protocols import Initialization, Problem, Selection, Variation
from ibex.registry import FitnessRegistry
from ibex.results import IBEAResult
from ibex.selection.tournament import TournamentSelection

logger = logging.getLogger(__name__)


class IBEA:
    """IBEA over explicit collaborators.

    Args:
        problem: Evaluates solutions. Evaluation errors propagate unchanged.
        initialization: Produces the starting population (called once).
        variation: Produces offspring; its arity sets how many parents are
            selected per call.
        fitness_evaluator: Pairwise indicator fitness with incremental removal.
        archive: Optional archive receiving every evaluated solution.
        selection: Parent selection; defaults to a binary tournament on
            fitness.
        rng: Generator for the default selection.

    Example:
        ```python
        algorithm = IBEA(problem, initialization, variation, AdditiveEpsilonIndicatorFitnessEvaluator())
        algorithm.initialize()
        while algorithm.n_evaluations < 10_000:
            algorithm.iterate()
        front = algorithm.result().pareto_front
        ```
    """

    def __init__(
        self,
        problem: Problem,
        initialization: Initialization,
        variation: Variation,
        fitness_evaluator: IndicatorFitnessEvaluator,
        archive: NondominatedPopulation | None = None,
        selection: Selection | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.problem = problem
        self.initialization = initialization
        self.variation = variation
        self._fitness_evaluator = fitness_evaluator
        self._fitness_comparator = FitnessComparator(fitness_evaluator.larger_values_preferred)
        self._selection = selection if selection is not None else TournamentSelection(self._fitness_comparator, rng=rng)
        self._archive = archive
        self._population = Population()
        self._evaluations = 0
        self._generations = 0
        self._initialized = False

    @property
    def population(self) -> Population:
        """Snapshot of the current population."""
        return self._population.copy()

    @property
    def archive(self) -> NondominatedPopulation | None:
        return self._archive

    @property
    def fitness_evaluator(self) -> IndicatorFitnessEvaluator:
        return self._fitness_evaluator

    @property
    def fitness_comparator(self) -> FitnessComparator:
        return self._fitness_comparator

    @property
    def selection(self) -> Selection:
        return self._selection

    @property
    def n_evaluations(self) -> int:
        return self._evaluations

    @property
    def n_generations(self) -> int:
        return self._generations

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def _evaluate(self, solutions: Sequence[Solution], skip_evaluated: bool = False) -> None:
        # only initial solutions may arrive pre-evaluated; offspring are always evaluated
        pending = [s for s in solutions if not s.evaluated] if skip_evaluated else list(solutions)
        evaluate_all(self.problem, pending)
        self._evaluations += len(solutions)
        if self._archive is not None:
            self._archive.add_all(solutions)

    def initialize(self) -> None:
        """Create, evaluate and assign fitness to the starting population.

        Initial solutions that arrive already evaluated are not re-evaluated
        but still count towards ``n_evaluations``.

        Raises:
            RuntimeError: If the algorithm is already initialized.
        """
        if self._initialized:
            raise RuntimeError("IBEA is already initialized")
        solutions = list(self.initialization.initialize())
        self._evaluate(solutions, skip_evaluated=True)
        self._population.add_all(solutions)
        self._fitness_evaluator.evaluate(self._population)
        self._initialized = True
        logger.info(f"IBEA initialized with {len(self._population)} solutions ({type(self._fitness_evaluator).__name__})")

    def iterate(self) -> None:
        """Run one generation.

        Raises:
            RuntimeError: If called before ``initialize()``.
        """
        if not self._initialized:
            raise RuntimeError("initialize() must be called before iterate()")
        size = len(self._population)

        offspring: list[Solution] = []
        while len(offspring) < size:
            parents = self._selection.select(self.variation.arity, self._population)
            offspring.extend(self.variation.evolve(parents))

        self._evaluate(offspring)
        self._population.add_all(offspring)
        self._fitness_evaluator.evaluate(self._population)

        while len(self._population) > size:
            self._fitness_evaluator.remove_and_update(self._population, self._find_worst())

        self._generations += 1
        logger.debug(
            f"Generation {self._generations}: {len(offspring)} offspring, {self._evaluations} evaluations"
        )

    def step(self) -> None:
        """Initialize on the first call, iterate on every later one."""
        if self._initialized:
            self.iterate()
        else:
            self.initialize()

    def _find_worst(self) -> int:
        # linear scan; ties keep the first index encountered
        worst = 0
        for i in range(1, len(self._population)):
            if self._fitness_comparator.compare(self._population[worst], self._population[i]) < 0:
                worst = i
        return worst

    def run(self, n_generations: int, callback: Callable[[IBEAResult, int], bool] | None = None) -> IBEAResult:
        """Run up to ``n_generations`` generations.

        Args:
            n_generations: Generations to run after initialization.
            callback: Called before each generation with the current result
                and the generation index; returning True stops the run.

        Returns:
            The result after the last completed generation.
        """
        if n_generations < 0:
            raise ValueError(f"n_generations must be non-negative, got {n_generations}")
        if not self._initialized:
            self.initialize()
        for gen in range(n_generations):
            if callback is not None and callback(self.result(), gen):
                logger.info(f"IBEA stopped by callback at generation {gen}")
                break
            self.iterate()
        return self.result()

    def result(self) -> IBEAResult:
        """Snapshot of the current state as an IBEAResult.

        Raises:
            RuntimeError: If the algorithm has not been initialized.
        """
        if not self._initialized:
            raise RuntimeError("IBEA has not been initialized")
        return IBEAResult(
            population=self.population,
            fitness=self._fitness_evaluator.fitness,
            archive=self._archive.copy() if self._archive is not None else None,
            generations=self._generations,
            evaluations=self._evaluations,
        )

    def close(self) -> None:
        """Release the problem's resources."""
        self.problem.close()


def ibea(
    init: Callable[[np.random.Generator], np.ndarray],
    evaluate: Callable[[np.ndarray], np.ndarray],
    crossover: Crossover,
    mutate: Mutation,
    pop_size: int,
    n_generations: int,
    seed: int | None = None,
    callback: Callable[[IBEAResult, int], bool] | None = None,
    indicator: str = "epsilon",
    kappa: float = 0.05,
    epsilon: float | Sequence[float] | None = None,
    constraints: Callable[[np.ndarray], np.ndarray] | None = None,
    n_workers: int = 1,
) -> IBEAResult:
    """Run IBEA on per-individual callables.

    Args:
        init: Initialize one individual.
            Signature: (rng,) -> (n_vars,)
        evaluate: Evaluate one individual. Objectives are minimized.
            Signature: (n_vars,) -> (n_obj,)
        crossover: Cross two parents into two children.
            Signature: (n_vars,), (n_vars,) -> ((n_vars,), (n_vars,))
        mutate: Mutate one individual.
            Signature: (n_vars,) -> (n_vars,)
        pop_size: Population size N.
        n_generations: Number of generations to run.
        seed: Random seed for initialization and selection.
        callback: Called at the start of each generation.
            Signature: (result: IBEAResult, generation: int) -> bool
            Returning True stops the run early.
        indicator: Fitness indicator name or unique prefix ("epsilon",
            "hypervolume").
        kappa: Fitness scaling factor.
        epsilon: Epsilon-box sizes for the archive; None keeps a plain
            non-dominated archive.
        constraints: Optional constraint function; non-zero values are
            violations. Signature: (n_vars,) -> (n_constraints,)
        n_workers: Parallel workers for evaluation (1 = sequential,
            -1 = all CPU cores). Callables must be picklable when parallel.

    Returns:
        IBEAResult with the final population, its fitness and the archive.

    Raises:
        ValueError: If pop_size is not positive, n_generations is negative
            or n_workers is invalid.
        ConfigurationError: If the indicator name is unknown.
    """
    if pop_size <= 0:
        raise ValueError(f"pop_size must be positive, got {pop_size}")
    if n_generations < 0:
        raise ValueError(f"n_generations must be non-negative, got {n_generations}")
    if n_workers < 1 and n_workers != -1:
        raise ValueError(f"n_workers must be positive or -1 (all cores), got {n_workers}")

    fitness_evaluator = FitnessRegistry.get(indicator, kappa=kappa)
    rng = np.random.default_rng(seed)

    # the first individual fixes the problem's shape
    x0 = np.asarray(init(rng))
    f0 = np.atleast_1d(np.asarray(evaluate(x0), dtype=np.float64))
    c0 = None if constraints is None else np.atleast_1d(np.asarray(constraints(x0), dtype=np.float64))
    problem = FunctionProblem(
        evaluate,
        n_vars=x0.shape[0],
        n_obj=f0.shape[0],
        constraints=constraints,
        n_constraints=0 if c0 is None else c0.shape[0],
        n_workers=n_workers,
    )
    first = Solution(x0, f0, c0)

    algorithm = IBEA(
        problem=problem,
        initialization=RandomInitialization(problem, pop_size, init, rng=rng, injected=[first]),
        variation=GAVariation(crossover, mutate),
        fitness_evaluator=fitness_evaluator,
        archive=new_archive(epsilon),
        rng=rng,
    )
    try:
        return algorithm.run(n_generations, callback=callback)
    finally:
        algorithm.close()
