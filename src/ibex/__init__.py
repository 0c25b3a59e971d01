"""ibex: Indicator-Based Evolutionary Algorithm core.

A numpy implementation of IBEA with Pareto and epsilon-box dominance
archives, quality indicators and an incremental indicator-fitness evaluator.

Example:
    >>> from ibex import ibea, sbx_crossover, polynomial_mutation
    >>> import numpy as np
    >>> def init(rng): return rng.uniform(0, 1, size=3)
    >>> def evaluate(x): return np.array([x.sum(), (1 - x).sum()])
    >>> result = ibea(init, evaluate, sbx_crossover(seed=1), polynomial_mutation(seed=1),
    ...               pop_size=10, n_generations=5, seed=42)
    >>> len(result.population)
    10

Example (configured problem with reference set):
    >>> from ibex import ProblemConfig, compute_indicators
    >>> config = ProblemConfig(problem_name="zdt1", epsilon=(0.01, 0.01))
    >>> reference = config.reference_set()
    >>> compute_indicators(reference, ["hyper", "inv"], reference_set=reference)  # doctest: +SKIP
"""

import ibex.zdt  # noqa: F401  (registers the ZDT problems)
from ibex.algorithms import IBEA, ibea
from ibex.archive import EpsilonBoxDominanceArchive, NondominatedPopulation, new_archive
from ibex.comparators import (
    AggregateConstraintComparator,
    ChainedComparator,
    EpsilonBoxConstraintComparator,
    EpsilonBoxDominanceComparator,
    FitnessComparator,
    ParetoDominanceComparator,
)
from ibex.exceptions import ConfigurationError
from ibex.fitness import (
    AdditiveEpsilonIndicatorFitnessEvaluator,
    HypervolumeFitnessEvaluator,
    IndicatorFitnessEvaluator,
)
from ibex.indicators import (
    AdditiveEpsilonIndicator,
    GenerationalDistance,
    Hypervolume,
    InvertedGenerationalDistance,
    MaximumParetoFrontError,
    Normalizer,
    Spacing,
    as_front,
)
from ibex.operators import (
    GAVariation,
    RandomInitialization,
    lift,
    lift_parallel,
    polynomial_mutation,
    sbx_crossover,
)
from ibex.population import Population, Solution
from ibex.primitives import (
    dominates,
    dominates_matrix,
    epsilon_box_index,
    non_dominated_sort,
    nondominated_mask,
)
from ibex.problem import FunctionProblem, ProblemConfig, ProblemFactory, evaluate_all, load_objectives
from ibex.registry import (
    FitnessRegistry,
    IndicatorRegistry,
    compute_indicators,
    list_fitness_indicators,
    list_indicators,
)
from ibex.results import IBEAResult
from ibex.selection import TournamentSelection

__all__ = [
    # Algorithms
    "IBEA",
    "ibea",
    "IBEAResult",
    # Core data
    "Solution",
    "Population",
    "NondominatedPopulation",
    "EpsilonBoxDominanceArchive",
    "new_archive",
    # Comparators
    "ParetoDominanceComparator",
    "AggregateConstraintComparator",
    "EpsilonBoxDominanceComparator",
    "EpsilonBoxConstraintComparator",
    "ChainedComparator",
    "FitnessComparator",
    # Fitness
    "IndicatorFitnessEvaluator",
    "AdditiveEpsilonIndicatorFitnessEvaluator",
    "HypervolumeFitnessEvaluator",
    # Indicators
    "Hypervolume",
    "GenerationalDistance",
    "InvertedGenerationalDistance",
    "AdditiveEpsilonIndicator",
    "MaximumParetoFrontError",
    "Spacing",
    "Normalizer",
    "as_front",
    "compute_indicators",
    # Operators
    "lift",
    "lift_parallel",
    "sbx_crossover",
    "polynomial_mutation",
    "GAVariation",
    "RandomInitialization",
    "TournamentSelection",
    # Problems
    "FunctionProblem",
    "ProblemFactory",
    "ProblemConfig",
    "evaluate_all",
    "load_objectives",
    # Primitives
    "dominates",
    "dominates_matrix",
    "non_dominated_sort",
    "nondominated_mask",
    "epsilon_box_index",
    # Registries
    "IndicatorRegistry",
    "FitnessRegistry",
    "list_indicators",
    "list_fitness_indicators",
    "ConfigurationError",
]
