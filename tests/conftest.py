"""Shared test fixtures for ibex tests.

This module provides common fixtures used across test modules:
- rng: Seeded random number generator
- make_solution: Factory for evaluated solutions
- Tolerance-based equality helpers for solutions and populations
- Problem fixtures (plain callables and FunctionProblem)
- Registry isolation
"""

from collections.abc import Callable

import numpy as np
import pytest

from ibex import FunctionProblem, Population, ProblemFactory, Solution
from ibex.registry import FitnessRegistry, IndicatorRegistry

TOLERANCE = 1e-9


@pytest.fixture
def rng() -> np.random.Generator:
    """Provide a seeded random number generator for deterministic tests."""
    return np.random.default_rng(42)


@pytest.fixture
def make_solution() -> Callable[..., Solution]:
    """Factory building evaluated solutions from objective (and constraint) values."""

    def make(objectives, constraints=None, variables=None) -> Solution:
        variables = np.zeros(1) if variables is None else variables
        return Solution(variables, objectives, constraints)

    return make


def solutions_equal(a: Solution, b: Solution, tol: float = TOLERANCE) -> bool:
    """Value equality of two solutions within ``tol``."""
    return (
        a.variables.shape == b.variables.shape
        and a.n_obj == b.n_obj
        and a.n_constraints == b.n_constraints
        and np.allclose(a.variables, b.variables, atol=tol, rtol=0)
        and np.allclose(a.objectives, b.objectives, atol=tol, rtol=0)
        and np.allclose(a.constraints, b.constraints, atol=tol, rtol=0)
    )


def populations_equal(a: Population, b: Population, tol: float = TOLERANCE) -> bool:
    """Order-insensitive value equality of two populations within ``tol``."""
    if len(a) != len(b):
        return False
    unmatched = list(b)
    for s in a:
        match = next((i for i, t in enumerate(unmatched) if solutions_equal(s, t, tol)), None)
        if match is None:
            return False
        del unmatched[match]
    return True


@pytest.fixture
def assert_populations_equal() -> Callable[[Population, Population], None]:
    def check(a: Population, b: Population) -> None:
        assert populations_equal(a, b), f"populations differ:\n{a.objectives}\n{b.objectives}"

    return check


@pytest.fixture
def simple_biobj_problem():
    """Simple bi-objective problem for unit tests.

    - f1 = sum(x)
    - f2 = sum(1 - x)

    Returns:
        Dict with init, evaluate, crossover, and mutate functions.
    """
    n_vars = 3

    def init(rng: np.random.Generator) -> np.ndarray:
        return rng.uniform(0, 1, size=n_vars)

    def evaluate(x: np.ndarray) -> np.ndarray:
        return np.array([x.sum(), (1 - x).sum()])

    def crossover(p1: np.ndarray, p2: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        return (p1 + p2) / 2, p2.copy()

    def mutate(x: np.ndarray) -> np.ndarray:
        return x.copy()

    return {"init": init, "evaluate": evaluate, "crossover": crossover, "mutate": mutate}


@pytest.fixture
def zdt1_problem():
    """Five-variable ZDT1, with SBX/PM-style callables seeded for repeatability."""
    n_vars = 5
    op_rng = np.random.default_rng(7)

    def init(rng: np.random.Generator) -> np.ndarray:
        return rng.uniform(0, 1, size=n_vars)

    def evaluate(x: np.ndarray) -> np.ndarray:
        f1 = x[0]
        g = 1 + 9 * np.mean(x[1:])
        return np.array([f1, g * (1 - np.sqrt(f1 / g))])

    def crossover(p1: np.ndarray, p2: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        w = op_rng.random(len(p1))
        return w * p1 + (1 - w) * p2, (1 - w) * p1 + w * p2

    def mutate(x: np.ndarray) -> np.ndarray:
        return np.clip(x + 0.01 * op_rng.standard_normal(len(x)), 0, 1)

    return {"init": init, "evaluate": evaluate, "crossover": crossover, "mutate": mutate}


@pytest.fixture
def sum_problem() -> FunctionProblem:
    """FunctionProblem with f = (sum(x), sum(1 - x)) over three variables."""
    return FunctionProblem(lambda x: np.array([x.sum(), (1 - x).sum()]), n_vars=3, n_obj=2, name="sum")


@pytest.fixture
def isolated_registries():
    """Snapshot and restore the class-level registries around a test."""
    saved = (
        dict(IndicatorRegistry._registry),
        set(IndicatorRegistry._needs_reference),
        dict(FitnessRegistry._registry),
        dict(ProblemFactory._problems),
        dict(ProblemFactory._reference_sets),
    )
    yield
    IndicatorRegistry._registry = saved[0]
    IndicatorRegistry._needs_reference = saved[1]
    FitnessRegistry._registry = saved[2]
    ProblemFactory._problems = saved[3]
    ProblemFactory._reference_sets = saved[4]


@pytest.fixture
def assert_solutions_equal() -> Callable[[Solution, Solution], None]:
    def check(a: Solution, b: Solution) -> None:
        assert solutions_equal(a, b), f"solutions differ: {a!r} vs {b!r}"

    return check
