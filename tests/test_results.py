"""Tests for IBEAResult.

Following the testing philosophy:
- Test behavior, not implementation
- Each test should fail for one reason
- Assert both exception type and message fragment for error tests
"""

import dataclasses

import numpy as np
import pytest

from ibex import NondominatedPopulation, Population, Solution
from ibex.results import IBEAResult


@pytest.fixture
def population() -> Population:
    return Population(
        [
            Solution([0.0], [0.5, 0.5]),
            Solution([1.0], [0.3, 0.7]),
            Solution([2.0], [0.6, 0.6]),
        ]
    )


class TestIBEAResultConstruction:
    """Tests for IBEAResult construction and validation."""

    def test_constructs_with_valid_data(self, population: Population) -> None:
        fitness = np.array([-1.0, -1.5, -3.0])
        result = IBEAResult(population=population, fitness=fitness, archive=None, generations=10, evaluations=40)

        assert result.population is population
        assert result.generations == 10
        assert result.evaluations == 40
        np.testing.assert_array_equal(result.fitness, fitness)

    def test_copies_fitness(self, population: Population) -> None:
        fitness = np.array([-1.0, -1.5, -3.0])
        result = IBEAResult(population=population, fitness=fitness, archive=None, generations=0, evaluations=3)
        fitness[0] = 99.0
        assert result.fitness[0] == -1.0

    def test_is_frozen(self, population: Population) -> None:
        result = IBEAResult(population=population, fitness=np.zeros(3), archive=None, generations=0, evaluations=3)
        with pytest.raises(dataclasses.FrozenInstanceError):
            result.generations = 5  # type: ignore[misc]

    def test_rejects_non_array_fitness(self, population: Population) -> None:
        with pytest.raises(TypeError, match="fitness must be a numpy array"):
            IBEAResult(population=population, fitness=[0.0, 0.0, 0.0], archive=None, generations=0, evaluations=3)  # type: ignore[arg-type]

    def test_rejects_2d_fitness(self, population: Population) -> None:
        with pytest.raises(ValueError, match="fitness must be 1D"):
            IBEAResult(population=population, fitness=np.zeros((3, 1)), archive=None, generations=0, evaluations=3)

    def test_rejects_length_mismatch(self, population: Population) -> None:
        with pytest.raises(ValueError, match="fitness has 2 elements, expected 3"):
            IBEAResult(population=population, fitness=np.zeros(2), archive=None, generations=0, evaluations=3)


class TestIBEAResultProperties:
    """Tests for derived properties."""

    def test_objectives(self, population: Population) -> None:
        result = IBEAResult(population=population, fitness=np.zeros(3), archive=None, generations=0, evaluations=3)
        np.testing.assert_array_equal(result.objectives, [[0.5, 0.5], [0.3, 0.7], [0.6, 0.6]])

    def test_pareto_front(self, population: Population) -> None:
        """(0.6, 0.6) is dominated by (0.5, 0.5)."""
        result = IBEAResult(population=population, fitness=np.zeros(3), archive=None, generations=0, evaluations=3)
        front = result.pareto_front

        assert len(front) == 2
        assert population[2] not in front

    def test_pareto_front_empty(self) -> None:
        result = IBEAResult(population=Population(), fitness=np.zeros(0), archive=None, generations=0, evaluations=0)
        assert len(result.pareto_front) == 0

    def test_archive_is_kept(self, population: Population) -> None:
        archive = NondominatedPopulation(population)
        result = IBEAResult(population=population, fitness=np.zeros(3), archive=archive, generations=0, evaluations=3)
        assert len(result.archive) == 2
