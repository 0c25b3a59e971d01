"""Tests for problems, the problem factory and ProblemConfig.

Configuration failures must surface as ConfigurationError before any
generation runs.
"""

from pathlib import Path

import numpy as np
import pytest

from ibex.archive import EpsilonBoxDominanceArchive, NondominatedPopulation
from ibex.exceptions import ConfigurationError
from ibex.population import Solution
from ibex.problem import FunctionProblem, ProblemConfig, ProblemFactory, evaluate_all, load_objectives
from ibex.zdt import zdt1, zdt1_front


@pytest.fixture(autouse=True)
def isolate(isolated_registries):
    yield


def objectives_of(x: np.ndarray) -> np.ndarray:
    return np.array([x.sum(), (1 - x).sum()])


class CountingProblem:
    """Problem without batch support that counts evaluate() calls."""

    n_vars = 2
    n_obj = 1
    n_constraints = 0

    def __init__(self) -> None:
        self.calls = 0
        self.closed = False

    def new_solution(self) -> Solution:
        return Solution.blank(2, 1)

    def evaluate(self, solution: Solution) -> None:
        self.calls += 1
        solution.set_objectives([solution.variables.sum()])

    def close(self) -> None:
        self.closed = True


# =============================================================================
# TestFunctionProblem
# =============================================================================


class TestFunctionProblem:
    """Tests for FunctionProblem."""

    def test_new_solution_shape(self, sum_problem: FunctionProblem) -> None:
        s = sum_problem.new_solution()
        assert (s.n_vars, s.n_obj, s.n_constraints) == (3, 2, 0)
        assert not s.evaluated

    def test_evaluate_sets_objectives(self, sum_problem: FunctionProblem) -> None:
        s = sum_problem.new_solution()
        s.variables = np.array([0.0, 0.5, 1.0])
        sum_problem.evaluate(s)
        np.testing.assert_allclose(s.objectives, [1.5, 1.5])

    def test_constraints(self) -> None:
        problem = FunctionProblem(
            objectives_of, n_vars=2, n_obj=2, constraints=lambda x: np.array([max(0.0, x[0] - 0.5)]), n_constraints=1
        )
        s = problem.new_solution()
        s.variables = np.array([0.9, 0.0])
        problem.evaluate(s)

        assert s.constraint_violation == pytest.approx(0.4)

    def test_evaluate_all_in_order(self, sum_problem: FunctionProblem) -> None:
        solutions = [sum_problem.new_solution() for _ in range(3)]
        for i, s in enumerate(solutions):
            s.variables = np.full(3, i / 2)
        sum_problem.evaluate_all(solutions)

        np.testing.assert_allclose([s.objectives[0] for s in solutions], [0.0, 1.5, 3.0])

    def test_parallel_batch(self) -> None:
        """Joblib workers return objectives in input order."""
        problem = FunctionProblem(zdt1, n_vars=3, n_obj=2, n_workers=2)
        solutions = [Solution.blank(3, 2) for _ in range(4)]
        for i, s in enumerate(solutions):
            s.variables = np.array([i / 4, 0.0, 0.0])
        problem.evaluate_all(solutions)

        np.testing.assert_allclose([s.objectives[0] for s in solutions], [0.0, 0.25, 0.5, 0.75])

    def test_wrong_objective_count_raises(self) -> None:
        problem = FunctionProblem(objectives_of, n_vars=2, n_obj=3)
        with pytest.raises(ValueError, match="expected 3 objective values"):
            problem.evaluate(problem.new_solution())

    def test_evaluation_errors_propagate(self) -> None:
        def broken(x: np.ndarray) -> np.ndarray:
            raise RuntimeError("simulator crashed")

        problem = FunctionProblem(broken, n_vars=1, n_obj=1)
        with pytest.raises(RuntimeError, match="simulator crashed"):
            problem.evaluate(problem.new_solution())

    def test_constraints_require_count(self) -> None:
        with pytest.raises(ValueError, match="must be given together"):
            FunctionProblem(objectives_of, n_vars=2, n_obj=2, constraints=lambda x: x)

    @pytest.mark.parametrize("n_workers", [0, -2])
    def test_rejects_invalid_workers(self, n_workers: int) -> None:
        with pytest.raises(ValueError, match="n_workers"):
            FunctionProblem(objectives_of, n_vars=2, n_obj=2, n_workers=n_workers)


class TestEvaluateAll:
    """Tests for the evaluate_all helper."""

    def test_falls_back_to_single_evaluation(self) -> None:
        problem = CountingProblem()
        solutions = [problem.new_solution() for _ in range(5)]
        evaluate_all(problem, solutions)

        assert problem.calls == 5
        assert all(s.evaluated for s in solutions)


# =============================================================================
# TestProblemFactory
# =============================================================================


class TestProblemFactory:
    """Tests for ProblemFactory."""

    def test_zdt_registered(self) -> None:
        assert {"zdt1", "zdt2", "zdt3"} <= set(ProblemFactory.list())

    def test_get_problem(self) -> None:
        problem = ProblemFactory.get_problem("zdt1")
        assert (problem.n_vars, problem.n_obj) == (30, 2)

    def test_unknown_problem(self) -> None:
        with pytest.raises(ConfigurationError, match="unknown problem 'dtlz9'.*zdt1"):
            ProblemFactory.get_problem("dtlz9")

    def test_reference_set_from_callable(self) -> None:
        front = ProblemFactory.get_reference_set("zdt1")
        assert front.shape[1] == 2
        np.testing.assert_allclose(front[:, 1], 1 - np.sqrt(front[:, 0]))

    def test_reference_set_from_array(self) -> None:
        ProblemFactory.register("custom", CountingProblem, reference_set=np.array([[0.0, 1.0]]))
        np.testing.assert_array_equal(ProblemFactory.get_reference_set("custom"), [[0.0, 1.0]])

    def test_reference_set_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "front.pf"
        path.write_text("0 1\n1 0\n")
        ProblemFactory.register("custom", CountingProblem, reference_set=path)
        assert ProblemFactory.get_reference_set("custom").shape == (2, 2)

    def test_no_reference_set(self) -> None:
        ProblemFactory.register("custom", CountingProblem)
        assert ProblemFactory.get_reference_set("custom") is None

    def test_reregister_drops_reference_set(self) -> None:
        ProblemFactory.register("custom", CountingProblem, reference_set=np.zeros((1, 2)))
        ProblemFactory.register("custom", CountingProblem)
        assert ProblemFactory.get_reference_set("custom") is None


# =============================================================================
# TestProblemConfig
# =============================================================================


class TestProblemConfig:
    """Tests for ProblemConfig validation and resolution."""

    def test_no_problem_specified(self) -> None:
        with pytest.raises(ConfigurationError, match="no problem specified"):
            ProblemConfig()

    def test_both_sources_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="either problem_name or problem_class"):
            ProblemConfig(problem_name="zdt1", problem_class=CountingProblem)

    def test_non_positive_epsilon(self) -> None:
        with pytest.raises(ConfigurationError, match="epsilon values must be positive"):
            ProblemConfig(problem_name="zdt1", epsilon=(0.1, 0.0))

    def test_empty_epsilon_means_none(self) -> None:
        config = ProblemConfig(problem_name="zdt1", epsilon=())
        assert config.epsilon is None
        assert type(config.new_archive()) is NondominatedPopulation

    def test_scalar_epsilon(self) -> None:
        config = ProblemConfig(problem_name="zdt1", epsilon=0.01)  # type: ignore[arg-type]
        assert config.epsilon == (0.01,)
        assert isinstance(config.new_archive(), EpsilonBoxDominanceArchive)

    def test_is_frozen(self) -> None:
        config = ProblemConfig(problem_name="zdt1")
        with pytest.raises(AttributeError):
            config.problem_name = "zdt2"  # type: ignore[misc]

    def test_problem_instance_by_name(self) -> None:
        assert ProblemConfig(problem_name="zdt2").problem_instance().n_vars == 30

    def test_problem_instance_by_class(self) -> None:
        assert isinstance(ProblemConfig(problem_class=CountingProblem).problem_instance(), CountingProblem)

    def test_problem_class_dotted_path(self) -> None:
        config = ProblemConfig(problem_class="ibex.problem.FunctionProblem")
        assert config.problem_class is FunctionProblem

    def test_unresolvable_dotted_path(self) -> None:
        with pytest.raises(ConfigurationError, match="unable to resolve problem class"):
            ProblemConfig(problem_class="ibex.problem.NoSuchProblem")

    def test_unknown_problem_name_raises_on_instance(self) -> None:
        with pytest.raises(ConfigurationError, match="unknown problem 'nope'"):
            ProblemConfig(problem_name="nope").problem_instance()

    def test_reference_set_from_factory(self) -> None:
        reference = ProblemConfig(problem_name="zdt1").reference_set()
        assert isinstance(reference, NondominatedPopulation)
        assert len(reference) == len(zdt1_front())

    def test_reference_set_in_epsilon_archive(self) -> None:
        """The reference set is thinned to one point per epsilon box."""
        reference = ProblemConfig(problem_name="zdt1", epsilon=(0.1,)).reference_set()
        boxes = reference.box_indices()
        assert len({tuple(b) for b in boxes}) == len(reference)
        assert len(reference) < len(zdt1_front())

    def test_reference_set_file_wins(self, tmp_path: Path) -> None:
        path = tmp_path / "front.pf"
        path.write_text("# reference\n0.0 1.0\n1.0 0.0\n")
        reference = ProblemConfig(problem_name="zdt1", reference_set_file=path).reference_set()
        assert len(reference) == 2

    def test_unreadable_reference_file(self, tmp_path: Path) -> None:
        config = ProblemConfig(problem_name="zdt1", reference_set_file=tmp_path / "missing.pf")
        with pytest.raises(ConfigurationError, match="unable to load reference set") as excinfo:
            config.reference_set()
        assert isinstance(excinfo.value.__cause__, OSError)

    def test_malformed_reference_file(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.pf"
        path.write_text("0.0 one\n")
        with pytest.raises(ConfigurationError, match="unable to load reference set"):
            ProblemConfig(problem_name="zdt1", reference_set_file=path).reference_set()

    def test_no_reference_set_available(self) -> None:
        """A problem without a registered front fails before any run starts."""
        ProblemFactory.register("bare", CountingProblem)
        with pytest.raises(ConfigurationError, match="no reference set available for problem 'bare'"):
            ProblemConfig(problem_name="bare").reference_set()

    def test_no_reference_set_for_class(self) -> None:
        with pytest.raises(ConfigurationError, match="no reference set available for problem 'CountingProblem'"):
            ProblemConfig(problem_class=CountingProblem).reference_set()


class TestLoadObjectives:
    def test_single_row_is_2d(self, tmp_path: Path) -> None:
        path = tmp_path / "one.pf"
        path.write_text("0.5 0.5\n")
        assert load_objectives(path).shape == (1, 2)
