"""Problems, the problem factory and run configuration.

This module provides:
- FunctionProblem: adapts plain per-individual callables to the Problem protocol
- evaluate_all: evaluates an ordered batch of solutions
- ProblemFactory: registry resolving problems and reference sets by name
- ProblemConfig: immutable, validated description of what to optimize
- load_objectives: reads a whitespace-delimited objective table

Configuration mistakes (no problem, no reference set, unknown names) raise
ConfigurationError as soon as they are detected. Problem evaluation errors
are never caught here.
"""

import importlib
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import numpy as np

from ibex.archive import NondominatedPopulation, new_archive
from ibex.exceptions import ConfigurationError
from ibex.operators.base import lift, lift_parallel
from ibex.population import Solution
from ibex.protocols import BatchProblem, Problem

logger = logging.getLogger(__name__)

ReferenceSource = np.ndarray | Callable[[], np.ndarray] | str | Path


class FunctionProblem:
    """A problem defined by per-individual Python callables.

    Args:
        evaluate: Objective function. Signature: (n_vars,) -> (n_obj,)
        n_vars: Number of decision variables.
        n_obj: Number of objectives.
        constraints: Optional constraint function returning violation values
            (0 = satisfied). Signature: (n_vars,) -> (n_constraints,)
        n_constraints: Number of constraint values returned by ``constraints``.
        n_workers: Workers for batch evaluation. 1 evaluates sequentially,
            -1 uses all CPU cores. The callables must be picklable when
            running in parallel.
        name: Optional name used in log messages.

    Example:
        >>> problem = FunctionProblem(lambda x: np.array([x.sum(), (1 - x).sum()]), n_vars=3, n_obj=2)
        >>> s = problem.new_solution()
        >>> problem.evaluate(s)
        >>> s.objectives
        array([0., 3.])
    """

    def __init__(
        self,
        evaluate: Callable[[np.ndarray], np.ndarray],
        n_vars: int,
        n_obj: int,
        constraints: Callable[[np.ndarray], np.ndarray] | None = None,
        n_constraints: int = 0,
        n_workers: int = 1,
        name: str | None = None,
    ) -> None:
        if n_vars <= 0:
            raise ValueError(f"n_vars must be positive, got {n_vars}")
        if n_obj <= 0:
            raise ValueError(f"n_obj must be positive, got {n_obj}")
        if (constraints is None) != (n_constraints == 0):
            raise ValueError("constraints and n_constraints must be given together")
        if n_workers < 1 and n_workers != -1:
            raise ValueError(f"n_workers must be positive or -1 (all cores), got {n_workers}")
        self._objective_fn = evaluate
        self._constraint_fn = constraints
        self._n_vars = n_vars
        self._n_obj = n_obj
        self._n_constraints = n_constraints
        self.name = name or getattr(evaluate, "__name__", "problem")
        self._batch_objectives = lift_parallel(evaluate, n_workers) if n_workers != 1 else lift(evaluate)
        self._batch_constraints = None
        if constraints is not None:
            self._batch_constraints = lift_parallel(constraints, n_workers) if n_workers != 1 else lift(constraints)

    @property
    def n_vars(self) -> int:
        return self._n_vars

    @property
    def n_obj(self) -> int:
        return self._n_obj

    @property
    def n_constraints(self) -> int:
        return self._n_constraints

    def new_solution(self) -> Solution:
        return Solution.blank(self._n_vars, self._n_obj, self._n_constraints)

    def evaluate(self, solution: Solution) -> None:
        solution.set_objectives(np.atleast_1d(self._objective_fn(solution.variables)))
        if self._constraint_fn is not None:
            solution.set_constraints(np.atleast_1d(self._constraint_fn(solution.variables)))

    def evaluate_all(self, solutions: Sequence[Solution]) -> None:
        """Evaluate an ordered batch, in parallel when configured."""
        if not solutions:
            return
        x = np.stack([s.variables for s in solutions])
        objectives = self._batch_objectives(x).reshape(len(solutions), -1)
        for solution, values in zip(solutions, objectives, strict=True):
            solution.set_objectives(values)
        if self._batch_constraints is not None:
            constraints = self._batch_constraints(x).reshape(len(solutions), -1)
            for solution, values in zip(solutions, constraints, strict=True):
                solution.set_constraints(values)

    def close(self) -> None:
        """Nothing to release for in-process callables."""

    def __repr__(self) -> str:
        return f"FunctionProblem(name={self.name!r}, n_vars={self._n_vars}, n_obj={self._n_obj})"


def evaluate_all(problem: Problem, solutions: Sequence[Solution]) -> None:
    """Evaluate every solution, as one ordered batch when the problem supports it."""
    if isinstance(problem, BatchProblem):
        problem.evaluate_all(solutions)
    else:
        for solution in solutions:
            problem.evaluate(solution)


def load_objectives(path: str | Path) -> np.ndarray:
    """Read a whitespace-delimited table of objective vectors, one per line.

    Lines starting with ``#`` are ignored.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If a line cannot be parsed as numbers.
    """
    return np.loadtxt(path, dtype=np.float64, ndmin=2)


def _as_reference_population(objectives: np.ndarray, archive: NondominatedPopulation) -> NondominatedPopulation:
    archive.add_all(Solution(np.empty(0), row) for row in np.atleast_2d(objectives))
    return archive


class ProblemFactory:
    """Registry of named problems and their reference sets.

    Class Attributes:
        _problems: Maps problem names to zero-argument factories.
        _reference_sets: Maps problem names to reference-set sources: an
            objective array, a zero-argument callable returning one, or a
            path to an objective table.

    Example:
        ```python
        ProblemFactory.register("sphere2", make_sphere2, reference_set=front)
        problem = ProblemFactory.get_problem("sphere2")
        front = ProblemFactory.get_reference_set("sphere2")
        ```
    """

    _problems: dict[str, Callable[[], Problem]] = {}
    _reference_sets: dict[str, ReferenceSource] = {}

    @classmethod
    def register(cls, name: str, factory: Callable[[], Problem], reference_set: ReferenceSource | None = None) -> None:
        """Register a problem factory (and optionally its reference set)."""
        cls._problems[name] = factory
        if reference_set is None:
            cls._reference_sets.pop(name, None)
        else:
            cls._reference_sets[name] = reference_set

    @classmethod
    def get_problem(cls, name: str) -> Problem:
        """Instantiate the named problem.

        Raises:
            ConfigurationError: If no problem of that name is registered.
        """
        if name not in cls._problems:
            available = ", ".join(sorted(cls._problems)) or "none"
            raise ConfigurationError(f"unknown problem '{name}'. Available problems: {available}")
        return cls._problems[name]()

    @classmethod
    def get_reference_set(cls, name: str) -> np.ndarray | None:
        """Return the named problem's reference front, or None if it has none."""
        source = cls._reference_sets.get(name)
        if source is None:
            return None
        if isinstance(source, (str, Path)):
            return load_objectives(source)
        if callable(source):
            return np.asarray(source(), dtype=np.float64)
        return np.asarray(source, dtype=np.float64)

    @classmethod
    def list(cls) -> list[str]:
        return sorted(cls._problems)


def _resolve_class(path: str) -> Callable[[], Problem]:
    module_name, _, attr = path.replace(":", ".").rpartition(".")
    if not module_name:
        raise ConfigurationError(f"problem class '{path}' must be a dotted path such as 'package.module.Class'")
    try:
        return getattr(importlib.import_module(module_name), attr)
    except (ImportError, AttributeError) as exc:
        raise ConfigurationError(f"unable to resolve problem class '{path}'") from exc


@dataclass(frozen=True)
class ProblemConfig:
    """Immutable description of the problem side of a run.

    Exactly one of ``problem_name`` and ``problem_class`` must be given. The
    configuration is validated once, on construction.

    Attributes:
        problem_name: Name registered with the factory.
        problem_class: Problem class (or zero-argument callable), or a dotted
            ``"module.Class"`` path to one.
        epsilon: Epsilon-box sizes; None or empty selects a plain
            non-dominated archive.
        reference_set_file: Objective table used instead of the factory's
            reference set.
        factory: Registry used to resolve ``problem_name``.

    Raises:
        ConfigurationError: If no (or more than one) problem source is given,
            a class path cannot be resolved, or an epsilon is not positive.

    Example:
        >>> config = ProblemConfig(problem_name="zdt1", epsilon=(0.01, 0.01))
        >>> type(config.new_archive()).__name__
        'EpsilonBoxDominanceArchive'
    """

    problem_name: str | None = None
    problem_class: Callable[[], Problem] | str | None = None
    epsilon: tuple[float, ...] | None = None
    reference_set_file: Path | None = None
    factory: type[ProblemFactory] = field(default=ProblemFactory)

    def __post_init__(self) -> None:
        if self.problem_name is None and self.problem_class is None:
            raise ConfigurationError("no problem specified")
        if self.problem_name is not None and self.problem_class is not None:
            raise ConfigurationError(
                f"specify either problem_name or problem_class, not both (got '{self.problem_name}' and {self.problem_class!r})"
            )
        if isinstance(self.problem_class, str):
            object.__setattr__(self, "problem_class", _resolve_class(self.problem_class))

        epsilon: Any = self.epsilon
        if epsilon is not None:
            epsilon = tuple(float(e) for e in np.atleast_1d(np.asarray(epsilon, dtype=np.float64)))
            if not epsilon:
                epsilon = None
            elif any(not e > 0 for e in epsilon):
                raise ConfigurationError(f"epsilon values must be positive, got {epsilon}")
        object.__setattr__(self, "epsilon", epsilon)

        if self.reference_set_file is not None:
            object.__setattr__(self, "reference_set_file", Path(self.reference_set_file))

    @property
    def label(self) -> str:
        """Human-readable name of the configured problem."""
        if self.problem_name is not None:
            return self.problem_name
        return getattr(self.problem_class, "__name__", repr(self.problem_class))

    def new_archive(self) -> NondominatedPopulation:
        """Empty archive matching the configured epsilon (if any)."""
        return new_archive(self.epsilon)

    def problem_instance(self) -> Problem:
        """Create the configured problem."""
        if self.problem_name is not None:
            return self.factory.get_problem(self.problem_name)
        return self.problem_class()

    def reference_set(self) -> NondominatedPopulation:
        """Load the reference set into a fresh archive.

        ``reference_set_file`` takes precedence over the factory.

        Raises:
            ConfigurationError: If the file cannot be loaded or no reference
                set is available for the problem.
        """
        archive = self.new_archive()
        if self.reference_set_file is not None:
            try:
                objectives = load_objectives(self.reference_set_file)
            except (OSError, ValueError) as exc:
                raise ConfigurationError(f"unable to load reference set '{self.reference_set_file}'") from exc
            logger.info(f"Loaded reference set for {self.label} from {self.reference_set_file} ({len(objectives)} points)")
            return _as_reference_population(objectives, archive)

        objectives = self.factory.get_reference_set(self.problem_name) if self.problem_name is not None else None
        if objectives is None:
            raise ConfigurationError(f"no reference set available for problem '{self.label}'")
        logger.info(f"Loaded reference set for {self.label} from the problem factory ({len(objectives)} points)")
        return _as_reference_population(objectives, archive)
