"""ZDT benchmark problems with analytic reference fronts.

The ZDT (Zitzler-Deb-Thiele) suite: 30 decision variables in [0, 1] and
two minimized objectives. Importing this module registers ``zdt1``,
``zdt2`` and ``zdt3`` with ProblemFactory, so a ProblemConfig can name them
directly.

References:
    Zitzler, E., Deb, K., & Thiele, L. (2000). Comparison of multiobjective
    evolutionary algorithms: Empirical results. Evolutionary computation, 8(2), 173-195.
"""

from collections.abc import Callable

import numpy as np

from ibex.primitives import nondominated_mask
from ibex.problem import FunctionProblem, ProblemFactory

N_VARS: int = 30
BOUNDS: tuple[float, float] = (0.0, 1.0)


def _g(x: np.ndarray) -> float:
    return 1 + 9 * np.sum(x[1:]) / (len(x) - 1)


def zdt1(x: np.ndarray) -> np.ndarray:
    """ZDT1: convex front, f2 = 1 - sqrt(f1) at g = 1."""
    g = _g(x)
    return np.array([x[0], g * (1 - np.sqrt(x[0] / g))])


def zdt2(x: np.ndarray) -> np.ndarray:
    """ZDT2: concave front, f2 = 1 - f1^2 at g = 1."""
    g = _g(x)
    return np.array([x[0], g * (1 - (x[0] / g) ** 2)])


def zdt3(x: np.ndarray) -> np.ndarray:
    """ZDT3: disconnected front from the sine term."""
    g = _g(x)
    ratio = x[0] / g
    return np.array([x[0], g * (1 - np.sqrt(ratio) - ratio * np.sin(10 * np.pi * x[0]))])


def zdt1_front(n_points: int = 500) -> np.ndarray:
    f1 = np.linspace(0.0, 1.0, n_points)
    return np.column_stack([f1, 1 - np.sqrt(f1)])


def zdt2_front(n_points: int = 500) -> np.ndarray:
    f1 = np.linspace(0.0, 1.0, n_points)
    return np.column_stack([f1, 1 - f1**2])


def zdt3_front(n_points: int = 500) -> np.ndarray:
    """Sample f2 = 1 - sqrt(f1) - f1 sin(10 pi f1) and keep the non-dominated part."""
    f1 = np.linspace(0.0, 0.852, n_points * 4)
    points = np.column_stack([f1, 1 - np.sqrt(f1) - f1 * np.sin(10 * np.pi * f1)])
    return points[nondominated_mask(points)]


def uniform_init(rng: np.random.Generator) -> np.ndarray:
    """Sample one individual uniformly in the ZDT bounds."""
    return rng.uniform(*BOUNDS, size=N_VARS)


PROBLEMS: dict[str, Callable[[np.ndarray], np.ndarray]] = {
    "zdt1": zdt1,
    "zdt2": zdt2,
    "zdt3": zdt3,
}

FRONTS: dict[str, Callable[[], np.ndarray]] = {
    "zdt1": zdt1_front,
    "zdt2": zdt2_front,
    "zdt3": zdt3_front,
}


def _factory(name: str) -> Callable[[], FunctionProblem]:
    return lambda: FunctionProblem(PROBLEMS[name], n_vars=N_VARS, n_obj=2, name=name)


for _name in PROBLEMS:
    ProblemFactory.register(_name, _factory(_name), reference_set=FRONTS[_name])
