"""Real-valued variation operators.

- sbx_crossover: Simulated Binary Crossover, two parents -> two children
- polynomial_mutation: bounded polynomial mutation of one individual

Both are factories returning plain array functions; ibex.operators.variation
wraps them into a Variation over solutions.
"""

from collections.abc import Callable

import numpy as np

Bounds = tuple[float, float] | tuple[np.ndarray, np.ndarray]
"""Variable bounds: one ``(lower, upper)`` pair for all variables, or a pair
of per-variable arrays the same length as the decision vector."""

Crossover = Callable[[np.ndarray, np.ndarray], tuple[np.ndarray, np.ndarray]]
Mutation = Callable[[np.ndarray], np.ndarray]


def sbx_crossover(
    eta: float = 15.0,
    prob: float = 1.0,
    bounds: Bounds = (0.0, 1.0),
    seed: int | np.random.Generator | None = None,
) -> Crossover:
    """Create a Simulated Binary Crossover (SBX) operator.

    With probability ``prob`` the parents are recombined; otherwise copies of
    the parents are returned. Each variable of the two children is swapped
    between them with probability 0.5.

    Args:
        eta: Distribution index. Larger values keep children closer to
            their parents.
        prob: Probability of recombining a pair of parents.
        bounds: Children are clipped to these bounds.
        seed: Seed or generator for reproducibility.

    Returns:
        A function ``(p1, p2) -> (c1, c2)``.

    Example:
        >>> crossover = sbx_crossover(eta=15.0, seed=42)
        >>> c1, c2 = crossover(np.array([0.2, 0.4]), np.array([0.3, 0.5]))
        >>> c1.shape, c2.shape
        ((2,), (2,))

    References:
        Deb, K., & Agrawal, R. B. (1995). Simulated binary crossover for
        continuous search space. Complex Systems, 9(2), 115-148.
    """
    if not 0.0 <= prob <= 1.0:
        raise ValueError(f"prob must be in [0, 1], got {prob}")
    if eta < 0:
        raise ValueError(f"eta must be non-negative, got {eta}")
    rng = np.random.default_rng(seed)
    lower, upper = bounds
    exponent = 1.0 / (eta + 1.0)

    def crossover(p1: np.ndarray, p2: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        if rng.random() >= prob:
            return p1.copy(), p2.copy()

        n_vars = len(p1)
        u = rng.random(n_vars)
        beta = np.where(u <= 0.5, (2.0 * u) ** exponent, (1.0 / (2.0 * (1.0 - u))) ** exponent)
        c1 = 0.5 * ((1.0 + beta) * p1 + (1.0 - beta) * p2)
        c2 = 0.5 * ((1.0 - beta) * p1 + (1.0 + beta) * p2)

        swap = rng.random(n_vars) < 0.5
        c1, c2 = np.where(swap, c2, c1), np.where(swap, c1, c2)
        return np.clip(c1, lower, upper), np.clip(c2, lower, upper)

    return crossover


def polynomial_mutation(
    eta: float = 20.0,
    prob: float | None = None,
    bounds: Bounds = (0.0, 1.0),
    seed: int | np.random.Generator | None = None,
) -> Mutation:
    """Create a polynomial mutation operator.

    Args:
        eta: Distribution index. Larger values give smaller perturbations.
        prob: Per-variable mutation probability; None uses ``1 / n_vars``.
        bounds: Mutated values stay within these bounds.
        seed: Seed or generator for reproducibility.

    Returns:
        A function ``x -> x'`` that never modifies its input.

    References:
        Deb, K., & Goyal, M. (1996). A combined genetic adaptive search (GeneAS)
        for engineering design. Computer Science and Informatics, 26(4), 30-45.
    """
    if prob is not None and not 0.0 <= prob <= 1.0:
        raise ValueError(f"prob must be in [0, 1], got {prob}")
    rng = np.random.default_rng(seed)
    lower, upper = bounds
    span = np.asarray(upper, dtype=np.float64) - np.asarray(lower, dtype=np.float64)
    power = 1.0 / (eta + 1.0)

    def mutate(x: np.ndarray) -> np.ndarray:
        n_vars = len(x)
        mask = rng.random(n_vars) < (prob if prob is not None else 1.0 / n_vars)
        if not np.any(mask):
            return x.copy()

        u = rng.random(n_vars)
        to_lower = 1.0 - (x - lower) / span
        to_upper = 1.0 - (upper - x) / span
        delta_down = (2.0 * u + (1.0 - 2.0 * u) * to_lower ** (eta + 1.0)) ** power - 1.0
        delta_up = 1.0 - (2.0 * (1.0 - u) + 2.0 * (u - 0.5) * to_upper ** (eta + 1.0)) ** power
        delta = np.where(u < 0.5, delta_down, delta_up)

        return np.clip(np.where(mask, x + delta * span, x), lower, upper)

    return mutate
