"""Population-level lifting of per-individual functions.

Used by FunctionProblem to evaluate ordered batches, sequentially or
through joblib workers. Row order of the output always matches the input.
"""

from collections.abc import Callable

import numpy as np


def lift(fn: Callable[[np.ndarray], np.ndarray]) -> Callable[[np.ndarray], np.ndarray]:
    """Lift a per-individual function to a batch of individuals.

    Args:
        fn: Per-individual function. Signature: (n_vars,) -> (n_out,) or scalar.

    Returns:
        Batch function. Signature: (n, n_vars) -> (n, n_out)

    Example:
        >>> evaluate = lift(lambda x: np.array([x.sum(), (1 - x).sum()]))
        >>> evaluate(np.array([[0.0, 1.0], [1.0, 1.0]]))
        array([[1., 1.],
               [2., 0.]])
    """

    def lifted(x: np.ndarray) -> np.ndarray:
        return np.stack([np.atleast_1d(fn(row)) for row in x])

    return lifted


def lift_parallel(
    fn: Callable[[np.ndarray], np.ndarray], n_workers: int
) -> Callable[[np.ndarray], np.ndarray]:
    """Lift a per-individual function to a batch evaluated by joblib workers.

    The batch completes before the function returns and results come back
    in input order.

    Args:
        fn: Per-individual function; must be picklable.
        n_workers: Number of workers, -1 for all CPU cores.

    Returns:
        Batch function. Signature: (n, n_vars) -> (n, n_out)
    """
    from joblib import Parallel, delayed

    def lifted(x: np.ndarray) -> np.ndarray:
        results: list[np.ndarray] = Parallel(n_jobs=n_workers)(  # type: ignore[assignment]
            delayed(fn)(row) for row in x
        )
        return np.stack([np.atleast_1d(r) for r in results])

    return lifted
