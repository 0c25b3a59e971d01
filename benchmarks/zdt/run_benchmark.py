"""Benchmark runner for IBEA on the ZDT problems.

Runs ibex's IBEA with both fitness indicators on ZDT1-3 and, as a baseline,
Pymoo's NSGA-II with the same variation parameters. Every final population is
scored with ibex's hypervolume and IGD against the analytical front.

Usage:
    python benchmarks/zdt/run_benchmark.py
"""

import json
import logging
import time
from collections import defaultdict
from datetime import UTC, datetime
from pathlib import Path

import numpy as np
from pymoo.algorithms.moo.nsga2 import NSGA2
from pymoo.core.problem import Problem as PymooProblem
from pymoo.operators.crossover.sbx import SBX
from pymoo.operators.mutation.pm import PM
from pymoo.operators.sampling.rnd import FloatRandomSampling
from pymoo.optimize import minimize
from pymoo.termination import get_termination

from ibex import compute_indicators, ibea, polynomial_mutation, sbx_crossover
from ibex.zdt import BOUNDS, FRONTS, N_VARS, PROBLEMS, uniform_init

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


POP_SIZE = 100
N_GENERATIONS = 250
SBX_ETA = 15.0
PM_ETA = 20.0
MUTATION_PROB = 1.0 / N_VARS
KAPPA = 0.05
N_RUNS = 10
SEEDS = list(range(N_RUNS))
INDICATORS = ["hypervolume", "inverted"]


def run_ibex(problem_name: str, indicator: str, seed: int) -> tuple[np.ndarray, float]:
    """Run IBEA on one ZDT problem.

    Returns:
        Tuple of (final objectives, elapsed_time_seconds).
    """
    crossover = sbx_crossover(eta=SBX_ETA, bounds=BOUNDS, seed=seed)
    mutate = polynomial_mutation(eta=PM_ETA, prob=MUTATION_PROB, bounds=BOUNDS, seed=seed + 1000)

    start_time = time.perf_counter()
    result = ibea(
        init=uniform_init,
        evaluate=PROBLEMS[problem_name],
        crossover=crossover,
        mutate=mutate,
        pop_size=POP_SIZE,
        n_generations=N_GENERATIONS,
        seed=seed,
        indicator=indicator,
        kappa=KAPPA,
    )
    elapsed = time.perf_counter() - start_time
    return result.objectives, elapsed


class PymooZDTProblem(PymooProblem):
    """Wrapper to use the ibex ZDT functions with Pymoo."""

    def __init__(self, problem_name: str) -> None:
        super().__init__(n_var=N_VARS, n_obj=2, xl=BOUNDS[0], xu=BOUNDS[1])
        self._problem_fn = PROBLEMS[problem_name]

    def _evaluate(self, x: np.ndarray, out: dict, *args, **kwargs) -> None:
        out["F"] = np.array([self._problem_fn(xi) for xi in x])


def run_pymoo(problem_name: str, seed: int) -> tuple[np.ndarray, float]:
    """Run Pymoo's NSGA-II baseline on one ZDT problem."""
    algorithm = NSGA2(
        pop_size=POP_SIZE,
        sampling=FloatRandomSampling(),
        crossover=SBX(eta=SBX_ETA, prob=1.0),
        mutation=PM(eta=PM_ETA, prob=MUTATION_PROB),
        eliminate_duplicates=False,
    )

    start_time = time.perf_counter()
    result = minimize(
        PymooZDTProblem(problem_name),
        algorithm,
        get_termination("n_gen", N_GENERATIONS),
        seed=seed,
        verbose=False,
    )
    elapsed = time.perf_counter() - start_time
    return result.pop.get("F"), elapsed


def run_benchmark() -> dict:
    """Run the full benchmark suite.

    Returns:
        Dictionary containing metadata and results.
    """
    metadata = {
        "timestamp": datetime.now(UTC).isoformat(),
        "parameters": {
            "pop_size": POP_SIZE,
            "n_generations": N_GENERATIONS,
            "n_vars": N_VARS,
            "bounds": list(BOUNDS),
            "sbx_eta": SBX_ETA,
            "pm_eta": PM_ETA,
            "mutation_prob": MUTATION_PROB,
            "kappa": KAPPA,
            "n_runs": N_RUNS,
            "seeds": SEEDS,
        },
    }

    runners = {
        "ibea-epsilon": lambda name, seed: run_ibex(name, "epsilon", seed),
        "ibea-hypervolume": lambda name, seed: run_ibex(name, "hypervolume", seed),
        "pymoo-nsga2": run_pymoo,
    }

    results = []
    total_runs = len(PROBLEMS) * len(runners) * N_RUNS
    current_run = 0

    for problem_name in PROBLEMS:
        reference = FRONTS[problem_name]()
        for label, runner in runners.items():
            for seed in SEEDS:
                current_run += 1
                logger.info(f"Running [{current_run}/{total_runs}]: {label} on {problem_name.upper()} (seed={seed})")

                objectives, elapsed = runner(problem_name, seed)
                scores = compute_indicators(objectives, INDICATORS, reference_set=reference)

                results.append(
                    {
                        "algorithm": label,
                        "problem": problem_name.upper(),
                        "seed": seed,
                        **scores,
                        "time_seconds": elapsed,
                    }
                )
                logger.info(
                    f"  HV: {scores['hypervolume']:.4f}, IGD: {scores['inverted']:.4f}, Time: {elapsed:.2f}s"
                )

    return {"metadata": metadata, "algorithms": list(runners), "results": results}


def print_summary(results: dict) -> None:
    """Print mean +/- std of every indicator, and mean run time, per problem."""
    algorithms = results["algorithms"]
    data = defaultdict(lambda: defaultdict(lambda: defaultdict(list)))
    for r in results["results"]:
        for key in (*INDICATORS, "time_seconds"):
            data[key][r["problem"]][r["algorithm"]].append(r[key])

    print("\n" + "=" * 80)
    print("BENCHMARK SUMMARY")
    print("=" * 80)
    print(f"\nParameters: pop_size={POP_SIZE}, generations={N_GENERATIONS}, runs={N_RUNS}")

    for key in (*INDICATORS, "time_seconds"):
        print(f"\n{key}:")
        header = f"{'Problem':<10}" + "".join(f"{name:>24}" for name in algorithms)
        print(header)
        print("-" * len(header))
        for problem in sorted(data[key]):
            row = f"{problem:<10}"
            for name in algorithms:
                values = data[key][problem][name]
                if not values:
                    row += f"{'N/A':>24}"
                elif key == "time_seconds":
                    row += f"{np.mean(values):>24.2f}"
                else:
                    row += f"{np.mean(values):>14.4f} +/- {np.std(values):.4f}"
            print(row)

    print()


def main() -> None:
    """Main entry point for the benchmark."""
    logger.info("Starting ZDT benchmark suite")
    logger.info(f"Parameters: pop_size={POP_SIZE}, generations={N_GENERATIONS}, runs={N_RUNS}")

    results = run_benchmark()

    output_path = Path(__file__).parent / "results" / "benchmark_results.json"
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(results, f, indent=2)

    logger.info(f"Results saved to {output_path}")
    print_summary(results)


if __name__ == "__main__":
    main()
