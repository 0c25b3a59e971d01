"""Variation operators and initialization.

This module provides:
- lift / lift_parallel: lift per-individual functions to population level
- sbx_crossover: Simulated Binary Crossover factory
- polynomial_mutation: Polynomial mutation factory
- GAVariation: crossover + mutation over solutions
- RandomInitialization: initial population from a sampler
"""

from ibex.operators.base import lift, lift_parallel
from ibex.operators.standard import polynomial_mutation, sbx_crossover
from ibex.operators.variation import GAVariation, RandomInitialization

__all__ = [
    "lift",
    "lift_parallel",
    "sbx_crossover",
    "polynomial_mutation",
    "GAVariation",
    "RandomInitialization",
]
