"""Evolutionary algorithm implementations."""

from ibex.algorithms.ibea import IBEA, ibea

__all__ = ["IBEA", "ibea"]
