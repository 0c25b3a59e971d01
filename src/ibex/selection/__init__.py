"""Parent selection strategies."""

from ibex.selection.tournament import TournamentSelection

__all__ = ["TournamentSelection"]
