"""Tests for non-dominated archives.

Covers:
- NondominatedPopulation eviction, rejection and the non-dominance invariant
- EpsilonBoxDominanceArchive single-box occupancy
- new_archive dispatch
"""

import numpy as np
import pytest

from ibex.archive import EpsilonBoxDominanceArchive, NondominatedPopulation, new_archive
from ibex.comparators import EpsilonBoxDominanceComparator, ParetoDominanceComparator
from ibex.population import Solution
from ibex.primitives import dominates


def sol(*objectives: float, constraints=None) -> Solution:
    return Solution(np.zeros(1), objectives, constraints)


def assert_mutually_non_dominated(archive: NondominatedPopulation) -> None:
    members = list(archive)
    for a in members:
        for b in members:
            if a is not b:
                assert archive.comparator.compare(a, b) == 0


# =============================================================================
# TestNondominatedPopulation
# =============================================================================


class TestNondominatedPopulation:
    """Tests for NondominatedPopulation.add semantics."""

    def test_dominating_newcomer_evicts_all(self) -> None:
        """Adding (1,1), (2,2), (0.5,0.5) leaves only (0.5,0.5)."""
        archive = NondominatedPopulation()
        archive.add(sol(1, 1))
        archive.add(sol(2, 2))
        archive.add(sol(0.5, 0.5))

        np.testing.assert_array_equal(archive.objectives, [[0.5, 0.5]])

    def test_dominated_newcomer_rejected(self) -> None:
        archive = NondominatedPopulation([sol(1, 1)])
        assert not archive.add(sol(2, 2))
        assert len(archive) == 1

    def test_tradeoffs_coexist(self) -> None:
        archive = NondominatedPopulation([sol(1, 2), sol(2, 1)])
        assert len(archive) == 2

    def test_duplicate_rejected(self) -> None:
        """A newcomer equal to a member is not added twice."""
        archive = NondominatedPopulation([sol(1, 2)])
        assert not archive.add(sol(1, 2))
        assert len(archive) == 1

    def test_evicts_only_dominated_members(self) -> None:
        archive = NondominatedPopulation([sol(1, 4), sol(2, 3), sol(4, 1)])
        assert archive.add(sol(1.5, 2.5))

        objectives = {tuple(row) for row in archive.objectives}
        assert objectives == {(1.0, 4.0), (1.5, 2.5), (4.0, 1.0)}

    def test_feasible_evicts_infeasible(self) -> None:
        """The default comparator ranks feasibility before Pareto dominance."""
        archive = NondominatedPopulation([sol(0, 0, constraints=[1.0])])
        assert archive.add(sol(5, 5, constraints=[0.0]))
        assert archive[0].feasible
        assert len(archive) == 1

    def test_add_rejects_non_solution(self) -> None:
        with pytest.raises(TypeError, match="expected a Solution"):
            NondominatedPopulation().add("not a solution")  # type: ignore[arg-type]

    def test_invariant_after_random_insertions(self, rng: np.random.Generator) -> None:
        """No member dominates another after any insertion sequence."""
        archive = NondominatedPopulation(comparator=ParetoDominanceComparator())
        for row in rng.random((300, 3)):
            archive.add(sol(*row))

        objectives = archive.objectives
        for i in range(len(objectives)):
            for j in range(len(objectives)):
                assert not dominates(objectives[i], objectives[j])

    def test_copy_keeps_comparator(self) -> None:
        archive = NondominatedPopulation([sol(1, 2)])
        clone = archive.copy()
        clone.add(sol(0, 0))

        assert isinstance(clone, NondominatedPopulation)
        assert len(archive) == 1
        np.testing.assert_array_equal(clone.objectives, [[0.0, 0.0]])


# =============================================================================
# TestEpsilonBoxDominanceArchive
# =============================================================================


class TestEpsilonBoxDominanceArchive:
    """Tests for EpsilonBoxDominanceArchive."""

    def test_closer_to_corner_replaces(self) -> None:
        archive = EpsilonBoxDominanceArchive([0.5, 0.5])
        archive.add(sol(0.4, 0.4))
        assert archive.add(sol(0.1, 0.1))
        np.testing.assert_array_equal(archive.objectives, [[0.1, 0.1]])

    def test_farther_in_same_box_rejected(self) -> None:
        archive = EpsilonBoxDominanceArchive([1.0, 1.0])
        archive.add(sol(1.1, 1.9))
        assert not archive.add(sol(1.8, 1.8))

    def test_distance_tie_in_same_box_rejected(self) -> None:
        """The incumbent keeps its box when the newcomer is no better."""
        archive = EpsilonBoxDominanceArchive([1.0, 1.0])
        archive.add(sol(0.2, 0.6))
        assert not archive.add(sol(0.6, 0.2))
        np.testing.assert_array_equal(archive.objectives, [[0.2, 0.6]])

    def test_tradeoffs_in_different_boxes_coexist(self) -> None:
        archive = EpsilonBoxDominanceArchive([1.0, 1.0])
        assert archive.add(sol(1, 2))
        assert archive.add(sol(2, 1))
        assert len(archive) == 2

    def test_box_dominance_evicts(self) -> None:
        archive = EpsilonBoxDominanceArchive([1.0, 1.0], [sol(1.5, 1.5)])
        assert archive.add(sol(0.9, 0.9))
        np.testing.assert_array_equal(archive.objectives, [[0.9, 0.9]])

    def test_single_box_occupancy(self, rng: np.random.Generator) -> None:
        """No two members share a box after random insertions."""
        archive = EpsilonBoxDominanceArchive([0.05, 0.05])
        for row in rng.random((500, 2)):
            x = row[0]
            archive.add(sol(x, 1 - np.sqrt(x) + 0.1 * row[1]))

        boxes = archive.box_indices()
        assert len({tuple(b) for b in boxes}) == len(boxes)
        assert_mutually_non_dominated(archive)

    def test_accepts_prepared_comparator(self) -> None:
        cmp = EpsilonBoxDominanceComparator(0.25)
        archive = EpsilonBoxDominanceArchive(comparator=cmp)
        assert archive.box_comparator is cmp

    def test_requires_epsilons_or_comparator(self) -> None:
        with pytest.raises(ValueError, match="requires epsilons"):
            EpsilonBoxDominanceArchive()

    def test_rejects_non_box_comparator(self) -> None:
        with pytest.raises(TypeError, match="EpsilonBoxDominanceComparator"):
            EpsilonBoxDominanceArchive(comparator=ParetoDominanceComparator())  # type: ignore[arg-type]

    def test_copy_is_epsilon_archive(self) -> None:
        archive = EpsilonBoxDominanceArchive([0.5], [sol(0.1, 0.1)])
        clone = archive.copy()
        assert isinstance(clone, EpsilonBoxDominanceArchive)
        assert not clone.add(sol(0.2, 0.2))


# =============================================================================
# TestNewArchive
# =============================================================================


class TestNewArchive:
    """Tests for new_archive dispatch."""

    def test_no_epsilon_gives_plain_archive(self) -> None:
        archive = new_archive()
        assert type(archive) is NondominatedPopulation

    def test_empty_epsilon_gives_plain_archive(self) -> None:
        assert type(new_archive([])) is NondominatedPopulation

    def test_epsilon_gives_box_archive(self) -> None:
        archive = new_archive([0.1, 0.2])
        assert isinstance(archive, EpsilonBoxDominanceArchive)
        np.testing.assert_array_equal(archive.box_comparator.epsilons, [0.1, 0.2])
