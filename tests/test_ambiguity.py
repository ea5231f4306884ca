"""
tests/test_ambiguity.py
=======================
Tests for ambiguity resolution (AmbiguityResolver / resolve_ambiguities).

Matrix fixtures (tests/matrices/)
---------------------------------
  one_ambiguous_3x3.txt     1 1 0 / 1 * 0 / 0 0 1

      One ambiguous cell (1, 1).  Either value nests character C_2 inside
      C_1, so all four pairwise completions are feasible; (0,0)/(0,1) and
      (1,0)/(1,1) are pairwise identical.

  ambiguous_5x3.txt         1 1 0 / 1 * 0 / 0 0 * / 0 1 1 / * 1 0

      Ambiguous cells (1, 1), (2, 2), (4, 0) in row-major order.  The raw
      matrix is not perfect.

      pairwise      only (first=1, rest=0) is feasible
      exhaustive    (1, 0, 0) and (1, 0, 1): cell (1, 1) must be 1 to nest
                    C_1 in C_2, cell (2, 2) must be 0 to nest C_3 in C_2,
                    and cell (4, 0) is free.
"""

import logging
import os
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from perfphylo import (
    AmbiguityResolution,
    AmbiguityResolver,
    PhylogenyResult,
    TraceRecorder,
    read_matrix,
    resolve_ambiguities,
)
from perfphylo._ambiguity import PAIRWISE_ASSIGNMENTS
from perfphylo._backend import get_available_backends

_MATRICES_DIR = os.path.join(os.path.dirname(__file__), "matrices")

_AVAILABLE = get_available_backends()


def load_matrix(filename: str) -> np.ndarray:
    """Read *filename* from tests/matrices/."""
    return read_matrix(os.path.join(_MATRICES_DIR, filename))


# ======================================================================== #
# 1. Pairwise mode                                                          #
# ======================================================================== #


@pytest.mark.parametrize("backend", _AVAILABLE)
class TestPairwise:
    def test_fixed_candidate_order(self, backend):
        resolution = resolve_ambiguities(
            load_matrix("ambiguous_5x3.txt"), backend=backend
        )
        assert [c.assignment for c in resolution.candidates] == [
            (0, 0), (0, 1), (1, 0), (1, 1),
        ]

    def test_feasible_set(self, backend):
        resolution = resolve_ambiguities(
            load_matrix("ambiguous_5x3.txt"), backend=backend
        )
        assert resolution.assignments == ((1, 0),)
        assert [c.perfect for c in resolution.candidates] == [False, False, True, False]

    def test_first_and_rest_completion(self, backend):
        resolution = resolve_ambiguities(
            load_matrix("ambiguous_5x3.txt"), backend=backend
        )
        completed = resolution.candidates[2].matrix
        assert completed[1, 1] == 1
        assert completed[2, 2] == 0
        assert completed[4, 0] == 0

    def test_single_cell_all_feasible(self, backend):
        resolution = resolve_ambiguities(
            load_matrix("one_ambiguous_3x3.txt"), backend=backend
        )
        assert resolution.n_evaluated == 4
        assert resolution.assignments == PAIRWISE_ASSIGNMENTS
        assert len(resolution) == 4

    def test_duplicate_completions_kept(self, backend):
        resolution = resolve_ambiguities(
            load_matrix("one_ambiguous_3x3.txt"), backend=backend
        )
        first, second = resolution.candidates[0], resolution.candidates[1]
        np.testing.assert_array_equal(first.matrix, second.matrix)
        assert resolution.feasible[0].tree.canonical() == resolution.feasible[1].tree.canonical()


class TestFeasibleResults:
    def setup_method(self):
        self.resolution = resolve_ambiguities(
            load_matrix("ambiguous_5x3.txt"), backend="python"
        )

    def test_results_are_perfect(self):
        for result in self.resolution:
            assert isinstance(result, PhylogenyResult)
            assert result.perfect
            assert result.tree.frozen

    def test_result_matrix_is_complete(self):
        (result,) = self.resolution.feasible
        assert not (result.matrix == 2).any()
        assert result.order.tolist() == [1, 0, 2]

    def test_result_tree(self):
        (result,) = self.resolution.feasible
        tree = result.tree
        assert len(tree.leaves()) == 5
        assert tree.path_characters(tree.find_taxon("S_1")) == ["C_2", "C_1"]
        assert tree.path_characters(tree.find_taxon("S_3")) == []

    def test_baseline(self):
        baseline = self.resolution.baseline
        assert baseline.perfect is False
        assert baseline.tree.is_empty
        assert baseline.matrix[1, 1] == 2

    def test_cells_and_mode(self):
        assert self.resolution.cells == ((1, 1), (2, 2), (4, 0))
        assert self.resolution.n_ambiguous == 3
        assert self.resolution.mode == "pairwise"

    def test_candidate_matrices_read_only(self):
        with pytest.raises(ValueError):
            self.resolution.candidates[0].matrix[0, 0] = 0

    def test_repr(self):
        assert "n_feasible=1" in repr(self.resolution)

    def test_internal_propagates(self):
        resolution = resolve_ambiguities(
            load_matrix("ambiguous_5x3.txt"), internal=True, backend="python"
        )
        (result,) = resolution.feasible
        assert result.internal is True
        assert resolution.baseline.internal is True


# ======================================================================== #
# 2. Exhaustive mode                                                        #
# ======================================================================== #


@pytest.mark.parametrize("backend", _AVAILABLE)
class TestExhaustive:
    def test_every_assignment_evaluated(self, backend):
        resolution = resolve_ambiguities(
            load_matrix("ambiguous_5x3.txt"), mode="exhaustive", backend=backend
        )
        assert resolution.n_evaluated == 8
        assert resolution.candidates[0].assignment == (0, 0, 0)
        assert resolution.candidates[-1].assignment == (1, 1, 1)

    def test_feasible_set(self, backend):
        resolution = resolve_ambiguities(
            load_matrix("ambiguous_5x3.txt"), mode="exhaustive", backend=backend
        )
        assert resolution.assignments == ((1, 0, 0), (1, 0, 1))

    def test_per_cell_values(self, backend):
        resolution = resolve_ambiguities(
            load_matrix("ambiguous_5x3.txt"), mode="exhaustive", backend=backend
        )
        for candidate in resolution.candidates:
            for (i, j), value in zip(resolution.cells, candidate.assignment):
                assert candidate.matrix[i, j] == value


class TestExhaustiveLimits:
    def test_max_cells(self):
        resolver = AmbiguityResolver(mode="exhaustive", max_cells=2)
        with pytest.raises(ValueError, match="max_cells=2"):
            resolver.resolve(load_matrix("ambiguous_5x3.txt"))

    def test_max_cells_irrelevant_for_pairwise(self):
        resolver = AmbiguityResolver(mode="pairwise", max_cells=0, backend="python")
        assert resolver.resolve(load_matrix("ambiguous_5x3.txt")).n_evaluated == 4

    def test_assignments_for(self):
        resolver = AmbiguityResolver(mode="exhaustive")
        assert resolver.assignments_for(0) == []
        assert resolver.assignments_for(2) == [(0, 0), (0, 1), (1, 0), (1, 1)]
        assert len(resolver.assignments_for(5)) == 32


# ======================================================================== #
# 3. Edge cases and configuration                                           #
# ======================================================================== #


class TestNoAmbiguity:
    def test_perfect_matrix(self):
        resolution = resolve_ambiguities(load_matrix("nested_6x5.txt"), backend="python")
        assert resolution.candidates == ()
        assert resolution.feasible == ()
        assert resolution.baseline.perfect
        assert resolution.n_ambiguous == 0

    def test_imperfect_matrix(self):
        resolution = resolve_ambiguities(load_matrix("conflict_3x2.txt"), backend="python")
        assert len(resolution) == 0
        assert not resolution.baseline.perfect


class TestConfiguration:
    def test_unknown_mode(self):
        with pytest.raises(ValueError, match="Unknown resolution mode"):
            AmbiguityResolver(mode="greedy")

    def test_negative_max_cells(self):
        with pytest.raises(ValueError):
            AmbiguityResolver(max_cells=-1)

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown backend"):
            resolve_ambiguities([[2]], backend="gpu")

    def test_invalid_matrix(self):
        with pytest.raises(ValueError):
            resolve_ambiguities([[1, 2], [0]])

    def test_resolver_is_reusable(self):
        resolver = AmbiguityResolver(backend="python")
        first = resolver.resolve(load_matrix("ambiguous_5x3.txt"))
        second = resolver.resolve(load_matrix("one_ambiguous_3x3.txt"))
        assert isinstance(first, AmbiguityResolution)
        assert len(first) == 1
        assert len(second) == 4


# ======================================================================== #
# 4. Diagnostics                                                            #
# ======================================================================== #


class TestDiagnostics:
    def test_candidate_events(self):
        recorder = TraceRecorder()
        resolve_ambiguities(
            load_matrix("ambiguous_5x3.txt"), backend="python", trace=recorder
        )
        events = recorder.named("ambiguity.candidate")
        assert [e.data["assignment"] for e in events] == list(PAIRWISE_ASSIGNMENTS)
        assert [e.data["perfect"] for e in events] == [False, False, True, False]

    def test_baseline_events_first(self):
        recorder = TraceRecorder()
        resolve_ambiguities(
            load_matrix("ambiguous_5x3.txt"), backend="python", trace=recorder
        )
        names = [e.name for e in recorder]
        assert names[:2] == ["laminarity.markers", "laminarity.conflict"]
        assert names[2:] == ["ambiguity.candidate"] * 4

    def test_summary_logged(self, caplog):
        with caplog.at_level(logging.INFO, logger="perfphylo"):
            resolve_ambiguities(load_matrix("ambiguous_5x3.txt"), backend="python")
        messages = [r.message for r in caplog.records]
        assert any("1 of 4 completion(s)" in m for m in messages)
        assert any("feasible: (1, 0)" in m for m in messages)

    def test_zero_feasible_not_a_warning(self, caplog):
        with caplog.at_level(logging.INFO, logger="perfphylo"):
            resolution = resolve_ambiguities(
                [[1, 0, 2], [0, 1, 0], [1, 1, 0]], backend="python"
            )
        assert len(resolution) == 0
        assert not any(r.levelno >= logging.WARNING for r in caplog.records)
