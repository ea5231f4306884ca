"""
_ambiguity.py
=============
Evaluate completions of a matrix whose ambiguous cells are unknown.

Modes
-----
pairwise (default)
    Exactly four completions, in the fixed order
    ``(0,0), (0,1), (1,0), (1,1)``.  For ``(first, rest)`` the first
    ambiguous cell in row-major order is set to *first* and every other
    ambiguous cell to *rest*.  This is a deliberately narrow heuristic: it
    explores two free values, not every per-cell assignment.  All four
    completions are evaluated even when fewer than two cells are ambiguous,
    so identical completions may appear twice.

exhaustive
    Every assignment of {0, 1} to every ambiguous cell (2**n completions),
    in binary counting order with the first ambiguous cell as the most
    significant bit.  Refused above ``max_cells`` ambiguous cells.

Each completion is an independent matrix, so all laminarity verdicts are
computed in one batch (concurrently under the 'cpu-parallel' backend);
trees are then built only for the feasible completions.

The baseline result, obtained by running the pipeline on the raw matrix
with ambiguous cells left at their sentinel value (i.e. absent), is always
returned alongside the feasible set.
"""

import itertools
import logging
from typing import List, NamedTuple, Optional, Tuple

import numpy as np

from perfphylo._backend import select_backend
from perfphylo._laminar import laminar_batch
from perfphylo._logging import log_resolution_start, log_resolution_summary
from perfphylo._matrix import ambiguous_cells, as_character_matrix, assign_cells
from perfphylo._order import character_order
from perfphylo._phylogeny import PhylogenyResult, assemble_result, perfect_phylogeny
from perfphylo._trace import TraceSink, emit

logger = logging.getLogger(__name__)


PAIRWISE_ASSIGNMENTS: Tuple[Tuple[int, int], ...] = ((0, 0), (0, 1), (1, 0), (1, 1))
MODES = ("pairwise", "exhaustive")
DEFAULT_MAX_CELLS = 16


class Candidate(NamedTuple):
    """One evaluated completion."""

    assignment: Tuple[int, ...]
    matrix: np.ndarray
    perfect: bool


class AmbiguityResolution:
    """
    Outcome of an ambiguity resolution run.

    Attributes (read-only after construction)
    -----------------------------------------
    baseline    : PhylogenyResult          Pipeline run on the raw matrix.
    candidates  : tuple[Candidate, ...]    Every evaluated completion, in
                                           evaluation order.
    feasible    : tuple[PhylogenyResult]   Results with ``perfect=True``,
                                           in evaluation order.
    assignments : tuple[tuple[int, ...]]   Assignment of each feasible result.
    cells       : tuple[(int, int), ...]   Ambiguous cells, row-major.
    mode        : str
    """

    def __init__(
        self,
        baseline: PhylogenyResult,
        candidates: List[Candidate],
        feasible: List[PhylogenyResult],
        assignments: List[Tuple[int, ...]],
        cells: List[Tuple[int, int]],
        mode: str,
    ) -> None:
        self.baseline = baseline
        self.candidates = tuple(candidates)
        self.feasible = tuple(feasible)
        self.assignments = tuple(assignments)
        self.cells = tuple(cells)
        self.mode = mode

    @property
    def n_ambiguous(self) -> int:
        return len(self.cells)

    @property
    def n_evaluated(self) -> int:
        return len(self.candidates)

    def __len__(self) -> int:
        return len(self.feasible)

    def __iter__(self):
        return iter(self.feasible)

    def __repr__(self) -> str:
        return (
            f"AmbiguityResolution(mode={self.mode!r}, "
            f"n_ambiguous={self.n_ambiguous}, n_evaluated={self.n_evaluated}, "
            f"n_feasible={len(self.feasible)})"
        )


class AmbiguityResolver:
    """
    Reusable resolver configuration.

    Parameters
    ----------
    internal : bool, default False
        Normalization mode passed to every pipeline run.
    mode : str, default 'pairwise'
        'pairwise' or 'exhaustive'.
    backend : str, default 'best'
        Laminarity backend.
    max_cells : int, default 16
        Largest number of ambiguous cells accepted in exhaustive mode.
    trace : callable, optional
        Diagnostic sink; receives ``ambiguity.candidate`` events in
        addition to the baseline's laminarity events.

    Examples
    --------
    >>> resolver = AmbiguityResolver()
    >>> resolution = resolver.resolve([[1, 2], [1, 0], [0, 0]])
    >>> [c.assignment for c in resolution.candidates]
    [(0, 0), (0, 1), (1, 0), (1, 1)]
    """

    def __init__(
        self,
        internal: bool = False,
        mode: str = "pairwise",
        backend: str = "best",
        max_cells: int = DEFAULT_MAX_CELLS,
        trace: Optional[TraceSink] = None,
    ) -> None:
        if mode not in MODES:
            raise ValueError(
                f"Unknown resolution mode '{mode}'. Valid options: {', '.join(MODES)}"
            )
        if max_cells < 0:
            raise ValueError("max_cells must be non-negative")
        self.internal = internal
        self.mode = mode
        self.backend = backend
        self.max_cells = max_cells
        self.trace = trace

    def assignments_for(self, n_ambiguous: int) -> List[Tuple[int, ...]]:
        """
        The assignments this resolver evaluates for *n_ambiguous* cells.

        Pairwise assignments are ``(first, rest)`` pairs; exhaustive ones
        hold one value per cell.

        Raises
        ------
        ValueError
            In exhaustive mode, if *n_ambiguous* exceeds ``max_cells``.
        """
        if n_ambiguous == 0:
            return []
        if self.mode == "pairwise":
            return list(PAIRWISE_ASSIGNMENTS)
        if n_ambiguous > self.max_cells:
            raise ValueError(
                f"Exhaustive resolution of {n_ambiguous} ambiguous cells would "
                f"evaluate 2**{n_ambiguous} completions; the limit is "
                f"max_cells={self.max_cells}."
            )
        return list(itertools.product((0, 1), repeat=n_ambiguous))

    def resolve(self, matrix) -> AmbiguityResolution:
        """
        Evaluate every completion of *matrix* and collect the feasible ones.

        Parameters
        ----------
        matrix : array-like
            Character matrix; ambiguous cells hold the sentinel 2.

        Returns
        -------
        AmbiguityResolution
            Zero feasible completions is a normal outcome.
        """
        resolved = select_backend(self.backend)
        matrix = as_character_matrix(matrix)
        cells = ambiguous_cells(matrix)

        baseline = perfect_phylogeny(
            matrix, internal=self.internal, backend=resolved, trace=self.trace
        )

        assignments = self.assignments_for(len(cells))
        log_resolution_start(self.mode, len(cells), len(assignments), resolved)

        completions = [self._complete(matrix, cells, a) for a in assignments]
        if completions:
            orders = np.stack([character_order(m) for m in completions])
            verdicts = laminar_batch(np.stack(completions), orders, backend=resolved)
        else:
            orders = np.zeros((0, matrix.shape[1]), dtype=np.int64)
            verdicts = np.zeros(0, dtype=np.bool_)

        candidates = []
        feasible = []
        feasible_assignments = []
        for assignment, completed, order, verdict in zip(
            assignments, completions, orders, verdicts
        ):
            perfect = bool(verdict)
            candidates.append(Candidate(tuple(assignment), completed, perfect))
            emit(
                self.trace,
                "ambiguity.candidate",
                assignment=tuple(assignment),
                perfect=perfect,
            )
            if perfect:
                feasible.append(
                    assemble_result(completed, order, True, self.internal, resolved)
                )
                feasible_assignments.append(tuple(assignment))

        log_resolution_summary(feasible_assignments, len(candidates))
        return AmbiguityResolution(
            baseline, candidates, feasible, feasible_assignments, cells, self.mode
        )

    def _complete(self, matrix, cells, assignment) -> np.ndarray:
        if self.mode == "pairwise":
            first, rest = assignment
            values = [first] + [rest] * (len(cells) - 1)
        else:
            values = list(assignment)
        return assign_cells(matrix, cells, values)


def resolve_ambiguities(
    matrix,
    internal: bool = False,
    mode: str = "pairwise",
    backend: str = "best",
    max_cells: int = DEFAULT_MAX_CELLS,
    trace: Optional[TraceSink] = None,
) -> AmbiguityResolution:
    """
    Functional shortcut for ``AmbiguityResolver(...).resolve(matrix)``.

    Examples
    --------
    >>> resolution = resolve_ambiguities([[1, 2], [1, 0], [0, 1]])
    >>> resolution.assignments
    ((0, 0), (0, 1))
    """
    resolver = AmbiguityResolver(
        internal=internal, mode=mode, backend=backend, max_cells=max_cells, trace=trace
    )
    return resolver.resolve(matrix)
