"""
_laminar.py
===========
Laminar family test: does a character matrix admit a perfect phylogeny?

Algorithm
---------
Columns are visited in the fixed character order (see ``_order.py``).  For
each taxon row a running marker ``k`` starts at -1; at every PRESENT cell
the current marker is recorded in ``markers[i, j]`` and then advanced to
``j + 1``.  The recorded value is therefore the 1-based index of the
previous PRESENT character on that row, or -1 when character j is the
first one the row acquires.

A matrix is laminar iff, for every column, all non-zero markers agree: each
character then has a single well-defined parent character, which is
exactly the condition for the character sets to be pairwise disjoint or
nested.  A column without PRESENT cells is vacuously consistent.

Public API
----------
  laminar_markers(matrix, order, backend='best')  -> int64 array
  find_conflict(markers, backend='best')          -> (column, row) or None
  is_laminar(matrix, order, backend='best', trace=None) -> bool
  laminar_batch(matrices, orders, backend='best') -> bool array
"""

from typing import Optional, Tuple

import numpy as np

from perfphylo._backend import select_backend
from perfphylo._logging import log_laminarity
from perfphylo._trace import TraceSink, emit


_NO_MARKER = 0
_START_MARKER = -1


# ======================================================================== #
# Pure-Python reference kernels                                            #
# ======================================================================== #


def _laminar_markers_py(matrix, order, markers_out) -> None:
    """Reference twin of ``_cpu_kernels._laminar_markers_nb``."""
    n_rows = matrix.shape[0]
    for i in range(n_rows):
        k = _START_MARKER
        for j in order:
            j = int(j)
            if matrix[i, j] == 1:
                markers_out[i, j] = k
                k = j + 1


def _first_conflict_py(markers) -> Tuple[int, int]:
    """Reference twin of ``_cpu_kernels._first_conflict_nb``."""
    n_rows, n_cols = markers.shape
    for j in range(n_cols):
        first = _NO_MARKER
        for i in range(n_rows):
            value = int(markers[i, j])
            if value != _NO_MARKER:
                if first == _NO_MARKER:
                    first = value
                elif value != first:
                    return j, i
    return -1, -1


# ======================================================================== #
# Public API                                                               #
# ======================================================================== #


def laminar_markers(
    matrix: np.ndarray, order: np.ndarray, backend: str = "best"
) -> np.ndarray:
    """
    Compute the predecessor marker matrix.

    Parameters
    ----------
    matrix : np.ndarray
        int8 character matrix.
    order : np.ndarray
        Column visiting order from :func:`character_order`.
    backend : str, default 'best'
        'python', 'cpu-parallel' or 'best'.

    Returns
    -------
    np.ndarray
        int64 array with the matrix's shape.  0 where the cell is not
        PRESENT, -1 for a row's first PRESENT character, otherwise the
        1-based index of the row's previous PRESENT character.
    """
    resolved = select_backend(backend)
    # Writable C-ordered copies keep numba to a single specialization.
    matrix = np.array(matrix, dtype=np.int8, order="C")
    order = np.array(order, dtype=np.int64, order="C")
    markers = np.zeros(matrix.shape, dtype=np.int64)

    if resolved == "cpu-parallel":
        from perfphylo._cpu_kernels import _laminar_markers_nb

        _laminar_markers_nb(matrix, order, markers)
    else:
        _laminar_markers_py(matrix, order, markers)
    return markers


def find_conflict(
    markers: np.ndarray, backend: str = "best"
) -> Optional[Tuple[int, int]]:
    """
    Return the (column, row) of the first inconsistent marker, or None.

    Columns are scanned in index order and rows top to bottom; the first
    non-zero marker of a column is the reference value.
    """
    resolved = select_backend(backend)
    if resolved == "cpu-parallel":
        from perfphylo._cpu_kernels import _first_conflict_nb

        column, row = _first_conflict_nb(np.ascontiguousarray(markers, dtype=np.int64))
    else:
        column, row = _first_conflict_py(markers)

    if column < 0:
        return None
    return int(column), int(row)


def is_laminar(
    matrix: np.ndarray,
    order: np.ndarray,
    backend: str = "best",
    trace: Optional[TraceSink] = None,
) -> bool:
    """
    Decide whether *matrix* admits a perfect phylogeny.

    Parameters
    ----------
    matrix : np.ndarray
        int8 character matrix.  AMBIGUOUS cells count as absent.
    order : np.ndarray
        Column visiting order; must not change between this check and tree
        construction.
    backend : str, default 'best'
    trace : callable, optional
        Diagnostic sink.  Receives ``laminarity.markers`` (the marker
        matrix) and, when the check fails, ``laminarity.conflict`` with the
        offending column, row, expected and found markers.

    Returns
    -------
    bool
    """
    resolved = select_backend(backend)
    markers = laminar_markers(matrix, order, backend=resolved)
    emit(trace, "laminarity.markers", markers=markers, order=np.asarray(order))

    conflict = find_conflict(markers, backend=resolved)
    if conflict is not None:
        column, row = conflict
        column_markers = markers[:, column]
        expected = int(column_markers[column_markers != _NO_MARKER][0])
        emit(
            trace,
            "laminarity.conflict",
            column=column,
            row=row,
            expected=expected,
            found=int(markers[row, column]),
        )

    log_laminarity(conflict is None, conflict, resolved)
    return conflict is None


def laminar_batch(
    matrices: np.ndarray, orders: np.ndarray, backend: str = "best"
) -> np.ndarray:
    """
    Laminarity verdicts for a stack of matrices of identical shape.

    Parameters
    ----------
    matrices : np.ndarray
        int8 array, shape (n_candidates, n_taxa, n_characters).
    orders : np.ndarray
        int64 array, shape (n_candidates, n_characters); row c is the
        character order of ``matrices[c]``.
    backend : str, default 'best'
        Under 'cpu-parallel' the candidates are evaluated concurrently.

    Returns
    -------
    np.ndarray
        bool array of length n_candidates.
    """
    resolved = select_backend(backend)
    matrices = np.array(matrices, dtype=np.int8, order="C")
    orders = np.array(orders, dtype=np.int64, order="C")
    n_candidates = matrices.shape[0]
    laminar_out = np.zeros(n_candidates, dtype=np.bool_)

    if n_candidates == 0:
        return laminar_out

    if resolved == "cpu-parallel":
        from perfphylo._cpu_kernels import _laminar_batch_njit

        _laminar_batch_njit(matrices, orders, laminar_out)
    else:
        for c in range(n_candidates):
            markers = np.zeros(matrices.shape[1:], dtype=np.int64)
            _laminar_markers_py(matrices[c], orders[c], markers)
            laminar_out[c] = _first_conflict_py(markers)[0] < 0
    return laminar_out
