"""
_cpu_kernels.py
===============
Numba-compiled laminarity kernels.

This module contains ONLY numba-accelerated code and does not import other
project modules.  The pure-Python reference implementations live in
``_laminar.py``; both must produce identical markers and verdicts.

Exported Functions
------------------
_laminar_markers_nb : njit function
    Fill the per-cell predecessor marker matrix for one matrix.

_first_conflict_nb : njit function
    Locate the first column whose markers disagree.

_laminar_batch_njit : njit function
    Evaluate laminarity for a stack of candidate matrices in parallel.

Notes
-----
- Matrices are int8, orders and markers are int64.
- Marker value 0 means "no PRESENT cell recorded"; the running marker starts
  at -1 and is advanced to ``j + 1`` after column j, so a recorded marker is
  never 0.
- cache=True persists compiled binary to disk for faster subsequent runs
"""

import numpy as np
from numba import njit, prange


# ======================================================================== #
# CPU Kernels                                                               #
# ======================================================================== #


@njit(cache=True)
def _laminar_markers_nb(matrix, order, markers_out):
    """
    Record, for every PRESENT cell, the previous PRESENT column on its row.

    Parameters
    ----------
    matrix : int8[n_taxa, n_characters]
    order : int64[n_characters]
        Column visiting order.
    markers_out : int64[n_taxa, n_characters]
        Zero-initialized output.
    """
    n_rows = matrix.shape[0]
    n_cols = order.shape[0]
    for i in range(n_rows):
        k = -1
        for pos in range(n_cols):
            j = order[pos]
            if matrix[i, j] == 1:
                markers_out[i, j] = k
                k = j + 1


@njit(cache=True)
def _first_conflict_nb(markers):
    """
    Scan columns left to right, rows top to bottom.

    Returns
    -------
    (int, int)
        (column, row) of the first marker that differs from the first
        non-zero marker of its column, or (-1, -1) when there is none.
    """
    n_rows = markers.shape[0]
    n_cols = markers.shape[1]
    for j in range(n_cols):
        first = 0
        for i in range(n_rows):
            value = markers[i, j]
            if value != 0:
                if first == 0:
                    first = value
                elif value != first:
                    return j, i
    return -1, -1


@njit(parallel=True, cache=True)
def _laminar_batch_njit(matrices, orders, laminar_out):
    """
    Laminarity verdicts for a stack of candidate matrices.

    The loop over candidates runs in parallel via prange.  No atomics are
    needed: each thread owns its marker buffer and its laminar_out entry.

    Parameters
    ----------
    matrices : int8[n_candidates, n_taxa, n_characters]
    orders : int64[n_candidates, n_characters]
        Column order computed for each candidate.
    laminar_out : bool[n_candidates]
        Output verdicts.
    """
    n_candidates = matrices.shape[0]
    n_rows = matrices.shape[1]
    n_cols = matrices.shape[2]
    for c in prange(n_candidates):
        markers = np.zeros((n_rows, n_cols), dtype=np.int64)
        _laminar_markers_nb(matrices[c], orders[c], markers)
        column, _ = _first_conflict_nb(markers)
        laminar_out[c] = column < 0
