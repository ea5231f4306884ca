"""
_order.py
=========
Deterministic column visiting order.

Characters shared by more taxa must be visited before rarer ones so that a
character's ancestor in the phylogeny is always seen first along a row.
Columns are sorted by the key ``(-sum_j, j)``: descending count of PRESENT
cells, ties broken by ascending column index.
"""

import numpy as np

from perfphylo._matrix import present_mask


def column_sums(matrix: np.ndarray) -> np.ndarray:
    """
    Count PRESENT cells per column.

    AMBIGUOUS cells do not contribute to the count.

    Returns
    -------
    np.ndarray
        int64 array of length n_characters.
    """
    return present_mask(matrix).sum(axis=0).astype(np.int64)


def character_order(matrix: np.ndarray) -> np.ndarray:
    """
    Return the column visiting order for *matrix*.

    Parameters
    ----------
    matrix : np.ndarray
        Character matrix with at least one column (the caller guards this;
        see :func:`perfphylo._matrix.as_character_matrix`).

    Returns
    -------
    np.ndarray
        Read-only int64 permutation of ``range(n_characters)``.

    Examples
    --------
    >>> character_order(np.array([[0, 1, 1], [0, 1, 0]], dtype=np.int8)).tolist()
    [1, 2, 0]
    """
    sums = column_sums(matrix)
    # Stable sort on the negated sums keeps equal-sum columns in index order.
    order = np.argsort(-sums, kind="stable").astype(np.int64)
    order.setflags(write=False)
    return order
