"""
_matrix.py
==========
Binary taxon-by-character matrices.

A character matrix is a 2-D ``int8`` numpy array.  Rows index taxa and
columns index characters.  Every cell holds one of three values:

  ABSENT     0   the taxon lacks the character
  PRESENT    1   the taxon has the character
  AMBIGUOUS  2   the value is unknown (sentinel produced by the parser)

All functions here are pure: they never modify their input and always
return fresh arrays.  Matrices returned by :func:`as_character_matrix` are
flagged read-only so downstream stages cannot mutate a matrix that a
result object still refers to.
"""

from typing import List, Sequence, Tuple

import numpy as np


ABSENT = 0
PRESENT = 1
AMBIGUOUS = 2

_VALID_VALUES = (ABSENT, PRESENT, AMBIGUOUS)


def as_character_matrix(data) -> np.ndarray:
    """
    Validate *data* and return it as a read-only ``int8`` character matrix.

    Parameters
    ----------
    data : sequence of sequences of int, or 2-D numpy array
        Cell values.  Each must be 0, 1 or the AMBIGUOUS sentinel 2.

    Returns
    -------
    np.ndarray
        int8 array of shape (n_taxa, n_characters), ``writeable=False``.

    Raises
    ------
    ValueError
        If the rows have different lengths, the input is not
        two-dimensional, there are no rows or no columns, or a value lies
        outside {0, 1, 2}.
    TypeError
        If a cell is not an integer.
    """
    if isinstance(data, np.ndarray):
        arr = data
    else:
        rows = [list(row) for row in data]
        if len(rows) == 0:
            raise ValueError("Character matrix must have at least one row.")
        width = len(rows[0])
        for i, row in enumerate(rows):
            if len(row) != width:
                raise ValueError(
                    f"Character matrix is not rectangular: row {i} has "
                    f"{len(row)} columns, expected {width}."
                )
        for i, row in enumerate(rows):
            for j, value in enumerate(row):
                if isinstance(value, bool) or not isinstance(
                    value, (int, np.integer)
                ):
                    raise TypeError(
                        f"Matrix cell ({i}, {j}) must be an integer, "
                        f"got {type(value).__name__}."
                    )
        arr = np.array(rows, dtype=np.int64).reshape(len(rows), width)

    if arr.ndim != 2:
        raise ValueError(
            f"Character matrix must be two-dimensional, got {arr.ndim} dimension(s)."
        )
    if arr.shape[0] == 0:
        raise ValueError("Character matrix must have at least one row.")
    if arr.shape[1] == 0:
        raise ValueError("Character matrix must have at least one column.")
    if arr.dtype.kind not in "iu":
        raise TypeError(
            f"Character matrix must hold integers, got dtype {arr.dtype}."
        )

    invalid = ~np.isin(arr, _VALID_VALUES)
    if invalid.any():
        i, j = (int(x) for x in np.argwhere(invalid)[0])
        raise ValueError(
            f"Matrix cell ({i}, {j}) has value {int(arr[i, j])}; expected "
            f"{ABSENT} (absent), {PRESENT} (present) or {AMBIGUOUS} (ambiguous)."
        )

    matrix = np.array(arr, dtype=np.int8, copy=True)
    matrix.setflags(write=False)
    return matrix


def ambiguous_cells(matrix: np.ndarray) -> List[Tuple[int, int]]:
    """
    Return the coordinates of every AMBIGUOUS cell in row-major order.

    Examples
    --------
    >>> ambiguous_cells(as_character_matrix([[1, 2], [2, 0]]))
    [(0, 1), (1, 0)]
    """
    return [(int(i), int(j)) for i, j in np.argwhere(matrix == AMBIGUOUS)]


def assign_cells(
    matrix: np.ndarray, cells: Sequence[Tuple[int, int]], values: Sequence[int]
) -> np.ndarray:
    """
    Return a read-only copy of *matrix* with ``cells[k]`` set to ``values[k]``.

    Raises
    ------
    ValueError
        If *cells* and *values* differ in length or a value is not 0 or 1.
    """
    if len(cells) != len(values):
        raise ValueError(
            f"Got {len(values)} value(s) for {len(cells)} cell(s)."
        )
    completed = np.array(matrix, dtype=np.int8, copy=True)
    for (i, j), value in zip(cells, values):
        if value not in (ABSENT, PRESENT):
            raise ValueError(
                f"Ambiguous cells can only be completed with {ABSENT} or "
                f"{PRESENT}, got {value!r}."
            )
        completed[i, j] = value
    completed.setflags(write=False)
    return completed


def complete_matrix(matrix: np.ndarray, first: int, rest: int) -> np.ndarray:
    """
    Complete every ambiguous cell of *matrix* with one of two values.

    The first ambiguous cell in row-major order receives *first*; every
    other ambiguous cell receives *rest*.  Cells that are not ambiguous are
    copied unchanged.

    Examples
    --------
    >>> m = as_character_matrix([[2, 1], [2, 2]])
    >>> complete_matrix(m, 1, 0).tolist()
    [[1, 1], [0, 0]]
    """
    cells = ambiguous_cells(matrix)
    values = [first] + [rest] * (len(cells) - 1) if cells else []
    return assign_cells(matrix, cells, values)


def present_mask(matrix: np.ndarray) -> np.ndarray:
    """Boolean mask of PRESENT cells; AMBIGUOUS cells count as not present."""
    return matrix == PRESENT
