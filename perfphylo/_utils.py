"""
_utils.py
=========
General-purpose naming helpers for perfphylo.

These are standalone functions that don't depend on the main classes.
Taxa and characters are identified by 1-based names derived from their
0-based row and column indices in the character matrix.
"""

from typing import List


TAXON_PREFIX = "S_"
CHARACTER_PREFIX = "C_"
CHAIN_SEPARATOR = ","


def taxon_name(row: int) -> str:
    """
    Return the identifier of the taxon stored in matrix row *row*.

    Examples
    --------
    >>> taxon_name(0)
    'S_1'
    """
    return f"{TAXON_PREFIX}{row + 1}"


def character_name(column: int) -> str:
    """
    Return the identifier of the character stored in matrix column *column*.

    Examples
    --------
    >>> character_name(2)
    'C_3'
    """
    return f"{CHARACTER_PREFIX}{column + 1}"


def character_index(name: str) -> int:
    """
    Inverse of :func:`character_name`.

    Raises
    ------
    ValueError
        If *name* is not of the form ``C_<n>`` with n >= 1.

    Examples
    --------
    >>> character_index('C_3')
    2
    """
    if not name.startswith(CHARACTER_PREFIX):
        raise ValueError(f"Not a character identifier: {name!r}")
    suffix = name[len(CHARACTER_PREFIX):]
    if not suffix.isdigit() or int(suffix) < 1:
        raise ValueError(f"Not a character identifier: {name!r}")
    return int(suffix) - 1


def join_chain(first: str, second: str) -> str:
    """
    Join two edge labels into a character-acquisition chain.

    Empty parts (unlabeled edges) are dropped so a chain never carries a
    leading, trailing or doubled separator.

    Examples
    --------
    >>> join_chain('C_1', 'C_4')
    'C_1,C_4'
    >>> join_chain('C_1,C_2', '')
    'C_1,C_2'
    """
    return CHAIN_SEPARATOR.join(part for part in (first, second) if part)


def split_chain(label: str) -> List[str]:
    """
    Split an edge label into its character identifiers, in traversal order.

    Examples
    --------
    >>> split_chain('C_1,C_4')
    ['C_1', 'C_4']
    >>> split_chain('')
    []
    """
    return [part for part in label.split(CHAIN_SEPARATOR) if part]
