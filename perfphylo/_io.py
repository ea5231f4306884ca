"""
_io.py
======
Boundary collaborators: reading matrices from text and writing trees as
Graphviz DOT.

None of the pipeline stages import this module; it only converts between
files/strings and the core data structures.

Matrix text format
------------------
One line per taxon, whitespace-separated non-negative integers, one per
character column::

    1 1 0 0
    1 0 * 0
    0 0 1 1

Blank lines are skipped.  The ambiguity marker (default ``*``) becomes the
AMBIGUOUS sentinel 2; a literal ``2`` is read as the same sentinel.

DOT output
----------
::

    digraph phylogeny {
        0 [ label = "Root" ]
        1 [ label = "" ]
        2 [ label = "S_1" ]
        0 -> 1 [ label = "C_1,C_2" ]
        1 -> 2 [ label = "" ]
    }

Live nodes are renumbered 0..n-1 in handle order, so the output does not
depend on how many nodes normalization removed.
"""

import os
from typing import List

import numpy as np

from perfphylo._matrix import AMBIGUOUS, as_character_matrix
from perfphylo._tree import PhylogenyTree


DEFAULT_AMBIGUITY_MARKER = "*"


# ======================================================================== #
# Matrix input                                                              #
# ======================================================================== #


def parse_matrix(text: str, ambiguity_marker: str = DEFAULT_AMBIGUITY_MARKER) -> np.ndarray:
    """
    Parse a character matrix from *text*.

    Parameters
    ----------
    text : str
        Matrix in the format described in the module docstring.
    ambiguity_marker : str, default '*'
        Token that marks an ambiguous cell.

    Returns
    -------
    np.ndarray
        Read-only int8 character matrix.

    Raises
    ------
    ValueError
        If a token is neither a non-negative integer nor the marker, rows
        have different lengths, or the text holds no rows.

    Examples
    --------
    >>> parse_matrix("1 0\\n* 1\\n").tolist()
    [[1, 0], [2, 1]]
    """
    rows: List[List[int]] = []
    width = None
    for lineno, line in enumerate(text.splitlines(), start=1):
        tokens = line.split()
        if not tokens:
            continue
        row = []
        for token in tokens:
            if token == ambiguity_marker:
                row.append(AMBIGUOUS)
            elif token.isdecimal():
                row.append(int(token))
            else:
                raise ValueError(
                    f"Line {lineno}: invalid token {token!r}; expected a "
                    f"non-negative integer or {ambiguity_marker!r}."
                )
        if width is None:
            width = len(row)
        elif len(row) != width:
            raise ValueError(
                f"Line {lineno}: {len(row)} columns, expected {width}."
            )
        rows.append(row)

    if not rows:
        raise ValueError("Matrix text contains no rows.")
    return as_character_matrix(rows)


def read_matrix(path, ambiguity_marker: str = DEFAULT_AMBIGUITY_MARKER) -> np.ndarray:
    """Read and parse a character matrix file (see :func:`parse_matrix`)."""
    with open(path) as fh:
        return parse_matrix(fh.read(), ambiguity_marker=ambiguity_marker)


# ======================================================================== #
# DOT output                                                                #
# ======================================================================== #


def _quote(label: str) -> str:
    escaped = label.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def to_dot(tree: PhylogenyTree, name: str = "phylogeny") -> str:
    """
    Render *tree* as Graphviz DOT text.

    An empty tree renders as an empty digraph.
    """
    index = {handle: i for i, handle in enumerate(tree.node_ids())}
    lines = [f"digraph {name} {{"]
    for handle, label in tree.nodes():
        lines.append(f"    {index[handle]} [ label = {_quote(label)} ]")
    for source, target, label in tree.edges():
        lines.append(
            f"    {index[source]} -> {index[target]} [ label = {_quote(label)} ]"
        )
    lines.append("}")
    return "\n".join(lines) + "\n"


def write_dot(tree: PhylogenyTree, path, name: str = "phylogeny") -> None:
    """Write :func:`to_dot` output for *tree* to *path*."""
    with open(path, "w") as fh:
        fh.write(to_dot(tree, name=name))


def write_resolution(resolution, directory, stem: str) -> List[str]:
    """
    Write one DOT file per feasible completion of an ambiguity resolution.

    Files are named ``<stem>_<i>.dot`` with *i* counting feasible results
    in evaluation order.

    Parameters
    ----------
    resolution : AmbiguityResolution
    directory : str or os.PathLike
        Created if it does not exist.
    stem : str
        File name prefix, typically the input file's base name.

    Returns
    -------
    list[str]
        Paths written, in order.
    """
    os.makedirs(directory, exist_ok=True)
    paths = []
    for i, result in enumerate(resolution.feasible):
        path = os.path.join(directory, f"{stem}_{i}.dot")
        write_dot(result.tree, path)
        paths.append(path)
    return paths
