"""
_phylogeny.py
=============
The perfect phylogeny pipeline and its immutable result bundle.

Public API
----------
  perfect_phylogeny(matrix, internal=False, backend='best', trace=None)
      Run the whole pipeline on one matrix:

        character_order → is_laminar → (if laminar) build_tree
                        → normalize_tree → PhylogenyResult

  PhylogenyResult
      Read-only bundle: matrix, order, column_sums, perfect, tree,
      internal, backend.

A matrix that is not laminar is a normal outcome, not an error: the result
has ``perfect=False`` and an empty tree.  Callers must check the flag.

Logging
-------
The module uses Python's standard logging framework:

  logging.getLogger('perfphylo._phylogeny')
      INFO level:    backend availability (once, at import), pipeline
                     outcome per matrix.
      DEBUG level:   laminarity verdicts, tree sizes, trace events.
      WARNING level: numba performance warnings routed through the logger.

Silence it the standard way, or with :func:`perfphylo.quiet`:

    import logging
    logging.getLogger('perfphylo').setLevel(logging.WARNING)
"""

import logging
from typing import Optional

import numpy as np

from perfphylo._backend import (
    check_numba_available,
    get_available_backends,
    get_backend_info,
    select_backend,
)
from perfphylo._builder import build_tree
from perfphylo._laminar import is_laminar
from perfphylo._logging import (
    install_numba_warning_filter,
    log_backend_availability,
    log_matrix_summary,
    log_phylogeny_result,
    log_tree_summary,
)
from perfphylo._matrix import AMBIGUOUS, as_character_matrix
from perfphylo._normalize import normalize_tree
from perfphylo._order import character_order, column_sums
from perfphylo._trace import TraceSink
from perfphylo._tree import PhylogenyTree

logger = logging.getLogger(__name__)


# ── Log backend availability once per session ────────────────────────────────
_NUMBA_AVAILABLE = check_numba_available()
log_backend_availability(
    get_available_backends(), get_backend_info()["numba_version"]
)
install_numba_warning_filter(_NUMBA_AVAILABLE)


class PhylogenyResult:
    """
    Immutable outcome of one pipeline run.

    Attributes (read-only)
    ----------------------
    matrix      : int8  [n_taxa, n_characters]   The matrix that was solved.
    order       : int64 [n_characters]           Character visiting order.
    column_sums : int64 [n_characters]           PRESENT count per column.
    perfect     : bool                           Laminarity verdict.
    tree        : PhylogenyTree                  Frozen; empty if not perfect.
    internal    : bool                           Normalization mode used.
    backend     : str                            Backend that ran the check.
    """

    __slots__ = ("_matrix", "_order", "_column_sums", "_perfect", "_tree",
                 "_internal", "_backend")

    def __init__(
        self,
        matrix: np.ndarray,
        order: np.ndarray,
        perfect: bool,
        tree: PhylogenyTree,
        internal: bool = False,
        backend: str = "python",
    ) -> None:
        matrix = np.array(matrix, dtype=np.int8, copy=True)
        matrix.setflags(write=False)
        order = np.array(order, dtype=np.int64, copy=True)
        order.setflags(write=False)
        sums = column_sums(matrix)
        sums.setflags(write=False)

        object.__setattr__(self, "_matrix", matrix)
        object.__setattr__(self, "_order", order)
        object.__setattr__(self, "_column_sums", sums)
        object.__setattr__(self, "_perfect", bool(perfect))
        object.__setattr__(self, "_tree", tree.freeze())
        object.__setattr__(self, "_internal", bool(internal))
        object.__setattr__(self, "_backend", backend)

    def __setattr__(self, name, value):
        raise AttributeError("PhylogenyResult is immutable.")

    def __delattr__(self, name):
        raise AttributeError("PhylogenyResult is immutable.")

    @property
    def matrix(self) -> np.ndarray:
        return self._matrix

    @property
    def order(self) -> np.ndarray:
        return self._order

    @property
    def column_sums(self) -> np.ndarray:
        return self._column_sums

    @property
    def perfect(self) -> bool:
        return self._perfect

    @property
    def tree(self) -> PhylogenyTree:
        return self._tree

    @property
    def internal(self) -> bool:
        return self._internal

    @property
    def backend(self) -> str:
        return self._backend

    @property
    def n_taxa(self) -> int:
        return int(self._matrix.shape[0])

    @property
    def n_characters(self) -> int:
        return int(self._matrix.shape[1])

    def to_dot(self, name: str = "phylogeny") -> str:
        """Render the tree as Graphviz DOT text (see :func:`perfphylo.to_dot`)."""
        from perfphylo._io import to_dot

        return to_dot(self._tree, name=name)

    def __repr__(self) -> str:
        return (
            f"PhylogenyResult(n_taxa={self.n_taxa}, "
            f"n_characters={self.n_characters}, perfect={self._perfect}, "
            f"n_nodes={self._tree.n_nodes})"
        )


def assemble_result(
    matrix: np.ndarray,
    order: np.ndarray,
    perfect: bool,
    internal: bool,
    backend: str,
) -> PhylogenyResult:
    """
    Build (if *perfect*) and normalize the tree, then bundle the result.

    Used by :func:`perfect_phylogeny` and by the ambiguity resolver, which
    obtains the laminarity verdicts for a whole batch up front.
    """
    if perfect:
        tree = build_tree(matrix, order)
        spliced = normalize_tree(tree, internal)
        log_tree_summary(tree.n_nodes, tree.n_edges, len(tree.leaves()), spliced)
    else:
        tree = PhylogenyTree()

    log_phylogeny_result(
        int(matrix.shape[0]), int(matrix.shape[1]), perfect, tree.n_nodes
    )
    return PhylogenyResult(matrix, order, perfect, tree, internal, backend)


def perfect_phylogeny(
    matrix,
    internal: bool = False,
    backend: str = "best",
    trace: Optional[TraceSink] = None,
) -> PhylogenyResult:
    """
    Decide whether *matrix* admits a perfect phylogeny and build it.

    Parameters
    ----------
    matrix : array-like
        Taxon-by-character matrix of 0/1 values.  AMBIGUOUS cells (2) are
        accepted and count as absent; use :func:`resolve_ambiguities` to
        evaluate completions instead.
    internal : bool, default False
        Keep taxon annotations on internal nodes after their taxa have
        been split into leaves.
    backend : str, default 'best'
        Laminarity backend: 'python', 'cpu-parallel' or 'best'.
    trace : callable, optional
        Diagnostic sink receiving :class:`TraceEvent` objects.

    Returns
    -------
    PhylogenyResult

    Raises
    ------
    ValueError, TypeError
        If *matrix* is malformed (see :func:`as_character_matrix`).

    Examples
    --------
    >>> result = perfect_phylogeny([[1, 0], [1, 1], [0, 1]])
    >>> result.perfect
    False
    >>> result = perfect_phylogeny([[1, 0], [1, 1], [0, 0]])
    >>> result.perfect, len(result.tree.leaves())
    (True, 3)
    """
    resolved = select_backend(backend)
    matrix = as_character_matrix(matrix)
    log_matrix_summary(
        int(matrix.shape[0]),
        int(matrix.shape[1]),
        int(np.count_nonzero(matrix == AMBIGUOUS)),
    )

    order = character_order(matrix)
    perfect = is_laminar(matrix, order, backend=resolved, trace=trace)
    return assemble_result(matrix, order, perfect, internal, resolved)
