"""
_logging.py
===========
Logging functions for perfphylo.

All functions in this module have NO side effects except logging. They take
computed data as parameters and format/emit log messages.

This separation ensures:
- Logging can be easily disabled/mocked in tests
- Computation is separate from presentation
"""

import logging
from typing import List, Optional, Sequence, Tuple


logger = logging.getLogger(__name__)


# ============================================================================ #
# System and Backend Logging (called at module import time)
# ============================================================================ #


def log_backend_availability(
    backends_available: List[str], numba_version: Optional[str]
) -> None:
    """
    Log which execution backends are available for the laminarity kernels.

    Parameters
    ----------
    backends_available : List[str]
        Available backends in preference order (last is best).
    numba_version : str or None
        Installed numba version, if numba imports.
    """
    logger.info(f"Available backends: {', '.join(backends_available)}")

    if numba_version is not None:
        logger.info(f"  cpu-parallel: numba {numba_version} (njit + prange)")
    else:
        logger.info("  cpu-parallel: unavailable (numba does not import)")

    logger.info(f"Default backend='best' will use: {backends_available[-1]}")


def install_numba_warning_filter(numba_available: bool) -> None:
    """
    Capture NumbaPerformanceWarning and route it through our logger.

    The batch kernel is declared ``parallel=True``; for small candidate
    stacks numba may warn that parallelism was not profitable.  These
    warnings are re-emitted at WARNING level on the perfphylo logger so
    all diagnostics appear in one stream.

    Parameters
    ----------
    numba_available : bool
        Whether numba was successfully imported.
    """
    import warnings

    if not numba_available:
        return

    from numba.core.errors import NumbaPerformanceWarning

    original_showwarning = warnings.showwarning

    def custom_showwarning(message, category, filename, lineno, file=None, line=None):
        if issubclass(category, NumbaPerformanceWarning):
            logger.warning(f"Numba performance issue: {message}")
            logger.warning(f"  at {filename}:{lineno}")
            return
        original_showwarning(message, category, filename, lineno, file, line)

    warnings.showwarning = custom_showwarning


# ============================================================================ #
# Pipeline Logging
# ============================================================================ #


def log_matrix_summary(n_taxa: int, n_characters: int, n_ambiguous: int) -> None:
    """
    Log matrix dimensions at DEBUG level.

    Ambiguous cells in a matrix handed straight to the pipeline are treated
    as absent; this is reported at INFO level since it is rarely intended.
    """
    logger.debug(
        "Character matrix: %d taxa x %d characters", n_taxa, n_characters
    )
    if n_ambiguous > 0:
        logger.info(
            "%d ambiguous cell(s) treated as absent; use resolve_ambiguities() "
            "to evaluate completions.",
            n_ambiguous,
        )


def log_laminarity(
    laminar: bool, conflict: Optional[Tuple[int, int]], backend: str
) -> None:
    """
    Log the outcome of the laminarity check.

    Parameters
    ----------
    laminar : bool
        Verdict.
    conflict : (int, int) or None
        (column, row) of the first disagreeing marker when not laminar.
    backend : str
        Backend that produced the verdict.
    """
    if laminar:
        logger.debug("Laminarity check passed (backend=%r)", backend)
    elif conflict is not None:
        logger.debug(
            "Laminarity check failed at character C_%d, taxon S_%d (backend=%r)",
            conflict[0] + 1,
            conflict[1] + 1,
            backend,
        )
    else:
        logger.debug("Laminarity check failed (backend=%r)", backend)


def log_tree_summary(n_nodes: int, n_edges: int, n_leaves: int, spliced: int) -> None:
    """Log the size of a normalized tree."""
    logger.debug(
        "Tree normalized: %d nodes, %d edges, %d leaves (%d node(s) compacted)",
        n_nodes,
        n_edges,
        n_leaves,
        spliced,
    )


def log_phylogeny_result(
    n_taxa: int, n_characters: int, perfect: bool, n_nodes: int
) -> None:
    """Log the pipeline outcome at INFO level."""
    if perfect:
        logger.info(
            "Perfect phylogeny found for %d taxa x %d characters (%d nodes)",
            n_taxa,
            n_characters,
            n_nodes,
        )
    else:
        logger.info(
            "No perfect phylogeny for %d taxa x %d characters: "
            "character sets are not laminar",
            n_taxa,
            n_characters,
        )


def log_resolution_start(mode: str, n_ambiguous: int, n_candidates: int, backend: str) -> None:
    """Log the size of an ambiguity resolution run."""
    logger.info(
        "Resolving %d ambiguous cell(s): %d candidate completion(s), "
        "mode=%r, backend=%r",
        n_ambiguous,
        n_candidates,
        mode,
        backend,
    )


def log_resolution_summary(
    feasible_assignments: Sequence[Tuple[int, ...]], n_candidates: int
) -> None:
    """
    Log which completions yielded a perfect phylogeny.

    Zero feasible completions is an expected outcome and is logged at INFO,
    not WARNING.
    """
    n_feasible = len(feasible_assignments)
    logger.info(
        "%d of %d completion(s) admit a perfect phylogeny", n_feasible, n_candidates
    )
    if 0 < n_feasible <= 8:
        for assignment in feasible_assignments:
            logger.info("  feasible: %s", assignment)
