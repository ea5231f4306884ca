"""
_context.py
===========
Context managers for perfphylo.

Provides context managers for temporarily changing state:
- Logging control (suppress/change levels)
- Warning control (suppress specific warnings)
- Backend selection (force specific backend)

All context managers restore state on exit, even if exceptions occur.
"""

import logging
import warnings
from contextlib import contextmanager
from typing import Optional, Type


# Module-level state for backend override
_backend_override = None

PACKAGE_LOGGER = "perfphylo"


# ============================================================================ #
# Logging Context Managers
# ============================================================================ #


@contextmanager
def suppress_logger(logger_name: str, level: int = logging.CRITICAL):
    """
    Temporarily change a logger's level.

    Parameters
    ----------
    logger_name : str
        Name of the logger to suppress (e.g. 'perfphylo._ambiguity').
    level : int, default logging.CRITICAL
        Temporary logging level.

    Examples
    --------
    >>> with suppress_logger('perfphylo._phylogeny'):
    ...     results = [perfect_phylogeny(m) for m in matrices]

    Notes
    -----
    - Exception-safe: Logger level restored even if exception raised
    - Nesting-safe: Can nest multiple suppress_logger contexts
    """
    logger = logging.getLogger(logger_name)
    original_level = logger.level

    try:
        logger.setLevel(level)
        yield
    finally:
        logger.setLevel(original_level)


@contextmanager
def quiet(level: int = logging.CRITICAL):
    """
    Temporarily suppress all perfphylo logging.

    Sets the level of the package logger, which every module logger
    inherits from unless it was configured explicitly.

    Examples
    --------
    >>> with quiet():
    ...     resolution = resolve_ambiguities(matrix)

    >>> # Show only warnings
    >>> with quiet(logging.WARNING):
    ...     result = perfect_phylogeny(matrix)
    """
    with suppress_logger(PACKAGE_LOGGER, level):
        yield


# ============================================================================ #
# Warning Context Managers
# ============================================================================ #


@contextmanager
def suppress_warnings(category: Optional[Type[Warning]] = None):
    """
    Temporarily suppress warnings.

    Parameters
    ----------
    category : Type[Warning] or None, default None
        Warning category to suppress. If None, suppresses all warnings.

    Examples
    --------
    >>> from numba.core.errors import NumbaPerformanceWarning
    >>> with suppress_warnings(NumbaPerformanceWarning):
    ...     resolution = resolve_ambiguities(matrix, backend='cpu-parallel')
    """
    with warnings.catch_warnings():
        if category is None:
            warnings.simplefilter("ignore")
        else:
            warnings.filterwarnings("ignore", category=category)
        yield


# ============================================================================ #
# Backend Context Managers
# ============================================================================ #


@contextmanager
def use_backend(backend: str):
    """
    Temporarily force a specific backend for laminarity checks.

    Parameters
    ----------
    backend : str
        'python', 'cpu-parallel' or 'best'.

    Raises
    ------
    ValueError
        If requested backend is unknown or not available.

    Examples
    --------
    >>> with use_backend('python'):
    ...     result = perfect_phylogeny(matrix)
    >>> result.backend
    'python'

    Notes
    -----
    Uses module-level state and is **not thread-safe**.  Pass ``backend=``
    directly to the pipeline functions when running from several threads.
    """
    global _backend_override

    from perfphylo._backend import resolve_backend

    # Raises ValueError for unknown/unavailable backends
    resolve_backend(backend)

    original_override = _backend_override

    try:
        _backend_override = backend
        yield
    finally:
        _backend_override = original_override


def get_backend_override() -> Optional[str]:
    """
    Get the current backend override, if any.

    Returns
    -------
    str or None
        Current backend override, or None if no override active.
    """
    return _backend_override
