"""
_backend.py
===========
Backend detection and selection for the laminarity kernels.

Two execution backends compute laminarity markers and feasibility:

  python        pure-Python reference implementation (always available)
  cpu-parallel  numba-compiled kernels; candidate batches run under prange

Functions in this module have NO side effects - they only query system state.
Logging is done by the calling code, not here.
"""

from typing import List, Optional, Tuple


BACKENDS = ("python", "cpu-parallel")


# ============================================================================ #
# Backend Detection (No Side Effects)
# ============================================================================ #


def check_numba_available() -> bool:
    """
    Check if numba can be imported in this interpreter.

    Returns
    -------
    bool
        True if numba can be imported, False otherwise.
    """
    try:
        import numba  # noqa: F401

        return True
    except ImportError:
        return False


def get_available_backends() -> List[str]:
    """
    Get list of available execution backends.

    Returns
    -------
    list[str]
        Available backends in preference order (last is best).
        Always includes 'python'; includes 'cpu-parallel' when numba
        imports.

    Examples
    --------
    >>> get_available_backends()
    ['python', 'cpu-parallel']
    """
    backends = ["python"]
    if check_numba_available():
        backends.append("cpu-parallel")
    return backends


def get_best_backend() -> str:
    """
    Get the most optimized available backend.

    Returns
    -------
    str
        'cpu-parallel' when numba is importable, otherwise 'python'.
    """
    return get_available_backends()[-1]


def resolve_backend(backend: str) -> str:
    """
    Resolve a backend specification to an actual backend.

    Parameters
    ----------
    backend : str
        'best', 'python' or 'cpu-parallel'.

    Returns
    -------
    str
        Resolved backend name.

    Raises
    ------
    ValueError
        If *backend* is unknown or not available.

    Examples
    --------
    >>> resolve_backend('python')
    'python'
    >>> resolve_backend('gpu')
    Traceback (most recent call last):
        ...
    ValueError: Unknown backend 'gpu'. Valid options: best, python, cpu-parallel
    """
    if backend == "best":
        return get_best_backend()

    if backend not in BACKENDS:
        raise ValueError(
            f"Unknown backend '{backend}'. "
            f"Valid options: best, {', '.join(BACKENDS)}"
        )

    available = get_available_backends()
    if backend not in available:
        raise ValueError(
            f"Backend '{backend}' not available. "
            f"Available backends: {', '.join(available)}"
        )

    return backend


def select_backend(backend: str) -> str:
    """
    Apply any active :func:`perfphylo.use_backend` override, then resolve.

    This is the single entry point used by every backend-taking operation.
    """
    from perfphylo._context import get_backend_override

    override = get_backend_override()
    if override is not None:
        backend = override
    return resolve_backend(backend)


# ============================================================================ #
# Kernel Import Helpers
# ============================================================================ #


def import_cpu_kernels() -> Tuple[
    bool, Optional[object], Optional[object], Optional[object]
]:
    """
    Try to import the numba kernels from the _cpu_kernels module.

    Returns
    -------
    tuple
        (success, markers_kernel, conflict_kernel, batch_kernel)
    """
    try:
        from perfphylo._cpu_kernels import (
            _laminar_markers_nb,
            _first_conflict_nb,
            _laminar_batch_njit,
        )

        return (True, _laminar_markers_nb, _first_conflict_nb, _laminar_batch_njit)
    except ImportError:
        return (False, None, None, None)


def get_backend_info() -> dict:
    """
    Get comprehensive backend information.

    Returns
    -------
    dict
        Keys: 'numba_available', 'numba_version', 'backends',
        'best_backend', 'cpu_kernels_available'.
    """
    numba_available = check_numba_available()
    numba_version = None
    if numba_available:
        import numba

        numba_version = numba.__version__

    cpu_kernels_ok, _, _, _ = import_cpu_kernels()

    return {
        "numba_available": numba_available,
        "numba_version": numba_version,
        "backends": get_available_backends(),
        "best_backend": get_best_backend(),
        "cpu_kernels_available": cpu_kernels_ok,
    }
