"""
conftest.py
===========
Session-level pytest configuration for the test suite.

Custom marks
------------
numba
    Applied to tests that exercise the numba-compiled 'cpu-parallel'
    backend.  The first such test in a session pays the JIT compilation
    cost; deselect with ``-m 'not numba'`` for a quick run.

    Registration here suppresses PytestUnknownMarkWarning and makes the mark
    visible in ``pytest --markers``.

Warning filters
---------------
NumbaPerformanceWarning messages are filtered out during tests.  The batch
kernel is declared parallel, and the handful of candidates in a test matrix
is too small for numba to consider parallelism worthwhile.
"""

import warnings

from numba.core.errors import NumbaPerformanceWarning


def pytest_configure(config):
    """
    Configure pytest before test collection begins.

    This runs before any test modules are imported, which is important for
    catching warnings from numba kernel compilation.
    """
    config.addinivalue_line(
        "markers",
        "numba: exercises the numba-compiled cpu-parallel backend",
    )
    warnings.filterwarnings("ignore", category=NumbaPerformanceWarning)


def pytest_unconfigure(config):
    """Restore default warning behavior."""
    warnings.resetwarnings()
