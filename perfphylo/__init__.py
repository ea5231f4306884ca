"""
perfphylo
=========

Perfect phylogeny construction for binary taxon-by-character matrices.

A matrix admits a *perfect phylogeny* when every character's taxa form one
contiguous subtree, i.e. no character state arose twice.  *perfphylo*
decides this with a laminar family test over a frequency-based character
order, builds the tree when it exists, and can search completions of
matrices with ambiguous cells.

Main Entry Points
-----------------
perfect_phylogeny : Run the pipeline on one matrix
resolve_ambiguities : Evaluate completions of ambiguous cells
AmbiguityResolver : Reusable resolver configuration
PhylogenyResult : Immutable pipeline outcome
PhylogenyTree : Arena-backed rooted tree with labeled nodes and edges

Pipeline Stages
---------------
character_order : Column visiting order (descending frequency, then index)
is_laminar : Laminar family test
build_tree : Raw tree synthesis
normalize_tree : Label splitting and compaction

Input / Output
--------------
parse_matrix, read_matrix : Text matrix reader (``*`` marks ambiguity)
to_dot, write_dot, write_resolution : Graphviz DOT writers

Context Managers
----------------
quiet : Suppress logging during operations
suppress_logger : Suppress specific logger
suppress_warnings : Suppress specific warnings
use_backend : Force specific computational backend

Backend Information
-------------------
get_available_backends : Query available computational backends
get_backend_info : Get comprehensive backend status
check_numba_available : Check if numba is available

Examples
--------
Basic usage:

>>> from perfphylo import perfect_phylogeny
>>> result = perfect_phylogeny([[1, 1, 0], [1, 0, 0], [0, 0, 1]])
>>> result.perfect
True
>>> sorted(result.tree.path_characters(result.tree.find_taxon('S_1')))
['C_1', 'C_2']

Ambiguous cells:

>>> from perfphylo import parse_matrix, resolve_ambiguities
>>> matrix = parse_matrix("1 *\\n1 0\\n0 1\\n")
>>> resolve_ambiguities(matrix).assignments
((0, 0), (0, 1))
"""

__version__ = "0.1.0"
__license__ = "MIT"

# Main classes and pipeline
from ._phylogeny import PhylogenyResult, perfect_phylogeny
from ._ambiguity import (
    AmbiguityResolution,
    AmbiguityResolver,
    Candidate,
    resolve_ambiguities,
)
from ._tree import PhylogenyTree

# Pipeline stages
from ._matrix import (
    ABSENT,
    PRESENT,
    AMBIGUOUS,
    as_character_matrix,
    ambiguous_cells,
    complete_matrix,
)
from ._order import character_order, column_sums
from ._laminar import is_laminar, laminar_markers, find_conflict
from ._builder import build_tree
from ._normalize import (
    split_internal_labels,
    split_leaf_labels,
    compact,
    normalize_tree,
)

# Diagnostics
from ._trace import TraceEvent, TraceRecorder

# Input / output
from ._io import parse_matrix, read_matrix, to_dot, write_dot, write_resolution

# Context managers (user-facing utilities)
from ._context import (
    suppress_logger,
    quiet,
    suppress_warnings,
    use_backend,
)

# Utilities
from ._utils import taxon_name, character_name, split_chain

# Backend information (useful for checking capabilities)
from ._backend import (
    get_available_backends,
    get_backend_info,
    check_numba_available,
)

# Public API
__all__ = [
    # Main classes and pipeline
    "perfect_phylogeny",
    "PhylogenyResult",
    "resolve_ambiguities",
    "AmbiguityResolver",
    "AmbiguityResolution",
    "Candidate",
    "PhylogenyTree",
    # Pipeline stages
    "ABSENT",
    "PRESENT",
    "AMBIGUOUS",
    "as_character_matrix",
    "ambiguous_cells",
    "complete_matrix",
    "character_order",
    "column_sums",
    "is_laminar",
    "laminar_markers",
    "find_conflict",
    "build_tree",
    "split_internal_labels",
    "split_leaf_labels",
    "compact",
    "normalize_tree",
    # Diagnostics
    "TraceEvent",
    "TraceRecorder",
    # Input / output
    "parse_matrix",
    "read_matrix",
    "to_dot",
    "write_dot",
    "write_resolution",
    # Context managers
    "suppress_logger",
    "quiet",
    "suppress_warnings",
    "use_backend",
    # Utilities
    "taxon_name",
    "character_name",
    "split_chain",
    # Backend information
    "get_available_backends",
    "get_backend_info",
    "check_numba_available",
    # Version info
    "__version__",
]
