"""
_builder.py
===========
Synthesize the raw phylogeny from a laminar character matrix.

Each taxon row is walked from the root following the character order.  At
every PRESENT character the walk follows the outgoing edge labeled with
that character, creating an empty node and the edge when none exists yet.
The taxon is then attached to the node the walk stopped at:

* at the root, a fresh leaf child of the root is created instead (reached
  by an unlabeled edge), so the root's reserved label is never polluted;
* anywhere else, the taxon is appended to the node's label, so taxa with
  identical character sets accumulate on the same node.

The caller must have established laminarity with the same order; under
that precondition construction cannot fail.
"""

import numpy as np

from perfphylo._matrix import PRESENT
from perfphylo._tree import PhylogenyTree
from perfphylo._utils import character_name, taxon_name


def build_tree(matrix: np.ndarray, order: np.ndarray) -> PhylogenyTree:
    """
    Build the raw (unnormalized) phylogeny for *matrix*.

    Parameters
    ----------
    matrix : np.ndarray
        Laminar int8 character matrix.  AMBIGUOUS cells count as absent.
    order : np.ndarray
        The character order the laminarity check was run with.

    Returns
    -------
    PhylogenyTree
        Mutable tree; internal nodes may carry several taxa.
    """
    tree = PhylogenyTree()
    root = tree.add_root()
    names = [character_name(int(j)) for j in order]

    n_taxa = matrix.shape[0]
    for i in range(n_taxa):
        current = root
        row = matrix[i]
        for j, name in zip(order, names):
            if row[j] != PRESENT:
                continue
            nxt = tree.find_child(current, name)
            if nxt is None:
                nxt = tree.add_node()
                tree.add_edge(current, nxt, name)
            current = nxt

        if current == root:
            leaf = tree.add_node([taxon_name(i)])
            tree.add_edge(root, leaf)
        else:
            tree.append_taxon(current, taxon_name(i))

    return tree
