"""
_normalize.py
=============
Structural cleanup of a raw phylogeny.

Three passes, applied in this order by :func:`normalize_tree`:

1. ``split_internal_labels``  An internal node that also terminated some
   taxa gets one leaf child per taxon, attached by an unlabeled edge.
2. ``split_leaf_labels``      A leaf carrying more than one taxon gets the
   same treatment.
3. ``compact``                Every empty-label node with exactly one
   incoming and one outgoing edge is spliced out; the replacement edge
   records the full chain of characters, e.g. ``C_1,C_3``.

The *internal* flag controls what happens to a node whose taxa were split
off in passes 1 and 2: with ``internal=False`` its label is cleared
(structure-only mode), with ``internal=True`` it keeps its taxon
annotation alongside the new leaves.

Each pass visits the node handles that existed when the pass started;
nodes created by a pass are not revisited by it.
"""

from perfphylo._tree import PhylogenyTree


def _spawn_taxon_leaves(tree: PhylogenyTree, node: int, internal: bool) -> int:
    """Give *node* one unlabeled-edge leaf child per taxon in its label."""
    taxa = tree.taxa(node)
    for taxon in taxa:
        leaf = tree.add_node([taxon])
        tree.add_edge(node, leaf)
    if not internal:
        tree.set_taxa(node, ())
    return len(taxa)


def split_internal_labels(tree: PhylogenyTree, internal: bool = False) -> int:
    """
    Split the taxa of labeled internal nodes into leaf children.

    Parameters
    ----------
    tree : PhylogenyTree
        Mutable tree, modified in place.
    internal : bool, default False
        Keep the internal node's taxa after splitting.

    Returns
    -------
    int   Number of leaves created.
    """
    created = 0
    for node in tree.node_ids():
        if node == tree.root or not tree.taxa(node):
            continue
        if tree.out_degree(node) > 0:
            created += _spawn_taxon_leaves(tree, node, internal)
    return created


def split_leaf_labels(tree: PhylogenyTree, internal: bool = False) -> int:
    """
    Split leaves that carry several taxa into one leaf per taxon.

    The split always happens; *internal* only decides whether the former
    leaf keeps its multi-taxon label.

    Returns
    -------
    int   Number of leaves created.
    """
    created = 0
    for node in tree.node_ids():
        if node == tree.root:
            continue
        if tree.out_degree(node) == 0 and len(tree.taxa(node)) > 1:
            created += _spawn_taxon_leaves(tree, node, internal)
    return created


def compact(tree: PhylogenyTree) -> int:
    """
    Splice out every empty-label pass-through node.

    A node qualifies when it is not the root, carries no taxa, and has
    exactly one incoming and one outgoing edge.  Splicing never changes the
    degree of any other node, so one pass over the handles recorded at entry
    leaves no qualifying node behind; a second call returns 0.

    Returns
    -------
    int   Number of nodes spliced out.
    """
    spliced = 0
    for node in tree.node_ids():
        if node == tree.root or tree.taxa(node):
            continue
        if tree.in_degree(node) == 1 and tree.out_degree(node) == 1:
            tree.splice_node(node)
            spliced += 1
    return spliced


def normalize_tree(tree: PhylogenyTree, internal: bool = False) -> int:
    """
    Run the three cleanup passes on *tree* in place.

    Returns
    -------
    int   Number of nodes removed by compaction.
    """
    split_internal_labels(tree, internal)
    split_leaf_labels(tree, internal)
    return compact(tree)
