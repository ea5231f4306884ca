"""
_tree.py
========
A rooted phylogeny stored as an arena of nodes and edges addressed by
stable integer handles.

Public API
----------
  PhylogenyTree()
      Constructor.  Creates an empty tree (no root, no nodes).

  Construction (raise RuntimeError once the tree is frozen)
    .add_root() / .add_node(taxa=()) / .add_edge(source, target, label='')
    .append_taxon(node, taxon) / .set_taxa(node, taxa)
    .remove_node(node) / .splice_node(node)
    .freeze()

  Queries
    .root, .n_nodes, .n_edges, .frozen, .is_empty
    .nodes() / .edges() / .node_ids()
    .taxa(node) / .label(node) / .edge(edge_id)
    .children(node) / .parent(node) / .in_degree(node) / .out_degree(node)
    .out_edges(node) / .in_edges(node) / .leaves()
    .find_child(node, label) / .find_taxon(taxon) / .path_characters(node)
    .canonical() / .validate()

Layout notes
------------
Node data lives in parallel Python lists indexed by node handle:

  _taxa     : list[list[str]]   taxon identifiers attached at the node
  _out      : list[list[int]]   outgoing edge handles, in insertion order
  _in       : list[list[int]]   incoming edge handles
  _alive    : list[bool]        False once the node has been removed

Edge data lives in parallel lists indexed by edge handle:

  _edge_source, _edge_target : list[int]
  _edge_label                : list[str]
  _edge_alive                : list[bool]

Handles are never reused or renumbered; removal leaves a tombstone.  All
mutation goes through the handle-taking methods below, so no caller ever
holds a reference into the internal lists.

The root carries the reserved label ``Root`` and never carries taxa.
"""

from typing import Iterable, List, Optional, Tuple

from perfphylo._utils import join_chain, split_chain


ROOT_LABEL = "Root"


class PhylogenyTree:
    """
    Mutable-until-frozen rooted tree with labeled nodes and labeled edges.

    Node label : ordered collection of taxon identifiers (possibly empty);
                 the root's label is the reserved string ``Root``.
    Edge label : a character identifier ``C_<j>``, a comma-joined chain of
                 them, or '' for the unlabeled edges leading to split-off
                 taxon leaves.
    """

    # ================================================================== #
    # Construction                                                         #
    # ================================================================== #

    def __init__(self) -> None:
        self._taxa: List[List[str]] = []
        self._out: List[List[int]] = []
        self._in: List[List[int]] = []
        self._alive: List[bool] = []

        self._edge_source: List[int] = []
        self._edge_target: List[int] = []
        self._edge_label: List[str] = []
        self._edge_alive: List[bool] = []

        self._root: Optional[int] = None
        self._n_nodes = 0
        self._n_edges = 0
        self._frozen = False

    def add_root(self) -> int:
        """
        Create the root node and return its handle.

        Raises
        ------
        RuntimeError   if the tree already has a root or is frozen.
        """
        self._check_mutable()
        if self._root is not None:
            raise RuntimeError("Tree already has a root.")
        self._root = self.add_node()
        return self._root

    def add_node(self, taxa: Iterable[str] = ()) -> int:
        """Create a node carrying *taxa* and return its handle."""
        self._check_mutable()
        handle = len(self._alive)
        self._taxa.append(list(taxa))
        self._out.append([])
        self._in.append([])
        self._alive.append(True)
        self._n_nodes += 1
        return handle

    def add_edge(self, source: int, target: int, label: str = "") -> int:
        """
        Add a directed edge *source* → *target* and return its handle.

        Raises
        ------
        ValueError   if *target* is the root or already has a parent.
        """
        self._check_mutable()
        self._check_node(source)
        self._check_node(target)
        if target == self._root:
            raise ValueError("The root cannot have an incoming edge.")
        if self._in[target]:
            raise ValueError(f"Node {target} already has a parent.")
        handle = len(self._edge_alive)
        self._edge_source.append(source)
        self._edge_target.append(target)
        self._edge_label.append(label)
        self._edge_alive.append(True)
        self._out[source].append(handle)
        self._in[target].append(handle)
        self._n_edges += 1
        return handle

    def append_taxon(self, node: int, taxon: str) -> None:
        """Append *taxon* to the label of *node* (never the root)."""
        self._check_mutable()
        self._check_node(node)
        if node == self._root:
            raise ValueError("The root's label is reserved and cannot hold taxa.")
        self._taxa[node].append(taxon)

    def set_taxa(self, node: int, taxa: Iterable[str]) -> None:
        """Replace the label of *node* (never the root)."""
        self._check_mutable()
        self._check_node(node)
        if node == self._root:
            raise ValueError("The root's label is reserved and cannot hold taxa.")
        self._taxa[node] = list(taxa)

    def remove_node(self, node: int) -> None:
        """Remove *node* and every edge incident to it."""
        self._check_mutable()
        self._check_node(node)
        for edge in list(self._in[node]) + list(self._out[node]):
            self._remove_edge(edge)
        self._alive[node] = False
        self._taxa[node] = []
        self._n_nodes -= 1
        if node == self._root:
            self._root = None

    def splice_node(self, node: int) -> int:
        """
        Remove a pass-through node, joining its two edges into one.

        *node* must have exactly one incoming and one outgoing edge.  The
        predecessor gets a single edge to the successor, labeled with the
        chain of the incoming and outgoing labels, at the position the
        incoming edge occupied in the predecessor's edge list.

        Returns
        -------
        int   Handle of the new edge.

        Raises
        ------
        ValueError   if *node* does not have in-degree 1 and out-degree 1.
        """
        self._check_mutable()
        self._check_node(node)
        if len(self._in[node]) != 1 or len(self._out[node]) != 1:
            raise ValueError(
                f"Node {node} cannot be spliced: in-degree "
                f"{len(self._in[node])}, out-degree {len(self._out[node])}."
            )
        edge_in = self._in[node][0]
        edge_out = self._out[node][0]
        predecessor = self._edge_source[edge_in]
        successor = self._edge_target[edge_out]
        label = join_chain(self._edge_label[edge_in], self._edge_label[edge_out])
        position = self._out[predecessor].index(edge_in)

        self.remove_node(node)
        handle = self.add_edge(predecessor, successor, label)
        # add_edge appended the new edge; move it into the old slot.
        self._out[predecessor].pop()
        self._out[predecessor].insert(position, handle)
        return handle

    def freeze(self) -> "PhylogenyTree":
        """Make the tree read-only and return it."""
        self._frozen = True
        return self

    # ================================================================== #
    # Properties                                                           #
    # ================================================================== #

    @property
    def root(self) -> Optional[int]:
        """Handle of the root, or None for an empty tree."""
        return self._root

    @property
    def n_nodes(self) -> int:
        return self._n_nodes

    @property
    def n_edges(self) -> int:
        return self._n_edges

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def is_empty(self) -> bool:
        return self._n_nodes == 0

    def __len__(self) -> int:
        return self._n_nodes

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "mutable"
        return (
            f"PhylogenyTree(n_nodes={self._n_nodes}, n_edges={self._n_edges}, "
            f"{state})"
        )

    # ================================================================== #
    # Queries                                                              #
    # ================================================================== #

    def node_ids(self) -> List[int]:
        """Handles of all live nodes in creation order."""
        return [h for h, alive in enumerate(self._alive) if alive]

    def nodes(self) -> List[Tuple[int, str]]:
        """(handle, label) for every live node, in creation order."""
        return [(h, self.label(h)) for h in self.node_ids()]

    def edges(self) -> List[Tuple[int, int, str]]:
        """
        (source, target, label) for every live edge.

        Edges are listed parent by parent in node creation order, and in
        each parent's child order.
        """
        out = []
        for h in self.node_ids():
            for e in self._out[h]:
                out.append((self._edge_source[e], self._edge_target[e], self._edge_label[e]))
        return out

    def edge(self, edge: int) -> Tuple[int, int, str]:
        """(source, target, label) of a live edge handle."""
        if not (0 <= edge < len(self._edge_alive)) or not self._edge_alive[edge]:
            raise KeyError(f"No edge with handle {edge}.")
        return self._edge_source[edge], self._edge_target[edge], self._edge_label[edge]

    def taxa(self, node: int) -> Tuple[str, ...]:
        """Taxon identifiers attached at *node* (empty for the root)."""
        self._check_node(node)
        return tuple(self._taxa[node])

    def label(self, node: int) -> str:
        """
        Display label of *node*: ``Root`` for the root, otherwise the taxon
        identifiers joined by single spaces ('' when there are none).
        """
        self._check_node(node)
        if node == self._root:
            return ROOT_LABEL
        return " ".join(self._taxa[node])

    def out_edges(self, node: int) -> List[int]:
        self._check_node(node)
        return list(self._out[node])

    def in_edges(self, node: int) -> List[int]:
        self._check_node(node)
        return list(self._in[node])

    def out_degree(self, node: int) -> int:
        self._check_node(node)
        return len(self._out[node])

    def in_degree(self, node: int) -> int:
        self._check_node(node)
        return len(self._in[node])

    def children(self, node: int) -> List[int]:
        """Child handles of *node* in edge order."""
        self._check_node(node)
        return [self._edge_target[e] for e in self._out[node]]

    def parent(self, node: int) -> Optional[int]:
        """Parent handle of *node*, or None for the root (or a detached node)."""
        self._check_node(node)
        if not self._in[node]:
            return None
        return self._edge_source[self._in[node][0]]

    def leaves(self) -> List[int]:
        """Handles of live nodes without outgoing edges, excluding the root."""
        return [
            h for h in self.node_ids() if not self._out[h] and h != self._root
        ]

    def find_child(self, node: int, label: str) -> Optional[int]:
        """
        Target of the first outgoing edge of *node* labeled exactly *label*,
        or None.
        """
        self._check_node(node)
        for e in self._out[node]:
            if self._edge_label[e] == label:
                return self._edge_target[e]
        return None

    def find_taxon(self, taxon: str) -> int:
        """
        Handle of the node representing *taxon*.

        A leaf carrying *taxon* is preferred over an internal node that also
        carries it (which happens when internal annotations are retained).

        Raises
        ------
        KeyError   if no node carries *taxon*.
        """
        found = None
        for h in self.node_ids():
            if taxon in self._taxa[h]:
                if not self._out[h]:
                    return h
                if found is None:
                    found = h
        if found is None:
            raise KeyError(f"No node carries taxon '{taxon}'.")
        return found

    def path_characters(self, node: int) -> List[str]:
        """
        Character identifiers acquired on the path from the root to *node*,
        in traversal order.  Unlabeled edges contribute nothing and
        compacted chains are expanded.
        """
        self._check_node(node)
        labels = []
        current = node
        while self._in[current]:
            e = self._in[current][0]
            labels.append(self._edge_label[e])
            current = self._edge_source[e]
        chars = []
        for label in reversed(labels):
            chars.extend(split_chain(label))
        return chars

    def canonical(self):
        """
        Order-independent representation of the tree, for equality checks.

        Each subtree becomes ``(label, children)`` where *children* is a
        sorted tuple of ``(edge_label, subtree)`` pairs.  Returns None for
        an empty tree.
        """
        if self._root is None:
            return None

        def _canon(h):
            kids = tuple(
                sorted(
                    (self._edge_label[e], _canon(self._edge_target[e]))
                    for e in self._out[h]
                )
            )
            return (self.label(h), kids)

        return _canon(self._root)

    def validate(self) -> None:
        """
        Check the structural invariants.

        Raises
        ------
        ValueError   if the root has a parent, a non-root node does not
                     have exactly one parent, or a node is unreachable
                     from the root.
        """
        if self._root is None:
            if self._n_nodes:
                raise ValueError("Tree has nodes but no root.")
            return
        if self._in[self._root]:
            raise ValueError("Root has an incoming edge.")
        for h in self.node_ids():
            if h != self._root and len(self._in[h]) != 1:
                raise ValueError(
                    f"Node {h} has {len(self._in[h])} incoming edges, expected 1."
                )
        seen = set()
        stack = [self._root]
        while stack:
            h = stack.pop()
            if h in seen:
                raise ValueError(f"Node {h} reached twice: structure is not a tree.")
            seen.add(h)
            stack.extend(self.children(h))
        if len(seen) != self._n_nodes:
            raise ValueError(
                f"{self._n_nodes - len(seen)} node(s) unreachable from the root."
            )

    # ================================================================== #
    # Private helpers                                                      #
    # ================================================================== #

    def _remove_edge(self, edge: int) -> None:
        source = self._edge_source[edge]
        target = self._edge_target[edge]
        self._out[source].remove(edge)
        self._in[target].remove(edge)
        self._edge_alive[edge] = False
        self._n_edges -= 1

    def _check_node(self, node: int) -> None:
        if not (0 <= node < len(self._alive)) or not self._alive[node]:
            raise KeyError(f"No node with handle {node}.")

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RuntimeError("PhylogenyTree is frozen and cannot be modified.")
