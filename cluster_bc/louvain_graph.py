"""
LouvainGraph - weighted undirected graph storage used by the clustering passes.
"""
import numpy as np
import scipy.sparse as sp

from .core_utilities import (
    _build_csr_arrays_from_pairs,
    detect_border_vertices,
)


class LouvainGraph:
    """
    Weighted undirected graph backed by a symmetric CSR matrix.

    Every undirected edge {u, v} with u != v is stored in both rows; a self-loop
    is stored once on the diagonal. With this layout the weighted degree of a
    node is its row sum and ``total_weight`` is twice the undirected edge weight
    plus the loop weight, which is the normalisation the modularity formulas use.
    """

    def __init__(self, adjacency):
        """
        Initialize a LouvainGraph.

        Parameters:
        -----------
        adjacency : scipy.sparse matrix or array-like
            Square symmetric matrix of non-negative edge weights.
        """
        A = sp.csr_matrix(adjacency, dtype=np.float64, copy=True)
        if A.shape[0] != A.shape[1]:
            raise ValueError(f"Adjacency must be square, got shape {A.shape}")
        A.sum_duplicates()
        A.eliminate_zeros()
        if A.nnz:
            if A.data.min() < 0:
                raise ValueError("Edge weights must be non-negative")
            # aggregated graphs sum the two directions in different orders
            tol = 1e-9 * max(1.0, float(A.data.max()))
            if (abs(A - A.T) > tol).nnz:
                raise ValueError("Adjacency must be symmetric for an undirected graph")
        A.sort_indices()

        self.adjacency = A
        self.indptr = A.indptr.astype(np.int64)
        self.indices = A.indices.astype(np.int64)
        self.weights = A.data
        self.n_nodes = A.shape[0]
        self.weighted_degrees = np.asarray(A.sum(axis=1), dtype=np.float64).ravel()
        self.self_loops = A.diagonal().astype(np.float64)
        self.total_weight = float(self.weighted_degrees.sum())

    @classmethod
    def from_edges(cls, sources, targets, weights=None, n_nodes=None):
        """
        Build a graph from undirected edge arrays.

        Duplicate edges have their weights summed, ``u == v`` pairs become
        self-loops and missing weights default to 1.0.
        """
        a = np.asarray(sources, dtype=np.int64).ravel()
        b = np.asarray(targets, dtype=np.int64).ravel()
        if a.shape != b.shape:
            raise ValueError("sources and targets must have the same length")
        if weights is None:
            w = np.ones(a.size, dtype=np.float64)
        else:
            w = np.asarray(weights, dtype=np.float64).ravel()
            if w.shape != a.shape:
                raise ValueError("weights must have one entry per edge")
        if a.size and min(a.min(), b.min()) < 0:
            raise ValueError("Vertex ids must be non-negative")

        max_id = int(max(a.max(), b.max())) + 1 if a.size else 0
        n = max_id if n_nodes is None else int(n_nodes)
        if n < max_id:
            raise ValueError(f"n_nodes={n} is smaller than the largest vertex id + 1 ({max_id})")

        indptr, indices, data = _build_csr_arrays_from_pairs(a, b, w, n)
        # repeated edges are summed and rows sorted in __init__
        return cls(sp.csr_matrix((data, indices, indptr), shape=(n, n)))

    @property
    def n_links(self):
        """Number of stored adjacency entries (both directions, loops once)."""
        return int(self.indices.size)

    @property
    def n_edges(self):
        """Number of undirected edges, self-loops included."""
        loops = int(np.count_nonzero(self.self_loops))
        return (self.n_links - loops) // 2 + loops

    def weighted_degree(self, node):
        self._check_node(node)
        return float(self.weighted_degrees[node])

    def neighbors(self, node):
        """Return (neighbour ids, edge weights) of ``node``."""
        self._check_node(node)
        s, e = self.indptr[node], self.indptr[node + 1]
        return self.indices[s:e], self.weights[s:e]

    def subgraph_border(self, members):
        """Boolean mask over ``members`` marking vertices with an edge leaving the set."""
        members = np.asarray(members, dtype=np.int64)
        in_cluster = np.zeros(self.n_nodes, dtype=np.bool_)
        in_cluster[members] = True
        return detect_border_vertices(self.indptr, self.indices, in_cluster, members)

    def _check_node(self, node):
        if not 0 <= node < self.n_nodes:
            raise ValueError(f"Node index {node} out of range [0, {self.n_nodes - 1}]")

    def __repr__(self):
        return (f"LouvainGraph(n_nodes={self.n_nodes}, n_links={self.n_links}, "
                f"total_weight={self.total_weight:g})")
