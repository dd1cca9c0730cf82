"""
Partition - a single local-moving pass of Louvain modularity optimisation.
"""
import numpy as np
import scipy.sparse as sp
from numba import njit

from .louvain_graph import LouvainGraph


@njit(cache=True, nogil=True)
def _modularity(tot, inner, total_weight):
    if total_weight <= 0.0:
        return 0.0
    q = 0.0
    for c in range(tot.shape[0]):
        if tot[c] > 0.0:
            q += inner[c] / total_weight - (tot[c] / total_weight) ** 2
    return q


@njit(cache=True, nogil=True)
def _one_level(indptr, indices, weights, w_degree, self_loops, total_weight,
               order, n2c, tot, inner, precision):
    """
    Move nodes between neighbouring communities until a full pass improves
    modularity by no more than ``precision``. n2c, tot and inner are updated
    in place. Returns True if at least one node changed community.
    """
    n = n2c.shape[0]
    neigh_weight = np.full(n, -1.0)
    neigh_pos = np.empty(n, np.int64)
    improvement = False
    new_mod = _modularity(tot, inner, total_weight)

    while True:
        cur_mod = new_mod
        nb_moves = 0
        for k in range(n):
            node = order[k]
            node_comm = n2c[node]
            deg = w_degree[node]

            # links from node to each neighbouring community, own community first
            neigh_pos[0] = node_comm
            neigh_weight[node_comm] = 0.0
            neigh_last = 1
            for e in range(indptr[node], indptr[node + 1]):
                neigh = indices[e]
                if neigh == node:
                    continue
                c = n2c[neigh]
                if neigh_weight[c] == -1.0:
                    neigh_weight[c] = 0.0
                    neigh_pos[neigh_last] = c
                    neigh_last += 1
                neigh_weight[c] += weights[e]

            # remove
            tot[node_comm] -= deg
            inner[node_comm] -= 2.0 * neigh_weight[node_comm] + self_loops[node]

            best_comm = node_comm
            best_links = neigh_weight[node_comm]
            best_increase = 0.0
            for i in range(neigh_last):
                c = neigh_pos[i]
                increase = neigh_weight[c] - tot[c] * deg / total_weight
                if increase > best_increase:
                    best_comm = c
                    best_links = neigh_weight[c]
                    best_increase = increase

            # insert
            tot[best_comm] += deg
            inner[best_comm] += 2.0 * best_links + self_loops[node]
            n2c[node] = best_comm
            if best_comm != node_comm:
                nb_moves += 1

            for i in range(neigh_last):
                neigh_weight[neigh_pos[i]] = -1.0

        new_mod = _modularity(tot, inner, total_weight)
        if nb_moves > 0:
            improvement = True
        if nb_moves == 0 or new_mod - cur_mod <= precision:
            break

    return improvement


class Partition:
    """
    Community assignment over a LouvainGraph, starting from singletons.

    Each instance owns its own assignment arrays and only reads the graph, so
    several partitions of the same graph can run ``one_level`` concurrently.
    """

    def __init__(self, graph: LouvainGraph, precision=0.01, order=None):
        self.graph = graph
        self.precision = float(precision)
        n = graph.n_nodes
        if order is None:
            order = np.arange(n, dtype=np.int64)
        else:
            order = np.asarray(order, dtype=np.int64)
            if order.shape != (n,) or not np.array_equal(np.sort(order), np.arange(n)):
                raise ValueError("order must be a permutation of the graph's nodes")
        self.order = order

        self.n2c = np.arange(n, dtype=np.int64)
        self.inner = graph.self_loops.copy()
        self.tot = graph.weighted_degrees.copy()

    def one_level(self):
        """Run local moving to convergence; True if any node changed community."""
        if self.graph.n_nodes == 0 or self.graph.total_weight <= 0.0:
            return False
        g = self.graph
        return bool(_one_level(g.indptr, g.indices, g.weights, g.weighted_degrees,
                               g.self_loops, g.total_weight, self.order,
                               self.n2c, self.tot, self.inner, self.precision))

    def modularity(self):
        return float(_modularity(self.tot, self.inner, self.graph.total_weight))

    def community_count(self):
        return int(np.unique(self.n2c).size)

    def renumbering(self):
        """Dense ids for the non-empty communities, in ascending community order."""
        renumber = np.full(self.graph.n_nodes, -1, dtype=np.int64)
        used = np.unique(self.n2c)
        renumber[used] = np.arange(used.size, dtype=np.int64)
        return renumber

    def partition_to_graph(self):
        """Collapse each community into one node of a new LouvainGraph."""
        g = self.graph
        renumber = self.renumbering()
        k = int(renumber.max()) + 1 if g.n_nodes else 0

        comm = renumber[self.n2c]
        rows = np.repeat(comm, np.diff(g.indptr))
        cols = comm[g.indices]
        # internal links land on the diagonal, so total weight is preserved
        A = sp.coo_matrix((g.weights, (rows, cols)), shape=(k, k)).tocsr()
        return LouvainGraph(A)
