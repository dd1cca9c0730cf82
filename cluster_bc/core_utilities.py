"""
Core utilities for the cluster_bc package.
Contains timing helpers and numba kernels shared by the graph and clustering modules.
"""
import time
from collections import defaultdict

import numpy as np
from numba import njit


class TimingStats:
    """
    Wall-clock timings of named clustering phases.

    Phases nest by name: ``louvain.level_0`` is a child of ``louvain``.
    """
    def __init__(self):
        self.stats = defaultdict(list)
        self._open = {}

    def start(self, phase):
        self._open[phase] = time.time()

    def end(self, phase):
        """Close ``phase`` and return its elapsed seconds, None if it was never started."""
        started = self._open.pop(phase, None)
        if started is None:
            return None
        elapsed = time.time() - started
        self.stats[phase].append(elapsed)
        return elapsed

    def get_operation_total(self, phase):
        return sum(self.stats.get(phase, ()))

    def get_stats(self):
        """Count and total/mean/max seconds per phase."""
        return {
            phase: {
                'count': len(times),
                'total': sum(times),
                'mean': sum(times) / len(times),
                'max': max(times),
            }
            for phase, times in self.stats.items() if times
        }

    def level_breakdown(self, parent="louvain"):
        """Share of the ``parent`` phase spent in each of its child phases."""
        parent_total = self.get_operation_total(parent)
        lines = [f"{parent}: {parent_total:.2f}s total"]
        prefix = f"{parent}."
        for phase in [p for p in self.stats if p.startswith(prefix)]:
            total = self.get_operation_total(phase)
            share = 100.0 * total / parent_total if parent_total > 0 else 0.0
            lines.append(f"  • {phase[len(prefix):]}: {total:.2f}s ({share:.1f}%)")
        return "\n".join(lines)


@njit(cache=True)
def _build_csr_arrays_from_pairs(a, b, w, n):
    # Each undirected pair lands in both rows; u == v lands once (self-loop).
    deg = np.zeros(n, np.int64)
    m = a.size
    for i in range(m):
        deg[a[i]] += 1
        if a[i] != b[i]:
            deg[b[i]] += 1

    indptr = np.empty(n + 1, np.int64)
    indptr[0] = 0
    for i in range(n):
        indptr[i + 1] = indptr[i] + deg[i]

    nnz = indptr[n]
    indices = np.empty(nnz, np.int64)
    data = np.empty(nnz, np.float64)

    cursor = indptr[:-1].copy()
    for i in range(m):
        u = a[i]; v = b[i]; wt = w[i]
        pu = cursor[u]; indices[pu] = v; data[pu] = wt; cursor[u] = pu + 1
        if u != v:
            pv = cursor[v]; indices[pv] = u; data[pv] = wt; cursor[v] = pv + 1

    return indptr, indices, data


@njit(cache=True)
