"""
Community - the set of original vertices assigned to one cluster.
"""
import numpy as np


class Community:
    """Members of one cluster, referencing (not copying) the graph they belong to."""

    def __init__(self, graph):
        self.graph = graph
        self._members = set()
        self._sorted = None

    def add(self, vertex):
        vertex = int(vertex)
        if not 0 <= vertex < self.graph.n_nodes:
            raise ValueError(f"Vertex {vertex} out of range [0, {self.graph.n_nodes - 1}]")
        if vertex not in self._members:
            self._members.add(vertex)
            self._sorted = None

    @property
    def members(self):
        """Sorted, read-only array of member vertex ids; rebuilt only after an add."""
        if self._sorted is None:
            self._sorted = np.fromiter(sorted(self._members), dtype=np.int64,
                                       count=len(self._members))
            self._sorted.flags.writeable = False
        return self._sorted

    @property
    def size(self):
        return len(self._members)

    def border_vertices(self):
        """Members with at least one edge leaving the community."""
        members = self.members
        if members.size == 0:
            return members
        return members[self.graph.subgraph_border(members)]

    @property
    def border_count(self):
        """Width of the border profiles of this community's vertices."""
        return int(self.border_vertices().size)

    def __len__(self):
        return self.size

    def __contains__(self, vertex):
        return int(vertex) in self._members

    def __iter__(self):
        return iter(self.members.tolist())

    def __repr__(self):
        return f"Community(size={self.size}, members={self.members.tolist()})"
