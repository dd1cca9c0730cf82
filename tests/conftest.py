"""Shared graph fixtures for the cluster_bc test suite."""
import numpy as np
import pytest

from cluster_bc import LouvainGraph


@pytest.fixture
def two_triangles():
    """Two disconnected triangles {0,1,2} and {3,4,5}"""
    return LouvainGraph.from_edges([0, 1, 2, 3, 4, 5], [1, 2, 0, 4, 5, 3])


@pytest.fixture
def barbell():
    """Two 4-cliques {0..3} and {4..7} joined by the bridge 3-4"""
    sources, targets = [], []
    for offset in (0, 4):
        for i in range(4):
            for j in range(i + 1, 4):
                sources.append(offset + i)
                targets.append(offset + j)
    sources.append(3)
    targets.append(4)
    return LouvainGraph.from_edges(sources, targets)


@pytest.fixture
def single_node():
    """One vertex, no edges"""
    return LouvainGraph.from_edges(np.empty(0, np.int64), np.empty(0, np.int64), n_nodes=1)


@pytest.fixture
def edgeless():
    """Four isolated vertices"""
    return LouvainGraph.from_edges([], [], n_nodes=4)
