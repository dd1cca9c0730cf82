"""
cluster_bc - Cluster decomposition building blocks for betweenness centrality:
border-distance profiles and parallel multilevel Louvain clustering.
"""

# Import main classes for easy access
from .border_profile import BorderProfile, equivalence_classes
from .community import Community
from .config import LouvainConfig
from .louvain_evaluator import (
    LouvainEvaluator,
    LouvainObserver,
    LouvainResult,
    VerboseObserver,
    build_result,
    renumber_communities,
)
from .louvain_graph import LouvainGraph
from .partition import Partition

from .core_utilities import TimingStats

__all__ = [
    # Main classes
    'BorderProfile',
    'Community',
    'LouvainConfig',
    'LouvainEvaluator',
    'LouvainGraph',
    'LouvainObserver',
    'LouvainResult',
    'Partition',
    'VerboseObserver',

    # Utility classes
    'TimingStats',

    # Core functions
    'build_result',
    'equivalence_classes',
    'renumber_communities',
]

# Package metadata
__version__ = '1.0.0'
