"""
Parallel multilevel Louvain clustering.

Every level runs several independent local-moving attempts over the same
graph, keeps the one with the highest modularity, collapses its communities
into a coarser graph and composes the assignment of the original vertices.
The loop stops at the first level whose best attempt moved no node.
"""
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from .community import Community
from .config import LouvainConfig
from .core_utilities import TimingStats
from .louvain_graph import LouvainGraph
from .partition import Partition


class LouvainObserver:
    """Receives progress events from LouvainEvaluator. All hooks are no-ops."""

    def begin(self, graph):
        pass

    def level_start(self, level, graph):
        pass

    def level_end(self, level, old_modularity, new_modularity, n_communities):
        pass

    def end(self, modularity, levels):
        pass


class VerboseObserver(LouvainObserver):
    """Prints timestamped level banners and keeps per-level timings."""

    def __init__(self, timing_stats: Optional[TimingStats] = None):
        self.timing = timing_stats if timing_stats is not None else TimingStats()
        self._begin = None

    @staticmethod
    def _display_time(label):
        print(f"{label}: {time.ctime()}")

    def begin(self, graph):
        self._begin = time.time()
        self.timing.start("louvain")
        self._display_time("Begin")

    def level_start(self, level, graph):
        self.timing.start(f"louvain.level_{level}")
        print(f"level {level}:")
        self._display_time("    start computation")
        print(f"    network size: {graph.n_nodes} nodes, "
              f"{graph.n_links} links, {graph.total_weight:g} weight.")

    def level_end(self, level, old_modularity, new_modularity, n_communities):
        self.timing.end(f"louvain.level_{level}")
        print(f"  modularity increased from {old_modularity:.6f} to {new_modularity:.6f} "
              f"({n_communities} communities)")
        self._display_time("  end computation")

    def end(self, modularity, levels):
        self.timing.end("louvain")
        self._display_time("End")
        elapsed = time.time() - self._begin if self._begin is not None else 0.0
        print(f"Total duration: {elapsed:.2f} sec. ({levels} levels, modularity {modularity:.6f})")


@dataclass
class LevelAttempt:
    index: int
    improved: bool
    modularity: float
    partition: Partition


@dataclass
class LouvainResult:
    membership: np.ndarray             # original vertex -> dense community id
    modularity: float
    levels: int
    level_modularities: List[float] = field(default_factory=list)
    communities: List[Community] = field(default_factory=list)

    @property
    def n_communities(self):
        return len(self.communities)


def renumber_communities(node_to_community, level_n2c):
    """
    Compose the original-vertex assignment with one level's assignment and
    renumber densely: communities with members keep their ascending order,
    empty ones are dropped.
    """
    level_n2c = np.asarray(level_n2c, dtype=np.int64)
    renumber = np.full(level_n2c.size, -1, dtype=np.int64)
    used = np.unique(level_n2c)
    renumber[used] = np.arange(used.size, dtype=np.int64)
    return renumber[level_n2c[np.asarray(node_to_community, dtype=np.int64)]]


def build_result(node_to_community, graph):
    """One Community per id in ``node_to_community``, members added in vertex order."""
    node_to_community = np.asarray(node_to_community, dtype=np.int64)
    if node_to_community.size == 0:
        return []
    communities = [Community(graph) for _ in range(int(node_to_community.max()) + 1)]
    for vertex, comm in enumerate(node_to_community):
        communities[comm].add(vertex)
    return communities


def select_best(attempts):
    """Highest modularity wins; the first attempt seen wins ties."""
    best = attempts[0]
    for attempt in attempts[1:]:
        if attempt.modularity > best.modularity:
            best = attempt
    return best


class LouvainEvaluator:
    """
    Best-of-N multilevel Louvain community detection.

    Parameters:
    -----------
    config : LouvainConfig, optional
        Precision, parallelism, verbosity and seed. Defaults to LouvainConfig().
    observer : LouvainObserver, optional
        Progress sink. When omitted, a VerboseObserver is used if
        ``config.verbose`` is set, otherwise progress is discarded.
    """

    def __init__(self, config: Optional[LouvainConfig] = None,
                 observer: Optional[LouvainObserver] = None):
        self.config = config if config is not None else LouvainConfig()
        if observer is None:
            observer = VerboseObserver() if self.config.verbose else LouvainObserver()
        self.observer = observer

    def _attempt_order(self, n_nodes, level, index):
        if index == 0:
            return np.arange(n_nodes, dtype=np.int64)
        rng = np.random.default_rng([self.config.seed, level, index])
        return rng.permutation(n_nodes).astype(np.int64)

    def _run_attempt(self, graph, level, index):
        partition = Partition(graph, self.config.precision,
                              order=self._attempt_order(graph.n_nodes, level, index))
        improved = partition.one_level()
        return LevelAttempt(index, improved, partition.modularity(), partition)

    def evaluate(self, graph: LouvainGraph) -> LouvainResult:
        """Run levels until the best attempt of a level no longer improves."""
        n2c = np.arange(graph.n_nodes, dtype=np.int64)
        if graph.n_nodes == 0:
            return LouvainResult(membership=n2c, modularity=0.0, levels=0)

        self.observer.begin(graph)
        g = graph
        mod = Partition(g, self.config.precision).modularity()
        level_modularities = []
        level = 0
        with ThreadPoolExecutor(max_workers=self.config.parallelism) as pool:
            while True:
                self.observer.level_start(level, g)

                futures = [pool.submit(self._run_attempt, g, level, i)
                           for i in range(self.config.parallelism)]
                attempts = [f.result() for f in futures]

                best = select_best(attempts)
                new_mod = best.modularity
                g = best.partition.partition_to_graph()
                n2c = renumber_communities(n2c, best.partition.n2c)

                self.observer.level_end(level, mod, new_mod, g.n_nodes)
                level_modularities.append(new_mod)
                mod = new_mod
                level += 1
                if not best.improved:
                    break

        self.observer.end(mod, level)
        return LouvainResult(
            membership=n2c,
            modularity=mod,
            levels=level,
            level_modularities=level_modularities,
            communities=build_result(n2c, graph),
        )

    def evaluate_graph(self, graph: LouvainGraph) -> List[Community]:
        return self.evaluate(graph).communities
