"""Tests for the parallel multilevel Louvain evaluator."""
import numpy as np
import pytest

from cluster_bc import (
    LouvainConfig,
    LouvainEvaluator,
    LouvainGraph,
    LouvainObserver,
    VerboseObserver,
    build_result,
    renumber_communities,
)
from cluster_bc.louvain_evaluator import LevelAttempt, select_best


def quiet(**kwargs):
    return LouvainEvaluator(LouvainConfig(verbose=False, **kwargs))


def member_sets(communities):
    return sorted(tuple(c.members.tolist()) for c in communities)


class RecordingObserver(LouvainObserver):

    def __init__(self):
        self.events = []

    def begin(self, graph):
        self.events.append(("begin", graph.n_nodes))

    def level_start(self, level, graph):
        self.events.append(("level_start", level, graph.n_nodes))

    def level_end(self, level, old_modularity, new_modularity, n_communities):
        self.events.append(("level_end", level, n_communities))

    def end(self, modularity, levels):
        self.events.append(("end", levels))


# =============================================================================
# Helpers
# =============================================================================

class TestRenumber:

    def test_compose_and_renumber(self):
        assert renumber_communities([0, 1, 2, 3, 4], [2, 2, 4, 4, 4]).tolist() == [0, 0, 1, 1, 1]

    def test_compose_with_previous_level(self):
        assert renumber_communities([0, 0, 1, 2], [1, 1, 0]).tolist() == [1, 1, 1, 0]

    def test_empty_communities_dropped(self):
        assert renumber_communities([0, 1, 2, 3], [3, 3, 0, 3]).tolist() == [1, 1, 0, 1]


class TestBuildResult:

    def test_groups_members(self, two_triangles):
        communities = build_result([1, 0, 1, 0, 1, 0], two_triangles)
        assert len(communities) == 2
        assert communities[0].members.tolist() == [1, 3, 5]
        assert communities[1].members.tolist() == [0, 2, 4]
        assert all(c.graph is two_triangles for c in communities)

    def test_empty(self, two_triangles):
        assert build_result([], two_triangles) == []


class TestSelectBest:

    def test_highest_modularity(self):
        attempts = [LevelAttempt(i, True, m, None) for i, m in enumerate([0.1, 0.4, 0.3])]
        assert select_best(attempts).index == 1

    def test_ties_go_to_lowest_index(self):
        attempts = [LevelAttempt(i, True, m, None) for i, m in enumerate([0.2, 0.5, 0.5, 0.5])]
        assert select_best(attempts).index == 1


# =============================================================================
# Full runs
# =============================================================================

class TestEvaluate:

    def test_single_node(self, single_node):
        result = quiet().evaluate(single_node)
        assert result.levels == 1
        assert result.n_communities == 1
        assert result.communities[0].members.tolist() == [0]

    def test_edgeless_graph(self, edgeless):
        result = quiet().evaluate(edgeless)
        assert result.levels == 1
        assert result.n_communities == 4
        assert result.membership.tolist() == [0, 1, 2, 3]
        assert result.modularity == 0.0

    def test_empty_graph(self):
        result = quiet().evaluate(LouvainGraph.from_edges([], []))
        assert result.levels == 0
        assert result.communities == []

    @pytest.mark.parametrize("parallelism", [1, 2, 3, 4, 8])
    def test_two_triangles(self, two_triangles, parallelism):
        communities = quiet(parallelism=parallelism).evaluate_graph(two_triangles)
        assert member_sets(communities) == [(0, 1, 2), (3, 4, 5)]

    def test_two_triangles_levels(self, two_triangles):
        result = quiet(parallelism=2).evaluate(two_triangles)
        assert result.levels == 2
        assert result.modularity == pytest.approx(0.5)
        assert result.level_modularities == pytest.approx([0.5, 0.5])

    def test_barbell(self, barbell):
        result = quiet(parallelism=1).evaluate(barbell)
        assert member_sets(result.communities) == [(0, 1, 2, 3), (4, 5, 6, 7)]
        assert result.modularity == pytest.approx(2 * (12 / 26 - (13 / 26) ** 2))

    def test_best_attempt_not_worse_than_sequential(self, barbell):
        sequential = quiet(parallelism=1).evaluate(barbell)
        parallel = quiet(parallelism=4, seed=3).evaluate(barbell)
        assert parallel.modularity >= sequential.modularity - 1e-12

    def test_deterministic(self, barbell):
        first = quiet(parallelism=3, seed=7).evaluate(barbell)
        second = quiet(parallelism=3, seed=7).evaluate(barbell)
        assert np.array_equal(first.membership, second.membership)
        assert member_sets(first.communities) == member_sets(second.communities)

    def test_ids_dense_zero_based(self, barbell, two_triangles):
        for graph in (barbell, two_triangles):
            result = quiet(parallelism=2).evaluate(graph)
            k = result.n_communities
            assert set(result.membership.tolist()) == set(range(k))
            for comm_id, community in enumerate(result.communities):
                assert all(result.membership[v] == comm_id for v in community)

    def test_communities_reference_input_graph(self, two_triangles):
        communities = quiet().evaluate_graph(two_triangles)
        assert all(c.graph is two_triangles for c in communities)

    def test_ring_of_cliques(self):
        # six 5-cliques joined in a ring by single edges
        sources, targets = [], []
        for c in range(6):
            base = 5 * c
            for i in range(5):
                for j in range(i + 1, 5):
                    sources.append(base + i)
                    targets.append(base + j)
            sources.append(base + 4)
            targets.append((base + 5) % 30)
        graph = LouvainGraph.from_edges(sources, targets)
        result = quiet(parallelism=4).evaluate(graph)
        expected = [tuple(range(5 * c, 5 * c + 5)) for c in range(6)]
        assert member_sets(result.communities) == expected


class TestConfig:

    def test_invalid_parallelism(self):
        with pytest.raises(ValueError):
            LouvainConfig(parallelism=0)

    def test_invalid_precision(self):
        with pytest.raises(ValueError):
            LouvainConfig(precision=-0.1)

    def test_to_dict(self):
        assert LouvainConfig(verbose=False).to_dict() == {
            'precision': 0.01, 'parallelism': 4, 'verbose': False, 'seed': 0,
        }


class TestObservers:

    def test_event_sequence(self, two_triangles):
        observer = RecordingObserver()
        LouvainEvaluator(LouvainConfig(verbose=False), observer=observer).evaluate(two_triangles)
        assert observer.events == [
            ("begin", 6),
            ("level_start", 0, 6),
            ("level_end", 0, 2),
            ("level_start", 1, 2),
            ("level_end", 1, 2),
            ("end", 2),
        ]

    def test_quiet_by_config(self, two_triangles, capsys):
        quiet().evaluate(two_triangles)
        assert capsys.readouterr().out == ""

    def test_verbose_banner(self, two_triangles, capsys):
        observer = VerboseObserver()
        LouvainEvaluator(LouvainConfig(parallelism=2), observer=observer).evaluate(two_triangles)
        out = capsys.readouterr().out
        assert "level 0:" in out
        assert "network size: 6 nodes, 12 links, 12 weight." in out
        assert "Total duration" in out
        assert observer.timing.get_stats()["louvain.level_0"]["count"] == 1

    def test_verbose_default_observer(self):
        assert isinstance(LouvainEvaluator().observer, VerboseObserver)
