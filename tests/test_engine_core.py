"""Tests for the core hypergraph store."""

import pytest

from hyperchain.engine.core import EdgeView, Hyperedge, Hypergraph
from hyperchain.errors import DuplicateEdge, EdgeNotFound, GraphFrozen, NodeNotFound


class TestHyperedge:
    """Tests for Hyperedge identity."""

    def test_equality_ignores_payload(self):
        a = Hyperedge(frozenset({0, 1}), frozenset({2}), "first")
        b = Hyperedge(frozenset({1, 0}), frozenset({2}), "second")
        assert a == b
        assert hash(a) == hash(b)

    def test_direction_matters(self):
        a = Hyperedge(frozenset({0}), frozenset({1}), None)
        b = Hyperedge(frozenset({1}), frozenset({0}), None)
        assert a != b


class TestWorkedExample:
    """The minimal four-node, three-edge example."""

    def test_order(self, basic_graph):
        assert basic_graph.order() == 4

    def test_size(self, basic_graph):
        assert basic_graph.size() == 3

    def test_neighbors(self, basic_graph):
        assert basic_graph.neighbors(1) == {0}
        assert basic_graph.neighbor_of(1) == {1}

    def test_weights(self, basic_graph):
        (outgoing,) = basic_graph.neighbors(1)
        (incoming,) = basic_graph.neighbor_of(1)
        assert basic_graph.get_weight(outgoing) == 15
        assert basic_graph.get_weight(incoming) == 30
        assert basic_graph.get_weight(2) == 45

    def test_node_indices(self, basic_graph):
        assert [basic_graph.get_node(i) for i in range(4)] == [1, 2, 3, 4]
        assert basic_graph.index_of(3) == 2

    def test_destination_adjacency(self, basic_graph):
        assert basic_graph.neighbor_of(3) == {0}
        assert basic_graph.neighbor_of(4) == {0}
        assert basic_graph.neighbors(3) == {1}
        assert basic_graph.neighbors(4) == {2}


class TestNodeOperations:
    """Tests for insert_node and node lookups."""

    def test_insert_returns_insertion_order(self):
        graph = Hypergraph()
        assert [graph.insert_node(k) for k in ("a", "b", "c")] == [0, 1, 2]

    def test_order_counts_distinct_keys(self):
        graph = Hypergraph()
        for key in ["a", "b", "a", "c", "b"]:
            graph.insert_node(key)
        assert graph.order() == 3

    def test_get_node_round_trip(self):
        graph = Hypergraph()
        for key in ("x", ("tuple", 1), 42):
            assert graph.get_node(graph.insert_node(key)) == key

    def test_reinsert_keeps_index_and_adjacency(self, basic_graph):
        assert basic_graph.insert_node(1) == 0
        assert basic_graph.neighbors(1) == {0}
        assert basic_graph.neighbor_of(1) == {1}
        assert basic_graph.order() == 4

    def test_get_node_out_of_range(self, basic_graph):
        with pytest.raises(NodeNotFound):
            basic_graph.get_node(4)
        with pytest.raises(NodeNotFound):
            basic_graph.get_node(-1)

    def test_unknown_key_lookups(self, basic_graph):
        for lookup in (basic_graph.neighbors, basic_graph.neighbor_of, basic_graph.index_of):
            with pytest.raises(NodeNotFound) as excinfo:
                lookup(99)
            assert excinfo.value.key == 99

    def test_node_not_found_is_lookup_error(self, basic_graph):
        with pytest.raises(LookupError):
            basic_graph.neighbors("missing")

    def test_has_node(self, basic_graph):
        assert basic_graph.has_node(1)
        assert not basic_graph.has_node(5)

    def test_nodes_in_insertion_order(self, basic_graph):
        assert list(basic_graph.nodes()) == [1, 2, 3, 4]


class TestEdgeOperations:
    """Tests for insert_edge and edge lookups."""

    def test_duplicate_shape_keeps_first_payload(self):
        graph = Hypergraph()
        for key in "abc":
            graph.insert_node(key)
        first = graph.insert_edge(["a", "b"], ["c"], "first")
        second = graph.insert_edge(["b", "a"], ["c"], "second")
        assert first == second == 0
        assert graph.size() == 1
        assert graph.get_weight(first) == "first"

    def test_duplicate_keys_collapse(self):
        graph = Hypergraph()
        graph.insert_node("a")
        graph.insert_node("b")
        index = graph.insert_edge(["a", "a"], ["b"], None)
        assert graph.get_edge(index).sources == frozenset({"a"})

    def test_unknown_source_raises(self, basic_graph):
        with pytest.raises(NodeNotFound) as excinfo:
            basic_graph.insert_edge([1, 9], [2], 0)
        assert excinfo.value.key == 9
        assert basic_graph.size() == 3

    def test_unknown_destination_raises(self, basic_graph):
        with pytest.raises(NodeNotFound):
            basic_graph.insert_edge([1], [9], 0)

    def test_get_weight_out_of_range(self, basic_graph):
        with pytest.raises(EdgeNotFound) as excinfo:
            basic_graph.get_weight(3)
        assert excinfo.value.index == 3
        with pytest.raises(EdgeNotFound):
            basic_graph.get_weight(-1)

    def test_neighbors_match_edge_sides(self, basic_graph):
        for key in basic_graph.nodes():
            expected_out = {e.index for e in basic_graph.edges() if key in e.sources}
            expected_in = {e.index for e in basic_graph.edges() if key in e.destinations}
            assert basic_graph.neighbors(key) == expected_out
            assert basic_graph.neighbor_of(key) == expected_in

    def test_neighbors_returns_copy(self, basic_graph):
        basic_graph.neighbors(1).add(99)
        assert basic_graph.neighbors(1) == {0}

    def test_get_edge_view(self, basic_graph):
        edge = basic_graph.get_edge(0)
        assert edge == EdgeView(0, frozenset({1, 2}), frozenset({3, 4}), 15)

    def test_find_edge(self, basic_graph):
        assert basic_graph.find_edge([2, 1], [4, 3]) == 0
        assert basic_graph.find_edge([1], [3]) is None

    def test_producers_sorted(self):
        graph = Hypergraph()
        for key in "abcd":
            graph.insert_node(key)
        graph.insert_edge(["a"], ["d"], 1)
        graph.insert_edge(["b"], ["d"], 2)
        graph.insert_edge(["c"], ["d"], 3)
        assert graph.producers("d") == [0, 1, 2]
        assert graph.consumers("a") == [0]

    def test_edge_without_sources(self):
        graph = Hypergraph()
        graph.insert_node("ore")
        index = graph.insert_edge([], ["ore"], "mine")
        assert graph.neighbor_of("ore") == {index}
        assert graph.neighbors("ore") == set()


class TestStrictMode:
    """Tests for strict duplicate handling."""

    @pytest.fixture
    def graph(self) -> Hypergraph:
        g = Hypergraph(strict=True)
        g.insert_node("a")
        g.insert_node("b")
        g.insert_edge(["a"], ["b"], "payload")
        return g

    def test_conflicting_payload_raises(self, graph):
        with pytest.raises(DuplicateEdge) as excinfo:
            graph.insert_edge(["a"], ["b"], "other")
        assert excinfo.value.index == 0
        assert graph.get_weight(0) == "payload"

    def test_equal_payload_is_allowed(self, graph):
        assert graph.insert_edge(["a"], ["b"], "payload") == 0
        assert graph.size() == 1


class TestFreeze:
    """Tests for the mutation/read phase split."""

    def test_freeze_blocks_insertions(self, basic_graph):
        assert basic_graph.freeze() is basic_graph
        assert basic_graph.frozen
        with pytest.raises(GraphFrozen):
            basic_graph.insert_node(5)
        with pytest.raises(GraphFrozen):
            basic_graph.insert_edge([1], [2], 0)
        assert basic_graph.order() == 4
        assert basic_graph.size() == 3

    def test_frozen_graph_is_readable(self, basic_graph):
        basic_graph.freeze()
        assert basic_graph.neighbors(1) == {0}
        assert basic_graph.get_weight(0) == 15


class TestSummary:
    """Tests for stats() and validate()."""

    def test_stats(self, basic_graph):
        stats = basic_graph.stats()
        assert stats["node_count"] == 4
        assert stats["edge_count"] == 3
        assert stats["source_only_count"] == 0
        assert stats["frozen"] is False

    def test_validate_clean_graph(self, basic_graph):
        result = basic_graph.validate()
        assert result["valid"] is True
        assert result["errors"] == []

    def test_validate_warns_on_unproduced_nodes(self):
        graph = Hypergraph()
        graph.insert_node("ore")
        graph.insert_node("ingot")
        graph.insert_edge(["ore"], ["ingot"], None)
        result = graph.validate()
        assert result["valid"] is True
        assert result["warnings"] == ["Node 'ore' has no producing edge"]

    def test_validate_detects_corrupt_adjacency(self, basic_graph):
        basic_graph._nodes[0].outgoing.clear()
        result = basic_graph.validate()
        assert result["valid"] is False
        assert any("missing from outgoing of 1" in err for err in result["errors"])

    def test_repr(self, basic_graph):
        assert repr(basic_graph) == "Hypergraph(order=4, size=3)"
