"""Unit tests for the order linearizer."""

import pytest

from convoflow.core.linearize import (
    compute_linear_order,
    find_start_nodes,
    resolve_convergence,
)
from convoflow.core.types import Edge, LinearOrder, Node, Position


def node(nid: str, x: float = 0.0, y: float = 0.0) -> Node:
    return Node(id=nid, position=Position(x=x, y=y), content_id=f"c-{nid}", legacy_id=f"m-{nid}")


def edge(src: str, tgt: str, eid: str = "") -> Edge:
    return Edge(id=eid or f"{src}->{tgt}", source_id=src, target_id=tgt)


def legacy(*ids: str):
    return [f"m-{i}" for i in ids]


class TestScenarios:
    def test_empty_graph(self):
        result = compute_linear_order([], [])
        assert result.order == []
        assert result.orphan_ids == []
        assert result.excluded_ids == []

    def test_linear_chain(self):
        nodes = [node("n1"), node("n2"), node("n3")]
        edges = [edge("n1", "n2"), edge("n2", "n3")]

        result = compute_linear_order(nodes, edges)

        assert result.order == legacy("n1", "n2", "n3")
        assert result.orphan_ids == []

    def test_chain_follows_edges_not_node_list(self):
        nodes = [node("c"), node("a"), node("b")]
        edges = [edge("a", "b"), edge("b", "c")]

        assert compute_linear_order(nodes, edges).order == legacy("a", "b", "c")

    def test_branch_and_rejoin(self):
        nodes = [node("n1", y=0), node("n2", y=0), node("n3", y=200), node("n4", y=0)]
        edges = [
            edge("n1", "n2"),
            edge("n1", "n3"),
            edge("n2", "n4"),
            edge("n3", "n4"),
        ]

        result = compute_linear_order(nodes, edges)

        assert result.order == legacy("n1", "n2", "n4")
        assert result.excluded_ids == legacy("n3")
        assert result.orphan_ids == []

    def test_branch_without_rejoin_walks_both_arms(self):
        nodes = [node("root"), node("left"), node("right")]
        edges = [edge("root", "left"), edge("root", "right")]

        assert compute_linear_order(nodes, edges).order == legacy("root", "left", "right")

    def test_depth_first_before_siblings(self):
        nodes = [node("a"), node("b"), node("c"), node("d")]
        edges = [edge("a", "b"), edge("a", "c"), edge("b", "d")]

        assert compute_linear_order(nodes, edges).order == legacy("a", "b", "d", "c")

    def test_outgoing_edges_follow_edge_order(self):
        nodes = [node("a"), node("b"), node("c")]
        edges = [edge("a", "c"), edge("a", "b")]

        assert compute_linear_order(nodes, edges).order == legacy("a", "c", "b")


class TestConvergence:
    def test_topmost_source_is_primary(self):
        nodes = [node("X", y=0), node("Y", y=100), node("Z", y=50)]
        edges = [edge("Y", "Z"), edge("X", "Z")]

        by_id = {n.id: n for n in nodes}
        incoming = {"Z": edges}
        assert resolve_convergence(by_id, incoming) == {"Y"}

        result = compute_linear_order(nodes, edges)
        assert result.order == legacy("X", "Z")
        assert result.excluded_ids == legacy("Y")

    def test_negative_y_wins(self):
        nodes = [node("X", y=10), node("Y", y=-120), node("Z")]
        edges = [edge("X", "Z"), edge("Y", "Z")]

        result = compute_linear_order(nodes, edges)
        assert result.excluded_ids == legacy("X")
        assert result.order == legacy("Y", "Z")

    def test_equal_y_goes_to_first_edge(self):
        nodes = [node("X", y=5), node("Y", y=5), node("Z")]
        edges = [edge("Y", "Z"), edge("X", "Z")]

        result = compute_linear_order(nodes, edges)
        assert result.excluded_ids == legacy("X")

    def test_parallel_edges_are_not_convergence(self):
        nodes = [node("a"), node("b")]
        edges = [edge("a", "b", "e1"), edge("a", "b", "e2")]

        result = compute_linear_order(nodes, edges)
        assert result.order == legacy("a", "b")
        assert result.excluded_ids == []


class TestCycles:
    def test_two_node_cycle_terminates(self):
        nodes = [node("A"), node("B")]
        edges = [edge("A", "B"), edge("B", "A")]

        result = compute_linear_order(nodes, edges)

        assert result.order == legacy("A", "B")
        assert len(set(result.order)) == len(result.order)

    def test_closed_cycle_starts_from_first_node(self):
        nodes = [node("B"), node("C"), node("A")]
        edges = [edge("A", "B"), edge("B", "C"), edge("C", "A")]

        starts = find_start_nodes(nodes, {"A": [edges[2]], "B": [edges[0]], "C": [edges[1]]})
        assert [n.id for n in starts] == ["B"]

        assert compute_linear_order(nodes, edges).order == legacy("B", "C", "A")

    def test_loop_back_edge_counts_as_convergence(self):
        # b -> a makes `a` a convergence point; s wins the y tie by edge order.
        nodes = [node("s"), node("a"), node("b")]
        edges = [edge("s", "a"), edge("a", "b"), edge("b", "a")]

        result = compute_linear_order(nodes, edges)
        assert result.order == legacy("s", "a")
        assert result.excluded_ids == legacy("b")

    def test_self_loop(self):
        nodes = [node("a"), node("b")]
        edges = [edge("a", "a"), edge("a", "b")]

        result = compute_linear_order(nodes, edges)
        assert result.order == legacy("a", "b")

    def test_disconnected_cycle_goes_to_appendix(self):
        nodes = [node("s"), node("t"), node("p"), node("q")]
        edges = [edge("s", "t"), edge("p", "q"), edge("q", "p")]

        assert compute_linear_order(nodes, edges).order == legacy("s", "t", "p", "q")


class TestOrphans:
    def test_isolated_node_reported(self):
        nodes = [node("a"), node("b"), node("lonely")]
        edges = [edge("a", "b")]

        result = compute_linear_order(nodes, edges)

        assert result.orphan_ids == legacy("lonely")
        assert "m-lonely" in result.order

    def test_single_node_is_orphan(self):
        result = compute_linear_order([node("only")], [])
        assert result.order == legacy("only")
        assert result.orphan_ids == legacy("only")

    def test_all_disconnected(self):
        nodes = [node("a"), node("b")]
        result = compute_linear_order(nodes, [])
        assert result.order == legacy("a", "b")
        assert result.orphan_ids == legacy("a", "b")

    def test_dangling_edges_ignored(self):
        nodes = [node("a"), node("b")]
        edges = [edge("a", "ghost"), edge("a", "b")]

        result = compute_linear_order(nodes, edges)
        assert result.order == legacy("a", "b")


class TestGuarantees:
    @pytest.fixture
    def tangled(self):
        nodes = [
            node("n1", y=0), node("n2", y=-50), node("n3", y=80),
            node("n4"), node("n5"), node("n6"), node("n7"),
        ]
        edges = [
            edge("n1", "n2"), edge("n1", "n3"), edge("n2", "n4"),
            edge("n3", "n4"), edge("n4", "n1"), edge("n3", "n5"),
            edge("n6", "n6"),
        ]
        return nodes, edges

    def test_totality(self, tangled):
        nodes, edges = tangled
        result = compute_linear_order(nodes, edges)

        covered = result.order + result.excluded_ids
        assert sorted(covered) == sorted(n.legacy_id for n in nodes)
        assert len(covered) == len(set(covered))

    def test_determinism(self, tangled):
        nodes, edges = tangled
        assert compute_linear_order(nodes, edges) == compute_linear_order(nodes, edges)

    def test_does_not_mutate_input(self, tangled):
        nodes, edges = tangled
        before = [n.model_dump() for n in nodes]
        compute_linear_order(nodes, edges)
        assert [n.model_dump() for n in nodes] == before

    def test_sync_payload_shape(self):
        result = LinearOrder(order=["a"], orphan_ids=["b"], excluded_ids=["c"])
        assert result.sync_payload() == {"order": ["a"], "orphanIds": ["b"]}
        assert result.playback_ids == ["a", "c"]
