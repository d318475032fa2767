"""Causal graph builder tests."""

import networkx as nx
import pytest

from maturity_twin import CausalGraphError, NodeType, build_graph, causal_digraph, propagation_order
from maturity_twin.graph import downstream_of
from maturity_twin.models import TwinEdge


class TestBuildGraph:

    def test_nodes_carry_current_values(self, baseline_state):
        nodes, _ = build_graph(baseline_state.maturity, baseline_state.financial, baseline_state.risk)
        by_id = {n.id: n for n in nodes}

        assert set(by_id) == {"data_maturity", "ai_maturity", "revenue", "profit", "valuation", "risk"}
        assert by_id["data_maturity"].value == 50
        assert by_id["revenue"].value == 5_000_000
        assert by_id["profit"].value == pytest.approx(500_000)
        assert by_id["risk"].type is NodeType.RISK
        assert by_id["revenue"].unit == "currency"

    def test_fixed_edge_table(self, baseline_state):
        _, edges = build_graph(baseline_state.maturity, baseline_state.financial, baseline_state.risk)
        pairs = {(e.source_id, e.target_id): e.strength for e in edges}

        assert pairs == {
            ("data_maturity", "ai_maturity"): 0.8,
            ("ai_maturity", "revenue"): 0.6,
            ("ai_maturity", "profit"): 0.5,
            ("data_maturity", "risk"): -0.5,
            ("revenue", "valuation"): 0.7,
        }

    def test_node_metadata_lists_downstream(self, baseline_state):
        node = next(n for n in baseline_state.nodes if n.id == "data_maturity")
        assert node.metadata["downstream"] == ["ai_maturity", "profit", "revenue", "risk", "valuation"]

    def test_rebuild_yields_fresh_objects(self, baseline_state):
        first = build_graph(baseline_state.maturity, baseline_state.financial, baseline_state.risk)
        second = build_graph(baseline_state.maturity, baseline_state.financial, baseline_state.risk)
        first[0][0].metadata["downstream"].append("x")
        assert "x" not in second[0][0].metadata["downstream"]


class TestDigraph:

    def test_digraph_is_dag(self, baseline_state):
        graph = causal_digraph(baseline_state.nodes, baseline_state.edges)
        assert isinstance(graph, nx.DiGraph)
        assert nx.is_directed_acyclic_graph(graph)
        assert graph.nodes["ai_maturity"]["value"] == 50
        assert graph.edges["data_maturity", "risk"]["strength"] == -0.5

    def test_unknown_endpoint_rejected(self, baseline_state):
        edges = baseline_state.edges + [TwinEdge("revenue", "market_share", 0.3)]
        with pytest.raises(CausalGraphError):
            causal_digraph(baseline_state.nodes, edges)

    def test_cycle_rejected(self, baseline_state):
        edges = baseline_state.edges + [TwinEdge("valuation", "data_maturity", 0.1)]
        with pytest.raises(CausalGraphError):
            causal_digraph(baseline_state.nodes, edges)


class TestPropagationOrder:

    def test_order_respects_edges(self):
        order = propagation_order()
        pos = {node: i for i, node in enumerate(order)}

        assert len(order) == 6
        assert pos["data_maturity"] < pos["ai_maturity"] < pos["revenue"] < pos["valuation"]
        assert pos["ai_maturity"] < pos["profit"]
        assert pos["data_maturity"] < pos["risk"]

    def test_downstream_of_leaf_and_unknown(self):
        assert downstream_of("valuation") == []
        assert downstream_of("market_share") == []
        assert downstream_of("revenue") == ["valuation"]
