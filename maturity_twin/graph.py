"""
Maturity Twin: Causal Graph Builder (NetworkX)

Derives the node/edge view of a state from the fixed causal table in
``config``. The graph describes the simulator's causal assumptions; its
topological order is also the order in which the simulator updates
variables.
"""

from __future__ import annotations

import logging
from functools import lru_cache

import networkx as nx

from . import config
from .errors import CausalGraphError
from .models import TwinEdge, TwinFinancial, TwinMaturity, TwinNode, TwinRisk

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _table_graph() -> nx.DiGraph:
    """Validated DiGraph of the causal table. Shared; never mutate it."""
    graph = nx.DiGraph()
    graph.add_nodes_from(node_id for node_id, *_ in config.NODE_TABLE)
    for src, dst, strength, _label in config.CAUSAL_EDGES:
        if src not in graph or dst not in graph:
            raise CausalGraphError(f"Causal edge {src!r} → {dst!r} references an unknown node")
        graph.add_edge(src, dst, strength=strength)
    if not nx.is_directed_acyclic_graph(graph):
        raise CausalGraphError("Causal table contains cycles!")
    return graph


def propagation_order() -> list[str]:
    """Topological sort of the causal table -- determines simulator update order."""
    return list(nx.topological_sort(_table_graph()))


def downstream_of(node_id: str) -> list[str]:
    """Variables causally affected, directly or indirectly, by ``node_id``."""
    graph = _table_graph()
    if node_id not in graph:
        return []
    return sorted(nx.descendants(graph, node_id))


def build_graph(
    maturity: TwinMaturity,
    financial: TwinFinancial,
    risk: TwinRisk,
) -> tuple[list[TwinNode], list[TwinEdge]]:
    """Build fresh nodes (current values) and edges (fixed table) for a state."""
    slices = {"maturity": maturity, "financial": financial, "risk": risk}
    nodes = [
        TwinNode(
            id=node_id,
            label=label,
            type=node_type,
            value=getattr(slices[slice_name], field_name),
            unit=unit,
            metadata={"downstream": downstream_of(node_id)},
        )
        for node_id, label, node_type, slice_name, field_name, unit in config.NODE_TABLE
    ]
    edges = [
        TwinEdge(source_id=src, target_id=dst, strength=strength, label=label)
        for src, dst, strength, label in config.CAUSAL_EDGES
    ]
    return nodes, edges


def causal_digraph(nodes: list[TwinNode], edges: list[TwinEdge]) -> nx.DiGraph:
    """
    Materialize a state's node/edge view as a DiGraph with values attached.

    Raises:
        CausalGraphError: an edge references an unknown node, or the graph
                          contains a cycle.
    """
    graph = nx.DiGraph()
    for node in nodes:
        graph.add_node(node.id, label=node.label, type=node.type.value,
                       value=node.value, unit=node.unit)
    for edge in edges:
        for endpoint in (edge.source_id, edge.target_id):
            if endpoint not in graph:
                raise CausalGraphError(f"Edge references unknown node {endpoint!r}")
        graph.add_edge(edge.source_id, edge.target_id,
                       strength=edge.strength, label=edge.label)
    if not nx.is_directed_acyclic_graph(graph):
        raise CausalGraphError("Causal graph contains cycles!")
    return graph
