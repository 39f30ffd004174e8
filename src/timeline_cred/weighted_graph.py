"""
Weighted contribution graph: a builder that validates nodes and edges as they
arrive, and the frozen graph value it produces.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import networkx as nx
from pydantic import BaseModel, ConfigDict

from .address import Address, has_prefix, to_string
from .errors import DanglingEdgeError, DuplicateEdgeError, DuplicateNodeError
from .models import Edge, EdgeType, Node, NodeType, WeightPair

DEFAULT_MINT_WEIGHT = 0.0
DEFAULT_EDGE_WEIGHT = WeightPair(forward=1.0, backward=1.0)


def _longest_match(rules: Sequence, address: Address):
    best = None
    for rule in rules:
        if has_prefix(address, rule.prefix) and (best is None or len(rule.prefix) > len(best.prefix)):
            best = rule
    return best


class Weights(BaseModel):
    """
    Ordered prefix rules for minting weights and edge multipliers.

    The longest matching prefix wins; among equally long prefixes the earlier
    rule wins. Unmatched nodes mint nothing and unmatched edges keep their
    own weights.
    """

    model_config = ConfigDict(frozen=True)

    node_types: Tuple[NodeType, ...] = ()
    edge_types: Tuple[EdgeType, ...] = ()

    def node_type_for(self, address: Address) -> Optional[NodeType]:
        return _longest_match(self.node_types, address)

    def edge_type_for(self, address: Address) -> Optional[EdgeType]:
        return _longest_match(self.edge_types, address)

    def node_weight(self, address: Address) -> float:
        rule = self.node_type_for(address)
        return rule.default_weight if rule else DEFAULT_MINT_WEIGHT

    def edge_multiplier(self, address: Address) -> WeightPair:
        rule = self.edge_type_for(address)
        return rule.default_weight if rule else DEFAULT_EDGE_WEIGHT


class WeightedGraph:
    """Read-only graph plus weights. Create one with ``WeightedGraphBuilder``."""

    def __init__(self, graph: nx.MultiDiGraph, nodes: Dict[Address, Node], edges: Dict[Address, Edge], weights: Weights) -> None:
        self._graph = nx.freeze(graph)
        self._nodes = MappingProxyType(dict(sorted(nodes.items())))
        self._edges = MappingProxyType(dict(sorted(edges.items())))
        self.weights = weights

    @property
    def graph(self) -> nx.MultiDiGraph:
        return self._graph

    def __len__(self) -> int:
        return len(self._nodes)

    def has_node(self, address: Address) -> bool:
        return tuple(address) in self._nodes

    def node(self, address: Address) -> Optional[Node]:
        return self._nodes.get(tuple(address))

    def nodes(self, prefix: Address = ()) -> List[Node]:
        return [n for a, n in self._nodes.items() if has_prefix(a, prefix)]

    def edges(self, prefix: Address = ()) -> List[Edge]:
        return [e for a, e in self._edges.items() if has_prefix(a, prefix)]

    def out_edges(self, address: Address) -> List[Edge]:
        keys = sorted(key for _, _, key in self._graph.out_edges(tuple(address), keys=True))
        return [self._edges[k] for k in keys]

    def in_edges(self, address: Address) -> List[Edge]:
        keys = sorted(key for _, _, key in self._graph.in_edges(tuple(address), keys=True))
        return [self._edges[k] for k in keys]

    def addresses(self) -> Tuple[Address, ...]:
        return tuple(self._nodes)

    def node_weight(self, address: Address) -> float:
        return self.weights.node_weight(tuple(address))

    def edge_weight(self, edge: Edge) -> WeightPair:
        return edge.weights.scaled(self.weights.edge_multiplier(edge.address))

    def timestamps(self) -> List[Optional[int]]:
        return [n.timestamp_ms for n in self._nodes.values()]

    def __repr__(self) -> str:
        return f"WeightedGraph(nodes={len(self._nodes)}, edges={len(self._edges)})"


class WeightedGraphBuilder:
    def __init__(self, weights: Optional[Weights] = None) -> None:
        self.weights = weights or Weights()
        self._graph = nx.MultiDiGraph()
        self._nodes: Dict[Address, Node] = {}
        self._edges: Dict[Address, Edge] = {}
        self._built = False

    def _check_open(self) -> None:
        if self._built:
            raise RuntimeError("builder already produced a graph")

    def add_node(self, node: Node) -> "WeightedGraphBuilder":
        self._check_open()
        if node.address in self._nodes:
            raise DuplicateNodeError(f"node already exists: {to_string(node.address)}")
        self._nodes[node.address] = node
        self._graph.add_node(node.address)
        return self

    def add_edge(self, edge: Edge) -> "WeightedGraphBuilder":
        self._check_open()
        if edge.address in self._edges:
            raise DuplicateEdgeError(f"edge already exists: {to_string(edge.address)}")
        for endpoint in (edge.src, edge.dst):
            if endpoint not in self._nodes:
                raise DanglingEdgeError(
                    f"edge {to_string(edge.address)} refers to missing node {to_string(endpoint)}"
                )
        self._edges[edge.address] = edge
        self._graph.add_edge(edge.src, edge.dst, key=edge.address)
        return self

    def add_nodes(self, nodes: Iterable[Node]) -> "WeightedGraphBuilder":
        for n in nodes:
            self.add_node(n)
        return self

    def add_edges(self, edges: Iterable[Edge]) -> "WeightedGraphBuilder":
        for e in edges:
            self.add_edge(e)
        return self

    def build(self) -> WeightedGraph:
        self._check_open()
        self._built = True
        return WeightedGraph(self._graph, self._nodes, self._edges, self.weights)
