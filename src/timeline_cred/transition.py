"""
Conversion of a weighted graph into a sparse, row-stochastic transition model.

Each edge contributes up to two entries: a forward entry from ``src`` to
``dst`` and a backward entry from ``dst`` to ``src``. A node's entries are
normalized by the total weight leaving it; nodes with nothing leaving them
are sinks whose mass is sent back through the minting distribution.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .address import Address, to_string
from .errors import NumericalAnomalyError
from .intervals import interval_index
from .models import Edge, Interval
from .weighted_graph import WeightedGraph

logger = logging.getLogger(__name__)

OTHER_EDGE_TYPE = "other"


@dataclass(frozen=True)
class TransitionModel:
    addresses: Tuple[Address, ...]
    sources: np.ndarray
    targets: np.ndarray
    probabilities: np.ndarray
    entry_types: np.ndarray
    type_names: Tuple[str, ...]
    sinks: np.ndarray
    mint: np.ndarray

    @property
    def size(self) -> int:
        return len(self.addresses)

    def index_of(self, address: Address) -> int:
        return self.addresses.index(tuple(address))

    def outgoing(self, index: int) -> Dict[int, float]:
        """Full outgoing distribution of one node, sink redirection included."""
        if self.sinks[index]:
            return {j: float(p) for j, p in enumerate(self.mint) if p > 0}
        result: Dict[int, float] = {}
        for j, p in zip(self.targets[self.sources == index], self.probabilities[self.sources == index]):
            result[int(j)] = result.get(int(j), 0.0) + float(p)
        return result

    def row_sums(self) -> np.ndarray:
        sums = np.bincount(self.sources, weights=self.probabilities, minlength=self.size)
        sums[self.sinks] += self.mint.sum()
        return sums


def edge_event_time(graph: WeightedGraph, edge: Edge) -> Optional[int]:
    """The edge's own timestamp, else the later endpoint timestamp, else None."""
    if edge.timestamp_ms is not None:
        return edge.timestamp_ms
    stamps = [graph.node(a).timestamp_ms for a in (edge.src, edge.dst)]
    stamps = [t for t in stamps if t is not None]
    return max(stamps) if stamps else None


def _bucket(intervals: Sequence[Interval], timestamp_ms: Optional[int]) -> Optional[int]:
    if timestamp_ms is None:
        return None
    bucket = interval_index(intervals, timestamp_ms)
    if bucket is None:
        return len(intervals)
    return max(bucket, 0)


def _check_weight(value: float, what: str) -> float:
    if not math.isfinite(value) or value < 0:
        raise NumericalAnomalyError(f"invalid weight {value!r} for {what}")
    return value


def build_transition_model(
    graph: WeightedGraph,
    intervals: Optional[Sequence[Interval]] = None,
    index: Optional[int] = None,
    decay_constant: float = 0.0,
) -> TransitionModel:
    """
    Build the model for the whole graph, or for interval ``index`` of
    ``intervals`` when both are given.

    In the scoped form an edge counts once its event time is in or before the
    interval, weighted by ``exp(-decay_constant * age)`` with age measured in
    elapsed intervals. Nodes mint once their own timestamp has been reached;
    nodes without a timestamp always mint.
    """
    scoped = intervals is not None and index is not None
    addresses = graph.addresses()
    position = {a: i for i, a in enumerate(addresses)}
    type_names = tuple(t.name for t in graph.weights.edge_types) + (OTHER_EDGE_TYPE,)
    type_position = {t.name: i for i, t in enumerate(graph.weights.edge_types)}

    edge_factor: Dict[Address, float] = {}
    for edge in graph.edges():
        factor = 1.0
        if scoped:
            bucket = _bucket(intervals, edge_event_time(graph, edge))
            if bucket is not None:
                if bucket > index:
                    continue
                factor = math.exp(-decay_constant * (index - bucket))
        edge_factor[edge.address] = factor

    sources: List[int] = []
    targets: List[int] = []
    weights: List[float] = []
    entry_types: List[int] = []
    sinks = np.zeros(len(addresses), dtype=bool)

    for u, address in enumerate(addresses):
        row: List[Tuple[int, float, int]] = []
        directions = [(e, e.dst, "forward") for e in graph.out_edges(address)]
        directions += [(e, e.src, "backward") for e in graph.in_edges(address)]
        directions.sort(key=lambda item: (item[0].address, item[2]))
        for edge, neighbor, direction in directions:
            if edge.address not in edge_factor:
                continue
            pair = graph.edge_weight(edge)
            w = _check_weight(getattr(pair, direction) * edge_factor[edge.address], to_string(edge.address))
            if w == 0:
                continue
            rule = graph.weights.edge_type_for(edge.address)
            row.append((position[neighbor], w, type_position[rule.name] if rule else len(type_names) - 1))
        total = sum(w for _, w, _ in row)
        if total == 0:
            sinks[u] = True
            continue
        for v, w, t in row:
            sources.append(u)
            targets.append(v)
            weights.append(w / total)
            entry_types.append(t)

    mint = np.zeros(len(addresses), dtype=np.float64)
    present = np.ones(len(addresses), dtype=bool)
    for u, address in enumerate(addresses):
        if scoped:
            bucket = _bucket(intervals, graph.node(address).timestamp_ms)
            if bucket is not None and bucket > index:
                present[u] = False
                continue
        mint[u] = _check_weight(graph.node_weight(address), to_string(address))
    total_mint = mint.sum()
    if total_mint > 0:
        mint /= total_mint
    elif len(addresses):
        # Uniform over the nodes that exist by this interval, or over all nodes if none do.
        if not present.any():
            present[:] = True
        logger.debug("No minting weight present; falling back to uniform minting over %d nodes", present.sum())
        mint[present] = 1.0 / present.sum()

    return TransitionModel(
        addresses=addresses,
        sources=np.asarray(sources, dtype=np.int64),
        targets=np.asarray(targets, dtype=np.int64),
        probabilities=np.asarray(weights, dtype=np.float64),
        entry_types=np.asarray(entry_types, dtype=np.int64),
        type_names=type_names,
        sinks=sinks,
        mint=mint,
    )
