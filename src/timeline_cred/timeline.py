"""
Timeline cred: one solve per interval, assembled into per-node score series.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
from pydantic import BaseModel, ConfigDict

from .address import Address, has_prefix, to_string
from .config import TimelineCredParameters, resolve_parameters
from .errors import UnknownNodeError
from .intervals import partition_intervals, validate_intervals
from .markov import MarkovSolver, SolverResult
from .models import Interval
from .transition import OTHER_EDGE_TYPE, TransitionModel, build_transition_model
from .weighted_graph import WeightedGraph

logger = logging.getLogger(__name__)

MINT_COMPONENT = "mint"


class CredBreakdown(BaseModel):
    """Share of each interval's total cred that arrived through one channel."""

    model_config = ConfigDict(frozen=True)

    name: str
    totals: Tuple[float, ...]


class SolverReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    interval: int
    converged: bool
    iterations: int
    delta: float


class TimelineCred:
    def __init__(
        self,
        weighted_graph: WeightedGraph,
        intervals: Sequence[Interval],
        address_to_cred: Mapping[Address, Sequence[float]],
        params: TimelineCredParameters,
        breakdowns: Sequence[CredBreakdown] = (),
        reports: Sequence[SolverReport] = (),
    ) -> None:
        self._weighted_graph = weighted_graph
        self._intervals: Tuple[Interval, ...] = tuple(validate_intervals(intervals))
        self._params = params
        self._breakdowns: Tuple[CredBreakdown, ...] = tuple(breakdowns)
        self._reports: Tuple[SolverReport, ...] = tuple(reports)

        series: Dict[Address, Tuple[float, ...]] = {}
        for address, scores in address_to_cred.items():
            address = tuple(address)
            if not weighted_graph.has_node(address):
                raise UnknownNodeError(f"cred given for unknown node {to_string(address)}")
            if len(scores) != len(self.intervals):
                raise ValueError(
                    f"{to_string(address)} has {len(scores)} scores for {len(self.intervals)} intervals"
                )
            series[address] = tuple(float(s) for s in scores)
        missing = [a for a in weighted_graph.addresses() if a not in series]
        if missing:
            raise ValueError(f"no cred given for {len(missing)} node(s), e.g. {to_string(missing[0])}")
        self._series = MappingProxyType(dict(sorted(series.items())))

    @property
    def weighted_graph(self) -> WeightedGraph:
        return self._weighted_graph

    @property
    def intervals(self) -> Tuple[Interval, ...]:
        return self._intervals

    @property
    def params(self) -> TimelineCredParameters:
        return self._params

    @property
    def breakdowns(self) -> Tuple[CredBreakdown, ...]:
        return self._breakdowns

    @property
    def reports(self) -> Tuple[SolverReport, ...]:
        return self._reports

    @property
    def converged(self) -> bool:
        return all(r.converged for r in self.reports)

    def addresses(self) -> Tuple[Address, ...]:
        return tuple(self._series)

    def cred_series(self, address: Address) -> Tuple[float, ...]:
        try:
            return self._series[tuple(address)]
        except KeyError:
            raise UnknownNodeError(f"no such node: {to_string(address)}") from None

    def total_cred(self, address: Address) -> float:
        series = self.cred_series(address)
        if self.params.total_mode == "last":
            return series[-1] if series else 0.0
        return float(sum(series))

    def ranking(self, prefix: Address = (), limit: Optional[int] = None) -> List[Tuple[Address, float]]:
        """Nodes under ``prefix`` by total cred, highest first, ties by address."""
        ranked = sorted(
            ((a, self.total_cred(a)) for a in self._series if has_prefix(a, prefix)),
            key=lambda item: (-item[1], item[0]),
        )
        return ranked if limit is None else ranked[:limit]

    def interval_totals(self) -> Tuple[float, ...]:
        return tuple(
            float(sum(series[i] for series in self._series.values())) for i in range(len(self.intervals))
        )

    def __repr__(self) -> str:
        return f"TimelineCred(nodes={len(self._series)}, intervals={len(self.intervals)})"


@dataclass(frozen=True)
class _IntervalOutcome:
    scores: np.ndarray
    components: np.ndarray
    result: SolverResult


def _components(model: TransitionModel, result: SolverResult, alpha: float) -> np.ndarray:
    by_type = np.bincount(
        model.entry_types,
        weights=result.scores[model.sources] * model.probabilities,
        minlength=len(model.type_names),
    )
    sink_mass = result.scores[model.sinks].sum()
    return np.concatenate(([alpha + (1 - alpha) * sink_mass], (1 - alpha) * by_type))


def _solve(
    graph: WeightedGraph,
    params: TimelineCredParameters,
    intervals: Optional[Sequence[Interval]] = None,
    index: Optional[int] = None,
) -> _IntervalOutcome:
    model = build_transition_model(graph, intervals, index, params.decay_constant)
    solver = MarkovSolver(params.alpha, params.epsilon, params.max_iterations)
    result = solver.solve(model)
    logger.debug(
        "Solved interval %s: %d iterations, delta=%.3g, converged=%s",
        index,
        result.iterations,
        result.delta,
        result.converged,
    )
    return _IntervalOutcome(result.scores, _components(model, result, params.alpha), result)


def compute_terminal_cred(
    graph: WeightedGraph,
    params: Union[TimelineCredParameters, Mapping[str, Any], None] = None,
) -> Tuple[Dict[Address, float], SolverResult]:
    """Cred for the whole graph at once, ignoring time."""
    params = resolve_parameters(params)
    outcome = _solve(graph, params)
    scores = {a: float(s) for a, s in zip(graph.addresses(), outcome.scores)}
    return scores, outcome.result


def compute_timeline_cred(
    graph: WeightedGraph,
    params: Union[TimelineCredParameters, Mapping[str, Any], None] = None,
    intervals: Optional[Sequence[Interval]] = None,
    max_workers: Optional[int] = None,
) -> TimelineCred:
    """
    Solve every interval in order and assemble the per-node series.

    Intervals are derived from node timestamps unless supplied. With
    ``mode="unscoped"`` a single solve over the whole graph covers one
    interval spanning the full range.
    """
    params = resolve_parameters(params)
    if intervals is None:
        intervals = partition_intervals(graph.timestamps(), params.interval_length_ms)
    else:
        intervals = validate_intervals(intervals)
    if params.mode == "unscoped" and intervals:
        intervals = [
            Interval(start_time_ms=intervals[0].start_time_ms, end_time_ms=intervals[-1].end_time_ms)
        ]
    logger.info(
        "Computing %s cred for %d nodes over %d intervals", params.mode, len(graph), len(intervals)
    )

    def solve_interval(index: int) -> _IntervalOutcome:
        if params.mode == "unscoped":
            return _solve(graph, params)
        return _solve(graph, params, intervals, index)

    if max_workers and max_workers > 1 and len(intervals) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            outcomes = list(pool.map(solve_interval, range(len(intervals))))
    else:
        outcomes = [solve_interval(i) for i in range(len(intervals))]

    addresses = graph.addresses()
    address_to_cred = {
        a: [float(o.scores[i]) for o in outcomes] for i, a in enumerate(addresses)
    }
    type_names = (MINT_COMPONENT,) + tuple(t.name for t in graph.weights.edge_types) + (OTHER_EDGE_TYPE,)
    breakdowns = [
        CredBreakdown(name=name, totals=tuple(float(o.components[c]) for o in outcomes))
        for c, name in enumerate(type_names)
    ]
    reports = [
        SolverReport(
            interval=i,
            converged=o.result.converged,
            iterations=o.result.iterations,
            delta=o.result.delta,
        )
        for i, o in enumerate(outcomes)
    ]
    unconverged = [r.interval for r in reports if not r.converged]
    if unconverged:
        logger.warning("%d interval(s) did not converge: %s", len(unconverged), unconverged)
    return TimelineCred(graph, intervals, address_to_cred, params, breakdowns, reports)
