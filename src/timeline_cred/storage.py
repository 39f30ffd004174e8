"""
JSON persistence for weighted graphs and timeline cred results.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Optional

from .compat import CompatInfo, from_compat, params_from_json, params_to_json, to_compat
from .config import ensure_directories, settings
from .models import Edge, Interval, Node
from .timeline import CredBreakdown, SolverReport, TimelineCred
from .weighted_graph import WeightedGraph, WeightedGraphBuilder, Weights

GRAPH_COMPAT = CompatInfo(type="timeline-cred/weighted-graph", version="0.1.0")
TIMELINE_COMPAT = CompatInfo(type="timeline-cred/timeline-cred", version="0.1.0")


def weighted_graph_to_json(graph: WeightedGraph) -> List[Any]:
    return to_compat(
        GRAPH_COMPAT,
        {
            "nodes": [n.model_dump(mode="json") for n in graph.nodes()],
            "edges": [e.model_dump(mode="json") for e in graph.edges()],
            "weights": graph.weights.model_dump(mode="json"),
        },
    )


def weighted_graph_from_json(data: Any) -> WeightedGraph:
    payload = from_compat(GRAPH_COMPAT, data)
    builder = WeightedGraphBuilder(Weights.model_validate(payload.get("weights", {})))
    builder.add_nodes(Node.model_validate(n) for n in payload.get("nodes", []))
    builder.add_edges(Edge.model_validate(e) for e in payload.get("edges", []))
    return builder.build()


def timeline_cred_to_json(cred: TimelineCred) -> List[Any]:
    return to_compat(
        TIMELINE_COMPAT,
        {
            "weightedGraph": weighted_graph_to_json(cred.weighted_graph),
            "intervals": [i.model_dump() for i in cred.intervals],
            "cred": [
                {"address": list(a), "scores": list(cred.cred_series(a))} for a in cred.addresses()
            ],
            "params": params_to_json(cred.params),
            "breakdowns": [b.model_dump(mode="json") for b in cred.breakdowns],
            "reports": [r.model_dump() for r in cred.reports],
        },
    )


def timeline_cred_from_json(data: Any) -> TimelineCred:
    payload = from_compat(TIMELINE_COMPAT, data)
    return TimelineCred(
        weighted_graph_from_json(payload["weightedGraph"]),
        [Interval.model_validate(i) for i in payload["intervals"]],
        {tuple(entry["address"]): entry["scores"] for entry in payload["cred"]},
        params_from_json(payload["params"]),
        [CredBreakdown.model_validate(b) for b in payload.get("breakdowns", [])],
        [SolverReport.model_validate(r) for r in payload.get("reports", [])],
    )


def save_timeline_cred(cred: TimelineCred, path: Optional[Path] = None) -> Path:
    path = Path(path or settings.output_path)
    ensure_directories(path)
    path.write_text(json.dumps(timeline_cred_to_json(cred), sort_keys=True), encoding="utf-8")
    return path


def load_timeline_cred(path: Optional[Path] = None) -> TimelineCred:
    path = Path(path or settings.output_path)
    if not path.exists():
        raise FileNotFoundError(path)
    return timeline_cred_from_json(json.loads(path.read_text(encoding="utf-8")))


def load_weighted_graph(path: Path) -> WeightedGraph:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return weighted_graph_from_json(data)
