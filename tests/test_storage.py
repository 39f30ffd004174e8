from __future__ import annotations

import json
import math

import pytest

from timeline_cred import CompatError, compute_timeline_cred
from timeline_cred.compat import CompatInfo, from_compat, params_from_json, params_to_json, to_compat
from timeline_cred.config import TimelineCredParameters
from timeline_cred.storage import (
    load_timeline_cred,
    save_timeline_cred,
    timeline_cred_from_json,
    timeline_cred_to_json,
    weighted_graph_from_json,
    weighted_graph_to_json,
)


def test_timeline_cred_round_trip(tmp_path, contribution_graph):
    cred = compute_timeline_cred(contribution_graph, {"decay_constant": 0.25, "alpha": 0.15})
    path = save_timeline_cred(cred, tmp_path / "out" / "cred.json")
    loaded = load_timeline_cred(path)
    assert loaded.intervals == cred.intervals
    assert loaded.params == cred.params
    assert loaded.breakdowns == cred.breakdowns
    assert loaded.reports == cred.reports
    for address in cred.addresses():
        assert loaded.cred_series(address) == cred.cred_series(address)
    assert loaded.ranking() == cred.ranking()


def test_serialization_is_stable(contribution_graph):
    cred = compute_timeline_cred(contribution_graph)
    once = json.dumps(timeline_cred_to_json(cred), sort_keys=True)
    twice = json.dumps(timeline_cred_to_json(timeline_cred_from_json(json.loads(once))), sort_keys=True)
    assert once == twice


def test_weighted_graph_round_trip(contribution_graph):
    restored = weighted_graph_from_json(json.loads(json.dumps(weighted_graph_to_json(contribution_graph))))
    assert restored.nodes() == contribution_graph.nodes()
    assert restored.edges() == contribution_graph.edges()
    assert restored.weights == contribution_graph.weights


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_timeline_cred(tmp_path / "absent.json")


def test_wrong_document_type(contribution_graph):
    with pytest.raises(CompatError):
        timeline_cred_from_json(weighted_graph_to_json(contribution_graph))


def test_unknown_version_rejected():
    info = CompatInfo(type="thing", version="2.0.0")
    with pytest.raises(CompatError):
        from_compat(info, [{"type": "thing", "version": "9.9.9"}, {}])
    with pytest.raises(CompatError):
        from_compat(info, {"not": "an envelope"})
    assert from_compat(info, to_compat(info, {"x": 1})) == {"x": 1}


def test_params_round_trip():
    params = TimelineCredParameters(alpha=0.3, decay_constant=0.1, total_mode="last")
    assert params_from_json(json.loads(json.dumps(params_to_json(params)))) == params


def test_params_upgrade_from_first_version():
    stored = [{"type": "timeline-cred/params", "version": "0.1.0"}, {"alpha": 0.05, "intervalDecay": 0.5}]
    params = params_from_json(stored)
    assert params.alpha == 0.05
    assert params.decay_constant == pytest.approx(math.log(2))
    assert math.exp(-params.decay_constant) == pytest.approx(0.5)
    assert params.max_iterations == 1000
    assert params.mode == "scoped"


def test_params_upgrade_keeps_stored_fields():
    stored = [
        {"type": "timeline-cred/params", "version": "0.2.0"},
        {"alpha": 0.1, "decayConstant": 0.0, "intervalLengthMs": 1000},
    ]
    params = params_from_json(stored)
    assert params.interval_length_ms == 1000
    assert params.epsilon == 1e-7


def test_invalid_interval_decay_rejected():
    stored = [{"type": "timeline-cred/params", "version": "0.1.0"}, {"alpha": 0.05, "intervalDecay": 1.0}]
    with pytest.raises(CompatError):
        params_from_json(stored)
