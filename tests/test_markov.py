from __future__ import annotations

import numpy as np
import pytest

from timeline_cred import (
    MarkovSolver,
    NodeType,
    WeightedGraphBuilder,
    Weights,
    build_transition_model,
)
from timeline_cred.models import edge, node


def _ring_with_sink(mint_a: float = 1.0):
    weights = Weights(
        node_types=(
            NodeType(name="a", prefix=("a",), default_weight=mint_a),
            NodeType(name="b", prefix=("b",), default_weight=1.0),
        )
    )
    builder = WeightedGraphBuilder(weights).add_nodes([node("a"), node("b"), node("c"), node("sink")])
    builder.add_edges(
        [
            edge(("e", "ab"), ("a",), ("b",), backward=0.0),
            edge(("e", "bc"), ("b",), ("c",), backward=0.0),
            edge(("e", "ca"), ("c",), ("a",), backward=0.0),
            edge(("e", "cs"), ("c",), ("sink",), forward=2.0, backward=0.0),
        ]
    )
    return builder.build()


def test_converged_scores_sum_to_one():
    model = build_transition_model(_ring_with_sink())
    result = MarkovSolver(alpha=0.2, epsilon=1e-12).solve(model)
    assert result.converged
    assert result.scores.sum() == pytest.approx(1.0, abs=1e-9)
    assert (result.scores >= 0).all()


def test_sink_does_not_leak_mass():
    model = build_transition_model(_ring_with_sink())
    assert model.sinks[model.index_of(("sink",))]
    solver = MarkovSolver(alpha=0.2)
    start = np.array([0.1, 0.2, 0.3, 0.4])
    assert solver.step(model, start).sum() == pytest.approx(1.0)


def test_capped_run_is_reported():
    model = build_transition_model(_ring_with_sink())
    result = MarkovSolver(alpha=0.2, epsilon=1e-15, max_iterations=2).solve(model)
    assert not result.converged
    assert result.iterations == 2
    assert result.delta > 0
    assert result.scores.sum() == pytest.approx(1.0)


def test_alpha_one_returns_minting_distribution():
    model = build_transition_model(_ring_with_sink())
    result = MarkovSolver(alpha=1.0).solve(model)
    np.testing.assert_array_equal(result.scores, model.mint)


@pytest.mark.parametrize("alpha", [0.0, -0.1, 1.5])
def test_alpha_out_of_range(alpha):
    with pytest.raises(ValueError):
        MarkovSolver(alpha=alpha)


def test_more_minting_never_lowers_score():
    scores = []
    for mint in (0.5, 1.0, 2.0, 8.0):
        graph = _ring_with_sink(mint)
        model = build_transition_model(graph)
        result = MarkovSolver(alpha=0.2, epsilon=1e-13).solve(model)
        scores.append(result.scores[model.index_of(("a",))])
    assert scores == sorted(scores)


def test_repeat_solves_are_bit_identical():
    model = build_transition_model(_ring_with_sink())
    first = MarkovSolver().solve(model).scores
    second = MarkovSolver().solve(build_transition_model(_ring_with_sink())).scores
    assert first.tobytes() == second.tobytes()


def test_empty_model():
    model = build_transition_model(WeightedGraphBuilder().build())
    result = MarkovSolver().solve(model)
    assert result.converged and result.scores.size == 0
