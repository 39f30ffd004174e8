from __future__ import annotations

from datetime import datetime, timezone

import pytest

from timeline_cred import EdgeType, NodeType, WeightedGraphBuilder, Weights, WeightPair
from timeline_cred.config import WEEK_MS
from timeline_cred.models import edge, node

START_MS = int(datetime(2017, 1, 1, tzinfo=timezone.utc).timestamp() * 1000)


@pytest.fixture
def weights() -> Weights:
    return Weights(
        node_types=(
            NodeType(name="user", prefix=("github", "user"), default_weight=0.0),
            NodeType(name="pull", prefix=("github", "pull"), default_weight=2.0),
            NodeType(name="issue", prefix=("github", "issue"), default_weight=1.0),
        ),
        edge_types=(
            EdgeType(name="authors", prefix=("authors",), default_weight=WeightPair(forward=0.5, backward=1.0)),
            EdgeType(name="references", prefix=("references",), default_weight=WeightPair(forward=1.0, backward=0.0)),
        ),
    )


@pytest.fixture
def contribution_graph(weights):
    """Two users, two pulls and an issue spread over three weeks."""
    builder = WeightedGraphBuilder(weights)
    builder.add_nodes(
        [
            node("github", "user", "alice"),
            node("github", "user", "bob"),
            node("github", "pull", "1", timestamp_ms=START_MS),
            node("github", "issue", "2", timestamp_ms=START_MS + WEEK_MS + 1),
            node("github", "pull", "3", timestamp_ms=START_MS + 2 * WEEK_MS + 5),
        ]
    )
    builder.add_edges(
        [
            edge(("authors", "1"), ("github", "user", "alice"), ("github", "pull", "1")),
            edge(("authors", "2"), ("github", "user", "bob"), ("github", "issue", "2")),
            edge(("authors", "3"), ("github", "user", "bob"), ("github", "pull", "3")),
            edge(("references", "3", "1"), ("github", "pull", "3"), ("github", "pull", "1")),
        ]
    )
    return builder.build()
