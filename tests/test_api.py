from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from timeline_cred import compute_timeline_cred
from timeline_cred.api import app, get_timeline_cred


@pytest.fixture
def client(contribution_graph):
    cred = compute_timeline_cred(contribution_graph)
    app.dependency_overrides[get_timeline_cred] = lambda: cred
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_intervals(client):
    response = client.get("/intervals")
    assert response.status_code == 200
    assert len(response.json()) == 3


def test_ranking_with_prefix(client):
    response = client.get("/ranking", params={"prefix": "github/pull", "limit": 1})
    assert response.status_code == 200
    body = response.json()
    assert len(body) == 1
    assert body[0]["address"].startswith("github/pull/")


def test_node_cred(client):
    response = client.get("/nodes/cred", params={"address": "github/user/bob"})
    assert response.status_code == 200
    body = response.json()
    assert len(body["series"]) == 3
    assert body["total"] == pytest.approx(sum(body["series"]))


def test_unknown_node_is_404(client):
    assert client.get("/nodes/cred", params={"address": "nobody"}).status_code == 404


def test_breakdowns(client):
    names = [b["name"] for b in client.get("/breakdowns").json()]
    assert names[0] == "mint"
