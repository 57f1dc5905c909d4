import pytest

from ranges.config import Settings


@pytest.fixture
def client(tmp_path):
    pytest.importorskip("fastapi")
    pytest.importorskip("httpx")

    from fastapi.testclient import TestClient
    from app import create_app

    app = create_app(Settings(db_path=str(tmp_path / "ranges.db")))
    # Context manager runs the lifespan: init db, seed, apply stored strategy.
    with TestClient(app) as c:
        yield c


def test_startup_applies_default_strategy(client):
    r = client.get("/strategy")
    assert r.status_code == 200
    data = r.json()
    assert data["strategy"] == "Standard"
    assert data["modifiers"][0] == "+1 for 2 increments"

    r = client.get("/entities/pc-archer")
    assert r.status_code == 200
    assert len(r.json()["ranges"]["bands"]) == 99


def test_switch_strategy_and_lookup(client):
    r = client.put("/strategy", json={"strategy": "Simplified"})
    assert r.status_code == 200
    body = r.json()
    assert body["strategy"] == "Simplified"
    assert body["ok"] is True
    assert {e["entity_id"] for e in body["entities"]} == {"npc-guard", "pc-archer", "pc-scout"}

    r = client.get("/penalty", params={"distance": 501})
    assert r.json() == {"distance": 501.0, "penalty": -15, "label": "Extreme range (500+ yds)"}

    r = client.get("/ranges")
    assert r.json()["bands"][-1]["bound"] == {"kind": "unbounded"}

    r = client.get("/entities/npc-stranger")
    assert r.json()["ranges"] is None


def test_unknown_strategy_rejected(client):
    r = client.put("/strategy", json={"strategy": "UnknownX"})
    assert r.status_code == 400
    assert client.get("/strategy").json()["strategy"] == "Standard"


def test_penalty_errors(client):
    assert client.get("/penalty", params={"distance": -1}).status_code == 422
    assert client.get("/penalty", params={"distance": 5000}).status_code == 404


def test_measure_pushes_range_modifier(client):
    client.put("/strategy", json={"strategy": "Simplified"})
    r = client.post("/measure", json={"segments": [10, 15]})
    assert r.status_code == 200
    body = r.json()
    assert body["labels"] == ["10 yd (-3)", "15 yd [25 yd] (-7)"]
    assert body["added"] is True
    assert body["bucket"]["active"] == ["-7 for range"]

    r = client.post("/measure", json={"segments": [300], "dragged": True})
    assert r.json()["added"] is False
    assert client.get("/modifiers").json()["active"] == ["-7 for range"]

    assert client.delete("/modifiers").json()["active"] == []


def test_measure_validates_segments(client):
    assert client.post("/measure", json={"segments": []}).status_code == 400
    assert client.post("/measure", json={"segments": ["far"]}).status_code == 400


def test_unknown_entity(client):
    assert client.get("/entities/nobody").status_code == 404
    assert len(client.get("/entities").json()["entities"]) == 4
