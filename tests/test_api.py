"""HTTP tests for the ledger API against an in-memory SQLite database."""

import pytest
from fastapi.testclient import TestClient

from ledger.main import app
from ledger.models import Base, engine

HEADERS = {"X-API-Key": "test-key-user1"}
OTHER_USER = {"X-API-Key": "test-key-user2"}


@pytest.fixture
def client():
    Base.metadata.drop_all(bind=engine)
    with TestClient(app) as c:
        yield c


def _payload(**overrides):
    payload = {
        "placedAt": "2024-03-09",
        "fixture": "Arsenal v Chelsea",
        "selection": "Saka 1+ SOT",
        "bookmaker": "bet365",
        "stakeType": "NORMAL",
        "stake": "£10",
        "odds": "6/4",
        "result": "OPEN",
    }
    payload.update(overrides)
    return payload


def _create(client, **overrides):
    resp = client.post("/api/bets", json=_payload(**overrides), headers=HEADERS)
    assert resp.status_code == 201, resp.text
    return resp.json()


# ---------------------------------------------------------------------------
# Auth / public
# ---------------------------------------------------------------------------

def test_root_is_public(client):
    assert client.get("/").json()["status"] == "operational"


def test_health(client):
    assert client.get("/health").json()["database"] == "connected"


def test_missing_api_key(client):
    assert client.get("/api/bets").status_code == 401


def test_invalid_api_key(client):
    assert client.get("/api/bets", headers={"X-API-Key": "nope"}).status_code == 401


def test_reference_data(client):
    assert "Bet365" in client.get("/api/bookmakers", headers=HEADERS).json()["bookmakers"]
    assert "Player Prop" in client.get("/api/bet-types", headers=HEADERS).json()["bet_types"]
    markets = client.get("/api/player-prop-markets", headers=HEADERS).json()["player_prop_markets"]
    assert "SOT Over" in markets


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

def test_create_normalizes_and_derives(client):
    bet = _create(client)
    assert bet["bookmaker"] == "Bet365"
    assert bet["betType"] == "Player Prop"
    assert bet["playerPropMarket"] == "SOT Over"
    assert bet["odds"] == pytest.approx(2.5)
    assert bet["potentialReturn"] == pytest.approx(25.0)
    assert bet["profit"] is None
    assert bet["placedAt"] == "2024-03-09"


def test_create_ignores_client_derived_values(client):
    bet = _create(client, potentialReturn=1000, profit=1000, result="won")
    assert bet["potentialReturn"] == pytest.approx(25.0)
    assert bet["profit"] == pytest.approx(15.0)


def test_create_rejects_with_every_field_error(client):
    resp = client.post("/api/bets", json=_payload(bookmaker="Coral", odds="0.5"), headers=HEADERS)
    assert resp.status_code == 422
    detail = resp.json()["detail"]
    assert detail["message"] == "Bet rejected"
    assert [e["field"] for e in detail["errors"]] == ["bookmaker", "odds"]
    assert client.get("/api/bets", headers=HEADERS).json()["total"] == 0


# ---------------------------------------------------------------------------
# Read / update / delete
# ---------------------------------------------------------------------------

def test_get_single_bet(client):
    bet = _create(client)
    resp = client.get(f"/api/bets/{bet['id']}", headers=HEADERS)
    assert resp.status_code == 200
    assert resp.json()["selection"] == "Saka 1+ SOT"


def test_get_unknown_bet(client):
    assert client.get("/api/bets/999", headers=HEADERS).status_code == 404


def test_update_recomputes_derived_values(client):
    bet = _create(client)
    resp = client.put(
        f"/api/bets/{bet['id']}",
        json={"stake": 20, "result": "WON", "potentialReturn": 1},
        headers=HEADERS,
    )
    assert resp.status_code == 200
    updated = resp.json()
    assert updated["potentialReturn"] == pytest.approx(50.0)
    assert updated["profit"] == pytest.approx(30.0)
    assert updated["fixture"] == "Arsenal v Chelsea"


def test_update_rejects_bad_change(client):
    bet = _create(client)
    resp = client.put(f"/api/bets/{bet['id']}", json={"odds": "abc"}, headers=HEADERS)
    assert resp.status_code == 422
    assert resp.json()["detail"]["errors"][0]["field"] == "odds"
    assert client.get(f"/api/bets/{bet['id']}", headers=HEADERS).json()["odds"] == pytest.approx(2.5)


def test_delete_bet(client):
    bet = _create(client)
    assert client.delete(f"/api/bets/{bet['id']}", headers=HEADERS).status_code == 204
    assert client.get(f"/api/bets/{bet['id']}", headers=HEADERS).status_code == 404


def test_other_owner_cannot_see_bet(client):
    bet = _create(client)
    assert client.get(f"/api/bets/{bet['id']}", headers=OTHER_USER).status_code == 404
    assert client.delete(f"/api/bets/{bet['id']}", headers=OTHER_USER).status_code == 404
    assert client.get("/api/bets", headers=OTHER_USER).json()["total"] == 0


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------

def test_list_newest_first_with_pages(client):
    _create(client, placedAt="2024-03-01")
    _create(client, placedAt="2024-03-03")
    _create(client, placedAt="2024-03-02")

    first = client.get("/api/bets", params={"page_size": 2}, headers=HEADERS).json()
    assert first["total"] == 3
    assert first["pages"] == 2
    assert [b["placedAt"] for b in first["bets"]] == ["2024-03-03", "2024-03-02"]

    second = client.get("/api/bets", params={"page_size": 2, "page": 2}, headers=HEADERS).json()
    assert len(second["bets"]) == 1


def test_list_filters(client):
    _create(client)
    _create(client, selection="bb", bookmaker="skybet", fixture="Spurs v Leeds")

    by_search = client.get("/api/bets", params={"search": "spurs"}, headers=HEADERS).json()
    assert by_search["total"] == 1
    assert by_search["bets"][0]["betType"] == "Bet Builder"

    by_book = client.get("/api/bets", params={"bookmaker": "Bet365"}, headers=HEADERS).json()
    assert by_book["total"] == 1


# ---------------------------------------------------------------------------
# Performance
# ---------------------------------------------------------------------------

def test_summary_and_history(client):
    _create(client, result="WON")
    _create(client, result="LOST", placedAt="2024-03-10")
    _create(client, result="OPEN")

    summary = client.get("/api/performance/summary", headers=HEADERS).json()
    assert summary["total_bets"] == 3
    assert summary["overall"]["total_profit"] == pytest.approx(5.0)
    assert summary["overall"]["undetermined"] == 1

    history = client.get("/api/performance/history", headers=HEADERS).json()
    assert [p["cumulative_profit"] for p in history["data_points"]] == [15.0, 5.0]


def test_summary_without_bets(client):
    assert client.get("/api/performance/summary", headers=HEADERS).json()["total_bets"] == 0


def test_rejection_schema_is_documented(client):
    paths = client.get("/openapi.json").json()["paths"]
    for method, path in (("post", "/api/bets"), ("put", "/api/bets/{bet_id}")):
        schema = paths[path][method]["responses"]["422"]["content"]["application/json"]["schema"]
        assert schema["$ref"].endswith("/RejectedBetResponse")
