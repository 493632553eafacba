from fastapi.testclient import TestClient

from mapchat.api import app

client = TestClient(app)


def _new_session() -> str:
    resp = client.post("/api/sessions")
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["transcript"][0]["sender"] == "system"
    return payload["session_id"]


def test_health():
    assert client.get("/api/health").json() == {"status": "ok"}


def test_properties_endpoint():
    resp = client.get("/api/properties")
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["total"] == 12
    assert len(payload["items"]) == 12

    flex = client.get("/api/properties", params={"type": "flex", "limit": 2}).json()
    assert len(flex["items"]) == 2
    assert all(item["type"] == "flex" for item in flex["items"])


def test_amenities_endpoint():
    payload = client.get("/api/amenities", params={"type": "ups"}).json()
    assert payload["total"] == 4
    assert {item["type"] for item in payload["items"]} == {"ups"}
    assert client.get("/api/amenities", params={"type": "dhl"}).status_code == 422


def test_turn_roundtrip():
    session_id = _new_session()
    resp = client.post(f"/api/sessions/{session_id}/turns", json={"text": "within 2 miles of fedex"})
    assert resp.status_code == 200
    result = resp.json()
    assert result["intent"] == "amenity_filter"
    assert result["messages"][0]["sender"] == "user"
    assert result["display"]["total"] == 12
    assert {a["type"] for a in result["display"]["amenities"]} == {"fedex"}
    assert result["display"]["amenity_filter"][0]["operator"] == "within"

    transcript = client.get(f"/api/sessions/{session_id}").json()["transcript"]
    assert len(transcript) == 1 + len(result["messages"])


def test_select_then_proximity():
    session_id = _new_session()
    selected = client.post(f"/api/sessions/{session_id}/select", json={"property_id": "5"}).json()
    assert selected["selected_property"]["id"] == "5"
    result = client.post(f"/api/sessions/{session_id}/turns", json={"text": "fedex close by"}).json()
    assert result["intent"] == "proximity_lookup"
    assert [p["id"] for p in result["display"]["properties"]] == ["5"]
    assert result["display"]["amenity_filter"] == "fedex"


def test_errors():
    assert client.post("/api/sessions/nope/turns", json={"text": "hi"}).status_code == 404
    session_id = _new_session()
    resp = client.post(f"/api/sessions/{session_id}/select", json={"property_id": "999"})
    assert resp.status_code == 404
    assert client.delete(f"/api/sessions/{session_id}").json() == {"status": "ended"}
    assert client.post(f"/api/sessions/{session_id}/turns", json={"text": "reset"}).status_code == 404
