from __future__ import annotations

import base64
import json

import pytest

from src.access_control.container import assemble
from src.access_control.main import create_app
from tests.fakes import InMemoryAccessLogs, InMemoryAttendance, InMemoryProfiles


def b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode()


@pytest.fixture
def container():
    return assemble(
        profiles_repo=InMemoryProfiles(),
        attendance_repo=InMemoryAttendance(),
        access_logs_repo=InMemoryAccessLogs(),
        keepalive_seconds=0.05,
    )


@pytest.fixture
def client(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container)
    return app.test_client()


def test_health(client):
    res = client.get("/api/health")
    assert res.status_code == 200
    assert res.get_json()["status"] == "ok"


def test_clock_in_then_out(client):
    res = client.post("/api/attendance/clock", json={"lagId": "E001", "name": "Ada", "action": "IN"})
    body = res.get_json()
    assert res.status_code == 200
    assert body["success"] is True
    assert body["message"] == "Clocked in successfully"
    assert body["attendance"]["status"] == "ACTIVE"
    assert len(body["attendance"]["sessions"]) == 1

    res = client.post("/api/attendance/clock", json={"lagId": "E001", "action": "OUT"})
    body = res.get_json()
    assert res.status_code == 200
    assert body["attendance"]["status"] == "COMPLETED"
    assert body["attendance"]["sessions"][0]["durationFormatted"] == "0h 0m"


@pytest.mark.parametrize(
    "payloads, error",
    [
        ([{"lagId": "E001", "action": "OUT"}], "Please clock in first"),
        ([{"lagId": "E001", "action": "IN"}, {"lagId": "E001", "action": "IN"}], "Already clocked in"),
        (
            [{"lagId": "E001", "action": "IN"}, {"lagId": "E001", "action": "OUT"}, {"lagId": "E001", "action": "OUT"}],
            "Already clocked out",
        ),
    ],
)
def test_state_conflicts_return_400(client, payloads, error):
    for payload in payloads[:-1]:
        assert client.post("/api/attendance/clock", json=payload).status_code == 200

    res = client.post("/api/attendance/clock", json=payloads[-1])

    assert res.status_code == 400
    assert res.get_json() == {"success": False, "error": error}


def test_clock_requires_identity_and_action(client):
    res = client.post("/api/attendance/clock", json={"name": "Ada"})
    assert res.status_code == 400
    assert res.get_json()["success"] is False


def test_clock_storage_failure_returns_500(client, container, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("db down")

    monkeypatch.setattr(container.attendance_repo, "apply_transition", boom)

    res = client.post("/api/attendance/clock", json={"lagId": "E001", "action": "IN"})

    assert res.status_code == 500
    assert res.get_json()["success"] is False


def test_clock_publishes_to_stream_subscribers(client, container):
    subscription = container.broadcaster.subscribe()

    client.post("/api/attendance/clock", json={"lagId": "E001", "name": "Ada", "action": "IN"})

    assert json.loads(subscription.next_event(0.1))["type"] == "connected"
    event = json.loads(subscription.next_event(0.1))
    assert event["type"] == "attendance_update"
    assert event["update"]["lagId"] == "E001"
    subscription.close()


def test_stream_starts_with_connected_event(client):
    res = client.get("/api/attendance/stream", buffered=False)

    assert res.mimetype == "text/event-stream"
    first = next(iter(res.response))
    if isinstance(first, bytes):
        first = first.decode()
    assert json.loads(first[len("data: "):])["type"] == "connected"
    res.close()


def test_today_and_report(client):
    client.post("/api/attendance/clock", json={"lagId": "E001", "name": "Ada", "action": "IN"})
    client.post("/api/attendance/clock", json={"lagId": "E002", "name": "Bob", "action": "IN"})
    client.post("/api/attendance/clock", json={"lagId": "E002", "action": "OUT"})

    today = client.get("/api/attendance/today").get_json()["data"]
    assert today["totalPresent"] == 2
    assert today["clockedIn"] == 1
    assert today["clockedOut"] == 1

    records = client.get("/api/attendance?lagId=E002").get_json()
    assert records["total"] == 1
    assert records["records"][0]["status"] == "COMPLETED"

    month, year = today["date"][5:7], today["date"][:4]
    report = client.get(f"/api/attendance/report?month={month}&year={year}").get_json()["report"]
    assert report["totalDays"] == 2
    assert report["incompleteDays"] == 1


def test_report_requires_month_and_year(client):
    res = client.get("/api/attendance/report?month=2")
    assert res.status_code == 400
    assert res.get_json()["error"] == "Month and year are required"


def test_records_reject_bad_dates(client):
    res = client.get("/api/attendance?startDate=02/01/2026")
    assert res.status_code == 400


def test_register_profile_and_duplicate_external_id(client):
    payload = {"name": "Ada", "lagId": "E001", "faceTemplate": b64(bytes(range(64)))}

    res = client.post("/api/profiles", json=payload)
    assert res.status_code == 201
    profile_id = res.get_json()["profileId"]

    other = {"name": "Bob", "lagId": "E001", "faceTemplate": b64(bytes(range(100, 164)))}
    res = client.post("/api/profiles", json=other)
    assert res.status_code == 409
    assert res.get_json()["duplicateType"] == "LAG_ID"

    fetched = client.get(f"/api/profiles/{profile_id}").get_json()["data"]
    assert fetched["lagId"] == "E001"
    assert base64.b64decode(fetched["faceTemplate"]) == bytes(range(64))


def test_register_profile_with_duplicate_face(client):
    template = {"type": "Buffer", "data": list(range(64))}
    client.post("/api/profiles", json={"name": "Ada", "lagId": "E001", "faceTemplate": template})

    res = client.post("/api/profiles", json={"name": "Eve", "lagId": "E002", "faceTemplate": template})

    body = res.get_json()
    assert res.status_code == 409
    assert body["duplicateType"] == "FACE_TEMPLATE"
    assert body["existingProfile"]["lagId"] == "E001"
    assert body["similarity"] == 100.0


def test_register_fails_closed_when_scan_breaks(client, container, monkeypatch):
    def boom():
        raise RuntimeError("db down")

    monkeypatch.setattr(container.profiles_repo, "scan_templates", boom)

    res = client.post("/api/profiles", json={"name": "Ada", "lagId": "E001", "faceTemplate": b64(b"\x01" * 8)})

    assert res.status_code == 503
    assert container.profiles_repo.count() == 0


def test_register_profile_missing_fields(client):
    res = client.post("/api/profiles", json={"name": "Ada"})
    assert res.status_code == 400


def test_profile_listing_and_deletion(client):
    for i, name in enumerate(["Cleo", "Ada"]):
        client.post("/api/profiles", json={"name": name, "lagId": f"E00{i}", "faceTemplate": b64(bytes([i]) * 32)})

    listing = client.get("/api/profiles").get_json()
    assert [p["name"] for p in listing["profiles"]] == ["Ada", "Cleo"]
    assert client.get("/api/profiles/stats/count").get_json()["data"] == 2

    paged = client.get("/api/profiles/paginated?page=2&limit=1").get_json()
    assert paged["totalPages"] == 2
    assert [p["name"] for p in paged["profiles"]] == ["Cleo"]

    assert client.delete("/api/profiles/lagid/E000").status_code == 200
    assert client.get("/api/profiles/lagid/E000").status_code == 404
    assert client.delete("/api/profiles/999").status_code == 404


def test_access_logs_endpoints(client):
    res = client.post("/api/access/logs", json={"lagId": "E001", "name": "Ada", "accessGranted": False})
    assert res.status_code == 201
    client.post("/api/access/logs", json={"lagId": "E001", "name": "Ada", "accessGranted": True})

    logs = client.get("/api/access/logs?accessGranted=false").get_json()
    assert logs["total"] == 1
    assert logs["logs"][0]["accessType"] == "CARD"

    stats = client.get("/api/access/stats").get_json()["data"]
    assert stats["totalAttempts"] == 2
    assert stats["successRate"] == 50.0
    assert stats["topDeniedUsers"] == [{"lagId": "E001", "name": "Ada", "deniedCount": 1}]
