"""HTTP-level tests for the FastAPI app.

Mock strategy:
  - ``create_app`` is given explicit settings; the lifespan is never run
    (no ``with TestClient(...)``), so no database engine is created.
  - ``app.state.services`` is built by hand and every service gets the
    in-memory repositories from ``helpers.fakes``.
  - ``get_db`` is overridden to yield an ``AsyncMock`` session.
"""

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from otassess_core.enrichment import EnrichmentGateway
from otassess_core.media import LocalMediaStorage

from otassess_server.app import create_app
from otassess_server.config import AISettings, ServerSettings
from otassess_server.dependencies import AppServices, get_db

from helpers.fakes import (
    FakeAppointmentRepository,
    FakeBillingRepository,
    FakeHouseMapRepository,
    FakeIoTDeviceRepository,
    FakeReportRepository,
)

USER = {"X-User-ID": "user1"}
OTHER = {"X-User-ID": "user2"}


@pytest.fixture
def services(store, repos, data, tmp_path):
    svc = AppServices.build(store, EnrichmentGateway(), LocalMediaStorage(tmp_path / "uploads"))

    svc.responses._assessments = repos["assessments"]
    svc.responses._clients = repos["clients"]
    svc.responses._responses = repos["responses"]

    svc.wizard._assessments = repos["assessments"]
    svc.wizard._repo = repos["responses"]
    svc.wizard._prefill._repo = repos["responses"]

    svc.clients._repo = repos["clients"]
    svc.clients._assessments = repos["assessments"]

    svc.assessments._repo = repos["assessments"]
    svc.assessments._clients = repos["clients"]
    svc.assessments._response_rows = repos["responses"]

    svc.billing._repo = FakeBillingRepository(data)
    svc.billing._assessments = repos["assessments"]

    svc.appointments._repo = FakeAppointmentRepository(data)
    svc.appointments._clients = repos["clients"]

    svc.house_maps._repo = FakeHouseMapRepository(data)
    svc.house_maps._assessments = repos["assessments"]
    svc.iot._repo = FakeIoTDeviceRepository(data)
    svc.iot._maps = FakeHouseMapRepository(data)

    svc.reports._repo = FakeReportRepository(data)
    return svc


def make_client(services, **settings):
    app = create_app(ServerSettings(**settings), AISettings())
    app.state.services = services

    async def fake_db():
        yield AsyncMock()

    app.dependency_overrides[get_db] = fake_db
    return TestClient(app)


@pytest.fixture
def http(services):
    return make_client(services)


# =====================================================================
# Identity
# =====================================================================


def test_missing_user_header(http):
    resp = http.get("/api/clients")
    assert resp.status_code == 401


def test_proxy_secret_required_when_configured(services):
    http = make_client(services, trusted_proxy_secret="s3cret")
    assert http.get("/api/clients", headers=USER).status_code == 403
    assert http.get(
        "/api/clients", headers={**USER, "X-Proxy-Secret": "wrong"},
    ).status_code == 403
    assert http.get(
        "/api/clients", headers={**USER, "X-Proxy-Secret": "s3cret"},
    ).status_code == 200


# =====================================================================
# Question banks
# =====================================================================


def test_list_question_banks(http):
    resp = http.get("/api/question-banks")
    assert resp.status_code == 200
    by_id = {b["id"]: b for b in resp.json()}
    assert by_id["mobility_scooter"]["question_count"] == 14
    assert by_id["mobility_scooter"]["section_count"] == 4


def test_get_question_bank(http):
    resp = http.get("/api/question-banks/falls_risk")
    assert resp.status_code == 200
    assert len(resp.json()["sections"]) == 5


def test_unknown_question_bank(http):
    assert http.get("/api/question-banks/underwater").status_code == 404


# =====================================================================
# Clients
# =====================================================================


def test_client_lifecycle(http, data):
    created = http.post("/api/clients", json={"name": "Margaret Hill"}, headers=USER)
    assert created.status_code == 201
    client_id = created.json()["id"]

    assert http.get(f"/api/clients/{client_id}", headers=OTHER).status_code == 404

    archived = http.request(
        "DELETE", f"/api/clients/{client_id}", json={"reason": "Moved"}, headers=USER,
    )
    assert archived.status_code == 200
    assert archived.json()["archived_count"] == 1

    assert http.get(f"/api/clients/{client_id}", headers=USER).status_code == 404

    listed = http.get("/api/clients/archived", headers=USER).json()
    assert [c["id"] for c in listed] == [client_id]
    assert listed[0]["can_permanently_delete"] is False

    blocked = http.delete(f"/api/clients/{client_id}/permanent", headers=USER)
    assert blocked.status_code == 403
    assert "more days" in blocked.json()["detail"]

    data.clients[uuid.UUID(client_id)].can_delete_after = (
        datetime.now(timezone.utc) - timedelta(days=1)
    )
    assert http.delete(f"/api/clients/{client_id}/permanent", headers=USER).status_code == 204
    assert not data.clients


def test_archive_without_body_uses_default_reason(http, data):
    client = data.add_client()
    assert http.delete(f"/api/clients/{client.id}", headers=USER).status_code == 200
    assert client.deletion_reason == "No reason provided"


def test_invalid_client_body(http):
    assert http.post("/api/clients", json={}, headers=USER).status_code == 422


# =====================================================================
# Responses and wizard
# =====================================================================


def test_response_for_foreign_bank_reports_field(http, data):
    assessment = data.add_assessment(data.add_client(), assessment_type="mobility_scooter")
    resp = http.post(
        f"/api/assessments/{assessment.id}/responses",
        json={"question_id": "entrance_3", "section_id": "entrance_exit", "answer": "Yes"},
        headers=USER,
    )
    assert resp.status_code == 400
    assert resp.json()["field"] == "question_id"


def test_wizard_enter_and_required_gate(http, data):
    assessment = data.add_assessment(data.add_client(), assessment_type="mobility_scooter")
    url = f"/api/assessments/{assessment.id}/wizard"

    step = http.get(url, headers=USER)
    assert step.status_code == 200
    body = step.json()
    assert body["kind"] == "step"
    assert body["position"] == {"section_index": 0, "question_index": 0}
    assert body["draft"]["source"] == "blank"
    assert body["has_previous"] is False

    blocked = http.post(
        f"{url}/next", json={"position": body["position"], "answer": ""}, headers=USER,
    )
    assert blocked.status_code == 400
    assert blocked.json()["field"] == "answer"


def test_wizard_position_out_of_range(http, data):
    assessment = data.add_assessment(data.add_client())
    resp = http.get(
        f"/api/assessments/{assessment.id}/wizard",
        params={"section_index": 40},
        headers=USER,
    )
    assert resp.status_code == 400
    assert resp.json()["field"] == "section_index"


# =====================================================================
# Billing
# =====================================================================


def test_quote_totals_over_http(http, data):
    assessment = data.add_assessment(data.add_client())
    resp = http.post(
        "/api/quotes",
        json={
            "assessment_id": str(assessment.id),
            "option_name": "Recommended",
            "items": [{"name": "Grab rail", "quantity": 2, "price": 100}, {"name": "Mat", "price": 50}],
        },
        headers=USER,
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["quote_number"] == "Q000001"
    assert (body["subtotal"], body["tax"], body["total"]) == (250.0, 25.0, 275.0)


# =====================================================================
# Appointments, placements, reports
# =====================================================================


def test_appointment_consent_and_reminders(http):
    start = datetime.now(timezone.utc) + timedelta(hours=6)
    resp = http.post(
        "/api/appointments",
        json={
            "title": "Home visit",
            "appointment_type": "home_visit",
            "start_time": start.isoformat(),
            "end_time": (start + timedelta(hours=1)).isoformat(),
        },
        headers=USER,
    )
    assert resp.status_code == 201
    appointment_id = resp.json()["id"]

    consent = http.post(
        f"/api/appointments/{appointment_id}/consent",
        json={"given_by": "Ada Brown"},
        headers=USER,
    )
    assert consent.json()["status"] == "confirmed"

    run = http.post("/api/appointments/check-reminders", headers=USER)
    assert run.status_code == 200
    assert run.json() == {"reminders_sent": 1, "appointment_ids": [appointment_id]}
    assert http.get(f"/api/appointments/{appointment_id}", headers=OTHER).status_code == 404


def test_appointment_window_rejected(http):
    start = datetime.now(timezone.utc)
    resp = http.post(
        "/api/appointments",
        json={
            "title": "Call",
            "appointment_type": "phone_call",
            "start_time": start.isoformat(),
            "end_time": (start - timedelta(hours=1)).isoformat(),
        },
        headers=USER,
    )
    assert resp.status_code == 400


def test_room_update_and_device_placement(http, data):
    house_map = data.add_map(data.add_assessment(data.add_client()))
    room = data.add_room(house_map)
    device = data.add_device()

    resp = http.put(f"/api/rooms/{room.id}", json={"notes": "Step at door"}, headers=USER)
    assert resp.status_code == 200
    assert resp.json()["notes"] == "Step at door"

    resp = http.post(
        f"/api/house-maps/{house_map.id}/device-placements",
        json={
            "device_id": str(device.id),
            "room_id": str(room.id),
            "position_3d": {"x": 1, "y": 0, "z": 1},
        },
        headers=USER,
    )
    assert resp.status_code == 201
    assert resp.json()["status"] == "proposed"
    listed = http.get(f"/api/house-maps/{house_map.id}/device-placements", headers=OTHER)
    assert listed.status_code == 404


def test_generate_and_fetch_report(http):
    now = datetime.now(timezone.utc)
    resp = http.post(
        "/api/reports/generate",
        json={
            "report_type": "custom",
            "title": "Snapshot",
            "start_date": (now - timedelta(days=30)).isoformat(),
            "end_date": now.isoformat(),
            "columns": ["clients"],
        },
        headers=USER,
    )
    assert resp.status_code == 201
    report = resp.json()
    assert report["data"]["clients"] == 0
    assert http.get(f"/api/reports/{report['id']}", headers=USER).status_code == 200
    assert http.get("/api/reports?report_type=custom", headers=OTHER).json() == []
    assert http.delete(f"/api/reports/{report['id']}", headers=USER).status_code == 204


# =====================================================================
# Admin
# =====================================================================


def test_admin_disabled_without_key(http):
    assert http.post("/api/admin/cleanup/expired").status_code == 403


def test_admin_key_checks(services):
    http = make_client(services, admin_api_key="admin-key")
    assert http.post("/api/admin/cleanup/expired").status_code == 401
    assert http.post(
        "/api/admin/cleanup/expired", headers={"X-Admin-Key": "nope"},
    ).status_code == 403
