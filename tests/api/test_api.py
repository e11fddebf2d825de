from __future__ import annotations

from datetime import date

import pytest

from src.presence_ledger.presence_ledger.main import create_app


@pytest.fixture
def app(tmp_path):
    return create_app(
        {
            "DATA_DIR": tmp_path,
            "LOG_FILE": None,
            "LOG_LEVEL": "WARNING",
            "SECRET_KEY": "test-secret",
            "TESTING": True,
            "STORAGE_BACKEND": "json",
            "ADMIN_DEFAULT_PASSWORD": "admin123",
        }
    )


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin(client):
    resp = client.post("/api/admin/login", json={"password": "admin123"})
    assert resp.status_code == 200
    return client


def _add(client, identity_id="10000001", name="Ada Lovelace"):
    return client.post("/api/identities", json={"identity_id": identity_id, "display_name": name, "role": "staff"})


def test_admin_endpoints_need_login(client):
    assert client.get("/api/identities").status_code == 401
    assert client.post("/api/admin/login", json={"password": "nope"}).status_code == 401


def test_identity_crud(admin):
    resp = _add(admin)
    assert resp.status_code == 201
    assert resp.get_json()["data"]["role"] == "staff"

    resp = admin.patch("/api/identities/10000001", json={"identity_id": "ignored", "active": False})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["active"] is False

    listed = admin.get("/api/identities").get_json()["data"]
    assert [i["identity_id"] for i in listed] == ["10000001"]

    assert admin.delete("/api/identities/10000001").status_code == 200
    assert admin.delete("/api/identities/10000001").status_code == 404
    assert _add(admin, identity_id="123").status_code == 400


def test_kiosk_event_flow(admin):
    _add(admin)
    admin.post("/api/admin/logout")

    never = admin.post("/api/events", json={"identity_id": "10000001", "kind": "checkout"})
    assert never.status_code == 409
    assert never.get_json()["reason"] == "no_open_session"

    resp = admin.post("/api/events", json={"identity_id": "10000001", "kind": "checkin"})
    assert resp.status_code == 201
    assert resp.get_json()["success"] is True

    dup = admin.post("/api/events", json={"identity_id": "10000001", "kind": "checkin"})
    assert dup.status_code == 409
    assert dup.get_json()["reason"] == "duplicate"

    stranger = admin.post("/api/events", json={"identity_id": "19999999", "kind": "checkin"})
    assert stranger.status_code == 403

    status = admin.get("/api/status/10000001").get_json()["data"]
    assert status["status"] == "checked_in"
    present = admin.get("/api/present").get_json()["data"]
    assert present[0]["identity"]["identity_id"] == "10000001"


def test_summary_preview_and_close(admin):
    _add(admin)
    admin.post("/api/events", json={"identity_id": "10000001", "kind": "checkin"})
    today = date.today().isoformat()

    preview = admin.get(f"/api/summary/{today}?policy=hybrid").get_json()["data"]
    row = preview["summaries"][0]
    assert row["identity_id"] == "10000001"
    assert row["sessions"][0]["closed"] is False

    events = admin.get("/api/events").get_json()["data"]
    assert len(events) == 1

    closed = admin.post(f"/api/summary/{today}/close", json={"policy": "hybrid"})
    assert closed.status_code == 200
    assert closed.get_json()["data"]["summaries"][0]["autoclosed"] is True
    assert len(admin.get("/api/events").get_json()["data"]) == 2

    assert admin.get("/api/summary/not-a-day").status_code == 400
    assert admin.get(f"/api/summary/{today}?policy=bogus").status_code == 400
    assert admin.get(f"/api/summary/{today}?hour=25").status_code == 400
    assert admin.get(f"/api/summary/{today}/live").status_code == 200
    assert admin.get("/api/hours/10000001").get_json()["data"]["identity_id"] == "10000001"


def test_event_range_and_delete(admin):
    _add(admin)
    admin.post("/api/events", json={"identity_id": "10000001", "kind": "checkin"})
    event = admin.get("/api/events").get_json()["data"][0]

    bad = admin.get("/api/events?start=2026-03-10T00:00:00&end=nope")
    assert bad.status_code == 400

    assert admin.delete(f"/api/events/{event['event_id']}").status_code == 200
    assert admin.delete(f"/api/events/{event['event_id']}").status_code == 404


def test_pending_endpoints(admin):
    _add(admin)
    admin.post("/api/events", json={"identity_id": "10000001", "kind": "checkin"})
    today = date.today().isoformat()

    opened = admin.post("/api/pending/open", json={"day": today})
    assert opened.status_code == 201
    record = opened.get_json()["data"][0]

    public = admin.get(f"/api/pending/token/{record['token']}")
    assert public.status_code == 200
    assert "token" not in public.get_json()["data"]

    assert admin.get("/api/pending?status=pending").get_json()["data"][0]["pending_id"] == record["pending_id"]
    assert admin.get("/api/pending?status=weird").status_code == 400
    assert admin.get("/api/pending/stats").get_json()["data"]["pending"] == 1

    resolved = admin.post(f"/api/pending/{record['pending_id']}/resolve", json={"present_only": True})
    assert resolved.status_code == 200
    assert resolved.get_json()["data"]["status"] == "resolved"
    assert admin.get(f"/api/pending/token/{record['token']}").status_code == 404
    assert admin.post("/api/pending/expire").get_json()["data"]["expired"] == []


def test_reports_and_encryption(admin):
    _add(admin)

    weekly = admin.get("/api/reports/weekly").get_json()["data"]
    assert weekly["identities"][0]["identity_id"] == "10000001"
    assert admin.get("/api/stats").get_json()["data"]["total_identities"] == 1

    assert admin.post("/api/admin/encryption", json={"enabled": True}).status_code == 400
    on = admin.post("/api/admin/encryption", json={"enabled": True, "passphrase": "s3cret"})
    assert on.get_json()["data"] == {"enabled": True, "unlocked": True}
    assert admin.get("/api/admin/encryption").get_json()["data"]["enabled"] is True
    assert admin.post("/api/admin/encryption/unlock", json={"passphrase": "wrong"}).status_code == 401
    assert admin.get("/api/identities").get_json()["data"][0]["display_name"] == "Ada Lovelace"


def test_change_admin_password(admin):
    assert admin.post("/api/admin/password", json={"new_password": "short"}).status_code == 400
    assert admin.post("/api/admin/password", json={"new_password": "much-better"}).status_code == 200

    admin.post("/api/admin/logout")
    assert admin.post("/api/admin/login", json={"password": "admin123"}).status_code == 401
    assert admin.post("/api/admin/login", json={"password": "much-better"}).status_code == 200


def test_lock_endpoint(admin):
    _add(admin)
    admin.post("/api/admin/encryption", json={"enabled": True, "passphrase": "s3cret"})

    assert admin.post("/api/admin/encryption/lock").get_json()["data"] == {"unlocked": False}
    assert admin.get("/api/identities").get_json()["data"][0]["display_name"] != "Ada Lovelace"
    assert admin.post("/api/admin/encryption/unlock", json={"passphrase": "s3cret"}).status_code == 200
    assert admin.get("/api/identities").get_json()["data"][0]["display_name"] == "Ada Lovelace"


def test_kiosk_write_refused_while_locked(admin):
    _add(admin)
    admin.post("/api/admin/encryption", json={"enabled": True, "passphrase": "s3cret"})
    admin.post("/api/admin/encryption/lock")

    refused = admin.post("/api/events", json={"identity_id": "10000001", "kind": "checkin"})

    assert refused.status_code == 500
    assert refused.get_json()["reason"] == "io_failure"
    assert admin.get("/api/status/10000001").get_json()["data"]["status"] == "never_checked_in"

    admin.post("/api/admin/encryption/unlock", json={"passphrase": "s3cret"})
    assert admin.post("/api/events", json={"identity_id": "10000001", "kind": "checkin"}).status_code == 201
