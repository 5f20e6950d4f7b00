"""Lab credential release is bound to the live window, computed on the server."""

from datetime import datetime, timedelta

import pytest

from trainer_portal.services.batch_views import to_credential_response
from trainer_portal.services.credential_service import (
    CredentialDecision,
    CredentialOutcome,
    get_credentials,
)
from tests.conftest import auth_headers, batch_payload, make_batch

CREDS = ("https://lab.example.com/login", "lab-user", "lab-secret")


def _ist(value: str) -> datetime:
    return datetime.fromisoformat(value + "+05:30")


def test_react_101_end_to_end(client, seed_users, clock):
    asha = seed_users["asha"]
    admin_headers = auth_headers(client, "admin@example.com")
    asha_headers = auth_headers(client, "asha@example.com")
    ravi_headers = auth_headers(client, "ravi@example.com")

    created = client.post(
        "/api/batches",
        json=batch_payload(trainer_ids=[asha.user_id], date="2026-03-11", start_time="10:00", end_time="11:00"),
        headers=admin_headers,
    )
    assert created.status_code == 201, created.text
    assert created.json()["status"] == "Upcoming"
    url = f"/api/batches/{created.json()['id']}/credentials"

    early = client.get(url, headers=asha_headers)
    assert early.status_code == 403
    assert early.json()["reason"] == "not_yet_available"

    clock.set(_ist("2026-03-11T10:01:00"))
    granted = client.get(url, headers=asha_headers)
    assert granted.status_code == 200
    body = granted.json()
    assert body["has_credentials"] is True
    assert body["credentials"] == {
        "login_url": "https://lab.example.com/login",
        "username": "react-lab",
        "password": "Lab@Pass123",
    }
    assert body["batch_name"] == "React 101"

    stranger = client.get(url, headers=ravi_headers)
    assert stranger.status_code == 403
    assert stranger.json()["reason"] == "not_assigned"
    assert stranger.json()["detail"] == "Access denied. You are not assigned to this batch."

    clock.set(_ist("2026-03-11T11:00:01"))
    late = client.get(url, headers=asha_headers)
    assert late.status_code == 403
    assert late.json() == {"detail": "Lab access has expired. The batch has ended.", "reason": "expired"}


def test_forged_status_is_ignored(client, db, seed_users):
    batch = make_batch(db, "Later today", [seed_users["asha"]], "2026-03-10", "12:00", "13:00", seed_users["admin"], credentials=CREDS)
    resp = client.get(
        f"/api/batches/{batch.batch_id}/credentials",
        params={"status": "Live"},
        headers=auth_headers(client, "asha@example.com"),
    )
    assert resp.status_code == 403
    assert resp.json()["reason"] == "not_yet_available"


def test_credentials_available_exactly_at_start_and_end(client, db, seed_users, clock):
    batch = make_batch(db, "Boundary", [seed_users["asha"]], "2026-03-10", "10:00", "11:00", seed_users["admin"], credentials=CREDS)
    headers = auth_headers(client, "asha@example.com")
    url = f"/api/batches/{batch.batch_id}/credentials"

    assert client.get(url, headers=headers).status_code == 200

    clock.set(_ist("2026-03-10T11:00:00"))
    assert client.get(url, headers=headers).status_code == 200

    clock.advance(timedelta(milliseconds=1))
    assert client.get(url, headers=headers).json()["reason"] == "expired"


def test_cancelled_batch_denies(client, db, seed_users):
    batch = make_batch(
        db, "Dropped", [seed_users["asha"]], "2026-03-10", "09:30", "11:00", seed_users["admin"],
        cancelled=True, credentials=CREDS,
    )
    resp = client.get(f"/api/batches/{batch.batch_id}/credentials", headers=auth_headers(client, "asha@example.com"))
    assert resp.status_code == 403
    assert resp.json()["reason"] == "cancelled"


def test_live_batch_without_credentials(client, db, seed_users):
    batch = make_batch(db, "No lab", [seed_users["asha"]], "2026-03-10", "09:30", "11:00", seed_users["admin"])
    resp = client.get(f"/api/batches/{batch.batch_id}/credentials", headers=auth_headers(client, "asha@example.com"))
    assert resp.status_code == 200
    assert resp.json()["has_credentials"] is False
    assert resp.json()["message"] == "No lab credentials configured for this batch."
    assert resp.json()["credentials"] is None


def test_missing_batch_is_404(client, seed_users):
    resp = client.get("/api/batches/999/credentials", headers=auth_headers(client, "asha@example.com"))
    assert resp.status_code == 404


def test_admin_is_still_time_gated(client, db, seed_users):
    batch = make_batch(db, "Tomorrow", [seed_users["asha"]], "2026-03-11", "09:00", "10:00", seed_users["admin"], credentials=CREDS)
    resp = client.get(f"/api/batches/{batch.batch_id}/credentials", headers=auth_headers(client, "admin@example.com"))
    assert resp.status_code == 403
    assert resp.json()["reason"] == "not_yet_available"


def test_assignment_is_checked_before_phase(db, seed_users, clock):
    batch = make_batch(db, "Tomorrow", [seed_users["asha"]], "2026-03-11", "09:00", "10:00", seed_users["admin"], credentials=CREDS)
    decision = get_credentials(db, batch.batch_id, seed_users["ravi"], clock)
    assert decision.outcome == CredentialOutcome.NOT_ASSIGNED
    assert decision.is_denial


def test_denials_have_no_credential_response():
    with pytest.raises(ValueError):
        to_credential_response(CredentialDecision(CredentialOutcome.EXPIRED))
