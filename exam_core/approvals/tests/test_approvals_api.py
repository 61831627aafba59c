import pytest

from exam_core.tests.helpers import client_for

pytestmark = pytest.mark.django_db

BASE = "/api/v1/approvals/"


def test_queue_and_approve(pending, doctor):
    c = client_for(doctor)

    res = c.get(BASE)
    assert res.status_code == 200
    body = res.json()
    assert [row["id"] for row in body["data"]] == [str(pending.id)]
    assert body["pagination"]["limit"] == 50

    res = c.post(f"{BASE}{pending.id}/approve/", {"notes": "All clear"}, format="json")
    assert res.status_code == 200
    assert res.json()["status"] == "submitted"
    assert res.json()["approved_by_name"] == "David Ong"

    res = c.post(f"{BASE}{pending.id}/approve/", {}, format="json")
    assert res.status_code == 403


def test_nurse_cannot_use_queue(pending, nurse):
    c = client_for(nurse)
    assert c.get(BASE).status_code == 403
    assert c.post(f"{BASE}{pending.id}/approve/", {}, format="json").status_code == 403


def test_admin_passes_role_gate_but_not_review_policy(pending, admin):
    c = client_for(admin)
    assert c.get(BASE).status_code == 200

    res = c.post(f"{BASE}{pending.id}/approve/", {}, format="json")
    assert res.status_code == 403
    assert "doctors" in res.json()["error"]["message"]


def test_reject_requires_reason(pending, doctor):
    c = client_for(doctor)

    res = c.post(f"{BASE}{pending.id}/reject/", {"reason": ""}, format="json")
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "validation_error"

    res = c.post(f"{BASE}{pending.id}/reject/", {"reason": "Blood test missing"}, format="json")
    assert res.status_code == 200
    assert res.json()["status"] == "rejected"

    res = c.get(f"{BASE}rejected/")
    assert [row["id"] for row in res.json()["data"]] == [str(pending.id)]


def test_foreign_doctor_cannot_review(pending, foreign_doctor):
    res = client_for(foreign_doctor).post(f"{BASE}{pending.id}/reject/", {"reason": "x"}, format="json")
    assert res.status_code == 403
