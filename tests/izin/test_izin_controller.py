from __future__ import annotations

from types import SimpleNamespace

import pytest
from flask import Flask

from src.izin_system.izin_system.izin.controller import register
from src.izin_system.izin_system.izin.events import EventBus
from src.izin_system.izin_system.izin.service import IzinService


@pytest.fixture
def client(fake_izin_repo):
    app = Flask(__name__)
    app.secret_key = "test-secret"
    service = IzinService(fake_izin_repo, events=EventBus())
    register(app, SimpleNamespace(izin_service=service))
    return app.test_client()


def _login(client, **user):
    with client.session_transaction() as sess:
        sess.update(user)


def _create(client):
    _login(client, user_id="wali-1", role="waliSantri", santri_id="s-1")
    res = client.post(
        "/izin/pulang",
        json={
            "reason": "Acara Keluarga",
            "departure_time": "2099-01-01T08:00",
            "planned_return_time": "2099-01-04T08:00",
        },
    )
    assert res.status_code == 201
    return res.get_json()["izin_id"]


def test_requires_login(client):
    assert client.post("/izin/sakit", json={"complaint": "Demam"}).status_code == 401


def test_guardian_creates_and_sees_withdraw_option(client):
    izin_id = _create(client)

    res = client.get(f"/izin/{izin_id}")

    assert res.status_code == 200
    body = res.get_json()
    assert body["izin"]["status"] == "Menunggu Persetujuan Ustadzah"
    assert body["operations"] == ["withdraw"]


def test_staff_decisions_and_error_mapping(client):
    izin_id = _create(client)

    _login(client, user_id="u-1", role="pengurus", name="Ustadzah Aisyah")
    assert client.post(f"/admin/izin/{izin_id}/ndalem", json={"approved": True}).status_code == 403

    res = client.post(f"/admin/izin/{izin_id}/ustadzah", json={"approved": "setuju"})
    assert res.status_code == 200
    assert res.get_json()["approved_by"] == "Ustadzah Aisyah"

    again = client.post(f"/admin/izin/{izin_id}/ustadzah", json={"approved": False})
    assert again.status_code == 409
    assert again.get_json()["kind"] == "AlreadyDecided"


def test_bad_input_is_400_and_unknown_id_is_404(client):
    _login(client, user_id="wali-1", role="waliSantri", santri_id="s-1")
    assert client.post("/izin/pulang", json={"reason": "Acara Keluarga"}).status_code == 400
    assert client.post("/izin/sakit", json={"complaint": ""}).status_code == 400
    assert client.get("/izin/nope").status_code == 404


def test_guardian_cannot_open_admin_queue(client):
    _login(client, user_id="wali-1", role="waliSantri")
    assert client.get("/admin/izin").status_code == 403


def _approve_both(client, izin_id):
    _login(client, user_id="u-1", role="pengurus", name="Ustadzah Aisyah")
    assert client.post(f"/admin/izin/{izin_id}/ustadzah", json={"approved": True}).status_code == 200
    _login(client, user_id="u-9", role="pengasuh", name="Nyai Fatimah")
    assert client.post(f"/admin/izin/{izin_id}/ndalem", json={"approved": True}).status_code == 200


def test_return_time_with_offset_is_accepted(client):
    izin_id = _create(client)
    _approve_both(client, izin_id)

    res = client.post(f"/admin/izin/{izin_id}/kembali", json={"actual_return_time": "2099-01-04T09:00+07:00"})

    assert res.status_code == 200
    assert res.get_json()["status"] == "Sudah Kembali"


def test_create_pulang_with_utc_suffix_is_accepted(client):
    _login(client, user_id="wali-1", role="waliSantri", santri_id="s-1")
    res = client.post(
        "/izin/pulang",
        json={
            "reason": "Acara Keluarga",
            "departure_time": "2099-01-01T08:00",
            "planned_return_time": "2099-01-04T08:00Z",
        },
    )
    assert res.status_code == 201


@pytest.mark.parametrize(
    "path, payload",
    [
        ("/izin/sakit", {"complaint": 5}),
        ("/izin/sakit", {"complaint": "Demam", "santri_id": 7}),
        (
            "/izin/pulang",
            {"reason": "Acara Keluarga", "departure_time": 1704096000, "planned_return_time": "2099-01-04T08:00"},
        ),
        (
            "/izin/pulang",
            {"reason": "Acara Keluarga", "departure_time": "besok", "planned_return_time": "2099-01-04T08:00"},
        ),
    ],
)
def test_non_text_or_unparseable_fields_are_400(client, path, payload):
    _login(client, user_id="wali-1", role="waliSantri", santri_id="s-1")

    res = client.post(path, json=payload)

    assert res.status_code == 400
    assert res.get_json()["kind"] == "ValidationError"


def test_non_text_rejection_reason_is_400(client):
    izin_id = _create(client)
    _login(client, user_id="u-1", role="pengurus", name="Ustadzah Aisyah")

    res = client.post(f"/admin/izin/{izin_id}/ustadzah", json={"approved": False, "reason": 12})

    assert res.status_code == 400


def test_admin_overdue_entries_report_days_late(client):
    _login(client, user_id="wali-1", role="waliSantri", santri_id="s-1")
    res = client.post(
        "/izin/pulang",
        json={
            "reason": "Acara Keluarga",
            "departure_time": "2024-01-01T08:00",
            "planned_return_time": "2024-01-04T08:00",
        },
    )
    izin_id = res.get_json()["izin_id"]
    _approve_both(client, izin_id)

    body = client.get("/admin/izin").get_json()

    assert [e["izin_id"] for e in body["overdue"]] == [izin_id]
    assert body["overdue"][0]["days_late"] >= 1
