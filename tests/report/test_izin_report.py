from __future__ import annotations

from datetime import date, datetime
from types import SimpleNamespace

import pytest
from flask import Flask

from src.izin_system.izin_system.core.enums import IzinStatus
from src.izin_system.izin_system.core.exceptions import ValidationError
from src.izin_system.izin_system.izin.model import IzinPulang, IzinSakit
from src.izin_system.izin_system.report.aggregator import aggregate, group_and_count
from src.izin_system.izin_system.report.controller import register
from src.izin_system.izin_system.report.service import IzinReportService
from src.izin_system.izin_system.santri.model import Santri


def _returned(izin_id, santri_id, departure, planned, actual, reason="Acara Keluarga"):
    return IzinPulang(
        izin_id=izin_id,
        santri_id=santri_id,
        requested_by="wali-1",
        created_at=datetime(2023, 12, 30, 10, 0),
        status=IzinStatus.RETURNED,
        reason=reason,
        departure_time=departure,
        planned_return_time=planned,
        ustadzah_approval=True,
        ndalem_approval=True,
        has_returned=True,
        returned_on_time=actual <= planned,
        actual_return_time=actual,
    )


def _sakit(izin_id, santri_id, created_at, complaint):
    return IzinSakit(
        izin_id=izin_id,
        santri_id=santri_id,
        requested_by="wali-1",
        created_at=created_at,
        status=IzinStatus.PENDING_REVIEW,
        complaint=complaint,
    )


class FakeIzinRepo:
    def __init__(self, records):
        self.records = records
        self.queried = None

    def query_by_date_range(self, start, end):
        self.queried = (start, end)
        return list(self.records)


class FakeSantriRepo:
    def __init__(self, *santri):
        self.santri = {s.santri_id: s for s in santri}

    def get_many(self, santri_ids):
        return {sid: self.santri[sid] for sid in santri_ids if sid in self.santri}


def test_one_on_time_and_one_late_return():
    records = [
        _returned("iz-1", "s-1", datetime(2024, 1, 5, 8), datetime(2024, 1, 7, 8), datetime(2024, 1, 7, 7)),
        _returned("iz-2", "s-1", datetime(2024, 1, 15, 8), datetime(2024, 1, 17, 8), datetime(2024, 1, 17, 9)),
    ]
    service = IzinReportService(FakeIzinRepo(records), FakeSantriRepo(Santri("s-1", "Zahra", "A1", 3)))

    rows = service.build_report(start=date(2024, 1, 1), end=date(2024, 1, 31))

    assert len(rows) == 1
    assert rows[0].pulang_count == 2
    assert rows[0].late_return_count == 1
    assert rows[0].reason_summary == "Acara Keluarga (2)"
    assert rows[0].nama == "Zahra"


def test_pulang_counts_by_departure_and_sakit_by_created_at():
    records = [
        # created in range but departs after it
        _returned("iz-1", "s-1", datetime(2024, 2, 2, 8), datetime(2024, 2, 4, 8), datetime(2024, 2, 4, 8)),
        _sakit("iz-2", "s-1", datetime(2024, 1, 10, 6), "Demam"),
        _sakit("iz-3", "s-1", datetime(2024, 1, 12, 6), "Demam"),
        _sakit("iz-4", "s-1", datetime(2024, 1, 20, 6), "Flu"),
    ]

    rows = aggregate(
        records,
        start=datetime(2024, 1, 1),
        end=datetime(2024, 1, 31, 23, 59, 59),
        santri={},
    )

    assert rows[0].pulang_count == 0
    assert rows[0].sakit_count == 3
    assert rows[0].complaint_summary == "Demam (2), Flu"
    assert rows[0].latest_complaint == "Flu"


def test_unresolved_return_is_not_late():
    on_leave = IzinPulang(
        izin_id="iz-1",
        santri_id="s-1",
        requested_by="wali-1",
        created_at=datetime(2024, 1, 1),
        status=IzinStatus.ON_LEAVE,
        reason="Sakit Keluarga",
        departure_time=datetime(2024, 1, 2, 8),
        planned_return_time=datetime(2024, 1, 3, 8),
        ustadzah_approval=True,
        ndalem_approval=True,
    )

    rows = aggregate([on_leave], start=datetime(2024, 1, 1), end=datetime(2024, 1, 31), santri={})

    assert rows[0].pulang_count == 1
    assert rows[0].late_return_count == 0


def test_scope_includes_residents_without_records_and_unknown_info():
    service = IzinReportService(
        FakeIzinRepo([_sakit("iz-1", "s-1", datetime(2024, 1, 10, 6), "Demam")]),
        FakeSantriRepo(Santri("s-1", "Zahra", "A1", 3), Santri("s-2", "Aminah", None, None)),
    )

    rows = service.build_report(start=date(2024, 1, 1), end=date(2024, 1, 31), santri_ids=["s-1", "s-2", "s-9"])

    by_id = {r.santri_id: r for r in rows}
    assert set(by_id) == {"s-1", "s-2", "s-9"}
    assert by_id["s-2"].sakit_count == 0
    assert by_id["s-2"].kamar == "-"
    assert by_id["s-9"].nama == "Unknown"
    assert [r.nama for r in rows] == ["Aminah", "Unknown", "Zahra"]


def test_report_expands_end_date_to_end_of_day():
    repo = FakeIzinRepo([])
    IzinReportService(repo, FakeSantriRepo()).build_report(start=date(2024, 1, 1), end=date(2024, 1, 31))

    start, end = repo.queried
    assert start == datetime(2024, 1, 1, 0, 0)
    assert end.date() == date(2024, 1, 31)
    assert end.hour == 23 and end.minute == 59


def test_report_rejects_reversed_range():
    service = IzinReportService(FakeIzinRepo([]), FakeSantriRepo())
    with pytest.raises(ValidationError):
        service.build_report(start=date(2024, 2, 1), end=date(2024, 1, 1))


def test_group_and_count_keeps_first_seen_order():
    assert group_and_count(["Flu", "Demam", "Flu"]) == "Flu (2), Demam"
    assert group_and_count([]) == ""


def test_rekap_endpoint_returns_rows_for_staff():
    records = [_sakit("iz-1", "s-1", datetime(2024, 1, 10, 6), "Demam")]
    service = IzinReportService(FakeIzinRepo(records), FakeSantriRepo(Santri("s-1", "Zahra", "A1", 3)))
    app = Flask(__name__)
    app.secret_key = "test-secret"
    register(app, SimpleNamespace(izin_report_service=service))
    client = app.test_client()

    with client.session_transaction() as sess:
        sess.update(user_id="u-1", role="pengurus")

    res = client.get("/admin/izin/rekap?start=2024-01-01&end=2024-01-31")
    assert res.status_code == 200
    assert res.get_json()[0]["sakit_count"] == 1

    assert client.get("/admin/izin/rekap?start=2024-02-01&end=2024-01-01").status_code == 400
    assert client.get("/admin/izin/rekap?start=kemarin&end=2024-01-01").status_code == 400
