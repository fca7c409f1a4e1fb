from __future__ import annotations

from dataclasses import replace

import pytest

from src.izin_system.izin_system.core.exceptions import ConflictError, NotFoundError
from src.izin_system.izin_system.izin.model import IzinPulang


class FakeIzinRepo:
    """In-memory repository with the same version semantics as the MySQL one."""

    def __init__(self):
        self._next_id = 1
        self._records: dict[str, object] = {}

    def insert(self, record):
        izin_id = f"iz-{self._next_id}"
        self._next_id += 1
        self._records[izin_id] = replace(record, izin_id=izin_id, version=1)
        return izin_id

    def load_by_id(self, izin_id):
        if izin_id not in self._records:
            raise NotFoundError(f"Permohonan izin {izin_id} tidak ditemukan")
        return self._records[izin_id]

    def save(self, record, *, expected_version):
        current = self.load_by_id(record.izin_id)
        if current.version != expected_version:
            raise ConflictError("Permohonan telah diubah oleh pengguna lain")
        self._records[record.izin_id] = replace(record, version=expected_version + 1)
        return expected_version + 1

    def delete(self, izin_id, *, expected_version):
        current = self.load_by_id(izin_id)
        if current.version != expected_version:
            raise ConflictError("Permohonan telah diubah oleh pengguna lain")
        del self._records[izin_id]

    def query_by_status(self, status, *, limit=None):
        found = [r for r in self._records.values() if r.status == status]
        return found[:limit] if limit is not None else found

    def query_by_date_range(self, start, end):
        return [
            r
            for r in self._records.values()
            if start <= r.created_at <= end
            or (isinstance(r, IzinPulang) and start <= r.departure_time <= end)
        ]

    def query_by_santri(self, santri_id):
        return [r for r in self._records.values() if r.santri_id == santri_id]

    # simulate another writer
    def bump_version(self, izin_id):
        record = self._records[izin_id]
        self._records[izin_id] = replace(record, version=record.version + 1)


@pytest.fixture
def fake_izin_repo():
    return FakeIzinRepo()
