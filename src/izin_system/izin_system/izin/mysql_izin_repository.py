from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Optional, Sequence

from ..core.enums import IzinStatus, IzinType, Role
from ..core.exceptions import ConflictError, CorruptRecordError, NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_bool, to_db_bool
from .model import Decision, IzinApplication, IzinPulang, IzinSakit
from .repository import IzinRepository
from .rules import ensure_consistent

logger = logging.getLogger(__name__)

_COLUMNS = (
    "izin_id", "izin_type", "santri_id", "requested_by", "created_at", "status", "version",
    "ustadzah_approval", "approved_by_id", "approved_by_name", "approved_by_role", "approved_at",
    "rejection_reason", "complaint",
    "recovery_verified_by_id", "recovery_verified_by_name", "recovery_verified_by_role", "recovery_verified_at",
    "reason", "departure_time", "planned_return_time",
    "ndalem_approval", "ndalem_decided_by_id", "ndalem_decided_by_name", "ndalem_decided_by_role",
    "ndalem_decided_at", "ndalem_rejection_reason", "granted_by_name", "granted_by_id",
    "has_returned", "returned_on_time", "actual_return_time",
    "return_verified_by_id", "return_verified_by_name", "return_verified_by_role", "return_verified_at",
    "outstanding_balance",
)

_SELECT = "SELECT " + ", ".join(_COLUMNS) + " FROM izin_applications"


def _decision_columns(prefix: str, decision: Optional[Decision]) -> dict[str, Any]:
    return {
        f"{prefix}_by_id": decision.actor_id if decision else None,
        f"{prefix}_by_name": decision.actor_name if decision else None,
        f"{prefix}_by_role": decision.role.value if decision else None,
        f"{prefix}_at": decision.at if decision else None,
    }


def _decision_from_row(prefix: str, row: dict) -> Optional[Decision]:
    actor_id = row.get(f"{prefix}_by_id")
    if not actor_id:
        return None
    return Decision(
        actor_id=str(actor_id),
        actor_name=row.get(f"{prefix}_by_name") or str(actor_id),
        role=Role(row[f"{prefix}_by_role"]),
        at=row[f"{prefix}_at"],
    )


def record_to_row(record: IzinApplication) -> dict[str, Any]:
    row: dict[str, Any] = {c: None for c in _COLUMNS}
    row.update(
        izin_id=record.izin_id,
        izin_type=record.izin_type.value,
        santri_id=record.santri_id,
        requested_by=record.requested_by,
        created_at=record.created_at,
        status=record.status.value,
        version=record.version,
        ustadzah_approval=to_db_bool(record.ustadzah_approval),
        rejection_reason=record.rejection_reason,
        outstanding_balance=0,
    )
    row.update(_decision_columns("approved", record.approved_by))

    if isinstance(record, IzinSakit):
        row["complaint"] = record.complaint
        row.update(_decision_columns("recovery_verified", record.recovery_verified_by))
        return row

    row.update(
        reason=record.reason,
        departure_time=record.departure_time,
        planned_return_time=record.planned_return_time,
        ndalem_approval=to_db_bool(record.ndalem_approval),
        ndalem_rejection_reason=record.ndalem_rejection_reason,
        granted_by_name=record.granted_by_name,
        granted_by_id=record.granted_by_id,
        has_returned=to_db_bool(record.has_returned),
        returned_on_time=to_db_bool(record.returned_on_time),
        actual_return_time=record.actual_return_time,
        outstanding_balance=int(record.outstanding_balance or 0),
    )
    row.update(_decision_columns("ndalem_decided", record.ndalem_decided_by))
    row.update(_decision_columns("return_verified", record.return_verified_by))
    return row


def row_to_record(row: dict) -> IzinApplication:
    common = dict(
        izin_id=str(row["izin_id"]),
        santri_id=str(row["santri_id"]),
        requested_by=str(row["requested_by"]),
        created_at=row["created_at"],
        status=IzinStatus(row["status"]),
        ustadzah_approval=from_db_bool(row.get("ustadzah_approval")),
        approved_by=_decision_from_row("approved", row),
        rejection_reason=row.get("rejection_reason"),
        version=int(row["version"]),
    )

    if IzinType(row["izin_type"]) == IzinType.SAKIT:
        record: IzinApplication = IzinSakit(
            complaint=row.get("complaint") or "",
            recovery_verified_by=_decision_from_row("recovery_verified", row),
            **common,
        )
    else:
        record = IzinPulang(
            reason=row.get("reason") or "",
            departure_time=row["departure_time"],
            planned_return_time=row["planned_return_time"],
            ndalem_approval=from_db_bool(row.get("ndalem_approval")),
            ndalem_decided_by=_decision_from_row("ndalem_decided", row),
            ndalem_rejection_reason=row.get("ndalem_rejection_reason"),
            granted_by_name=row.get("granted_by_name"),
            granted_by_id=row.get("granted_by_id"),
            has_returned=from_db_bool(row.get("has_returned")),
            returned_on_time=from_db_bool(row.get("returned_on_time")),
            actual_return_time=row.get("actual_return_time"),
            return_verified_by=_decision_from_row("return_verified", row),
            outstanding_balance=int(row.get("outstanding_balance") or 0),
            **common,
        )
    return ensure_consistent(record)


def _rows_to_records(rows: list[dict]) -> list[IzinApplication]:
    # A corrupt row must not hide every other record from listings and reports.
    out: list[IzinApplication] = []
    for r in rows:
        try:
            out.append(row_to_record(r))
        except CorruptRecordError as e:
            logger.error("Melewati data izin rusak: %s", e)
    return out


class MySQLIzinRepository(IzinRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def insert(self, record: IzinApplication) -> str:
        izin_id = record.izin_id or uuid.uuid4().hex
        row = record_to_row(record)
        row["izin_id"] = izin_id
        row["version"] = 1

        cols = ", ".join(_COLUMNS)
        placeholders = ",".join(["%s"] * len(_COLUMNS))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO izin_applications({cols}) VALUES({placeholders})",
                tuple(row[c] for c in _COLUMNS),
            )
        return izin_id

    def load_by_id(self, izin_id: str) -> IzinApplication:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE izin_id=%s", (izin_id,))
            row = fetchone(cur)
        if not row:
            raise NotFoundError(f"Permohonan izin {izin_id} tidak ditemukan")
        return row_to_record(row)

    def save(self, record: IzinApplication, *, expected_version: int) -> int:
        row = record_to_row(record)
        mutable = [c for c in _COLUMNS if c not in {"izin_id", "izin_type", "santri_id", "requested_by", "created_at", "version"}]
        assignments = ", ".join(f"{c}=%s" for c in mutable)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE izin_applications
                SET {assignments}, version=version+1
                WHERE izin_id=%s AND version=%s
                """,
                tuple(row[c] for c in mutable) + (record.izin_id, int(expected_version)),
            )
            if cur.rowcount > 0:
                return int(expected_version) + 1
            self._raise_missing_or_conflict(cur, record.izin_id, expected_version)

    def delete(self, izin_id: str, *, expected_version: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM izin_applications WHERE izin_id=%s AND version=%s",
                (izin_id, int(expected_version)),
            )
            if cur.rowcount > 0:
                return
            self._raise_missing_or_conflict(cur, izin_id, expected_version)

    @staticmethod
    def _raise_missing_or_conflict(cur, izin_id: str, expected_version: int):
        cur.execute("SELECT version FROM izin_applications WHERE izin_id=%s", (izin_id,))
        current = fetchone(cur)
        if not current:
            raise NotFoundError(f"Permohonan izin {izin_id} tidak ditemukan")
        logger.info(
            "Konflik versi izin %s: diharapkan %s, tersimpan %s", izin_id, expected_version, current["version"]
        )
        raise ConflictError("Permohonan telah diubah oleh pengguna lain, muat ulang lalu coba lagi")

    def query_by_status(self, status: IzinStatus, *, limit: Optional[int] = None) -> Sequence[IzinApplication]:
        sql = f"{_SELECT} WHERE status=%s ORDER BY created_at DESC"
        params: list[object] = [status.value]
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            rows = fetchall(cur)
        return _rows_to_records(rows)

    def query_by_date_range(self, start: datetime, end: datetime) -> Sequence[IzinApplication]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                {_SELECT}
                WHERE (created_at BETWEEN %s AND %s)
                   OR (departure_time BETWEEN %s AND %s)
                ORDER BY created_at DESC
                """,
                (start, end, start, end),
            )
            rows = fetchall(cur)
        return _rows_to_records(rows)

    def query_by_santri(self, santri_id: str) -> Sequence[IzinApplication]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE santri_id=%s ORDER BY created_at DESC", (santri_id,))
            rows = fetchall(cur)
        return _rows_to_records(rows)
