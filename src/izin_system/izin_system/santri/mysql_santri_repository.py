from __future__ import annotations

from typing import Iterable, Optional

from ..core.enums import PresenceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Santri
from .repository import SantriRepository


def _row_to_santri(row: dict) -> Santri:
    return Santri(
        santri_id=str(row["santri_id"]),
        nama=row["nama"],
        kamar=row.get("kamar"),
        semester=int(row["semester"]) if row.get("semester") is not None else None,
        status_kehadiran=PresenceStatus(row.get("status_kehadiran") or PresenceStatus.ADA.value),
    )


class MySQLSantriRepository(SantriRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, santri_id: str) -> Optional[Santri]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT santri_id, nama, kamar, semester, status_kehadiran
                FROM santri
                WHERE santri_id=%s
                """,
                (santri_id,),
            )
            row = fetchone(cur)
            return _row_to_santri(row) if row else None

    def get_many(self, santri_ids: Iterable[str]) -> dict[str, Santri]:
        ids = sorted({str(s) for s in santri_ids})
        if not ids:
            return {}

        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT santri_id, nama, kamar, semester, status_kehadiran
                FROM santri
                WHERE santri_id IN ({placeholders})
                """,
                tuple(ids),
            )
            return {str(r["santri_id"]): _row_to_santri(r) for r in fetchall(cur)}

    def set_presence(self, santri_id: str, status: PresenceStatus, *, izin_id: Optional[str] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE santri
                SET status_kehadiran=%s, active_izin_id=%s
                WHERE santri_id=%s
                """,
                (status.value, izin_id, santri_id),
            )
            return cur.rowcount > 0
