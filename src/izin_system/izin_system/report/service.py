from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import date
from typing import Iterable, Optional

from ..common.datetime_utils import end_of_day, start_of_day
from ..common.validators import require_date_range
from ..izin.repository import IzinRepository
from ..santri.repository import SantriRepository
from .aggregator import aggregate
from .model import IzinReportRow

logger = logging.getLogger(__name__)


class IzinReportService:
    def __init__(self, izin: IzinRepository, santri: SantriRepository):
        self._izin = izin
        self._santri = santri

    def build_report(
        self,
        *,
        start: date,
        end: date,
        santri_ids: Optional[Iterable[str]] = None,
    ) -> list[IzinReportRow]:
        require_date_range(start, end)
        lo, hi = start_of_day(start), end_of_day(end)

        records = list(self._izin.query_by_date_range(lo, hi))
        scope = None if santri_ids is None else [str(s) for s in santri_ids]
        ids = set(scope) if scope is not None else {r.santri_id for r in records}
        santri = self._santri.get_many(ids)

        rows = aggregate(records, start=lo, end=hi, santri=santri, santri_scope=scope)
        logger.info("Rekap izin %s s/d %s: %d santri dari %d data", start, end, len(rows), len(records))
        return rows

    def build_report_rows(self, **kwargs) -> list[dict]:
        """Same as :meth:`build_report`, as plain dicts for export."""
        return [asdict(r) for r in self.build_report(**kwargs)]
