from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Mapping, Optional

from ..izin.model import IzinApplication, IzinPulang, IzinSakit
from ..santri.model import Santri
from .model import IzinReportRow


def group_and_count(items: Iterable[str]) -> str:
    """Count repeats in first-seen order: ["Demam", "Demam", "Flu"] -> "Demam (2), Flu"."""
    counted = Counter(items)
    return ", ".join(f"{item} ({n})" if n > 1 else item for item, n in counted.items())


@dataclass
class _Tally:
    pulang: list[IzinPulang] = field(default_factory=list)
    sakit: list[IzinSakit] = field(default_factory=list)

    def late_returns(self) -> int:
        # None means the return is not resolved yet: not late.
        return sum(1 for r in self.pulang if r.has_returned is True and r.returned_on_time is False)


def _latest(records, key) -> Optional[IzinApplication]:
    return max(records, key=key) if records else None


def aggregate(
    records: Iterable[IzinApplication],
    *,
    start: datetime,
    end: datetime,
    santri: Mapping[str, Santri],
    santri_scope: Optional[Iterable[str]] = None,
) -> list[IzinReportRow]:
    """Fold izin records into per-santri counts for ``[start, end]``.

    Pulang counts by ``departure_time``, Sakit by ``created_at``. Pure: the
    records are only read.
    """
    scope = None if santri_scope is None else [str(s) for s in santri_scope]
    tallies: dict[str, _Tally] = {sid: _Tally() for sid in scope or []}

    for record in records:
        if scope is not None and record.santri_id not in tallies:
            continue
        if isinstance(record, IzinPulang):
            if start <= record.departure_time <= end:
                tallies.setdefault(record.santri_id, _Tally()).pulang.append(record)
        elif start <= record.created_at <= end:
            tallies.setdefault(record.santri_id, _Tally()).sakit.append(record)

    rows: list[IzinReportRow] = []
    for santri_id, tally in tallies.items():
        info = santri.get(santri_id)
        latest_pulang = _latest(tally.pulang, key=lambda r: r.departure_time)
        latest_sakit = _latest(tally.sakit, key=lambda r: r.created_at)
        rows.append(
            IzinReportRow(
                santri_id=santri_id,
                nama=info.nama if info else "Unknown",
                kamar=(info.kamar if info else None) or "-",
                semester=(info.semester if info else None) or 0,
                pulang_count=len(tally.pulang),
                sakit_count=len(tally.sakit),
                late_return_count=tally.late_returns(),
                latest_reason=latest_pulang.reason if latest_pulang else None,
                latest_complaint=latest_sakit.complaint if latest_sakit else None,
                reason_summary=group_and_count(r.reason for r in tally.pulang if r.reason),
                complaint_summary=group_and_count(r.complaint for r in tally.sakit if r.complaint),
            )
        )

    rows.sort(key=lambda r: r.nama.lower())
    return rows
