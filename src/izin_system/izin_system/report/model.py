from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class IzinReportRow:
    santri_id: str
    nama: str
    kamar: str
    semester: int
    pulang_count: int
    sakit_count: int
    late_return_count: int
    latest_reason: Optional[str]
    latest_complaint: Optional[str]
    reason_summary: str
    complaint_summary: str
