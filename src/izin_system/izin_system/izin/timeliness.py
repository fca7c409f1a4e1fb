from __future__ import annotations

from datetime import datetime
from typing import Iterable

from ..core.enums import IzinStatus
from .model import IzinApplication, IzinPulang


def is_on_time(planned_return_time: datetime, actual_return_time: datetime) -> bool:
    """Returning exactly at the planned time still counts as on time."""
    return actual_return_time <= planned_return_time


def days_late(planned_return_time: datetime, at: datetime) -> int:
    """Whole days past the planned return (0 when not late by a full day)."""
    if at <= planned_return_time:
        return 0
    return (at - planned_return_time).days


def overdue_returns(records: Iterable[IzinApplication], now: datetime) -> list[IzinPulang]:
    """Residents still away whose planned return has passed, most overdue first."""
    overdue = [
        r
        for r in records
        if isinstance(r, IzinPulang)
        and r.status == IzinStatus.ON_LEAVE
        and not r.has_returned
        and r.planned_return_time < now
    ]
    overdue.sort(key=lambda r: r.planned_return_time)
    return overdue
