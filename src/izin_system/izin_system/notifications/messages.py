"""Build guardian-facing message text from izin records."""

from __future__ import annotations

from typing import Optional

from ..common.datetime_utils import format_datetime
from ..izin.events import ApplicationRejected, ApprovalRecorded, RecoveryVerified, ReturnVerified
from ..izin.model import IzinApplication, IzinPulang
from .model import NotificationMessage


def _label(record: IzinApplication) -> str:
    return f"Izin {record.izin_type.value.lower()}"


def _header(record: IzinApplication, santri_name: Optional[str]) -> str:
    who = santri_name or record.santri_id
    return f"Assalamu'alaikum. {_label(record)} untuk santri {who}"


def approval_message(event: ApprovalRecorded, santri_name: Optional[str] = None) -> NotificationMessage:
    record = event.record
    if isinstance(record, IzinPulang):
        if event.stage == "ustadzah":
            body = f"{_header(record, santri_name)} telah disetujui ustadzah dan menunggu persetujuan ndalem."
        else:
            body = (
                f"{_header(record, santri_name)} telah disetujui oleh {event.decision.actor_name}. "
                f"Tanggal pulang {format_datetime(record.departure_time)}, "
                f"rencana kembali {format_datetime(record.planned_return_time)}."
            )
    else:
        body = f"{_header(record, santri_name)} telah disetujui. Keluhan: {record.complaint}."
    return NotificationMessage(recipient_id=record.requested_by, body=body)


def rejection_message(event: ApplicationRejected, santri_name: Optional[str] = None) -> NotificationMessage:
    who = "ustadzah" if event.stage == "ustadzah" else "ndalem"
    body = f"{_header(event.record, santri_name)} ditolak oleh {who}."
    if event.reason:
        body += f" Alasan: {event.reason}"
    return NotificationMessage(recipient_id=event.record.requested_by, body=body)


def return_message(event: ReturnVerified, santri_name: Optional[str] = None) -> NotificationMessage:
    timing = "tepat waktu" if event.returned_on_time else "terlambat dari rencana"
    body = (
        f"{_header(event.record, santri_name)}: santri sudah kembali ke asrama pada "
        f"{format_datetime(event.actual_return_time)} ({timing})."
    )
    return NotificationMessage(recipient_id=event.record.requested_by, body=body)


def recovery_message(event: RecoveryVerified, santri_name: Optional[str] = None) -> NotificationMessage:
    body = f"{_header(event.record, santri_name)}: santri sudah dinyatakan sembuh."
    return NotificationMessage(recipient_id=event.record.requested_by, body=body)
