from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...common.validators import optional_text
from ...core.enums import IzinStatus, Operation
from ...core.exceptions import AlreadyDecided, InvalidTransition, ValidationError
from ..events import ApplicationRejected, ApprovalRecorded, ReturnVerified
from ..model import Decision, IzinApplication
from ..timeliness import is_on_time
from .base import IzinWorkflow, TransitionResult


class PulangWorkflow(IzinWorkflow):
    """Home leave: ustadzah then ndalem approval, closed by a return check."""

    initial_status = IzinStatus.PENDING_STAFF_APPROVAL

    def approve_supervisor(
        self,
        record: IzinApplication,
        *,
        approved: bool,
        decision: Decision,
        reason: Optional[str] = None,
    ) -> TransitionResult:
        if record.ustadzah_approval is not True:
            raise InvalidTransition("Permohonan belum disetujui ustadzah")
        if record.ndalem_approval is not None:
            raise AlreadyDecided("Permohonan sudah diputuskan oleh ndalem")
        if record.status != IzinStatus.PENDING_SUPERVISOR_APPROVAL:
            raise InvalidTransition(f"Tidak dapat diproses dari status {record.status.value}")

        if approved:
            updated = self._apply(
                record,
                ndalem_approval=True,
                ndalem_decided_by=decision,
                granted_by_name=decision.actor_name,
                granted_by_id=decision.actor_id,
            )
            return TransitionResult(updated, [ApprovalRecorded(updated, "ndalem", decision)])

        note = optional_text(reason)
        updated = self._apply(
            record,
            ndalem_approval=False,
            ndalem_decided_by=decision,
            ndalem_rejection_reason=note,
        )
        return TransitionResult(updated, [ApplicationRejected(updated, "ndalem", decision, note)])

    def verify_return(
        self,
        record: IzinApplication,
        *,
        actual_return_time: datetime,
        decision: Decision,
    ) -> TransitionResult:
        if record.has_returned:
            raise AlreadyDecided("Santri sudah tercatat kembali")
        if not (record.ustadzah_approval is True and record.ndalem_approval is True):
            raise InvalidTransition("Izin pulang belum disetujui lengkap")
        if record.status != IzinStatus.ON_LEAVE:
            raise InvalidTransition(f"Tidak dapat verifikasi kembali dari status {record.status.value}")
        if actual_return_time < record.departure_time:
            raise ValidationError("Waktu kembali tidak boleh sebelum tanggal pulang")

        on_time = is_on_time(record.planned_return_time, actual_return_time)
        updated = self._apply(
            record,
            has_returned=True,
            returned_on_time=on_time,
            actual_return_time=actual_return_time,
            return_verified_by=decision,
        )
        return TransitionResult(updated, [ReturnVerified(updated, decision, on_time, actual_return_time)])

    def verify_recovery(self, record: IzinApplication, *, decision: Decision) -> TransitionResult:
        raise InvalidTransition("Verifikasi sembuh hanya untuk izin sakit")

    def legal_operations(self, record: IzinApplication) -> frozenset[Operation]:
        if record.status == IzinStatus.PENDING_STAFF_APPROVAL:
            return frozenset({Operation.APPROVE_STAFF, Operation.WITHDRAW})
        if record.status == IzinStatus.PENDING_SUPERVISOR_APPROVAL:
            return frozenset({Operation.APPROVE_SUPERVISOR})
        if record.status == IzinStatus.ON_LEAVE:
            return frozenset({Operation.VERIFY_RETURN})
        return frozenset()
