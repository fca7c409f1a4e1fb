from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import IzinStatus, Operation
from ...core.exceptions import InvalidTransition
from ..events import RecoveryVerified
from ..model import Decision, IzinApplication
from .base import IzinWorkflow, TransitionResult


class SakitWorkflow(IzinWorkflow):
    """Sick leave: one approval stage, closed by a recovery check."""

    initial_status = IzinStatus.PENDING_REVIEW

    def approve_supervisor(
        self,
        record: IzinApplication,
        *,
        approved: bool,
        decision: Decision,
        reason: Optional[str] = None,
    ) -> TransitionResult:
        raise InvalidTransition("Izin sakit tidak memerlukan persetujuan ndalem")

    def verify_return(
        self,
        record: IzinApplication,
        *,
        actual_return_time: datetime,
        decision: Decision,
    ) -> TransitionResult:
        raise InvalidTransition("Verifikasi kembali hanya untuk izin pulang")

    def verify_recovery(self, record: IzinApplication, *, decision: Decision) -> TransitionResult:
        if record.status != IzinStatus.UNDER_SICK_LEAVE or record.ustadzah_approval is not True:
            raise InvalidTransition(f"Tidak dapat verifikasi sembuh dari status {record.status.value}")

        updated = self._apply(record, recovery_verified_by=decision)
        return TransitionResult(updated, [RecoveryVerified(updated, decision)])

    def legal_operations(self, record: IzinApplication) -> frozenset[Operation]:
        if record.status == IzinStatus.PENDING_REVIEW:
            return frozenset({Operation.APPROVE_STAFF, Operation.WITHDRAW})
        if record.status == IzinStatus.UNDER_SICK_LEAVE:
            return frozenset({Operation.VERIFY_RECOVERY})
        return frozenset()
