from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional

from ...common.validators import optional_text
from ...core.actor import Actor
from ...core.enums import IzinStatus, Operation
from ...core.exceptions import AlreadyDecided, InvalidTransition, NotWithdrawable
from ..events import ApplicationRejected, ApplicationWithdrawn, ApprovalRecorded, IzinEvent
from ..model import Decision, IzinApplication
from ..rules import derive_status


@dataclass(frozen=True)
class TransitionResult:
    record: IzinApplication
    events: list[IzinEvent] = field(default_factory=list)


class IzinWorkflow(ABC):
    """Strategy Pattern: the state machine of one izin variant.

    Records are immutable; every transition returns a new record (with a
    re-derived status) or raises before anything is changed.
    """

    initial_status: IzinStatus

    def approve_staff(
        self,
        record: IzinApplication,
        *,
        approved: bool,
        decision: Decision,
        reason: Optional[str] = None,
    ) -> TransitionResult:
        if record.ustadzah_approval is not None:
            raise AlreadyDecided("Permohonan sudah diputuskan oleh ustadzah")
        if record.status != self.initial_status:
            raise InvalidTransition(f"Tidak dapat diproses dari status {record.status.value}")

        if approved:
            updated = self._apply(record, ustadzah_approval=True, approved_by=decision)
            return TransitionResult(updated, [ApprovalRecorded(updated, "ustadzah", decision)])

        note = optional_text(reason)
        updated = self._apply(record, ustadzah_approval=False, approved_by=decision, rejection_reason=note)
        return TransitionResult(updated, [ApplicationRejected(updated, "ustadzah", decision, note)])

    @abstractmethod
    def approve_supervisor(
        self,
        record: IzinApplication,
        *,
        approved: bool,
        decision: Decision,
        reason: Optional[str] = None,
    ) -> TransitionResult:
        raise NotImplementedError

    @abstractmethod
    def verify_return(
        self,
        record: IzinApplication,
        *,
        actual_return_time: datetime,
        decision: Decision,
    ) -> TransitionResult:
        raise NotImplementedError

    @abstractmethod
    def verify_recovery(self, record: IzinApplication, *, decision: Decision) -> TransitionResult:
        raise NotImplementedError

    @abstractmethod
    def legal_operations(self, record: IzinApplication) -> frozenset[Operation]:
        """Operations whose state precondition holds for ``record``."""
        raise NotImplementedError

    def withdraw(self, record: IzinApplication, *, actor: Actor) -> TransitionResult:
        if not self.is_withdrawable(record):
            raise NotWithdrawable("Permohonan hanya dapat dibatalkan sebelum diproses")
        if actor.user_id != record.requested_by:
            raise NotWithdrawable("Hanya pengaju yang dapat membatalkan permohonan")
        return TransitionResult(
            record,
            [ApplicationWithdrawn(izin_id=record.izin_id, santri_id=record.santri_id, izin_type=record.izin_type)],
        )

    def is_withdrawable(self, record: IzinApplication) -> bool:
        return record.status == self.initial_status and record.ustadzah_approval is None

    @staticmethod
    def _apply(record: IzinApplication, **changes) -> IzinApplication:
        updated = replace(record, **changes)
        return replace(updated, status=derive_status(updated))
