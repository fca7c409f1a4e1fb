from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Optional

from ..common.datetime_utils import end_of_day, now_local, start_of_day
from ..common.validators import optional_text, require_date_range, require_non_empty, require_not_before
from ..core.actor import Actor
from ..core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_LIST_LIMIT, MAX_HISTORY_DAYS
from ..core.enums import INITIAL_STATUSES, ONGOING_STATUSES, TERMINAL_STATUSES, IzinStatus, Operation
from ..core.exceptions import Unauthorized, ValidationError
from . import engine
from .authority import DEFAULT_POLICY, AuthorityPolicy, can_perform
from .events import EventBus
from .model import IzinApplication, IzinPulang, IzinSakit
from .repository import IzinRepository
from .rules import ensure_consistent
from .timeliness import overdue_returns
from .workflows.base import TransitionResult

logger = logging.getLogger(__name__)


def _newest_first(records) -> list[IzinApplication]:
    return sorted(records, key=lambda r: r.created_at, reverse=True)


class IzinService:
    """Application service for the izin sakit/pulang workflow.

    Every transition re-reads the record, checks its invariants and the actor's
    authority, runs the pure transition, then saves conditionally on the version
    that was read. A concurrent writer surfaces as ``ConflictError``; nothing is
    retried here.
    """

    def __init__(
        self,
        izin: IzinRepository,
        *,
        events: Optional[EventBus] = None,
        policy: Optional[AuthorityPolicy] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._izin = izin
        self._events = events or EventBus()
        self._policy = policy or DEFAULT_POLICY
        self._clock = clock

    def _authorize(self, actor: Actor, operation: Operation, record: Optional[IzinApplication] = None) -> None:
        if not can_perform(actor.role, operation, record, policy=self._policy):
            logger.warning("Ditolak: %s (%s) mencoba %s", actor.user_id, actor.role.value, operation.value)
            raise Unauthorized("Anda tidak memiliki hak untuk tindakan ini")

    def _authorize_create(self, actor: Actor, santri_id: str) -> str:
        self._authorize(actor, Operation.CREATE)
        santri_id = require_non_empty(santri_id, "Santri")
        if actor.santri_id and actor.santri_id != santri_id:
            raise Unauthorized("Anda hanya dapat mengajukan izin untuk santri Anda sendiri")
        return santri_id

    # -------- Creation --------
    def create_sakit(self, *, actor: Actor, santri_id: str, complaint: str) -> str:
        santri_id = self._authorize_create(actor, santri_id)
        record = IzinSakit(
            izin_id=None,
            santri_id=santri_id,
            requested_by=actor.user_id,
            created_at=self._clock(),
            status=IzinStatus.PENDING_REVIEW,
            complaint=require_non_empty(complaint, "Keluhan"),
        )
        izin_id = self._izin.insert(ensure_consistent(record))
        logger.info("Izin sakit %s dibuat untuk santri %s oleh %s", izin_id, santri_id, actor.user_id)
        return izin_id

    def create_pulang(
        self,
        *,
        actor: Actor,
        santri_id: str,
        reason: str,
        departure_time: datetime,
        planned_return_time: datetime,
    ) -> str:
        santri_id = self._authorize_create(actor, santri_id)
        reason = require_non_empty(reason, "Alasan")
        require_not_before(planned_return_time, departure_time, "Rencana kembali tidak boleh sebelum tanggal pulang")

        record = IzinPulang(
            izin_id=None,
            santri_id=santri_id,
            requested_by=actor.user_id,
            created_at=self._clock(),
            status=IzinStatus.PENDING_STAFF_APPROVAL,
            reason=reason,
            departure_time=departure_time,
            planned_return_time=planned_return_time,
        )
        izin_id = self._izin.insert(ensure_consistent(record))
        logger.info("Izin pulang %s dibuat untuk santri %s oleh %s", izin_id, santri_id, actor.user_id)
        return izin_id

    # -------- Transitions --------
    def _transition(
        self,
        *,
        actor: Actor,
        izin_id: str,
        operation: Operation,
        step: Callable[[IzinApplication], TransitionResult],
    ) -> IzinApplication:
        record = ensure_consistent(self._izin.load_by_id(izin_id))
        self._authorize(actor, operation, record)

        result = step(record)
        new_version = self._izin.save(result.record, expected_version=record.version)
        saved = replace(result.record, version=new_version)
        logger.info(
            "Izin %s: %s oleh %s, %s -> %s",
            izin_id,
            operation.value,
            actor.user_id,
            record.status.value,
            saved.status.value,
        )

        self._events.publish_all(replace(e, record=saved) for e in result.events)
        return saved

    def approve_staff(self, *, actor: Actor, izin_id: str, approved: bool, reason: str = "") -> IzinApplication:
        decision = engine.make_decision(actor, self._clock())
        return self._transition(
            actor=actor,
            izin_id=izin_id,
            operation=Operation.APPROVE_STAFF,
            step=lambda r: engine.approve_staff(r, approved, reason, decision=decision),
        )

    def approve_supervisor(self, *, actor: Actor, izin_id: str, approved: bool, reason: str = "") -> IzinApplication:
        decision = engine.make_decision(actor, self._clock())
        return self._transition(
            actor=actor,
            izin_id=izin_id,
            operation=Operation.APPROVE_SUPERVISOR,
            step=lambda r: engine.approve_supervisor(r, approved, reason, decision=decision),
        )

    def verify_return(
        self,
        *,
        actor: Actor,
        izin_id: str,
        actual_return_time: Optional[datetime] = None,
    ) -> IzinApplication:
        now = self._clock()
        decision = engine.make_decision(actor, now)
        returned_at = actual_return_time or now
        return self._transition(
            actor=actor,
            izin_id=izin_id,
            operation=Operation.VERIFY_RETURN,
            step=lambda r: engine.verify_return(r, returned_at, decision=decision),
        )

    def verify_recovery(self, *, actor: Actor, izin_id: str) -> IzinApplication:
        decision = engine.make_decision(actor, self._clock())
        return self._transition(
            actor=actor,
            izin_id=izin_id,
            operation=Operation.VERIFY_RECOVERY,
            step=lambda r: engine.verify_recovery(r, decision=decision),
        )

    def withdraw(self, *, actor: Actor, izin_id: str) -> None:
        record = ensure_consistent(self._izin.load_by_id(izin_id))
        self._authorize(actor, Operation.WITHDRAW, record)

        result = engine.withdraw(record, actor)
        self._izin.delete(izin_id, expected_version=record.version)
        logger.info("Izin %s dibatalkan oleh %s", izin_id, actor.user_id)
        self._events.publish_all(result.events)

    # -------- Queries --------
    def get(self, *, izin_id: str) -> IzinApplication:
        return self._izin.load_by_id(izin_id)

    def available_operations(self, *, actor: Actor, izin_id: str) -> frozenset[Operation]:
        record = self._izin.load_by_id(izin_id)
        ops = engine.available_operations(record, actor.role, policy=self._policy)
        if Operation.WITHDRAW in ops and record.requested_by != actor.user_id:
            ops = ops - {Operation.WITHDRAW}
        return ops

    def list_for_santri(self, *, santri_id: str) -> list[IzinApplication]:
        return _newest_first(self._izin.query_by_santri(santri_id))

    def _list_statuses(self, statuses, *, limit: Optional[int] = DEFAULT_LIST_LIMIT) -> list[IzinApplication]:
        records: list[IzinApplication] = []
        for status in statuses:
            records.extend(self._izin.query_by_status(status, limit=limit))
        return _newest_first(records)

    def list_pending_staff(self) -> list[IzinApplication]:
        return self._list_statuses(INITIAL_STATUSES)

    def list_pending_supervisor(self) -> list[IzinApplication]:
        return self._list_statuses([IzinStatus.PENDING_SUPERVISOR_APPROVAL])

    def list_ongoing(self) -> list[IzinApplication]:
        return self._list_statuses(ONGOING_STATUSES)

    def list_history(self, *, start: Optional[date] = None, end: Optional[date] = None) -> list[IzinApplication]:
        if start is None or end is None:
            statuses = sorted(TERMINAL_STATUSES, key=lambda s: s.value)
            return self._list_statuses(statuses, limit=DEFAULT_HISTORY_LIMIT)[:DEFAULT_HISTORY_LIMIT]

        require_date_range(start, end)
        if (end - start).days > MAX_HISTORY_DAYS:
            raise ValidationError(f"Rentang tanggal tidak boleh lebih dari {MAX_HISTORY_DAYS} hari")

        lo, hi = start_of_day(start), end_of_day(end)
        records = self._izin.query_by_date_range(lo, hi)
        return _newest_first(r for r in records if r.status.is_terminal and lo <= r.created_at <= hi)

    def list_overdue_returns(self, *, now: Optional[datetime] = None) -> list[IzinPulang]:
        records = self._izin.query_by_status(IzinStatus.ON_LEAVE)
        return overdue_returns(records, now or self._clock())

    @staticmethod
    def rejection_note(record: IzinApplication) -> Optional[str]:
        if isinstance(record, IzinPulang) and record.ndalem_approval is False:
            return optional_text(record.ndalem_rejection_reason)
        return optional_text(record.rejection_reason)
