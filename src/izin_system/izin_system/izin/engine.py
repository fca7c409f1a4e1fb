"""Transition engine: the izin state machine as pure functions.

Each function validates the record's current state, and either returns a
:class:`TransitionResult` holding the new record plus the domain events it
raised, or raises (``InvalidTransition``, ``AlreadyDecided``,
``NotWithdrawable``, ``ValidationError``) without changing anything. Authority
checks live in :mod:`.authority` and are applied by the service before these
are called.

Sakit:  PENDING_REVIEW -> UNDER_SICK_LEAVE -> RECOVERED
                       \\-> REJECTED_BY_STAFF
Pulang: PENDING_STAFF_APPROVAL -> PENDING_SUPERVISOR_APPROVAL -> ON_LEAVE -> RETURNED
                       \\-> REJECTED_BY_STAFF   \\-> REJECTED_BY_SUPERVISOR
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.actor import Actor
from ..core.enums import IzinStatus, LeavePhase, Operation, Role
from .authority import DEFAULT_POLICY, AuthorityPolicy, can_perform
from .factory import IzinWorkflowFactory
from .model import Decision, IzinApplication, IzinPulang
from .workflows.base import TransitionResult

_factory = IzinWorkflowFactory()


def make_decision(actor: Actor, at: datetime) -> Decision:
    return Decision(actor_id=actor.user_id, actor_name=actor.display_name, role=actor.role, at=at)


def approve_staff(
    record: IzinApplication,
    approved: bool,
    reason: Optional[str] = None,
    *,
    decision: Decision,
) -> TransitionResult:
    return _factory.for_record(record).approve_staff(record, approved=approved, decision=decision, reason=reason)


def approve_supervisor(
    record: IzinApplication,
    approved: bool,
    reason: Optional[str] = None,
    *,
    decision: Decision,
) -> TransitionResult:
    return _factory.for_record(record).approve_supervisor(
        record, approved=approved, decision=decision, reason=reason
    )


def verify_return(record: IzinApplication, actual_return_time: datetime, *, decision: Decision) -> TransitionResult:
    return _factory.for_record(record).verify_return(
        record, actual_return_time=actual_return_time, decision=decision
    )


def verify_recovery(record: IzinApplication, *, decision: Decision) -> TransitionResult:
    return _factory.for_record(record).verify_recovery(record, decision=decision)


def withdraw(record: IzinApplication, actor: Actor) -> TransitionResult:
    return _factory.for_record(record).withdraw(record, actor=actor)


def legal_operations(record: IzinApplication) -> frozenset[Operation]:
    return _factory.for_record(record).legal_operations(record)


def available_operations(
    record: IzinApplication,
    role: Role,
    *,
    policy: AuthorityPolicy = DEFAULT_POLICY,
) -> frozenset[Operation]:
    """Operations legal from the record's state that ``role`` may also perform."""
    return frozenset(op for op in legal_operations(record) if can_perform(role, op, record, policy=policy))


def leave_phase(record: IzinPulang, now: datetime) -> Optional[LeavePhase]:
    """Refine ``ON_LEAVE`` by the clock; None for any other status."""
    if record.status != IzinStatus.ON_LEAVE:
        return None
    if now < record.departure_time:
        return LeavePhase.AWAITING_DEPARTURE
    return LeavePhase.ON_LEAVE
