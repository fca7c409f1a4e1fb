"""Domain events raised by izin transitions.

Side effects that are not part of the workflow itself (resident presence,
invoice counters, notifications) subscribe to these instead of being inlined
into the transition functions.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Union

from ..core.enums import IzinType
from .model import Decision, IzinApplication

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApprovalRecorded:
    """A staff or supervisor approval has been recorded."""

    record: IzinApplication
    stage: str  # "ustadzah" | "ndalem"
    decision: Decision


@dataclass(frozen=True)
class ApplicationRejected:
    record: IzinApplication
    stage: str
    decision: Decision
    reason: Optional[str]


@dataclass(frozen=True)
class ReturnVerified:
    record: IzinApplication
    decision: Decision
    returned_on_time: bool
    actual_return_time: datetime


@dataclass(frozen=True)
class RecoveryVerified:
    record: IzinApplication
    decision: Decision


@dataclass(frozen=True)
class ApplicationWithdrawn:
    izin_id: str
    santri_id: str
    izin_type: IzinType


IzinEvent = Union[ApprovalRecorded, ApplicationRejected, ReturnVerified, RecoveryVerified, ApplicationWithdrawn]

Handler = Callable[[IzinEvent], None]


class EventBus:
    """In-process publish/subscribe for izin events.

    Events are published after the record has been saved, so a failing
    subscriber is logged and does not undo the transition.
    """

    def __init__(self) -> None:
        self._handlers: dict[type, list[Handler]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: Handler) -> None:
        self._handlers[event_type].append(handler)

    def publish(self, event: IzinEvent) -> None:
        for handler in list(self._handlers.get(type(event), [])):
            try:
                handler(event)
            except Exception:
                logger.exception("Handler %r gagal memproses %s", handler, type(event).__name__)

    def publish_all(self, events) -> None:
        for event in events:
            self.publish(event)
