from __future__ import annotations

import logging
from typing import Optional, Protocol

from ..izin.events import ApplicationRejected, ApprovalRecorded, EventBus, RecoveryVerified, ReturnVerified
from ..santri.repository import SantriRepository
from .messages import approval_message, recovery_message, rejection_message, return_message
from .model import NotificationMessage

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Delivery channel (e.g. a messaging app); only receives the payload."""

    def send(self, message: NotificationMessage) -> None:
        raise NotImplementedError


class LoggingNotifier:
    def send(self, message: NotificationMessage) -> None:
        logger.info("Notifikasi untuk %s: %s", message.recipient_id, message.body)


class NotificationDispatcher:
    """Turns izin events into guardian messages and hands them to a notifier."""

    def __init__(self, notifier: Notifier, santri: Optional[SantriRepository] = None):
        self._notifier = notifier
        self._santri = santri

    def register(self, bus: EventBus) -> None:
        bus.subscribe(ApprovalRecorded, lambda e: self._send(approval_message, e))
        bus.subscribe(ApplicationRejected, lambda e: self._send(rejection_message, e))
        bus.subscribe(ReturnVerified, lambda e: self._send(return_message, e))
        bus.subscribe(RecoveryVerified, lambda e: self._send(recovery_message, e))

    def _santri_name(self, santri_id: str) -> Optional[str]:
        if not self._santri:
            return None
        santri = self._santri.get_by_id(santri_id)
        return santri.nama if santri else None

    def _send(self, build, event) -> None:
        message = build(event, self._santri_name(event.record.santri_id))
        self._notifier.send(message)
