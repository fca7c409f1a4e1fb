"""Keep the resident's presence status in step with the izin workflow."""

from __future__ import annotations

import logging

from ..core.enums import PresenceStatus
from ..izin.events import ApprovalRecorded, EventBus, RecoveryVerified, ReturnVerified
from ..izin.model import IzinSakit
from .repository import SantriRepository

logger = logging.getLogger(__name__)


class SantriPresenceUpdater:
    def __init__(self, santri: SantriRepository):
        self._santri = santri

    def register(self, bus: EventBus) -> None:
        bus.subscribe(ApprovalRecorded, self.on_approval)
        bus.subscribe(ReturnVerified, self.on_closed)
        bus.subscribe(RecoveryVerified, self.on_closed)

    def on_approval(self, event: ApprovalRecorded) -> None:
        record = event.record
        if isinstance(record, IzinSakit):
            self._set(record.santri_id, PresenceStatus.SAKIT, record.izin_id)
        elif event.stage == "ndalem":
            self._set(record.santri_id, PresenceStatus.PULANG, record.izin_id)

    def on_closed(self, event) -> None:
        self._set(event.record.santri_id, PresenceStatus.ADA, None)

    def _set(self, santri_id: str, status: PresenceStatus, izin_id) -> None:
        if not self._santri.set_presence(santri_id, status, izin_id=izin_id):
            logger.warning("Santri %s tidak ditemukan saat memperbarui status kehadiran", santri_id)
            return
        logger.info("Status kehadiran santri %s -> %s", santri_id, status.value)
