from __future__ import annotations

from datetime import datetime

from src.izin_system.izin_system.core.enums import IzinStatus, PresenceStatus, Role
from src.izin_system.izin_system.izin.events import ApprovalRecorded, EventBus, RecoveryVerified
from src.izin_system.izin_system.izin.model import Decision, IzinPulang, IzinSakit
from src.izin_system.izin_system.santri.presence import SantriPresenceUpdater

DECISION = Decision(actor_id="u-1", actor_name="Ustadzah Aisyah", role=Role.PENGURUS, at=datetime(2024, 1, 1, 7, 0))


class FakeSantriRepo:
    def __init__(self, known):
        self.known = set(known)
        self.calls = []

    def set_presence(self, santri_id, status, *, izin_id=None):
        self.calls.append((santri_id, status, izin_id))
        return santri_id in self.known


def _sakit(santri_id="s-1"):
    return IzinSakit(
        izin_id="iz-1",
        santri_id=santri_id,
        requested_by="wali-1",
        created_at=datetime(2024, 1, 1),
        status=IzinStatus.UNDER_SICK_LEAVE,
        complaint="Demam",
        ustadzah_approval=True,
    )


def test_staff_approval_of_pulang_does_not_change_presence():
    repo = FakeSantriRepo({"s-1"})
    bus = EventBus()
    SantriPresenceUpdater(repo).register(bus)
    pulang = IzinPulang(
        izin_id="iz-2",
        santri_id="s-1",
        requested_by="wali-1",
        created_at=datetime(2023, 12, 31),
        status=IzinStatus.PENDING_SUPERVISOR_APPROVAL,
        reason="Acara Keluarga",
        departure_time=datetime(2024, 1, 1, 8),
        planned_return_time=datetime(2024, 1, 4, 8),
        ustadzah_approval=True,
    )

    bus.publish(ApprovalRecorded(pulang, "ustadzah", DECISION))

    assert repo.calls == []


def test_sick_leave_opens_and_recovery_closes_presence():
    repo = FakeSantriRepo({"s-1"})
    bus = EventBus()
    SantriPresenceUpdater(repo).register(bus)

    bus.publish(ApprovalRecorded(_sakit(), "ustadzah", DECISION))
    bus.publish(RecoveryVerified(_sakit(), DECISION))

    assert repo.calls == [("s-1", PresenceStatus.SAKIT, "iz-1"), ("s-1", PresenceStatus.ADA, None)]


def test_missing_santri_is_logged(caplog):
    repo = FakeSantriRepo(set())
    updater = SantriPresenceUpdater(repo)

    updater.on_approval(ApprovalRecorded(_sakit("s-404"), "ustadzah", DECISION))

    assert "s-404" in caplog.text
