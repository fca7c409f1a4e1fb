from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Peran pengguna untuk pemeriksaan hak akses."""

    WALI_SANTRI = "waliSantri"
    PENGURUS = "pengurus"
    PENGASUH = "pengasuh"
    SUPER_ADMIN = "superAdmin"


class IzinType(str, Enum):
    SAKIT = "Sakit"
    PULANG = "Pulang"


class IzinStatus(str, Enum):
    """Status permohonan izin yang disimpan di basis data."""

    # Sakit
    PENDING_REVIEW = "Menunggu Diperiksa Ustadzah"
    UNDER_SICK_LEAVE = "Dalam Masa Sakit"
    RECOVERED = "Sudah Sembuh"

    # Pulang
    PENDING_STAFF_APPROVAL = "Menunggu Persetujuan Ustadzah"
    PENDING_SUPERVISOR_APPROVAL = "Menunggu Persetujuan Ndalem"
    ON_LEAVE = "Proses Pulang"
    RETURNED = "Sudah Kembali"

    # Both tracks
    REJECTED_BY_STAFF = "Ditolak Ustadzah"
    REJECTED_BY_SUPERVISOR = "Ditolak Ndalem"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset(
    {
        IzinStatus.RECOVERED,
        IzinStatus.RETURNED,
        IzinStatus.REJECTED_BY_STAFF,
        IzinStatus.REJECTED_BY_SUPERVISOR,
    }
)

INITIAL_STATUSES = frozenset({IzinStatus.PENDING_REVIEW, IzinStatus.PENDING_STAFF_APPROVAL})

ONGOING_STATUSES = frozenset({IzinStatus.UNDER_SICK_LEAVE, IzinStatus.ON_LEAVE})


class Operation(str, Enum):
    """Operasi yang dapat dilakukan terhadap sebuah permohonan izin."""

    CREATE = "create"
    APPROVE_STAFF = "approve_staff"
    APPROVE_SUPERVISOR = "approve_supervisor"
    VERIFY_RETURN = "verify_return"
    VERIFY_RECOVERY = "verify_recovery"
    WITHDRAW = "withdraw"


class LeavePhase(str, Enum):
    AWAITING_DEPARTURE = "AWAITING_DEPARTURE"
    ON_LEAVE = "ON_LEAVE"


class PresenceStatus(str, Enum):
    """Status kehadiran santri di asrama."""

    ADA = "Ada"
    SAKIT = "Sakit"
    PULANG = "Pulang"
