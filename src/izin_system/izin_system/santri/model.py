from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import PresenceStatus


@dataclass(frozen=True)
class Santri:
    """Entitas domain: santri (penghuni asrama).

    Objek data murni, tanpa kode akses basis data.
    """

    santri_id: str
    nama: str
    kamar: Optional[str] = None
    semester: Optional[int] = None
    status_kehadiran: PresenceStatus = PresenceStatus.ADA
