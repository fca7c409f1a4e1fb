from __future__ import annotations

from typing import Iterable, Optional, Protocol

from ..core.enums import PresenceStatus
from .model import Santri


class SantriRepository(Protocol):
    """Antarmuka repository untuk santri.

    Catatan (DIP): lapisan service bergantung pada antarmuka ini, bukan pada basis data tertentu.
    """

    def get_by_id(self, santri_id: str) -> Optional[Santri]:
        raise NotImplementedError

    def get_many(self, santri_ids: Iterable[str]) -> dict[str, Santri]:
        raise NotImplementedError

    def set_presence(self, santri_id: str, status: PresenceStatus, *, izin_id: Optional[str] = None) -> bool:
        raise NotImplementedError
