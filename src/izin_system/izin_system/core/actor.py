from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .enums import Role


@dataclass(frozen=True)
class Actor:
    """Pengguna yang sedang bertindak, disediakan oleh lapisan autentikasi."""

    user_id: str
    role: Role
    name: Optional[str] = None
    # Untuk wali santri: santri yang terhubung dengan akun ini.
    santri_id: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or self.user_id
