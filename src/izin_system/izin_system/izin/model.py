from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from ..core.constants import DEFAULT_OUTSTANDING_BALANCE
from ..core.enums import IzinStatus, IzinType, Role


@dataclass(frozen=True)
class Decision:
    """Jejak audit: siapa yang mencatat keputusan dan kapan."""

    actor_id: str
    actor_name: str
    role: Role
    at: datetime


@dataclass(frozen=True)
class IzinSakit:
    izin_id: Optional[str]
    santri_id: str
    requested_by: str
    created_at: datetime
    status: IzinStatus
    complaint: str
    ustadzah_approval: Optional[bool] = None
    approved_by: Optional[Decision] = None
    rejection_reason: Optional[str] = None
    recovery_verified_by: Optional[Decision] = None
    version: int = 1

    @property
    def izin_type(self) -> IzinType:
        return IzinType.SAKIT

    @property
    def description(self) -> str:
        return self.complaint


@dataclass(frozen=True)
class IzinPulang:
    izin_id: Optional[str]
    santri_id: str
    requested_by: str
    created_at: datetime
    status: IzinStatus
    reason: str
    departure_time: datetime
    planned_return_time: datetime
    ustadzah_approval: Optional[bool] = None
    approved_by: Optional[Decision] = None
    rejection_reason: Optional[str] = None
    ndalem_approval: Optional[bool] = None
    ndalem_decided_by: Optional[Decision] = None
    ndalem_rejection_reason: Optional[str] = None
    granted_by_name: Optional[str] = None
    granted_by_id: Optional[str] = None
    has_returned: Optional[bool] = None
    returned_on_time: Optional[bool] = None
    actual_return_time: Optional[datetime] = None
    return_verified_by: Optional[Decision] = None
    outstanding_balance: int = DEFAULT_OUTSTANDING_BALANCE
    version: int = 1

    @property
    def izin_type(self) -> IzinType:
        return IzinType.PULANG

    @property
    def description(self) -> str:
        return self.reason


IzinApplication = Union[IzinSakit, IzinPulang]
