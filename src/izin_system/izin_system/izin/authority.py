from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from ..core.enums import Operation, Role
from .model import IzinApplication, IzinPulang, IzinSakit

DEFAULT_GUARDIAN_ROLES = frozenset({Role.WALI_SANTRI})
DEFAULT_STAFF_ROLES = frozenset({Role.PENGURUS, Role.PENGASUH, Role.SUPER_ADMIN})
DEFAULT_SUPERVISOR_ROLES = frozenset({Role.PENGASUH, Role.SUPER_ADMIN})

# Operations that only make sense for one variant.
_VARIANT_ONLY: dict[Operation, type] = {
    Operation.APPROVE_SUPERVISOR: IzinPulang,
    Operation.VERIFY_RETURN: IzinPulang,
    Operation.VERIFY_RECOVERY: IzinSakit,
}


def parse_roles(value: str | Iterable[str]) -> frozenset[Role]:
    """Parse "pengasuh,superAdmin" (or an iterable of role strings) into roles."""
    items = value.split(",") if isinstance(value, str) else value
    return frozenset(Role(v.strip()) for v in items if v and v.strip())


@dataclass(frozen=True)
class AuthorityPolicy:
    """Declarative capability table: which roles may perform which operation."""

    guardian_roles: frozenset[Role] = DEFAULT_GUARDIAN_ROLES
    staff_roles: frozenset[Role] = DEFAULT_STAFF_ROLES
    supervisor_roles: frozenset[Role] = DEFAULT_SUPERVISOR_ROLES
    table: Mapping[Operation, frozenset[Role]] = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "table",
            {
                Operation.CREATE: self.guardian_roles,
                Operation.WITHDRAW: self.guardian_roles,
                Operation.APPROVE_STAFF: self.staff_roles,
                Operation.APPROVE_SUPERVISOR: self.supervisor_roles,
                Operation.VERIFY_RETURN: self.supervisor_roles,
                Operation.VERIFY_RECOVERY: self.supervisor_roles,
            },
        )

    @classmethod
    def from_settings(cls, settings) -> "AuthorityPolicy":
        staff = getattr(settings, "IZIN_STAFF_ROLES", None)
        supervisor = getattr(settings, "IZIN_SUPERVISOR_ROLES", None)
        return cls(
            staff_roles=parse_roles(staff) if staff else DEFAULT_STAFF_ROLES,
            supervisor_roles=parse_roles(supervisor) if supervisor else DEFAULT_SUPERVISOR_ROLES,
        )

    def roles_for(self, operation: Operation) -> frozenset[Role]:
        return self.table.get(operation, frozenset())


DEFAULT_POLICY = AuthorityPolicy()


def can_perform(
    actor_role: Role,
    operation: Operation,
    record: Optional[IzinApplication] = None,
    *,
    policy: AuthorityPolicy = DEFAULT_POLICY,
) -> bool:
    """Pure capability check, evaluated before any transition.

    ``record`` may be omitted for :attr:`Operation.CREATE`; when given, operations
    bound to one variant are refused for the other.
    """
    if actor_role not in policy.roles_for(operation):
        return False

    variant = _VARIANT_ONLY.get(operation)
    if variant is not None and record is not None and not isinstance(record, variant):
        return False
    return True
