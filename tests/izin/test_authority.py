from __future__ import annotations

from datetime import datetime
from types import SimpleNamespace

import pytest

from src.izin_system.izin_system.core import exceptions
from src.izin_system.izin_system.core.enums import IzinStatus, Operation, Role
from src.izin_system.izin_system.izin.authority import AuthorityPolicy, can_perform, parse_roles
from src.izin_system.izin_system.izin.model import IzinPulang, IzinSakit

SAKIT = IzinSakit(
    izin_id="iz-1",
    santri_id="s-1",
    requested_by="wali-1",
    created_at=datetime(2024, 1, 2, 6, 0),
    status=IzinStatus.PENDING_REVIEW,
    complaint="Demam",
)
PULANG = IzinPulang(
    izin_id="iz-2",
    santri_id="s-1",
    requested_by="wali-1",
    created_at=datetime(2023, 12, 31, 10, 0),
    status=IzinStatus.PENDING_STAFF_APPROVAL,
    reason="Acara Keluarga",
    departure_time=datetime(2024, 1, 1, 8, 0),
    planned_return_time=datetime(2024, 1, 4, 8, 0),
)


@pytest.mark.parametrize(
    "role, operation, expected",
    [
        (Role.WALI_SANTRI, Operation.CREATE, True),
        (Role.PENGURUS, Operation.CREATE, False),
        (Role.WALI_SANTRI, Operation.APPROVE_STAFF, False),
        (Role.PENGURUS, Operation.APPROVE_STAFF, True),
        (Role.PENGASUH, Operation.APPROVE_STAFF, True),
        (Role.PENGURUS, Operation.APPROVE_SUPERVISOR, False),
        (Role.PENGASUH, Operation.APPROVE_SUPERVISOR, True),
        (Role.SUPER_ADMIN, Operation.VERIFY_RETURN, True),
        (Role.PENGURUS, Operation.VERIFY_RETURN, False),
    ],
)
def test_default_capability_table(role, operation, expected):
    assert can_perform(role, operation, PULANG) is expected


def test_create_needs_no_record():
    assert can_perform(Role.WALI_SANTRI, Operation.CREATE) is True


def test_variant_bound_operations_are_refused_for_other_variant():
    assert can_perform(Role.PENGASUH, Operation.APPROVE_SUPERVISOR, SAKIT) is False
    assert can_perform(Role.PENGASUH, Operation.VERIFY_RETURN, SAKIT) is False
    assert can_perform(Role.PENGASUH, Operation.VERIFY_RECOVERY, PULANG) is False
    assert can_perform(Role.PENGASUH, Operation.VERIFY_RECOVERY, SAKIT) is True


def test_parse_roles_accepts_comma_separated_text():
    assert parse_roles(" pengasuh, superAdmin ,") == frozenset({Role.PENGASUH, Role.SUPER_ADMIN})
    assert parse_roles(["pengurus"]) == frozenset({Role.PENGURUS})

    with pytest.raises(ValueError):
        parse_roles("kepala")


def test_policy_from_settings_narrows_staff_stage():
    settings = SimpleNamespace(IZIN_STAFF_ROLES="pengurus", IZIN_SUPERVISOR_ROLES="superAdmin")
    policy = AuthorityPolicy.from_settings(settings)

    assert can_perform(Role.PENGASUH, Operation.APPROVE_STAFF, PULANG, policy=policy) is False
    assert can_perform(Role.PENGURUS, Operation.APPROVE_STAFF, PULANG, policy=policy) is True
    assert policy.roles_for(Operation.APPROVE_SUPERVISOR) == frozenset({Role.SUPER_ADMIN})


def test_policy_from_settings_falls_back_to_defaults():
    policy = AuthorityPolicy.from_settings(SimpleNamespace())
    assert policy.table == AuthorityPolicy().table


def test_error_hierarchy_keeps_domain_and_persistence_apart():
    assert issubclass(exceptions.Unauthorized, exceptions.DomainError)
    assert issubclass(exceptions.AlreadyDecided, exceptions.InvalidTransition)
    assert not issubclass(exceptions.ConflictError, exceptions.DomainError)
    assert not hasattr(exceptions, "AuthorizationError")
