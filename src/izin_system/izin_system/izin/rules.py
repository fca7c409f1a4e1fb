"""Status derivation and record invariants.

The persisted ``status`` is redundant with the approval/return fields: it is
always recomputable by :func:`derive_status`. A record whose stored status
disagrees with the derived one is corrupt.
"""

from __future__ import annotations

from ..core.enums import IzinStatus
from ..core.exceptions import CorruptRecordError
from .model import IzinApplication, IzinPulang, IzinSakit


def derive_status(record: IzinApplication) -> IzinStatus:
    if isinstance(record, IzinSakit):
        return _derive_sakit(record)
    return _derive_pulang(record)


def _derive_sakit(record: IzinSakit) -> IzinStatus:
    if record.ustadzah_approval is None:
        return IzinStatus.PENDING_REVIEW
    if record.ustadzah_approval is False:
        return IzinStatus.REJECTED_BY_STAFF
    if record.recovery_verified_by is not None:
        return IzinStatus.RECOVERED
    return IzinStatus.UNDER_SICK_LEAVE


def _derive_pulang(record: IzinPulang) -> IzinStatus:
    if record.ustadzah_approval is None:
        return IzinStatus.PENDING_STAFF_APPROVAL
    if record.ustadzah_approval is False:
        return IzinStatus.REJECTED_BY_STAFF
    if record.ndalem_approval is None:
        return IzinStatus.PENDING_SUPERVISOR_APPROVAL
    if record.ndalem_approval is False:
        return IzinStatus.REJECTED_BY_SUPERVISOR
    if record.has_returned:
        return IzinStatus.RETURNED
    return IzinStatus.ON_LEAVE


def invariant_violations(record: IzinApplication) -> list[str]:
    problems: list[str] = []

    expected = derive_status(record)
    if record.status != expected:
        problems.append(f"status {record.status.value!r} tidak sesuai, seharusnya {expected.value!r}")

    if isinstance(record, IzinPulang):
        if record.ndalem_approval is not None and record.ustadzah_approval is not True:
            problems.append("persetujuan ndalem tercatat sebelum persetujuan ustadzah")
        if record.has_returned is not None and not (
            record.ustadzah_approval is True and record.ndalem_approval is True
        ):
            problems.append("status kembali tercatat sebelum kedua persetujuan")
        if record.has_returned is True:
            if record.actual_return_time is None or record.returned_on_time is None:
                problems.append("data kepulangan tidak lengkap")
        elif record.returned_on_time is not None or record.actual_return_time is not None:
            problems.append("ketepatan waktu tercatat sebelum santri kembali")
        if record.planned_return_time < record.departure_time:
            problems.append("rencana kembali sebelum tanggal pulang")
    elif record.recovery_verified_by is not None and record.ustadzah_approval is not True:
        problems.append("kesembuhan tercatat sebelum disetujui")

    return problems


def ensure_consistent(record: IzinApplication) -> IzinApplication:
    problems = invariant_violations(record)
    if problems:
        raise CorruptRecordError(f"Data izin {record.izin_id} rusak: " + "; ".join(problems))
    return record
