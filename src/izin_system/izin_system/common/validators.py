from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"{field_name} harus berupa teks")
    if not value or not value.strip():
        raise ValidationError(f"{field_name} tidak boleh kosong")
    return value.strip()


def optional_text(value: Optional[str]) -> Optional[str]:
    if value is not None and not isinstance(value, str):
        raise ValidationError("Catatan harus berupa teks")
    return (value or "").strip() or None


def require_not_before(later: datetime, earlier: datetime, message: str) -> None:
    if later < earlier:
        raise ValidationError(message)


def require_date_range(start: date, end: date) -> None:
    if start > end:
        raise ValidationError("Tanggal akhir harus >= tanggal awal")
