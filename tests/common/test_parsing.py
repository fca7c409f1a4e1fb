from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from src.izin_system.izin_system.common.datetime_utils import parse_iso_datetime
from src.izin_system.izin_system.common.validators import optional_text, require_non_empty
from src.izin_system.izin_system.core.exceptions import ValidationError


def test_naive_value_is_kept_as_is():
    assert parse_iso_datetime(" 2024-01-04T08:00 ") == datetime(2024, 1, 4, 8, 0)


@pytest.mark.parametrize(
    "text, aware",
    [
        ("2024-01-04T09:00+07:00", datetime(2024, 1, 4, 9, 0, tzinfo=timezone(timedelta(hours=7)))),
        ("2024-01-04T08:00Z", datetime(2024, 1, 4, 8, 0, tzinfo=timezone.utc)),
    ],
)
def test_offset_value_becomes_naive_local_time(text, aware):
    parsed = parse_iso_datetime(text)

    assert parsed.tzinfo is None
    assert parsed == aware.astimezone().replace(tzinfo=None)
    # comparable with naive record times
    assert parsed > datetime(2024, 1, 1, 8, 0)


@pytest.mark.parametrize("value", [1704096000, None, "kemarin", ""])
def test_bad_datetime_is_validation_error(value):
    with pytest.raises(ValidationError):
        parse_iso_datetime(value)


def test_non_text_fields_are_validation_errors():
    with pytest.raises(ValidationError):
        require_non_empty(5, "Keluhan")
    with pytest.raises(ValidationError):
        optional_text(12)

    assert optional_text(None) is None
    assert require_non_empty("  Demam ", "Keluhan") == "Demam"
