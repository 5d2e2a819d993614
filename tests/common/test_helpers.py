import base64
from datetime import date

import pytest

from src.access_control.common.datetime_utils import format_duration, month_range
from src.access_control.common.template_codec import decode_template, encode_template
from src.access_control.core.exceptions import ValidationError


@pytest.mark.parametrize(
    "ms, expected",
    [(0, "0h 0m"), (59_999, "0h 0m"), (60_000, "0h 1m"), (3 * 3_600_000 + 59 * 60_000 + 59_999, "3h 59m")],
)
def test_format_duration_truncates(ms, expected):
    assert format_duration(ms) == expected


def test_month_range_handles_leap_years():
    assert month_range(2, 2028) == (date(2028, 2, 1), date(2028, 2, 29))
    assert month_range(12, 2026) == (date(2026, 12, 1), date(2026, 12, 31))


def test_decode_template_accepts_wire_formats():
    raw = bytes([1, 2, 250])

    assert decode_template(base64.b64encode(raw).decode()) == raw
    assert decode_template({"type": "Buffer", "data": [1, 2, 250]}) == raw
    assert decode_template([1, 2, 250]) == raw
    assert decode_template(None) is None
    assert encode_template(raw) == base64.b64encode(raw).decode()


@pytest.mark.parametrize("value", ["not base64!!", [1, 999], 12.5])
def test_decode_template_rejects_garbage(value):
    with pytest.raises(ValidationError):
        decode_template(value)
