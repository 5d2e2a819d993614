from datetime import datetime, timedelta

import pytest

from src.access_control.attendance import ledger
from src.access_control.attendance.model import AttendanceRecord
from src.access_control.core.enums import AttendanceStatus
from src.access_control.core.exceptions import StateConflict

DAY = datetime(2026, 2, 2)


def at(hour: int, minute: int = 0, second: int = 0) -> datetime:
    return DAY.replace(hour=hour, minute=minute, second=second)


def _assert_invariants(record: AttendanceRecord) -> None:
    open_sessions = [s for s in record.sessions if s.is_open]
    assert len(open_sessions) <= 1
    assert (record.status == AttendanceStatus.ACTIVE) == bool(open_sessions)
    assert record.total_duration_ms == sum(s.duration_ms for s in record.sessions if not s.is_open)


def test_first_clock_in_creates_active_record():
    record = ledger.clock_in(None, identity="E001", display_name="Ada", now=at(9))

    assert record.work_date == DAY.date()
    assert record.status == AttendanceStatus.ACTIVE
    assert record.total_duration_ms == 0
    assert len(record.sessions) == 1
    assert record.sessions[0].is_open
    assert record.sessions[0].clock_in_time == "09:00:00"
    _assert_invariants(record)


def test_full_day_with_lunch_break():
    record = ledger.clock_in(None, identity="E001", display_name="Ada", now=at(9))
    record = ledger.clock_out(record, now=at(12))
    record = ledger.clock_in(record, identity="E001", display_name="Ada", now=at(13))
    record = ledger.clock_out(record, now=at(17))

    assert [s.duration_formatted for s in record.sessions] == ["3h 0m", "4h 0m"]
    assert record.total_duration_ms == 7 * 60 * 60 * 1000
    assert record.total_duration_formatted == "7h 0m"
    assert record.status == AttendanceStatus.COMPLETED
    assert all(not s.is_open for s in record.sessions)
    _assert_invariants(record)


def test_clock_in_after_clock_out_appends_and_keeps_prior_sessions():
    record = ledger.clock_in(None, identity="E001", display_name="Ada", now=at(9))
    record = ledger.clock_out(record, now=at(12))
    before = record.sessions

    record = ledger.clock_in(record, identity="E001", display_name=None, now=at(13))

    assert len(record.sessions) == len(before) + 1
    assert record.sessions[:-1] == before
    assert record.status == AttendanceStatus.ACTIVE
    assert record.display_name == "Ada"
    _assert_invariants(record)


def test_double_clock_in_is_rejected():
    record = ledger.clock_in(None, identity="E001", display_name="Ada", now=at(9))

    with pytest.raises(StateConflict, match="Already clocked in"):
        ledger.clock_in(record, identity="E001", display_name="Ada", now=at(9, 5))


def test_clock_out_without_record_is_rejected():
    with pytest.raises(StateConflict, match="Please clock in first"):
        ledger.clock_out(None, now=at(9))


def test_double_clock_out_is_rejected_and_record_unchanged():
    record = ledger.clock_in(None, identity="E001", display_name="Ada", now=at(9))
    record = ledger.clock_out(record, now=at(12))

    with pytest.raises(StateConflict, match="Already clocked out"):
        ledger.clock_out(record, now=at(12, 30))

    assert record.total_duration_ms == 3 * 60 * 60 * 1000
    assert record.status == AttendanceStatus.COMPLETED


def test_duration_is_truncated_to_whole_minutes():
    record = ledger.clock_in(None, identity="E001", display_name="Ada", now=at(9))
    record = ledger.clock_out(record, now=at(10, 59, 59))

    assert record.sessions[0].duration_formatted == "1h 59m"
    assert record.sessions[0].clock_out_time == "10:59:59"


def test_clock_going_backwards_yields_zero_duration():
    record = ledger.clock_in(None, identity="E001", display_name="Ada", now=at(9))
    record = ledger.clock_out(record, now=at(9) - timedelta(seconds=5))

    assert record.sessions[0].duration_ms == 0
    _assert_invariants(record)


def test_total_never_decreases_over_a_sequence():
    record = None
    totals = []
    events = [("IN", at(8)), ("OUT", at(8, 45)), ("IN", at(9)), ("IN", at(9, 1)), ("OUT", at(11)),
              ("OUT", at(11, 5)), ("IN", at(12)), ("OUT", at(12, 30))]

    for action, moment in events:
        try:
            if action == "IN":
                record = ledger.clock_in(record, identity="E001", display_name="Ada", now=moment)
            else:
                record = ledger.clock_out(record, now=moment)
        except StateConflict:
            pass
        _assert_invariants(record)
        totals.append(record.total_duration_ms)

    assert totals == sorted(totals)
    assert len(record.sessions) == 3
    assert record.total_duration_formatted == "3h 15m"
