"""Session state machine for one identity's day.

A day record moves NO_RECORD -> ACTIVE -> COMPLETED -> ACTIVE -> ...; each
session moves OPEN -> CLOSED. The functions here are pure: they take the
current record (or None) and return the complete next record, raising
``StateConflict`` without touching anything when a precondition fails.
Persisting the result is the caller's job.
"""
from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Iterable, Optional

from ..common.datetime_utils import elapsed_ms, format_duration, time_of_day
from ..core.enums import AttendanceStatus
from ..core.exceptions import StateConflict
from .model import AttendanceRecord, WorkSession

ALREADY_CLOCKED_IN = "Already clocked in"
NOT_CLOCKED_IN = "Please clock in first"
ALREADY_CLOCKED_OUT = "Already clocked out"


def total_closed_duration(sessions: Iterable[WorkSession]) -> int:
    return sum(s.duration_ms or 0 for s in sessions if not s.is_open)


def derive_status(sessions: Iterable[WorkSession]) -> AttendanceStatus:
    if any(s.is_open for s in sessions):
        return AttendanceStatus.ACTIVE
    return AttendanceStatus.COMPLETED


def clock_in(
    record: Optional[AttendanceRecord],
    *,
    identity: str,
    display_name: Optional[str],
    now: datetime,
) -> AttendanceRecord:
    if record is not None and record.open_session is not None:
        raise StateConflict(ALREADY_CLOCKED_IN)

    session = WorkSession(clock_in=now, clock_in_time=time_of_day(now))

    if record is None:
        return AttendanceRecord(
            identity=identity,
            display_name=display_name,
            work_date=now.date(),
            sessions=(session,),
            total_duration_ms=0,
            status=AttendanceStatus.ACTIVE,
            created_at=now,
            updated_at=now,
        )

    sessions = record.sessions + (session,)
    return replace(
        record,
        display_name=display_name or record.display_name,
        sessions=sessions,
        status=AttendanceStatus.ACTIVE,
        updated_at=now,
    )


def clock_out(record: Optional[AttendanceRecord], *, now: datetime) -> AttendanceRecord:
    if record is None or not record.sessions:
        raise StateConflict(NOT_CLOCKED_IN)

    # Close the most recent open session; earlier sessions stay untouched.
    index = next((i for i in range(len(record.sessions) - 1, -1, -1) if record.sessions[i].is_open), None)
    if index is None:
        raise StateConflict(ALREADY_CLOCKED_OUT)

    open_session = record.sessions[index]
    duration = elapsed_ms(open_session.clock_in, now)
    closed = replace(
        open_session,
        clock_out=now,
        clock_out_time=time_of_day(now),
        duration_ms=duration,
        duration_formatted=format_duration(duration),
    )

    sessions = record.sessions[:index] + (closed,) + record.sessions[index + 1:]
    return replace(
        record,
        sessions=sessions,
        total_duration_ms=total_closed_duration(sessions),
        status=derive_status(sessions),
        updated_at=now,
    )
