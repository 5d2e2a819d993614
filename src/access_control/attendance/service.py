from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from functools import partial
from math import ceil
from typing import Optional

from ..common.datetime_utils import format_duration, month_range, now_local
from ..common.validators import require_non_empty
from ..core.enums import AttendanceStatus, ClockAction
from ..core.exceptions import ValidationError
from ..notifications.broadcaster import UpdateBroadcaster
from . import ledger
from .locks import KeyedLock
from .model import AttendanceRecord, MonthlyReport, RecordPage, TodaySummary
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClockResult:
    action: ClockAction
    record: AttendanceRecord

    @property
    def message(self) -> str:
        return f"Clocked {self.action.value.lower()} successfully"


def parse_action(value: Optional[str]) -> ClockAction:
    value = require_non_empty(value, "action").upper()
    try:
        return ClockAction(value)
    except ValueError:
        raise ValidationError("action must be IN or OUT") from None


class AttendanceService:
    """Use cases over the per-day attendance ledger.

    Transitions for one (identity, day) are serialized twice: a keyed lock
    orders threads of this process, and the repository runs the
    read-modify-write inside one locked storage transaction so other
    processes cannot interleave either.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        broadcaster: Optional[UpdateBroadcaster] = None,
        locks: Optional[KeyedLock] = None,
    ):
        self._attendance = attendance
        self._broadcaster = broadcaster
        self._locks = locks or KeyedLock()

    def clock(
        self,
        *,
        identity: Optional[str],
        action: Optional[str],
        display_name: Optional[str] = None,
        now: datetime | None = None,
    ) -> ClockResult:
        identity = require_non_empty(identity, "lagId")
        clock_action = parse_action(action)
        now = now or now_local()
        today = now.date()

        if clock_action == ClockAction.IN:
            transition = partial(ledger.clock_in, identity=identity, display_name=display_name, now=now)
        else:
            transition = partial(ledger.clock_out, now=now)

        with self._locks.hold((identity, today)):
            record = self._attendance.apply_transition(identity, today, transition)

        last = record.last_session
        if clock_action == ClockAction.IN:
            logger.info("Clocked IN: %s (%s) at %s", record.display_name, identity, last.clock_in_time)
        else:
            logger.info(
                "Clocked OUT: %s (%s) at %s (Duration: %s)",
                record.display_name,
                identity,
                last.clock_out_time,
                last.duration_formatted,
            )

        if self._broadcaster is not None:
            self._broadcaster.publish_attendance(record.to_json(), action=clock_action.value)

        return ClockResult(action=clock_action, record=record)

    def clock_in(self, identity: str, *, display_name: Optional[str] = None, now: datetime | None = None) -> ClockResult:
        return self.clock(identity=identity, action=ClockAction.IN.value, display_name=display_name, now=now)

    def clock_out(self, identity: str, *, now: datetime | None = None) -> ClockResult:
        return self.clock(identity=identity, action=ClockAction.OUT.value, now=now)

    def get_day(self, identity: str, work_date: date) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_identity_and_date(identity, work_date)

    def today(self, *, identity: Optional[str] = None, now: datetime | None = None) -> TodaySummary:
        today = (now or now_local()).date()
        records = self._attendance.list_for_date(today, identity=identity or None)
        return TodaySummary(work_date=today, records=tuple(records))

    def list_records(
        self,
        *,
        identity: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 100,
    ) -> RecordPage:
        status_filter = None
        if status:
            try:
                status_filter = AttendanceStatus(status.upper())
            except ValueError:
                raise ValidationError("status must be ACTIVE or COMPLETED") from None

        records, total = self._attendance.search(
            identity=identity or None,
            start_date=start_date,
            end_date=end_date,
            status=status_filter,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return RecordPage(records=tuple(records), total=total, page=page, total_pages=ceil(total / limit))

    def monthly_report(self, *, month: int, year: int, identity: Optional[str] = None) -> MonthlyReport:
        if not 1 <= month <= 12:
            raise ValidationError("month must be between 1 and 12")
        if not 1 <= year <= 9999:
            raise ValidationError("year is out of range")

        start, end = month_range(month, year)
        records = tuple(self._attendance.list_range(start_date=start, end_date=end, identity=identity or None))

        total = sum(r.total_duration_ms for r in records)
        average = total / len(records) if records else 0.0
        return MonthlyReport(
            period=f"{year:04d}-{month:02d}",
            identity=identity or None,
            records=records,
            total_duration_ms=total,
            average_duration_ms=average,
        )


def report_to_json(report: MonthlyReport) -> dict:
    return {
        "period": report.period,
        "lagId": report.identity or "ALL",
        "totalDays": report.total_days,
        "completedDays": report.completed_days,
        "incompleteDays": report.incomplete_days,
        "totalDuration": report.total_duration_ms,
        "totalDurationFormatted": format_duration(report.total_duration_ms),
        "avgDuration": int(report.average_duration_ms),
        "avgDurationFormatted": format_duration(report.average_duration_ms),
        "records": [
            {
                "lagId": r.identity,
                "name": r.display_name,
                "date": r.work_date.isoformat(),
                "sessions": len(r.sessions),
                "clockInTime": r.sessions[0].clock_in_time if r.sessions else None,
                "clockOutTime": r.last_session.clock_out_time if r.last_session else None,
                "durationFormatted": r.total_duration_formatted,
                "status": r.status.value,
            }
            for r in report.records
        ],
    }
