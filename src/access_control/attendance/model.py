from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import format_duration, to_epoch_ms
from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class WorkSession:
    """One clock-in/clock-out pair. Open until ``clock_out`` is set."""

    clock_in: datetime
    clock_in_time: str
    clock_out: Optional[datetime] = None
    clock_out_time: Optional[str] = None
    duration_ms: Optional[int] = None
    duration_formatted: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.clock_out is None

    def to_document(self) -> dict:
        return {
            "clockIn": self.clock_in.isoformat(),
            "clockInTime": self.clock_in_time,
            "clockOut": self.clock_out.isoformat() if self.clock_out else None,
            "clockOutTime": self.clock_out_time,
            "duration": self.duration_ms,
            "durationFormatted": self.duration_formatted,
        }

    @classmethod
    def from_document(cls, doc: dict) -> "WorkSession":
        clock_out = doc.get("clockOut")
        duration = doc.get("duration")
        return cls(
            clock_in=datetime.fromisoformat(doc["clockIn"]),
            clock_in_time=doc["clockInTime"],
            clock_out=datetime.fromisoformat(clock_out) if clock_out else None,
            clock_out_time=doc.get("clockOutTime"),
            duration_ms=int(duration) if duration is not None else None,
            duration_formatted=doc.get("durationFormatted"),
        )


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one identity's sessions for one calendar day."""

    identity: str
    display_name: Optional[str]
    work_date: date
    sessions: tuple[WorkSession, ...]
    total_duration_ms: int
    status: AttendanceStatus
    created_at: datetime
    updated_at: datetime
    attendance_id: Optional[int] = field(default=None, compare=False)

    @property
    def open_session(self) -> Optional[WorkSession]:
        for session in reversed(self.sessions):
            if session.is_open:
                return session
        return None

    @property
    def last_session(self) -> Optional[WorkSession]:
        return self.sessions[-1] if self.sessions else None

    @property
    def total_duration_formatted(self) -> str:
        return format_duration(self.total_duration_ms)

    @property
    def last_action(self) -> str:
        last = self.last_session
        if last is None:
            return "No activity"
        if last.is_open:
            return f"Clocked in at {last.clock_in_time}"
        return f"Clocked out at {last.clock_out_time}"

    def to_json(self) -> dict:
        """Wire shape used by the HTTP API and stream notifications."""

        last = self.last_session
        return {
            "id": str(self.attendance_id) if self.attendance_id is not None else None,
            "lagId": self.identity,
            "name": self.display_name,
            "date": self.work_date.isoformat(),
            "sessions": [
                {
                    "clockIn": to_epoch_ms(s.clock_in),
                    "clockInTime": s.clock_in_time,
                    "clockOut": to_epoch_ms(s.clock_out),
                    "clockOutTime": s.clock_out_time,
                    "duration": s.duration_ms,
                    "durationFormatted": s.duration_formatted,
                }
                for s in self.sessions
            ],
            "clockInTime": self.sessions[0].clock_in_time if self.sessions else None,
            "clockOutTime": last.clock_out_time if last else None,
            "totalDuration": self.total_duration_ms,
            "totalDurationFormatted": self.total_duration_formatted,
            "status": self.status.value,
            "lastAction": self.last_action,
        }


@dataclass(frozen=True)
class TodaySummary:
    work_date: date
    records: tuple[AttendanceRecord, ...]

    @property
    def active_count(self) -> int:
        return sum(1 for r in self.records if r.status == AttendanceStatus.ACTIVE)

    @property
    def completed_count(self) -> int:
        return sum(1 for r in self.records if r.status == AttendanceStatus.COMPLETED)


@dataclass(frozen=True)
class RecordPage:
    records: tuple[AttendanceRecord, ...]
    total: int
    page: int
    total_pages: int


@dataclass(frozen=True)
class MonthlyReport:
    """Read-model for the monthly report."""

    period: str
    identity: Optional[str]
    records: tuple[AttendanceRecord, ...]
    total_duration_ms: int
    average_duration_ms: float

    @property
    def total_days(self) -> int:
        return len(self.records)

    @property
    def completed_days(self) -> int:
        return sum(1 for r in self.records if r.status == AttendanceStatus.COMPLETED)

    @property
    def incomplete_days(self) -> int:
        return self.total_days - self.completed_days
