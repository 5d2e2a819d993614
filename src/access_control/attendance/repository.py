from __future__ import annotations

from datetime import date
from typing import Callable, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord

Transition = Callable[[Optional[AttendanceRecord]], AttendanceRecord]


class AttendanceRepository(Protocol):
    def get_for_identity_and_date(self, identity: str, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def apply_transition(self, identity: str, work_date: date, transition: Transition) -> AttendanceRecord:
        """Read-modify-write one day record as a single transaction.

        The current record (or None) is loaded with a write lock, passed to
        ``transition`` and the returned record replaces the stored one
        wholesale. If ``transition`` raises, nothing is written.
        """

        raise NotImplementedError

    def list_for_date(self, work_date: date, *, identity: Optional[str] = None) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_range(
        self,
        *,
        start_date: date,
        end_date: date,
        identity: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def search(
        self,
        *,
        identity: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[AttendanceStatus] = None,
        offset: int = 0,
        limit: int = 100,
    ) -> tuple[Sequence[AttendanceRecord], int]:
        """Return one page of records (newest day first) and the total match count."""

        raise NotImplementedError
