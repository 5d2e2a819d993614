from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AccessType
from .model import AccessLogEntry, DeniedIdentity


class AccessLogRepository(Protocol):
    def create_entry(
        self,
        *,
        identity: str,
        display_name: str,
        access_granted: bool,
        access_type: AccessType,
        device_id: str,
        logged_at: datetime,
    ) -> int:
        raise NotImplementedError

    def search(
        self,
        *,
        identity: Optional[str] = None,
        access_granted: Optional[bool] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        offset: int = 0,
        limit: int = 100,
    ) -> tuple[Sequence[AccessLogEntry], int]:
        raise NotImplementedError

    def count(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        access_granted: Optional[bool] = None,
    ) -> int:
        raise NotImplementedError

    def top_denied(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 10,
    ) -> Sequence[DeniedIdentity]:
        raise NotImplementedError
