from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from math import ceil
from typing import Any, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import TOP_DENIED_LIMIT, UNKNOWN_VALUE
from ..core.enums import AccessType
from ..core.exceptions import ValidationError
from .model import AccessLogEntry, AccessStats
from .repository import AccessLogRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessLogPage:
    logs: Sequence[AccessLogEntry]
    total: int
    page: int
    total_pages: int


class AccessLogService:
    def __init__(self, logs: AccessLogRepository):
        self._logs = logs

    def record_attempt(
        self,
        *,
        identity: Optional[str],
        display_name: Optional[str],
        access_granted: Any,
        device_id: Optional[str] = None,
        access_type: Optional[str] = None,
        now: datetime | None = None,
    ) -> int:
        if not isinstance(access_granted, bool):
            raise ValidationError("accessGranted must be true or false")
        try:
            kind = AccessType((access_type or AccessType.CARD.value).upper())
        except ValueError:
            raise ValidationError(f"Unsupported accessType: {access_type}") from None

        identity = identity or UNKNOWN_VALUE
        display_name = display_name or "Unknown"
        log_id = self._logs.create_entry(
            identity=identity,
            display_name=display_name,
            access_granted=access_granted,
            access_type=kind,
            device_id=device_id or UNKNOWN_VALUE,
            logged_at=now or now_local(),
        )
        logger.info("Access logged: %s - %s", display_name, "GRANTED" if access_granted else "DENIED")
        return log_id

    def list_logs(
        self,
        *,
        identity: Optional[str] = None,
        access_granted: Optional[bool] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        page: int = 1,
        limit: int = 100,
    ) -> AccessLogPage:
        rows, total = self._logs.search(
            identity=identity or None,
            access_granted=access_granted,
            start_date=start_date,
            end_date=end_date,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return AccessLogPage(logs=rows, total=total, page=page, total_pages=ceil(total / limit))

    def stats(self, *, start_date: Optional[date] = None, end_date: Optional[date] = None) -> AccessStats:
        return AccessStats(
            total_attempts=self._logs.count(start_date=start_date, end_date=end_date),
            granted=self._logs.count(start_date=start_date, end_date=end_date, access_granted=True),
            denied=self._logs.count(start_date=start_date, end_date=end_date, access_granted=False),
            top_denied=tuple(self._logs.top_denied(start_date=start_date, end_date=end_date, limit=TOP_DENIED_LIMIT)),
        )
