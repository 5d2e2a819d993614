from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from ..core.enums import AccessType


@dataclass(frozen=True)
class AccessLogEntry:
    """One access attempt reported by a door device."""

    log_id: int
    identity: str
    display_name: str
    access_granted: bool
    access_type: AccessType
    device_id: str
    logged_at: datetime
    log_date: date


@dataclass(frozen=True)
class DeniedIdentity:
    identity: str
    display_name: str
    denied_count: int


@dataclass(frozen=True)
class AccessStats:
    total_attempts: int
    granted: int
    denied: int
    top_denied: tuple[DeniedIdentity, ...]

    @property
    def success_rate(self) -> float:
        if not self.total_attempts:
            return 0.0
        return round(self.granted / self.total_attempts * 100, 2)
