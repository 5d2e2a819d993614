from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Aggregate status of one day's attendance record."""

    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"


class ClockAction(str, Enum):
    IN = "IN"
    OUT = "OUT"


class DuplicateType(str, Enum):
    """Which check rejected a profile registration."""

    EXTERNAL_ID = "LAG_ID"
    TEMPLATE = "FACE_TEMPLATE"


class AccessType(str, Enum):
    CARD = "CARD"
    FACE = "FACE"
    PIN = "PIN"


class EventType(str, Enum):
    CONNECTED = "connected"
    KEEPALIVE = "keepalive"
    ATTENDANCE_UPDATE = "attendance_update"
