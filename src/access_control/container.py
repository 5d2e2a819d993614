from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .access_logs.mysql_access_log_repository import MySQLAccessLogRepository
from .access_logs.repository import AccessLogRepository
from .access_logs.service import AccessLogService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_DUPLICATE_THRESHOLD, DEFAULT_KEEPALIVE_SECONDS
from .database.connection import DatabaseConnection, DBConfig
from .notifications.broadcaster import UpdateBroadcaster
from .profiles.duplicate_gate import DuplicateGate
from .profiles.mysql_profile_repository import MySQLProfileRepository
from .profiles.repository import ProfileRepository
from .profiles.service import ProfileService


@dataclass(frozen=True)
class Container:
    profiles_repo: ProfileRepository
    attendance_repo: AttendanceRepository
    access_logs_repo: AccessLogRepository

    broadcaster: UpdateBroadcaster
    duplicate_gate: DuplicateGate

    profile_service: ProfileService
    attendance_service: AttendanceService
    access_log_service: AccessLogService

    conn: Optional[DatabaseConnection] = None


def assemble(
    *,
    profiles_repo: ProfileRepository,
    attendance_repo: AttendanceRepository,
    access_logs_repo: AccessLogRepository,
    duplicate_threshold: float = DEFAULT_DUPLICATE_THRESHOLD,
    keepalive_seconds: float = DEFAULT_KEEPALIVE_SECONDS,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services on top of already-built repositories."""

    broadcaster = UpdateBroadcaster(keepalive_seconds=keepalive_seconds)
    duplicate_gate = DuplicateGate(profiles_repo, threshold=duplicate_threshold)

    return Container(
        profiles_repo=profiles_repo,
        attendance_repo=attendance_repo,
        access_logs_repo=access_logs_repo,
        broadcaster=broadcaster,
        duplicate_gate=duplicate_gate,
        profile_service=ProfileService(profiles_repo, duplicate_gate),
        attendance_service=AttendanceService(attendance_repo, broadcaster=broadcaster),
        access_log_service=AccessLogService(access_logs_repo),
        conn=conn,
    )


def build_container(
    *,
    db_config: dict,
    duplicate_threshold: float = DEFAULT_DUPLICATE_THRESHOLD,
    keepalive_seconds: float = DEFAULT_KEEPALIVE_SECONDS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return assemble(
        profiles_repo=MySQLProfileRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        access_logs_repo=MySQLAccessLogRepository(conn),
        duplicate_threshold=duplicate_threshold,
        keepalive_seconds=keepalive_seconds,
        conn=conn,
    )
