from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import AccessType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AccessLogEntry, DeniedIdentity
from .repository import AccessLogRepository


def _filters(
    *,
    identity: Optional[str] = None,
    access_granted: Optional[bool] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> tuple[str, list[object]]:
    clauses: list[str] = []
    params: list[object] = []

    if identity:
        clauses.append("identity=%s")
        params.append(identity)
    if access_granted is not None:
        clauses.append("access_granted=%s")
        params.append(1 if access_granted else 0)
    if start_date is not None:
        clauses.append("log_date >= %s")
        params.append(start_date)
    if end_date is not None:
        clauses.append("log_date <= %s")
        params.append(end_date)

    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    return where, params


class MySQLAccessLogRepository(AccessLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO access_logs(identity, display_name, access_granted, access_type, device_id, logged_at, log_date)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    identity,
                    display_name,
                    1 if access_granted else 0,
                    access_type.value,
                    device_id,
                    logged_at,
                    logged_at.date(),
                ),
            )
            return int(cur.lastrowid)

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
        where, params = _filters(
            identity=identity,
            access_granted=access_granted,
            start_date=start_date,
            end_date=end_date,
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT log_id, identity, display_name, access_granted, access_type, device_id, logged_at, log_date
                FROM access_logs
                {where}
                ORDER BY logged_at DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (int(limit), int(offset)),
            )
            rows = [
                AccessLogEntry(
                    log_id=int(r["log_id"]),
                    identity=r["identity"],
                    display_name=r["display_name"],
                    access_granted=bool(r["access_granted"]),
                    access_type=AccessType(r["access_type"]),
                    device_id=r["device_id"],
                    logged_at=r["logged_at"],
                    log_date=r["log_date"],
                )
                for r in fetchall(cur)
            ]

            cur.execute(f"SELECT COUNT(*) AS total FROM access_logs {where}", tuple(params))
            r = fetchone(cur)
            total = int(r["total"]) if r else 0
        return rows, total

    def count(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        access_granted: Optional[bool] = None,
    ) -> int:
        where, params = _filters(access_granted=access_granted, start_date=start_date, end_date=end_date)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM access_logs {where}", tuple(params))
            r = fetchone(cur)
            return int(r["total"]) if r else 0

    def top_denied(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 10,
    ) -> Sequence[DeniedIdentity]:
        where, params = _filters(access_granted=False, start_date=start_date, end_date=end_date)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT identity, MIN(display_name) AS display_name, COUNT(*) AS denied_count
                FROM access_logs
                {where}
                GROUP BY identity
                ORDER BY denied_count DESC
                LIMIT %s
                """,
                tuple(params) + (int(limit),),
            )
            return [
                DeniedIdentity(
                    identity=r["identity"],
                    display_name=r["display_name"],
                    denied_count=int(r["denied_count"]),
                )
                for r in fetchall(cur)
            ]
