from __future__ import annotations

import json
from datetime import date
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, load_json_column
from .model import AttendanceRecord, WorkSession
from .repository import AttendanceRepository, Transition

_COLUMNS = (
    "attendance_id, identity, display_name, work_date, sessions, "
    "total_duration_ms, status, created_at, updated_at"
)


def _to_record(r: dict) -> AttendanceRecord:
    docs = load_json_column(r["sessions"]) or []
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        identity=r["identity"],
        display_name=r.get("display_name"),
        work_date=r["work_date"],
        sessions=tuple(WorkSession.from_document(d) for d in docs),
        total_duration_ms=int(r.get("total_duration_ms") or 0),
        status=AttendanceStatus(r["status"]),
        created_at=r["created_at"],
        updated_at=r["updated_at"],
    )


def _filters(
    *,
    identity: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    status: Optional[AttendanceStatus] = None,
) -> tuple[str, list[object]]:
    clauses: list[str] = []
    params: list[object] = []

    if identity:
        clauses.append("identity=%s")
        params.append(identity)
    if status is not None:
        clauses.append("status=%s")
        params.append(status.value)
    if start_date is not None:
        clauses.append("work_date >= %s")
        params.append(start_date)
    if end_date is not None:
        clauses.append("work_date <= %s")
        params.append(end_date)

    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    return where, params


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_identity_and_date(self, identity: str, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_days WHERE identity=%s AND work_date=%s",
                (identity, work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def apply_transition(self, identity: str, work_date: date, transition: Transition) -> AttendanceRecord:
        # Row lock held until commit; concurrent writers for the same key wait here.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_days WHERE identity=%s AND work_date=%s FOR UPDATE",
                (identity, work_date),
            )
            r = fetchone(cur)
            current = _to_record(r) if r else None

            updated = transition(current)
            sessions_json = json.dumps([s.to_document() for s in updated.sessions])

            if current is None:
                cur.execute(
                    """
                    INSERT INTO attendance_days(
                        identity, display_name, work_date, sessions,
                        total_duration_ms, status, created_at, updated_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        updated.identity,
                        updated.display_name,
                        updated.work_date,
                        sessions_json,
                        updated.total_duration_ms,
                        updated.status.value,
                        updated.created_at,
                        updated.updated_at,
                    ),
                )
                attendance_id = int(cur.lastrowid)
            else:
                cur.execute(
                    """
                    UPDATE attendance_days
                    SET display_name=%s, sessions=%s, total_duration_ms=%s, status=%s, updated_at=%s
                    WHERE attendance_id=%s
                    """,
                    (
                        updated.display_name,
                        sessions_json,
                        updated.total_duration_ms,
                        updated.status.value,
                        updated.updated_at,
                        current.attendance_id,
                    ),
                )
                attendance_id = int(current.attendance_id)

        return AttendanceRecord(
            attendance_id=attendance_id,
            identity=updated.identity,
            display_name=updated.display_name,
            work_date=updated.work_date,
            sessions=updated.sessions,
            total_duration_ms=updated.total_duration_ms,
            status=updated.status,
            created_at=updated.created_at,
            updated_at=updated.updated_at,
        )

    def list_for_date(self, work_date: date, *, identity: Optional[str] = None) -> Sequence[AttendanceRecord]:
        where, params = _filters(identity=identity, start_date=work_date, end_date=work_date)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_days {where} ORDER BY updated_at DESC",
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_range(
        self,
        *,
        start_date: date,
        end_date: date,
        identity: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        where, params = _filters(identity=identity, start_date=start_date, end_date=end_date)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_days {where} ORDER BY work_date ASC, identity ASC",
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

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
        where, params = _filters(identity=identity, start_date=start_date, end_date=end_date, status=status)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_days
                {where}
                ORDER BY work_date DESC, created_at DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (int(limit), int(offset)),
            )
            rows = [_to_record(r) for r in fetchall(cur)]

            cur.execute(f"SELECT COUNT(*) AS total FROM attendance_days {where}", tuple(params))
            r = fetchone(cur)
            total = int(r["total"]) if r else 0
        return rows, total
