from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.enums import DuplicateType
from ..core.exceptions import DuplicateProfileError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import blob_or_none, db_cursor, fetchall, fetchone
from .model import NewProfile, Profile
from .repository import ProfileRepository

_COLUMNS = "profile_id, external_id, display_name, template, thumbnail, created_at, updated_at"


def _to_profile(r: dict) -> Profile:
    return Profile(
        profile_id=int(r["profile_id"]),
        external_id=r["external_id"],
        display_name=r["display_name"],
        template=blob_or_none(r["template"]) or b"",
        thumbnail=blob_or_none(r.get("thumbnail")),
        created_at=r["created_at"],
        updated_at=r["updated_at"],
    )


class MySQLProfileRepository(ProfileRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def scan_templates(self) -> Iterable[Profile]:
        # Whole table in primary-key order; no filtering pushed down.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM profiles ORDER BY profile_id")
            return [_to_profile(r) for r in fetchall(cur)]

    def get_by_id(self, profile_id: int) -> Optional[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM profiles WHERE profile_id=%s", (int(profile_id),))
            r = fetchone(cur)
            return _to_profile(r) if r else None

    def get_by_external_id(self, external_id: str) -> Optional[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM profiles WHERE external_id=%s", (external_id,))
            r = fetchone(cur)
            return _to_profile(r) if r else None

    def create_profile(self, profile: NewProfile, *, now: datetime) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO profiles(external_id, display_name, template, thumbnail, created_at, updated_at)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        profile.external_id,
                        profile.display_name,
                        profile.template,
                        profile.thumbnail,
                        now,
                        now,
                    ),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if e.errno == errorcode.ER_DUP_ENTRY:
                raise DuplicateProfileError(
                    f"LAG ID '{profile.external_id}' is already registered",
                    duplicate_type=DuplicateType.EXTERNAL_ID,
                ) from e
            raise

    def list_all(self) -> Sequence[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM profiles ORDER BY display_name ASC")
            return [_to_profile(r) for r in fetchall(cur)]

    def list_page(self, *, offset: int, limit: int) -> Sequence[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM profiles
                ORDER BY display_name ASC
                LIMIT %s OFFSET %s
                """,
                (int(limit), int(offset)),
            )
            return [_to_profile(r) for r in fetchall(cur)]

    def count(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS total FROM profiles")
            r = fetchone(cur)
            return int(r["total"]) if r else 0

    def delete_by_id(self, profile_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM profiles WHERE profile_id=%s", (int(profile_id),))
            return cur.rowcount > 0

    def delete_by_external_id(self, external_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM profiles WHERE external_id=%s", (external_id,))
            return cur.rowcount > 0
