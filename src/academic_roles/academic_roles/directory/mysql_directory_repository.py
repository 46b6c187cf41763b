from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from ..core.enums import StaffType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import StaffProfile
from .repository import ProgramDirectory, StaffDirectory


class MySQLStaffDirectory(StaffDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_profiles(self, staff_ids: Iterable[str]) -> Mapping[str, StaffProfile]:
        ids = sorted({str(s) for s in staff_ids if s})
        if not ids:
            return {}

        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT s.id AS staff_id, s.staff_type, p.first_name, p.last_name, p.email
                FROM staff s
                LEFT JOIN persons p ON p.id = s.person_id
                WHERE s.id IN ({placeholders})
                """,
                tuple(ids),
            )
            rows = fetchall(cur)
        return {
            str(r["staff_id"]): StaffProfile(
                staff_id=str(r["staff_id"]),
                first_name=r.get("first_name"),
                last_name=r.get("last_name"),
                email=r.get("email"),
                staff_type=StaffType(r["staff_type"]) if r.get("staff_type") else None,
            )
            for r in rows
        }


class MySQLProgramDirectory(ProgramDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_program_ids(self, *, department_id: str) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id FROM programs WHERE department_id=%s ORDER BY code",
                (department_id,),
            )
            return [str(r["id"]) for r in fetchall(cur)]
