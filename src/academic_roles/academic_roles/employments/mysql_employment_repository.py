from __future__ import annotations

import uuid
from contextlib import contextmanager
from dataclasses import replace
from datetime import date
from typing import Iterator, Optional, Sequence

from ..common.validators import require_date_order
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, db_transaction, fetchall, fetchone
from .model import Employment, NewEmployment
from .repository import EmploymentRepository

_COLUMNS = "seq, id, staff_id, department_id, position_title, is_primary, start_date, end_date"


def _to_employment(r: dict) -> Employment:
    return Employment(
        id=str(r["id"]),
        seq=int(r["seq"]),
        holder_id=str(r["staff_id"]),
        entity_id=str(r["department_id"]),
        start_date=r["start_date"],
        is_primary=bool(r.get("is_primary")),
        position_title=r.get("position_title"),
        end_date=r.get("end_date"),
    )


class MySQLEmploymentRepository(EmploymentRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, bound_cursor=None):
        self._conn_factory = conn_factory
        self._bound_cursor = bound_cursor

    @contextmanager
    def _cursor(self) -> Iterator:
        if self._bound_cursor is not None:
            yield self._bound_cursor
            return
        with db_cursor(self._conn_factory) as (_, cur):
            yield cur

    @contextmanager
    def unit_of_work(self) -> Iterator["MySQLEmploymentRepository"]:
        if self._bound_cursor is not None:
            yield self
            return
        with db_transaction(self._conn_factory) as (_, cur):
            yield MySQLEmploymentRepository(self._conn_factory, bound_cursor=cur)

    @property
    def _lock_clause(self) -> str:
        return " FOR UPDATE" if self._bound_cursor is not None else ""

    def insert(self, record: NewEmployment) -> Employment:
        new_id = str(uuid.uuid4())
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO staff_employments(id, staff_id, department_id, position_title, is_primary, start_date)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    new_id,
                    record.holder_id,
                    record.entity_id,
                    record.position_title,
                    1 if record.is_primary else 0,
                    record.start_date,
                ),
            )
            seq = int(cur.lastrowid)
        return Employment(
            id=new_id,
            seq=seq,
            holder_id=record.holder_id,
            entity_id=record.entity_id,
            start_date=record.start_date,
            is_primary=record.is_primary,
            position_title=record.position_title,
        )

    def get_by_id(self, employment_id: str) -> Optional[Employment]:
        with self._cursor() as cur:
            cur.execute(
                f"SELECT {_COLUMNS} FROM staff_employments WHERE id=%s{self._lock_clause}",
                (employment_id,),
            )
            row = fetchone(cur)
        return _to_employment(row) if row else None

    def list_for_holder(self, holder_id: str, *, include_closed: bool = False) -> Sequence[Employment]:
        where = "staff_id=%s" if include_closed else "staff_id=%s AND end_date IS NULL"
        with self._cursor() as cur:
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM staff_employments
                WHERE {where}
                ORDER BY start_date DESC, seq DESC
                """,
                (holder_id,),
            )
            return [_to_employment(r) for r in fetchall(cur)]

    def list_open_primary(self, holder_id: str) -> Sequence[Employment]:
        with self._cursor() as cur:
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM staff_employments
                WHERE staff_id=%s AND is_primary=1 AND end_date IS NULL
                ORDER BY start_date DESC, seq DESC
                {self._lock_clause}
                """,
                (holder_id,),
            )
            return [_to_employment(r) for r in fetchall(cur)]

    def update(
        self,
        employment_id: str,
        *,
        end_date: Optional[date] = None,
        is_primary: Optional[bool] = None,
    ) -> Employment:
        current = self.get_by_id(employment_id)
        if current is None:
            raise NotFoundError(f"Employment {employment_id} does not exist")

        sets: list[str] = []
        params: list[object] = []
        if end_date is not None:
            require_date_order(current.start_date, end_date)
            sets.append("end_date=%s")
            params.append(end_date)
        if is_primary is not None:
            sets.append("is_primary=%s")
            params.append(1 if is_primary else 0)
        if not sets:
            return current

        with self._cursor() as cur:
            cur.execute(
                f"UPDATE staff_employments SET {', '.join(sets)} WHERE id=%s",
                (*params, employment_id),
            )

        changed = replace(current, end_date=end_date if end_date is not None else current.end_date)
        if is_primary is not None:
            changed = replace(changed, is_primary=bool(is_primary))
        return changed
