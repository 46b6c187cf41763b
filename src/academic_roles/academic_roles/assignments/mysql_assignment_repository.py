from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from dataclasses import replace
from datetime import date
from typing import Iterator, Optional, Sequence

from ..common.validators import require_date_order
from ..core.enums import EntityKind, RoleTag
from ..core.exceptions import IntegrityError, NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, db_transaction, fetchall, fetchone
from .model import AssignmentKey, NewRoleAssignment, RoleAssignment
from .repository import RoleAssignmentRepository

logger = logging.getLogger(__name__)

_COLUMNS = "seq, id, entity_kind, entity_id, role, holder_id, start_date, end_date"


def _to_assignment(r: dict) -> RoleAssignment:
    return RoleAssignment(
        id=str(r["id"]),
        seq=int(r["seq"]),
        entity_kind=EntityKind(r["entity_kind"]),
        entity_id=str(r["entity_id"]),
        role=RoleTag(r["role"]),
        holder_id=str(r["holder_id"]),
        start_date=r["start_date"],
        end_date=r.get("end_date"),
    )


class MySQLRoleAssignmentRepository(RoleAssignmentRepository):
    """role_assignments table.

    Outside a unit of work every call runs on its own short-lived connection.
    Inside one, calls share the transaction's cursor and open rows are read
    with FOR UPDATE so a competing transition waits or loses.
    """

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
    def unit_of_work(self) -> Iterator["MySQLRoleAssignmentRepository"]:
        if self._bound_cursor is not None:
            yield self
            return
        with db_transaction(self._conn_factory) as (_, cur):
            yield MySQLRoleAssignmentRepository(self._conn_factory, bound_cursor=cur)

    @property
    def _lock_clause(self) -> str:
        return " FOR UPDATE" if self._bound_cursor is not None else ""

    def insert(self, record: NewRoleAssignment) -> RoleAssignment:
        require_date_order(record.start_date, record.end_date)
        new_id = str(uuid.uuid4())
        key = record.key
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO role_assignments(id, entity_kind, entity_id, role, holder_id, start_date, end_date)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    new_id,
                    key.entity_kind.value,
                    key.entity_id,
                    key.role.value,
                    record.holder_id,
                    record.start_date,
                    record.end_date,
                ),
            )
            seq = int(cur.lastrowid)
        return RoleAssignment(
            id=new_id,
            seq=seq,
            entity_kind=key.entity_kind,
            entity_id=key.entity_id,
            role=key.role,
            holder_id=record.holder_id,
            start_date=record.start_date,
            end_date=record.end_date,
        )

    def find_open(self, key: AssignmentKey) -> Optional[RoleAssignment]:
        with self._cursor() as cur:
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM role_assignments
                WHERE entity_kind=%s AND entity_id=%s AND role=%s AND end_date IS NULL
                ORDER BY start_date DESC, seq DESC
                {self._lock_clause}
                """,
                (key.entity_kind.value, key.entity_id, key.role.value),
            )
            rows = fetchall(cur)
        if len(rows) > 1:
            ids = ", ".join(str(r["id"]) for r in rows)
            logger.error("Found %d open %s assignments for %s %s: %s", len(rows), key.role.value, key.entity_kind.value, key.entity_id, ids)
            raise IntegrityError(
                f"{len(rows)} open '{key.role.value}' assignments for {key.entity_kind.value} {key.entity_id} ({ids})"
            )
        return _to_assignment(rows[0]) if rows else None

    def list_history(self, key: AssignmentKey) -> Sequence[RoleAssignment]:
        with self._cursor() as cur:
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM role_assignments
                WHERE entity_kind=%s AND entity_id=%s AND role=%s
                ORDER BY start_date DESC, seq DESC
                """,
                (key.entity_kind.value, key.entity_id, key.role.value),
            )
            return [_to_assignment(r) for r in fetchall(cur)]

    def update(self, assignment_id: str, *, end_date: date) -> RoleAssignment:
        with self._cursor() as cur:
            cur.execute(
                f"SELECT {_COLUMNS} FROM role_assignments WHERE id=%s{self._lock_clause}",
                (assignment_id,),
            )
            row = fetchone(cur)
            if not row:
                raise NotFoundError(f"Role assignment {assignment_id} does not exist")
            current = _to_assignment(row)
            require_date_order(current.start_date, end_date)
            cur.execute("UPDATE role_assignments SET end_date=%s WHERE id=%s", (end_date, assignment_id))
        return replace(current, end_date=end_date)
