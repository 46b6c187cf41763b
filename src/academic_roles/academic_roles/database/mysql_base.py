from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector

from ..core.constants import MYSQL_DEADLOCK, MYSQL_DUPLICATE_KEY, MYSQL_LOCK_WAIT_TIMEOUT
from ..core.exceptions import ConflictError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

CONFLICT_ERRNOS = frozenset({MYSQL_DUPLICATE_KEY, MYSQL_LOCK_WAIT_TIMEOUT, MYSQL_DEADLOCK})


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def db_transaction(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection, one explicit transaction: commit on success, rollback on any error.

    Lost races between writers (duplicate open key, deadlock, lock wait timeout)
    surface as ConflictError so callers can retry.
    """
    conn = conn_factory.connect()
    try:
        conn.start_transaction(isolation_level="READ COMMITTED")
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as e:
        conn.rollback()
        if getattr(e, "errno", None) in CONFLICT_ERRNOS:
            logger.warning("Transaction lost a write race (errno=%s): %s", e.errno, e.msg)
            raise ConflictError("Another change to the same record was committed first; retry") from e
        raise
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])
