from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.exceptions import DuplicateKeyError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cur)``.

    Reuses the connection of an active transaction (commit/rollback is left to
    the transaction owner); otherwise opens, commits and closes its own.
    Unique-index violations surface as ``DuplicateKeyError``.
    """

    shared = conn_factory.active()
    if shared is not None:
        cur = shared.cursor(dictionary=dictionary)
        try:
            yield shared, cur
        except IntegrityError as e:
            raise _translate(e)
        finally:
            cur.close()
        return

    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except IntegrityError as e:
        conn.rollback()
        raise _translate(e)
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _translate(error: IntegrityError) -> Exception:
    if error.errno == errorcode.ER_DUP_ENTRY:
        return DuplicateKeyError(str(error))
    return error


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])
