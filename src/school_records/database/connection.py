from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, Iterator, Mapping, Optional

import mysql.connector


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str

    @classmethod
    def from_mapping(cls, db_config: Mapping[str, Any]) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "school_records")),
        )


_active_conn: ContextVar[Optional[Any]] = ContextVar("school_records_active_conn", default=None)


class DatabaseConnection:
    """Singleton-like DB connection factory.

    Outside a transaction every repository call uses its own short-lived
    connection. Inside ``transaction()`` all calls on the same thread share one
    connection that is committed or rolled back as a whole.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def connect(self):
        return mysql.connector.connect(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
            autocommit=False,
        )

    def active(self):
        """Connection bound by an enclosing ``transaction()``, if any."""
        return _active_conn.get()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if _active_conn.get() is not None:
            # Join the outer unit of work.
            yield
            return

        conn = self.connect()
        token = _active_conn.set(conn)
        try:
            conn.start_transaction(isolation_level="REPEATABLE READ")
            yield
            conn.commit()
        except BaseException:
            conn.rollback()
            raise
        finally:
            _active_conn.reset(token)
            conn.close()
