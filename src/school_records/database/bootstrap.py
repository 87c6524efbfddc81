"""Schema and demo-account bootstrap for a MySQL server.

Used by ``create_app`` (AUTO_INIT_DB / AUTO_SEED_DB) and by the scripts in
``scripts/``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, List, Optional, Union

import mysql.connector
import structlog
from werkzeug.security import generate_password_hash

from ..common.identifiers import new_id
from .connection import DBConfig

logger = structlog.get_logger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"

DEMO_USERS = (
    # full_name, email, password, role
    ("Admin Demo", "admin@school.local", "admin123", "ADMIN"),
    ("Teacher Demo", "teacher@school.local", "teacher123", "TEACHER"),
    ("Student Demo", "student@school.local", "student123", "STUDENT"),
)


def _open(config: DBConfig, *, select_database: bool = True):
    params = {
        "host": config.host,
        "port": config.port,
        "user": config.user,
        "password": config.password,
        "use_pure": True,
    }
    if select_database:
        params["database"] = config.database
    return mysql.connector.connect(**params)


def split_statements(sql: str) -> Iterator[str]:
    """Yield the statements of a SQL script.

    Full-line ``--`` comments are dropped; ``;`` only ends a statement when it
    is outside a quoted literal.
    """

    lines = [line for line in sql.splitlines() if not line.lstrip().startswith("--")]
    text = "\n".join(lines)

    start = 0
    quote: Optional[str] = None
    i = 0
    while i < len(text):
        ch = text[i]
        if quote:
            if ch == "\\":
                i += 1
            elif ch == quote:
                quote = None
        elif ch in ("'", '"', "`"):
            quote = ch
        elif ch == ";":
            statement = text[start:i].strip()
            if statement:
                yield statement
            start = i + 1
        i += 1

    tail = text[start:].strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    config = DBConfig.from_mapping(db_config)
    conn = _open(config, select_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: Optional[Union[str, Path]] = None) -> None:
    ensure_database_exists(db_config)
    script = Path(schema_path or SCHEMA_PATH).read_text(encoding="utf-8")

    conn = _open(DBConfig.from_mapping(db_config))
    try:
        cur = conn.cursor()
        applied = 0
        for statement in split_statements(script):
            cur.execute(statement)
            applied += 1
        conn.commit()
    finally:
        conn.close()
    logger.info("bootstrap.schema_applied", statements=applied, database=db_config.get("database"))


def ensure_demo_users(db_config: dict) -> None:
    """Create the demo accounts, or reset their name, password and role if they exist."""

    conn = _open(DBConfig.from_mapping(db_config))
    try:
        cur = conn.cursor()
        for full_name, email, password, role in DEMO_USERS:
            cur.execute(
                """
                INSERT INTO users (user_id, email, password_hash, full_name, role, is_active)
                VALUES (%s, %s, %s, %s, %s, 1)
                ON DUPLICATE KEY UPDATE
                    full_name=VALUES(full_name),
                    password_hash=VALUES(password_hash),
                    role=VALUES(role),
                    is_active=1
                """,
                (new_id(), email, generate_password_hash(password), full_name, role),
            )
        conn.commit()
    finally:
        conn.close()
    logger.info("bootstrap.demo_users_ready", count=len(DEMO_USERS))


def list_tables(db_config: dict) -> List[str]:
    conn = _open(DBConfig.from_mapping(db_config))
    try:
        cur = conn.cursor()
        cur.execute(
            "SELECT table_name FROM information_schema.tables WHERE table_schema=%s ORDER BY table_name",
            (db_config.get("database"),),
        )
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
