"""Out-of-band database setup: schema creation and the seed admin account."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator, List

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig

logger = logging.getLogger(__name__)

_CREATE_DB_OR_USE = re.compile(r"(?im)^\s*(CREATE\s+DATABASE|USE)\b.*?;\s*$")


def _connect(config: DBConfig, *, with_database: bool = True):
    kwargs = dict(
        host=config.host,
        port=config.port,
        user=config.user,
        password=config.password,
        connection_timeout=int(config.connect_timeout),
        use_pure=True,
    )
    if with_database:
        kwargs["database"] = config.database
    return mysql.connector.connect(**kwargs)


def split_sql_statements(sql: str) -> Iterator[str]:
    """Yield the statements of a schema file.

    ``--`` comment lines and CREATE DATABASE / USE lines are dropped so the
    same file applies to whichever database the settings point at. A ``;``
    inside a quoted literal does not end a statement.
    """
    sql = _CREATE_DB_OR_USE.sub("", sql)
    body = "\n".join(ln for ln in sql.splitlines() if not ln.lstrip().startswith("--"))

    start = 0
    quote = None
    i = 0
    while i < len(body):
        ch = body[i]
        if quote:
            if ch == "\\":
                i += 1
            elif ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = body[start:i].strip()
            if stmt:
                yield stmt
            start = i + 1
        i += 1

    tail = body[start:].strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    config = DBConfig.from_dict(db_config)
    conn = _connect(config, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    statements = list(split_sql_statements(Path(schema_path).read_text(encoding="utf-8")))

    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Schema applied from %s (%s statements)", schema_path, len(statements))


def ensure_seed_admin(db_config: dict, *, name: str, email: str, password: str) -> None:
    """Upsert the admin account; self-registration only ever creates developers."""
    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor(dictionary=True)
        password_hash = generate_password_hash(password)
        cur.execute("SELECT id FROM users WHERE email=%s", (email,))
        if cur.fetchone():
            cur.execute(
                "UPDATE users SET name=%s, password=%s, role='admin' WHERE email=%s",
                (name, password_hash, email),
            )
        else:
            cur.execute(
                """
                INSERT INTO users (name, email, password, role, attendance)
                VALUES (%s, %s, %s, 'admin', 'absent')
                """,
                (name, email, password_hash),
            )
        conn.commit()
    finally:
        conn.close()
    logger.info("Seed admin ready: %s", email)


def list_tables(db_config: dict) -> List[str]:
    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
