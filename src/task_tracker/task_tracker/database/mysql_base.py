from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence, Tuple

import mysql.connector

from ..core.exceptions import DuplicateRecordError, StoreUnavailableError

if TYPE_CHECKING:
    from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

COMPARISON_OPERATORS = frozenset({"<", "<=", ">", ">=", "="})


@contextmanager
def db_cursor(conn_factory: "DatabaseConnection", *, dictionary: bool = True):
    """One transaction: commit on success, rollback on any failure.

    Driver errors never leave this boundary as-is; they are logged and
    re-raised as StoreUnavailableError (or DuplicateRecordError for unique
    key violations) without the query text.
    """
    try:
        with conn_factory.acquire() as conn:
            cur = conn.cursor(dictionary=dictionary)
            try:
                yield conn, cur
                conn.commit()
            except Exception:
                conn.rollback()
                raise
            finally:
                cur.close()
    except mysql.connector.IntegrityError as exc:
        logger.warning("Integrity error: %s", exc.msg)
        raise DuplicateRecordError("Record violates a unique constraint") from exc
    except mysql.connector.Error as exc:
        logger.exception("Database operation failed")
        raise StoreUnavailableError("Database operation failed") from exc


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def as_date(value: Any) -> Optional[date]:
    """Normalize DATE values across connector implementations.

    mysql-connector can return DATE as:
    - datetime.date
    - datetime.datetime (when the column was declared DATETIME)
    - string (e.g. '2025-01-31')
    """

    if value is None:
        return None

    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        return datetime.strptime(value.strip()[:10], "%Y-%m-%d").date()

    raise TypeError(f"Unsupported MySQL DATE value type: {type(value)!r}")


@dataclass(frozen=True)
class TableSpec:
    """Whitelist of the columns a RecordStore may read, filter, sort or write."""

    name: str
    columns: Tuple[str, ...]
    writable: Tuple[str, ...]
    primary_key: str = "id"
    default_order: Tuple[Tuple[str, bool], ...] = (("created_at", True), ("id", True))
    touch_column: Optional[str] = "updated_at"

    def check(self, column: str) -> str:
        if column not in self.columns:
            raise ValueError(f"Unknown column {column!r} for table {self.name!r}")
        return column


class RecordStore:
    """Parameterized CRUD over a single table.

    Rows come back as dicts keyed by column name; mapping to domain records
    is the repository's job.
    """

    def __init__(self, conn_factory: "DatabaseConnection", table: TableSpec):
        self._conn_factory = conn_factory
        self._table = table

    @property
    def table(self) -> TableSpec:
        return self._table

    def _select_list(self) -> str:
        return ", ".join(self._table.columns)

    def _order_clause(self, order_by: Optional[Sequence[Tuple[str, bool]]]) -> str:
        terms = order_by or self._table.default_order
        parts = [f"{self._table.check(col)} {'DESC' if desc else 'ASC'}" for col, desc in terms]
        return " ORDER BY " + ", ".join(parts) if parts else ""

    def _where_clause(self, filters: Optional[Mapping[str, Any]]) -> Tuple[str, list]:
        clauses: list[str] = []
        params: list = []
        for col, value in (filters or {}).items():
            if value is None:
                continue
            clauses.append(f"{self._table.check(col)}=%s")
            params.append(value)
        where = " WHERE " + " AND ".join(clauses) if clauses else ""
        return where, params

    def _select_by_id(self, cur, record_id: Any, *, for_update: bool = False) -> Optional[Dict[str, Any]]:
        sql = (
            f"SELECT {self._select_list()} FROM {self._table.name} "
            f"WHERE {self._table.primary_key}=%s"
        )
        if for_update:
            sql += " FOR UPDATE"
        cur.execute(sql, (record_id,))
        return fetchone(cur)

    def find(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        *,
        order_by: Optional[Sequence[Tuple[str, bool]]] = None,
    ) -> List[Dict[str, Any]]:
        where, params = self._where_clause(filters)
        sql = f"SELECT {self._select_list()} FROM {self._table.name}{where}{self._order_clause(order_by)}"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return fetchall(cur)

    def find_by_id(self, record_id: Any) -> Optional[Dict[str, Any]]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_by_id(cur, record_id)

    def save(self, values: Mapping[str, Any], record_id: Any = None) -> Optional[Dict[str, Any]]:
        """Insert when ``record_id`` is None, update otherwise.

        The row is re-read in the same transaction so server-computed columns
        (generated id, timestamps) are reflected back. Returns None when an
        update targets a row that no longer exists.
        """
        cols = [c for c in values if c in self._table.writable]
        if len(cols) != len(values):
            unknown = sorted(set(values) - set(cols))
            raise ValueError(f"Columns not writable on {self._table.name!r}: {unknown}")
        params = [values[c] for c in cols]

        with db_cursor(self._conn_factory) as (_, cur):
            if record_id is None:
                placeholders = ",".join(["%s"] * len(cols))
                cur.execute(
                    f"INSERT INTO {self._table.name}({', '.join(cols)}) VALUES({placeholders})",
                    tuple(params),
                )
                record_id = int(cur.lastrowid)
            else:
                assignments = [f"{c}=%s" for c in cols]
                if self._table.touch_column:
                    assignments.append(f"{self._table.touch_column}=CURRENT_TIMESTAMP")
                cur.execute(
                    f"UPDATE {self._table.name} SET {', '.join(assignments)} "
                    f"WHERE {self._table.primary_key}=%s",
                    tuple(params) + (record_id,),
                )
            return self._select_by_id(cur, record_id)

    def delete_by_id(self, record_id: Any) -> Optional[Dict[str, Any]]:
        with db_cursor(self._conn_factory) as (_, cur):
            row = self._select_by_id(cur, record_id, for_update=True)
            if not row:
                return None
            cur.execute(
                f"DELETE FROM {self._table.name} WHERE {self._table.primary_key}=%s",
                (record_id,),
            )
            return row

    def delete_where(self, column: str, op: str, value: Any) -> int:
        if op not in COMPARISON_OPERATORS:
            raise ValueError(f"Unsupported operator {op!r}")
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"DELETE FROM {self._table.name} WHERE {self._table.check(column)} {op} %s",
                (value,),
            )
            return int(cur.rowcount)
