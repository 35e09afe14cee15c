from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Iterator, Optional

import mysql.connector
from mysql.connector import pooling

from ..core.constants import (
    DEFAULT_CONNECT_TIMEOUT_SECONDS,
    DEFAULT_POOL_SIZE,
    DEFAULT_POOL_TIMEOUT_SECONDS,
)
from ..core.exceptions import StoreUnavailableError
from .mysql_base import db_cursor, fetchone

logger = logging.getLogger(__name__)

# mysql-connector refuses pools larger than this.
MAX_POOL_SIZE = pooling.CNX_POOL_MAXSIZE


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    pool_size: int = DEFAULT_POOL_SIZE
    pool_timeout: float = DEFAULT_POOL_TIMEOUT_SECONDS
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT_SECONDS

    @classmethod
    def from_dict(cls, db_config: dict, **overrides) -> "DBConfig":
        return cls(
            host=str(db_config["host"]),
            port=int(db_config.get("port", 3306)),
            user=str(db_config["user"]),
            password=str(db_config["password"]),
            database=str(db_config["database"]),
            **overrides,
        )


class DatabaseConnection:
    """Bounded pool of MySQL connections shared by every repository.

    The pool is created on first use so the app can start while the database
    is still coming up. A semaphore sized to the pool bounds concurrent
    borrowers; waiting longer than ``pool_timeout`` raises
    StoreUnavailableError instead of blocking the request forever.
    """

    def __init__(self, config: DBConfig):
        self._config = config
        self._pool_size = max(1, min(int(config.pool_size), MAX_POOL_SIZE))
        self._slots = threading.BoundedSemaphore(self._pool_size)
        self._pool: Optional[pooling.MySQLConnectionPool] = None
        self._pool_lock = threading.Lock()

    @property
    def pool_size(self) -> int:
        return self._pool_size

    def _get_pool(self) -> pooling.MySQLConnectionPool:
        with self._pool_lock:
            if self._pool is None:
                logger.info(
                    "Creating MySQL pool size=%s db=%s@%s:%s/%s",
                    self._pool_size,
                    self._config.user,
                    self._config.host,
                    self._config.port,
                    self._config.database,
                )
                self._pool = pooling.MySQLConnectionPool(
                    pool_name="task_tracker",
                    pool_size=self._pool_size,
                    host=self._config.host,
                    port=int(self._config.port),
                    user=self._config.user,
                    password=self._config.password,
                    database=self._config.database,
                    connection_timeout=int(self._config.connect_timeout),
                )
            return self._pool

    @contextmanager
    def acquire(self) -> Iterator[mysql.connector.MySQLConnection]:
        if not self._slots.acquire(timeout=float(self._config.pool_timeout)):
            logger.error("Timed out after %ss waiting for a database connection", self._config.pool_timeout)
            raise StoreUnavailableError("Timed out waiting for a database connection")
        try:
            conn = self._get_pool().get_connection()
            try:
                yield conn
            finally:
                # Pooled connections go back to the pool on close().
                conn.close()
        finally:
            self._slots.release()

    def ping(self) -> datetime:
        with db_cursor(self) as (_, cur):
            cur.execute("SELECT NOW() AS now")
            row = fetchone(cur)
            return row["now"]

    def close(self) -> None:
        """Close the idle pooled connections and forget the pool.

        mysql-connector has no public call for this; `_remove_connections`
        is the private method the driver itself uses when a pool is torn down,
        so a driver upgrade may need this revisited.
        """
        with self._pool_lock:
            if self._pool is not None:
                logger.info("Closing MySQL pool")
                self._pool._remove_connections()
                self._pool = None
