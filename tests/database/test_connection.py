from __future__ import annotations

import pytest

from src.task_tracker.task_tracker.core.exceptions import StoreUnavailableError
from src.task_tracker.task_tracker.database import connection as connection_module
from src.task_tracker.task_tracker.database.connection import MAX_POOL_SIZE, DBConfig, DatabaseConnection


class _PooledConn:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


class _FakePool:
    instances = []

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.handed_out = []
        self.removed = False
        _FakePool.instances.append(self)

    def get_connection(self):
        conn = _PooledConn()
        self.handed_out.append(conn)
        return conn

    def _remove_connections(self):
        self.removed = True
        return len(self.handed_out)


@pytest.fixture()
def fake_pool(monkeypatch):
    _FakePool.instances = []
    monkeypatch.setattr(connection_module.pooling, "MySQLConnectionPool", _FakePool)
    return _FakePool


def _config(**overrides) -> DBConfig:
    return DBConfig.from_dict(
        {"host": "db", "port": "3307", "user": "u", "password": "p", "database": "taskmanager"},
        **overrides,
    )


def test_config_from_dict():
    config = _config(pool_size=3)

    assert config.port == 3307
    assert config.database == "taskmanager"
    assert config.pool_size == 3


def test_pool_is_created_lazily_once(fake_pool):
    conn = DatabaseConnection(_config(pool_size=2))
    assert fake_pool.instances == []

    with conn.acquire():
        pass
    with conn.acquire():
        pass

    assert len(fake_pool.instances) == 1
    kwargs = fake_pool.instances[0].kwargs
    assert kwargs["pool_size"] == 2
    assert kwargs["database"] == "taskmanager"


def test_acquire_returns_connection_to_pool(fake_pool):
    conn = DatabaseConnection(_config(pool_size=1))

    with conn.acquire() as first:
        assert not first.closed
    assert first.closed

    # the single slot is free again
    with conn.acquire():
        pass


def test_exhausted_pool_times_out(fake_pool):
    conn = DatabaseConnection(_config(pool_size=1, pool_timeout=0.05))

    with conn.acquire():
        with pytest.raises(StoreUnavailableError, match="Timed out"):
            with conn.acquire():
                pass


def test_pool_size_is_clamped():
    assert DatabaseConnection(_config(pool_size=1000)).pool_size == MAX_POOL_SIZE
    assert DatabaseConnection(_config(pool_size=0)).pool_size == 1


def test_close_drops_pool(fake_pool):
    conn = DatabaseConnection(_config())
    with conn.acquire():
        pass

    conn.close()
    with conn.acquire():
        pass

    assert len(fake_pool.instances) == 2
    assert fake_pool.instances[0].removed
    assert not fake_pool.instances[1].removed
