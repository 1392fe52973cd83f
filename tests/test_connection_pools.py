#!/usr/bin/env python3
"""
Tests for the Snowflake connection pool.

Unit tests patch snowflake.connector.connect with fake connections; the live
test runs only with DIT_LIVE_TEST=1 and real credentials.
"""

from typing import Any, List, Optional
from unittest.mock import patch

import pytest
from snowflake.connector.errors import OperationalError

from dit_demo.connectors.snowflake_pool import (
    PoolExhaustedError,
    SnowflakeConnectionPool,
)

pytestmark = pytest.mark.asyncio


def _snowflake_unreachable(exc: BaseException) -> bool:
    msg = str(exc).lower()
    return (
        ("ip/token" in msg and "not allowed" in msg)
        or ("is not allowed to access snowflake" in msg)
        or ("failed to connect to db" in msg)
        or ("(08001)" in msg)
    )


class FakeCursor:
    def __init__(self, rows: List[Any], columns: List[str]):
        self._rows = rows
        self.description = [(c,) for c in columns]
        self.sfqid = "01b2-fake"
        self.rowcount = len(rows)
        self.executed: List[str] = []
        self.closed = False

    def execute(self, query: str, params: Optional[object] = None):
        self.executed.append(query)
        return self

    def fetchall(self):
        return list(self._rows)

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, rows=None, columns=None):
        self.rows = rows or []
        self.columns = columns or []
        self.cursors: List[FakeCursor] = []
        self.cursor_classes: List[Any] = []
        self.closed = False

    def is_closed(self) -> bool:
        return self.closed

    def cursor(self, cursor_class=None):
        self.cursor_classes.append(cursor_class)
        cur = FakeCursor(self.rows, self.columns)
        self.cursors.append(cur)
        return cur

    def close(self):
        self.closed = True


def _pool(**kwargs) -> SnowflakeConnectionPool:
    defaults = dict(account="acct", user="demo_user", password="secret", retry_delay=0)
    defaults.update(kwargs)
    return SnowflakeConnectionPool(**defaults)


async def test_connection_params():
    pool = _pool(role="SYSADMIN", warehouse="DT_ICE_WH")
    params = pool._get_connection_params()
    assert params["account"] == "acct"
    assert params["password"] == "secret"
    assert params["role"] == "SYSADMIN"
    assert params["warehouse"] == "DT_ICE_WH"
    assert "database" not in params
    assert "QUERY_TAG" in params["session_parameters"]


async def test_execute_query_with_info():
    conn = FakeConnection(rows=[("DT_ICE_DEMO",)], columns=["name"])
    with patch("snowflake.connector.connect", return_value=conn) as connect:
        pool = _pool()
        rows, info = await pool.execute_query_with_info("SHOW DATABASES")
        await pool.close_all()

    connect.assert_called_once()
    assert rows == [("DT_ICE_DEMO",)]
    assert info == {"query_id": "01b2-fake", "rowcount": 1, "columns": ["name"]}
    assert conn.cursors[0].executed == ["SHOW DATABASES"]
    assert conn.cursors[0].closed
    assert conn.closed


async def test_connection_is_reused():
    conn = FakeConnection()
    with patch("snowflake.connector.connect", return_value=conn) as connect:
        pool = _pool()
        await pool.execute_query("USE DATABASE DT_ICE_DEMO")
        await pool.execute_query("SELECT 1")
        stats = await pool.get_pool_stats()

    assert connect.call_count == 1
    assert stats["available"] == 1
    assert stats["in_use"] == 0


async def test_skip_fetch():
    conn = FakeConnection(rows=[(1,)])
    with patch("snowflake.connector.connect", return_value=conn):
        rows, info = await _pool().execute_query_with_info(
            "INSERT INTO t VALUES (1)", fetch=False
        )
    assert rows == []
    assert info["rowcount"] == 1


async def test_fetch_dicts_uses_dict_cursor():
    from snowflake.connector import DictCursor

    conn = FakeConnection(rows=[{"NAME": "ORDER_DETAILS_DIT"}])
    with patch("snowflake.connector.connect", return_value=conn):
        rows = await _pool().fetch_dicts("SELECT * FROM history")
    assert rows == [{"NAME": "ORDER_DETAILS_DIT"}]
    assert conn.cursor_classes == [DictCursor]


async def test_connect_retries_operational_errors():
    conn = FakeConnection()
    with patch(
        "snowflake.connector.connect",
        side_effect=[OperationalError("transient"), conn],
    ) as connect:
        pool = _pool(max_retries=3)
        await pool.initialize()

    assert connect.call_count == 2
    assert (await pool.get_pool_stats())["available"] == 1


async def test_connect_gives_up_after_max_retries():
    with patch(
        "snowflake.connector.connect",
        side_effect=OperationalError("still down"),
    ) as connect:
        pool = _pool(max_retries=2)
        with pytest.raises(OperationalError):
            await pool.initialize()
    assert connect.call_count == 2


async def test_pool_exhausted():
    with patch("snowflake.connector.connect", return_value=FakeConnection()):
        pool = _pool()
        async with pool.get_connection():
            with pytest.raises(PoolExhaustedError):
                async with pool.get_connection():
                    pass


async def test_closed_connection_is_replaced():
    first, second = FakeConnection(), FakeConnection()
    with patch("snowflake.connector.connect", side_effect=[first, second]):
        pool = _pool()
        await pool.initialize()
        first.closed = True
        async with pool.get_connection() as conn:
            assert conn is second


async def test_default_pool_uses_demo_warehouse(monkeypatch):
    from dit_demo.config import settings
    from dit_demo.connectors import snowflake_pool

    monkeypatch.setattr(snowflake_pool, "_default_pool", None)
    monkeypatch.setattr(settings, "DEMO_WAREHOUSE", "DT_ICE_WH")
    pool = snowflake_pool.get_default_pool(role="DEMO_ROLE")
    try:
        assert snowflake_pool.get_default_pool() is pool
        params = pool._get_connection_params()
        assert params["warehouse"] == "DT_ICE_WH"
        assert params["role"] == "DEMO_ROLE"
        assert "database" not in params
    finally:
        await snowflake_pool.close_default_pool()
    assert snowflake_pool._default_pool is None


async def test_snowflake_pool_live(live_settings):
    """Run a query against a real account."""
    pool = SnowflakeConnectionPool(
        account=live_settings.SNOWFLAKE_ACCOUNT,
        user=live_settings.SNOWFLAKE_USER,
        password=live_settings.SNOWFLAKE_PASSWORD,
        role=live_settings.SNOWFLAKE_ROLE,
    )
    try:
        try:
            await pool.initialize()
        except Exception as e:
            if _snowflake_unreachable(e):
                pytest.skip(f"Snowflake not reachable ({live_settings.SNOWFLAKE_ACCOUNT}): {e}")
            raise

        rows, info = await pool.execute_query_with_info("SELECT CURRENT_VERSION()")
        assert rows and rows[0][0]
        assert info["query_id"]
        print(f"✅ Snowflake version: {rows[0][0]}")
    finally:
        await pool.close_all()
