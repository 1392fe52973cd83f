"""
Tests for the table managers.

Covers the factory, the DDL each manager builds, and the pool-backed
operations against a recording pool.
"""

import pytest

from dit_demo.core.table_managers import (
    DynamicIcebergTableManager,
    IcebergTableManager,
    create_table_manager,
)
from dit_demo.models import TableConfig, TableType


def _source_config(**overrides) -> TableConfig:
    data = {
        "name": "orders_staging",
        "table_type": TableType.ICEBERG,
        "columns": {"order_id": "NUMBER(10,0)", "order_status": "STRING"},
        "database": "DT_ICE_DEMO",
        "schema_name": "DEMO",
        "external_volume": "dt_ice_ext_volume",
    }
    data.update(overrides)
    return TableConfig(**data)


def _dynamic_config(**overrides) -> TableConfig:
    data = {
        "name": "order_analytics_immutable_dit",
        "table_type": TableType.DYNAMIC_ICEBERG,
        "columns": {"order_id": "NUMBER(10,0)", "order_status": "STRING"},
        "database": "DT_ICE_DEMO",
        "schema_name": "DEMO",
        "external_volume": "dt_ice_ext_volume",
        "target_lag": "5 minutes",
        "warehouse": "DT_ICE_WH",
        "query": "SELECT order_id, order_status FROM DT_ICE_DEMO.DEMO.orders_staging",
        "immutable_where": "order_status = 'COMPLETED'",
    }
    data.update(overrides)
    return TableConfig(**data)


class TestFactory:
    def test_source_table_manager(self) -> None:
        manager = create_table_manager(_source_config())
        assert type(manager) is IcebergTableManager
        assert manager.pool is None

    def test_dynamic_table_manager(self, recording_pool) -> None:
        pool = recording_pool()
        manager = create_table_manager(_dynamic_config(), pool)
        assert isinstance(manager, DynamicIcebergTableManager)
        assert manager.pool is pool


class TestIcebergDDL:
    def test_full_table_name(self) -> None:
        manager = IcebergTableManager(_source_config())
        assert manager.get_full_table_name() == "DT_ICE_DEMO.DEMO.orders_staging"

    def test_unqualified_name(self) -> None:
        manager = IcebergTableManager(_source_config(database=None, schema_name=None))
        assert manager.get_full_table_name() == "orders_staging"
        assert manager.build_show_sql() == "SHOW ICEBERG TABLES LIKE 'orders_staging'"

    def test_create_sql(self) -> None:
        sql = IcebergTableManager(_source_config()).build_create_sql()
        assert sql.startswith(
            "CREATE OR REPLACE ICEBERG TABLE DT_ICE_DEMO.DEMO.orders_staging ("
        )
        assert "    order_id NUMBER(10,0),\n    order_status STRING\n)" in sql
        assert "EXTERNAL_VOLUME = 'dt_ice_ext_volume'" in sql
        assert "CATALOG = 'SNOWFLAKE'" in sql
        assert "BASE_LOCATION = 'orders_staging/'" in sql
        assert "TARGET_LAG" not in sql

    def test_drop_and_show_sql(self) -> None:
        manager = IcebergTableManager(_source_config())
        assert manager.build_drop_sql() == (
            "DROP ICEBERG TABLE IF EXISTS DT_ICE_DEMO.DEMO.orders_staging"
        )
        assert manager.build_show_sql() == (
            "SHOW ICEBERG TABLES LIKE 'orders_staging' IN SCHEMA DT_ICE_DEMO.DEMO"
        )


class TestDynamicDDL:
    def test_create_sql_clauses(self) -> None:
        sql = DynamicIcebergTableManager(_dynamic_config()).build_create_sql()
        assert sql.startswith(
            "CREATE OR REPLACE DYNAMIC ICEBERG TABLE "
            "DT_ICE_DEMO.DEMO.order_analytics_immutable_dit\n("
        )
        assert "TARGET_LAG = '5 minutes'" in sql
        assert "WAREHOUSE = DT_ICE_WH" in sql
        assert "BASE_LOCATION = 'order_analytics_immutable_dit/'" in sql
        assert "IMMUTABLE WHERE (order_status = 'COMPLETED')" in sql
        assert sql.index("IMMUTABLE WHERE") < sql.index("\nAS\n")
        assert sql.endswith("FROM DT_ICE_DEMO.DEMO.orders_staging")

    def test_no_immutability_clause_by_default(self) -> None:
        sql = DynamicIcebergTableManager(
            _dynamic_config(immutable_where=None)
        ).build_create_sql()
        assert "IMMUTABLE" not in sql

    def test_drop_uses_dynamic_table(self) -> None:
        manager = DynamicIcebergTableManager(_dynamic_config())
        assert manager.build_drop_sql().startswith("DROP DYNAMIC TABLE IF EXISTS ")

    @pytest.mark.parametrize("action", ["refresh", "SUSPEND", "Resume"])
    def test_alter_sql(self, action: str) -> None:
        manager = DynamicIcebergTableManager(_dynamic_config())
        assert manager.build_alter_sql(action) == (
            "ALTER DYNAMIC TABLE DT_ICE_DEMO.DEMO.order_analytics_immutable_dit "
            f"{action.upper()}"
        )

    def test_alter_rejects_unknown_action(self) -> None:
        with pytest.raises(ValueError, match="BACKFILL"):
            DynamicIcebergTableManager(_dynamic_config()).build_alter_sql("backfill")

    def test_refresh_history_sql(self) -> None:
        sql = DynamicIcebergTableManager(_dynamic_config()).build_refresh_history_sql(
            limit=3, columns=["name", "state"]
        )
        assert "DT_ICE_DEMO.INFORMATION_SCHEMA.DYNAMIC_TABLE_REFRESH_HISTORY" in sql
        assert "NAME => 'DT_ICE_DEMO.DEMO.ORDER_ANALYTICS_IMMUTABLE_DIT'" in sql
        assert sql.startswith("SELECT name,\n    state\n")
        assert sql.endswith("LIMIT 3")

    def test_iceberg_information_sql(self) -> None:
        sql = DynamicIcebergTableManager(_dynamic_config()).build_iceberg_information_sql()
        assert "SYSTEM$GET_ICEBERG_TABLE_INFORMATION(" in sql
        assert "'DT_ICE_DEMO.DEMO.ORDER_ANALYTICS_IMMUTABLE_DIT'" in sql


class TestMonitoringSql:
    def test_scheduling_state_reads_current_version(self) -> None:
        sql = DynamicIcebergTableManager(_dynamic_config()).build_scheduling_state_sql()
        assert "DT_ICE_DEMO.INFORMATION_SCHEMA.DYNAMIC_TABLE_GRAPH_HISTORY()" in sql
        assert "NAME = 'ORDER_ANALYTICS_IMMUTABLE_DIT'" in sql
        assert sql.endswith("AND VALID_TO IS NULL")


class TestPoolOperations:
    @pytest.mark.asyncio
    async def test_table_exists(self, recording_pool) -> None:
        pool = recording_pool(responses={"SHOW DYNAMIC TABLES": [("row",)]})
        manager = DynamicIcebergTableManager(_dynamic_config(), pool)
        assert await manager.table_exists() is True

    @pytest.mark.asyncio
    async def test_table_missing(self, recording_pool) -> None:
        manager = IcebergTableManager(_source_config(), recording_pool())
        assert await manager.table_exists() is False

    @pytest.mark.asyncio
    async def test_table_stats(self, recording_pool) -> None:
        pool = recording_pool(responses={"SELECT COUNT(*)": [(15,)]})
        manager = IcebergTableManager(_source_config(), pool)
        assert await manager.get_table_stats() == {"row_count": 15}
        assert pool.executed == ["SELECT COUNT(*) FROM DT_ICE_DEMO.DEMO.orders_staging"]

    @pytest.mark.asyncio
    async def test_table_stats_error(self, recording_pool) -> None:
        manager = IcebergTableManager(
            _source_config(), recording_pool(fail_on="COUNT(*)")
        )
        assert "error" in await manager.get_table_stats()

    @pytest.mark.asyncio
    async def test_refresh_suspend_resume(self, recording_pool) -> None:
        pool = recording_pool()
        manager = DynamicIcebergTableManager(_dynamic_config(), pool)
        assert await manager.refresh()
        assert await manager.suspend()
        assert await manager.resume()
        assert [q.rsplit(" ", 1)[1] for q in pool.executed] == [
            "REFRESH",
            "SUSPEND",
            "RESUME",
        ]

    @pytest.mark.asyncio
    async def test_refresh_failure_returns_false(self, recording_pool) -> None:
        manager = DynamicIcebergTableManager(
            _dynamic_config(), recording_pool(fail_on="REFRESH")
        )
        assert await manager.refresh() is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("ACTIVE", "ACTIVE"),
            ('{"state": "SUSPENDED", "reason": "user"}', "SUSPENDED"),
            ({"state": "active"}, "ACTIVE"),
        ],
    )
    async def test_scheduling_state(self, recording_pool, raw, expected) -> None:
        pool = recording_pool(responses={"SELECT": [("ORDER_ANALYTICS_IMMUTABLE_DIT", raw)]})
        manager = DynamicIcebergTableManager(_dynamic_config(), pool)
        assert await manager.scheduling_state() == expected

    @pytest.mark.asyncio
    async def test_scheduling_state_unknown(self, recording_pool) -> None:
        manager = DynamicIcebergTableManager(_dynamic_config(), recording_pool())
        assert await manager.scheduling_state() is None

    @pytest.mark.asyncio
    async def test_refresh_history_returns_dicts(self, recording_pool) -> None:
        history = [{"NAME": "ORDER_ANALYTICS_IMMUTABLE_DIT", "STATE": "SUCCEEDED"}]
        pool = recording_pool(responses={"SELECT": history})
        manager = DynamicIcebergTableManager(_dynamic_config(), pool)
        assert await manager.refresh_history(limit=1) == history

    @pytest.mark.asyncio
    async def test_methods_require_pool(self) -> None:
        manager = DynamicIcebergTableManager(_dynamic_config())
        with pytest.raises(RuntimeError, match="no connection pool"):
            await manager.refresh_history()
