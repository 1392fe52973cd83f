"""
Dynamic Iceberg Table Manager

Manages Snowflake Dynamic Iceberg Tables.

Dynamic tables are materialized query results that Snowflake refreshes on
its own to stay within TARGET_LAG of their sources. They are READ-ONLY:
rows come from the defining SELECT and cannot be inserted or updated.

An optional IMMUTABLE WHERE predicate marks rows that will never change so
incremental refreshes can skip them. BACKFILL FROM is not supported for
dynamic Iceberg tables.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from dit_demo.core.table_managers.iceberg import IcebergTableManager

logger = logging.getLogger(__name__)


class DynamicIcebergTableManager(IcebergTableManager):
    """
    Manages dynamic Iceberg tables.

    Inherits the Iceberg storage handling and adds refresh control and
    refresh monitoring.
    """

    def build_create_sql(self) -> str:
        """CREATE OR REPLACE DYNAMIC ICEBERG TABLE ... AS <query>."""
        full_name = self.get_full_table_name()
        columns = self.get_column_definitions()

        clauses = [
            f"TARGET_LAG = '{self.config.target_lag}'",
            f"WAREHOUSE = {self.config.warehouse}",
            *self._storage_clauses(),
        ]
        if self.config.immutable_where:
            clauses.append(f"IMMUTABLE WHERE ({self.config.immutable_where})")

        create_sql = f"CREATE OR REPLACE DYNAMIC ICEBERG TABLE {full_name}\n(\n"
        create_sql += ",\n".join(f"    {col}" for col in columns)
        create_sql += "\n)\n"
        create_sql += "\n".join(f"    {clause}" for clause in clauses)
        create_sql += f"\nAS\n{self.config.query.strip()}"
        return create_sql

    def build_drop_sql(self) -> str:
        return f"DROP DYNAMIC TABLE IF EXISTS {self.get_full_table_name()}"

    def build_show_sql(self) -> str:
        return f"SHOW DYNAMIC TABLES LIKE '{self.table_name}'{self._schema_scope()}"

    def build_alter_sql(self, action: str) -> str:
        """ALTER DYNAMIC TABLE ... REFRESH | SUSPEND | RESUME."""
        action = action.upper()
        if action not in ("REFRESH", "SUSPEND", "RESUME"):
            raise ValueError(f"Unsupported dynamic table action: {action}")
        return f"ALTER DYNAMIC TABLE {self.get_full_table_name()} {action}"

    def build_refresh_history_sql(
        self, limit: int = 10, columns: Optional[List[str]] = None
    ) -> str:
        select = ",\n    ".join(columns) if columns else "*"
        return (
            f"SELECT {select}\n"
            f"FROM TABLE({self._information_schema()}.DYNAMIC_TABLE_REFRESH_HISTORY(\n"
            f"    NAME => '{self.get_full_table_name().upper()}'\n"
            f"))\n"
            f"ORDER BY REFRESH_START_TIME DESC\n"
            f"LIMIT {int(limit)}"
        )

    def build_scheduling_state_sql(self) -> str:
        return (
            "SELECT\n    name,\n    scheduling_state\n"
            f"FROM TABLE({self._information_schema()}.DYNAMIC_TABLE_GRAPH_HISTORY())\n"
            f"WHERE SCHEMA_NAME = '{(self.schema_name or '').upper()}' "
            f"AND NAME = '{self.table_name.upper()}'\n"
            "  AND VALID_TO IS NULL"
        )

    def build_iceberg_information_sql(self) -> str:
        return (
            "SELECT SYSTEM$GET_ICEBERG_TABLE_INFORMATION("
            f"'{self.get_full_table_name().upper()}') AS iceberg_info"
        )

    def _information_schema(self) -> str:
        if self.database:
            return f"{self.database}.INFORMATION_SCHEMA"
        return "INFORMATION_SCHEMA"

    async def _alter(self, action: str) -> bool:
        full_name = self.get_full_table_name()
        try:
            await self._require_pool().execute_query(self.build_alter_sql(action))
        except Exception as e:
            logger.error(f"Failed to {action.lower()} {full_name}: {e}")
            return False
        logger.info(f"✅ {action.title()} issued for {full_name}")
        return True

    async def refresh(self) -> bool:
        """Trigger a manual refresh."""
        return await self._alter("REFRESH")

    async def suspend(self) -> bool:
        """Suspend scheduled refreshes."""
        return await self._alter("SUSPEND")

    async def resume(self) -> bool:
        """Resume scheduled refreshes."""
        return await self._alter("RESUME")

    async def refresh_history(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Most recent refreshes, newest first."""
        return await self._require_pool().fetch_dicts(
            self.build_refresh_history_sql(limit)
        )

    async def scheduling_state(self) -> Optional[str]:
        """Current scheduling state (e.g. ACTIVE, SUSPENDED), None if unknown."""
        try:
            rows = await self._require_pool().execute_query(
                self.build_scheduling_state_sql()
            )
        except Exception as e:
            logger.warning(f"Failed to read scheduling state of {self.table_name}: {e}")
            return None
        if not rows:
            return None
        state = rows[0][1]
        # GRAPH_HISTORY returns an object column like {"state": "ACTIVE"}
        if isinstance(state, dict):
            state = state.get("state")
        elif isinstance(state, str) and state.strip().startswith("{"):
            state = json.loads(state).get("state")
        return str(state).upper() if state is not None else None

