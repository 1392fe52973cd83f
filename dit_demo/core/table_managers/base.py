"""
Base Table Manager

Abstract interface for the demo's Iceberg tables.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, List
import logging

from dit_demo.models import TableConfig

logger = logging.getLogger(__name__)


class TableManager(ABC):
    """
    Abstract base class for managing demo tables.

    Each table type (source Iceberg, dynamic Iceberg) implements this
    interface. SQL text is produced by the build_*_sql methods, which never
    need a connection; the async methods execute it through the pool.
    """

    def __init__(self, config: TableConfig, pool=None):
        """
        Initialize table manager with configuration.

        Args:
            config: Table configuration
            pool: Connection pool (anything with execute_query); only needed
                for the async methods
        """
        self.config = config
        self.table_name = config.name
        self.database = config.database
        self.schema_name = config.schema_name
        self.pool = pool

    @abstractmethod
    def build_create_sql(self) -> str:
        """CREATE statement for the table."""

    @abstractmethod
    def build_drop_sql(self) -> str:
        """DROP ... IF EXISTS statement for the table."""

    @abstractmethod
    def build_show_sql(self) -> str:
        """SHOW statement that lists this table."""

    def _require_pool(self):
        if self.pool is None:
            raise RuntimeError(
                f"{type(self).__name__} for {self.table_name} has no connection pool"
            )
        return self.pool

    async def table_exists(self) -> bool:
        """
        Check if table exists.

        Returns:
            bool: True if table exists
        """
        try:
            result = await self._require_pool().execute_query(self.build_show_sql())
            return len(result) > 0
        except Exception as e:
            logger.debug(f"Error checking table existence: {e}")
            return False

    async def get_table_stats(self) -> Dict[str, Any]:
        """
        Get table statistics (row count).

        Returns:
            Dict with table statistics
        """
        full_name = self.get_full_table_name()
        try:
            result = await self._require_pool().execute_query(
                f"SELECT COUNT(*) FROM {full_name}"
            )
            return {"row_count": int(result[0][0]) if result else 0}
        except Exception as e:
            logger.error(f"Failed to get table stats for {full_name}: {e}")
            return {"error": str(e)}

    def get_full_table_name(self) -> str:
        """
        Get fully qualified table name.

        Returns:
            str: database.schema.table or just table
        """
        parts = []
        if self.database:
            parts.append(self.database)
        if self.schema_name:
            parts.append(self.schema_name)
        parts.append(self.table_name)
        return ".".join(parts)

    def get_column_definitions(self) -> List[str]:
        """
        Get column definitions as SQL strings.

        Returns:
            List of "column_name type" strings
        """
        return [
            f"{col_name} {col_type}"
            for col_name, col_type in self.config.columns.items()
        ]

    def _storage_clauses(self) -> List[str]:
        return [
            f"EXTERNAL_VOLUME = '{self.config.external_volume}'",
            f"CATALOG = '{self.config.catalog}'",
            f"BASE_LOCATION = '{self.config.base_location}'",
        ]

    def _schema_scope(self) -> str:
        if self.database and self.schema_name:
            return f" IN SCHEMA {self.database}.{self.schema_name}"
        return ""
