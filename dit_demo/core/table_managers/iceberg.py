"""
Iceberg Table Manager

Manages Snowflake-managed Iceberg source tables stored on an external volume.
"""

from typing import Optional

from dit_demo.core.table_managers.base import TableManager


class IcebergTableManager(TableManager):
    """
    Manages source Iceberg tables (CATALOG = 'SNOWFLAKE').

    Source tables are writable: the demo inserts fixture rows and later
    inserts/updates orders to drive dynamic table refreshes.
    """

    def build_create_sql(self) -> str:
        """CREATE OR REPLACE ICEBERG TABLE with its storage settings."""
        full_name = self.get_full_table_name()
        columns = self.get_column_definitions()

        create_sql = f"CREATE OR REPLACE ICEBERG TABLE {full_name} (\n"
        create_sql += ",\n".join(f"    {col}" for col in columns)
        create_sql += "\n)\n"
        create_sql += "\n".join(f"    {clause}" for clause in self._storage_clauses())
        return create_sql

    def build_drop_sql(self) -> str:
        return f"DROP ICEBERG TABLE IF EXISTS {self.get_full_table_name()}"

    def build_show_sql(self) -> str:
        return f"SHOW ICEBERG TABLES LIKE '{self.table_name}'{self._schema_scope()}"

    def build_select_sql(self, order_by: Optional[str] = None) -> str:
        select_sql = f"SELECT * FROM {self.get_full_table_name()}"
        if order_by:
            select_sql += f" ORDER BY {order_by}"
        return select_sql
