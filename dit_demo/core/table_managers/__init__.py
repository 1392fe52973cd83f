"""
Table managers for the demo's Iceberg tables.
"""

from dit_demo.models import TableConfig, TableType
from dit_demo.core.table_managers.base import TableManager
from dit_demo.core.table_managers.iceberg import IcebergTableManager
from dit_demo.core.table_managers.dynamic import DynamicIcebergTableManager


def create_table_manager(config: TableConfig, pool=None) -> TableManager:
    """
    Build the manager matching a table's type.

    Args:
        config: Table configuration
        pool: Connection pool for the async operations (optional)
    """
    table_type = TableType(config.table_type)
    if table_type == TableType.DYNAMIC_ICEBERG:
        return DynamicIcebergTableManager(config, pool)
    if table_type == TableType.ICEBERG:
        return IcebergTableManager(config, pool)
    raise ValueError(f"Unsupported table type: {config.table_type}")


__all__ = [
    "TableManager",
    "IcebergTableManager",
    "DynamicIcebergTableManager",
    "create_table_manager",
]
