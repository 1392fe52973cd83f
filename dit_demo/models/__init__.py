"""
Data models for the Dynamic Iceberg Tables demo.

This package contains Pydantic models for:
- Iceberg and dynamic Iceberg table configurations
- Warehouse and external volume configurations
- Fixture records (products, orders)
"""

from dit_demo.models.table_config import (
    TableType,
    TableConfig,
    parse_target_lag,
    validate_immutability_predicate,
)

from dit_demo.models.infrastructure import (
    WarehouseSize,
    WarehouseConfig,
    StorageProvider,
    ExternalVolumeConfig,
)

from dit_demo.models.fixtures import (
    Product,
    Order,
    OrderLine,
)

__all__ = [
    # table_config
    "TableType",
    "TableConfig",
    "parse_target_lag",
    "validate_immutability_predicate",
    # infrastructure
    "WarehouseSize",
    "WarehouseConfig",
    "StorageProvider",
    "ExternalVolumeConfig",
    # fixtures
    "Product",
    "Order",
    "OrderLine",
]
