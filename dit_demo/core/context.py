"""
Demo context: the infrastructure and table definitions one run works with.
"""

import logging
from typing import Dict, List, Optional

from dit_demo.core.definitions_loader import (
    ORDERS_TABLE,
    PRODUCTS_TABLE,
    DefinitionsLoader,
)
from dit_demo.core.infrastructure import InfrastructureManager
from dit_demo.core.table_managers import (
    DynamicIcebergTableManager,
    IcebergTableManager,
    TableManager,
    create_table_manager,
)

logger = logging.getLogger(__name__)


class DemoContext:
    """
    Bundles the infrastructure manager, the definitions loader and one table
    manager per defined table.
    """

    def __init__(
        self,
        infrastructure: InfrastructureManager,
        loader: DefinitionsLoader,
        pool=None,
    ):
        self.infrastructure = infrastructure
        self.loader = loader
        self.pool = pool
        self._managers: Optional[Dict[str, TableManager]] = None

    @classmethod
    def from_settings(cls, pool=None) -> "DemoContext":
        infrastructure = InfrastructureManager.from_settings()
        loader = DefinitionsLoader(
            database=infrastructure.database,
            schema_name=infrastructure.schema_name,
            warehouse=infrastructure.warehouse.name,
            external_volume=infrastructure.external_volume.name,
        )
        return cls(infrastructure, loader, pool)

    @property
    def database(self) -> str:
        return self.infrastructure.database

    @property
    def schema_name(self) -> str:
        return self.infrastructure.schema_name

    @property
    def warehouse(self) -> str:
        return self.infrastructure.warehouse.name

    @property
    def managers(self) -> Dict[str, TableManager]:
        if self._managers is None:
            configs = [*self.loader.source_tables(), *self.loader.dynamic_tables()]
            self._managers = {
                c.name.lower(): create_table_manager(c, self.pool) for c in configs
            }
        return self._managers

    def manager(self, name: str) -> TableManager:
        try:
            return self.managers[name.lower()]
        except KeyError:
            raise KeyError(f"Unknown table: {name}") from None

    def source(self, name: str) -> IcebergTableManager:
        mgr = self.manager(name)
        if isinstance(mgr, DynamicIcebergTableManager) or not isinstance(
            mgr, IcebergTableManager
        ):
            raise TypeError(f"{name} is not a source Iceberg table")
        return mgr

    def dynamic(self, name: str) -> DynamicIcebergTableManager:
        mgr = self.manager(name)
        if not isinstance(mgr, DynamicIcebergTableManager):
            raise TypeError(f"{name} is not a dynamic Iceberg table")
        return mgr

    def dynamic_tables(self, group: Optional[str] = None) -> List[DynamicIcebergTableManager]:
        names = [c.name for c in self.loader.dynamic_tables(group)]
        return [self.dynamic(n) for n in names]

    def source_tables(self) -> List[IcebergTableManager]:
        return [self.source(c.name) for c in self.loader.source_tables()]

    @property
    def orders(self) -> IcebergTableManager:
        return self.source(ORDERS_TABLE)

    @property
    def products(self) -> IcebergTableManager:
        return self.source(PRODUCTS_TABLE)

    def full_name(self, name: str) -> str:
        return self.manager(name).get_full_table_name()
