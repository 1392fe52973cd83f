"""
Table Definitions Loader

Loads the YAML catalog of source and dynamic Iceberg tables and converts its
entries into TableConfig objects bound to the configured database, schema,
warehouse and external volume.
"""

import logging
from pathlib import Path
from typing import Dict, Any, List, Optional

import yaml

from dit_demo.config import settings
from dit_demo.core.sql import qualify
from dit_demo.models import TableConfig, TableType

logger = logging.getLogger(__name__)

DEFAULT_DEFINITIONS_FILE = (
    Path(__file__).resolve().parent.parent / "definitions" / "dynamic_iceberg_tables.yaml"
)

ORDERS_TABLE = "orders_staging"
PRODUCTS_TABLE = "products_staging"


class DefinitionsLoader:
    """
    Loads table definitions from a YAML file.

    Dynamic table queries may use {orders} and {products}; they are replaced
    with the fully qualified source table names.
    """

    def __init__(
        self,
        definitions_file: Optional[Path] = None,
        *,
        database: Optional[str] = None,
        schema_name: Optional[str] = None,
        warehouse: Optional[str] = None,
        external_volume: Optional[str] = None,
    ):
        if definitions_file is None:
            definitions_file = settings.DEFINITIONS_FILE or DEFAULT_DEFINITIONS_FILE

        self.definitions_file = Path(definitions_file)
        self.database = database or settings.DEMO_DATABASE
        self.schema_name = schema_name or settings.DEMO_SCHEMA
        self.warehouse = warehouse or settings.DEMO_WAREHOUSE
        self.external_volume = external_volume or settings.EXTERNAL_VOLUME
        self._data: Optional[Dict[str, Any]] = None

    def load(self) -> Dict[str, Any]:
        """
        Load (and cache) the raw YAML document.

        Raises:
            FileNotFoundError: definitions file is missing
            ValueError: document has no source_tables/dynamic_tables lists
        """
        if self._data is not None:
            return self._data

        if not self.definitions_file.exists():
            raise FileNotFoundError(
                f"Definitions file not found: {self.definitions_file}"
            )

        with open(self.definitions_file, "r") as f:
            data = yaml.safe_load(f) or {}

        for key in ("source_tables", "dynamic_tables"):
            if not isinstance(data.get(key), list):
                raise ValueError(
                    f"{self.definitions_file}: '{key}' must be a list of tables"
                )

        logger.debug(
            f"Loaded {len(data['source_tables'])} source and "
            f"{len(data['dynamic_tables'])} dynamic table definitions"
        )
        self._data = data
        return data

    def source_names(self) -> Dict[str, str]:
        """Placeholder -> fully qualified source table name."""
        return {
            "orders": qualify(self.database, self.schema_name, ORDERS_TABLE),
            "products": qualify(self.database, self.schema_name, PRODUCTS_TABLE),
        }

    def _to_table_config(
        self, entry: Dict[str, Any], table_type: TableType
    ) -> TableConfig:
        query = entry.get("query")
        if query:
            query = query.strip().format_map(self.source_names())

        return TableConfig(
            name=entry["name"],
            table_type=table_type,
            description=entry.get("description"),
            columns=entry.get("columns", {}),
            database=self.database,
            schema_name=self.schema_name,
            external_volume=entry.get("external_volume", self.external_volume),
            catalog=entry.get("catalog", "SNOWFLAKE"),
            base_location=entry.get("base_location"),
            target_lag=entry.get("target_lag"),
            warehouse=(
                entry.get("warehouse", self.warehouse)
                if table_type == TableType.DYNAMIC_ICEBERG
                else None
            ),
            query=query,
            immutable_where=entry.get("immutable_where"),
        )

    def source_tables(self) -> List[TableConfig]:
        """Source Iceberg tables, in creation order."""
        return [
            self._to_table_config(entry, TableType.ICEBERG)
            for entry in self.load()["source_tables"]
        ]

    def dynamic_tables(self, group: Optional[str] = None) -> List[TableConfig]:
        """
        Dynamic Iceberg tables, in creation order.

        Args:
            group: Only tables tagged with this group (e.g. "core")
        """
        return [
            self._to_table_config(entry, TableType.DYNAMIC_ICEBERG)
            for entry in self.load()["dynamic_tables"]
            if group is None or entry.get("group") == group
        ]

    def get_table(self, name: str) -> TableConfig:
        """
        Look up a single table definition by name (case-insensitive).

        Raises:
            KeyError: no table with that name
        """
        for config in [*self.source_tables(), *self.dynamic_tables()]:
            if config.name.lower() == name.lower():
                return config
        raise KeyError(f"Unknown table: {name}")
