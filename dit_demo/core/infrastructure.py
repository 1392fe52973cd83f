"""
Account infrastructure for the demo: database, schema, warehouse and the
external volume that stores Iceberg data.
"""

import logging
from typing import Iterable, List, Optional

from dit_demo.config import settings
from dit_demo.core.statements import Statement
from dit_demo.models import (
    ExternalVolumeConfig,
    StorageProvider,
    WarehouseConfig,
)

logger = logging.getLogger(__name__)


def _bool(value: bool) -> str:
    return "TRUE" if value else "FALSE"


class InfrastructureManager:
    """
    Builds setup and teardown statements for the demo's account objects.

    Objects are created with IF NOT EXISTS (the external volume is replaced)
    so setup can be rerun.
    """

    def __init__(
        self,
        database: str,
        schema_name: str,
        warehouse: WarehouseConfig,
        external_volume: ExternalVolumeConfig,
        role: str = "SYSADMIN",
        admin_role: str = "ACCOUNTADMIN",
    ):
        self.database = database
        self.schema_name = schema_name
        self.warehouse = warehouse
        self.external_volume = external_volume
        self.role = role
        self.admin_role = admin_role

    @classmethod
    def from_settings(cls) -> "InfrastructureManager":
        """Build from the environment settings."""
        warehouse = WarehouseConfig(
            name=settings.DEMO_WAREHOUSE,
            size=settings.DEMO_WAREHOUSE_SIZE,
            auto_suspend_seconds=settings.DEMO_WAREHOUSE_AUTO_SUSPEND,
        )
        volume = ExternalVolumeConfig(
            name=settings.EXTERNAL_VOLUME,
            provider=settings.STORAGE_PROVIDER,
            location_name=settings.STORAGE_LOCATION_NAME,
            base_url=settings.STORAGE_BASE_URL,
            aws_role_arn=settings.STORAGE_AWS_ROLE_ARN,
            aws_external_id=settings.STORAGE_AWS_EXTERNAL_ID,
            azure_tenant_id=settings.AZURE_TENANT_ID,
        )
        return cls(
            database=settings.DEMO_DATABASE,
            schema_name=settings.DEMO_SCHEMA,
            warehouse=warehouse,
            external_volume=volume,
            role=settings.SNOWFLAKE_ROLE,
            admin_role=settings.SNOWFLAKE_ADMIN_ROLE,
        )

    @property
    def full_schema_name(self) -> str:
        return f"{self.database}.{self.schema_name}"

    def context_statements(self, section: Optional[str] = None) -> List[Statement]:
        """USE ROLE / DATABASE / SCHEMA / WAREHOUSE for a step's session."""
        return [
            Statement(f"USE ROLE {self.role}", section=section),
            Statement(f"USE DATABASE {self.database}", section=section),
            Statement(f"USE SCHEMA {self.schema_name}", section=section),
            Statement(f"USE WAREHOUSE {self.warehouse.name}", section=section),
        ]

    def build_warehouse_sql(self) -> str:
        wh = self.warehouse
        return (
            f"CREATE WAREHOUSE IF NOT EXISTS {wh.name}\n"
            f"    WAREHOUSE_SIZE = '{wh.size_keyword}'\n"
            f"    AUTO_SUSPEND = {wh.auto_suspend_seconds}\n"
            f"    AUTO_RESUME = {_bool(wh.auto_resume)}\n"
            f"    INITIALLY_SUSPENDED = {_bool(wh.initially_suspended)}"
        )

    def build_external_volume_sql(self) -> str:
        """CREATE OR REPLACE EXTERNAL VOLUME for the configured provider."""
        vol = self.external_volume
        location = [
            f"NAME = '{vol.location_name}'",
            f"STORAGE_PROVIDER = '{StorageProvider(vol.provider).value}'",
            f"STORAGE_BASE_URL = '{vol.base_url}'",
        ]
        if vol.provider == StorageProvider.S3:
            location.append(f"STORAGE_AWS_ROLE_ARN = '{vol.aws_role_arn}'")
            if vol.aws_external_id:
                location.append(f"STORAGE_AWS_EXTERNAL_ID = '{vol.aws_external_id}'")
        else:
            location.append(f"AZURE_TENANT_ID = '{vol.azure_tenant_id}'")

        body = "\n".join(f"            {item}" for item in location)
        return (
            f"CREATE OR REPLACE EXTERNAL VOLUME {vol.name}\n"
            f"    STORAGE_LOCATIONS = (\n"
            f"        (\n{body}\n        )\n"
            f"    )\n"
            f"    ALLOW_WRITES = {_bool(vol.allow_writes)}"
        )

    def setup_statements(self) -> List[Statement]:
        """Statements that provision the demo infrastructure."""
        vol = self.external_volume.name
        return [
            Statement(f"USE ROLE {self.role}", section="Set context"),
            Statement(
                f"CREATE DATABASE IF NOT EXISTS {self.database}",
                comment="Dedicated database for the demo",
                section="Create objects",
            ),
            Statement(
                f"CREATE SCHEMA IF NOT EXISTS {self.full_schema_name}",
                section="Create objects",
            ),
            Statement(self.build_warehouse_sql(), section="Create objects"),
            *self.context_statements(section="Set working context")[1:],
            Statement(
                self.build_external_volume_sql(),
                comment=f"{StorageProvider(self.external_volume.provider).value} external volume",
                section="External volume",
            ),
            Statement(f"DESC EXTERNAL VOLUME {vol}", section="External volume"),
            Statement(
                f"GRANT USAGE ON EXTERNAL VOLUME {vol} TO ROLE {self.admin_role}",
                section="External volume",
            ),
            *self.verify_statements(),
        ]

    def verify_statements(self) -> List[Statement]:
        return [
            Statement(f"SHOW DATABASES LIKE '{self.database}'", section="Verify"),
            Statement(f"SHOW SCHEMAS IN DATABASE {self.database}", section="Verify"),
            Statement(f"SHOW WAREHOUSES LIKE '{self.warehouse.name}'", section="Verify"),
            Statement(
                f"SHOW EXTERNAL VOLUMES LIKE '{self.external_volume.name}'",
                section="Verify",
            ),
        ]

    def teardown_statements(self) -> List[Statement]:
        """
        Statements that drop schema, database, warehouse and external volume.

        Dropping the volume leaves the Iceberg files in object storage; see
        storage_paths() and the storage-cleanup step.
        """
        return [
            Statement(
                f"DROP SCHEMA IF EXISTS {self.full_schema_name}",
                section="Drop schema and database",
            ),
            Statement(
                f"DROP DATABASE IF EXISTS {self.database}",
                section="Drop schema and database",
            ),
            Statement(
                f"DROP WAREHOUSE IF EXISTS {self.warehouse.name}",
                section="Drop warehouse",
            ),
            Statement(
                f"DROP EXTERNAL VOLUME IF EXISTS {self.external_volume.name}",
                comment="Does not delete data files from cloud storage",
                section="Drop external volume",
            ),
            Statement(f"SHOW DATABASES LIKE '{self.database}'", section="Verify"),
            Statement(f"SHOW WAREHOUSES LIKE '{self.warehouse.name}'", section="Verify"),
            Statement(
                f"SHOW EXTERNAL VOLUMES LIKE '{self.external_volume.name}'",
                section="Verify",
            ),
        ]

    def storage_paths(self, base_locations: Iterable[str]) -> List[str]:
        """Object-store prefixes holding table data after teardown."""
        return [self.external_volume.table_location(loc) for loc in base_locations]
