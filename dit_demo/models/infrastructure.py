"""
Infrastructure Models

Warehouse and external volume configuration for the demo account objects.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class WarehouseSize(str, Enum):
    """Snowflake warehouse sizes."""

    XSMALL = "X-Small"
    SMALL = "Small"
    MEDIUM = "Medium"
    LARGE = "Large"
    XLARGE = "X-Large"
    XXLARGE = "2X-Large"
    XXXLARGE = "3X-Large"
    X4LARGE = "4X-Large"


class WarehouseConfig(BaseModel):
    """
    Configuration for the demo warehouse.
    """

    name: str = Field(..., description="Warehouse name")
    size: WarehouseSize = Field(WarehouseSize.XSMALL, description="Warehouse size")

    # Auto-suspend/resume
    auto_suspend_seconds: int = Field(
        60, ge=0, description="Auto-suspend after N seconds (0=never)"
    )
    auto_resume: bool = Field(True, description="Auto-resume on query")
    initially_suspended: bool = Field(
        True, description="Create the warehouse suspended"
    )

    @property
    def size_keyword(self) -> str:
        """Size as written in DDL (e.g. X-SMALL)."""
        return WarehouseSize(self.size).value.upper()

    class Config:
        use_enum_values = True


class StorageProvider(str, Enum):
    """Object storage providers for external volumes."""

    S3 = "S3"
    AZURE = "AZURE"


class ExternalVolumeConfig(BaseModel):
    """
    External volume backing the Iceberg tables.

    Only one storage location is configured; S3 needs an IAM role, Azure
    needs a tenant id.
    """

    name: str = Field(..., description="External volume name")
    provider: StorageProvider = Field(StorageProvider.S3, description="Provider")
    location_name: Optional[str] = Field(
        None, description="Storage location name (defaults from volume name)"
    )
    base_url: str = Field(..., description="Storage base URL")

    # S3
    aws_role_arn: Optional[str] = Field(None, description="IAM role ARN")
    aws_external_id: Optional[str] = Field(None, description="IAM external id")

    # Azure
    azure_tenant_id: Optional[str] = Field(None, description="Azure tenant id")

    allow_writes: bool = Field(True, description="Allow Snowflake to write")

    @model_validator(mode="after")
    def validate_provider_requirements(self):
        if self.provider == StorageProvider.S3:
            if not self.base_url.startswith("s3://"):
                raise ValueError("S3 external volumes need an s3:// base URL")
            if not self.aws_role_arn:
                raise ValueError("S3 external volumes require aws_role_arn")
        else:
            if not self.base_url.startswith("azure://"):
                raise ValueError("Azure external volumes need an azure:// base URL")
            if not self.azure_tenant_id:
                raise ValueError("Azure external volumes require azure_tenant_id")

        if self.location_name is None:
            suffix = "s3" if self.provider == StorageProvider.S3 else "azure"
            stem = self.name[: -len("_ext_volume")] if self.name.endswith(
                "_ext_volume"
            ) else self.name
            self.location_name = f"{stem}_{suffix}_location"

        if not self.base_url.endswith("/"):
            self.base_url += "/"
        return self

    def table_location(self, base_location: str) -> str:
        """Object-store prefix for a table's BASE_LOCATION."""
        return f"{self.base_url}{base_location.lstrip('/')}"

    class Config:
        use_enum_values = True
