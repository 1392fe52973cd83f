"""
Application settings for the Dynamic Iceberg Tables demo.

Values come from environment variables (or a local `.env` file). Defaults
match the demo object names used throughout the step scripts.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings (upper-case names, same as the env vars)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Snowflake connection
    SNOWFLAKE_ACCOUNT: str = "your_account.region"
    SNOWFLAKE_USER: str = "your_user"
    SNOWFLAKE_PASSWORD: Optional[str] = None
    SNOWFLAKE_ROLE: str = "SYSADMIN"
    SNOWFLAKE_ADMIN_ROLE: str = "ACCOUNTADMIN"
    SNOWFLAKE_QUERY_TAG: str = "dynamic_iceberg_demo"
    SNOWFLAKE_CONNECT_LOGIN_TIMEOUT: int = 30
    SNOWFLAKE_CONNECT_NETWORK_TIMEOUT: int = 60
    SNOWFLAKE_CONNECT_SOCKET_TIMEOUT: int = 60
    SNOWFLAKE_CONNECT_MAX_RETRIES: int = 3

    # Demo objects
    DEMO_DATABASE: str = "DT_ICE_DEMO"
    DEMO_SCHEMA: str = "DEMO"
    DEMO_WAREHOUSE: str = "DT_ICE_WH"
    DEMO_WAREHOUSE_SIZE: str = "X-Small"
    DEMO_WAREHOUSE_AUTO_SUSPEND: int = 60

    # External volume / object storage
    EXTERNAL_VOLUME: str = "dt_ice_ext_volume"
    STORAGE_PROVIDER: Literal["S3", "AZURE"] = "S3"
    STORAGE_LOCATION_NAME: Optional[str] = None
    STORAGE_BASE_URL: str = "s3://your-bucket/dt_iceberg_dw/tables/"
    STORAGE_AWS_ROLE_ARN: Optional[str] = "arn:aws:iam::000000000000:role/your-role"
    STORAGE_AWS_EXTERNAL_ID: Optional[str] = None
    AZURE_TENANT_ID: Optional[str] = None

    # Storage cleanup stage
    CLEANUP_STAGE_NAME: str = "dt_ice_cleanup_stage"
    CLEANUP_STAGE_URL: Optional[str] = None
    CLEANUP_STORAGE_INTEGRATION: Optional[str] = None

    # Table definitions (YAML); None means the packaged file
    DEFINITIONS_FILE: Optional[Path] = None

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_FILE: Optional[str] = None

    @property
    def credentials_configured(self) -> bool:
        return not (
            self.SNOWFLAKE_ACCOUNT.startswith("your_")
            or self.SNOWFLAKE_USER.startswith("your_")
            or not self.SNOWFLAKE_PASSWORD
        )


settings = Settings()
