"""
Global pytest configuration and fixtures for the demo tests.

This module provides:
- A demo context built from explicit (not environment) configuration
- A recording pool that stands in for SnowflakeConnectionPool
- Live Snowflake fixtures, skipped unless DIT_LIVE_TEST=1
"""

from __future__ import annotations

import os
from typing import Any, Callable, Dict, List, Optional

import pytest

from dit_demo.core.context import DemoContext
from dit_demo.core.definitions_loader import DefinitionsLoader
from dit_demo.core.infrastructure import InfrastructureManager
from dit_demo.models import ExternalVolumeConfig, WarehouseConfig

TEST_DATABASE = "DT_ICE_DEMO"
TEST_SCHEMA = "DEMO"
TEST_WAREHOUSE = "DT_ICE_WH"
TEST_VOLUME = "dt_ice_ext_volume"
TEST_BASE_URL = "s3://demo-bucket/dt_iceberg_dw/tables/"


def is_live_test() -> bool:
    """Check if we're running against a real Snowflake account."""
    return os.getenv("DIT_LIVE_TEST", "").lower() in ("1", "true", "yes")


# =============================================================================
# Recording pool
# =============================================================================


class RecordingPool:
    """
    Records every statement and answers from canned responses.

    responses maps a statement prefix (case-insensitive) to either rows or a
    callable taking the SQL and returning rows. fail_on raises for statements
    containing that text.
    """

    def __init__(
        self,
        responses: Optional[Dict[str, Any]] = None,
        fail_on: Optional[str] = None,
        error: Optional[BaseException] = None,
    ):
        self.executed: List[str] = []
        self.responses = responses or {}
        self.fail_on = fail_on
        self.error = error

    def _rows_for(self, query: str) -> list:
        if self.fail_on and self.fail_on.upper() in query.upper():
            raise self.error or RuntimeError(f"Statement failed: {self.fail_on}")
        stripped = query.strip().upper()
        for prefix, rows in self.responses.items():
            if stripped.startswith(prefix.upper()):
                return rows(query) if callable(rows) else list(rows)
        return []

    async def execute_query(self, query: str, params=None) -> list:
        self.executed.append(query)
        return self._rows_for(query)

    async def execute_query_with_info(self, query: str, params=None, *, fetch=True):
        self.executed.append(query)
        rows = self._rows_for(query)
        columns = [f"COL{i}" for i in range(len(rows[0]))] if rows else []
        return rows, {
            "query_id": f"qid-{len(self.executed)}",
            "rowcount": len(rows),
            "columns": columns,
        }

    async def fetch_dicts(self, query: str, params=None) -> list:
        self.executed.append(query)
        return self._rows_for(query)


@pytest.fixture
def recording_pool() -> Callable[..., RecordingPool]:
    """Factory fixture: recording_pool(responses=..., fail_on=...)."""
    return RecordingPool


# =============================================================================
# Demo configuration
# =============================================================================


@pytest.fixture
def warehouse_config() -> WarehouseConfig:
    return WarehouseConfig(name=TEST_WAREHOUSE, size="X-Small", auto_suspend_seconds=60)


@pytest.fixture
def s3_volume() -> ExternalVolumeConfig:
    return ExternalVolumeConfig(
        name=TEST_VOLUME,
        provider="S3",
        base_url=TEST_BASE_URL,
        aws_role_arn="arn:aws:iam::123456789012:role/demo-role",
        aws_external_id="demo-external-id",
    )


@pytest.fixture
def infrastructure(warehouse_config, s3_volume) -> InfrastructureManager:
    return InfrastructureManager(
        database=TEST_DATABASE,
        schema_name=TEST_SCHEMA,
        warehouse=warehouse_config,
        external_volume=s3_volume,
    )


@pytest.fixture
def loader() -> DefinitionsLoader:
    return DefinitionsLoader(
        database=TEST_DATABASE,
        schema_name=TEST_SCHEMA,
        warehouse=TEST_WAREHOUSE,
        external_volume=TEST_VOLUME,
    )


@pytest.fixture
def demo_context(infrastructure, loader) -> DemoContext:
    return DemoContext(infrastructure, loader)


# =============================================================================
# Live Snowflake fixtures
# =============================================================================


@pytest.fixture(scope="session")
def live_settings():
    """Settings for live tests; skips unless DIT_LIVE_TEST=1 and credentials exist."""
    from dit_demo.config import settings

    if not is_live_test():
        pytest.skip("Live tests require DIT_LIVE_TEST=1")
    if not settings.credentials_configured:
        pytest.skip("Snowflake credentials not configured; skipping live test")
    return settings
