"""
Storage cleanup step: delete the Iceberg data files left in object storage.

Dropping the external volume does not remove files, and Snowflake-managed
Iceberg tables add a random suffix to BASE_LOCATION (products_staging.kTkUsUpz/),
so the whole base URL is listed and removed through a temporary stage.
"""

from typing import List, Optional

from dit_demo.config import settings
from dit_demo.core.context import DemoContext
from dit_demo.core.statements import Statement


def storage_cleanup_statements(
    ctx: DemoContext,
    *,
    stage_url: Optional[str] = None,
    storage_integration: Optional[str] = None,
    stage_name: Optional[str] = None,
) -> List[Statement]:
    """
    Stage, list and remove every file under the storage base URL.

    Raises:
        ValueError: no storage integration configured
    """
    stage_url = (
        stage_url
        or settings.CLEANUP_STAGE_URL
        or ctx.infrastructure.external_volume.base_url
    )
    storage_integration = storage_integration or settings.CLEANUP_STORAGE_INTEGRATION
    stage_name = stage_name or settings.CLEANUP_STAGE_NAME
    if not storage_integration:
        raise ValueError(
            "Storage cleanup needs CLEANUP_STORAGE_INTEGRATION (a storage "
            "integration with access to the bucket)"
        )

    # The demo database is gone by now; the stage lives in a scratch database.
    scratch_db = f"{ctx.database}_CLEANUP"
    stage = f"{scratch_db}.PUBLIC.{stage_name}"

    return [
        Statement(f"USE ROLE {ctx.infrastructure.admin_role}", section="Set context"),
        Statement(f"CREATE DATABASE IF NOT EXISTS {scratch_db}", section="Create stage"),
        Statement(
            f"CREATE OR REPLACE STAGE {stage}\n"
            f"    URL = '{stage_url}'\n"
            f"    STORAGE_INTEGRATION = {storage_integration}",
            section="Create stage",
        ),
        Statement(f"LIST @{stage}/", comment="Files that will be deleted", section="List files"),
        Statement(f"REMOVE @{stage}/", comment="Permanently deletes data", section="Remove files"),
        Statement(f"LIST @{stage}/", section="Verify"),
        Statement(f"DROP STAGE IF EXISTS {stage}", section="Drop stage"),
        Statement(f"DROP DATABASE IF EXISTS {scratch_db}", section="Drop stage"),
    ]
