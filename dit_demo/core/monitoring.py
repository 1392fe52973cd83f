"""
Read-only monitoring queries over Snowflake's dynamic table and Iceberg
metadata (SHOW commands, INFORMATION_SCHEMA table functions).
"""

from typing import List

from dit_demo.core.statements import Statement


def show_dynamic_tables(database: str, schema_name: str, like: str | None = None) -> str:
    if like:
        return f"SHOW DYNAMIC TABLES LIKE '{like}' IN SCHEMA {database}.{schema_name}"
    return f"SHOW DYNAMIC TABLES IN SCHEMA {database}.{schema_name}"


def show_iceberg_tables(database: str, schema_name: str, like: str | None = None) -> str:
    if like:
        return f"SHOW ICEBERG TABLES LIKE '{like}' IN SCHEMA {database}.{schema_name}"
    return f"SHOW ICEBERG TABLES IN SCHEMA {database}.{schema_name}"


def freshness_sql(database: str, schema_name: str) -> str:
    """Target lag, refresh mode and data timestamp of every dynamic table."""
    return (
        "SELECT\n"
        "    name,\n"
        "    target_lag,\n"
        "    refresh_mode,\n"
        "    refresh_mode_reason,\n"
        "    scheduling_state,\n"
        "    data_timestamp\n"
        f"FROM TABLE({database}.INFORMATION_SCHEMA.DYNAMIC_TABLE_GRAPH_HISTORY())\n"
        f"WHERE SCHEMA_NAME = '{schema_name.upper()}'\n"
        "  AND VALID_TO IS NULL\n"
        "ORDER BY name"
    )


def storage_locations_sql(database: str, schema_name: str) -> str:
    """Base location, catalog and volume of every Iceberg table in the schema."""
    return (
        "SELECT\n"
        "    TABLE_NAME,\n"
        "    BASE_LOCATION,\n"
        "    CATALOG_NAME,\n"
        "    EXTERNAL_VOLUME_NAME\n"
        f"FROM {database}.INFORMATION_SCHEMA.TABLES\n"
        f"WHERE TABLE_SCHEMA = '{schema_name.upper()}'\n"
        "  AND TABLE_TYPE = 'ICEBERG TABLE'"
    )


def explain_sql(query: str) -> str:
    return f"EXPLAIN USING JSON\n{query.strip()}"


def warehouse_usage_sql(database: str, warehouse: str, hours: int = 1) -> str:
    """Query counts and elapsed time on the demo warehouse over the last N hours."""
    return (
        "SELECT\n"
        "    QUERY_TYPE,\n"
        "    COUNT(*) AS query_count,\n"
        "    SUM(TOTAL_ELAPSED_TIME)/1000 AS total_seconds,\n"
        "    AVG(TOTAL_ELAPSED_TIME)/1000 AS avg_seconds\n"
        f"FROM TABLE({database}.INFORMATION_SCHEMA.QUERY_HISTORY(\n"
        f"    DATEADD('hour', -{int(hours)}, CURRENT_TIMESTAMP()),\n"
        "    CURRENT_TIMESTAMP()\n"
        "))\n"
        f"WHERE WAREHOUSE_NAME = '{warehouse.upper()}'\n"
        "  AND QUERY_TYPE IN ('CREATE_TABLE_AS_SELECT', 'INSERT', 'SELECT')\n"
        "GROUP BY QUERY_TYPE\n"
        "ORDER BY total_seconds DESC"
    )


def row_counts_sql(tables: List[str]) -> str:
    """UNION ALL of COUNT(*) per table, labelled with the short table name."""
    parts = [
        f"SELECT '{t.split('.')[-1]}' AS table_name, COUNT(*) AS row_count FROM {t}"
        for t in tables
    ]
    return "\nUNION ALL\n".join(parts)


def schema_overview(database: str, schema_name: str, section: str) -> List[Statement]:
    return [
        Statement(
            show_dynamic_tables(database, schema_name),
            comment="All dynamic tables in the schema",
            section=section,
        ),
        Statement(
            show_iceberg_tables(database, schema_name),
            comment="Iceberg table metadata",
            section=section,
        ),
    ]
