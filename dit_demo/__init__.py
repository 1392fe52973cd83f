"""Dynamic Iceberg Tables demo driver for Snowflake."""

__version__ = "0.1.0"
