"""
Provisioning steps: infrastructure setup, source tables, dynamic tables and
the matching cleanup.
"""

from typing import List

from dit_demo.core import fixtures, monitoring
from dit_demo.core.context import DemoContext
from dit_demo.core.statements import Statement


def setup_statements(ctx: DemoContext) -> List[Statement]:
    """Database, schema, warehouse and external volume."""
    return ctx.infrastructure.setup_statements()


def source_table_statements(ctx: DemoContext) -> List[Statement]:
    """Create the two source Iceberg tables and load the fixture rows."""
    products = ctx.products
    orders = ctx.orders
    statements = ctx.infrastructure.context_statements(section="Set context")

    statements += [
        Statement(products.build_create_sql(), section="Products staging table"),
        Statement(
            fixtures.products_insert_sql(
                products.get_full_table_name(), fixtures.PRODUCTS
            ),
            comment="Sample product data",
            section="Products staging table",
        ),
        Statement(
            products.build_select_sql(order_by="product_id"),
            section="Products staging table",
        ),
        Statement(orders.build_create_sql(), section="Orders staging table"),
        Statement(
            fixtures.orders_insert_sql(orders.get_full_table_name(), fixtures.ORDERS),
            comment="Sample order data (January - March 2024)",
            section="Orders staging table",
        ),
        Statement(
            orders.build_select_sql(order_by="order_id"),
            section="Orders staging table",
        ),
        Statement(
            monitoring.row_counts_sql(
                [products.get_full_table_name(), orders.get_full_table_name()]
            ),
            comment="Record counts",
            section="Verify",
        ),
    ]
    return statements


def dynamic_table_statements(ctx: DemoContext) -> List[Statement]:
    """Create the core dynamic Iceberg tables (join, product and regional rollups)."""
    statements = ctx.infrastructure.context_statements(section="Set context")
    for mgr in ctx.dynamic_tables(group="core"):
        statements.append(
            Statement(
                mgr.build_create_sql(),
                comment=f"{mgr.config.description} (TARGET_LAG {mgr.config.target_lag})",
                section=f"Dynamic Iceberg table {mgr.table_name}",
            )
        )
    statements += monitoring.schema_overview(ctx.database, ctx.schema_name, "Verify")
    return statements


def cleanup_statements(ctx: DemoContext) -> List[Statement]:
    """
    Drop every demo object.

    Dynamic tables go first since they depend on the source tables.
    """
    statements = [Statement(f"USE ROLE {ctx.infrastructure.role}", section="Set context")]
    statements += [
        Statement(mgr.build_drop_sql(), section="Drop dynamic Iceberg tables")
        for mgr in ctx.dynamic_tables()
    ]
    statements += [
        Statement(mgr.build_drop_sql(), section="Drop source Iceberg tables")
        for mgr in reversed(ctx.source_tables())
    ]
    statements += ctx.infrastructure.teardown_statements()
    return statements


def leftover_storage_paths(ctx: DemoContext) -> List[str]:
    """Object-store prefixes the dropped tables leave behind."""
    locations = [
        m.config.base_location for m in [*ctx.source_tables(), *ctx.dynamic_tables()]
    ]
    return ctx.infrastructure.storage_paths(locations)
