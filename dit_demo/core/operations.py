"""
Operations step: monitoring, querying, manual refresh control, change
propagation, Iceberg metadata and performance analysis.
"""

from typing import List

from dit_demo.core import analytics, fixtures, monitoring
from dit_demo.core.context import DemoContext
from dit_demo.core.statements import Statement

ORDER_DETAILS = "order_details_dit"
PRODUCT_SUMMARY = "product_sales_summary_dit"
REGIONAL_SALES = "regional_sales_dit"

MONITORING = "Monitoring dynamic Iceberg tables"
QUERYING = "Querying dynamic Iceberg tables"
REFRESH_CONTROL = "Manual refresh operations"
DATA_CHANGES = "Simulating data changes"
METADATA = "Iceberg table metadata"
PERFORMANCE = "Performance analysis"


def operations_statements(ctx: DemoContext) -> List[Statement]:
    db, schema = ctx.database, ctx.schema_name
    details = ctx.dynamic(ORDER_DETAILS)
    summary = ctx.full_name(PRODUCT_SUMMARY)
    regional = ctx.full_name(REGIONAL_SALES)
    orders = ctx.orders
    products = ctx.products

    statements = ctx.infrastructure.context_statements(section="Set context")

    statements += [
        Statement(monitoring.show_dynamic_tables(db, schema), section=MONITORING),
        Statement(
            details.build_refresh_history_sql(limit=10),
            comment=f"Refresh history for {details.table_name}",
            section=MONITORING,
        ),
        Statement(
            monitoring.freshness_sql(db, schema),
            comment="Data freshness and lag across all dynamic tables",
            section=MONITORING,
        ),
    ]

    statements += [
        Statement(
            analytics.order_details_sql(details.get_full_table_name()),
            comment="Enriched order details",
            section=QUERYING,
        ),
        Statement(
            analytics.product_summary_sql(summary),
            comment="Product sales summary",
            section=QUERYING,
        ),
        Statement(
            analytics.regional_dashboard_sql(regional),
            comment="Regional sales dashboard",
            section=QUERYING,
        ),
        Statement(
            analytics.top_products_sql(summary),
            comment="Top products by revenue",
            section=QUERYING,
        ),
        Statement(
            analytics.regional_comparison_sql(regional),
            comment="Regional performance comparison",
            section=QUERYING,
        ),
    ]

    statements += [
        Statement(details.build_alter_sql("REFRESH"), section=REFRESH_CONTROL),
        Statement(
            details.build_alter_sql("SUSPEND"),
            comment="Suspend automatic refresh (maintenance)",
            section=REFRESH_CONTROL,
        ),
        Statement(details.build_alter_sql("RESUME"), section=REFRESH_CONTROL),
        Statement(details.build_scheduling_state_sql(), section=REFRESH_CONTROL),
    ]

    statements += [
        Statement(
            fixtures.orders_insert_sql(
                orders.get_full_table_name(),
                fixtures.NEW_ORDERS,
                with_created_at=False,
            ),
            comment="New orders to trigger downstream refreshes",
            section=DATA_CHANGES,
        ),
        Statement(
            fixtures.products_insert_sql(
                products.get_full_table_name(),
                [fixtures.NEW_PRODUCT],
                with_created_at=False,
            ),
            comment="A new product",
            section=DATA_CHANGES,
        ),
        Statement(
            analytics.todays_orders_sql(orders.get_full_table_name()),
            section=DATA_CHANGES,
        ),
        Statement(
            f"SELECT * FROM {products.get_full_table_name()} "
            f"WHERE product_id = {fixtures.NEW_PRODUCT.product_id}",
            section=DATA_CHANGES,
        ),
        *[
            Statement(mgr.build_alter_sql("REFRESH"), section=DATA_CHANGES)
            for mgr in ctx.dynamic_tables(group="core")
        ],
        Statement(
            analytics.todays_orders_sql(details.get_full_table_name()),
            comment="New orders propagated to the dynamic table",
            section=DATA_CHANGES,
        ),
    ]

    statements += [
        Statement(monitoring.show_iceberg_tables(db, schema, like="%_dit"), section=METADATA),
        Statement(
            monitoring.storage_locations_sql(db, schema),
            comment="Table storage locations",
            section=METADATA,
        ),
        Statement(details.build_iceberg_information_sql(), section=METADATA),
    ]

    statements += [
        Statement(
            monitoring.explain_sql(
                f"SELECT * FROM {details.get_full_table_name()} WHERE region = 'NORTH'"
            ),
            section=PERFORMANCE,
        ),
        Statement(
            monitoring.warehouse_usage_sql(db, ctx.warehouse),
            comment="Warehouse usage for dynamic table refreshes",
            section=PERFORMANCE,
        ),
    ]
    return statements
