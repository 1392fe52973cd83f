"""
Immutability step: dynamic Iceberg tables with IMMUTABLE WHERE.

Rows matching the predicate are declared final, so incremental refreshes may
skip them. The predicate's matched set has to keep growing: a status value
(order_status = 'COMPLETED') or a fixed cutoff qualifies, anything relative
to the current date does not (see validate_immutability_predicate).
"""

from typing import List

from dit_demo.core import analytics, fixtures, monitoring
from dit_demo.core.context import DemoContext
from dit_demo.core.statements import Statement

STATUS_TABLE = "order_analytics_immutable_dit"
CUTOFF_TABLE = "sales_fixed_cutoff_dit"

REFRESH_HISTORY_COLUMNS = [
    "name",
    "state",
    "refresh_action",
    "refresh_trigger",
    "refresh_start_time",
]


def _status(message: str, section: str) -> Statement:
    return Statement(f"SELECT '{message}' AS status", section=section)


def immutability_statements(ctx: DemoContext) -> List[Statement]:
    status_mgr = ctx.dynamic(STATUS_TABLE)
    cutoff_mgr = ctx.dynamic(CUTOFF_TABLE)
    status_table = status_mgr.get_full_table_name()
    orders_table = ctx.orders.get_full_table_name()
    completed = fixtures.COMPLETED_ORDER_ID
    watched = ", ".join(str(o.order_id) for o in fixtures.PENDING_ORDERS)

    section = "Status-based immutability"
    statements = ctx.infrastructure.context_statements(section="Set context")
    statements += [
        Statement(
            status_mgr.build_create_sql(),
            comment="COMPLETED orders are final",
            section=section,
        ),
        _status("Dynamic Iceberg table with IMMUTABLE WHERE created", section),
    ]

    section = "Verify immutability configuration"
    statements += [
        Statement(
            monitoring.show_dynamic_tables(
                ctx.database, ctx.schema_name, like=STATUS_TABLE.upper()
            ),
            section=section,
        ),
        Statement(analytics.status_breakdown_sql(status_table), section=section),
    ]

    section = "Incremental refresh behavior"
    statements += [
        _status("Inserting new PENDING orders...", section),
        Statement(
            fixtures.orders_insert_sql(orders_table, fixtures.PENDING_ORDERS),
            section=section,
        ),
        Statement(status_mgr.build_alter_sql("REFRESH"), section=section),
        Statement(
            status_mgr.build_refresh_history_sql(
                limit=3, columns=REFRESH_HISTORY_COLUMNS
            ),
            section=section,
        ),
        Statement(
            f"SELECT * FROM {status_table}\n"
            "WHERE order_status = 'PENDING'\n"
            "ORDER BY order_id DESC",
            comment="New pending orders in the dynamic table",
            section=section,
        ),
    ]

    section = "Order completion"
    statements += [
        _status("Completing one of the pending orders...", section),
        Statement(fixtures.complete_order_sql(orders_table, completed), section=section),
        Statement(status_mgr.build_alter_sql("REFRESH"), section=section),
        Statement(
            f"SELECT order_id, order_status, is_immutable\n"
            f"FROM {status_table}\n"
            f"WHERE order_id IN ({watched})",
            comment="The completed order is now immutable",
            section=section,
        ),
    ]

    section = "Fixed date immutability"
    statements += [
        Statement(
            cutoff_mgr.build_create_sql(),
            comment="Months before the cutoff are final",
            section=section,
        ),
        _status("Fixed date cutoff dynamic table created", section),
        Statement(
            cutoff_mgr.build_select_sql(order_by="order_month"), section=section
        ),
    ]
    return statements
