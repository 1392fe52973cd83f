"""
Analytical queries over the dynamic Iceberg tables.
"""


def order_details_sql(order_details: str) -> str:
    return f"SELECT * FROM {order_details}\nORDER BY order_date DESC, order_id"


def product_summary_sql(product_summary: str) -> str:
    return (
        "SELECT\n"
        "    product_name,\n"
        "    category,\n"
        "    total_orders,\n"
        "    total_quantity_sold,\n"
        "    total_revenue,\n"
        "    ROUND(total_revenue / NULLIF(total_orders, 0), 2) AS revenue_per_order\n"
        f"FROM {product_summary}\n"
        "ORDER BY total_revenue DESC"
    )


def regional_dashboard_sql(regional_sales: str) -> str:
    return (
        "SELECT\n"
        "    region,\n"
        "    TO_CHAR(order_month, 'YYYY-MM') AS month,\n"
        "    total_orders,\n"
        "    total_revenue,\n"
        "    unique_customers,\n"
        "    top_category,\n"
        "    ROUND(avg_order_value, 2) AS avg_order_value\n"
        f"FROM {regional_sales}\n"
        "ORDER BY order_month DESC, total_revenue DESC"
    )


def top_products_sql(product_summary: str) -> str:
    """Products with sales and their share of total revenue."""
    return (
        "SELECT\n"
        "    product_name,\n"
        "    category,\n"
        "    total_revenue,\n"
        "    ROUND(100.0 * total_revenue / SUM(total_revenue) OVER (), 2) AS revenue_pct\n"
        f"FROM {product_summary}\n"
        "WHERE total_revenue > 0\n"
        "ORDER BY total_revenue DESC"
    )


def regional_comparison_sql(regional_sales: str) -> str:
    return (
        "SELECT\n"
        "    region,\n"
        "    SUM(total_orders) AS total_orders,\n"
        "    SUM(total_revenue) AS total_revenue,\n"
        "    SUM(unique_customers) AS total_customers,\n"
        "    ROUND(AVG(avg_order_value), 2) AS avg_order_value\n"
        f"FROM {regional_sales}\n"
        "GROUP BY region\n"
        "ORDER BY total_revenue DESC"
    )


def todays_orders_sql(table: str) -> str:
    return f"SELECT * FROM {table} WHERE order_date = CURRENT_DATE()"


def status_breakdown_sql(table: str) -> str:
    return (
        "SELECT\n"
        "    order_status,\n"
        "    is_immutable,\n"
        "    COUNT(*) AS order_count\n"
        f"FROM {table}\n"
        "GROUP BY order_status, is_immutable\n"
        "ORDER BY order_status"
    )
