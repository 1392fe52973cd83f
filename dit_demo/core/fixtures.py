"""
Sample data for the demo source tables.

Holds the literal rows loaded into products_staging and orders_staging, the
batches inserted later to trigger refreshes, and the INSERT builders for them.
"""

from collections import Counter
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from dit_demo.core.sql import CURRENT_DATE, CURRENT_TIMESTAMP, values_clause
from dit_demo.models import Order, OrderLine, Product

PRODUCT_COLUMNS = ["product_id", "product_name", "category", "unit_price"]
ORDER_COLUMNS = [
    "order_id",
    "customer_id",
    "product_id",
    "quantity",
    "order_date",
    "order_status",
    "region",
]


def _product(product_id, name, category, price) -> Product:
    return Product(
        product_id=product_id,
        product_name=name,
        category=category,
        unit_price=Decimal(price),
    )


def _order(order_id, customer_id, product_id, quantity, order_date, status, region):
    return Order(
        order_id=order_id,
        customer_id=customer_id,
        product_id=product_id,
        quantity=quantity,
        order_date=order_date,
        order_status=status,
        region=region,
    )


PRODUCTS: List[Product] = [
    _product(1, "Laptop Pro 15", "Electronics", "1299.99"),
    _product(2, "Wireless Mouse", "Electronics", "49.99"),
    _product(3, "USB-C Hub", "Electronics", "79.99"),
    _product(4, "Standing Desk", "Furniture", "599.99"),
    _product(5, "Ergonomic Chair", "Furniture", "449.99"),
    _product(6, "Monitor 27 inch", "Electronics", "399.99"),
    _product(7, "Mechanical Keyboard", "Electronics", "149.99"),
    _product(8, "Desk Lamp", "Furniture", "89.99"),
    _product(9, "Webcam HD", "Electronics", "129.99"),
    _product(10, "Cable Management Kit", "Accessories", "29.99"),
]

ORDERS: List[Order] = [
    # January 2024
    _order(1001, 101, 1, 1, date(2024, 1, 15), "COMPLETED", "NORTH"),
    _order(1002, 102, 2, 3, date(2024, 1, 16), "COMPLETED", "SOUTH"),
    _order(1003, 103, 4, 1, date(2024, 1, 17), "COMPLETED", "EAST"),
    _order(1004, 101, 3, 2, date(2024, 1, 18), "COMPLETED", "NORTH"),
    _order(1005, 104, 5, 1, date(2024, 1, 19), "COMPLETED", "WEST"),
    # February 2024
    _order(1006, 105, 1, 2, date(2024, 2, 10), "COMPLETED", "SOUTH"),
    _order(1007, 102, 6, 1, date(2024, 2, 12), "COMPLETED", "SOUTH"),
    _order(1008, 106, 7, 1, date(2024, 2, 14), "COMPLETED", "EAST"),
    _order(1009, 103, 2, 5, date(2024, 2, 15), "COMPLETED", "EAST"),
    _order(1010, 107, 8, 2, date(2024, 2, 18), "SHIPPED", "NORTH"),
    # March 2024
    _order(1011, 101, 9, 1, date(2024, 3, 1), "COMPLETED", "NORTH"),
    _order(1012, 108, 10, 4, date(2024, 3, 5), "COMPLETED", "WEST"),
    _order(1013, 104, 1, 1, date(2024, 3, 10), "SHIPPED", "WEST"),
    _order(1014, 109, 4, 1, date(2024, 3, 12), "PENDING", "SOUTH"),
    _order(1015, 102, 5, 2, date(2024, 3, 15), "PENDING", "SOUTH"),
]

# Inserted by the operations step to show change propagation (dated today)
NEW_ORDERS: List[Order] = [
    _order(1016, 110, 1, 2, None, "PENDING", "NORTH"),
    _order(1017, 111, 6, 1, None, "PENDING", "EAST"),
    _order(1018, 112, 3, 3, None, "PENDING", "WEST"),
]
NEW_PRODUCT: Product = _product(11, "Wireless Earbuds", "Electronics", "199.99")

# Inserted by the immutability step, then 1020 is completed
PENDING_ORDERS: List[Order] = [
    _order(1020, 120, 1, 1, None, "PENDING", "NORTH"),
    _order(1021, 121, 5, 2, None, "PENDING", "EAST"),
]
COMPLETED_ORDER_ID = 1020


def products_insert_sql(
    table: str, products: Sequence[Product], *, with_created_at: bool = True
) -> str:
    """INSERT statement for product rows; created_at is CURRENT_TIMESTAMP()."""
    columns = PRODUCT_COLUMNS + (["created_at"] if with_created_at else [])
    rows = []
    for p in products:
        row = [p.product_id, p.product_name, p.category, p.unit_price]
        if with_created_at:
            row.append(CURRENT_TIMESTAMP)
        rows.append(row)
    return f"INSERT INTO {table} ({', '.join(columns)})\nVALUES\n{values_clause(rows)}"


def orders_insert_sql(
    table: str, orders: Sequence[Order], *, with_created_at: bool = True
) -> str:
    """INSERT statement for order rows; undated orders use CURRENT_DATE()."""
    columns = ORDER_COLUMNS + (["created_at"] if with_created_at else [])
    rows = []
    for o in orders:
        row = [
            o.order_id,
            o.customer_id,
            o.product_id,
            o.quantity,
            o.order_date if o.order_date is not None else CURRENT_DATE,
            o.order_status,
            o.region,
        ]
        if with_created_at:
            row.append(CURRENT_TIMESTAMP)
        rows.append(row)
    return f"INSERT INTO {table} ({', '.join(columns)})\nVALUES\n{values_clause(rows)}"


def complete_order_sql(table: str, order_id: int = COMPLETED_ORDER_ID) -> str:
    return f"UPDATE {table}\nSET order_status = 'COMPLETED'\nWHERE order_id = {order_id}"


def products_by_id(products: Optional[Sequence[Product]] = None) -> Dict[int, Product]:
    return {p.product_id: p for p in (PRODUCTS if products is None else products)}


def order_lines(
    orders: Optional[Sequence[Order]] = None,
    products: Optional[Sequence[Product]] = None,
) -> List[OrderLine]:
    """Inner join of orders and products, like order_details_dit."""
    catalog = products_by_id(products)
    return [
        OrderLine(order=o, product=catalog[o.product_id])
        for o in (ORDERS if orders is None else orders)
        if o.product_id in catalog
    ]


def category_counts(products: Optional[Sequence[Product]] = None) -> Dict[str, int]:
    return dict(Counter(p.category for p in (PRODUCTS if products is None else products)))


def status_counts(orders: Optional[Sequence[Order]] = None) -> Dict[str, int]:
    return dict(Counter(o.order_status for o in (ORDERS if orders is None else orders)))
