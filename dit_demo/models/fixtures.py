"""
Fixture record models (products, orders and the joined order line).
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from pydantic import BaseModel, Field

CENTS = Decimal("0.01")


class Product(BaseModel):
    """Row of products_staging."""

    product_id: int = Field(..., ge=1)
    product_name: str
    category: str
    unit_price: Decimal = Field(..., ge=0, decimal_places=2)


class Order(BaseModel):
    """
    Row of orders_staging.

    order_date=None stands for "today" and is rendered as CURRENT_DATE().
    """

    order_id: int = Field(..., ge=1)
    customer_id: int = Field(..., ge=1)
    product_id: int = Field(..., ge=1)
    quantity: int = Field(..., ge=1)
    order_date: Optional[date] = None
    order_status: str = "PENDING"
    region: str

    @property
    def is_completed(self) -> bool:
        return self.order_status == "COMPLETED"


class OrderLine(BaseModel):
    """An order joined with its product, as in order_details_dit."""

    order: Order
    product: Product

    @property
    def total_amount(self) -> Decimal:
        return (self.order.quantity * self.product.unit_price).quantize(
            CENTS, rounding=ROUND_HALF_UP
        )
