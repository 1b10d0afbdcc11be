"""Order Item Domain Entity

A line item of an order, made of up to three optional cost components:
print (quantity is the printed length), pressing and badge.
"""

from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import BigInteger, ForeignKey, Integer, Numeric, UniqueConstraint
from src.domain.amounts import ZERO
from src.domain.base import BaseModel, BigIntegerKey


class OrderItem(BaseModel, table=True):
    """
    Order Item - Line item with print / pressing / badge components

    Domain Rules:
    - component subtotal = quantity x unit_cost (0 when the component is unused)
    - total = print_subtotal + pressing_subtotal + badge_subtotal
    - print_quantity is the material length the item consumes
    """

    __tablename__ = "order_items"
    __table_args__ = (
        UniqueConstraint("order_id", "item_number", name="uq_order_items_number"),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerKey, primary_key=True, autoincrement=True),
    )

    order_id: int = Field(
        sa_column=Column(BigInteger, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False),
    )

    item_number: int = Field(sa_column=Column(Integer, nullable=False))

    print_quantity: Decimal = Field(default=ZERO, sa_column=Column(Numeric(10, 2), nullable=False, default=0))
    print_unit_cost: Decimal = Field(default=ZERO, sa_column=Column(Numeric(12, 2), nullable=False, default=0))
    print_subtotal: Decimal = Field(default=ZERO, sa_column=Column(Numeric(12, 2), nullable=False, default=0))

    pressing_quantity: Decimal = Field(default=ZERO, sa_column=Column(Numeric(10, 2), nullable=False, default=0))
    pressing_unit_cost: Decimal = Field(default=ZERO, sa_column=Column(Numeric(12, 2), nullable=False, default=0))
    pressing_subtotal: Decimal = Field(default=ZERO, sa_column=Column(Numeric(12, 2), nullable=False, default=0))

    badge_quantity: Decimal = Field(default=ZERO, sa_column=Column(Numeric(10, 2), nullable=False, default=0))
    badge_unit_cost: Decimal = Field(default=ZERO, sa_column=Column(Numeric(12, 2), nullable=False, default=0))
    badge_subtotal: Decimal = Field(default=ZERO, sa_column=Column(Numeric(12, 2), nullable=False, default=0))

    total: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))
