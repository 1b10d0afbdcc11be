"""Order Domain Entity

Customer work order with its financial totals. amount_paid and
payment_status are derived from the order's partial payments.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import BigInteger, CheckConstraint, Index, Integer, Numeric, String
from src.domain.amounts import ZERO
from src.domain.base import BaseModel, BigIntegerKey


class PaymentStatus(str, Enum):
    """Derived payment completeness of an order"""
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"


class OrderStatus(str, Enum):
    """Order lifecycle status"""
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def classify_payment_status(amount_paid: Decimal, total: Decimal) -> PaymentStatus:
    """
    Classify payment completeness from (amount_paid, total).

    The only place the three-way rule lives; every write path calls it.
    """
    if amount_paid == ZERO:
        return PaymentStatus.PENDING
    if amount_paid < total:
        return PaymentStatus.PARTIAL
    return PaymentStatus.PAID


class Order(BaseModel, table=True):
    """
    Order - Customer work order

    Domain Rules:
    - receipt_number is unique (issued by the receipt sequencer)
    - total is fixed from line items
    - amount_paid == sum of the order's partial payments
    - payment_status == classify_payment_status(amount_paid, total)
    - amount_paid / payment_status are written only by the payment reconciler
    - Soft-cancelled (status = cancelled), never deleted
    """

    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint("total >= 0", name="order_total_non_negative"),
        CheckConstraint("amount_paid >= 0", name="order_amount_paid_non_negative"),
        Index("ix_orders_status", "status"),
        Index("ix_orders_payment_status", "payment_status"),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerKey, primary_key=True, autoincrement=True),
    )

    receipt_number: str = Field(
        sa_column=Column(String(20), nullable=False, unique=True),
        description="Date-scoped receipt number (YYMMDD + sequence)",
    )

    client_id: Optional[int] = Field(default=None, sa_column=Column(BigInteger, nullable=True))

    client_name: str = Field(sa_column=Column(String(200), nullable=False))

    work_type: str = Field(sa_column=Column(String(50), nullable=False))

    description: Optional[str] = Field(default=None, sa_column=Column(String(500), nullable=True))

    notes: Optional[str] = Field(default=None, sa_column=Column(String(500), nullable=True))

    total: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))

    amount_paid: Decimal = Field(
        default=ZERO,
        sa_column=Column(Numeric(12, 2), nullable=False, default=0),
    )

    payment_status: PaymentStatus = Field(default=PaymentStatus.PENDING)

    status: OrderStatus = Field(default=OrderStatus.ACTIVE)

    version: int = Field(default=1, sa_column=Column(Integer, nullable=False, default=1))

    created_by: Optional[str] = Field(default=None, sa_column=Column(String(100), nullable=True))

    created_at: datetime = Field(default_factory=datetime.utcnow)

    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def balance_due(self) -> Decimal:
        return max(Decimal(self.total) - Decimal(self.amount_paid), ZERO)
