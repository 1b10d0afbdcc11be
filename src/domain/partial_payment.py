"""Partial Payment Domain Entity

One recorded payment against an order. Deleting a payment is a reversal
and always re-derives the owning order's totals in the same transaction.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import BigInteger, CheckConstraint, ForeignKey, Index, Numeric, String
from src.domain.base import BaseModel, BigIntegerKey


class PartialPayment(BaseModel, table=True):
    """
    Partial Payment - Payment event against an order

    Domain Rules:
    - amount > 0
    - Created and deleted only by the payment reconciler
    """

    __tablename__ = "partial_payments"
    __table_args__ = (
        CheckConstraint("amount > 0", name="payment_amount_positive"),
        Index("ix_partial_payments_order", "order_id", "recorded_at"),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerKey, primary_key=True, autoincrement=True),
    )

    order_id: int = Field(
        sa_column=Column(BigInteger, ForeignKey("orders.id"), nullable=False),
    )

    amount: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))

    method: str = Field(sa_column=Column(String(50), nullable=False))

    bank: Optional[str] = Field(default=None, sa_column=Column(String(100), nullable=True))

    receipt_reference: Optional[str] = Field(default=None, sa_column=Column(String(100), nullable=True))

    notes: Optional[str] = Field(default=None, sa_column=Column(String(500), nullable=True))

    recorded_by: Optional[str] = Field(default=None, sa_column=Column(String(100), nullable=True))

    recorded_at: datetime = Field(default_factory=datetime.utcnow)
