"""Data Transfer Objects for Payment Use Cases"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field
from src.domain.order import Order
from src.domain.partial_payment import PartialPayment


class RecordPaymentCommandDTO(BaseModel):
    """
    Command DTO for registering a payment against an order

    The amount is validated by the reconciler (> 0, not above the
    outstanding balance), not here.
    """

    order_id: int
    amount: Decimal = Field(..., decimal_places=2)
    method: str = Field(..., min_length=1, description="Payment method (cash, transfer, card...)")
    bank: Optional[str] = Field(default=None)
    receipt_reference: Optional[str] = Field(default=None, description="Bank transfer or voucher reference")
    notes: Optional[str] = Field(default=None)
    recorded_by: Optional[str] = Field(default=None)

    class Config:
        json_schema_extra = {
            "example": {
                "order_id": 41,
                "amount": "30.00",
                "method": "transfer",
                "bank": "Banco Pichincha",
                "receipt_reference": "TRX-88120",
                "recorded_by": "maria",
            }
        }


class PaymentDTO(BaseModel):
    id: int
    order_id: int
    amount: Decimal
    method: str
    bank: Optional[str] = None
    receipt_reference: Optional[str] = None
    notes: Optional[str] = None
    recorded_by: Optional[str] = None
    recorded_at: datetime

    @classmethod
    def from_entity(cls, payment: PartialPayment) -> "PaymentDTO":
        return cls(
            id=payment.id,
            order_id=payment.order_id,
            amount=payment.amount,
            method=payment.method,
            bank=payment.bank,
            receipt_reference=payment.receipt_reference,
            notes=payment.notes,
            recorded_by=payment.recorded_by,
            recorded_at=payment.recorded_at,
        )


class OrderBalanceDTO(BaseModel):
    """Payment-related totals of an order after a change"""

    order_id: int
    receipt_number: str
    total: Decimal
    amount_paid: Decimal
    balance_due: Decimal
    payment_status: str

    @classmethod
    def from_entity(cls, order: Order) -> "OrderBalanceDTO":
        return cls(
            order_id=order.id,
            receipt_number=order.receipt_number,
            total=order.total,
            amount_paid=order.amount_paid,
            balance_due=order.balance_due,
            payment_status=order.payment_status.value if hasattr(order.payment_status, "value") else order.payment_status,
        )


class PaymentResultDTO(BaseModel):
    """Response DTO for a recorded or reversed payment"""

    payment: PaymentDTO
    order: OrderBalanceDTO


class ListPaymentsResponseDTO(BaseModel):
    order_id: int
    payments: List[PaymentDTO]
    total: int


class PaymentSummaryDTO(OrderBalanceDTO):
    payment_count: int
