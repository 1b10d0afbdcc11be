"""Request schemas for Payment API"""

from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field


class RecordPaymentRequestSchema(BaseModel):
    """
    Request schema for registering a payment

    Used for POST /orders/{order_id}/payments endpoint.
    """

    amount: Decimal = Field(
        ...,
        decimal_places=2,
        description="Amount paid (must be > 0 and not above the outstanding balance)",
    )
    method: str = Field(..., min_length=1, description="Payment method")
    bank: Optional[str] = None
    receipt_reference: Optional[str] = Field(default=None, max_length=100)
    notes: Optional[str] = Field(default=None, max_length=500)
    recorded_by: Optional[str] = None
