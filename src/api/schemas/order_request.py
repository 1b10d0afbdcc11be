"""Request schemas for Order API"""

from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from src.app.use_cases.orders.dtos import LineItemDTO


class CreateOrderRequestSchema(BaseModel):
    """
    Request schema for creating an order

    Used for POST /orders endpoint.
    """

    client_id: Optional[int] = None
    client_name: str = Field(..., min_length=1, max_length=200, description="Client name (required)")
    work_type: str = Field(..., min_length=1, max_length=50, description="Work type, e.g. DTF or SUBLIMATION")
    description: Optional[str] = Field(default=None, max_length=500)
    notes: Optional[str] = Field(default=None, max_length=500)
    items: List[LineItemDTO] = Field(..., min_length=1, description="At least one line item")
    paid_in_full: bool = Field(default=False, description="Record one payment equal to the total")
    payment_method: Optional[str] = Field(default=None, description="Required when paid_in_full")
    bank: Optional[str] = None
    roll_number: Optional[int] = Field(default=None, ge=1, description="Roll to consume from")
    actor: Optional[str] = None

    @field_validator("client_name", "work_type")
    @classmethod
    def strip_required_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class UpdateOrderRequestSchema(BaseModel):
    """Request schema for PATCH /orders/{order_id}; omitted fields are unchanged"""

    client_id: Optional[int] = None
    client_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=500)
    notes: Optional[str] = Field(default=None, max_length=500)
    items: Optional[List[LineItemDTO]] = Field(default=None, min_length=1)
