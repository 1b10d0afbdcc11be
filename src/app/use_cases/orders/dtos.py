"""Data Transfer Objects for Order Use Cases"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field
from src.domain.order import Order
from src.domain.order_item import OrderItem
from src.app.use_cases.rolls.dtos import AllocationResponseDTO


class LineItemComponentDTO(BaseModel):
    """One cost component of a line item: quantity x unit_cost"""

    quantity: Decimal = Field(..., ge=0, decimal_places=2)
    unit_cost: Decimal = Field(..., ge=0, decimal_places=2)


class LineItemDTO(BaseModel):
    """
    Line item input

    printing.quantity is the printed length in metres; it is what the
    order consumes from rolls when its work type uses material.
    """

    printing: Optional[LineItemComponentDTO] = None
    pressing: Optional[LineItemComponentDTO] = None
    badge: Optional[LineItemComponentDTO] = None


class CreateOrderCommandDTO(BaseModel):
    """
    Command DTO for creating an order

    Used as input to CreateOrder. paid_in_full records one payment equal to
    the order total with payment_method; roll_number is required for work
    types whose rolls are chosen manually.
    """

    client_id: Optional[int] = Field(default=None)
    client_name: str = Field(..., min_length=1, max_length=200)
    work_type: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = Field(default=None, max_length=500)
    notes: Optional[str] = Field(default=None, max_length=500)
    items: List[LineItemDTO] = Field(..., min_length=1)
    paid_in_full: bool = Field(default=False)
    payment_method: Optional[str] = Field(default=None)
    bank: Optional[str] = Field(default=None)
    roll_number: Optional[int] = Field(default=None, ge=1)
    actor: Optional[str] = Field(default=None, description="User creating the order")

    class Config:
        json_schema_extra = {
            "example": {
                "client_name": "Club Deportivo Norte",
                "work_type": "DTF",
                "description": "Team shirts",
                "items": [
                    {
                        "printing": {"quantity": "2.50", "unit_cost": "12.00"},
                        "pressing": {"quantity": "20", "unit_cost": "1.50"},
                    }
                ],
                "paid_in_full": False,
                "actor": "maria",
            }
        }


class UpdateOrderCommandDTO(BaseModel):
    """
    Command DTO for editing an order

    Fields left as None are unchanged. New items replace all existing line
    items and recompute the total; material is not re-allocated.
    """

    order_id: int
    client_id: Optional[int] = None
    client_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=500)
    notes: Optional[str] = Field(default=None, max_length=500)
    items: Optional[List[LineItemDTO]] = Field(default=None, min_length=1)


class OrderItemDTO(BaseModel):
    item_number: int
    print_quantity: Decimal
    print_unit_cost: Decimal
    print_subtotal: Decimal
    pressing_quantity: Decimal
    pressing_unit_cost: Decimal
    pressing_subtotal: Decimal
    badge_quantity: Decimal
    badge_unit_cost: Decimal
    badge_subtotal: Decimal
    total: Decimal

    @classmethod
    def from_entity(cls, item: OrderItem) -> "OrderItemDTO":
        return cls(
            item_number=item.item_number,
            print_quantity=item.print_quantity,
            print_unit_cost=item.print_unit_cost,
            print_subtotal=item.print_subtotal,
            pressing_quantity=item.pressing_quantity,
            pressing_unit_cost=item.pressing_unit_cost,
            pressing_subtotal=item.pressing_subtotal,
            badge_quantity=item.badge_quantity,
            badge_unit_cost=item.badge_unit_cost,
            badge_subtotal=item.badge_subtotal,
            total=item.total,
        )


class OrderDTO(BaseModel):
    """Response DTO describing an order and its line items"""

    id: int
    receipt_number: str
    client_id: Optional[int] = None
    client_name: str
    work_type: str
    description: Optional[str] = None
    notes: Optional[str] = None
    total: Decimal
    amount_paid: Decimal
    balance_due: Decimal
    payment_status: str
    status: str
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemDTO] = []
    allocation: Optional[AllocationResponseDTO] = None

    @classmethod
    def from_entity(
        cls,
        order: Order,
        items: Optional[List[OrderItem]] = None,
        allocation: Optional[AllocationResponseDTO] = None,
    ) -> "OrderDTO":
        return cls(
            id=order.id,
            receipt_number=order.receipt_number,
            client_id=order.client_id,
            client_name=order.client_name,
            work_type=order.work_type,
            description=order.description,
            notes=order.notes,
            total=order.total,
            amount_paid=order.amount_paid,
            balance_due=order.balance_due,
            payment_status=order.payment_status.value if hasattr(order.payment_status, "value") else order.payment_status,
            status=order.status.value if hasattr(order.status, "value") else order.status,
            created_by=order.created_by,
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=[OrderItemDTO.from_entity(item) for item in (items or [])],
            allocation=allocation,
        )


class ListOrdersResponseDTO(BaseModel):
    orders: List[OrderDTO]
    total: int
    limit: int
    offset: int
