"""Data Transfer Objects for Ledger Audit Use Cases"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel


class OrderPaymentDiscrepancyDTO(BaseModel):
    """An order whose stored payment totals differ from its payment rows"""

    order_id: int
    receipt_number: str
    stored_amount_paid: Decimal
    calculated_amount_paid: Decimal
    stored_payment_status: str
    calculated_payment_status: str
    repaired: bool = False


class OrderReconciliationResultDTO(BaseModel):
    total_orders_checked: int
    discrepancies_found: int
    repaired_count: int
    discrepancies: List[OrderPaymentDiscrepancyDTO]
    reconciliation_time: datetime
    execution_time_ms: int


class RollDiscrepancyDTO(BaseModel):
    """A roll whose stored counters break the roll invariants"""

    roll_number: int
    material_type: str
    issue: str
    total_length: Decimal
    available_length: Decimal
    used_length: Decimal
    expected_available_length: Optional[Decimal] = None


class RollReconciliationResultDTO(BaseModel):
    total_rolls_checked: int
    discrepancies_found: int
    discrepancies: List[RollDiscrepancyDTO]
    reconciliation_time: datetime
    execution_time_ms: int
