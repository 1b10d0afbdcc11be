"""Ledger audit use cases"""
from .reconcile_order_payments import ReconcileOrderPayments
from .reconcile_rolls import ReconcileRolls
from .dtos import (
    OrderPaymentDiscrepancyDTO,
    OrderReconciliationResultDTO,
    RollDiscrepancyDTO,
    RollReconciliationResultDTO,
)

__all__ = [
    "ReconcileOrderPayments",
    "ReconcileRolls",
    "OrderPaymentDiscrepancyDTO",
    "OrderReconciliationResultDTO",
    "RollDiscrepancyDTO",
    "RollReconciliationResultDTO",
]
