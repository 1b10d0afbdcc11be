from .unit_of_work import UnitOfWork
from .transaction_runner import ConcurrencyConflict, RetryPolicy, TransactionRunner
from .roll_allocator import Allocation, RollAllocator
from .receipt_sequencer import ReceiptSequencer
from .payment_reconciler import PaymentOutcome, PaymentReconciler
from .material_policy import MaterialPolicy, RollSelection, load_material_policies

__all__ = [
    "UnitOfWork",
    "ConcurrencyConflict",
    "RetryPolicy",
    "TransactionRunner",
    "Allocation",
    "RollAllocator",
    "ReceiptSequencer",
    "PaymentOutcome",
    "PaymentReconciler",
    "MaterialPolicy",
    "RollSelection",
    "load_material_policies",
]
