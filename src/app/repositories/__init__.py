from .roll_repository import RollRepository
from .roll_usage_repository import RollUsageRepository
from .order_repository import OrderRepository
from .partial_payment_repository import PartialPaymentRepository
from .receipt_sequence_repository import ReceiptSequenceRepository

__all__ = [
    "RollRepository",
    "RollUsageRepository",
    "OrderRepository",
    "PartialPaymentRepository",
    "ReceiptSequenceRepository",
]
