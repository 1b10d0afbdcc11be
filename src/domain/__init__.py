from .base import BaseModel
from .roll import Roll
from .roll_usage_event import RollUsageEvent, UsageEventKind
from .order import Order, OrderStatus, PaymentStatus, classify_payment_status
from .order_item import OrderItem
from .partial_payment import PartialPayment
from .receipt_sequence import ReceiptSequence

__all__ = [
    "BaseModel",
    "Roll",
    "RollUsageEvent",
    "UsageEventKind",
    "Order",
    "OrderStatus",
    "PaymentStatus",
    "classify_payment_status",
    "OrderItem",
    "PartialPayment",
    "ReceiptSequence",
]
