from .roll_repository import SqlAlchemyRollRepository
from .roll_usage_repository import SqlAlchemyRollUsageRepository
from .order_repository import SqlAlchemyOrderRepository
from .partial_payment_repository import SqlAlchemyPartialPaymentRepository
from .receipt_sequence_repository import SqlAlchemyReceiptSequenceRepository

__all__ = [
    "SqlAlchemyRollRepository",
    "SqlAlchemyRollUsageRepository",
    "SqlAlchemyOrderRepository",
    "SqlAlchemyPartialPaymentRepository",
    "SqlAlchemyReceiptSequenceRepository",
]
