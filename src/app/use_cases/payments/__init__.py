"""Payment reconciliation use cases"""
from .record_payment import RecordPayment, ReversePayment
from .list_payments import ListPayments, GetPaymentSummary
from .dtos import (
    RecordPaymentCommandDTO,
    PaymentDTO,
    OrderBalanceDTO,
    PaymentResultDTO,
    ListPaymentsResponseDTO,
    PaymentSummaryDTO,
)

__all__ = [
    "RecordPayment",
    "ReversePayment",
    "ListPayments",
    "GetPaymentSummary",
    "RecordPaymentCommandDTO",
    "PaymentDTO",
    "OrderBalanceDTO",
    "PaymentResultDTO",
    "ListPaymentsResponseDTO",
    "PaymentSummaryDTO",
]
