"""Receipt numbering use cases"""
from .next_receipt_number import NextReceiptNumber, ReceiptNumberDTO

__all__ = ["NextReceiptNumber", "ReceiptNumberDTO"]
