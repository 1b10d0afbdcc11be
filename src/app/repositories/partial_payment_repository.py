"""Partial Payment Repository Interface"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional
from src.domain.partial_payment import PartialPayment


class PartialPaymentRepository(ABC):

    @abstractmethod
    async def create(self, payment: PartialPayment) -> PartialPayment:
        pass

    @abstractmethod
    async def get_by_id(self, payment_id: int) -> Optional[PartialPayment]:
        pass

    @abstractmethod
    async def delete(self, payment_id: int) -> bool:
        """Hard-delete a payment. Returns False if it did not exist."""
        pass

    @abstractmethod
    async def list_by_order(self, order_id: int) -> List[PartialPayment]:
        """Payments of an order, newest first"""
        pass

    @abstractmethod
    async def sum_by_order(self, order_id: int) -> Decimal:
        """Sum of all payment amounts of an order (0 when there are none)"""
        pass

    @abstractmethod
    async def count_by_order(self, order_id: int) -> int:
        pass
