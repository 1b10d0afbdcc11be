"""Order Repository Interface"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple
from src.domain.order import Order, OrderStatus, PaymentStatus
from src.domain.order_item import OrderItem


class OrderRepository(ABC):

    @abstractmethod
    async def get_by_id(self, order_id: int, for_update: bool = False) -> Optional[Order]:
        """
        Retrieve order by ID

        Args:
            order_id: Order ID
            for_update: If True, lock the row with SELECT FOR UPDATE

        Returns:
            Order if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_receipt_number(self, receipt_number: str) -> Optional[Order]:
        pass

    @abstractmethod
    async def list(
        self,
        status: Optional[OrderStatus] = None,
        payment_status: Optional[PaymentStatus] = None,
        created_from: Optional[datetime] = None,
        created_before: Optional[datetime] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[Order], int]:
        """
        Orders newest first, plus the total count for the filters

        created_from is inclusive, created_before exclusive.
        """
        pass

    @abstractmethod
    async def list_ids(self) -> List[int]:
        pass

    @abstractmethod
    async def create(self, order: Order) -> Order:
        pass

    @abstractmethod
    async def update_if_version(self, order_id: int, expected_version: int, values: Dict[str, Any]) -> bool:
        """
        Apply values only if the stored version still equals expected_version

        Returns:
            True if the row was updated, False on a lost race
        """
        pass

    @abstractmethod
    async def max_receipt_number_with_prefix(self, prefix: str) -> Optional[str]:
        """Highest receipt number starting with prefix, None if there is none"""
        pass

    @abstractmethod
    async def get_items(self, order_id: int) -> List[OrderItem]:
        """Line items ordered by item_number"""
        pass

    @abstractmethod
    async def replace_items(self, order_id: int, items: List[OrderItem]) -> List[OrderItem]:
        """Delete existing line items of the order and insert the given ones"""
        pass
