"""CancelOrder / CompleteOrder Use Cases

Lifecycle transitions of an order:

    active -> completed
    active -> cancelled
    completed -> cancelled

Cancelled is terminal. Orders are never deleted; payments and consumed
material are left as they are.
"""

import logging
from typing import FrozenSet, Optional
from libs.result import Result, Return
from src.app.errors import not_found, validation_error
from src.app.repositories.order_repository import OrderRepository
from src.app.services.transaction_runner import ConcurrencyConflict, RetryPolicy, TransactionRunner
from src.app.services.unit_of_work import UnitOfWork
from src.domain.order import OrderStatus
from .dtos import OrderDTO

logger = logging.getLogger(__name__)


class _ChangeOrderStatus:

    target: OrderStatus
    allowed_from: FrozenSet[OrderStatus]

    def __init__(self, uow: UnitOfWork, order_repo: OrderRepository, policy: Optional[RetryPolicy] = None):
        self.uow = uow
        self.order_repo = order_repo
        self.policy = policy

    async def execute(self, order_id: int) -> Result[OrderDTO]:
        runner = TransactionRunner(self.uow, self.policy)
        return await runner.run(
            lambda: self._transition(order_id),
            failure_code="CHANGE_ORDER_STATUS_FAILED",
            failure_message=f"Failed to mark order {self.target.value}",
        )

    async def _transition(self, order_id: int) -> Result[OrderDTO]:
        order = await self.order_repo.get_by_id(order_id, for_update=True)
        if order is None:
            return Return.err(not_found("Order", order_id))

        if order.status not in self.allowed_from:
            return Return.err(validation_error(
                f"Order {order.receipt_number} is {order.status.value} and cannot be marked {self.target.value}",
                field="status",
                current_status=order.status.value,
            ))

        if not await self.order_repo.update_if_version(order.id, order.version, {"status": self.target}):
            raise ConcurrencyConflict(f"Order {order.id} changed during status update")

        order = await self.order_repo.get_by_id(order.id)
        items = await self.order_repo.get_items(order.id)
        logger.info(f"Order {order.receipt_number} marked {self.target.value}")
        return Return.ok(OrderDTO.from_entity(order, items))


class CancelOrder(_ChangeOrderStatus):
    target = OrderStatus.CANCELLED
    allowed_from = frozenset({OrderStatus.ACTIVE, OrderStatus.COMPLETED})


class CompleteOrder(_ChangeOrderStatus):
    target = OrderStatus.COMPLETED
    allowed_from = frozenset({OrderStatus.ACTIVE})
