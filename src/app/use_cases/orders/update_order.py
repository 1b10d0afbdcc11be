"""UpdateOrder Use Case

Edits client details, notes and line items of an order. The order never
writes amount_paid or payment_status itself: after the total changes the
payment reconciler re-derives them from the payment rows.
"""

import logging
from typing import Optional
from libs.result import Result, Return
from src.app.errors import not_found, validation_error
from src.app.repositories.order_repository import OrderRepository
from src.app.services.payment_reconciler import PaymentReconciler
from src.app.services.transaction_runner import ConcurrencyConflict, RetryPolicy, TransactionRunner
from src.app.services.unit_of_work import UnitOfWork
from src.domain.amounts import quantize
from src.domain.order import OrderStatus
from .dtos import OrderDTO, UpdateOrderCommandDTO
from .line_items import price_line_items

logger = logging.getLogger(__name__)


class UpdateOrder:
    """
    Use Case: Edit an order

    Business Rules:
    1. Cancelled orders cannot be edited
    2. New line items replace the old ones and recompute the total
    3. The new total may not fall below what has already been paid
    4. Material already consumed is not re-allocated
    """

    def __init__(
        self,
        uow: UnitOfWork,
        order_repo: OrderRepository,
        reconciler: PaymentReconciler,
        policy: Optional[RetryPolicy] = None,
    ):
        self.uow = uow
        self.order_repo = order_repo
        self.reconciler = reconciler
        self.policy = policy

    async def execute(self, command: UpdateOrderCommandDTO) -> Result[OrderDTO]:
        runner = TransactionRunner(self.uow, self.policy)
        return await runner.run(
            lambda: self._update(command),
            failure_code="UPDATE_ORDER_FAILED",
            failure_message="Failed to update order",
        )

    async def _update(self, command: UpdateOrderCommandDTO) -> Result[OrderDTO]:
        order = await self.order_repo.get_by_id(command.order_id, for_update=True)
        if order is None:
            return Return.err(not_found("Order", command.order_id))

        if order.status == OrderStatus.CANCELLED:
            return Return.err(validation_error(
                f"Order {order.receipt_number} is cancelled and cannot be edited",
                field="order_id",
            ))

        values = {
            field: getattr(command, field)
            for field in ("client_id", "client_name", "description", "notes")
            if getattr(command, field) is not None
        }

        if command.items is not None:
            priced = price_line_items(command.items)
            if priced.is_err():
                return priced
            priced = priced.value

            amount_paid = quantize(order.amount_paid)
            if priced.total < amount_paid:
                return Return.err(validation_error(
                    f"New total {priced.total} is below the amount already paid ({amount_paid}). "
                    f"Reverse payments first",
                    field="items",
                    amount_paid=str(amount_paid),
                ))

            await self.order_repo.replace_items(order.id, priced.items)
            values["total"] = priced.total

        if values:
            if not await self.order_repo.update_if_version(order.id, order.version, values):
                raise ConcurrencyConflict(f"Order {order.id} changed during update")

        refreshed = await self.reconciler.refresh(order.id)
        if refreshed.is_err():
            return refreshed
        order = refreshed.value

        items = await self.order_repo.get_items(order.id)
        logger.info(
            f"Updated order {order.receipt_number}: total={order.total}, "
            f"payment_status={order.payment_status.value}"
        )
        return Return.ok(OrderDTO.from_entity(order, items))
