"""Order read use cases: GetOrder, GetOrderByReceipt, ListOrders"""

from datetime import date, datetime, time, timedelta
from typing import Optional
from libs.result import Result, Return
from src.app.errors import not_found, validation_error
from src.app.repositories.order_repository import OrderRepository
from src.domain.order import OrderStatus, PaymentStatus
from .dtos import ListOrdersResponseDTO, OrderDTO

MAX_PAGE_SIZE = 200


class GetOrder:

    def __init__(self, order_repo: OrderRepository):
        self.order_repo = order_repo

    async def execute(self, order_id: int) -> Result[OrderDTO]:
        order = await self.order_repo.get_by_id(order_id)
        if order is None:
            return Return.err(not_found("Order", order_id))

        items = await self.order_repo.get_items(order.id)
        return Return.ok(OrderDTO.from_entity(order, items))


class GetOrderByReceipt:

    def __init__(self, order_repo: OrderRepository):
        self.order_repo = order_repo

    async def execute(self, receipt_number: str) -> Result[OrderDTO]:
        order = await self.order_repo.get_by_receipt_number(receipt_number)
        if order is None:
            return Return.err(not_found("Order with receipt", receipt_number))

        items = await self.order_repo.get_items(order.id)
        return Return.ok(OrderDTO.from_entity(order, items))


class ListOrders:
    """
    Use case: list orders, newest first

    Optional filters on lifecycle status, payment status and creation date
    (date_from and date_to are whole days, both inclusive). Line items are
    not included in the listing.
    """

    def __init__(self, order_repo: OrderRepository):
        self.order_repo = order_repo

    async def execute(
        self,
        status: Optional[str] = None,
        payment_status: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Result[ListOrdersResponseDTO]:
        if limit < 1 or limit > MAX_PAGE_SIZE or offset < 0:
            return Return.err(validation_error(
                f"limit must be between 1 and {MAX_PAGE_SIZE} and offset non-negative",
                field="limit",
            ))

        try:
            status_filter = OrderStatus(status) if status else None
            payment_filter = PaymentStatus(payment_status) if payment_status else None
        except ValueError as e:
            return Return.err(validation_error(str(e), field="status"))

        if date_from is not None and date_to is not None and date_from > date_to:
            return Return.err(validation_error(
                f"date_from {date_from} is after date_to {date_to}",
                field="date_from",
            ))
        created_from = datetime.combine(date_from, time.min) if date_from else None
        created_before = datetime.combine(date_to + timedelta(days=1), time.min) if date_to else None

        orders, total = await self.order_repo.list(
            status=status_filter,
            payment_status=payment_filter,
            created_from=created_from,
            created_before=created_before,
            limit=limit,
            offset=offset,
        )
        return Return.ok(
            ListOrdersResponseDTO(
                orders=[OrderDTO.from_entity(order) for order in orders],
                total=total,
                limit=limit,
                offset=offset,
            )
        )
