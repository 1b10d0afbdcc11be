"""ListPayments / GetPaymentSummary Use Cases"""

from libs.result import Result, Return
from src.app.errors import not_found
from src.app.repositories.order_repository import OrderRepository
from src.app.repositories.partial_payment_repository import PartialPaymentRepository
from .dtos import ListPaymentsResponseDTO, OrderBalanceDTO, PaymentDTO, PaymentSummaryDTO


class ListPayments:
    """
    Use case: payments of an order, newest first
    """

    def __init__(self, order_repo: OrderRepository, payment_repo: PartialPaymentRepository):
        self.order_repo = order_repo
        self.payment_repo = payment_repo

    async def execute(self, order_id: int) -> Result[ListPaymentsResponseDTO]:
        order = await self.order_repo.get_by_id(order_id)
        if order is None:
            return Return.err(not_found("Order", order_id))

        payments = await self.payment_repo.list_by_order(order_id)
        return Return.ok(
            ListPaymentsResponseDTO(
                order_id=order_id,
                payments=[PaymentDTO.from_entity(payment) for payment in payments],
                total=len(payments),
            )
        )


class GetPaymentSummary:

    def __init__(self, order_repo: OrderRepository, payment_repo: PartialPaymentRepository):
        self.order_repo = order_repo
        self.payment_repo = payment_repo

    async def execute(self, order_id: int) -> Result[PaymentSummaryDTO]:
        order = await self.order_repo.get_by_id(order_id)
        if order is None:
            return Return.err(not_found("Order", order_id))

        balance = OrderBalanceDTO.from_entity(order)
        return Return.ok(
            PaymentSummaryDTO(
                **balance.model_dump(),
                payment_count=await self.payment_repo.count_by_order(order_id),
            )
        )
