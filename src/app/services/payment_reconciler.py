"""Payment Reconciler

The single writer of Order.amount_paid and Order.payment_status. Every
write path (recording a payment, reversing one, re-deriving after an order
edit) locks the order row, changes the payment rows, and then recomputes
amount_paid as the sum of all surviving payments, all in the caller's
transaction. Summing from the payment rows, instead of adjusting a running
total, keeps the order consistent even if an earlier write was wrong.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from libs.result import Error, Result, Return
from src.app.errors import PAYMENT_EXCEEDS_BALANCE, not_found, validation_error
from src.app.repositories.order_repository import OrderRepository
from src.app.repositories.partial_payment_repository import PartialPaymentRepository
from src.app.services.transaction_runner import ConcurrencyConflict
from src.domain.amounts import ZERO, is_positive_finite, quantize
from src.domain.order import Order, OrderStatus, classify_payment_status
from src.domain.partial_payment import PartialPayment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentOutcome:
    payment: Optional[PartialPayment]
    order: Order


class PaymentReconciler:

    def __init__(self, order_repo: OrderRepository, payment_repo: PartialPaymentRepository):
        self.order_repo = order_repo
        self.payment_repo = payment_repo

    async def record(
        self,
        order_id: int,
        amount: Decimal,
        method: str,
        bank: Optional[str] = None,
        receipt_reference: Optional[str] = None,
        notes: Optional[str] = None,
        recorded_by: Optional[str] = None,
    ) -> Result[PaymentOutcome]:
        """
        Record a payment and re-derive the order totals

        Business Rules:
        1. amount must be > 0
        2. amount may not exceed total - amount_paid (no overpayment)
        3. Cancelled orders accept no new payments

        Returns:
            Result[PaymentOutcome] or VALIDATION_ERROR / PAYMENT_EXCEEDS_BALANCE / NOT_FOUND
        """
        if not is_positive_finite(amount):
            return Return.err(validation_error(
                f"Payment amount must be greater than 0, got {amount}",
                field="amount",
            ))
        if not method:
            return Return.err(validation_error("Payment method is required", field="method"))
        amount = quantize(amount)

        order = await self.order_repo.get_by_id(order_id, for_update=True)
        if order is None:
            return Return.err(not_found("Order", order_id))

        if order.status == OrderStatus.CANCELLED:
            return Return.err(validation_error(
                f"Order {order.receipt_number} is cancelled and cannot receive payments",
                field="order_id",
            ))

        paid = await self.payment_repo.sum_by_order(order.id)
        max_amount = max(quantize(order.total) - paid, ZERO)
        if amount > max_amount:
            logger.info(
                f"Rejected overpayment on order {order.receipt_number}: "
                f"amount={amount}, max={max_amount}"
            )
            return Return.err(
                Error(
                    code=PAYMENT_EXCEEDS_BALANCE,
                    message=(
                        f"Payment of {amount} exceeds the outstanding balance. "
                        f"Maximum acceptable amount is {max_amount}"
                    ),
                    details={
                        "max_amount": str(max_amount),
                        "total": str(quantize(order.total)),
                        "amount_paid": str(paid),
                    },
                )
            )

        payment = await self.payment_repo.create(
            PartialPayment(
                order_id=order.id,
                amount=amount,
                method=method,
                bank=bank,
                receipt_reference=receipt_reference,
                notes=notes,
                recorded_by=recorded_by,
            )
        )

        order = await self._recompute(order)
        logger.info(
            f"Recorded payment {payment.id} of {amount} on order {order.receipt_number}: "
            f"amount_paid={order.amount_paid}, status={order.payment_status.value}"
        )
        return Return.ok(PaymentOutcome(payment=payment, order=order))

    async def reverse(self, payment_id: int) -> Result[PaymentOutcome]:
        """
        Delete a payment and re-derive its order in the same transaction

        Returns:
            Result[PaymentOutcome] (payment is the deleted row) or NOT_FOUND
        """
        payment = await self.payment_repo.get_by_id(payment_id)
        if payment is None:
            return Return.err(not_found("Payment", payment_id))

        order = await self.order_repo.get_by_id(payment.order_id, for_update=True)
        if order is None:
            return Return.err(not_found("Order", payment.order_id))

        if not await self.payment_repo.delete(payment_id):
            # Deleted by a concurrent reversal after we read it
            return Return.err(not_found("Payment", payment_id))

        order = await self._recompute(order)
        logger.info(
            f"Reversed payment {payment_id} of {payment.amount} on order {order.receipt_number}: "
            f"amount_paid={order.amount_paid}, status={order.payment_status.value}"
        )
        return Return.ok(PaymentOutcome(payment=payment, order=order))

    async def refresh(self, order_id: int) -> Result[Order]:
        """
        Re-derive amount_paid and payment_status of an order from its payments

        Used after the order total changes and by the ledger audit.
        """
        order = await self.order_repo.get_by_id(order_id, for_update=True)
        if order is None:
            return Return.err(not_found("Order", order_id))
        return Return.ok(await self._recompute(order))

    async def _recompute(self, order: Order) -> Order:
        amount_paid = await self.payment_repo.sum_by_order(order.id)
        status = classify_payment_status(amount_paid, quantize(order.total))

        updated = await self.order_repo.update_if_version(
            order.id,
            order.version,
            {"amount_paid": amount_paid, "payment_status": status},
        )
        if not updated:
            raise ConcurrencyConflict(f"Order {order.id} changed while recomputing payments")

        return await self.order_repo.get_by_id(order.id)
