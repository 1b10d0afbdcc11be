"""RecordPayment / ReversePayment Use Cases

Thin transactional wrappers around the payment reconciler, the only
writer of an order's amount_paid and payment_status.
"""

from typing import Optional
from libs.result import Result, Return
from src.app.repositories.order_repository import OrderRepository
from src.app.repositories.partial_payment_repository import PartialPaymentRepository
from src.app.services.payment_reconciler import PaymentOutcome, PaymentReconciler
from src.app.services.transaction_runner import RetryPolicy, TransactionRunner
from src.app.services.unit_of_work import UnitOfWork
from .dtos import OrderBalanceDTO, PaymentDTO, PaymentResultDTO, RecordPaymentCommandDTO


def _to_response(result: Result[PaymentOutcome]) -> Result[PaymentResultDTO]:
    if result.is_err():
        return result
    outcome = result.value
    return Return.ok(
        PaymentResultDTO(
            payment=PaymentDTO.from_entity(outcome.payment),
            order=OrderBalanceDTO.from_entity(outcome.order),
        )
    )


class RecordPayment:
    """
    Use Case: Register a partial (or final) payment

    Business Rules:
    1. amount > 0
    2. amount <= total - amount_paid, otherwise PAYMENT_EXCEEDS_BALANCE
       with the maximum acceptable amount
    3. amount_paid is recomputed as the sum of all payments and the status
       re-derived, in the same transaction as the insert

    Errors:
        VALIDATION_ERROR, PAYMENT_EXCEEDS_BALANCE, NOT_FOUND, CONFLICT, UNAVAILABLE
    """

    def __init__(
        self,
        uow: UnitOfWork,
        order_repo: OrderRepository,
        payment_repo: PartialPaymentRepository,
        policy: Optional[RetryPolicy] = None,
    ):
        self.uow = uow
        self.reconciler = PaymentReconciler(order_repo, payment_repo)
        self.policy = policy

    async def execute(self, command: RecordPaymentCommandDTO) -> Result[PaymentResultDTO]:
        async def operation():
            result = await self.reconciler.record(
                order_id=command.order_id,
                amount=command.amount,
                method=command.method,
                bank=command.bank,
                receipt_reference=command.receipt_reference,
                notes=command.notes,
                recorded_by=command.recorded_by,
            )
            return _to_response(result)

        runner = TransactionRunner(self.uow, self.policy)
        return await runner.run(
            operation,
            failure_code="RECORD_PAYMENT_FAILED",
            failure_message="Failed to record payment",
        )


class ReversePayment:
    """
    Use Case: Remove a payment

    The payment row is deleted and the order re-derived in one transaction;
    the response carries the removed payment and the order's new totals.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        order_repo: OrderRepository,
        payment_repo: PartialPaymentRepository,
        policy: Optional[RetryPolicy] = None,
    ):
        self.uow = uow
        self.reconciler = PaymentReconciler(order_repo, payment_repo)
        self.policy = policy

    async def execute(self, payment_id: int) -> Result[PaymentResultDTO]:
        async def operation():
            return _to_response(await self.reconciler.reverse(payment_id))

        runner = TransactionRunner(self.uow, self.policy)
        return await runner.run(
            operation,
            failure_code="REVERSE_PAYMENT_FAILED",
            failure_message="Failed to reverse payment",
        )
