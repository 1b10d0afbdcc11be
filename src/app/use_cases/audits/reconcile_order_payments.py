"""ReconcileOrderPayments Use Case

Compares every order's stored amount_paid / payment_status against the
values re-derived from its payment rows.
"""

import logging
import time
from datetime import datetime
from typing import List, Optional
from libs.result import Error, Result, Return
from src.app.repositories.order_repository import OrderRepository
from src.app.repositories.partial_payment_repository import PartialPaymentRepository
from src.app.services.payment_reconciler import PaymentReconciler
from src.app.services.transaction_runner import RetryPolicy, TransactionRunner
from src.app.services.unit_of_work import UnitOfWork
from src.domain.amounts import quantize
from src.domain.order import classify_payment_status
from .dtos import OrderPaymentDiscrepancyDTO, OrderReconciliationResultDTO

logger = logging.getLogger(__name__)


class ReconcileOrderPayments:
    """
    Use Case: Audit order payment totals

    Business Rules:
    1. calculated amount_paid = sum of the order's payments
    2. calculated payment_status = classify_payment_status(calculated, total)
    3. Without repair nothing is modified
    4. With repair each drifted order is re-derived by the payment
       reconciler in its own transaction

    Flow:
    1. Get all order ids
    2. For each order compare stored and calculated values
    3. Optionally repair
    4. Return the audit result with all discrepancies
    """

    def __init__(
        self,
        uow: UnitOfWork,
        order_repo: OrderRepository,
        payment_repo: PartialPaymentRepository,
        policy: Optional[RetryPolicy] = None,
    ):
        self.uow = uow
        self.order_repo = order_repo
        self.payment_repo = payment_repo
        self.reconciler = PaymentReconciler(order_repo, payment_repo)
        self.policy = policy

    async def execute(self, repair: bool = False) -> Result[OrderReconciliationResultDTO]:
        start_time = time.time()
        reconciliation_time = datetime.utcnow()

        try:
            logger.info(f"Starting order payment reconciliation (repair={repair})")

            order_ids = await self.order_repo.list_ids()
            discrepancies: List[OrderPaymentDiscrepancyDTO] = []

            for order_id in order_ids:
                order = await self.order_repo.get_by_id(order_id)
                if order is None:
                    continue

                calculated = await self.payment_repo.sum_by_order(order.id)
                expected_status = classify_payment_status(calculated, quantize(order.total))

                if quantize(order.amount_paid) != calculated or order.payment_status != expected_status:
                    discrepancies.append(
                        OrderPaymentDiscrepancyDTO(
                            order_id=order.id,
                            receipt_number=order.receipt_number,
                            stored_amount_paid=order.amount_paid,
                            calculated_amount_paid=calculated,
                            stored_payment_status=order.payment_status.value,
                            calculated_payment_status=expected_status.value,
                        )
                    )
                    logger.warning(
                        f"Discrepancy found for order {order.receipt_number} (order_id={order.id}): "
                        f"stored={order.amount_paid}/{order.payment_status.value}, "
                        f"calculated={calculated}/{expected_status.value}"
                    )

            # Release the read transaction before repairing row by row
            await self.uow.rollback()

            repaired_count = 0
            if repair:
                for discrepancy in discrepancies:
                    discrepancy.repaired = await self._repair(discrepancy.order_id)
                    repaired_count += int(discrepancy.repaired)

            execution_time_ms = int((time.time() - start_time) * 1000)

            if discrepancies:
                logger.warning(
                    f"Reconciliation complete. Found {len(discrepancies)} discrepancies "
                    f"out of {len(order_ids)} orders ({repaired_count} repaired) in {execution_time_ms}ms"
                )
            else:
                logger.info(
                    f"Reconciliation complete. All {len(order_ids)} orders consistent in {execution_time_ms}ms"
                )

            return Return.ok(
                OrderReconciliationResultDTO(
                    total_orders_checked=len(order_ids),
                    discrepancies_found=len(discrepancies),
                    repaired_count=repaired_count,
                    discrepancies=discrepancies,
                    reconciliation_time=reconciliation_time,
                    execution_time_ms=execution_time_ms,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Order payment reconciliation failed: {e}")
            return Return.err(
                Error(
                    code="RECONCILIATION_FAILED",
                    message="Failed to reconcile order payments",
                    reason=str(e),
                )
            )

    async def _repair(self, order_id: int) -> bool:
        runner = TransactionRunner(self.uow, self.policy)
        result = await runner.run(
            lambda: self.reconciler.refresh(order_id),
            failure_code="RECONCILIATION_FAILED",
            failure_message=f"Failed to repair order {order_id}",
        )
        if result.is_err():
            logger.error(f"Could not repair order {order_id}: {result.error.message}")
            return False

        logger.info(f"Repaired order {result.value.receipt_number}: amount_paid={result.value.amount_paid}")
        return True
