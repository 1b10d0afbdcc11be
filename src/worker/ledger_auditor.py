"""Ledger Audit Worker

Audits order payment totals against payment rows and roll counters against
the roll invariants and usage history. Runs once or on an interval; with
repair enabled, drifted orders are re-derived from their payments.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from config import ApplicationConfig
from src.adapter.repositories import (
    SqlAlchemyOrderRepository,
    SqlAlchemyPartialPaymentRepository,
    SqlAlchemyRollRepository,
    SqlAlchemyRollUsageRepository,
)
from src.adapter.services.database import create_engine, create_session_factory
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.transaction_runner import RetryPolicy
from src.app.use_cases.audits import (
    OrderReconciliationResultDTO,
    ReconcileOrderPayments,
    ReconcileRolls,
    RollReconciliationResultDTO,
)

logger = logging.getLogger(__name__)


@dataclass
class AuditReport:
    orders: OrderReconciliationResultDTO
    rolls: RollReconciliationResultDTO

    @property
    def discrepancies_found(self) -> int:
        return self.orders.discrepancies_found + self.rolls.discrepancies_found


def _empty_report() -> AuditReport:
    now = datetime.utcnow()
    return AuditReport(
        orders=OrderReconciliationResultDTO(
            total_orders_checked=0,
            discrepancies_found=0,
            repaired_count=0,
            discrepancies=[],
            reconciliation_time=now,
            execution_time_ms=0,
        ),
        rolls=RollReconciliationResultDTO(
            total_rolls_checked=0,
            discrepancies_found=0,
            discrepancies=[],
            reconciliation_time=now,
            execution_time_ms=0,
        ),
    )


class LedgerAuditorWorker:
    """
    Background worker for ledger audits

    Usage:
        worker = LedgerAuditorWorker()
        report = await worker.run_once(repair=True)
        await worker.shutdown()
    """

    def __init__(self, db_uri: Optional[str] = None, engine=None):
        self.db_uri = db_uri or ApplicationConfig.DB_URI
        self.engine = engine or create_engine(
            self.db_uri,
            busy_timeout_seconds=ApplicationConfig.SQLITE_BUSY_TIMEOUT_SECONDS,
        )
        self.async_session_factory = create_session_factory(self.engine)
        self.policy = RetryPolicy(
            attempts=ApplicationConfig.CONFLICT_RETRY_ATTEMPTS,
            backoff_seconds=ApplicationConfig.CONFLICT_RETRY_BACKOFF_SECONDS,
            timeout_seconds=ApplicationConfig.OPERATION_TIMEOUT_SECONDS,
        )

    async def run_once(self, repair: Optional[bool] = None) -> AuditReport:
        """
        Audit orders and rolls once

        Args:
            repair: Re-derive drifted orders (defaults to RECONCILIATION_REPAIR)

        Raises:
            RuntimeError: If an audit could not complete
        """
        if not ApplicationConfig.RECONCILIATION_ENABLED:
            logger.info("Ledger audit is disabled, skipping")
            return _empty_report()

        if repair is None:
            repair = ApplicationConfig.RECONCILIATION_REPAIR

        async with self.async_session_factory() as session:
            order_repo = SqlAlchemyOrderRepository(session)
            payment_repo = SqlAlchemyPartialPaymentRepository(session)

            orders = await ReconcileOrderPayments(
                uow=SqlAlchemyUnitOfWork(session),
                order_repo=order_repo,
                payment_repo=payment_repo,
                policy=self.policy,
            ).execute(repair=repair)
            if orders.is_err():
                raise RuntimeError(f"Order audit failed: {orders.error.message}")

        async with self.async_session_factory() as session:
            rolls = await ReconcileRolls(
                SqlAlchemyRollRepository(session),
                SqlAlchemyRollUsageRepository(session),
            ).execute()
            if rolls.is_err():
                raise RuntimeError(f"Roll audit failed: {rolls.error.message}")

        report = AuditReport(orders=orders.value, rolls=rolls.value)

        if report.discrepancies_found > 0:
            logger.error(f"ALERT: {report.discrepancies_found} ledger discrepancies found")
            for d in report.orders.discrepancies:
                logger.error(
                    f"  - Order {d.receipt_number}: stored={d.stored_amount_paid}, "
                    f"calculated={d.calculated_amount_paid}, repaired={d.repaired}"
                )
            for d in report.rolls.discrepancies:
                logger.error(f"  - Roll {d.material_type}#{d.roll_number}: {d.issue}")

        return report

    async def run_forever(self, interval_seconds: Optional[int] = None, repair: Optional[bool] = None):
        interval_seconds = interval_seconds or ApplicationConfig.RECONCILIATION_INTERVAL_SECONDS
        logger.info(f"Starting ledger audit every {interval_seconds}s")

        while True:
            try:
                report = await self.run_once(repair=repair)
                logger.info(
                    f"Audit cycle complete. Checked {report.orders.total_orders_checked} orders and "
                    f"{report.rolls.total_rolls_checked} rolls, "
                    f"found {report.discrepancies_found} discrepancies"
                )
            except Exception as e:
                logger.error(f"Audit cycle failed: {e}")

            await asyncio.sleep(interval_seconds)

    async def shutdown(self):
        await self.engine.dispose()
        logger.info("LedgerAuditorWorker shutdown complete")


async def main():
    """
    Usage:
        python -m src.worker.ledger_auditor --once
        python -m src.worker.ledger_auditor --once --repair
        python -m src.worker.ledger_auditor --interval 3600
    """
    import argparse

    logging.basicConfig(
        level=getattr(logging, str(ApplicationConfig.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Ledger Audit Worker")
    parser.add_argument("--once", action="store_true", help="Run once and exit")
    parser.add_argument("--repair", action="store_true", default=None, help="Re-derive drifted orders")
    parser.add_argument(
        "--interval", type=int, default=None,
        help="Interval between runs in seconds (default: RECONCILIATION_INTERVAL_SECONDS)",
    )
    args = parser.parse_args()

    worker = LedgerAuditorWorker()

    try:
        if args.once:
            report = await worker.run_once(repair=args.repair)
            print("Ledger audit complete:")
            print(f"  Orders checked: {report.orders.total_orders_checked}")
            print(f"  Order discrepancies: {report.orders.discrepancies_found} "
                  f"({report.orders.repaired_count} repaired)")
            print(f"  Rolls checked: {report.rolls.total_rolls_checked}")
            print(f"  Roll discrepancies: {report.rolls.discrepancies_found}")
        else:
            await worker.run_forever(interval_seconds=args.interval, repair=args.repair)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
