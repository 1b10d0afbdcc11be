"""Integration tests for the order ledger

Tests cover:
- Order creation consumes material and issues a receipt atomically
- A failed allocation rolls back the whole order
- Paid-in-full orders and order edits keep payments consistent
"""

from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy import update

from src.adapter.repositories import (
    SqlAlchemyOrderRepository,
    SqlAlchemyPartialPaymentRepository,
    SqlAlchemyRollRepository,
    SqlAlchemyRollUsageRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.orders import CancelOrder, GetOrderByReceipt, ListOrders
from src.app.use_cases.payments import GetPaymentSummary
from src.domain.order import Order


@pytest.mark.asyncio
class TestOrderLedgerIntegration:

    async def test_create_order_consumes_material_fifo(self, ledger):
        await ledger.install_roll(1, total_length="10.00")

        result = await ledger.create_order(total="45.00", work_type="DTF", print_length="3.25")

        assert result.is_ok()
        order = result.value
        assert order.receipt_number == "2504170001"
        assert order.total == Decimal("45.00")
        assert order.payment_status == "pending"
        assert order.allocation.roll_number == 1
        assert order.allocation.allocated_length == Decimal("3.25")
        assert len(order.items) == 2
        assert (await ledger.get_roll(1)).available_length == Decimal("6.75")

    async def test_manual_work_type_uses_chosen_roll(self, ledger):
        await ledger.install_roll(1, material_type="SUBLIM", total_length="10.00")
        await ledger.install_roll(2, material_type="SUBLIM", total_length="10.00")

        result = await ledger.create_order(work_type="SUBLIMATION", print_length="4.00", roll_number=2)

        assert result.value.allocation.roll_number == 2
        assert (await ledger.get_roll(1, material_type="SUBLIM")).available_length == Decimal("10.00")
        assert (await ledger.get_roll(2, material_type="SUBLIM")).available_length == Decimal("6.00")

    async def test_insufficient_stock_rolls_back_order(self, ledger, session_factory):
        await ledger.install_roll(1, total_length="2.00")

        failed = await ledger.create_order(work_type="DTF", print_length="5.00")

        assert failed.is_err()
        assert failed.error.code == "INSUFFICIENT_STOCK"

        async with session_factory() as session:
            orders, total = await SqlAlchemyOrderRepository(session).list()
            roll = await SqlAlchemyRollRepository(session).get("DTF", 1)
            events = await SqlAlchemyRollUsageRepository(session).list_by_roll(roll.id)
        assert total == 0
        assert orders == []
        assert roll.available_length == Decimal("2.00")
        assert [e.event_kind.value for e in events] == ["INSTALL"]

        # The failed order's receipt number is skipped, never reused
        succeeded = await ledger.create_order(work_type="DTF", print_length="1.00")
        assert succeeded.value.receipt_number == "2504170002"

    async def test_paid_in_full_records_single_payment(self, ledger, session_factory):
        result = await ledger.create_order(total="80.00", paid_in_full=True, payment_method="cash")

        order = result.value
        assert order.amount_paid == Decimal("80.00")
        assert order.balance_due == Decimal("0.00")
        assert order.payment_status == "paid"

        async with session_factory() as session:
            summary = await GetPaymentSummary(
                SqlAlchemyOrderRepository(session), SqlAlchemyPartialPaymentRepository(session)
            ).execute(order.id)
        assert summary.value.payment_count == 1
        assert summary.value.amount_paid == Decimal("80.00")

    async def test_update_order_keeps_payments_and_rederives_status(self, ledger):
        created = await ledger.create_order(total="100.00")
        order_id = created.value.id
        await ledger.pay(order_id, "60.00")

        result = await ledger.update_order(
            order_id,
            notes="Client asked for a second colour",
            items=[{"badge": {"quantity": "1", "unit_cost": "60.00"}}],
        )

        assert result.is_ok()
        order = result.value
        assert order.total == Decimal("60.00")
        assert order.amount_paid == Decimal("60.00")
        assert order.payment_status == "paid"
        assert order.notes == "Client asked for a second colour"

    async def test_update_order_cannot_drop_total_below_amount_paid(self, ledger):
        created = await ledger.create_order(total="100.00")
        order_id = created.value.id
        await ledger.pay(order_id, "60.00")

        result = await ledger.update_order(order_id, items=[{"badge": {"quantity": "1", "unit_cost": "50.00"}}])

        assert result.is_err()
        assert result.error.code == "VALIDATION_ERROR"
        order = await ledger.get_order(order_id)
        assert order.total == Decimal("100.00")
        assert order.amount_paid == Decimal("60.00")

    async def test_cancelled_order_rejects_payments(self, ledger, session_factory, policy):
        created = await ledger.create_order(total="50.00")
        order_id = created.value.id

        async with session_factory() as session:
            cancelled = await CancelOrder(
                SqlAlchemyUnitOfWork(session), SqlAlchemyOrderRepository(session), policy
            ).execute(order_id)
        assert cancelled.value.status == "cancelled"

        payment = await ledger.pay(order_id, "10.00")
        assert payment.is_err()
        assert payment.error.code == "VALIDATION_ERROR"

    async def test_lookup_by_receipt_and_list_by_payment_status(self, ledger, session_factory):
        first = await ledger.create_order(total="20.00")
        await ledger.create_order(total="30.00", paid_in_full=True, payment_method="card")

        async with session_factory() as session:
            by_receipt = await GetOrderByReceipt(SqlAlchemyOrderRepository(session)).execute(
                first.value.receipt_number
            )
            paid = await ListOrders(SqlAlchemyOrderRepository(session)).execute(payment_status="paid")

        assert by_receipt.value.id == first.value.id
        assert paid.value.total == 1
        assert paid.value.orders[0].total == Decimal("30.00")

    async def test_list_orders_by_creation_day(self, ledger, session_factory):
        created_at = [
            datetime(2025, 4, 15, 18, 0),
            datetime(2025, 4, 16, 23, 59, 59),
            datetime(2025, 4, 17, 8, 30),
        ]
        for when in created_at:
            order_id = (await ledger.create_order(total="10.00")).value.id
            async with session_factory() as session:
                await session.execute(update(Order).where(Order.id == order_id).values(created_at=when))
                await session.commit()

        async with session_factory() as session:
            use_case = ListOrders(SqlAlchemyOrderRepository(session))
            single_day = await use_case.execute(date_from=date(2025, 4, 16), date_to=date(2025, 4, 16))
            from_day = await use_case.execute(date_from=date(2025, 4, 16))
            until_day = await use_case.execute(date_to=date(2025, 4, 15))
            reversed_range = await use_case.execute(date_from=date(2025, 4, 17), date_to=date(2025, 4, 16))

        assert single_day.value.total == 1
        assert single_day.value.orders[0].created_at == created_at[1]
        assert from_day.value.total == 2
        assert [o.created_at for o in from_day.value.orders] == [created_at[2], created_at[1]]
        assert until_day.value.total == 1
        assert reversed_range.is_err()
        assert reversed_range.error.code == "VALIDATION_ERROR"
