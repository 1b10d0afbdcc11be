"""Unit tests for UpdateOrder and order status use cases"""

import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from libs.result import Return
from src.app.use_cases.orders import CancelOrder, CompleteOrder, UpdateOrder, UpdateOrderCommandDTO
from src.domain.order import Order, OrderStatus, PaymentStatus


def make_order(total="100.00", amount_paid="50.00", status=OrderStatus.ACTIVE, payment_status=PaymentStatus.PARTIAL):
    return Order(
        id=41,
        receipt_number="2504170007",
        client_name="Ana",
        work_type="DTF",
        total=Decimal(total),
        amount_paid=Decimal(amount_paid),
        payment_status=payment_status,
        status=status,
        version=4,
    )


@pytest.fixture
def mock_order_repo():
    repo = MagicMock()
    repo.replace_items = AsyncMock(side_effect=lambda order_id, items: items)
    repo.get_items = AsyncMock(return_value=[])
    repo.update_if_version = AsyncMock(return_value=True)
    return repo


@pytest.fixture
def mock_reconciler():
    return MagicMock()


@pytest.mark.asyncio
class TestUpdateOrder:

    async def test_new_items_recompute_total_and_rederive_status(self, mock_uow, mock_order_repo, mock_reconciler):
        mock_order_repo.get_by_id = AsyncMock(return_value=make_order())
        mock_reconciler.refresh = AsyncMock(return_value=Return.ok(make_order(total="80.00")))
        use_case = UpdateOrder(mock_uow, mock_order_repo, mock_reconciler)

        command = UpdateOrderCommandDTO(
            order_id=41,
            notes="rush",
            items=[{"badge": {"quantity": "10", "unit_cost": "8.00"}}],
        )
        result = await use_case.execute(command)

        assert result.is_ok()
        assert result.value.total == Decimal("80.00")
        assert result.value.amount_paid == Decimal("50.00")

        order_id, version, values = mock_order_repo.update_if_version.call_args.args
        assert (order_id, version) == (41, 4)
        assert values == {"notes": "rush", "total": Decimal("80.00")}
        assert "amount_paid" not in values
        mock_reconciler.refresh.assert_called_once_with(41)
        mock_uow.commit.assert_called_once()

    async def test_total_below_amount_paid_is_rejected(self, mock_uow, mock_order_repo, mock_reconciler):
        mock_order_repo.get_by_id = AsyncMock(return_value=make_order(amount_paid="50.00"))
        mock_reconciler.refresh = AsyncMock()
        use_case = UpdateOrder(mock_uow, mock_order_repo, mock_reconciler)

        command = UpdateOrderCommandDTO(order_id=41, items=[{"badge": {"quantity": "1", "unit_cost": "40.00"}}])
        result = await use_case.execute(command)

        assert result.is_err()
        assert result.error.code == "VALIDATION_ERROR"
        mock_order_repo.replace_items.assert_not_called()
        mock_reconciler.refresh.assert_not_called()
        mock_uow.rollback.assert_called_once()

    async def test_cancelled_order_cannot_be_edited(self, mock_uow, mock_order_repo, mock_reconciler):
        mock_order_repo.get_by_id = AsyncMock(return_value=make_order(status=OrderStatus.CANCELLED))
        use_case = UpdateOrder(mock_uow, mock_order_repo, mock_reconciler)

        result = await use_case.execute(UpdateOrderCommandDTO(order_id=41, notes="late"))

        assert result.is_err()
        assert result.error.code == "VALIDATION_ERROR"

    async def test_unknown_order(self, mock_uow, mock_order_repo, mock_reconciler):
        mock_order_repo.get_by_id = AsyncMock(return_value=None)
        use_case = UpdateOrder(mock_uow, mock_order_repo, mock_reconciler)

        result = await use_case.execute(UpdateOrderCommandDTO(order_id=99, notes="x"))

        assert result.is_err()
        assert result.error.code == "NOT_FOUND"


@pytest.mark.asyncio
class TestOrderStatus:

    async def test_cancel_active_order(self, mock_uow, mock_order_repo):
        mock_order_repo.get_by_id = AsyncMock(
            side_effect=[make_order(), make_order(status=OrderStatus.CANCELLED)]
        )

        result = await CancelOrder(mock_uow, mock_order_repo).execute(41)

        assert result.is_ok()
        assert result.value.status == "cancelled"
        assert mock_order_repo.update_if_version.call_args.args[2] == {"status": OrderStatus.CANCELLED}

    async def test_cancelled_is_terminal(self, mock_uow, mock_order_repo):
        mock_order_repo.get_by_id = AsyncMock(return_value=make_order(status=OrderStatus.CANCELLED))

        result = await CompleteOrder(mock_uow, mock_order_repo).execute(41)

        assert result.is_err()
        assert result.error.code == "VALIDATION_ERROR"
        assert result.error.details["current_status"] == "cancelled"
        mock_order_repo.update_if_version.assert_not_called()
