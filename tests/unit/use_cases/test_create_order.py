"""Unit tests for CreateOrder use case

Tests cover:
- Material consumption through the allocator (FIFO and manual work types)
- Allocator errors returned unchanged with full rollback
- Paid-in-full orders
- Validation before any write
"""

import pytest
from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from sqlalchemy.exc import OperationalError

from libs.result import Return
from src.app.errors import insufficient_stock
from src.app.services.material_policy import load_material_policies
from src.app.services.payment_reconciler import PaymentOutcome
from src.app.services.roll_allocator import Allocation
from src.app.services.transaction_runner import RetryPolicy
from src.app.use_cases.orders import CreateOrder, CreateOrderCommandDTO
from src.domain.order import Order, PaymentStatus
from src.domain.partial_payment import PartialPayment

POLICIES = load_material_policies(
    {
        "DTF": {"material_type": "DTF", "roll_selection": "fifo"},
        "SUBLIMATION": {"material_type": "SUBLIM", "roll_selection": "manual"},
    }
)


@pytest.fixture
def mock_order_repo():
    repo = MagicMock()

    def _create(order: Order):
        order.id = 41
        return order

    repo.create = AsyncMock(side_effect=_create)
    repo.replace_items = AsyncMock(side_effect=lambda order_id, items: items)
    return repo


@pytest.fixture
def mock_sequencer():
    sequencer = MagicMock()
    sequencer.next = AsyncMock(return_value="2504170007")
    return sequencer


@pytest.fixture
def mock_allocator():
    allocator = MagicMock()
    allocation = Allocation(
        roll_number=1,
        material_type="DTF",
        allocated_length=Decimal("2.50"),
        remaining_length=Decimal("7.50"),
        event_id=9,
    )
    allocator.allocate = AsyncMock(return_value=Return.ok(allocation))
    allocator.allocate_from_roll = AsyncMock(return_value=Return.ok(allocation))
    return allocator


@pytest.fixture
def mock_reconciler():
    return MagicMock()


@pytest.fixture
def create_order(mock_uow, mock_order_repo, mock_sequencer, mock_allocator, mock_reconciler):
    return CreateOrder(
        mock_uow,
        mock_order_repo,
        sequencer=mock_sequencer,
        allocator=mock_allocator,
        reconciler=mock_reconciler,
        material_policies=POLICIES,
        policy=RetryPolicy(attempts=1, backoff_seconds=0, timeout_seconds=5),
    )


def dtf_command(**overrides) -> CreateOrderCommandDTO:
    data = {
        "client_name": "Club Deportivo Norte",
        "work_type": "DTF",
        "items": [
            {
                "printing": {"quantity": "2.50", "unit_cost": "12.00"},
                "pressing": {"quantity": "20", "unit_cost": "1.50"},
            }
        ],
        "actor": "maria",
    }
    data.update(overrides)
    return CreateOrderCommandDTO(**data)


@pytest.mark.asyncio
class TestCreateOrderSuccess:

    async def test_creates_order_and_consumes_printed_length(self, create_order, mock_allocator, mock_uow):
        result = await create_order.execute(dtf_command())

        assert result.is_ok()
        order = result.value
        assert order.receipt_number == "2504170007"
        assert order.total == Decimal("60.00")
        assert order.payment_status == "pending"
        assert order.items[0].print_subtotal == Decimal("30.00")
        assert order.items[0].pressing_subtotal == Decimal("30.00")
        assert order.allocation.roll_number == 1

        kwargs = mock_allocator.allocate.call_args.kwargs
        assert kwargs["material_type"] == "DTF"
        assert kwargs["required_length"] == Decimal("2.50")
        assert kwargs["order_id"] == 41
        # Receipt number, then the order itself
        assert mock_uow.commit.await_count == 2

    async def test_manual_work_type_uses_given_roll(self, create_order, mock_allocator):
        result = await create_order.execute(dtf_command(work_type="SUBLIMATION", roll_number=4))

        assert result.is_ok()
        mock_allocator.allocate.assert_not_called()
        kwargs = mock_allocator.allocate_from_roll.call_args.kwargs
        assert kwargs["roll_number"] == 4
        assert kwargs["material_type"] == "SUBLIM"

    async def test_work_type_without_material_consumes_nothing(self, create_order, mock_allocator):
        result = await create_order.execute(dtf_command(work_type="EMBROIDERY"))

        assert result.is_ok()
        assert result.value.allocation is None
        mock_allocator.allocate.assert_not_called()
        mock_allocator.allocate_from_roll.assert_not_called()

    async def test_paid_in_full_records_one_payment_of_total(self, create_order, mock_reconciler):
        paid_order = Order(
            id=41,
            receipt_number="2504170007",
            client_name="Club Deportivo Norte",
            work_type="DTF",
            total=Decimal("60.00"),
            amount_paid=Decimal("60.00"),
            payment_status=PaymentStatus.PAID,
        )
        payment = PartialPayment(id=1, order_id=41, amount=Decimal("60.00"), method="cash", recorded_at=datetime.utcnow())
        mock_reconciler.record = AsyncMock(return_value=Return.ok(PaymentOutcome(payment=payment, order=paid_order)))

        result = await create_order.execute(dtf_command(paid_in_full=True, payment_method="cash"))

        assert result.is_ok()
        assert result.value.payment_status == "paid"
        assert result.value.amount_paid == Decimal("60.00")
        kwargs = mock_reconciler.record.call_args.kwargs
        assert kwargs["amount"] == Decimal("60.00")
        assert kwargs["method"] == "cash"


@pytest.mark.asyncio
class TestCreateOrderFailures:

    async def test_insufficient_stock_returned_unchanged_and_rolled_back(
        self, create_order, mock_allocator, mock_reconciler, mock_uow
    ):
        error = insufficient_stock("DTF", Decimal("2.50"), Decimal("1.00"))
        mock_allocator.allocate = AsyncMock(return_value=Return.err(error))
        mock_reconciler.record = AsyncMock()

        result = await create_order.execute(dtf_command(paid_in_full=True, payment_method="cash"))

        assert result.is_err()
        assert result.error is error
        mock_reconciler.record.assert_not_called()
        # Only the receipt number was committed; the order was rolled back
        mock_uow.commit.assert_awaited_once()
        mock_uow.rollback.assert_awaited_once()

    async def test_manual_work_type_requires_roll_number(self, create_order, mock_sequencer):
        result = await create_order.execute(dtf_command(work_type="SUBLIMATION"))

        assert result.is_err()
        assert result.error.code == "VALIDATION_ERROR"
        mock_sequencer.next.assert_not_called()

    async def test_paid_in_full_requires_payment_method(self, create_order, mock_sequencer):
        result = await create_order.execute(dtf_command(paid_in_full=True))

        assert result.is_err()
        assert result.error.code == "VALIDATION_ERROR"
        mock_sequencer.next.assert_not_called()

    async def test_zero_total_cannot_be_paid_in_full(self, create_order):
        command = dtf_command(
            items=[{"printing": {"quantity": "1.00", "unit_cost": "0.00"}}],
            paid_in_full=True,
            payment_method="cash",
        )

        result = await create_order.execute(command)

        assert result.is_err()
        assert result.error.code == "VALIDATION_ERROR"

    async def test_item_without_components_is_rejected(self, create_order, mock_order_repo):
        result = await create_order.execute(dtf_command(items=[{}]))

        assert result.is_err()
        assert result.error.code == "VALIDATION_ERROR"
        mock_order_repo.create.assert_not_called()

    async def test_sequencer_failure_writes_nothing(
        self, create_order, mock_sequencer, mock_order_repo, mock_allocator
    ):
        mock_sequencer.next = AsyncMock(
            side_effect=OperationalError("UPDATE receipt_sequences", {}, Exception("disk I/O error"))
        )

        result = await create_order.execute(dtf_command())

        assert result.is_err()
        assert result.error.code == "UNAVAILABLE"
        mock_order_repo.create.assert_not_called()
        mock_allocator.allocate.assert_not_called()

    async def test_receipt_number_issued_before_order_transaction(
        self, create_order, mock_sequencer, mock_order_repo, mock_uow
    ):
        calls = []
        mock_sequencer.next = AsyncMock(side_effect=lambda: calls.append("next") or "2504170007")
        mock_uow.commit = AsyncMock(side_effect=lambda: calls.append("commit"))
        create = mock_order_repo.create.side_effect
        mock_order_repo.create = AsyncMock(side_effect=lambda order: calls.append("create") or create(order))

        await create_order.execute(dtf_command())

        assert calls == ["next", "commit", "create", "commit"]
