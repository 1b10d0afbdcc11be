"""Integration fixtures: a temporary SQLite database behind the real
repositories, one session (and transaction) per engine operation."""

from datetime import date
from decimal import Decimal
from typing import Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.adapter.repositories import (
    SqlAlchemyOrderRepository,
    SqlAlchemyPartialPaymentRepository,
    SqlAlchemyReceiptSequenceRepository,
    SqlAlchemyRollRepository,
    SqlAlchemyRollUsageRepository,
)
from src.adapter.services.database import create_engine, create_schema, create_session_factory
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.material_policy import load_material_policies
from src.app.services.payment_reconciler import PaymentReconciler
from src.app.services.receipt_sequencer import ReceiptSequencer
from src.app.services.roll_allocator import RollAllocator
from src.app.services.transaction_runner import RetryPolicy
from src.app.use_cases.orders import CreateOrder, CreateOrderCommandDTO, GetOrder, UpdateOrder, UpdateOrderCommandDTO
from src.app.use_cases.payments import RecordPayment, RecordPaymentCommandDTO, ReversePayment
from src.app.use_cases.receipts import NextReceiptNumber
from src.app.use_cases.rolls import (
    AllocateCommandDTO,
    AllocateFromRoll,
    AllocateFromRollCommandDTO,
    AllocateMaterial,
    GetRoll,
    GetRollHistory,
    InstallRoll,
    InstallRollCommandDTO,
)
from src.depends import get_session

TODAY = date(2025, 4, 17)

WORK_TYPES = {
    "DTF": {"material_type": "DTF", "roll_selection": "fifo"},
    "SUBLIMATION": {"material_type": "SUBLIM", "roll_selection": "manual"},
}


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """File-backed SQLite database, created fresh for each test"""
    engine = create_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}",
        busy_timeout_seconds=60,
        engine_options={"pool_size": 20, "max_overflow": 0, "pool_timeout": 120},
    )
    await create_schema(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def policy():
    return RetryPolicy(attempts=5, backoff_seconds=0.01, timeout_seconds=120)


class LedgerHarness:
    """Runs each engine operation in its own session, like one API request"""

    def __init__(self, session_factory, policy: RetryPolicy):
        self.session_factory = session_factory
        self.policy = policy
        self.material_policies = load_material_policies(WORK_TYPES)

    async def install_roll(self, roll_number: int, material_type: str = "DTF", total_length: str = "10.00"):
        async with self.session_factory() as session:
            use_case = InstallRoll(
                SqlAlchemyUnitOfWork(session),
                SqlAlchemyRollRepository(session),
                SqlAlchemyRollUsageRepository(session),
                policy=self.policy,
            )
            return await use_case.execute(
                InstallRollCommandDTO(
                    roll_number=roll_number,
                    material_type=material_type,
                    total_length=Decimal(total_length),
                )
            )

    async def allocate(self, length: str, material_type: str = "DTF"):
        async with self.session_factory() as session:
            use_case = AllocateMaterial(
                SqlAlchemyUnitOfWork(session),
                SqlAlchemyRollRepository(session),
                SqlAlchemyRollUsageRepository(session),
                self.policy,
            )
            return await use_case.execute(
                AllocateCommandDTO(material_type=material_type, required_length=Decimal(length))
            )

    async def allocate_from_roll(self, roll_number: int, length: str, material_type: str = "DTF"):
        async with self.session_factory() as session:
            use_case = AllocateFromRoll(
                SqlAlchemyUnitOfWork(session),
                SqlAlchemyRollRepository(session),
                SqlAlchemyRollUsageRepository(session),
                self.policy,
            )
            return await use_case.execute(
                AllocateFromRollCommandDTO(
                    roll_number=roll_number, material_type=material_type, required_length=Decimal(length)
                )
            )

    async def get_roll(self, roll_number: int, material_type: str = "DTF"):
        async with self.session_factory() as session:
            result = await GetRoll(SqlAlchemyRollRepository(session)).execute(material_type, roll_number)
            return result.value

    async def roll_history(self, roll_number: int, material_type: str = "DTF"):
        async with self.session_factory() as session:
            use_case = GetRollHistory(SqlAlchemyRollRepository(session), SqlAlchemyRollUsageRepository(session))
            result = await use_case.execute(material_type, roll_number)
            return result.value

    async def next_receipt(self):
        async with self.session_factory() as session:
            sequencer = ReceiptSequencer(
                SqlAlchemyReceiptSequenceRepository(session),
                SqlAlchemyOrderRepository(session),
                today=lambda: TODAY,
            )
            return await NextReceiptNumber(SqlAlchemyUnitOfWork(session), sequencer, self.policy).execute()

    async def create_order(
        self,
        total: str = "100.00",
        work_type: str = "EMBROIDERY",
        print_length: Optional[str] = None,
        **overrides,
    ):
        items = [{"badge": {"quantity": "1", "unit_cost": total}}]
        if print_length is not None:
            items = [{"printing": {"quantity": print_length, "unit_cost": "0.00"}}, *items]
        data = {"client_name": "Club Deportivo Norte", "work_type": work_type, "items": items, "actor": "maria"}
        data.update(overrides)

        async with self.session_factory() as session:
            order_repo = SqlAlchemyOrderRepository(session)
            use_case = CreateOrder(
                SqlAlchemyUnitOfWork(session),
                order_repo,
                sequencer=ReceiptSequencer(
                    SqlAlchemyReceiptSequenceRepository(session), order_repo, today=lambda: TODAY
                ),
                allocator=RollAllocator(SqlAlchemyRollRepository(session), SqlAlchemyRollUsageRepository(session)),
                reconciler=PaymentReconciler(order_repo, SqlAlchemyPartialPaymentRepository(session)),
                material_policies=self.material_policies,
                policy=self.policy,
            )
            return await use_case.execute(CreateOrderCommandDTO(**data))

    async def update_order(self, order_id: int, **fields):
        async with self.session_factory() as session:
            order_repo = SqlAlchemyOrderRepository(session)
            use_case = UpdateOrder(
                SqlAlchemyUnitOfWork(session),
                order_repo,
                PaymentReconciler(order_repo, SqlAlchemyPartialPaymentRepository(session)),
                self.policy,
            )
            return await use_case.execute(UpdateOrderCommandDTO(order_id=order_id, **fields))

    async def get_order(self, order_id: int):
        async with self.session_factory() as session:
            result = await GetOrder(SqlAlchemyOrderRepository(session)).execute(order_id)
            return result.value

    async def pay(self, order_id: int, amount: str, method: str = "cash"):
        async with self.session_factory() as session:
            use_case = RecordPayment(
                SqlAlchemyUnitOfWork(session),
                SqlAlchemyOrderRepository(session),
                SqlAlchemyPartialPaymentRepository(session),
                self.policy,
            )
            return await use_case.execute(
                RecordPaymentCommandDTO(order_id=order_id, amount=Decimal(amount), method=method)
            )

    async def reverse(self, payment_id: int):
        async with self.session_factory() as session:
            use_case = ReversePayment(
                SqlAlchemyUnitOfWork(session),
                SqlAlchemyOrderRepository(session),
                SqlAlchemyPartialPaymentRepository(session),
                self.policy,
            )
            return await use_case.execute(payment_id)


@pytest.fixture
def ledger(session_factory, policy):
    return LedgerHarness(session_factory, policy)


@pytest_asyncio.fixture
async def client(session_factory):
    """Test client whose requests each get their own session on the test database"""
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
