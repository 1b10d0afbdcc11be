from decimal import Decimal
from typing import Dict
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.database import create_engine, create_session_factory
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.material_policy import MaterialPolicy, load_material_policies
from src.app.services.transaction_runner import RetryPolicy

engine = create_engine(
    ApplicationConfig.DB_URI,
    busy_timeout_seconds=ApplicationConfig.SQLITE_BUSY_TIMEOUT_SECONDS,
)

AsyncSessionLocal = create_session_factory(engine)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_retry_policy() -> RetryPolicy:
    return RetryPolicy(
        attempts=ApplicationConfig.CONFLICT_RETRY_ATTEMPTS,
        backoff_seconds=ApplicationConfig.CONFLICT_RETRY_BACKOFF_SECONDS,
        timeout_seconds=ApplicationConfig.OPERATION_TIMEOUT_SECONDS,
    )


def get_material_policies() -> Dict[str, MaterialPolicy]:
    return load_material_policies(ApplicationConfig.WORK_TYPES)


def get_default_roll_length() -> Decimal:
    return Decimal(str(ApplicationConfig.DEFAULT_ROLL_LENGTH))
