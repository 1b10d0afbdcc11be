"""SQLAlchemy implementation of RollRepository

Roll mutations are compare-and-swap updates guarded by the roll version:
the UPDATE only matches while nobody else has changed the row, so two
allocators racing for the same length cannot both succeed. Allocations
against different rolls touch different rows and never wait on each other.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from sqlalchemy import func, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.roll_repository import RollRepository
from src.domain.amounts import ZERO
from src.domain.roll import Roll


class SqlAlchemyRollRepository(RollRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, material_type: str, roll_number: int) -> Optional[Roll]:
        stmt = (
            select(Roll)
            .where(Roll.material_type == material_type, Roll.roll_number == roll_number)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(self, roll_id: int) -> Optional[Roll]:
        stmt = select(Roll).where(Roll.id == roll_id).execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_type(self, material_type: Optional[str] = None) -> List[Roll]:
        stmt = select(Roll)
        if material_type is not None:
            stmt = stmt.where(Roll.material_type == material_type)
        stmt = stmt.order_by(Roll.material_type, Roll.roll_number).execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_allocatable(self, material_type: str, required_length: Decimal) -> List[Roll]:
        stmt = (
            select(Roll)
            .where(
                Roll.material_type == material_type,
                Roll.is_active == True,  # noqa: E712
                Roll.available_length >= required_length,
            )
            .order_by(Roll.roll_number)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def max_available_length(self, material_type: str) -> Decimal:
        stmt = select(func.max(Roll.available_length)).where(
            Roll.material_type == material_type,
            Roll.is_active == True,  # noqa: E712
        )
        result = await self.session.execute(stmt)
        value = result.scalar_one_or_none()
        return Decimal(value).quantize(Decimal("0.01")) if value is not None else ZERO

    async def create(self, roll: Roll) -> Roll:
        self.session.add(roll)
        await self.session.flush()
        await self.session.refresh(roll)
        return roll

    async def update_if_version(self, roll_id: int, expected_version: int, values: Dict[str, Any]) -> bool:
        """
        Compare-and-swap update of a roll row

        Note:
            Must run inside the caller's transaction; the caller re-reads the
            roll afterwards (get_by_id populates the identity map again).
        """
        values = dict(values)
        values.setdefault("last_updated_at", datetime.utcnow())
        values["version"] = expected_version + 1
        stmt = (
            update(Roll)
            .where(Roll.id == roll_id, Roll.version == expected_version)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1
