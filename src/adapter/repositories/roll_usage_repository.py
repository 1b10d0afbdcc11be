"""SQLAlchemy implementation of RollUsageRepository"""

from decimal import Decimal
from typing import List, Optional
from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.roll_usage_repository import RollUsageRepository
from src.domain.amounts import quantize
from src.domain.roll_usage_event import RollUsageEvent, UsageEventKind


class SqlAlchemyRollUsageRepository(RollUsageRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, event: RollUsageEvent) -> RollUsageEvent:
        self.session.add(event)
        await self.session.flush()
        await self.session.refresh(event)
        return event

    async def list_by_roll(self, roll_id: int, limit: int = 50) -> List[RollUsageEvent]:
        stmt = (
            select(RollUsageEvent)
            .where(RollUsageEvent.roll_id == roll_id)
            .order_by(RollUsageEvent.occurred_at.desc(), RollUsageEvent.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def consumed_since_last_install(self, roll_id: int) -> Optional[Decimal]:
        last_install = (
            select(func.max(RollUsageEvent.id))
            .where(
                RollUsageEvent.roll_id == roll_id,
                RollUsageEvent.event_kind.in_([UsageEventKind.INSTALL, UsageEventKind.RESET]),
            )
        )
        result = await self.session.execute(last_install)
        last_install_id = result.scalar_one_or_none()
        if last_install_id is None:
            return None

        stmt = select(func.coalesce(func.sum(RollUsageEvent.amount), 0)).where(
            RollUsageEvent.roll_id == roll_id,
            RollUsageEvent.event_kind == UsageEventKind.CONSUMPTION,
            RollUsageEvent.id > last_install_id,
        )
        result = await self.session.execute(stmt)
        return quantize(result.scalar_one())
