"""SQLAlchemy implementation of PartialPaymentRepository"""

from decimal import Decimal
from typing import List, Optional
from sqlalchemy import delete, func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.partial_payment_repository import PartialPaymentRepository
from src.domain.amounts import quantize
from src.domain.partial_payment import PartialPayment


class SqlAlchemyPartialPaymentRepository(PartialPaymentRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, payment: PartialPayment) -> PartialPayment:
        self.session.add(payment)
        await self.session.flush()
        await self.session.refresh(payment)
        return payment

    async def get_by_id(self, payment_id: int) -> Optional[PartialPayment]:
        stmt = select(PartialPayment).where(PartialPayment.id == payment_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def delete(self, payment_id: int) -> bool:
        stmt = (
            delete(PartialPayment)
            .where(PartialPayment.id == payment_id)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def list_by_order(self, order_id: int) -> List[PartialPayment]:
        stmt = (
            select(PartialPayment)
            .where(PartialPayment.order_id == order_id)
            .order_by(PartialPayment.recorded_at.desc(), PartialPayment.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def sum_by_order(self, order_id: int) -> Decimal:
        """
        Sum of payment amounts for an order

        Used to recompute amount_paid from the source of truth.
        """
        stmt = select(func.coalesce(func.sum(PartialPayment.amount), 0)).where(
            PartialPayment.order_id == order_id
        )
        result = await self.session.execute(stmt)
        return quantize(result.scalar_one())

    async def count_by_order(self, order_id: int) -> int:
        stmt = select(func.count()).select_from(PartialPayment).where(PartialPayment.order_id == order_id)
        result = await self.session.execute(stmt)
        return result.scalar_one()
