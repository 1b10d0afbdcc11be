"""SQLAlchemy implementation of OrderRepository

Supports pessimistic locking (SELECT FOR UPDATE) on order rows and
version-guarded updates; payment recomputation uses both.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import func, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.order_repository import OrderRepository
from src.domain.order import Order, OrderStatus, PaymentStatus
from src.domain.order_item import OrderItem


class SqlAlchemyOrderRepository(OrderRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, order_id: int, for_update: bool = False) -> Optional[Order]:
        """
        Retrieve order by ID with optional row-level locking

        Args:
            order_id: Order ID
            for_update: If True, locks the row with SELECT FOR UPDATE
                (SQLite ignores it; its writers are serialised by BEGIN IMMEDIATE)

        Returns:
            Order if found, None otherwise
        """
        stmt = select(Order).where(Order.id == order_id).execution_options(populate_existing=True)

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_receipt_number(self, receipt_number: str) -> Optional[Order]:
        stmt = select(Order).where(Order.receipt_number == receipt_number)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list(
        self,
        status: Optional[OrderStatus] = None,
        payment_status: Optional[PaymentStatus] = None,
        created_from: Optional[datetime] = None,
        created_before: Optional[datetime] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[Order], int]:
        filters = []
        if status is not None:
            filters.append(Order.status == status)
        if payment_status is not None:
            filters.append(Order.payment_status == payment_status)
        if created_from is not None:
            filters.append(Order.created_at >= created_from)
        if created_before is not None:
            filters.append(Order.created_at < created_before)

        stmt = (
            select(Order)
            .where(*filters)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        orders = list(result.scalars().all())

        count_stmt = select(func.count()).select_from(Order).where(*filters)
        count_result = await self.session.execute(count_stmt)
        return orders, count_result.scalar_one()

    async def list_ids(self) -> List[int]:
        result = await self.session.execute(select(Order.id).order_by(Order.id))
        return list(result.scalars().all())

    async def create(self, order: Order) -> Order:
        self.session.add(order)
        await self.session.flush()
        await self.session.refresh(order)
        return order

    async def update_if_version(self, order_id: int, expected_version: int, values: Dict[str, Any]) -> bool:
        values = dict(values)
        values.setdefault("updated_at", datetime.utcnow())
        values["version"] = expected_version + 1
        stmt = (
            update(Order)
            .where(Order.id == order_id, Order.version == expected_version)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def max_receipt_number_with_prefix(self, prefix: str) -> Optional[str]:
        stmt = select(func.max(Order.receipt_number)).where(Order.receipt_number.like(f"{prefix}%"))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_items(self, order_id: int) -> List[OrderItem]:
        stmt = select(OrderItem).where(OrderItem.order_id == order_id).order_by(OrderItem.item_number)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def replace_items(self, order_id: int, items: List[OrderItem]) -> List[OrderItem]:
        for existing in await self.get_items(order_id):
            await self.session.delete(existing)
        await self.session.flush()

        for item in items:
            item.order_id = order_id
            self.session.add(item)
        await self.session.flush()
        return await self.get_items(order_id)
