"""SQLAlchemy implementation of ReceiptSequenceRepository

The day counter is advanced with a single UPDATE ... SET last_value =
last_value + 1, which takes the row lock until the transaction ends, so
two concurrent callers can never read back the same value.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.receipt_sequence_repository import ReceiptSequenceRepository
from src.domain.receipt_sequence import ReceiptSequence


class SqlAlchemyReceiptSequenceRepository(ReceiptSequenceRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def increment(self, date_prefix: str) -> Optional[int]:
        stmt = (
            update(ReceiptSequence)
            .where(ReceiptSequence.date_prefix == date_prefix)
            .values(last_value=ReceiptSequence.last_value + 1, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            return None

        value = await self.session.execute(
            select(ReceiptSequence.last_value).where(ReceiptSequence.date_prefix == date_prefix)
        )
        return value.scalar_one()

    async def create(self, date_prefix: str, initial_value: int) -> int:
        sequence = ReceiptSequence(date_prefix=date_prefix, last_value=initial_value)
        self.session.add(sequence)
        await self.session.flush()
        return initial_value
