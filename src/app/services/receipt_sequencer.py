"""Receipt Sequencer

Issues receipt numbers of the form YYMMDD + 4-digit sequence
(e.g. 2504170007). The sequence restarts at 1 every day.

Each day has one counter row that is advanced with an atomic increment,
so concurrent callers are serialised by the store. The first call of a
day creates the row, seeded from the highest receipt already stored for
that day; if two callers race to create it, the loser's transaction fails
with an IntegrityError and is retried by the transaction runner, at which
point the row exists and the increment path is taken.
"""

import logging
from datetime import date
from typing import Callable, Optional
from src.app.repositories.order_repository import OrderRepository
from src.app.repositories.receipt_sequence_repository import ReceiptSequenceRepository

logger = logging.getLogger(__name__)

SEQUENCE_WIDTH = 4


def format_date_prefix(day: date) -> str:
    return day.strftime("%y%m%d")


def format_receipt_number(date_prefix: str, sequence: int) -> str:
    return f"{date_prefix}{sequence:0{SEQUENCE_WIDTH}d}"


def parse_sequence(receipt_number: str, date_prefix: str) -> Optional[int]:
    suffix = receipt_number[len(date_prefix):]
    if not receipt_number.startswith(date_prefix) or not suffix.isdigit():
        return None
    return int(suffix)


class ReceiptSequencer:

    def __init__(
        self,
        sequence_repo: ReceiptSequenceRepository,
        order_repo: OrderRepository,
        today: Callable[[], date] = date.today,
    ):
        self.sequence_repo = sequence_repo
        self.order_repo = order_repo
        self.today = today

    async def next(self) -> str:
        """
        Issue the next receipt number for today

        Raises:
            IntegrityError: Lost the race to create today's counter (retryable)
            SQLAlchemyError: Counter storage unavailable
        """
        prefix = format_date_prefix(self.today())

        value = await self.sequence_repo.increment(prefix)
        if value is None:
            value = await self.sequence_repo.create(prefix, await self._seed(prefix))
            logger.info(f"Started receipt sequence for {prefix} at {value}")

        return format_receipt_number(prefix, value)

    async def _seed(self, prefix: str) -> int:
        """First value of a day: one past the highest receipt already stored"""
        highest = await self.order_repo.max_receipt_number_with_prefix(prefix)
        if highest is None:
            return 1
        sequence = parse_sequence(highest, prefix)
        return (sequence or 0) + 1
