"""NextReceiptNumber Use Case

Issues a receipt number in its own short transaction, so the day's counter
row is locked only for the increment. CreateOrder uses it before opening
the order transaction; a number whose order then fails is skipped.
"""

from typing import Optional
from pydantic import BaseModel
from libs.result import Result, Return
from src.app.services.receipt_sequencer import ReceiptSequencer
from src.app.services.transaction_runner import RetryPolicy, TransactionRunner
from src.app.services.unit_of_work import UnitOfWork
from src.app.errors import UNAVAILABLE


class ReceiptNumberDTO(BaseModel):
    receipt_number: str


class NextReceiptNumber:

    def __init__(self, uow: UnitOfWork, sequencer: ReceiptSequencer, policy: Optional[RetryPolicy] = None):
        self.uow = uow
        self.sequencer = sequencer
        self.policy = policy

    async def execute(self) -> Result[ReceiptNumberDTO]:
        async def operation():
            return Return.ok(ReceiptNumberDTO(receipt_number=await self.sequencer.next()))

        runner = TransactionRunner(self.uow, self.policy)
        return await runner.run(
            operation,
            failure_code=UNAVAILABLE,
            failure_message="Receipt sequencer unavailable",
        )
