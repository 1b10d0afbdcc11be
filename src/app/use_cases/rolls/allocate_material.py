"""AllocateMaterial / AllocateFromRoll Use Cases

Standalone material consumption (outside order creation), each in its own
transaction. Order creation calls the RollAllocator directly inside its
own transaction instead.
"""

import logging
from typing import Optional
from libs.result import Result, Return
from src.app.repositories.roll_repository import RollRepository
from src.app.repositories.roll_usage_repository import RollUsageRepository
from src.app.services.roll_allocator import Allocation, RollAllocator
from src.app.services.transaction_runner import RetryPolicy, TransactionRunner
from src.app.services.unit_of_work import UnitOfWork
from .dtos import AllocateCommandDTO, AllocateFromRollCommandDTO, AllocationResponseDTO

logger = logging.getLogger(__name__)


def _to_response(result: Result[Allocation]) -> Result[AllocationResponseDTO]:
    if result.is_err():
        return result
    allocation = result.value
    return Return.ok(
        AllocationResponseDTO(
            roll_number=allocation.roll_number,
            material_type=allocation.material_type,
            allocated_length=allocation.allocated_length,
            remaining_length=allocation.remaining_length,
            event_id=allocation.event_id,
        )
    )


class AllocateMaterial:
    """
    Use Case: Consume material from the first roll that fits (FIFO)

    Business Rules:
    1. Candidates are active rolls of the material type with
       available_length >= required_length
    2. The smallest roll_number wins
    3. Allocation never splits across rolls
    4. The deduction and its CONSUMPTION event commit together

    Errors:
        INSUFFICIENT_STOCK: no single roll has enough length left
        CONFLICT: lost the race for every candidate after bounded retries
    """

    def __init__(
        self,
        uow: UnitOfWork,
        roll_repo: RollRepository,
        usage_repo: RollUsageRepository,
        policy: Optional[RetryPolicy] = None,
    ):
        self.uow = uow
        self.allocator = RollAllocator(roll_repo, usage_repo)
        self.policy = policy

    async def execute(self, command: AllocateCommandDTO) -> Result[AllocationResponseDTO]:
        async def operation():
            result = await self.allocator.allocate(
                material_type=command.material_type,
                required_length=command.required_length,
                order_id=command.order_id,
                actor=command.actor,
                notes=command.notes,
            )
            return _to_response(result)

        runner = TransactionRunner(self.uow, self.policy)
        return await runner.run(
            operation,
            failure_code="ALLOCATION_FAILED",
            failure_message="Failed to allocate material",
        )


class AllocateFromRoll:
    """
    Use Case: Consume material from an operator-chosen roll

    Same contract as AllocateMaterial for a single roll; an inactive roll
    is reported as INSUFFICIENT_STOCK.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        roll_repo: RollRepository,
        usage_repo: RollUsageRepository,
        policy: Optional[RetryPolicy] = None,
    ):
        self.uow = uow
        self.allocator = RollAllocator(roll_repo, usage_repo)
        self.policy = policy

    async def execute(self, command: AllocateFromRollCommandDTO) -> Result[AllocationResponseDTO]:
        async def operation():
            result = await self.allocator.allocate_from_roll(
                roll_number=command.roll_number,
                material_type=command.material_type,
                required_length=command.required_length,
                order_id=command.order_id,
                actor=command.actor,
                notes=command.notes,
            )
            return _to_response(result)

        runner = TransactionRunner(self.uow, self.policy)
        return await runner.run(
            operation,
            failure_code="ALLOCATION_FAILED",
            failure_message="Failed to allocate material",
        )
