"""SetRollActive / UpdateRollNotes Use Cases

Small roll edits that change neither lengths nor history. Both go through
the roll's compare-and-swap guard so they cannot overwrite a concurrent
allocation's lengths.
"""

import logging
from typing import Any, Dict, Optional
from libs.result import Result, Return
from src.app.errors import not_found
from src.app.repositories.roll_repository import RollRepository
from src.app.services.transaction_runner import ConcurrencyConflict, RetryPolicy, TransactionRunner
from src.app.services.unit_of_work import UnitOfWork
from .dtos import RollDTO, SetRollActiveCommandDTO, UpdateRollNotesCommandDTO

logger = logging.getLogger(__name__)


async def _update_roll(
    roll_repo: RollRepository, material_type: str, roll_number: int, values: Dict[str, Any]
) -> Result[RollDTO]:
    roll = await roll_repo.get(material_type, roll_number)
    if roll is None:
        return Return.err(not_found("Roll", f"{material_type}#{roll_number}"))

    if not await roll_repo.update_if_version(roll.id, roll.version, values):
        raise ConcurrencyConflict(f"Roll {material_type}#{roll_number} changed concurrently")

    roll = await roll_repo.get_by_id(roll.id)
    return Return.ok(RollDTO.from_entity(roll))


class SetRollActive:
    """
    Use Case: Activate or retire a roll

    Inactive rolls are skipped by FIFO allocation and rejected by
    specific-roll allocation. Rolls are never deleted.
    """

    def __init__(self, uow: UnitOfWork, roll_repo: RollRepository, policy: Optional[RetryPolicy] = None):
        self.uow = uow
        self.roll_repo = roll_repo
        self.policy = policy

    async def execute(self, command: SetRollActiveCommandDTO) -> Result[RollDTO]:
        runner = TransactionRunner(self.uow, self.policy)
        result = await runner.run(
            lambda: _update_roll(
                self.roll_repo, command.material_type, command.roll_number, {"is_active": command.is_active}
            ),
            failure_code="SET_ROLL_ACTIVE_FAILED",
            failure_message="Failed to change roll status",
        )
        if result.is_ok():
            logger.info(
                f"Roll {command.material_type}#{command.roll_number} "
                f"{'activated' if command.is_active else 'deactivated'}"
            )
        return result


class UpdateRollNotes:

    def __init__(self, uow: UnitOfWork, roll_repo: RollRepository, policy: Optional[RetryPolicy] = None):
        self.uow = uow
        self.roll_repo = roll_repo
        self.policy = policy

    async def execute(self, command: UpdateRollNotesCommandDTO) -> Result[RollDTO]:
        runner = TransactionRunner(self.uow, self.policy)
        return await runner.run(
            lambda: _update_roll(self.roll_repo, command.material_type, command.roll_number, {"notes": command.notes}),
            failure_code="UPDATE_ROLL_NOTES_FAILED",
            failure_message="Failed to update roll notes",
        )
