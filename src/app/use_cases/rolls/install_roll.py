"""InstallRoll / ResetRoll Use Cases

Both reinitialise a roll to full capacity (available = total, used = 0)
and append one audit event. Install creates the roll when it does not
exist yet, marks it active and emits INSTALL; it is also how a depleted
roll is replaced, and the last install wins. Reset restores an existing
roll (to its current capacity unless a new one is given) and emits RESET.
Earlier CONSUMPTION events are never touched.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional
from libs.result import Result, Return
from src.app.errors import not_found, validation_error
from src.app.repositories.roll_repository import RollRepository
from src.app.repositories.roll_usage_repository import RollUsageRepository
from src.app.services.transaction_runner import ConcurrencyConflict, RetryPolicy, TransactionRunner
from src.app.services.unit_of_work import UnitOfWork
from src.domain.amounts import ZERO, is_non_negative_finite, quantize
from src.domain.roll import Roll
from src.domain.roll_usage_event import RollUsageEvent, UsageEventKind
from .dtos import InstallRollCommandDTO, ResetRollCommandDTO, RollDTO

logger = logging.getLogger(__name__)

DEFAULT_ROLL_LENGTH = Decimal("105.00")


class _RollReinitialiser:

    def __init__(
        self,
        uow: UnitOfWork,
        roll_repo: RollRepository,
        usage_repo: RollUsageRepository,
        policy: Optional[RetryPolicy] = None,
    ):
        self.uow = uow
        self.roll_repo = roll_repo
        self.usage_repo = usage_repo
        self.policy = policy

    async def _reinitialise(
        self,
        roll: Roll,
        total_length: Decimal,
        kind: UsageEventKind,
        actor: Optional[str],
        notes: Optional[str],
    ) -> Roll:
        now = datetime.utcnow()
        values = {
            "total_length": total_length,
            "available_length": total_length,
            "used_length": ZERO,
            "installed_at": now,
            "last_updated_at": now,
        }
        if kind == UsageEventKind.INSTALL:
            values["is_active"] = True
            values["notes"] = notes

        if not await self.roll_repo.update_if_version(roll.id, roll.version, values):
            raise ConcurrencyConflict(f"Roll {roll.material_type}#{roll.roll_number} changed during {kind.value}")

        return await self.roll_repo.get_by_id(roll.id)

    async def _append_event(self, roll: Roll, kind: UsageEventKind, actor: Optional[str], notes: Optional[str]):
        await self.usage_repo.create(
            RollUsageEvent(
                roll_id=roll.id,
                roll_number=roll.roll_number,
                material_type=roll.material_type,
                event_kind=kind,
                amount=ZERO,
                available_after=quantize(roll.available_length),
                actor=actor,
                notes=notes,
            )
        )


class InstallRoll(_RollReinitialiser):
    """
    Use Case: Install a new roll or replace an existing one

    Business Rules:
    1. total_length must be a non-negative finite number
    2. available_length = total_length, used_length = 0, is_active = True
    3. Exactly one INSTALL event per call
    """

    def __init__(
        self,
        uow: UnitOfWork,
        roll_repo: RollRepository,
        usage_repo: RollUsageRepository,
        default_length: Decimal = DEFAULT_ROLL_LENGTH,
        policy: Optional[RetryPolicy] = None,
    ):
        super().__init__(uow, roll_repo, usage_repo, policy)
        self.default_length = default_length

    async def execute(self, command: InstallRollCommandDTO) -> Result[RollDTO]:
        runner = TransactionRunner(self.uow, self.policy)
        return await runner.run(
            lambda: self._install(command),
            failure_code="INSTALL_ROLL_FAILED",
            failure_message="Failed to install roll",
        )

    async def _install(self, command: InstallRollCommandDTO) -> Result[RollDTO]:
        total_length = command.total_length if command.total_length is not None else self.default_length
        if not is_non_negative_finite(total_length):
            return Return.err(validation_error(
                f"Total length must be a non-negative number, got {total_length}",
                field="total_length",
            ))
        total_length = quantize(total_length)

        roll = await self.roll_repo.get(command.material_type, command.roll_number)
        if roll is None:
            roll = await self.roll_repo.create(
                Roll(
                    roll_number=command.roll_number,
                    material_type=command.material_type,
                    total_length=total_length,
                    available_length=total_length,
                    used_length=ZERO,
                    is_active=True,
                    notes=command.notes,
                )
            )
        else:
            roll = await self._reinitialise(
                roll, total_length, UsageEventKind.INSTALL, command.actor, command.notes
            )

        await self._append_event(roll, UsageEventKind.INSTALL, command.actor, command.notes)

        logger.info(f"Installed roll {roll.material_type}#{roll.roll_number} with {total_length}")
        return Return.ok(RollDTO.from_entity(roll))


class ResetRoll(_RollReinitialiser):
    """
    Use Case: Restore an existing roll to full capacity

    Business Rules:
    1. The roll must exist
    2. total_length defaults to the roll's current capacity
    3. is_active and notes are left as they are
    4. Exactly one RESET event per call
    """

    async def execute(self, command: ResetRollCommandDTO) -> Result[RollDTO]:
        runner = TransactionRunner(self.uow, self.policy)
        return await runner.run(
            lambda: self._reset(command),
            failure_code="RESET_ROLL_FAILED",
            failure_message="Failed to reset roll",
        )

    async def _reset(self, command: ResetRollCommandDTO) -> Result[RollDTO]:
        if command.total_length is not None and not is_non_negative_finite(command.total_length):
            return Return.err(validation_error(
                f"Total length must be a non-negative number, got {command.total_length}",
                field="total_length",
            ))

        roll = await self.roll_repo.get(command.material_type, command.roll_number)
        if roll is None:
            return Return.err(not_found("Roll", f"{command.material_type}#{command.roll_number}"))

        total_length = quantize(
            command.total_length if command.total_length is not None else roll.total_length
        )
        roll = await self._reinitialise(roll, total_length, UsageEventKind.RESET, command.actor, command.notes)
        await self._append_event(roll, UsageEventKind.RESET, command.actor, command.notes)

        logger.info(f"Reset roll {roll.material_type}#{roll.roll_number} to {total_length}")
        return Return.ok(RollDTO.from_entity(roll))
