"""Roll Allocator

Deducts material length from rolls. Runs inside the caller's transaction
and never commits; the deduction and its CONSUMPTION event are written
together or not at all.

Atomicity comes from a compare-and-swap on the roll version: the candidate
is read, the new lengths are computed, and the UPDATE only applies if the
row is still at the version that was read. A lost race re-reads the
candidates, so two allocators can never consume the same length.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional
from libs.result import Result, Return
from src.app.errors import insufficient_stock, not_found, validation_error
from src.app.repositories.roll_repository import RollRepository
from src.app.repositories.roll_usage_repository import RollUsageRepository
from src.app.services.transaction_runner import ConcurrencyConflict
from src.domain.amounts import is_positive_finite, quantize
from src.domain.roll import Roll
from src.domain.roll_usage_event import RollUsageEvent, UsageEventKind

logger = logging.getLogger(__name__)

# Re-reads after a lost compare-and-swap before giving up on this transaction
MAX_CAS_ATTEMPTS = 5


@dataclass(frozen=True)
class Allocation:
    roll_number: int
    material_type: str
    allocated_length: Decimal
    remaining_length: Decimal
    event_id: int


class RollAllocator:

    def __init__(self, roll_repo: RollRepository, usage_repo: RollUsageRepository):
        self.roll_repo = roll_repo
        self.usage_repo = usage_repo

    async def allocate(
        self,
        material_type: str,
        required_length: Decimal,
        order_id: Optional[int] = None,
        actor: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Result[Allocation]:
        """
        Deduct required_length from the lowest-numbered active roll that has it

        Returns:
            Result[Allocation], or INSUFFICIENT_STOCK when no single active roll
            of the material type has enough length left
        """
        if not is_positive_finite(required_length):
            return Return.err(validation_error(
                f"Required length must be a positive number, got {required_length}",
                field="required_length",
            ))
        required = quantize(required_length)

        for _ in range(MAX_CAS_ATTEMPTS):
            candidates = await self.roll_repo.find_allocatable(material_type, required)
            if not candidates:
                available = await self.roll_repo.max_available_length(material_type)
                logger.info(
                    f"Insufficient {material_type} stock: required={required}, "
                    f"largest_available={available}"
                )
                return Return.err(insufficient_stock(material_type, required, available))

            roll = candidates[0]
            if await self._deduct(roll, required):
                return Return.ok(await self._record(roll.id, required, order_id, actor, notes))

            logger.debug(f"Lost race on roll {roll.material_type}#{roll.roll_number}, re-reading")

        raise ConcurrencyConflict(f"Could not allocate {material_type} after {MAX_CAS_ATTEMPTS} attempts")

    async def allocate_from_roll(
        self,
        roll_number: int,
        material_type: str,
        required_length: Decimal,
        order_id: Optional[int] = None,
        actor: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Result[Allocation]:
        """
        Deduct required_length from one operator-chosen roll

        Returns:
            Result[Allocation], NOT_FOUND for an unknown roll, or
            INSUFFICIENT_STOCK when the roll is inactive or too short
        """
        if not is_positive_finite(required_length):
            return Return.err(validation_error(
                f"Required length must be a positive number, got {required_length}",
                field="required_length",
            ))
        required = quantize(required_length)

        for _ in range(MAX_CAS_ATTEMPTS):
            roll = await self.roll_repo.get(material_type, roll_number)
            if roll is None:
                return Return.err(not_found("Roll", f"{material_type}#{roll_number}"))

            if not roll.is_active:
                return Return.err(insufficient_stock(
                    material_type, required, quantize(0), roll_number=roll_number,
                    reason="roll is inactive",
                ))

            available = quantize(roll.available_length)
            if available < required:
                logger.info(
                    f"Insufficient length on roll {material_type}#{roll_number}: "
                    f"required={required}, available={available}"
                )
                return Return.err(insufficient_stock(material_type, required, available, roll_number=roll_number))

            if await self._deduct(roll, required):
                return Return.ok(await self._record(roll.id, required, order_id, actor, notes))

        raise ConcurrencyConflict(f"Could not allocate from roll {material_type}#{roll_number}")

    async def _deduct(self, roll: Roll, required: Decimal) -> bool:
        available = quantize(roll.available_length)
        total = quantize(roll.total_length)
        new_available = available - required
        return await self.roll_repo.update_if_version(
            roll.id,
            roll.version,
            {
                "available_length": new_available,
                "used_length": total - new_available,
                "last_updated_at": datetime.utcnow(),
            },
        )

    async def _record(
        self,
        roll_id: int,
        required: Decimal,
        order_id: Optional[int],
        actor: Optional[str],
        notes: Optional[str],
    ) -> Allocation:
        roll = await self.roll_repo.get_by_id(roll_id)
        remaining = quantize(roll.available_length)

        event = await self.usage_repo.create(
            RollUsageEvent(
                roll_id=roll.id,
                roll_number=roll.roll_number,
                material_type=roll.material_type,
                event_kind=UsageEventKind.CONSUMPTION,
                amount=required,
                available_after=remaining,
                order_id=order_id,
                actor=actor,
                notes=notes,
            )
        )

        logger.info(
            f"Allocated {required} from roll {roll.material_type}#{roll.roll_number} "
            f"(order_id={order_id}), remaining={remaining}"
        )

        return Allocation(
            roll_number=roll.roll_number,
            material_type=roll.material_type,
            allocated_length=required,
            remaining_length=remaining,
            event_id=event.id,
        )
