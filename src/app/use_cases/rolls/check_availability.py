"""CheckAvailability Use Case

Advisory check of one roll against a required length. Nothing is
reserved: a later allocation can still fail.
"""

from libs.result import Result, Return
from src.app.errors import not_found, validation_error
from src.app.repositories.roll_repository import RollRepository
from src.domain.amounts import ZERO, is_non_negative_finite, quantize
from .dtos import AvailabilityResponseDTO, CheckAvailabilityCommandDTO


class CheckAvailability:

    def __init__(self, roll_repo: RollRepository):
        self.roll_repo = roll_repo

    async def execute(self, command: CheckAvailabilityCommandDTO) -> Result[AvailabilityResponseDTO]:
        if not is_non_negative_finite(command.required_length):
            return Return.err(validation_error(
                f"Required length must be a non-negative number, got {command.required_length}",
                field="required_length",
            ))
        required = quantize(command.required_length)

        roll = await self.roll_repo.get(command.material_type, command.roll_number)
        if roll is None:
            return Return.err(not_found("Roll", f"{command.material_type}#{command.roll_number}"))

        # An inactive roll cannot be allocated from, whatever it still holds
        available = quantize(roll.available_length) if roll.is_active else ZERO
        sufficient = available >= required
        shortfall = max(required - available, ZERO)

        if not roll.is_active:
            message = f"Roll {roll.roll_number} ({roll.material_type}) is inactive"
        elif sufficient:
            message = f"Roll {roll.roll_number} has enough length ({available} available)"
        else:
            message = (
                f"Roll {roll.roll_number} only has {available} available. "
                f"{required} required, short by {shortfall}"
            )

        return Return.ok(
            AvailabilityResponseDTO(
                roll_number=roll.roll_number,
                material_type=roll.material_type,
                is_active=roll.is_active,
                required_length=required,
                available_length=available,
                sufficient=sufficient,
                shortfall=shortfall,
                message=message,
            )
        )
