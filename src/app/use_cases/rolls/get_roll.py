"""Roll read use cases: GetRoll, ListRolls, GetRollHistory"""

from typing import Optional
from libs.result import Result, Return
from src.app.errors import not_found, validation_error
from src.app.repositories.roll_repository import RollRepository
from src.app.repositories.roll_usage_repository import RollUsageRepository
from .dtos import ListRollsResponseDTO, RollDTO, RollHistoryResponseDTO, RollUsageEventDTO

MAX_HISTORY_LIMIT = 500


class GetRoll:

    def __init__(self, roll_repo: RollRepository):
        self.roll_repo = roll_repo

    async def execute(self, material_type: str, roll_number: int) -> Result[RollDTO]:
        roll = await self.roll_repo.get(material_type, roll_number)
        if roll is None:
            return Return.err(not_found("Roll", f"{material_type}#{roll_number}"))
        return Return.ok(RollDTO.from_entity(roll))


class ListRolls:
    """
    Use case: list rolls, optionally of one material type

    Ordered by material type, then roll number (the FIFO order).
    """

    def __init__(self, roll_repo: RollRepository):
        self.roll_repo = roll_repo

    async def execute(self, material_type: Optional[str] = None) -> Result[ListRollsResponseDTO]:
        rolls = await self.roll_repo.list_by_type(material_type)
        return Return.ok(
            ListRollsResponseDTO(
                rolls=[RollDTO.from_entity(roll) for roll in rolls],
                total=len(rolls),
            )
        )


class GetRollHistory:
    """
    Use case: usage history of one roll, newest event first

    The history spans every install of the roll; an INSTALL or RESET event
    marks where a new spool started.
    """

    def __init__(self, roll_repo: RollRepository, usage_repo: RollUsageRepository):
        self.roll_repo = roll_repo
        self.usage_repo = usage_repo

    async def execute(self, material_type: str, roll_number: int, limit: int = 50) -> Result[RollHistoryResponseDTO]:
        if limit < 1 or limit > MAX_HISTORY_LIMIT:
            return Return.err(validation_error(
                f"limit must be between 1 and {MAX_HISTORY_LIMIT}, got {limit}",
                field="limit",
            ))

        roll = await self.roll_repo.get(material_type, roll_number)
        if roll is None:
            return Return.err(not_found("Roll", f"{material_type}#{roll_number}"))

        events = await self.usage_repo.list_by_roll(roll.id, limit=limit)
        return Return.ok(
            RollHistoryResponseDTO(
                roll=RollDTO.from_entity(roll),
                events=[RollUsageEventDTO.from_entity(event) for event in events],
            )
        )
