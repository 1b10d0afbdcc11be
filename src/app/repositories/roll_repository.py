"""Roll Repository Interface

Defines the contract for roll persistence. Mutations go through
compare-and-swap on the roll version so that concurrent writers against
the same roll are serialised by the store.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from decimal import Decimal
from src.domain.roll import Roll


class RollRepository(ABC):

    @abstractmethod
    async def get(self, material_type: str, roll_number: int) -> Optional[Roll]:
        """
        Retrieve a roll by identity

        Args:
            material_type: Material type
            roll_number: Roll number within the material type

        Returns:
            Roll if found, None otherwise (always re-read from the store)
        """
        pass

    @abstractmethod
    async def get_by_id(self, roll_id: int) -> Optional[Roll]:
        pass

    @abstractmethod
    async def list_by_type(self, material_type: Optional[str] = None) -> List[Roll]:
        """
        List rolls ordered by material type and roll number

        Args:
            material_type: Restrict to one material type (None = all rolls)
        """
        pass

    @abstractmethod
    async def find_allocatable(self, material_type: str, required_length: Decimal) -> List[Roll]:
        """
        Active rolls of a material type with available_length >= required_length,
        lowest roll_number first
        """
        pass

    @abstractmethod
    async def max_available_length(self, material_type: str) -> Decimal:
        """Largest available_length among active rolls of the type (0 if none)"""
        pass

    @abstractmethod
    async def create(self, roll: Roll) -> Roll:
        pass

    @abstractmethod
    async def update_if_version(self, roll_id: int, expected_version: int, values: Dict[str, Any]) -> bool:
        """
        Apply values only if the stored version still equals expected_version

        Bumps the version on success.

        Returns:
            True if the row was updated, False if another writer got there first
        """
        pass
