"""Roll Usage Event Repository Interface"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional
from src.domain.roll_usage_event import RollUsageEvent


class RollUsageRepository(ABC):

    @abstractmethod
    async def create(self, event: RollUsageEvent) -> RollUsageEvent:
        """Append an event (events are never updated or deleted)"""
        pass

    @abstractmethod
    async def list_by_roll(self, roll_id: int, limit: int = 50) -> List[RollUsageEvent]:
        """Events of a roll, newest first"""
        pass

    @abstractmethod
    async def consumed_since_last_install(self, roll_id: int) -> Optional[Decimal]:
        """
        Sum of CONSUMPTION amounts after the roll's latest INSTALL/RESET event

        Returns:
            The sum, or None when the roll has no INSTALL/RESET event
        """
        pass
