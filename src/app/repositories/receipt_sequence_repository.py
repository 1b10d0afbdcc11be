"""Receipt Sequence Repository Interface"""

from abc import ABC, abstractmethod
from typing import Optional


class ReceiptSequenceRepository(ABC):

    @abstractmethod
    async def increment(self, date_prefix: str) -> Optional[int]:
        """
        Atomically increment the counter of a day prefix

        Returns:
            The new value, or None if the day has no counter row yet
        """
        pass

    @abstractmethod
    async def create(self, date_prefix: str, initial_value: int) -> int:
        """
        Insert the counter row of a day prefix

        Raises:
            IntegrityError: If a concurrent writer created the row first
        """
        pass
