"""
Terminal slot-capacity providers.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from drayage.repositories.base import AppointmentRepository


class SlotCapacityProvider(ABC):

    @abstractmethod
    async def has_capacity(
        self,
        terminal_id: UUID,
        window_start: datetime,
        window_end: datetime,
        exclude_id: Optional[UUID] = None,
    ) -> bool:
        """
        Whether one more appointment fits in [window_start, window_end).

        exclude_id leaves one appointment out of the count (the one being
        rescheduled away from).
        """

    async def capacity(self) -> Optional[int]:
        return None


class UnlimitedCapacity(SlotCapacityProvider):

    async def has_capacity(self, terminal_id, window_start, window_end, exclude_id=None) -> bool:
        return True


class AppointmentCountCapacity(SlotCapacityProvider):
    """Counts active appointments overlapping the window against a fixed cap."""

    def __init__(self, repository: AppointmentRepository, slot_capacity: int):
        self.repository = repository
        self.slot_capacity = slot_capacity

    async def has_capacity(
        self,
        terminal_id: UUID,
        window_start: datetime,
        window_end: datetime,
        exclude_id: Optional[UUID] = None,
    ) -> bool:
        booked = await self.repository.get_by_terminal_and_time_range(
            terminal_id, window_start, window_end
        )
        active = [a for a in booked if a.status.is_active and a.id != exclude_id]
        return len(active) < self.slot_capacity

    async def capacity(self) -> Optional[int]:
        return self.slot_capacity
