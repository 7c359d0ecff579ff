"""
Terminal gate-hours providers.

Gate hours are wall-clock times in the schedule's gate timezone; the
requested instant is converted before the weekday and time are read.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from drayage.models.terminal import TerminalGateHours
from drayage.repositories.base import GateHoursRepository
from drayage.services.rates import RateSchedule


class GateHoursProvider(ABC):
    """Answers whether a terminal's gate is open at a given instant."""

    @abstractmethod
    async def is_open(self, terminal_id: UUID, at: datetime) -> bool: ...


class ScheduleGateHours(GateHoursProvider):
    """Same default hours for every terminal, taken from the rate schedule."""

    def __init__(self, schedule: RateSchedule):
        self.schedule = schedule

    async def is_open(self, terminal_id: UUID, at: datetime) -> bool:
        return _default_open(self.schedule, at)


class RepositoryGateHours(GateHoursProvider):
    """
    Per-terminal hours read from TerminalGateHours rows.

    Lookup order for the local date of `at`:
        1. a special_date row for that date
        2. the day_of_week row for that weekday (a configured terminal
           with no row for the weekday is closed that day)
        3. the schedule default, when the terminal has no rows at all
    """

    def __init__(self, repository: GateHoursRepository, schedule: RateSchedule):
        self.repository = repository
        self.schedule = schedule

    async def is_open(self, terminal_id: UUID, at: datetime) -> bool:
        rows = await self.repository.get_for_terminal(terminal_id)
        if not rows:
            return _default_open(self.schedule, at)

        local = at.astimezone(self.schedule.tzinfo)
        row = _pick_row(rows, local)
        if row is None:
            return False
        return row.is_open_at(local.time().replace(tzinfo=None))


def _pick_row(rows: list[TerminalGateHours], local: datetime) -> Optional[TerminalGateHours]:
    for row in rows:
        if row.special_date is not None and row.special_date == local.date():
            return row
    for row in rows:
        if row.special_date is None and row.day_of_week == local.weekday():
            return row
    return None


def _default_open(schedule: RateSchedule, at: datetime) -> bool:
    local = at.astimezone(schedule.tzinfo)
    window = schedule.gate_window(local.weekday())
    if window is None:
        return False
    return window.contains(local.time().replace(tzinfo=None))
