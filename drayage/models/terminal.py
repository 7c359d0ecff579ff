"""
Terminal and gate-hours models.
"""
from datetime import date, time
from typing import Optional
from uuid import UUID

from sqlalchemy import String, Boolean, Integer, Date, Time, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from drayage.models.base import BaseModel


class Terminal(BaseModel):
    """Marine or rail terminal accepting gate appointments."""
    __tablename__ = "terminals"

    name: Mapped[str] = mapped_column(String(200), nullable=False)

    code: Mapped[str] = mapped_column(
        String(20),
        unique=True,
        nullable=False,
        index=True,
    )

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class TerminalGateHours(BaseModel):
    """
    Gate opening hours for one weekday, or a special-date override.

    Rows with special_date set take precedence over the weekday rows for
    that calendar date (holidays, extended hours).
    """
    __tablename__ = "terminal_gate_hours"

    terminal_id: Mapped[UUID] = mapped_column(
        ForeignKey("terminals.id"),
        nullable=False,
        index=True,
    )

    # 0 = Monday ... 6 = Sunday (datetime.weekday())
    day_of_week: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    special_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    open_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    close_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)

    is_closed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    notes: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    def is_open_at(self, t: time) -> bool:
        """Open interval check; close_time itself is outside the gate."""
        if self.is_closed or self.open_time is None or self.close_time is None:
            return False
        return self.open_time <= t < self.close_time
