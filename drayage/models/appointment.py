"""
Terminal appointment model.

A booked gate slot at a terminal for one order. Rescheduling never edits
the booked time in place: the old row is marked RESCHEDULED and a new row
points back at it through rescheduled_from.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import String, Text, Boolean, Enum, ForeignKey, DateTime
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from drayage.models.base import BaseModel
from drayage.models.enums import AppointmentType, AppointmentStatus


class TerminalAppointment(BaseModel):
    """
    Gate appointment with its confirmation, arrival and completion facts.
    """
    __tablename__ = "terminal_appointments"

    order_id: Mapped[UUID] = mapped_column(
        ForeignKey("orders.id"),
        nullable=False,
        index=True,
    )

    terminal_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        nullable=False,
        index=True,
    )

    type: Mapped[AppointmentType] = mapped_column(
        Enum(AppointmentType, name="appointment_type", create_type=False),
        nullable=False,
    )

    status: Mapped[AppointmentStatus] = mapped_column(
        Enum(AppointmentStatus, name="appointment_status", create_type=False),
        nullable=False,
        default=AppointmentStatus.REQUESTED,
        index=True,
    )

    container_id: Mapped[Optional[UUID]] = mapped_column(PG_UUID(as_uuid=True), nullable=True)
    container_number: Mapped[Optional[str]] = mapped_column(String(11), nullable=True)

    # =========================================================================
    # Booked Window
    # =========================================================================
    requested_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    window_start: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )

    window_end: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="Exclusive end of the appointment window",
    )

    # =========================================================================
    # Confirmation
    # =========================================================================
    confirmed_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    confirmation_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    confirmed_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    confirmation_task_id: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Handle of the pending confirmation follow-up",
    )

    # =========================================================================
    # Gate Events
    # =========================================================================
    gate_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    actual_arrival_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    was_on_time: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    actual_completion_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    gate_ticket_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # =========================================================================
    # Audit
    # =========================================================================
    cancellation_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    rescheduled_from: Mapped[Optional[UUID]] = mapped_column(
        ForeignKey("terminal_appointments.id"),
        nullable=True,
        comment="Appointment this one replaced",
    )

    requested_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    special_instructions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    @property
    def is_active(self) -> bool:
        return self.status.is_active
