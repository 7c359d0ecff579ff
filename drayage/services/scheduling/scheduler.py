"""
Terminal appointment scheduler.

Validates and applies appointment state changes. The scheduler reads
gate hours and slot capacity through its collaborators but never writes
a repository: it returns new appointment objects or mutates the ones it
is given, and the lifecycle coordinator persists the result.

Appointment states:
    REQUESTED -> PENDING -> CONFIRMED -> COMPLETED
    any active state -> CANCELLED | RESCHEDULED
    CONFIRMED with no arrival after window_end reads as missed
"""
import logging
from datetime import datetime, timedelta
from types import MappingProxyType
from typing import Iterable, Mapping, Optional
from uuid import UUID, uuid4

from drayage.core.exceptions import (
    ConflictError,
    InvalidStateError,
    SlotUnavailableError,
    TerminalClosedError,
    ValidationError,
)
from drayage.models.appointment import TerminalAppointment
from drayage.models.container import Container
from drayage.models.enums import AppointmentStatus, AppointmentType
from drayage.models.order import Order
from drayage.services.rates import RateSchedule
from drayage.services.scheduling.capacity import SlotCapacityProvider, UnlimitedCapacity
from drayage.services.scheduling.gate_hours import GateHoursProvider, ScheduleGateHours

logger = logging.getLogger(__name__)

APPOINTMENT_TRANSITIONS: Mapping[AppointmentStatus, frozenset[AppointmentStatus]] = MappingProxyType({
    AppointmentStatus.REQUESTED: frozenset({
        AppointmentStatus.PENDING,
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.RESCHEDULED,
        AppointmentStatus.COMPLETED,
    }),
    AppointmentStatus.PENDING: frozenset({
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.RESCHEDULED,
        AppointmentStatus.COMPLETED,
    }),
    AppointmentStatus.CONFIRMED: frozenset({
        AppointmentStatus.CANCELLED,
        AppointmentStatus.RESCHEDULED,
        AppointmentStatus.COMPLETED,
        AppointmentStatus.MISSED,
    }),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.MISSED: frozenset(),
    AppointmentStatus.RESCHEDULED: frozenset(),
})


class AppointmentScheduler:
    """
    Appointment state machine with lead-time, gate-hours and capacity checks.

    Args:
        schedule: Rate schedule supplying lead time, window length and grace
        gate_hours: Gate-hours provider (defaults to the schedule's hours)
        capacity: Slot-capacity provider (defaults to unlimited)
    """

    def __init__(
        self,
        schedule: RateSchedule,
        gate_hours: Optional[GateHoursProvider] = None,
        capacity: Optional[SlotCapacityProvider] = None,
    ):
        self.schedule = schedule
        self.gate_hours = gate_hours or ScheduleGateHours(schedule)
        self.capacity = capacity or UnlimitedCapacity()

    @property
    def window(self) -> timedelta:
        return timedelta(minutes=self.schedule.appointment_window_minutes)

    @property
    def lead_time(self) -> timedelta:
        return timedelta(hours=self.schedule.min_appointment_lead_hours)

    @property
    def grace(self) -> timedelta:
        return timedelta(minutes=self.schedule.on_time_grace_minutes)

    # =========================================================================
    # Booking
    # =========================================================================

    async def request(
        self,
        order: Order,
        terminal_id: UUID,
        appointment_type: AppointmentType,
        requested_time: datetime,
        existing: Iterable[TerminalAppointment],
        now: datetime,
        requested_by: Optional[str] = None,
        special_instructions: Optional[str] = None,
        container: Optional[Container] = None,
    ) -> TerminalAppointment:
        """
        Validate a booking request and build a REQUESTED appointment.

        Raises:
            InvalidStateError: order is completed, cancelled or failed
            ValidationError: requested_time in the past or inside the lead time
            TerminalClosedError: gate closed at requested_time
            ConflictError: the order already holds an active appointment
            SlotUnavailableError: the window is at capacity
        """
        if order.status.is_terminal:
            raise InvalidStateError(
                order.status,
                AppointmentStatus.REQUESTED,
                message=f"order {order.order_number} is {order.status.value} and cannot be scheduled",
            )

        self._check_lead_time(requested_time, now, "requested_time")
        await self._check_gate(terminal_id, requested_time)

        for appt in existing:
            if appt.status.is_active:
                raise ConflictError(
                    f"Order already has active appointment: {appt.confirmation_number or appt.id}",
                    details={"order_id": str(order.id), "appointment_id": str(appt.id)},
                )

        window_start, window_end = requested_time, requested_time + self.window
        await self._check_capacity(terminal_id, window_start, window_end)

        appointment = TerminalAppointment(
            id=uuid4(),
            order_id=order.id,
            terminal_id=terminal_id,
            type=AppointmentType(appointment_type),
            status=AppointmentStatus.REQUESTED,
            container_id=container.id if container else order.container_id,
            container_number=container.container_number if container else None,
            requested_time=requested_time,
            window_start=window_start,
            window_end=window_end,
            requested_by=requested_by,
            special_instructions=special_instructions,
            created_at=now,
            updated_at=now,
        )
        logger.info(
            f"Appointment requested for order {order.order_number} at terminal {terminal_id}: "
            f"{window_start.isoformat()}"
        )
        return appointment

    def confirm(
        self,
        appointment: TerminalAppointment,
        confirmation_number: str,
        confirmed_by: Optional[str],
        now: datetime,
    ) -> TerminalAppointment:
        """Record the terminal's confirmation. Only REQUESTED or PENDING can be confirmed."""
        self._transition(appointment, AppointmentStatus.CONFIRMED, now)
        appointment.confirmation_number = confirmation_number
        appointment.confirmed_by = confirmed_by
        appointment.confirmed_time = now
        appointment.confirmation_task_id = None
        return appointment

    async def reschedule(
        self,
        appointment: TerminalAppointment,
        new_time: datetime,
        reason: Optional[str],
        rescheduled_by: Optional[str],
        now: datetime,
    ) -> TerminalAppointment:
        """
        Replace an active appointment with a new one at new_time.

        The old appointment becomes RESCHEDULED; the returned appointment is
        REQUESTED and points back through rescheduled_from. Nothing is
        modified unless every check passes.
        """
        if not appointment.status.is_active:
            raise self._invalid(appointment, AppointmentStatus.RESCHEDULED)

        self._check_lead_time(new_time, now, "new_time")
        await self._check_gate(appointment.terminal_id, new_time)

        window_start, window_end = new_time, new_time + self.window
        await self._check_capacity(
            appointment.terminal_id, window_start, window_end, exclude_id=appointment.id
        )

        replacement = TerminalAppointment(
            id=uuid4(),
            order_id=appointment.order_id,
            terminal_id=appointment.terminal_id,
            type=appointment.type,
            status=AppointmentStatus.REQUESTED,
            container_id=appointment.container_id,
            container_number=appointment.container_number,
            requested_time=new_time,
            window_start=window_start,
            window_end=window_end,
            special_instructions=appointment.special_instructions,
            requested_by=rescheduled_by,
            rescheduled_from=appointment.id,
            created_at=now,
            updated_at=now,
        )

        self._transition(appointment, AppointmentStatus.RESCHEDULED, now)
        appointment.cancellation_reason = reason
        appointment.confirmation_task_id = None

        logger.info(
            f"Appointment {appointment.id} rescheduled to {new_time.isoformat()} as {replacement.id}"
        )
        return replacement

    def cancel(
        self,
        appointment: TerminalAppointment,
        reason: Optional[str],
        cancelled_by: Optional[str],
        now: datetime,
    ) -> TerminalAppointment:
        self._transition(appointment, AppointmentStatus.CANCELLED, now)
        appointment.cancellation_reason = reason
        appointment.confirmation_task_id = None
        logger.info(f"Appointment {appointment.id} cancelled by {cancelled_by or 'system'}: {reason}")
        return appointment

    # =========================================================================
    # Gate Events
    # =========================================================================

    def record_arrival(
        self,
        appointment: TerminalAppointment,
        arrival_time: datetime,
        gate_number: Optional[str],
        now: Optional[datetime] = None,
    ) -> TerminalAppointment:
        """
        Stamp the truck's gate arrival.

        On time means no earlier than window_start minus the grace period
        and no later than window_end.
        """
        if not appointment.status.is_active:
            raise InvalidStateError(
                appointment.status,
                appointment.status,
                message=f"cannot record arrival for {appointment.status.value} appointment",
            )
        appointment.actual_arrival_time = arrival_time
        appointment.gate_number = gate_number
        appointment.was_on_time = (
            appointment.window_start - self.grace <= arrival_time <= appointment.window_end
        )
        appointment.updated_at = now or arrival_time
        return appointment

    def complete(
        self,
        appointment: TerminalAppointment,
        completion_time: datetime,
        gate_ticket_number: Optional[str],
        now: Optional[datetime] = None,
    ) -> TerminalAppointment:
        if not appointment.status.is_active or appointment.actual_arrival_time is None:
            raise InvalidStateError(
                appointment.status,
                AppointmentStatus.COMPLETED,
                allowed=APPOINTMENT_TRANSITIONS[appointment.status],
                message="appointment must be active with a recorded arrival to complete",
            )
        if completion_time < appointment.actual_arrival_time:
            raise ValidationError(
                "Completion time cannot be before arrival time",
                field="completion_time",
                value=completion_time,
            )
        self._transition(appointment, AppointmentStatus.COMPLETED, now or completion_time)
        appointment.actual_completion_time = completion_time
        appointment.gate_ticket_number = gate_ticket_number
        return appointment

    @staticmethod
    def is_missed(appointment: TerminalAppointment, now: datetime) -> bool:
        """MISSED, or CONFIRMED with no arrival once the window has closed."""
        if appointment.status == AppointmentStatus.MISSED:
            return True
        return (
            appointment.status == AppointmentStatus.CONFIRMED
            and appointment.actual_arrival_time is None
            and now > appointment.window_end
        )

    # =========================================================================
    # Checks
    # =========================================================================

    def _check_lead_time(self, requested_time: datetime, now: datetime, field: str) -> None:
        if requested_time < now:
            raise ValidationError("Appointment time must be in the future", field=field, value=requested_time)
        if requested_time < now + self.lead_time:
            raise ValidationError(
                f"Appointment must be at least {self.schedule.min_appointment_lead_hours} hours in advance",
                field=field,
                value=requested_time,
            )

    async def _check_gate(self, terminal_id: UUID, at: datetime) -> None:
        if not await self.gate_hours.is_open(terminal_id, at):
            raise TerminalClosedError(terminal_id, at)

    async def _check_capacity(
        self,
        terminal_id: UUID,
        window_start: datetime,
        window_end: datetime,
        exclude_id: Optional[UUID] = None,
    ) -> None:
        if not await self.capacity.has_capacity(terminal_id, window_start, window_end, exclude_id):
            raise SlotUnavailableError(terminal_id, window_start, await self.capacity.capacity())

    def _transition(self, appointment: TerminalAppointment, target: AppointmentStatus, now: datetime) -> None:
        if target not in APPOINTMENT_TRANSITIONS[appointment.status]:
            raise self._invalid(appointment, target)
        appointment.status = target
        appointment.updated_at = now

    @staticmethod
    def _invalid(appointment: TerminalAppointment, target: AppointmentStatus) -> InvalidStateError:
        return InvalidStateError(
            appointment.status,
            target,
            allowed=APPOINTMENT_TRANSITIONS[appointment.status],
        )
