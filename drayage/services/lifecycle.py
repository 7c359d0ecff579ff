"""
Lifecycle coordinator.

The only component that writes repositories or publishes events. Each
operation runs in a single unit of work: everything it changes commits
together or not at all. Writes touching one order (or one container,
for order creation) are serialized by a per-key asyncio lock; the SQL
repositories add row locks on top. Events go out after commit.
"""
import logging
from contextlib import AsyncExitStack, asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Callable, Hashable, Iterable, Optional
from uuid import UUID, uuid4

from drayage.core.config import Settings
from drayage.core.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from drayage.core.locks import KeyedLocks
from drayage.models.appointment import TerminalAppointment
from drayage.models.container import Container
from drayage.models.enums import (
    AppointmentStatus,
    AppointmentType,
    BillingStatus,
    ContainerSize,
    ContainerState,
    ContainerType,
    CustomsStatus,
    LocationType,
    OrderStatus,
    OrderType,
    ShipmentStatus,
    ShipmentType,
)
from drayage.models.order import Order
from drayage.models.shipment import Shipment
from drayage.repositories.base import UnitOfWork
from drayage.schemas.appointment import AppointmentRequest
from drayage.schemas.order import BulkStatusResult, BulkStatusSkip, OrderCreate, OrderFilter
from drayage.schemas.shipment import ContainerAvailability, ContainerCreate, ShipmentCreate
from drayage.services import charges, events
from drayage.services.charges import ChargeResult, ChargeSummary
from drayage.services.confirmation import (
    TERMINAL_SYSTEM,
    AsyncioConfirmationScheduler,
    CeleryConfirmationScheduler,
    ConfirmationScheduler,
    NullConfirmationScheduler,
    terminal_confirmation_number,
)
from drayage.services.events import DomainEvent, EventBus, LoggingEventBus, to_payload
from drayage.services.order_state import StatusChange, apply_transition
from drayage.services.rates import RateSchedule, build_rate_schedule
from drayage.services.scheduling import (
    AppointmentCountCapacity,
    AppointmentScheduler,
    GateHoursProvider,
    RepositoryGateHours,
    SlotCapacityProvider,
)

logger = logging.getLogger(__name__)

UnitOfWorkFactory = Callable[[], UnitOfWork]
Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LifecycleCoordinator:
    """
    Orchestrates order state, storage charges and terminal appointments.

    Args:
        uow_factory: Returns a fresh UnitOfWork per operation
        event_bus: Destination for domain events (logged if omitted)
        schedule: Immutable rate and scheduling configuration
        confirmations: Out-of-band confirmation follow-up
        clock: Source of "now"; injectable for tests
        gate_hours_factory: Builds a gate-hours provider for a unit of work
        capacity_factory: Builds a slot-capacity provider for a unit of work
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        event_bus: Optional[EventBus] = None,
        schedule: Optional[RateSchedule] = None,
        confirmations: Optional[ConfirmationScheduler] = None,
        clock: Optional[Clock] = None,
        gate_hours_factory: Optional[Callable[[UnitOfWork], GateHoursProvider]] = None,
        capacity_factory: Optional[Callable[[UnitOfWork], SlotCapacityProvider]] = None,
        source: str = "order-service",
    ):
        self.uow_factory = uow_factory
        self.event_bus = event_bus or LoggingEventBus()
        self.schedule = schedule or RateSchedule()
        self.confirmations = confirmations or NullConfirmationScheduler()
        self.clock = clock or utcnow
        self.source = source

        self._gate_hours_factory = gate_hours_factory or (
            lambda uow: RepositoryGateHours(uow.gate_hours, self.schedule)
        )
        self._capacity_factory = capacity_factory or (
            lambda uow: AppointmentCountCapacity(uow.appointments, self.schedule.slot_capacity)
        )
        self._locks = KeyedLocks()

        self.confirmations.bind(self.handle_terminal_confirmation)

    # =========================================================================
    # Shipments & Containers
    # =========================================================================

    async def create_shipment(self, data: ShipmentCreate) -> Shipment:
        """Create a shipment and all of its containers in one transaction."""
        now = self.clock()
        async with self.uow_factory() as uow:
            shipment = Shipment(
                id=uuid4(),
                type=ShipmentType(data.type),
                reference_number=data.reference_number,
                customer_id=data.customer_id,
                steamship_line_id=data.steamship_line_id,
                terminal_id=data.terminal_id,
                port_id=data.port_id,
                vessel_name=data.vessel_name,
                voyage_number=data.voyage_number,
                vessel_eta=data.vessel_eta,
                last_free_day=data.last_free_day,
                port_cutoff=data.port_cutoff,
                doc_cutoff=data.doc_cutoff,
                earliest_return_date=data.earliest_return_date,
                consignee_id=data.consignee_id,
                shipper_id=data.shipper_id,
                empty_return_location_id=data.empty_return_location_id,
                status=ShipmentStatus.PENDING,
                special_instructions=data.special_instructions,
                created_at=now,
                updated_at=now,
            )
            await uow.shipments.create(shipment)
            for container_data in data.containers:
                await uow.containers.create(_build_container(shipment.id, container_data, now))
            await uow.commit()

        logger.info(
            f"Created {shipment.type.value} shipment {shipment.reference_number} "
            f"with {len(data.containers)} containers"
        )
        await self._publish(
            now,
            (
                events.SHIPMENT_CREATED,
                to_payload(
                    shipment_id=shipment.id,
                    reference_number=shipment.reference_number,
                    type=shipment.type,
                    container_count=len(data.containers),
                    last_free_day=shipment.last_free_day,
                ),
            ),
        )
        return shipment

    async def get_shipment(self, shipment_id: UUID) -> tuple[Shipment, list[Container]]:
        async with self.uow_factory() as uow:
            shipment = await _require(uow.shipments.get(shipment_id), "shipment", shipment_id)
            containers = await uow.containers.get_by_shipment(shipment_id)
        return shipment, containers

    async def add_containers(self, shipment_id: UUID, containers: list[ContainerCreate]) -> list[Container]:
        now = self.clock()
        async with self._hold(("shipment", shipment_id)):
            async with self.uow_factory() as uow:
                await _require(uow.shipments.get(shipment_id), "shipment", shipment_id)
                existing = {c.container_number for c in await uow.containers.get_by_shipment(shipment_id)}
                duplicates = sorted(existing & {c.container_number for c in containers})
                if duplicates:
                    raise ConflictError(
                        "Containers already on shipment",
                        details={"shipment_id": str(shipment_id), "container_numbers": duplicates},
                    )
                created = []
                for container_data in containers:
                    created.append(
                        await uow.containers.create(_build_container(shipment_id, container_data, now))
                    )
                await uow.commit()

        logger.info(f"Added {len(created)} containers to shipment {shipment_id}")
        return created

    async def check_container_availability(self, container_ids: Iterable[UUID]) -> list[ContainerAvailability]:
        """Pickup availability per container; unknown ids are reported, not raised."""
        results = []
        async with self.uow_factory() as uow:
            for container_id in container_ids:
                container = await uow.containers.get(container_id)
                if container is None:
                    results.append(
                        ContainerAvailability(
                            container_id=container_id,
                            is_available=False,
                            reason="Container not found",
                        )
                    )
                    continue
                results.append(
                    ContainerAvailability(
                        container_id=container.id,
                        container_number=container.container_number,
                        is_available=container.is_available,
                        reason=container.availability_reason,
                    )
                )
        return results

    # =========================================================================
    # Orders
    # =========================================================================

    async def generate_orders(self, shipment_id: UUID) -> list[Order]:
        """
        Create one PENDING order per container that has no active order.

        Containers that already carry an active order are skipped.
        """
        now = self.clock()
        async with self.uow_factory() as uow:
            shipment = await _require(uow.shipments.get(shipment_id), "shipment", shipment_id)
            container_ids = [c.id for c in await uow.containers.get_by_shipment(shipment_id)]

        created: list[Order] = []
        async with self._hold(*(("container", cid) for cid in container_ids)):
            async with self.uow_factory() as uow:
                for container_id in container_ids:
                    container = await uow.containers.get_for_update(container_id)
                    active = await uow.orders.get_active_by_container(container_id)
                    if active is not None:
                        logger.info(
                            f"Skipping container {container.container_number}: "
                            f"active order {active.order_number}"
                        )
                        continue
                    order = await self._new_order(uow, shipment, container, now)
                    created.append(await uow.orders.create(order))
                await uow.commit()

        logger.info(f"Generated {len(created)} orders for shipment {shipment.reference_number}")
        await self._publish(now, *(self._order_created(o) for o in created))
        return created

    async def create_order(self, data: OrderCreate) -> Order:
        now = self.clock()
        async with self._hold(("container", data.container_id)):
            async with self.uow_factory() as uow:
                container = await _require(
                    uow.containers.get_for_update(data.container_id), "container", data.container_id
                )
                active = await uow.orders.get_active_by_container(container.id)
                if active is not None:
                    raise ConflictError(
                        f"Container {container.container_number} already has active order {active.order_number}",
                        details={"container_id": str(container.id), "order_id": str(active.id)},
                    )
                shipment = await _require(uow.shipments.get(container.shipment_id), "shipment", container.shipment_id)

                order = await self._new_order(uow, shipment, container, now)
                if data.type is not None:
                    order.type = OrderType(data.type)
                for field in (
                    "pickup_location_id",
                    "delivery_location_id",
                    "return_location_id",
                    "requested_pickup_date",
                    "requested_delivery_date",
                    "special_instructions",
                ):
                    value = getattr(data, field)
                    if value is not None:
                        setattr(order, field, value)

                await uow.orders.create(order)
                await uow.commit()

        logger.info(f"Created order {order.order_number} for container {container.container_number}")
        await self._publish(now, self._order_created(order))
        return order

    async def get_order(self, order_id: UUID) -> Order:
        async with self.uow_factory() as uow:
            return await _require(uow.orders.get(order_id), "order", order_id)

    async def list_orders(self, filter: Optional[OrderFilter] = None) -> tuple[list[Order], int]:
        async with self.uow_factory() as uow:
            return await uow.orders.list(filter or OrderFilter())

    async def transition_order(
        self,
        order_id: UUID,
        to_status: OrderStatus,
        reason: Optional[str] = None,
    ) -> Order:
        """
        Apply one status transition.

        Cancelling an order also cancels its active appointment and that
        appointment's pending confirmation.
        """
        now = self.clock()
        async with self._hold(("order", order_id)):
            async with self.uow_factory() as uow:
                order = await _require(uow.orders.get_for_update(order_id), "order", order_id)
                change, cancelled = await self._transition(uow, order, OrderStatus(to_status), reason, now)
                await uow.commit()

        self._cancel_confirmations(cancelled)
        logger.info(f"Order {order.order_number}: {change.old_status.value} -> {change.new_status.value}")
        await self._publish(now, *self._transition_events(order, change, cancelled))
        return order

    async def bulk_update_status(
        self,
        order_ids: Iterable[UUID],
        to_status: OrderStatus,
        reason: Optional[str] = None,
    ) -> BulkStatusResult:
        """
        Apply the same transition to many orders in one transaction.

        Each order is validated on its own; orders that are missing or
        cannot make the transition are skipped and reported.
        """
        now = self.clock()
        target = OrderStatus(to_status)
        ids = list(dict.fromkeys(order_ids))

        result = BulkStatusResult()
        applied = []

        async with self._hold(*(("order", oid) for oid in ids)):
            async with self.uow_factory() as uow:
                for order_id in ids:
                    order = await uow.orders.get_for_update(order_id)
                    if order is None:
                        result.skipped.append(
                            BulkStatusSkip(order_id=order_id, code=NotFoundError.code, message="order not found")
                        )
                        logger.warning(f"Bulk status update skipped {order_id}: not found")
                        continue
                    try:
                        change, cancelled = await self._transition(uow, order, target, reason, now)
                    except InvalidStateError as e:
                        result.skipped.append(BulkStatusSkip(order_id=order_id, code=e.code, message=e.message))
                        logger.warning(f"Bulk status update skipped {order.order_number}: {e.message}")
                        continue
                    result.updated.append(order.id)
                    applied.append((order, change, cancelled))
                await uow.commit()

        logger.info(
            f"Bulk status update to {target.value}: {len(result.updated)} updated, "
            f"{len(result.skipped)} skipped"
        )
        for _, _, cancelled in applied:
            self._cancel_confirmations(cancelled)
        await self._publish(
            now,
            *(ev for order, change, cancelled in applied for ev in self._transition_events(order, change, cancelled)),
        )
        return result

    # =========================================================================
    # Charges (read only, no locks)
    # =========================================================================

    async def calculate_per_diem(self, container_id: UUID) -> ChargeResult:
        container, shipment = await self._container_with_shipment(container_id)
        return charges.calculate_per_diem(container, shipment, self.clock(), self.schedule)

    async def calculate_demurrage(self, container_id: UUID) -> ChargeResult:
        container, shipment = await self._container_with_shipment(container_id)
        return charges.calculate_demurrage(container, shipment, self.clock(), self.schedule)

    async def calculate_container_charges(self, container_id: UUID) -> ChargeSummary:
        container, shipment = await self._container_with_shipment(container_id)
        return charges.calculate_charges(container, shipment, self.clock(), self.schedule)

    async def calculate_order_charges(self, order_id: UUID) -> tuple[Order, ChargeSummary]:
        order = await self.get_order(order_id)
        return order, await self.calculate_container_charges(order.container_id)

    # =========================================================================
    # Appointments
    # =========================================================================

    async def request_appointment(self, data: AppointmentRequest) -> TerminalAppointment:
        now = self.clock()
        async with self._hold(("order", data.order_id)):
            async with self.uow_factory() as uow:
                order = await _require(uow.orders.get_for_update(data.order_id), "order", data.order_id)
                container = await uow.containers.get(order.container_id)
                existing = await uow.appointments.get_by_order(order.id)

                appointment = await self._scheduler(uow).request(
                    order,
                    data.terminal_id,
                    AppointmentType(data.type),
                    data.requested_time,
                    existing,
                    now,
                    requested_by=data.requested_by,
                    special_instructions=data.special_instructions,
                    container=container,
                )
                await uow.appointments.create(appointment)
                await self._commit_with_confirmation(uow, appointment)

        await self._publish(now, self._appointment_event(events.APPOINTMENT_REQUESTED, appointment))
        return appointment

    async def confirm_appointment(
        self,
        appointment_id: UUID,
        confirmation_number: str,
        confirmed_by: Optional[str] = None,
    ) -> TerminalAppointment:
        return await self._confirm(appointment_id, confirmation_number, confirmed_by, require_confirmable=True)

    async def handle_terminal_confirmation(
        self,
        appointment_id: UUID,
        confirmation_number: Optional[str] = None,
    ) -> Optional[TerminalAppointment]:
        """
        Follow-up entry point: confirm on the terminal's behalf.

        A no-op when the appointment is gone or no longer REQUESTED/PENDING.
        """
        return await self._confirm(
            appointment_id,
            confirmation_number or terminal_confirmation_number(self.clock()),
            TERMINAL_SYSTEM,
            require_confirmable=False,
        )

    async def reschedule_appointment(
        self,
        appointment_id: UUID,
        new_time: datetime,
        reason: Optional[str] = None,
        rescheduled_by: Optional[str] = None,
    ) -> TerminalAppointment:
        now = self.clock()
        order_id = await self._order_id_for(appointment_id)
        async with self._hold(("order", order_id)):
            async with self.uow_factory() as uow:
                old = await _require(uow.appointments.get(appointment_id), "appointment", appointment_id)
                order = await _require(uow.orders.get_for_update(old.order_id), "order", old.order_id)
                if order.status.is_terminal:
                    raise InvalidStateError(
                        order.status,
                        AppointmentStatus.RESCHEDULED,
                        message=f"order {order.order_number} is {order.status.value} and cannot be rescheduled",
                    )
                old_task_id = old.confirmation_task_id

                new = await self._scheduler(uow).reschedule(old, new_time, reason, rescheduled_by, now)
                await uow.appointments.update(old)
                await uow.appointments.create(new)
                await self._commit_with_confirmation(uow, new)

        self.confirmations.cancel(old.id, old_task_id)
        await self._publish(
            now,
            (
                events.APPOINTMENT_RESCHEDULED,
                to_payload(
                    order_id=old.order_id,
                    old_appointment_id=old.id,
                    new_appointment_id=new.id,
                    old_time=old.requested_time,
                    new_time=new.requested_time,
                    reason=reason,
                ),
            ),
        )
        return new

    async def cancel_appointment(
        self,
        appointment_id: UUID,
        reason: str,
        cancelled_by: Optional[str] = None,
    ) -> TerminalAppointment:
        now = self.clock()
        order_id = await self._order_id_for(appointment_id)
        async with self._hold(("order", order_id)):
            async with self.uow_factory() as uow:
                appointment = await _require(uow.appointments.get(appointment_id), "appointment", appointment_id)
                task_id = appointment.confirmation_task_id
                self._scheduler(uow).cancel(appointment, reason, cancelled_by, now)
                await uow.appointments.update(appointment)
                await uow.commit()

        self.confirmations.cancel(appointment.id, task_id)
        await self._publish(now, self._appointment_event(events.APPOINTMENT_CANCELLED, appointment, reason=reason))
        return appointment

    async def record_arrival(
        self,
        appointment_id: UUID,
        arrival_time: datetime,
        gate_number: Optional[str] = None,
    ) -> TerminalAppointment:
        now = self.clock()
        order_id = await self._order_id_for(appointment_id)
        async with self._hold(("order", order_id)):
            async with self.uow_factory() as uow:
                appointment = await _require(uow.appointments.get(appointment_id), "appointment", appointment_id)
                self._scheduler(uow).record_arrival(appointment, arrival_time, gate_number, now)
                await uow.appointments.update(appointment)
                await uow.commit()

        await self._publish(
            now,
            self._appointment_event(
                events.APPOINTMENT_ARRIVAL,
                appointment,
                arrival_time=arrival_time,
                gate_number=gate_number,
                on_time=appointment.was_on_time,
            ),
        )
        return appointment

    async def complete_appointment(
        self,
        appointment_id: UUID,
        completion_time: datetime,
        gate_ticket_number: Optional[str] = None,
    ) -> TerminalAppointment:
        now = self.clock()
        order_id = await self._order_id_for(appointment_id)
        async with self._hold(("order", order_id)):
            async with self.uow_factory() as uow:
                appointment = await _require(uow.appointments.get(appointment_id), "appointment", appointment_id)
                self._scheduler(uow).complete(appointment, completion_time, gate_ticket_number, now)
                await uow.appointments.update(appointment)
                await uow.commit()

        logger.info(f"Appointment {appointment.id} completed, gate ticket {gate_ticket_number}")
        await self._publish(
            now,
            self._appointment_event(
                events.APPOINTMENT_COMPLETED,
                appointment,
                completion_time=completion_time,
                gate_ticket_number=gate_ticket_number,
            ),
        )
        return appointment

    async def get_appointment(self, appointment_id: UUID) -> TerminalAppointment:
        async with self.uow_factory() as uow:
            return await _require(uow.appointments.get(appointment_id), "appointment", appointment_id)

    async def list_order_appointments(self, order_id: UUID) -> list[TerminalAppointment]:
        async with self.uow_factory() as uow:
            await _require(uow.orders.get(order_id), "order", order_id)
            return await uow.appointments.get_by_order(order_id)

    async def upcoming_appointments(
        self,
        terminal_id: UUID,
        start: datetime,
        end: datetime,
    ) -> list[TerminalAppointment]:
        """Active appointments at a terminal whose window overlaps [start, end)."""
        if end <= start:
            raise ValidationError("end must be after start", field="end", value=end)
        async with self.uow_factory() as uow:
            booked = await uow.appointments.get_by_terminal_and_time_range(terminal_id, start, end)
        return [a for a in booked if a.status.is_active]

    async def appointment_is_missed(self, appointment_id: UUID) -> bool:
        appointment = await self.get_appointment(appointment_id)
        return AppointmentScheduler.is_missed(appointment, self.clock())

    # =========================================================================
    # Internals
    # =========================================================================

    @asynccontextmanager
    async def _hold(self, *keys: Hashable) -> AsyncIterator[None]:
        # Sorted acquisition keeps multi-key holders from deadlocking
        async with AsyncExitStack() as stack:
            for key in sorted(set(keys), key=str):
                await stack.enter_async_context(self._locks.hold(key))
            yield

    def _scheduler(self, uow: UnitOfWork) -> AppointmentScheduler:
        return AppointmentScheduler(
            self.schedule,
            gate_hours=self._gate_hours_factory(uow),
            capacity=self._capacity_factory(uow),
        )

    async def _order_id_for(self, appointment_id: UUID) -> UUID:
        async with self.uow_factory() as uow:
            appointment = await _require(uow.appointments.get(appointment_id), "appointment", appointment_id)
            return appointment.order_id

    async def _container_with_shipment(self, container_id: UUID) -> tuple[Container, Shipment]:
        async with self.uow_factory() as uow:
            container = await _require(uow.containers.get(container_id), "container", container_id)
            shipment = await _require(uow.shipments.get(container.shipment_id), "shipment", container.shipment_id)
        return container, shipment

    async def _new_order(self, uow: UnitOfWork, shipment: Shipment, container: Container, now: datetime) -> Order:
        is_import = shipment.type == ShipmentType.IMPORT
        return Order(
            id=uuid4(),
            order_number=await uow.orders.next_order_number(now),
            container_id=container.id,
            shipment_id=shipment.id,
            type=OrderType.IMPORT if is_import else OrderType.EXPORT,
            status=OrderStatus.PENDING,
            billing_status=BillingStatus.UNBILLED,
            pickup_location_id=shipment.terminal_id if is_import else shipment.shipper_id,
            delivery_location_id=shipment.consignee_id if is_import else shipment.terminal_id,
            return_location_id=shipment.empty_return_location_id,
            special_instructions=shipment.special_instructions,
            created_at=now,
            updated_at=now,
        )

    async def _transition(
        self,
        uow: UnitOfWork,
        order: Order,
        target: OrderStatus,
        reason: Optional[str],
        now: datetime,
    ) -> tuple[StatusChange, list[tuple[TerminalAppointment, Optional[str]]]]:
        change = apply_transition(order, target, reason)
        order.updated_at = now
        await uow.orders.update(order)

        cancelled = []
        if target == OrderStatus.CANCELLED:
            scheduler = self._scheduler(uow)
            for appointment in await uow.appointments.get_by_order(order.id):
                if appointment.status.is_active:
                    task_id = appointment.confirmation_task_id
                    scheduler.cancel(appointment, reason or "Order cancelled", "system", now)
                    await uow.appointments.update(appointment)
                    cancelled.append((appointment, task_id))
        return change, cancelled

    def _cancel_confirmations(self, cancelled: list[tuple[TerminalAppointment, Optional[str]]]) -> None:
        for appointment, task_id in cancelled:
            self.confirmations.cancel(appointment.id, task_id)

    async def _commit_with_confirmation(self, uow: UnitOfWork, appointment: TerminalAppointment) -> None:
        """
        Commit a new appointment, then queue its terminal confirmation.

        The follow-up must not be able to run before the appointment is
        visible, so it is queued only after the commit; its task id is
        recorded in a second, small commit. The caller still holds the
        order lock, so an in-process follow-up waits for both.
        """
        await uow.commit()
        try:
            task_id = self.confirmations.schedule(appointment.id, self.schedule.confirmation_delay_seconds)
        except Exception as e:
            logger.error(f"Failed to queue confirmation for appointment {appointment.id}: {e}")
            return
        if task_id is None:
            return
        appointment.confirmation_task_id = task_id
        await uow.appointments.update(appointment)
        await uow.commit()

    async def _confirm(
        self,
        appointment_id: UUID,
        confirmation_number: str,
        confirmed_by: Optional[str],
        require_confirmable: bool,
    ) -> Optional[TerminalAppointment]:
        now = self.clock()
        try:
            order_id = await self._order_id_for(appointment_id)
        except NotFoundError:
            if require_confirmable:
                raise
            logger.warning(f"Confirmation for unknown appointment {appointment_id} ignored")
            return None

        async with self._hold(("order", order_id)):
            async with self.uow_factory() as uow:
                appointment = await _require(uow.appointments.get(appointment_id), "appointment", appointment_id)
                if not require_confirmable and not appointment.status.is_confirmable:
                    logger.info(
                        f"Appointment {appointment_id} is {appointment.status.value}; "
                        f"terminal confirmation skipped"
                    )
                    return None
                task_id = appointment.confirmation_task_id
                self._scheduler(uow).confirm(appointment, confirmation_number, confirmed_by, now)
                await uow.appointments.update(appointment)
                await uow.commit()

        if require_confirmable:
            self.confirmations.cancel(appointment.id, task_id)
        logger.info(f"Appointment {appointment.id} confirmed: {confirmation_number}")
        await self._publish(
            now,
            self._appointment_event(
                events.APPOINTMENT_CONFIRMED,
                appointment,
                confirmation_number=confirmation_number,
                confirmed_by=confirmed_by,
            ),
        )
        return appointment

    def _order_created(self, order: Order) -> tuple[str, dict]:
        return (
            events.ORDER_CREATED,
            to_payload(
                order_id=order.id,
                order_number=order.order_number,
                container_id=order.container_id,
                shipment_id=order.shipment_id,
                type=order.type,
            ),
        )

    def _transition_events(
        self,
        order: Order,
        change: StatusChange,
        cancelled: list[tuple[TerminalAppointment, Optional[str]]],
    ) -> list[tuple[str, dict]]:
        out = [
            (
                events.ORDER_STATUS_CHANGED,
                to_payload(
                    order_id=order.id,
                    order_number=order.order_number,
                    old_status=change.old_status,
                    new_status=change.new_status,
                    reason=change.reason,
                ),
            )
        ]
        if change.new_status == OrderStatus.CANCELLED:
            out.append(
                (
                    events.ORDER_CANCELLED,
                    to_payload(order_id=order.id, order_number=order.order_number, reason=change.reason),
                )
            )
            out.extend(
                self._appointment_event(events.APPOINTMENT_CANCELLED, a, reason=a.cancellation_reason)
                for a, _ in cancelled
            )
        return out

    def _appointment_event(self, name: str, appointment: TerminalAppointment, **extra) -> tuple[str, dict]:
        return (
            name,
            to_payload(
                appointment_id=appointment.id,
                order_id=appointment.order_id,
                terminal_id=appointment.terminal_id,
                status=appointment.status,
                window_start=appointment.window_start,
                window_end=appointment.window_end,
                **extra,
            ),
        )

    async def _publish(self, now: datetime, *items: tuple[str, dict]) -> None:
        for name, payload in items:
            event = DomainEvent(name=name, payload=payload, source=self.source, occurred_at=now)
            try:
                await self.event_bus.publish(event)
            except Exception as e:
                logger.warning(f"Failed to publish {name}: {e}")


async def _require(awaitable, resource_type: str, identifier: UUID):
    entity = await awaitable
    if entity is None:
        raise NotFoundError(resource_type, identifier)
    return entity


def _build_container(shipment_id: UUID, data: ContainerCreate, now: datetime) -> Container:
    return Container(
        id=uuid4(),
        shipment_id=shipment_id,
        container_number=data.container_number,
        size=ContainerSize(data.size),
        type=ContainerType(data.type),
        seal_number=data.seal_number,
        weight_lbs=data.weight_lbs,
        commodity=data.commodity,
        is_hazmat=data.is_hazmat,
        hazmat_class=data.hazmat_class,
        un_number=data.un_number,
        is_overweight=data.is_overweight,
        is_reefer=data.is_reefer,
        reefer_temp_setpoint=data.reefer_temp_setpoint,
        customs_status=CustomsStatus(data.customs_status),
        customs_hold_type=data.customs_hold_type,
        terminal_available_date=data.terminal_available_date,
        current_state=ContainerState(data.current_state),
        current_location_type=LocationType(data.current_location_type),
        created_at=now,
        updated_at=now,
    )


def build_coordinator(
    settings: Settings,
    uow_factory: Optional[UnitOfWorkFactory] = None,
    event_bus: Optional[EventBus] = None,
    confirmations: Optional[ConfirmationScheduler] = None,
    clock: Optional[Clock] = None,
) -> LifecycleCoordinator:
    """Wire a coordinator from application settings."""
    if uow_factory is None:
        from drayage.repositories.sql import SqlUnitOfWork
        uow_factory = SqlUnitOfWork

    if confirmations is None:
        confirmations = (
            CeleryConfirmationScheduler()
            if settings.use_celery_confirmations
            else AsyncioConfirmationScheduler()
        )

    return LifecycleCoordinator(
        uow_factory=uow_factory,
        event_bus=event_bus,
        schedule=build_rate_schedule(settings),
        confirmations=confirmations,
        clock=clock,
        source=settings.service_name,
    )
