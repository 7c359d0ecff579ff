"""Tests for terminal confirmation follow-ups (asyncio and Celery)."""
import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest

from drayage.models.enums import AppointmentStatus
from drayage.repositories.memory import MemoryUnitOfWork
from drayage.schemas.appointment import AppointmentRequest
from drayage.services.confirmation import (
    AsyncioConfirmationScheduler,
    CeleryConfirmationScheduler,
    terminal_confirmation_number,
)
from drayage.services.lifecycle import LifecycleCoordinator
from drayage.services.rates import RateSchedule

DELAY = 0.01


@pytest.fixture
def confirmations():
    return AsyncioConfirmationScheduler()


@pytest.fixture
async def auto_coordinator(uow_factory, event_bus, clock, confirmations):
    coordinator = LifecycleCoordinator(
        uow_factory=uow_factory,
        event_bus=event_bus,
        schedule=RateSchedule(confirmation_delay_seconds=DELAY),
        confirmations=confirmations,
        clock=clock,
    )
    yield coordinator
    await confirmations.shutdown()


@pytest.fixture
async def order(auto_coordinator, make_shipment_data):
    shipment = await auto_coordinator.create_shipment(make_shipment_data())
    [order] = await auto_coordinator.generate_orders(shipment.id)
    return order


def _request(order, clock, hours=4):
    return AppointmentRequest(
        order_id=order.id,
        terminal_id=uuid4(),
        requested_time=clock.now + timedelta(hours=hours),
    )


async def _settle():
    await asyncio.sleep(DELAY * 5)


class SlowCommitUnitOfWork(MemoryUnitOfWork):
    """Commit that takes longer than the confirmation delay."""

    async def commit(self) -> None:
        await asyncio.sleep(DELAY * 5)
        await super().commit()


class TestConfirmationNumber:

    def test_format(self):
        now = datetime(2026, 10, 19, 14, 5, 9, tzinfo=timezone.utc)
        assert terminal_confirmation_number(now) == "APPT-20261019-140509"


class TestAsyncioFollowUp:

    async def test_confirms_after_delay(self, auto_coordinator, order, clock, confirmations):
        appt = await auto_coordinator.request_appointment(_request(order, clock))
        assert appt.confirmation_task_id is not None
        assert confirmations.pending == 1

        await _settle()

        stored = await auto_coordinator.get_appointment(appt.id)
        assert stored.status == AppointmentStatus.CONFIRMED
        assert stored.confirmed_by == "terminal-system"
        assert stored.confirmation_number.startswith("APPT-")
        assert confirmations.pending == 0

    async def test_manual_confirm_cancels_follow_up(self, auto_coordinator, order, clock, confirmations, event_bus):
        appt = await auto_coordinator.request_appointment(_request(order, clock))
        await auto_coordinator.confirm_appointment(appt.id, "TRM-42", "gate clerk")
        assert confirmations.pending == 0

        await _settle()

        stored = await auto_coordinator.get_appointment(appt.id)
        assert stored.confirmation_number == "TRM-42"
        assert len(event_bus.named("appointment.confirmed")) == 1

    async def test_cancel_stops_follow_up(self, auto_coordinator, order, clock, confirmations):
        appt = await auto_coordinator.request_appointment(_request(order, clock))
        await auto_coordinator.cancel_appointment(appt.id, "no driver")
        await _settle()
        stored = await auto_coordinator.get_appointment(appt.id)
        assert stored.status == AppointmentStatus.CANCELLED

    async def test_reschedule_moves_follow_up(self, auto_coordinator, order, clock, confirmations):
        old = await auto_coordinator.request_appointment(_request(order, clock))
        new = await auto_coordinator.reschedule_appointment(old.id, clock.now + timedelta(hours=6), "late")
        assert confirmations.pending == 1

        await _settle()

        assert (await auto_coordinator.get_appointment(old.id)).status == AppointmentStatus.RESCHEDULED
        assert (await auto_coordinator.get_appointment(new.id)).status == AppointmentStatus.CONFIRMED

    async def test_order_cancellation_stops_follow_up(self, auto_coordinator, order, clock, confirmations):
        appt = await auto_coordinator.request_appointment(_request(order, clock))
        await auto_coordinator.transition_order(order.id, "CANCELLED", "customer cancelled")
        assert confirmations.pending == 0
        await _settle()
        assert (await auto_coordinator.get_appointment(appt.id)).status == AppointmentStatus.CANCELLED

    async def test_follow_up_waits_for_slow_commit(self, memory_store, event_bus, clock, confirmations, make_shipment_data):
        coordinator = LifecycleCoordinator(
            uow_factory=lambda: SlowCommitUnitOfWork(memory_store),
            event_bus=event_bus,
            schedule=RateSchedule(confirmation_delay_seconds=DELAY),
            confirmations=confirmations,
            clock=clock,
        )
        shipment = await coordinator.create_shipment(make_shipment_data())
        [order] = await coordinator.generate_orders(shipment.id)

        appt = await coordinator.request_appointment(_request(order, clock))
        await asyncio.sleep(DELAY * 30)

        stored = await coordinator.get_appointment(appt.id)
        assert stored.status == AppointmentStatus.CONFIRMED
        assert stored.confirmation_task_id == f"confirm-{appt.id}"
        await confirmations.shutdown()

    async def test_failed_commit_queues_nothing(self, memory_store, auto_coordinator, order, clock, confirmations):

        class FailingCommit(MemoryUnitOfWork):
            async def commit(self) -> None:
                raise RuntimeError("database went away")

        auto_coordinator.uow_factory = lambda: FailingCommit(memory_store)
        with pytest.raises(RuntimeError):
            await auto_coordinator.request_appointment(_request(order, clock))
        assert confirmations.pending == 0

    async def test_handler_errors_are_logged(self, caplog):
        handler = AsyncMock(side_effect=RuntimeError("terminal API down"))
        scheduler = AsyncioConfirmationScheduler(handler)
        appointment_id = uuid4()
        scheduler.schedule(appointment_id, 0)
        await asyncio.sleep(0.01)
        handler.assert_awaited_once()
        assert "terminal API down" in caplog.text
        assert scheduler.pending == 0

    async def test_shutdown_cancels_pending(self):
        handler = AsyncMock()
        scheduler = AsyncioConfirmationScheduler(handler)
        scheduler.schedule(uuid4(), 60)
        await scheduler.shutdown()
        assert scheduler.pending == 0
        handler.assert_not_awaited()


class TestCeleryFollowUp:

    def test_schedule_queues_task(self):
        appointment_id = uuid4()
        with patch("drayage.services.tasks.confirm_appointment.apply_async") as apply_async:
            apply_async.return_value = MagicMock(id="task-123")
            task_id = CeleryConfirmationScheduler().schedule(appointment_id, 5.0)
        assert task_id == "task-123"
        apply_async.assert_called_once_with(args=[str(appointment_id)], countdown=5.0)

    def test_cancel_revokes_task(self):
        with patch("drayage.core.celery_app.celery_app.control.revoke") as revoke:
            CeleryConfirmationScheduler().cancel(uuid4(), "task-123")
        revoke.assert_called_once_with("task-123")

    def test_cancel_without_task_id_is_noop(self):
        with patch("drayage.core.celery_app.celery_app.control.revoke") as revoke:
            CeleryConfirmationScheduler().cancel(uuid4(), None)
        revoke.assert_not_called()

    def test_task_reports_confirmation(self):
        from drayage.services.tasks import confirm_appointment

        appointment = MagicMock(status=AppointmentStatus.CONFIRMED, confirmation_number="APPT-1")
        appointment_id = str(uuid4())
        with patch("drayage.services.tasks._confirm", AsyncMock(return_value=appointment)):
            result = confirm_appointment.apply(args=[appointment_id]).get()
        assert result == {
            "appointment_id": appointment_id,
            "status": "CONFIRMED",
            "confirmation_number": "APPT-1",
        }

    def test_task_skips_when_nothing_to_confirm(self):
        from drayage.services.tasks import confirm_appointment

        appointment_id = str(uuid4())
        with patch("drayage.services.tasks._confirm", AsyncMock(return_value=None)):
            result = confirm_appointment.apply(args=[appointment_id]).get()
        assert result == {"appointment_id": appointment_id, "status": "skipped"}

    async def test_task_queued_after_appointment_is_committed(self, memory_store, uow_factory, event_bus, clock, make_shipment_data):
        coordinator = LifecycleCoordinator(
            uow_factory=uow_factory,
            event_bus=event_bus,
            confirmations=CeleryConfirmationScheduler(),
            clock=clock,
        )
        shipment = await coordinator.create_shipment(make_shipment_data())
        [order] = await coordinator.generate_orders(shipment.id)

        committed_when_queued = []

        def queue(args, countdown):
            committed_when_queued.append(args[0] in {str(k) for k in memory_store.tables["appointments"]})
            return MagicMock(id="task-9")

        with patch("drayage.services.tasks.confirm_appointment.apply_async", side_effect=queue):
            appt = await coordinator.request_appointment(_request(order, clock))

        assert committed_when_queued == [True]
        stored = await coordinator.get_appointment(appt.id)
        assert stored.confirmation_task_id == "task-9"

    async def test_queue_failure_keeps_appointment(self, uow_factory, event_bus, clock, make_shipment_data, caplog):
        coordinator = LifecycleCoordinator(
            uow_factory=uow_factory,
            event_bus=event_bus,
            confirmations=CeleryConfirmationScheduler(),
            clock=clock,
        )
        shipment = await coordinator.create_shipment(make_shipment_data())
        [order] = await coordinator.generate_orders(shipment.id)

        with patch(
            "drayage.services.tasks.confirm_appointment.apply_async",
            side_effect=ConnectionError("broker down"),
        ):
            appt = await coordinator.request_appointment(_request(order, clock))

        stored = await coordinator.get_appointment(appt.id)
        assert stored.status == AppointmentStatus.REQUESTED
        assert stored.confirmation_task_id is None
        assert "broker down" in caplog.text
