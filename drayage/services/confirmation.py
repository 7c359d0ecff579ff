"""
Out-of-band terminal confirmation follow-up.

After an appointment is requested, a follow-up fires once the configured
delay has passed and asks the coordinator to confirm the appointment with
a terminal-issued number. Follow-ups are cancelled when the appointment
is confirmed, cancelled or rescheduled first. The handler itself re-reads
the appointment, so a follow-up that slips past cancellation is a no-op.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional
from uuid import UUID

logger = logging.getLogger(__name__)

TERMINAL_SYSTEM = "terminal-system"

ConfirmationHandler = Callable[[UUID, str], Awaitable[object]]


def terminal_confirmation_number(now: Optional[datetime] = None) -> str:
    """Confirmation number in the terminal's APPT-YYYYMMDD-HHMMSS format."""
    now = now or datetime.now(timezone.utc)
    return f"APPT-{now.strftime('%Y%m%d-%H%M%S')}"


class ConfirmationScheduler(ABC):

    def bind(self, handler: ConfirmationHandler) -> None:
        """Attach the coordinator callback. Only in-process schedulers need it."""

    @abstractmethod
    def schedule(self, appointment_id: UUID, delay_seconds: float) -> Optional[str]:
        """Arrange a follow-up and return its task handle."""

    @abstractmethod
    def cancel(self, appointment_id: UUID, task_id: Optional[str] = None) -> None: ...


class NullConfirmationScheduler(ConfirmationScheduler):
    """Never confirms; appointments stay REQUESTED until confirmed by hand."""

    def schedule(self, appointment_id: UUID, delay_seconds: float) -> Optional[str]:
        return None

    def cancel(self, appointment_id: UUID, task_id: Optional[str] = None) -> None:
        return None


class AsyncioConfirmationScheduler(ConfirmationScheduler):
    """One cancellable asyncio task per appointment, in the current event loop."""

    def __init__(self, handler: Optional[ConfirmationHandler] = None):
        self._handler = handler
        self._tasks: dict[UUID, asyncio.Task] = {}

    def bind(self, handler: ConfirmationHandler) -> None:
        self._handler = handler

    def schedule(self, appointment_id: UUID, delay_seconds: float) -> Optional[str]:
        self.cancel(appointment_id)
        task = asyncio.get_running_loop().create_task(
            self._run(appointment_id, delay_seconds),
            name=f"confirm-{appointment_id}",
        )
        self._tasks[appointment_id] = task
        return task.get_name()

    def cancel(self, appointment_id: UUID, task_id: Optional[str] = None) -> None:
        task = self._tasks.pop(appointment_id, None)
        if task is None or task.done():
            return
        # A follow-up confirming its own appointment must not cancel itself
        if task is not asyncio.current_task():
            task.cancel()

    @property
    def pending(self) -> int:
        return sum(1 for t in self._tasks.values() if not t.done())

    async def shutdown(self) -> None:
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def _run(self, appointment_id: UUID, delay_seconds: float) -> None:
        await asyncio.sleep(delay_seconds)
        if self._handler is None:
            logger.warning(f"No confirmation handler bound; appointment {appointment_id} left unconfirmed")
            return
        try:
            await self._handler(appointment_id, terminal_confirmation_number())
        except Exception as e:
            logger.error(f"Terminal confirmation failed for appointment {appointment_id}: {e}")
        finally:
            if self._tasks.get(appointment_id) is asyncio.current_task():
                del self._tasks[appointment_id]


class CeleryConfirmationScheduler(ConfirmationScheduler):
    """Runs the follow-up as the confirm_appointment Celery task."""

    def schedule(self, appointment_id: UUID, delay_seconds: float) -> Optional[str]:
        from drayage.services.tasks import confirm_appointment

        result = confirm_appointment.apply_async(
            args=[str(appointment_id)],
            countdown=delay_seconds,
        )
        logger.info(f"Queued confirmation task {result.id} for appointment {appointment_id}")
        return result.id

    def cancel(self, appointment_id: UUID, task_id: Optional[str] = None) -> None:
        if task_id is None:
            return
        from drayage.core.celery_app import celery_app

        celery_app.control.revoke(task_id)
        logger.info(f"Revoked confirmation task {task_id} for appointment {appointment_id}")
