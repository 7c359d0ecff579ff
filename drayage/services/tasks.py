"""
Celery tasks for the drayage engine.

Contains the terminal confirmation follow-up queued by
CeleryConfirmationScheduler when an appointment is requested or
rescheduled.
"""
import asyncio
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from drayage.core.celery_app import celery_app
from drayage.core.config import get_settings
from drayage.repositories.sql import SqlUnitOfWork
from drayage.services.confirmation import NullConfirmationScheduler
from drayage.services.lifecycle import build_coordinator

logger = logging.getLogger(__name__)


@celery_app.task(
    bind=True,
    name="drayage.services.tasks.confirm_appointment",
    queue="appointments",
    max_retries=3,
    default_retry_delay=30,
)
def confirm_appointment(self, appointment_id: str, confirmation_number: Optional[str] = None) -> dict:
    """
    Confirm a REQUESTED appointment on the terminal's behalf.

    Skips (and reports "skipped") when the appointment was confirmed,
    cancelled or rescheduled in the meantime.

    Args:
        appointment_id: UUID of the appointment
        confirmation_number: Terminal-issued number; generated when omitted

    Returns:
        Result summary dict
    """
    logger.info(f"Running terminal confirmation for appointment {appointment_id}")
    try:
        appointment = asyncio.run(_confirm(UUID(appointment_id), confirmation_number))
    except Exception as e:
        logger.error(f"Terminal confirmation failed for appointment {appointment_id}: {e}")
        raise self.retry(exc=e)

    if appointment is None:
        return {"appointment_id": appointment_id, "status": "skipped"}
    return {
        "appointment_id": appointment_id,
        "status": appointment.status.value,
        "confirmation_number": appointment.confirmation_number,
    }


async def _confirm(appointment_id: UUID, confirmation_number: Optional[str]):
    # Each task run owns its event loop, so it needs its own engine too
    settings = get_settings()
    engine = create_async_engine(settings.database_url, pool_pre_ping=True)
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        coordinator = build_coordinator(
            settings,
            uow_factory=lambda: SqlUnitOfWork(session_maker),
            confirmations=NullConfirmationScheduler(),
        )
        return await coordinator.handle_terminal_confirmation(appointment_id, confirmation_number)
    finally:
        await engine.dispose()
