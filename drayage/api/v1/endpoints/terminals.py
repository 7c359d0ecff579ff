"""
Terminal API endpoints.
"""
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from drayage.core.dependencies import get_coordinator
from drayage.schemas.appointment import AppointmentListResponse, AppointmentResponse
from drayage.schemas.base import as_utc
from drayage.services.lifecycle import LifecycleCoordinator

router = APIRouter()


@router.get("/{terminal_id}/appointments", response_model=AppointmentListResponse)
async def upcoming_appointments(
    terminal_id: UUID,
    start: datetime = Query(..., description="Window start (inclusive)"),
    end: datetime = Query(..., description="Window end (exclusive)"),
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    """Active appointments at a terminal overlapping [start, end)."""
    appointments = await coordinator.upcoming_appointments(terminal_id, as_utc(start), as_utc(end))
    return AppointmentListResponse(
        items=[AppointmentResponse.model_validate(a) for a in appointments],
        total=len(appointments),
    )
