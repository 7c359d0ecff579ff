"""
Terminal appointment API endpoints.
"""
from uuid import UUID

from fastapi import APIRouter, Depends, status

from drayage.core.dependencies import get_coordinator
from drayage.schemas.appointment import (
    AppointmentCancel,
    AppointmentComplete,
    AppointmentConfirm,
    AppointmentRequest,
    AppointmentReschedule,
    AppointmentResponse,
    ArrivalRecord,
)
from drayage.services.lifecycle import LifecycleCoordinator

router = APIRouter()


@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def request_appointment(
    data: AppointmentRequest,
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    """
    Request a terminal appointment for an order.

    The appointment starts REQUESTED; the terminal's confirmation arrives
    out of band.
    """
    appointment = await coordinator.request_appointment(data)
    return AppointmentResponse.model_validate(appointment)


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: UUID,
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    appointment = await coordinator.get_appointment(appointment_id)
    return AppointmentResponse.model_validate(appointment)


@router.get("/{appointment_id}/missed")
async def appointment_is_missed(
    appointment_id: UUID,
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    return {
        "appointment_id": str(appointment_id),
        "is_missed": await coordinator.appointment_is_missed(appointment_id),
    }


@router.post("/{appointment_id}/confirm", response_model=AppointmentResponse)
async def confirm_appointment(
    appointment_id: UUID,
    data: AppointmentConfirm,
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    appointment = await coordinator.confirm_appointment(
        appointment_id, data.confirmation_number, data.confirmed_by
    )
    return AppointmentResponse.model_validate(appointment)


@router.post(
    "/{appointment_id}/reschedule",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def reschedule_appointment(
    appointment_id: UUID,
    data: AppointmentReschedule,
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    """Returns the new appointment; the old one is marked RESCHEDULED."""
    appointment = await coordinator.reschedule_appointment(
        appointment_id, data.new_time, data.reason, data.rescheduled_by
    )
    return AppointmentResponse.model_validate(appointment)


@router.post("/{appointment_id}/cancel", response_model=AppointmentResponse)
async def cancel_appointment(
    appointment_id: UUID,
    data: AppointmentCancel,
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    appointment = await coordinator.cancel_appointment(appointment_id, data.reason, data.cancelled_by)
    return AppointmentResponse.model_validate(appointment)


@router.post("/{appointment_id}/arrival", response_model=AppointmentResponse)
async def record_arrival(
    appointment_id: UUID,
    data: ArrivalRecord,
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    appointment = await coordinator.record_arrival(appointment_id, data.arrival_time, data.gate_number)
    return AppointmentResponse.model_validate(appointment)


@router.post("/{appointment_id}/complete", response_model=AppointmentResponse)
async def complete_appointment(
    appointment_id: UUID,
    data: AppointmentComplete,
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    appointment = await coordinator.complete_appointment(
        appointment_id, data.completion_time, data.gate_ticket_number
    )
    return AppointmentResponse.model_validate(appointment)
