"""
Container API endpoints.
"""
from uuid import UUID

from fastapi import APIRouter, Body, Depends

from drayage.core.dependencies import get_coordinator
from drayage.schemas.charges import ChargeSummaryResponse
from drayage.schemas.shipment import ContainerAvailability
from drayage.services.lifecycle import LifecycleCoordinator

router = APIRouter()


@router.get("/{container_id}/charges", response_model=ChargeSummaryResponse)
async def get_container_charges(
    container_id: UUID,
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    """
    Per-diem and demurrage accrued as of now, with tier breakdown.

    Exports and containers not yet past LFD report zero.
    """
    summary = await coordinator.calculate_container_charges(container_id)
    return ChargeSummaryResponse.model_validate(summary)


@router.post("/availability", response_model=list[ContainerAvailability])
async def check_availability(
    container_ids: list[UUID] = Body(..., min_length=1, max_length=500),
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    """Whether each container can be picked up, with the reason when not."""
    return await coordinator.check_container_availability(container_ids)
