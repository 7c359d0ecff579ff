"""
Shipment API endpoints.
"""
from uuid import UUID

from fastapi import APIRouter, Depends, status

from drayage.core.dependencies import get_coordinator
from drayage.schemas.order import OrderResponse
from drayage.schemas.shipment import (
    ContainerBatchCreate,
    ContainerResponse,
    ShipmentCreate,
    ShipmentDetailResponse,
    ShipmentResponse,
)
from drayage.services.lifecycle import LifecycleCoordinator

router = APIRouter()


async def _detail(coordinator: LifecycleCoordinator, shipment_id: UUID) -> ShipmentDetailResponse:
    shipment, containers = await coordinator.get_shipment(shipment_id)
    now = coordinator.clock()
    return ShipmentDetailResponse(
        **ShipmentResponse.model_validate(shipment).model_dump(),
        containers=[ContainerResponse.model_validate(c) for c in containers],
        days_until_lfd=shipment.days_until_lfd(now),
        lfd_warning_level=shipment.lfd_warning_level(now),
    )


@router.post("", response_model=ShipmentDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_shipment(
    data: ShipmentCreate,
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    """
    Create a shipment with its containers.

    Imports must carry last_free_day, vessel_name and voyage_number;
    exports must carry port_cutoff and doc_cutoff.
    """
    shipment = await coordinator.create_shipment(data)
    return await _detail(coordinator, shipment.id)


@router.get("/{shipment_id}", response_model=ShipmentDetailResponse)
async def get_shipment(
    shipment_id: UUID,
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    """Get a shipment with its containers and LFD urgency."""
    return await _detail(coordinator, shipment_id)


@router.post(
    "/{shipment_id}/containers",
    response_model=list[ContainerResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_containers(
    shipment_id: UUID,
    data: ContainerBatchCreate,
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    containers = await coordinator.add_containers(shipment_id, data.containers)
    return [ContainerResponse.model_validate(c) for c in containers]


@router.post(
    "/{shipment_id}/orders",
    response_model=list[OrderResponse],
    status_code=status.HTTP_201_CREATED,
)
async def generate_orders(
    shipment_id: UUID,
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    """
    Create one PENDING order per container without an active order.

    Returns only the orders created by this call.
    """
    orders = await coordinator.generate_orders(shipment_id)
    return [OrderResponse.model_validate(o) for o in orders]
