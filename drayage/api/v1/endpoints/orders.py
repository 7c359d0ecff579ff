"""
Order API endpoints: lookup, status transitions and charges.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from drayage.core.dependencies import get_coordinator
from drayage.models.enums import BillingStatus, OrderStatus, OrderType
from drayage.schemas.appointment import AppointmentListResponse, AppointmentResponse
from drayage.schemas.charges import ChargeSummaryResponse, OrderChargesResponse
from drayage.schemas.order import (
    BulkStatusRequest,
    BulkStatusResult,
    OrderCreate,
    OrderFilter,
    OrderListResponse,
    OrderResponse,
    OrderTransitionRequest,
)
from drayage.services.lifecycle import LifecycleCoordinator

router = APIRouter()


@router.get("", response_model=OrderListResponse)
async def list_orders(
    status: Optional[list[OrderStatus]] = Query(None),
    type: Optional[OrderType] = None,
    billing_status: Optional[BillingStatus] = None,
    shipment_id: Optional[UUID] = None,
    container_id: Optional[UUID] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=500),
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    """
    List orders with optional filtering.

    - **status**: Repeat to match any of several statuses
    - **shipment_id** / **container_id**: Restrict to one shipment or container
    """
    filter = OrderFilter(
        status=status,
        type=type,
        billing_status=billing_status,
        shipment_id=shipment_id,
        container_id=container_id,
        page=page,
        page_size=page_size,
    )
    orders, total = await coordinator.list_orders(filter)
    return OrderListResponse.create(
        items=[OrderResponse.model_validate(o) for o in orders],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    data: OrderCreate,
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    """Create an order for a container that has no active order."""
    order = await coordinator.create_order(data)
    return OrderResponse.model_validate(order)


@router.post("/bulk-status", response_model=BulkStatusResult)
async def bulk_update_status(
    data: BulkStatusRequest,
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    """
    Move many orders to one status.

    Orders that cannot make the transition are skipped and listed with
    the reason; the rest are updated together.
    """
    return await coordinator.bulk_update_status(data.order_ids, data.status, data.reason)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: UUID,
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    order = await coordinator.get_order(order_id)
    return OrderResponse.model_validate(order)


@router.post("/{order_id}/transitions", response_model=OrderResponse)
async def transition_order(
    order_id: UUID,
    data: OrderTransitionRequest,
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    """
    Apply a status transition.

    Illegal transitions return 409 with the allowed targets in details.
    """
    order = await coordinator.transition_order(order_id, data.status, data.reason)
    return OrderResponse.model_validate(order)


@router.get("/{order_id}/charges", response_model=OrderChargesResponse)
async def get_order_charges(
    order_id: UUID,
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    """Current per-diem and demurrage exposure of the order's container."""
    order, summary = await coordinator.calculate_order_charges(order_id)
    return OrderChargesResponse(
        **ChargeSummaryResponse.model_validate(summary).model_dump(),
        order_id=order.id,
        order_number=order.order_number,
    )


@router.get("/{order_id}/appointments", response_model=AppointmentListResponse)
async def list_order_appointments(
    order_id: UUID,
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    """All appointments of an order, including the reschedule chain."""
    appointments = await coordinator.list_order_appointments(order_id)
    return AppointmentListResponse(
        items=[AppointmentResponse.model_validate(a) for a in appointments],
        total=len(appointments),
    )
