"""
Order Pydantic schemas: creation, status transitions, bulk updates and filtering.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator

from drayage.models.enums import OrderType, OrderStatus, BillingStatus
from drayage.schemas.base import BaseSchema, PaginatedResponse, as_utc


class OrderCreate(BaseSchema):
    """
    Schema for creating a single order.

    type defaults to the owning shipment's type (IMPORT or EXPORT).
    """
    container_id: UUID
    type: Optional[OrderType] = None
    pickup_location_id: Optional[UUID] = None
    delivery_location_id: Optional[UUID] = None
    return_location_id: Optional[UUID] = None
    requested_pickup_date: Optional[datetime] = None
    requested_delivery_date: Optional[datetime] = None
    special_instructions: Optional[str] = None

    @field_validator("requested_pickup_date", "requested_delivery_date")
    @classmethod
    def normalize_dates(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)


class OrderTransitionRequest(BaseSchema):
    """Request to move an order to a new status."""
    status: OrderStatus
    reason: Optional[str] = Field(None, max_length=500)


class BulkStatusRequest(BaseSchema):
    """Apply one status change to many orders."""
    order_ids: list[UUID] = Field(..., min_length=1, max_length=500)
    status: OrderStatus
    reason: Optional[str] = Field(None, max_length=500)


class BulkStatusSkip(BaseSchema):
    """An order left unchanged by a bulk update, with the reason."""
    order_id: UUID
    code: str
    message: str


class BulkStatusResult(BaseSchema):
    updated: list[UUID] = Field(default_factory=list)
    skipped: list[BulkStatusSkip] = Field(default_factory=list)

    @property
    def updated_count(self) -> int:
        return len(self.updated)


class OrderFilter(BaseSchema):
    """
    Query filter for listing orders.

    All criteria are ANDed; status matches any of the given values.
    """
    status: Optional[list[OrderStatus]] = None
    type: Optional[OrderType] = None
    billing_status: Optional[BillingStatus] = None
    shipment_id: Optional[UUID] = None
    container_id: Optional[UUID] = None
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=50, ge=1, le=500)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class OrderResponse(BaseSchema):
    """Schema for order response."""
    id: UUID
    order_number: str
    container_id: UUID
    shipment_id: UUID
    type: OrderType
    status: OrderStatus
    status_reason: Optional[str]
    billing_status: BillingStatus
    pickup_location_id: Optional[UUID]
    delivery_location_id: Optional[UUID]
    return_location_id: Optional[UUID]
    requested_pickup_date: Optional[datetime]
    requested_delivery_date: Optional[datetime]
    special_instructions: Optional[str]
    created_at: datetime
    updated_at: datetime


OrderListResponse = PaginatedResponse[OrderResponse]
