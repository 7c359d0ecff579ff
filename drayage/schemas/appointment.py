"""
Terminal appointment Pydantic schemas.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator

from drayage.models.enums import AppointmentType, AppointmentStatus
from drayage.schemas.base import BaseSchema, as_utc


class AppointmentRequest(BaseSchema):
    """Book a gate appointment for an order."""
    order_id: UUID
    terminal_id: UUID
    type: AppointmentType = AppointmentType.PICKUP
    requested_time: datetime
    requested_by: Optional[str] = Field(None, max_length=100)
    special_instructions: Optional[str] = None

    @field_validator("requested_time")
    @classmethod
    def normalize_time(cls, v: datetime) -> datetime:
        return as_utc(v)


class AppointmentConfirm(BaseSchema):
    confirmation_number: str = Field(..., min_length=1, max_length=50)
    confirmed_by: Optional[str] = Field(None, max_length=100)


class AppointmentReschedule(BaseSchema):
    new_time: datetime
    reason: Optional[str] = Field(None, max_length=500)
    rescheduled_by: Optional[str] = Field(None, max_length=100)

    @field_validator("new_time")
    @classmethod
    def normalize_time(cls, v: datetime) -> datetime:
        return as_utc(v)


class AppointmentCancel(BaseSchema):
    reason: str = Field(..., min_length=1, max_length=500)
    cancelled_by: Optional[str] = Field(None, max_length=100)


class ArrivalRecord(BaseSchema):
    """Truck arrival at the gate."""
    arrival_time: datetime
    gate_number: Optional[str] = Field(None, max_length=20)

    @field_validator("arrival_time")
    @classmethod
    def normalize_time(cls, v: datetime) -> datetime:
        return as_utc(v)


class AppointmentComplete(BaseSchema):
    completion_time: datetime
    gate_ticket_number: Optional[str] = Field(None, max_length=50)

    @field_validator("completion_time")
    @classmethod
    def normalize_time(cls, v: datetime) -> datetime:
        return as_utc(v)


class AppointmentResponse(BaseSchema):
    """Schema for appointment response."""
    id: UUID
    order_id: UUID
    terminal_id: UUID
    type: AppointmentType
    status: AppointmentStatus
    container_id: Optional[UUID]
    container_number: Optional[str]

    requested_time: datetime
    window_start: datetime
    window_end: datetime

    confirmed_time: Optional[datetime]
    confirmation_number: Optional[str]
    confirmed_by: Optional[str]

    gate_number: Optional[str]
    actual_arrival_time: Optional[datetime]
    was_on_time: Optional[bool]
    actual_completion_time: Optional[datetime]
    gate_ticket_number: Optional[str]

    cancellation_reason: Optional[str]
    rescheduled_from: Optional[UUID]
    requested_by: Optional[str]
    special_instructions: Optional[str]

    created_at: datetime
    updated_at: datetime


class AppointmentListResponse(BaseSchema):
    items: list[AppointmentResponse]
    total: int
