"""
Pydantic schemas for API request/response validation.
"""

from drayage.schemas.base import BaseSchema, PaginatedResponse
from drayage.schemas.shipment import (
    ContainerCreate,
    ContainerResponse,
    ContainerAvailability,
    ContainerBatchCreate,
    ShipmentCreate,
    ShipmentResponse,
    ShipmentDetailResponse,
)
from drayage.schemas.order import (
    OrderCreate,
    OrderTransitionRequest,
    BulkStatusRequest,
    BulkStatusSkip,
    BulkStatusResult,
    OrderFilter,
    OrderResponse,
    OrderListResponse,
)
from drayage.schemas.appointment import (
    AppointmentRequest,
    AppointmentConfirm,
    AppointmentReschedule,
    AppointmentCancel,
    ArrivalRecord,
    AppointmentComplete,
    AppointmentResponse,
    AppointmentListResponse,
)
from drayage.schemas.charges import (
    TierChargeResponse,
    ChargeResultResponse,
    ChargeSummaryResponse,
    OrderChargesResponse,
)

__all__ = [
    # Base
    "BaseSchema",
    "PaginatedResponse",
    # Shipment
    "ContainerCreate",
    "ContainerResponse",
    "ContainerAvailability",
    "ContainerBatchCreate",
    "ShipmentCreate",
    "ShipmentResponse",
    "ShipmentDetailResponse",
    # Order
    "OrderCreate",
    "OrderTransitionRequest",
    "BulkStatusRequest",
    "BulkStatusSkip",
    "BulkStatusResult",
    "OrderFilter",
    "OrderResponse",
    "OrderListResponse",
    # Appointment
    "AppointmentRequest",
    "AppointmentConfirm",
    "AppointmentReschedule",
    "AppointmentCancel",
    "ArrivalRecord",
    "AppointmentComplete",
    "AppointmentResponse",
    "AppointmentListResponse",
    # Charges
    "TierChargeResponse",
    "ChargeResultResponse",
    "ChargeSummaryResponse",
    "OrderChargesResponse",
]
