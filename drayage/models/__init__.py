"""
SQLAlchemy ORM models for the drayage lifecycle engine.

This module exports all domain models and enums.
"""

# Enums
from drayage.models.enums import (
    ShipmentType,
    ShipmentStatus,
    ContainerSize,
    ContainerType,
    ContainerState,
    CustomsStatus,
    LocationType,
    OrderType,
    OrderStatus,
    BillingStatus,
    AppointmentType,
    AppointmentStatus,
    ChargeKind,
    LFDWarningLevel,
)

# Base
from drayage.models.base import BaseModel, TimestampMixin, UUIDPrimaryKeyMixin

# Domain Models
from drayage.models.shipment import Shipment
from drayage.models.container import Container
from drayage.models.order import Order
from drayage.models.appointment import TerminalAppointment
from drayage.models.terminal import Terminal, TerminalGateHours

__all__ = [
    # Enums
    "ShipmentType",
    "ShipmentStatus",
    "ContainerSize",
    "ContainerType",
    "ContainerState",
    "CustomsStatus",
    "LocationType",
    "OrderType",
    "OrderStatus",
    "BillingStatus",
    "AppointmentType",
    "AppointmentStatus",
    "ChargeKind",
    "LFDWarningLevel",
    # Base
    "BaseModel",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    # Domain Models
    "Shipment",
    "Container",
    "Order",
    "TerminalAppointment",
    "Terminal",
    "TerminalGateHours",
]
