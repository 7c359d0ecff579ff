"""
Enum type definitions for the drayage engine.

These enums map directly to PostgreSQL ENUM types created by the
baseline migration.
"""
from enum import Enum


class ShipmentType(str, Enum):
    """Import (BOL) or export (booking) movement."""
    IMPORT = "IMPORT"
    EXPORT = "EXPORT"


class ShipmentStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class ContainerSize(str, Enum):
    """
    Supported container lengths in feet.

    Closed set: rate tables are keyed by these values, so a size outside
    this enum can never be priced.
    """
    FT20 = "20"
    FT40 = "40"
    FT45 = "45"


class ContainerType(str, Enum):
    DRY = "DRY"
    HIGH_CUBE = "HIGH_CUBE"
    REEFER = "REEFER"
    TANK = "TANK"
    FLAT_RACK = "FLAT_RACK"
    OPEN_TOP = "OPEN_TOP"


class ContainerState(str, Enum):
    LOADED = "LOADED"
    EMPTY = "EMPTY"


class CustomsStatus(str, Enum):
    PENDING = "PENDING"
    HOLD = "HOLD"
    RELEASED = "RELEASED"


class LocationType(str, Enum):
    """Where a container physically is right now."""
    VESSEL = "VESSEL"
    TERMINAL = "TERMINAL"
    IN_TRANSIT = "IN_TRANSIT"
    CUSTOMER = "CUSTOMER"
    YARD = "YARD"


class OrderType(str, Enum):
    IMPORT = "IMPORT"
    EXPORT = "EXPORT"
    REPO = "REPO"
    EMPTY_RETURN = "EMPTY_RETURN"


class OrderStatus(str, Enum):
    """
    Order lifecycle status.

    PENDING -> READY -> DISPATCHED -> IN_PROGRESS -> DELIVERED -> COMPLETED,
    with HOLD as a side loop and CANCELLED / FAILED as exits. The legal
    transitions live in drayage.services.order_state.
    """
    PENDING = "PENDING"
    READY = "READY"
    DISPATCHED = "DISPATCHED"
    IN_PROGRESS = "IN_PROGRESS"
    DELIVERED = "DELIVERED"
    HOLD = "HOLD"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        """No transition leaves a terminal status."""
        return self in (OrderStatus.COMPLETED, OrderStatus.CANCELLED, OrderStatus.FAILED)


class BillingStatus(str, Enum):
    UNBILLED = "UNBILLED"
    BILLED = "BILLED"
    PAID = "PAID"


class AppointmentType(str, Enum):
    PICKUP = "PICKUP"
    RETURN = "RETURN"
    DROP_OFF = "DROP_OFF"
    DUAL = "DUAL"  # Pick and drop in one visit


class AppointmentStatus(str, Enum):
    """Terminal appointment status."""
    REQUESTED = "REQUESTED"
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"
    MISSED = "MISSED"
    RESCHEDULED = "RESCHEDULED"

    @property
    def is_active(self) -> bool:
        """Active appointments hold the order's single booking slot."""
        return self in (
            AppointmentStatus.REQUESTED,
            AppointmentStatus.PENDING,
            AppointmentStatus.CONFIRMED,
        )

    @property
    def is_confirmable(self) -> bool:
        return self in (AppointmentStatus.REQUESTED, AppointmentStatus.PENDING)


class ChargeKind(str, Enum):
    """Storage charge families computed from the rate schedule."""
    PER_DIEM = "PER_DIEM"      # Yard/chassis storage past the free period
    DEMURRAGE = "DEMURRAGE"    # Steamship line charge past LFD


class LFDWarningLevel(str, Enum):
    NONE = "none"
    WARNING = "warning"    # 3 days or fewer to LFD
    URGENT = "urgent"      # 1 day or fewer to LFD
    OVERDUE = "overdue"
