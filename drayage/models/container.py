"""
Container model for the drayage engine.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import String, Integer, Boolean, Numeric, Enum, ForeignKey, DateTime
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from drayage.models.base import BaseModel
from drayage.models.enums import (
    ContainerSize,
    ContainerType,
    ContainerState,
    CustomsStatus,
    LocationType,
)


class Container(BaseModel):
    """
    A physical box tied to exactly one shipment.

    Size drives rate-tier lookup; customs status and location drive
    pickup availability.
    """
    __tablename__ = "containers"

    shipment_id: Mapped[UUID] = mapped_column(
        ForeignKey("shipments.id"),
        nullable=False,
        index=True,
    )

    container_number: Mapped[str] = mapped_column(
        String(11),
        nullable=False,
        index=True,
        comment="ISO 6346 number incl. check digit",
    )

    # Stored by value ("20", "40", "45") so rate tables and rows agree
    size: Mapped[ContainerSize] = mapped_column(
        Enum(
            ContainerSize,
            name="container_size",
            create_type=False,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )

    type: Mapped[ContainerType] = mapped_column(
        Enum(ContainerType, name="container_type", create_type=False),
        nullable=False,
        default=ContainerType.DRY,
    )

    seal_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # =========================================================================
    # Cargo
    # =========================================================================
    weight_lbs: Mapped[int] = mapped_column(Integer, nullable=False)
    commodity: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    is_hazmat: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    hazmat_class: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    un_number: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    is_overweight: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Gross weight above the overweight-permit threshold",
    )

    is_reefer: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reefer_temp_setpoint: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(5, 2),
        nullable=True,
        comment="Reefer setpoint (°C)",
    )

    # =========================================================================
    # Customs & Location
    # =========================================================================
    customs_status: Mapped[CustomsStatus] = mapped_column(
        Enum(CustomsStatus, name="customs_status", create_type=False),
        nullable=False,
        default=CustomsStatus.PENDING,
    )

    customs_hold_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    terminal_available_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    current_state: Mapped[ContainerState] = mapped_column(
        Enum(ContainerState, name="container_state", create_type=False),
        nullable=False,
        default=ContainerState.LOADED,
    )

    current_location_type: Mapped[LocationType] = mapped_column(
        Enum(LocationType, name="location_type", create_type=False),
        nullable=False,
        default=LocationType.VESSEL,
    )

    current_location_id: Mapped[Optional[UUID]] = mapped_column(PG_UUID(as_uuid=True), nullable=True)

    @property
    def is_available(self) -> bool:
        """Released by customs, discharged, and sitting at the terminal."""
        return (
            self.customs_status == CustomsStatus.RELEASED
            and self.terminal_available_date is not None
            and self.current_location_type == LocationType.TERMINAL
        )

    @property
    def availability_reason(self) -> Optional[str]:
        """Why the container cannot be picked up yet, or None."""
        if self.is_available:
            return None
        if self.customs_status == CustomsStatus.HOLD:
            return f"Customs hold: {self.customs_hold_type or 'unspecified'}"
        if self.customs_status == CustomsStatus.PENDING:
            return "Customs clearance pending"
        if self.terminal_available_date is None:
            return "Not yet discharged from vessel"
        return "Not available at terminal"
