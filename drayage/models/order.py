"""
Order model for the drayage engine.

An order is a unit of trucking work for a single container. Its status
only moves along the transitions defined in drayage.services.order_state.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import String, Text, Enum, ForeignKey, DateTime
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from drayage.models.base import BaseModel
from drayage.models.enums import OrderType, OrderStatus, BillingStatus


class Order(BaseModel):
    """
    Trucking order for one container.

    At most one order per container may be active (status not COMPLETED,
    CANCELLED or FAILED) at any time.
    """
    __tablename__ = "orders"

    order_number: Mapped[str] = mapped_column(
        String(20),
        unique=True,
        nullable=False,
        index=True,
        comment="ORD-YYYYMMDD-NNNNN",
    )

    container_id: Mapped[UUID] = mapped_column(
        ForeignKey("containers.id"),
        nullable=False,
        index=True,
    )

    shipment_id: Mapped[UUID] = mapped_column(
        ForeignKey("shipments.id"),
        nullable=False,
        index=True,
    )

    type: Mapped[OrderType] = mapped_column(
        Enum(OrderType, name="order_type", create_type=False),
        nullable=False,
    )

    # =========================================================================
    # Status
    # =========================================================================
    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus, name="order_status", create_type=False),
        nullable=False,
        default=OrderStatus.PENDING,
        index=True,
    )

    status_reason: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Reason recorded with the most recent status change",
    )

    billing_status: Mapped[BillingStatus] = mapped_column(
        Enum(BillingStatus, name="billing_status", create_type=False),
        nullable=False,
        default=BillingStatus.UNBILLED,
    )

    # =========================================================================
    # Locations & Dates
    # =========================================================================
    pickup_location_id: Mapped[Optional[UUID]] = mapped_column(PG_UUID(as_uuid=True), nullable=True)
    delivery_location_id: Mapped[Optional[UUID]] = mapped_column(PG_UUID(as_uuid=True), nullable=True)
    return_location_id: Mapped[Optional[UUID]] = mapped_column(PG_UUID(as_uuid=True), nullable=True)

    requested_pickup_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    requested_delivery_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    special_instructions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    @property
    def is_active(self) -> bool:
        return not self.status.is_terminal
