"""
Shipment model for the drayage engine.

A shipment is an import bill of lading or an export booking moving one or
more containers through a single terminal.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import String, Text, Enum, DateTime
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from drayage.models.base import BaseModel
from drayage.models.enums import ShipmentType, ShipmentStatus, LFDWarningLevel


class Shipment(BaseModel):
    """
    Import or export movement through one terminal.

    Imports carry a Last Free Day (LFD), the date after which storage
    charges accrue. Exports carry port and documentation cutoffs instead.
    Identity is immutable and shipments are never hard-deleted; only
    status and dates change over time.
    """
    __tablename__ = "shipments"

    type: Mapped[ShipmentType] = mapped_column(
        Enum(ShipmentType, name="shipment_type", create_type=False),
        nullable=False,
    )

    reference_number: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
        index=True,
        comment="BOL number for imports, booking number for exports",
    )

    # =========================================================================
    # Parties & Facilities
    # =========================================================================
    customer_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False, index=True)
    steamship_line_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False)
    terminal_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False, index=True)
    port_id: Mapped[Optional[UUID]] = mapped_column(PG_UUID(as_uuid=True), nullable=True)
    consignee_id: Mapped[Optional[UUID]] = mapped_column(PG_UUID(as_uuid=True), nullable=True)
    shipper_id: Mapped[Optional[UUID]] = mapped_column(PG_UUID(as_uuid=True), nullable=True)
    empty_return_location_id: Mapped[Optional[UUID]] = mapped_column(PG_UUID(as_uuid=True), nullable=True)

    # =========================================================================
    # Vessel
    # =========================================================================
    vessel_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    voyage_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    vessel_eta: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # =========================================================================
    # Key Dates
    # =========================================================================
    last_free_day: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Imports only: storage charges accrue after this instant",
    )

    port_cutoff: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    doc_cutoff: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    earliest_return_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    status: Mapped[ShipmentStatus] = mapped_column(
        Enum(ShipmentStatus, name="shipment_status", create_type=False),
        nullable=False,
        default=ShipmentStatus.PENDING,
    )

    special_instructions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    @property
    def is_import(self) -> bool:
        return self.type == ShipmentType.IMPORT

    def days_until_lfd(self, now: datetime) -> Optional[int]:
        """Calendar days from now until LFD; negative once LFD has passed."""
        if self.last_free_day is None:
            return None
        return (self.last_free_day.date() - now.date()).days

    def lfd_warning_level(self, now: datetime) -> LFDWarningLevel:
        days = self.days_until_lfd(now)
        if days is None:
            return LFDWarningLevel.NONE
        if days < 0:
            return LFDWarningLevel.OVERDUE
        if days <= 1:
            return LFDWarningLevel.URGENT
        if days <= 3:
            return LFDWarningLevel.WARNING
        return LFDWarningLevel.NONE
