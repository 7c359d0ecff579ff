"""
Shipment and container Pydantic schemas with cargo and date validation.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID
import re

from pydantic import Field, field_validator, model_validator

from drayage.models.enums import (
    ShipmentType,
    ShipmentStatus,
    ContainerSize,
    ContainerType,
    ContainerState,
    CustomsStatus,
    LocationType,
    LFDWarningLevel,
)
from drayage.schemas.base import BaseSchema, as_utc

MAX_GROSS_WEIGHT_LBS = 67_200
OVERWEIGHT_THRESHOLD_LBS = 44_000

CONTAINER_NUMBER_PATTERN = re.compile(r"^[A-Z]{3}[UJZ]\d{7}$")
HAZMAT_CLASS_PATTERN = re.compile(r"^[1-9](\.[1-9])?$")
UN_NUMBER_PATTERN = re.compile(r"^UN\d{4}$")


def _letter_values() -> dict[str, int]:
    # A=10 upward, skipping multiples of 11
    values = {}
    v = 10
    for letter in "ABCDEFGHIJKLMNOPQRSTUVWXYZ":
        if v % 11 == 0:
            v += 1
        values[letter] = v
        v += 1
    return values


_LETTER_VALUES = _letter_values()


def iso6346_check_digit(prefix: str) -> int:
    """
    Check digit for the first 10 characters of an ISO 6346 container number.

    Example:
        >>> iso6346_check_digit("CSQU305438")
        3
    """
    total = 0
    for i, ch in enumerate(prefix[:10]):
        value = _LETTER_VALUES[ch] if ch.isalpha() else int(ch)
        total += value * (2 ** i)
    return total % 11 % 10


def is_valid_container_number(number: str) -> bool:
    if not CONTAINER_NUMBER_PATTERN.match(number):
        return False
    return iso6346_check_digit(number[:10]) == int(number[10])


# =============================================================================
# Container
# =============================================================================

class ContainerBase(BaseSchema):
    """Base container schema."""
    container_number: str = Field(..., min_length=11, max_length=11)
    size: ContainerSize
    type: ContainerType = ContainerType.DRY
    seal_number: Optional[str] = Field(None, max_length=50)

    weight_lbs: int = Field(..., gt=0, le=MAX_GROSS_WEIGHT_LBS, description="Gross weight in lbs")
    commodity: Optional[str] = Field(None, max_length=200)

    is_hazmat: bool = False
    hazmat_class: Optional[str] = None
    un_number: Optional[str] = None

    reefer_temp_setpoint: Optional[Decimal] = Field(
        None,
        ge=-30,
        le=30,
        description="Reefer setpoint (°C)",
    )


class ContainerCreate(ContainerBase):
    """Schema for adding a container to a shipment."""
    customs_status: CustomsStatus = CustomsStatus.PENDING
    customs_hold_type: Optional[str] = Field(None, max_length=50)
    terminal_available_date: Optional[datetime] = None
    current_state: ContainerState = ContainerState.LOADED
    current_location_type: LocationType = LocationType.VESSEL

    @field_validator("container_number", mode="before")
    @classmethod
    def normalize_container_number(cls, v: str) -> str:
        if isinstance(v, str):
            v = v.strip().upper()
        return v

    @field_validator("container_number")
    @classmethod
    def validate_container_number(cls, v: str) -> str:
        """Owner code, category U/J/Z, 6-digit serial and a matching check digit."""
        if not CONTAINER_NUMBER_PATTERN.match(v):
            raise ValueError("Container number must be 4 letters (category U, J or Z) and 7 digits")
        if iso6346_check_digit(v[:10]) != int(v[10]):
            raise ValueError("Container number check digit does not match")
        return v

    @field_validator("terminal_available_date")
    @classmethod
    def normalize_dates(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)

    @model_validator(mode="after")
    def validate_cargo(self) -> "ContainerCreate":
        """Hazmat needs class and UN number; reefers need a setpoint."""
        if self.is_hazmat:
            if not self.hazmat_class or not HAZMAT_CLASS_PATTERN.match(self.hazmat_class):
                raise ValueError("Hazmat containers require a hazmat class like 3 or 2.1")
            if not self.un_number or not UN_NUMBER_PATTERN.match(self.un_number):
                raise ValueError("Hazmat containers require a UN number like UN1203")
        if self.is_reefer and self.reefer_temp_setpoint is None:
            raise ValueError("Reefer containers require a temperature setpoint")
        return self

    @property
    def is_overweight(self) -> bool:
        return self.weight_lbs > OVERWEIGHT_THRESHOLD_LBS

    @property
    def is_reefer(self) -> bool:
        return self.type == ContainerType.REEFER


class ContainerResponse(ContainerBase):
    """Schema for container response."""
    id: UUID
    shipment_id: UUID
    is_overweight: bool
    is_reefer: bool
    customs_status: CustomsStatus
    customs_hold_type: Optional[str]
    terminal_available_date: Optional[datetime]
    current_state: ContainerState
    current_location_type: LocationType
    created_at: datetime
    updated_at: datetime


class ContainerAvailability(BaseSchema):
    """Pickup availability of one container."""
    container_id: UUID
    container_number: Optional[str] = None
    is_available: bool
    reason: Optional[str] = None


# =============================================================================
# Shipment
# =============================================================================

class ShipmentBase(BaseSchema):
    """Base shipment schema."""
    type: ShipmentType
    reference_number: str = Field(..., min_length=1, max_length=50)
    customer_id: UUID
    steamship_line_id: UUID
    terminal_id: UUID
    port_id: Optional[UUID] = None

    vessel_name: Optional[str] = Field(None, max_length=100)
    voyage_number: Optional[str] = Field(None, max_length=50)
    vessel_eta: Optional[datetime] = None

    last_free_day: Optional[datetime] = None
    port_cutoff: Optional[datetime] = None
    doc_cutoff: Optional[datetime] = None
    earliest_return_date: Optional[datetime] = None

    consignee_id: Optional[UUID] = None
    shipper_id: Optional[UUID] = None
    empty_return_location_id: Optional[UUID] = None
    special_instructions: Optional[str] = None


class ShipmentCreate(ShipmentBase):
    """Schema for creating a shipment together with its containers."""
    containers: list[ContainerCreate] = Field(default_factory=list, max_length=500)

    @field_validator("vessel_eta", "last_free_day", "port_cutoff", "doc_cutoff", "earliest_return_date")
    @classmethod
    def normalize_dates(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)

    @model_validator(mode="after")
    def validate_type_requirements(self) -> "ShipmentCreate":
        """
        Imports need LFD and vessel/voyage; exports need both cutoffs.
        """
        if self.type == ShipmentType.IMPORT:
            if self.last_free_day is None:
                raise ValueError("Import shipments require last_free_day")
            if not self.vessel_name or not self.voyage_number:
                raise ValueError("Import shipments require vessel_name and voyage_number")
        else:
            if self.port_cutoff is None or self.doc_cutoff is None:
                raise ValueError("Export shipments require port_cutoff and doc_cutoff")
            if self.port_cutoff < self.doc_cutoff:
                raise ValueError("port_cutoff must not be before doc_cutoff")

        if self.last_free_day is not None and self.vessel_eta is not None:
            if self.last_free_day < self.vessel_eta:
                raise ValueError("last_free_day must not be before vessel_eta")

        numbers = [c.container_number for c in self.containers]
        if len(numbers) != len(set(numbers)):
            raise ValueError("Duplicate container numbers in shipment")
        return self


class ContainerBatchCreate(BaseSchema):
    """Schema for adding containers to an existing shipment."""
    containers: list[ContainerCreate] = Field(..., min_length=1, max_length=500)


class ShipmentResponse(ShipmentBase):
    """Schema for shipment response."""
    id: UUID
    status: ShipmentStatus
    created_at: datetime
    updated_at: datetime


class ShipmentDetailResponse(ShipmentResponse):
    """Shipment with its containers and LFD urgency."""
    containers: list[ContainerResponse] = Field(default_factory=list)
    days_until_lfd: Optional[int] = None
    lfd_warning_level: LFDWarningLevel = LFDWarningLevel.NONE
