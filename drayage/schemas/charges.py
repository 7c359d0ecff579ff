"""
Charge response schemas.

Amounts are serialized as decimal strings to keep cents exact.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from drayage.models.enums import ChargeKind, LFDWarningLevel
from drayage.schemas.base import BaseSchema


class TierChargeResponse(BaseSchema):
    from_day: int
    to_day: Optional[int]
    days: int
    rate_per_day: Decimal
    amount: Decimal


class ChargeResultResponse(BaseSchema):
    """One per-diem or demurrage calculation with its tier breakdown."""
    kind: ChargeKind
    days: int
    amount: Decimal
    start_date: Optional[datetime]
    calculated_at: datetime
    breakdown: list[TierChargeResponse]


class ChargeSummaryResponse(BaseSchema):
    container_id: UUID
    per_diem: ChargeResultResponse
    demurrage: ChargeResultResponse
    total: Decimal
    lfd_warning_level: LFDWarningLevel
    days_until_lfd: Optional[int]


class OrderChargesResponse(ChargeSummaryResponse):
    order_id: UUID
    order_number: str
