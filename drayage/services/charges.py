"""
Tiered storage charge calculator.

Pure functions over a container, its shipment, a clock reading and the
rate schedule. Nothing here touches a repository, so callers can compute
exposure for any "now" (quotes, audits, back-dated disputes) and get the
same answer every time.

Day counting:
    elapsed = whole 24h periods since LFD (floor)
    day 1 is the first chargeable day after LFD

Per-diem only starts after per_diem_free_days; demurrage starts on day 1.
Tier boundaries are expressed in days past LFD, so a 20ft container 12
days past LFD with 5 free days is billed days 6-10 at the first tier and
days 11-12 at the second.
"""
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from drayage.models.container import Container
from drayage.models.enums import ChargeKind, LFDWarningLevel, ShipmentType
from drayage.models.shipment import Shipment
from drayage.services.rates import RateSchedule

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


@dataclass(frozen=True)
class TierCharge:
    """The slice of a charge billed at one tier rate."""
    from_day: int
    to_day: Optional[int]
    days: int
    rate_per_day: Decimal
    amount: Decimal


@dataclass(frozen=True)
class ChargeResult:
    """Outcome of one per-diem or demurrage calculation."""
    kind: ChargeKind
    days: int
    amount: Decimal
    start_date: Optional[datetime]
    calculated_at: datetime
    breakdown: tuple[TierCharge, ...] = field(default_factory=tuple)

    @property
    def is_zero(self) -> bool:
        return self.days == 0


@dataclass(frozen=True)
class ChargeSummary:
    """Per-diem and demurrage exposure for one container."""
    container_id: object
    per_diem: ChargeResult
    demurrage: ChargeResult
    lfd_warning_level: LFDWarningLevel
    days_until_lfd: Optional[int]

    @property
    def total(self) -> Decimal:
        return self.per_diem.amount + self.demurrage.amount


def elapsed_days(last_free_day: datetime, now: datetime) -> int:
    """Whole days between LFD and now, rounded down."""
    return math.floor((now - last_free_day).total_seconds() / 86400)


def calculate_per_diem(
    container: Container,
    shipment: Shipment,
    now: datetime,
    schedule: RateSchedule,
) -> ChargeResult:
    """Per-diem accrued by an import container as of now."""
    return _calculate(ChargeKind.PER_DIEM, container, shipment, now, schedule)


def calculate_demurrage(
    container: Container,
    shipment: Shipment,
    now: datetime,
    schedule: RateSchedule,
) -> ChargeResult:
    """Demurrage accrued by an import container as of now."""
    return _calculate(ChargeKind.DEMURRAGE, container, shipment, now, schedule)


def calculate_charges(
    container: Container,
    shipment: Shipment,
    now: datetime,
    schedule: RateSchedule,
) -> ChargeSummary:
    return ChargeSummary(
        container_id=container.id,
        per_diem=calculate_per_diem(container, shipment, now, schedule),
        demurrage=calculate_demurrage(container, shipment, now, schedule),
        lfd_warning_level=shipment.lfd_warning_level(now),
        days_until_lfd=shipment.days_until_lfd(now),
    )


def _calculate(
    kind: ChargeKind,
    container: Container,
    shipment: Shipment,
    now: datetime,
    schedule: RateSchedule,
) -> ChargeResult:
    lfd = shipment.last_free_day

    if shipment.type != ShipmentType.IMPORT or lfd is None or now <= lfd:
        return _zero(kind, lfd, now)

    tiers = schedule.tiers_for(kind, container.size)
    free_days = schedule.free_days(kind)

    last_day = elapsed_days(lfd, now)
    chargeable = last_day - free_days
    if chargeable <= 0:
        return _zero(kind, lfd, now)

    first_day = free_days + 1
    breakdown = []
    for tier in tiers:
        if tier.from_day > last_day:
            break
        days = tier.days_covered(first_day, last_day)
        if days == 0:
            continue
        breakdown.append(
            TierCharge(
                from_day=tier.from_day,
                to_day=tier.to_day,
                days=days,
                rate_per_day=tier.rate_per_day,
                amount=(tier.rate_per_day * days).quantize(CENT, rounding=ROUND_HALF_UP),
            )
        )

    amount = sum((t.amount for t in breakdown), ZERO)

    if kind == ChargeKind.PER_DIEM:
        start_date = lfd + timedelta(days=free_days)
    else:
        start_date = lfd + timedelta(days=1)

    logger.debug(
        f"{kind.value} for container {container.id}: {chargeable} days, {amount} "
        f"across {len(breakdown)} tiers"
    )

    return ChargeResult(
        kind=kind,
        days=chargeable,
        amount=amount,
        start_date=start_date,
        calculated_at=now,
        breakdown=tuple(breakdown),
    )


def _zero(kind: ChargeKind, lfd: Optional[datetime], now: datetime) -> ChargeResult:
    return ChargeResult(kind=kind, days=0, amount=ZERO, start_date=lfd, calculated_at=now)
