"""
Rate schedule: the immutable business-rule configuration of the engine.

Holds the per-size tiered tables for per-diem and demurrage, the
appointment timing rules and the default terminal gate hours. A schedule
is built once at the edge (see build_rate_schedule) and passed into the
calculator, scheduler and coordinator; none of them read settings.
"""
from dataclasses import dataclass
from datetime import time
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from drayage.core.config import Settings
from drayage.core.exceptions import ConfigurationError, InvalidContainerSize
from drayage.models.enums import ChargeKind, ContainerSize


@dataclass(frozen=True)
class ChargeTier:
    """
    One band of a tiered rate table.

    Days are counted from LFD (day 1 is the first day after LFD) and are
    inclusive at both ends. to_day=None means open-ended.
    """
    from_day: int
    to_day: Optional[int]
    rate_per_day: Decimal

    def days_covered(self, first_day: int, last_day: int) -> int:
        """Number of days of [first_day, last_day] falling inside this tier."""
        lo = max(self.from_day, first_day)
        hi = last_day if self.to_day is None else min(self.to_day, last_day)
        return max(0, hi - lo + 1)


@dataclass(frozen=True)
class GateWindow:
    """Daily gate opening, close time exclusive."""
    open_time: time
    close_time: time

    def contains(self, t: time) -> bool:
        return self.open_time <= t < self.close_time


def _tiers(*bands: tuple[int, Optional[int], str]) -> tuple[ChargeTier, ...]:
    return tuple(ChargeTier(lo, hi, Decimal(rate)) for lo, hi, rate in bands)


DEFAULT_PER_DIEM_FREE_DAYS = 5

DEFAULT_PER_DIEM_RATES: Mapping[ContainerSize, tuple[ChargeTier, ...]] = MappingProxyType({
    ContainerSize.FT20: _tiers((6, 10, "25.00"), (11, 20, "35.00"), (21, None, "50.00")),
    ContainerSize.FT40: _tiers((6, 10, "35.00"), (11, 20, "50.00"), (21, None, "75.00")),
    ContainerSize.FT45: _tiers((6, 10, "40.00"), (11, 20, "60.00"), (21, None, "85.00")),
})

DEFAULT_DEMURRAGE_RATES: Mapping[ContainerSize, tuple[ChargeTier, ...]] = MappingProxyType({
    ContainerSize.FT20: _tiers((1, 5, "75.00"), (6, 10, "150.00"), (11, 20, "300.00"), (21, None, "500.00")),
    ContainerSize.FT40: _tiers((1, 5, "100.00"), (6, 10, "200.00"), (11, 20, "400.00"), (21, None, "750.00")),
    ContainerSize.FT45: _tiers((1, 5, "125.00"), (6, 10, "250.00"), (11, 20, "500.00"), (21, None, "1000.00")),
})

_WEEKDAY_GATE = GateWindow(open_time=time(6, 0), close_time=time(18, 0))

# Keyed by datetime.weekday(); None means closed all day
DEFAULT_GATE_HOURS: Mapping[int, Optional[GateWindow]] = MappingProxyType({
    0: _WEEKDAY_GATE,
    1: _WEEKDAY_GATE,
    2: _WEEKDAY_GATE,
    3: _WEEKDAY_GATE,
    4: _WEEKDAY_GATE,
    5: None,
    6: None,
})


class RateSchedule(BaseModel):
    """Immutable rate and scheduling configuration."""

    model_config = ConfigDict(frozen=True)

    per_diem_free_days: int = Field(default=DEFAULT_PER_DIEM_FREE_DAYS, ge=0)
    demurrage_free_days: int = Field(default=0, ge=0, le=0)

    per_diem_rates: Mapping[ContainerSize, tuple[ChargeTier, ...]] = Field(
        default_factory=lambda: DEFAULT_PER_DIEM_RATES
    )
    demurrage_rates: Mapping[ContainerSize, tuple[ChargeTier, ...]] = Field(
        default_factory=lambda: DEFAULT_DEMURRAGE_RATES
    )

    min_appointment_lead_hours: int = Field(default=2, ge=0)
    appointment_window_minutes: int = Field(default=30, gt=0)
    on_time_grace_minutes: int = Field(default=15, ge=0)

    default_gate_hours: Mapping[int, Optional[GateWindow]] = Field(
        default_factory=lambda: DEFAULT_GATE_HOURS
    )
    gate_timezone: str = "UTC"

    slot_capacity: int = Field(default=25, gt=0)
    confirmation_delay_seconds: float = Field(default=5.0, ge=0)

    @field_validator("per_diem_rates", "demurrage_rates", "default_gate_hours", mode="after")
    @classmethod
    def _freeze_table(cls, value):
        return MappingProxyType(dict(value))

    @model_validator(mode="after")
    def _check_tables(self) -> "RateSchedule":
        _validate_tiers(ChargeKind.PER_DIEM, self.per_diem_rates, self.per_diem_free_days)
        _validate_tiers(ChargeKind.DEMURRAGE, self.demurrage_rates, self.demurrage_free_days)

        for weekday in self.default_gate_hours:
            if weekday not in range(7):
                raise ConfigurationError(
                    f"gate hours weekday out of range: {weekday}",
                    details={"weekday": weekday},
                )
        try:
            ZoneInfo(self.gate_timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigurationError(
                f"unknown gate timezone: {self.gate_timezone}",
                details={"gate_timezone": self.gate_timezone},
            ) from e
        return self

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.gate_timezone)

    def free_days(self, kind: ChargeKind) -> int:
        if kind == ChargeKind.PER_DIEM:
            return self.per_diem_free_days
        return self.demurrage_free_days

    def tiers_for(self, kind: ChargeKind, size: ContainerSize) -> tuple[ChargeTier, ...]:
        """Tier table for a charge kind and container size."""
        table = self.per_diem_rates if kind == ChargeKind.PER_DIEM else self.demurrage_rates
        try:
            return table[ContainerSize(size)]
        except (KeyError, ValueError):
            raise InvalidContainerSize(size, kind.value.lower().replace("_", "-")) from None

    def gate_window(self, weekday: int) -> Optional[GateWindow]:
        return self.default_gate_hours.get(weekday)


def _validate_tiers(
    kind: ChargeKind,
    table: Mapping[ContainerSize, tuple[ChargeTier, ...]],
    free_days: int,
) -> None:
    for size, tiers in table.items():
        where = {"charge_kind": kind.value, "size": size.value}
        if not tiers:
            raise ConfigurationError(f"empty {kind.value} tier table for {size.value}ft", details=where)

        expected_start = free_days + 1
        for i, tier in enumerate(tiers):
            if tier.rate_per_day < 0:
                raise ConfigurationError("negative rate in tier table", details={**where, "tier": i})
            if tier.from_day != expected_start:
                raise ConfigurationError(
                    f"{kind.value} tiers for {size.value}ft must be contiguous from day {expected_start}",
                    details={**where, "tier": i, "from_day": tier.from_day, "expected": expected_start},
                )
            is_last = i == len(tiers) - 1
            if tier.to_day is None:
                if not is_last:
                    raise ConfigurationError(
                        "only the last tier may be open-ended", details={**where, "tier": i}
                    )
                continue
            if tier.to_day < tier.from_day:
                raise ConfigurationError("tier ends before it starts", details={**where, "tier": i})
            if is_last:
                raise ConfigurationError("last tier must be open-ended", details={**where, "tier": i})
            expected_start = tier.to_day + 1


def build_rate_schedule(settings: Settings) -> RateSchedule:
    """Build the engine's RateSchedule from application settings."""
    return RateSchedule(
        per_diem_free_days=settings.per_diem_free_days,
        per_diem_rates=_shift_tiers(DEFAULT_PER_DIEM_RATES, settings.per_diem_free_days),
        min_appointment_lead_hours=settings.min_appointment_lead_hours,
        appointment_window_minutes=settings.appointment_window_minutes,
        on_time_grace_minutes=settings.on_time_grace_minutes,
        gate_timezone=settings.gate_timezone,
        slot_capacity=settings.slot_capacity,
        confirmation_delay_seconds=settings.confirmation_delay_seconds,
    )


def _shift_tiers(
    table: Mapping[ContainerSize, tuple[ChargeTier, ...]],
    free_days: int,
) -> dict[ContainerSize, tuple[ChargeTier, ...]]:
    """Re-anchor default tiers so the first one starts right after free_days."""
    shifted = {}
    for size, tiers in table.items():
        offset = free_days + 1 - tiers[0].from_day
        shifted[size] = tuple(
            ChargeTier(
                t.from_day + offset,
                None if t.to_day is None else t.to_day + offset,
                t.rate_per_day,
            )
            for t in tiers
        )
    return shifted
