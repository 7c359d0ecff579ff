"""Tests for the immutable rate schedule and its tier validation."""
from decimal import Decimal

import pytest

from drayage.core.config import Settings
from drayage.core.exceptions import ConfigurationError, InvalidContainerSize
from drayage.models.enums import ChargeKind, ContainerSize
from drayage.services.rates import (
    DEFAULT_PER_DIEM_RATES,
    ChargeTier,
    GateWindow,
    RateSchedule,
    build_rate_schedule,
)


def _table(*tiers):
    return {size: tuple(tiers) for size in ContainerSize}


class TestChargeTier:

    def test_days_covered_inside(self):
        tier = ChargeTier(6, 10, Decimal("25"))
        assert tier.days_covered(6, 8) == 3

    def test_days_covered_clipped_by_tier_end(self):
        tier = ChargeTier(6, 10, Decimal("25"))
        assert tier.days_covered(6, 30) == 5

    def test_open_ended_tier(self):
        tier = ChargeTier(21, None, Decimal("50"))
        assert tier.days_covered(6, 25) == 5

    def test_no_overlap(self):
        tier = ChargeTier(11, 20, Decimal("35"))
        assert tier.days_covered(6, 10) == 0


class TestGateWindow:

    def test_close_time_is_exclusive(self):
        from datetime import time

        window = GateWindow(time(6, 0), time(18, 0))
        assert window.contains(time(6, 0))
        assert window.contains(time(17, 59))
        assert not window.contains(time(18, 0))


class TestRateSchedule:

    def test_default_schedule_is_valid(self):
        schedule = RateSchedule()
        assert schedule.per_diem_free_days == 5
        assert schedule.free_days(ChargeKind.DEMURRAGE) == 0

    def test_tiers_for_accepts_string_size(self):
        schedule = RateSchedule()
        tiers = schedule.tiers_for(ChargeKind.PER_DIEM, "20")
        assert tiers == DEFAULT_PER_DIEM_RATES[ContainerSize.FT20]

    def test_missing_size_raises(self):
        schedule = RateSchedule(
            demurrage_rates={ContainerSize.FT20: (ChargeTier(1, None, Decimal("75")),)}
        )
        with pytest.raises(InvalidContainerSize):
            schedule.tiers_for(ChargeKind.DEMURRAGE, ContainerSize.FT40)

    def test_unknown_size_value_raises(self):
        with pytest.raises(InvalidContainerSize):
            RateSchedule().tiers_for(ChargeKind.PER_DIEM, "53")

    def test_gap_between_tiers_rejected(self):
        with pytest.raises(ConfigurationError):
            RateSchedule(
                demurrage_rates=_table(
                    ChargeTier(1, 5, Decimal("75")),
                    ChargeTier(7, None, Decimal("150")),
                )
            )

    def test_first_tier_must_follow_free_days(self):
        with pytest.raises(ConfigurationError):
            RateSchedule(
                per_diem_free_days=5,
                per_diem_rates=_table(ChargeTier(1, None, Decimal("25"))),
            )

    def test_last_tier_must_be_open_ended(self):
        with pytest.raises(ConfigurationError):
            RateSchedule(demurrage_rates=_table(ChargeTier(1, 5, Decimal("75"))))

    def test_negative_rate_rejected(self):
        with pytest.raises(ConfigurationError):
            RateSchedule(demurrage_rates=_table(ChargeTier(1, None, Decimal("-1"))))

    def test_unknown_timezone_rejected(self):
        with pytest.raises(ConfigurationError):
            RateSchedule(gate_timezone="Mars/Olympus_Mons")

    def test_schedule_is_frozen(self):
        schedule = RateSchedule()
        with pytest.raises(Exception):
            schedule.slot_capacity = 1

    def test_tables_cannot_be_mutated_in_place(self):
        schedule = RateSchedule()
        with pytest.raises(TypeError):
            schedule.demurrage_rates[ContainerSize.FT40] = ()
        with pytest.raises(TypeError):
            schedule.per_diem_rates[ContainerSize.FT20] = ()
        with pytest.raises(TypeError):
            schedule.default_gate_hours[0] = None
        assert schedule.tiers_for(ChargeKind.DEMURRAGE, ContainerSize.FT40)
        assert schedule.gate_window(0) is not None

    def test_passed_tables_are_frozen_copies(self):
        table = _table(ChargeTier(1, None, Decimal("75")))
        schedule = RateSchedule(demurrage_rates=table)
        table[ContainerSize.FT20] = ()
        with pytest.raises(TypeError):
            schedule.demurrage_rates[ContainerSize.FT20] = ()
        assert schedule.tiers_for(ChargeKind.DEMURRAGE, ContainerSize.FT20)[0].rate_per_day == Decimal("75")


class TestBuildRateSchedule:

    def test_copies_settings(self):
        settings = Settings(min_appointment_lead_hours=4, slot_capacity=3, gate_timezone="America/Los_Angeles")
        schedule = build_rate_schedule(settings)
        assert schedule.min_appointment_lead_hours == 4
        assert schedule.slot_capacity == 3
        assert schedule.tzinfo.key == "America/Los_Angeles"

    def test_per_diem_tiers_follow_free_days(self):
        schedule = build_rate_schedule(Settings(per_diem_free_days=3))
        tiers = schedule.tiers_for(ChargeKind.PER_DIEM, ContainerSize.FT20)
        assert tiers[0].from_day == 4
        assert tiers[0].to_day == 8
        assert tiers[-1].to_day is None
