"""Tests for Pydantic schema validation."""
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from drayage.schemas.order import OrderFilter
from drayage.schemas.shipment import (
    ContainerCreate,
    ShipmentCreate,
    iso6346_check_digit,
    is_valid_container_number,
)

NOW = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)


def _container(**overrides):
    data = {"container_number": "CSQU3054383", "size": "40", "weight_lbs": 30_000}
    data.update(overrides)
    return data


def _shipment(**overrides):
    data = {
        "type": "IMPORT",
        "reference_number": "BL-0001",
        "customer_id": uuid4(),
        "steamship_line_id": uuid4(),
        "terminal_id": uuid4(),
        "vessel_name": "MSC AURORA",
        "voyage_number": "024W",
        "vessel_eta": NOW,
        "last_free_day": NOW + timedelta(days=5),
    }
    data.update(overrides)
    return data


class TestContainerNumber:

    def test_known_check_digit(self):
        assert iso6346_check_digit("CSQU305438") == 3

    def test_valid_number(self):
        assert is_valid_container_number("CSQU3054383")

    def test_wrong_check_digit(self):
        assert not is_valid_container_number("CSQU3054384")

    def test_bad_category_letter(self):
        assert not is_valid_container_number("CSQX3054383")

    def test_normalized_to_upper(self):
        container = ContainerCreate(**_container(container_number=" csqu3054383 "))
        assert container.container_number == "CSQU3054383"

    def test_check_digit_mismatch_rejected(self):
        with pytest.raises(ValidationError):
            ContainerCreate(**_container(container_number="CSQU3054384"))


class TestContainerCreate:

    def test_defaults(self):
        container = ContainerCreate(**_container())
        assert container.type == "DRY"
        assert container.customs_status == "PENDING"
        assert not container.is_overweight
        assert not container.is_reefer

    def test_overweight_derived_from_weight(self):
        container = ContainerCreate(**_container(weight_lbs=45_000))
        assert container.is_overweight

    def test_weight_above_max_rejected(self):
        with pytest.raises(ValidationError):
            ContainerCreate(**_container(weight_lbs=70_000))

    def test_unknown_size_rejected(self):
        with pytest.raises(ValidationError):
            ContainerCreate(**_container(size="53"))

    def test_hazmat_requires_class_and_un_number(self):
        with pytest.raises(ValidationError):
            ContainerCreate(**_container(is_hazmat=True, hazmat_class="3"))

    def test_valid_hazmat(self):
        container = ContainerCreate(**_container(is_hazmat=True, hazmat_class="2.1", un_number="UN1075"))
        assert container.is_hazmat

    def test_reefer_requires_setpoint(self):
        with pytest.raises(ValidationError):
            ContainerCreate(**_container(type="REEFER"))

    def test_reefer_with_setpoint(self):
        container = ContainerCreate(**_container(type="REEFER", reefer_temp_setpoint=Decimal("-18")))
        assert container.is_reefer


class TestShipmentCreate:

    def test_valid_import(self):
        shipment = ShipmentCreate(**_shipment(containers=[_container()]))
        assert shipment.type == "IMPORT"
        assert len(shipment.containers) == 1

    def test_import_requires_last_free_day(self):
        with pytest.raises(ValidationError):
            ShipmentCreate(**_shipment(last_free_day=None))

    def test_import_requires_vessel_and_voyage(self):
        with pytest.raises(ValidationError):
            ShipmentCreate(**_shipment(voyage_number=None))

    def test_lfd_before_eta_rejected(self):
        with pytest.raises(ValidationError):
            ShipmentCreate(**_shipment(last_free_day=NOW - timedelta(days=1)))

    def test_export_requires_cutoffs(self):
        with pytest.raises(ValidationError):
            ShipmentCreate(**_shipment(type="EXPORT", last_free_day=None, doc_cutoff=NOW))

    def test_export_port_cutoff_before_doc_cutoff_rejected(self):
        with pytest.raises(ValidationError):
            ShipmentCreate(
                **_shipment(
                    type="EXPORT",
                    last_free_day=None,
                    doc_cutoff=NOW + timedelta(days=2),
                    port_cutoff=NOW + timedelta(days=1),
                )
            )

    def test_duplicate_container_numbers_rejected(self):
        with pytest.raises(ValidationError):
            ShipmentCreate(**_shipment(containers=[_container(), _container()]))

    def test_naive_dates_treated_as_utc(self):
        shipment = ShipmentCreate(
            **_shipment(vessel_eta=datetime(2026, 10, 19), last_free_day=datetime(2026, 10, 24))
        )
        assert shipment.last_free_day.tzinfo == timezone.utc


class TestOrderFilter:

    def test_offset(self):
        assert OrderFilter(page=3, page_size=20).offset == 40

    def test_page_size_capped(self):
        with pytest.raises(ValidationError):
            OrderFilter(page_size=501)
