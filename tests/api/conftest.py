"""API test fixtures -- JSON payload builders and pre-created resources."""
from datetime import datetime, timedelta
from uuid import uuid4

import pytest

API = "/api/v1"


def iso(value: datetime) -> str:
    return value.isoformat()


@pytest.fixture
def shipment_payload(now, make_container_number):
    def _make(type: str = "IMPORT", containers: int = 1, **overrides) -> dict:
        payload = {
            "type": type,
            "reference_number": f"BL-{uuid4().hex[:10].upper()}",
            "customer_id": str(uuid4()),
            "steamship_line_id": str(uuid4()),
            "terminal_id": str(uuid4()),
            "consignee_id": str(uuid4()),
            "containers": [
                {
                    "container_number": make_container_number(i + 1),
                    "size": "40",
                    "weight_lbs": 38_000,
                }
                for i in range(containers)
            ],
        }
        if type == "IMPORT":
            payload.update(
                vessel_name="MSC AURORA",
                voyage_number="024W",
                vessel_eta=iso(now - timedelta(days=2)),
                last_free_day=iso(now + timedelta(days=4)),
            )
        else:
            payload.update(
                doc_cutoff=iso(now + timedelta(days=3)),
                port_cutoff=iso(now + timedelta(days=4)),
            )
        payload.update(overrides)
        return payload

    return _make


@pytest.fixture
async def created_shipment(client, shipment_payload) -> dict:
    response = await client.post(f"{API}/shipments", json=shipment_payload(containers=2))
    assert response.status_code == 201
    return response.json()


@pytest.fixture
async def created_order(client, created_shipment) -> dict:
    response = await client.post(f"{API}/shipments/{created_shipment['id']}/orders")
    assert response.status_code == 201
    return response.json()[0]


@pytest.fixture
async def created_appointment(client, created_order, now) -> dict:
    response = await client.post(
        f"{API}/appointments",
        json={
            "order_id": created_order["id"],
            "terminal_id": str(uuid4()),
            "requested_time": iso(now + timedelta(hours=4)),
        },
    )
    assert response.status_code == 201
    return response.json()
