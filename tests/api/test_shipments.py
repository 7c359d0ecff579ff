"""Tests for shipment and container endpoints."""
from uuid import uuid4

API = "/api/v1"


class TestCreateShipment:

    async def test_create_returns_201(self, client, shipment_payload):
        response = await client.post(f"{API}/shipments", json=shipment_payload(containers=2))
        assert response.status_code == 201
        data = response.json()
        assert data["type"] == "IMPORT"
        assert data["status"] == "PENDING"
        assert len(data["containers"]) == 2
        assert data["days_until_lfd"] == 4
        assert data["lfd_warning_level"] == "none"

    async def test_import_without_lfd_returns_422(self, client, shipment_payload):
        payload = shipment_payload()
        del payload["last_free_day"]
        response = await client.post(f"{API}/shipments", json=payload)
        assert response.status_code == 422

    async def test_bad_check_digit_returns_422(self, client, shipment_payload):
        payload = shipment_payload()
        payload["containers"][0]["container_number"] = "CSQU3054384"
        response = await client.post(f"{API}/shipments", json=payload)
        assert response.status_code == 422

    async def test_export_shipment(self, client, shipment_payload):
        response = await client.post(f"{API}/shipments", json=shipment_payload(type="EXPORT"))
        assert response.status_code == 201
        assert response.json()["days_until_lfd"] is None


class TestGetShipment:

    async def test_found_returns_200(self, client, created_shipment):
        response = await client.get(f"{API}/shipments/{created_shipment['id']}")
        assert response.status_code == 200
        assert response.json()["reference_number"] == created_shipment["reference_number"]

    async def test_not_found_returns_404(self, client):
        response = await client.get(f"{API}/shipments/{uuid4()}")
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"


class TestAddContainers:

    async def test_add_returns_201(self, client, created_shipment, make_container_number):
        response = await client.post(
            f"{API}/shipments/{created_shipment['id']}/containers",
            json={"containers": [{"container_number": make_container_number(7), "size": "20", "weight_lbs": 20_000}]},
        )
        assert response.status_code == 201
        assert response.json()[0]["size"] == "20"

    async def test_duplicate_returns_409(self, client, created_shipment):
        existing = created_shipment["containers"][0]
        response = await client.post(
            f"{API}/shipments/{created_shipment['id']}/containers",
            json={"containers": [{"container_number": existing["container_number"], "size": "40", "weight_lbs": 30_000}]},
        )
        assert response.status_code == 409


class TestGenerateOrders:

    async def test_generate_then_skip(self, client, created_shipment):
        first = await client.post(f"{API}/shipments/{created_shipment['id']}/orders")
        second = await client.post(f"{API}/shipments/{created_shipment['id']}/orders")
        assert first.status_code == 201
        assert len(first.json()) == 2
        assert second.json() == []


class TestContainers:

    async def test_availability(self, client, created_shipment):
        container_id = created_shipment["containers"][0]["id"]
        unknown = str(uuid4())
        response = await client.post(f"{API}/containers/availability", json=[container_id, unknown])
        assert response.status_code == 200
        data = {r["container_id"]: r for r in response.json()}
        assert data[container_id]["is_available"] is False
        assert data[container_id]["reason"] == "Customs clearance pending"
        assert data[unknown]["reason"] == "Container not found"

    async def test_charges_before_lfd(self, client, created_shipment):
        container_id = created_shipment["containers"][0]["id"]
        response = await client.get(f"{API}/containers/{container_id}/charges")
        assert response.status_code == 200
        data = response.json()
        assert data["per_diem"]["days"] == 0
        assert data["demurrage"]["breakdown"] == []
        assert data["total"] == "0.00"

    async def test_charges_after_lfd(self, client, created_shipment, clock):
        clock.advance(days=16)
        container_id = created_shipment["containers"][0]["id"]
        response = await client.get(f"{API}/containers/{container_id}/charges")
        data = response.json()
        assert data["demurrage"]["amount"] == "2300.00"
        assert data["lfd_warning_level"] == "overdue"
        assert len(data["demurrage"]["breakdown"]) == 3
