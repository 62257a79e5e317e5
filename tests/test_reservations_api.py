"""
Integration tests for the reservation lifecycle over HTTP
Diner books -> tables assigned -> payment captured -> reservation removed
"""

import pytest
from decimal import Decimal
from httpx import AsyncClient
import uuid

from dinebook.core.events import event_bus


API = "/api/v1"


@pytest.fixture
async def diner_id(client: AsyncClient) -> str:
    response = await client.post(
        f"{API}/diners/",
        json={"fname": "Grace", "lname": "Hopper", "email": "grace@example.com", "phone": "555-0111"}
    )
    assert response.status_code == 201
    return response.json()["id"]


@pytest.fixture
async def table_ids(client: AsyncClient) -> list[str]:
    ids = []
    for name in ("T1", "T2"):
        response = await client.post(f"{API}/tables/", json={"name": name, "capacity": 2})
        assert response.status_code == 201
        ids.append(response.json()["id"])
    return ids


@pytest.fixture
async def reservation_id(client: AsyncClient, diner_id: str) -> str:
    response = await client.post(
        f"{API}/reservations/",
        json={"diner_id": diner_id, "guests_count": 4, "date_reserved": "2026-12-24T20:00:00"}
    )
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "new"
    assert data["diner"]["id"] == diner_id
    return data["id"]


@pytest.fixture
def published():
    """Capture lifecycle events published by the API"""
    events = []

    async def record(event):
        events.append(event)

    for event_type in (
        "ReservationCreated", "ReservationTablesAssigned",
        "ReservationConfirmed", "ReservationRemoved"
    ):
        event_bus.subscribe(event_type, record)
    return events


@pytest.mark.asyncio
async def test_full_reservation_lifecycle(published, client: AsyncClient, diner_id, table_ids, reservation_id):
    # Assign tables
    response = await client.put(f"{API}/reservations/{reservation_id}/tables", json=table_ids)
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "pending"
    assert data["table_count"] == 2
    assert {table["id"] for table in data["tables"]} == set(table_ids)
    assert all(table["reservation_count"] == 1 for table in data["tables"])

    # Capture payment
    response = await client.post(
        f"{API}/reservations/{reservation_id}/payment",
        json={"charge_per_head": 25, "deposit_percentage": 0.2}
    )
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "confirmed"
    assert data["payment_id"] == reservation_id
    assert Decimal(data["payment"]["total_amount"]) == Decimal("100")
    assert Decimal(data["payment"]["deposit_fee"]) == Decimal("80")
    assert "guests_count" not in data["payment"]

    response = await client.get(f"{API}/payments/{reservation_id}")
    assert response.status_code == 200
    assert response.json()["guests_count"] == 4

    # Remove
    response = await client.delete(f"{API}/reservations/{reservation_id}")
    assert response.status_code == 200
    ack = response.json()
    assert ack["payment_removed"] is True
    assert set(ack["released_table_ids"]) == set(table_ids)

    response = await client.get(f"{API}/reservations/{reservation_id}")
    assert response.status_code == 404
    response = await client.get(f"{API}/payments/{reservation_id}")
    assert response.status_code == 404

    diner = (await client.get(f"{API}/diners/{diner_id}")).json()
    assert diner["reservation_count"] == 0
    for table_id in table_ids:
        table = (await client.get(f"{API}/tables/{table_id}")).json()
        assert table["reservation_count"] == 0

    assert [type(event).__name__ for event in published] == [
        "ReservationCreated",
        "ReservationTablesAssigned",
        "ReservationConfirmed",
        "ReservationRemoved",
    ]


@pytest.mark.asyncio
async def test_get_reservation_populates_relations(client: AsyncClient, table_ids, reservation_id):
    await client.put(f"{API}/reservations/{reservation_id}/tables", json=table_ids)

    response = await client.get(f"{API}/reservations/{reservation_id}")

    assert response.status_code == 200
    data = response.json()
    assert data["diner"]["fname"] == "Grace"
    assert "reservation_count" not in data["diner"]
    assert len(data["tables"]) == 2
    assert data["payment"] is None


@pytest.mark.asyncio
async def test_update_reservation_details(client: AsyncClient, reservation_id):
    response = await client.put(
        f"{API}/reservations/{reservation_id}",
        json={"guests_count": 6, "notes": "Window seat"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["guests_count"] == 6
    assert data["notes"] == "Window seat"
    assert data["diner"]["lname"] == "Hopper"


@pytest.mark.asyncio
async def test_update_reservation_rejects_lifecycle_fields(client: AsyncClient, reservation_id):
    response = await client.put(f"{API}/reservations/{reservation_id}", json={"status": "confirmed"})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_reservations_paginates(client: AsyncClient, diner_id):
    for day in range(1, 4):
        await client.post(
            f"{API}/reservations/",
            json={"diner_id": diner_id, "guests_count": 2, "date_reserved": f"2026-12-0{day}T19:00:00"}
        )

    response = await client.get(f"{API}/reservations/", params={"limit": 2})

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 3
    assert data["pages"] == 2
    assert [doc["date_reserved"][:10] for doc in data["docs"]] == ["2026-12-03", "2026-12-02"]
    assert data["docs"][0]["diner"]["id"] == diner_id


@pytest.mark.asyncio
async def test_list_reservations_rejects_unknown_sort(client: AsyncClient):
    response = await client.get(f"{API}/reservations/", params={"sort": "-payment"})

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_assign_empty_table_list(client: AsyncClient, reservation_id):
    response = await client.put(f"{API}/reservations/{reservation_id}/tables", json=[])

    assert response.status_code == 400
    assert "At least one table id" in response.json()["detail"]


@pytest.mark.asyncio
async def test_assign_unknown_table(client: AsyncClient, reservation_id):
    response = await client.put(f"{API}/reservations/{reservation_id}/tables", json=[str(uuid.uuid4())])

    assert response.status_code == 404
    reservation = (await client.get(f"{API}/reservations/{reservation_id}")).json()
    assert reservation["status"] == "new"


@pytest.mark.asyncio
async def test_payment_before_tables_conflicts(client: AsyncClient, reservation_id):
    response = await client.post(
        f"{API}/reservations/{reservation_id}/payment",
        json={"charge_per_head": 25, "deposit_percentage": 0.2}
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_payment_requires_pricing(client: AsyncClient, table_ids, reservation_id):
    await client.put(f"{API}/reservations/{reservation_id}/tables", json=table_ids)

    response = await client.post(f"{API}/reservations/{reservation_id}/payment", json={"deposit_percentage": 0.2})
    assert response.status_code == 422

    response = await client.post(
        f"{API}/reservations/{reservation_id}/payment",
        json={"charge_per_head": 25, "deposit_percentage": 0.2, "guests_count": 40}
    )
    assert response.status_code == 422

    reservation = (await client.get(f"{API}/reservations/{reservation_id}")).json()
    assert reservation["status"] == "pending"
    assert reservation["payment"] is None


@pytest.mark.asyncio
async def test_unknown_reservation_is_404(client: AsyncClient):
    missing = uuid.uuid4()

    assert (await client.get(f"{API}/reservations/{missing}")).status_code == 404
    assert (await client.delete(f"{API}/reservations/{missing}")).status_code == 404


@pytest.mark.asyncio
async def test_create_reservation_for_unknown_diner(client: AsyncClient):
    response = await client.post(
        f"{API}/reservations/",
        json={"diner_id": str(uuid.uuid4()), "guests_count": 2, "date_reserved": "2026-12-24T20:00:00"}
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_update_reservation_rejects_null_guests_count(client: AsyncClient, reservation_id):
    response = await client.put(f"{API}/reservations/{reservation_id}", json={"guests_count": None})

    assert response.status_code == 400
    assert "guests_count" in response.json()["detail"]

    response = await client.put(f"{API}/reservations/{reservation_id}", json={"notes": "Terrace"})
    assert response.status_code == 200
    assert response.json()["guests_count"] == 4
