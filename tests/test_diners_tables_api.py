"""
Integration tests for diner and table endpoints
"""

import pytest
from httpx import AsyncClient
import uuid


API = "/api/v1"


@pytest.mark.asyncio
async def test_create_and_get_diner(client: AsyncClient):
    response = await client.post(
        f"{API}/diners/",
        json={"fname": "Alan", "lname": "Turing", "email": "alan@example.com"}
    )
    assert response.status_code == 201
    diner = response.json()
    assert diner["reservation_count"] == 0

    response = await client.get(f"{API}/diners/{diner['id']}")
    assert response.status_code == 200
    assert response.json()["email"] == "alan@example.com"


@pytest.mark.asyncio
async def test_create_diner_rejects_bad_email(client: AsyncClient):
    response = await client.post(
        f"{API}/diners/",
        json={"fname": "Alan", "lname": "Turing", "email": "not-an-email"}
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_update_diner(client: AsyncClient):
    diner = (await client.post(
        f"{API}/diners/",
        json={"fname": "Alan", "lname": "Turing", "email": "alan@example.com"}
    )).json()

    response = await client.put(f"{API}/diners/{diner['id']}", json={"phone": "555-0142"})

    assert response.status_code == 200
    assert response.json()["phone"] == "555-0142"
    assert response.json()["updated_at"] is not None


@pytest.mark.asyncio
async def test_list_diners_sorted(client: AsyncClient):
    for lname in ("Zuse", "Babbage", "Knuth"):
        await client.post(
            f"{API}/diners/",
            json={"fname": "X", "lname": lname, "email": f"{lname.lower()}@example.com"}
        )

    response = await client.get(f"{API}/diners/")

    assert response.status_code == 200
    assert [doc["lname"] for doc in response.json()["docs"]] == ["Babbage", "Knuth", "Zuse"]


@pytest.mark.asyncio
async def test_missing_diner(client: AsyncClient):
    response = await client.get(f"{API}/diners/{uuid.uuid4()}")

    assert response.status_code == 404
    assert "not found" in response.json()["detail"]


@pytest.mark.asyncio
async def test_table_crud(client: AsyncClient):
    response = await client.post(f"{API}/tables/", json={"name": "B4", "capacity": 6, "description": "Booth"})
    assert response.status_code == 201
    table = response.json()
    assert table["reservation_count"] == 0
    assert table["is_active"] is True

    response = await client.put(f"{API}/tables/{table['id']}", json={"is_active": False})
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    response = await client.get(f"{API}/tables/", params={"active_only": True})
    assert response.json()["total"] == 0

    response = await client.get(f"{API}/tables/")
    assert response.json()["total"] == 1


@pytest.mark.asyncio
async def test_table_capacity_must_be_positive(client: AsyncClient):
    response = await client.post(f"{API}/tables/", json={"name": "B5", "capacity": 0})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_update_diner_rejects_null_email(client: AsyncClient):
    diner = (await client.post(
        f"{API}/diners/",
        json={"fname": "Alan", "lname": "Turing", "email": "alan@example.com"}
    )).json()

    response = await client.put(f"{API}/diners/{diner['id']}", json={"email": None})

    assert response.status_code == 400
    assert (await client.get(f"{API}/diners/{diner['id']}")).json()["email"] == "alan@example.com"


@pytest.mark.asyncio
async def test_update_table_rejects_null_name(client: AsyncClient):
    table = (await client.post(f"{API}/tables/", json={"name": "B6", "capacity": 4})).json()

    response = await client.put(f"{API}/tables/{table['id']}", json={"name": None})

    assert response.status_code == 400
