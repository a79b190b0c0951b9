"""Tests for group booking endpoints."""

import uuid

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


def _member(room_number: str, name: str, email: str) -> dict:
    return {
        "guest_name": name,
        "guest_email": email,
        "room_number": room_number,
        "check_in": "2025-06-01",
        "check_out": "2025-06-04",
        "total_price": "300.00",
    }


async def _create_group(client: AsyncClient, headers: dict) -> dict:
    response = await client.post(
        "/api/v1/groups",
        json={
            "billing_contact": {"full_name": "Acme Travel", "email": "billing@acme.example"},
            "bookings": [
                _member("101", "Ann Lee", "ann@example.com"),
                _member("102", "Ben Ode", "ben@example.com"),
            ],
            "additional_charges": [{"description": "Welcome dinner", "amount": "80.00"}],
        },
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateGroup:
    async def test_create(self, client: AsyncClient, auth_headers: dict, rooms) -> None:
        data = await _create_group(client, auth_headers)

        assert data["group_reference"].startswith("GRP-")
        assert len(data["bookings"]) == 2
        primary, other = data["bookings"]
        assert primary["is_primary"] is True
        assert primary["additional_charges"] == [{"description": "Welcome dinner", "amount": "80.00"}]
        assert other["is_primary"] is False
        assert other["group_id"] == data["group_id"]

    async def test_empty_group_rejected(self, client: AsyncClient, auth_headers: dict) -> None:
        response = await client.post(
            "/api/v1/groups",
            json={"billing_contact": {"full_name": "Acme Travel"}, "bookings": []},
            headers=auth_headers,
        )
        assert response.status_code == 422


class TestMembers:
    async def test_add_member(self, client: AsyncClient, auth_headers: dict, rooms) -> None:
        group = await _create_group(client, auth_headers)

        response = await client.post(
            f"/api/v1/groups/{group['group_id']}/members",
            json=_member("201", "Cai Wu", "cai@example.com"),
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert response.json()["group_reference"] == group["group_reference"]
        assert response.json()["is_primary"] is False

    async def test_add_to_unknown_group(self, client: AsyncClient, auth_headers: dict, rooms) -> None:
        response = await client.post(
            f"/api/v1/groups/{uuid.uuid4()}/members",
            json=_member("201", "Cai Wu", "cai@example.com"),
            headers=auth_headers,
        )
        assert response.status_code == 404

    async def test_remove_primary(self, client: AsyncClient, auth_headers: dict, rooms) -> None:
        group = await _create_group(client, auth_headers)
        primary, other = group["bookings"]

        response = await client.delete(f"/api/v1/groups/members/{primary['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"remaining_count": 1, "new_primary_id": other["id"]}

    async def test_remove_last_member(self, client: AsyncClient, auth_headers: dict, rooms) -> None:
        group = await _create_group(client, auth_headers)
        primary, other = group["bookings"]
        await client.delete(f"/api/v1/groups/members/{primary['id']}", headers=auth_headers)

        response = await client.delete(f"/api/v1/groups/members/{other['id']}", headers=auth_headers)

        assert response.status_code == 409


class TestDeleteGroup:
    async def test_delete(self, client: AsyncClient, auth_headers: dict, rooms) -> None:
        group = await _create_group(client, auth_headers)

        response = await client.delete(f"/api/v1/groups/{group['group_id']}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"group_id": group["group_id"], "deleted": 2}

    async def test_delete_unknown(self, client: AsyncClient, auth_headers: dict) -> None:
        response = await client.delete(f"/api/v1/groups/{uuid.uuid4()}", headers=auth_headers)
        assert response.status_code == 404
