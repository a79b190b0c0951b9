"""Tests for availability, housekeeping, report and health endpoints."""

import uuid

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def _stay(client: AsyncClient, headers: dict) -> dict:
    """Book, check in and check out room 101; returns the booking."""
    response = await client.post(
        "/api/v1/bookings",
        json={
            "guest_name": "Jane Doe",
            "guest_email": "jane@example.com",
            "room_number": "101",
            "check_in": "2025-03-10",
            "check_out": "2025-03-12",
            "total_price": "200.00",
            "amount_paid": "200.00",
            "payment_status": "full",
            "payment_method": "mobile_money",
        },
        headers=headers,
    )
    booking = response.json()
    for status in ("checked-in", "checked-out"):
        await client.patch(f"/api/v1/bookings/{booking['id']}/status", json={"status": status}, headers=headers)
    return booking


class TestAvailableRooms:
    async def test_available(self, client: AsyncClient, auth_headers: dict, rooms) -> None:
        await client.post(
            "/api/v1/bookings",
            json={
                "guest_name": "Jane Doe",
                "guest_email": "jane@example.com",
                "room_number": "102",
                "check_in": "2025-03-10",
                "check_out": "2025-03-12",
            },
            headers=auth_headers,
        )

        response = await client.get(
            "/api/v1/rooms/available",
            params={"check_in": "2025-03-11", "check_out": "2025-03-12"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert [r["room_number"] for r in response.json()] == ["101", "201"]

    async def test_invalid_range(self, client: AsyncClient, auth_headers: dict, rooms) -> None:
        response = await client.get(
            "/api/v1/rooms/available",
            params={"check_in": "2025-03-12", "check_out": "2025-03-10"},
            headers=auth_headers,
        )
        assert response.status_code == 422

    async def test_requires_auth(self, client: AsyncClient) -> None:
        response = await client.get(
            "/api/v1/rooms/available", params={"check_in": "2025-03-10", "check_out": "2025-03-12"}
        )
        assert response.status_code in (401, 403)


class TestHousekeeping:
    async def test_complete_task(self, client: AsyncClient, auth_headers: dict, store, rooms) -> None:
        await _stay(client, auth_headers)

        pending = await client.get("/api/v1/housekeeping/tasks", params={"status": "pending"}, headers=auth_headers)
        assert len(pending.json()) == 1
        task = pending.json()[0]
        assert "Jane Doe" in task["notes"]

        response = await client.post(
            f"/api/v1/housekeeping/tasks/{task['id']}/complete",
            json={"notes": "Ready"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["status"] == "completed"
        assert (await store.rooms.get(rooms["101"].id)).status == "available"

    async def test_complete_unknown_task(self, client: AsyncClient, auth_headers: dict) -> None:
        response = await client.post(
            f"/api/v1/housekeeping/tasks/{uuid.uuid4()}/complete", json={}, headers=auth_headers
        )
        assert response.status_code == 404


class TestEndOfDayReport:
    async def test_report_for_day(self, client: AsyncClient, auth_headers: dict, rooms) -> None:
        await _stay(client, auth_headers)
        bookings = await client.get("/api/v1/bookings", headers=auth_headers)
        day = bookings.json()["items"][0]["created_at"][:10]

        response = await client.get("/api/v1/reports/end-of-day", params={"day": day}, headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["day"] == day
        assert data["total_bookings"] == 1
        # Checked-out stays are neither confirmed nor cancelled
        assert data["confirmed_bookings"] == 0
        assert float(data["payments"]["mobile_money"]) == 200.00

    async def test_report_defaults_to_today(self, client: AsyncClient, auth_headers: dict) -> None:
        response = await client.get("/api/v1/reports/end-of-day", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["total_bookings"] == 0


class TestHealth:
    async def test_health(self, client: AsyncClient) -> None:
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
