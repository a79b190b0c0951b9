"""Tests for guest and room identity resolution."""

import asyncio
from decimal import Decimal

import pytest

from frontdesk.config import Settings
from frontdesk.engine.errors import ResolutionFailed
from frontdesk.engine.identity import IdentityResolver
from frontdesk.engine.records import ContactInfo

pytestmark = pytest.mark.asyncio


@pytest.fixture
def resolver(store, test_settings) -> IdentityResolver:
    return IdentityResolver(store, test_settings)


class TestResolveGuest:
    async def test_creates_guest_with_normalized_email(self, resolver, store):
        guest_id = await resolver.resolve_guest(ContactInfo(full_name="Jane Doe", email=" Jane@Example.com"))

        guest = await store.guests.get(guest_id)
        assert guest.email == "jane@example.com"
        assert guest.slug == "guest-jane-example-com"
        assert guest.is_placeholder is False

    async def test_second_resolution_returns_same_guest(self, resolver, store):
        first = await resolver.resolve_guest(ContactInfo(full_name="Jane Doe", email="jane@example.com"))
        second = await resolver.resolve_guest(
            ContactInfo(full_name="Jane Doe", email="JANE@example.com", phone="+15550199")
        )

        assert first == second
        assert len(store.guests.rows) == 1
        guest = await store.guests.get(first)
        assert guest.phone == "+15550199"

    async def test_reports_whether_guest_was_created(self, resolver):
        details = ContactInfo(full_name="Jane Doe", email="jane@example.com")

        first_id, first_created = await resolver.resolve_or_create_guest(details)
        second_id, second_created = await resolver.resolve_or_create_guest(details)

        assert first_created is True
        assert second_created is False
        assert first_id == second_id

    async def test_guest_without_email_gets_local_address(self, resolver, store):
        guest_id = await resolver.resolve_guest(ContactInfo(full_name="Walk In"))

        guest = await store.guests.get(guest_id)
        assert guest.email == "guest-walk-in@guest.local"

    async def test_concurrent_resolution_yields_one_guest(self, resolver, store):
        details = ContactInfo(full_name="Jane Doe", email="jane@example.com")

        ids = await asyncio.gather(*(resolver.resolve_guest(details) for _ in range(5)))

        assert len(set(ids)) == 1
        assert len(store.guests.rows) == 1

    async def test_refresh_failure_is_ignored(self, resolver, store, monkeypatch):
        guest_id = await resolver.resolve_guest(ContactInfo(full_name="Jane Doe", email="jane@example.com"))

        async def broken_update(record_id, changes):
            raise RuntimeError("write refused")

        monkeypatch.setattr(store.guests, "update", broken_update)
        again = await resolver.resolve_guest(
            ContactInfo(full_name="Jane D.", email="jane@example.com", phone="+1000")
        )
        assert again == guest_id

    async def test_placeholder_when_lookup_fails(self, resolver, store, monkeypatch):
        async def broken_list(*args, **kwargs):
            raise RuntimeError("store unavailable")

        monkeypatch.setattr(store.guests, "list", broken_list)
        guest_id = await resolver.resolve_guest(ContactInfo(full_name="Jane Doe", email="jane@example.com"))

        guest = await store.guests.get(guest_id)
        assert guest.is_placeholder is True
        assert guest.slug.startswith("guest-")
        assert guest.email == "jane@example.com"

    async def test_no_placeholder_when_disabled(self, store, monkeypatch):
        resolver = IdentityResolver(store, Settings(allow_placeholder_guests=False))

        async def broken_list(*args, **kwargs):
            raise RuntimeError("store unavailable")

        monkeypatch.setattr(store.guests, "list", broken_list)
        with pytest.raises(ResolutionFailed):
            await resolver.resolve_guest(ContactInfo(full_name="Jane Doe", email="jane@example.com"))
        assert store.guests.rows == {}


class TestResolveRoom:
    async def test_existing_room(self, resolver, rooms):
        room = await resolver.resolve_room("101")
        assert room.id == rooms["101"].id

    async def test_room_synthesized_from_catalogue(self, resolver, store, rooms, room_types):
        room = await resolver.resolve_room("301")

        assert room.room_number == "301"
        assert room.room_type_id == room_types["Suite"].id
        assert room.status == "available"
        assert room.price == Decimal("260.00")
        assert len(await store.rooms.list(where={"room_number": "301"})) == 1

    async def test_room_type_from_hint(self, resolver, store, room_types):
        await store.properties.create({"room_number": "401", "base_price": Decimal("90")})

        room = await resolver.resolve_room("401", room_type_hint="Standard")

        assert room.room_type_id == room_types["Standard"].id

    async def test_catalogue_record_without_type_fails(self, resolver, store):
        await store.properties.create({"room_number": "401"})

        with pytest.raises(ResolutionFailed):
            await resolver.resolve_room("401")

    async def test_unknown_room_fails(self, resolver, rooms):
        with pytest.raises(ResolutionFailed, match="999"):
            await resolver.resolve_room("999")

    async def test_concurrent_synthesis_yields_one_room(self, resolver, store, rooms):
        resolved = await asyncio.gather(*(resolver.resolve_room("301") for _ in range(4)))

        assert len({r.id for r in resolved}) == 1
        assert len(await store.rooms.list(where={"room_number": "301"})) == 1
