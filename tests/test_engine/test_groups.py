"""Tests for group bookings and primary-member hand-over."""

import uuid
from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio

from frontdesk.engine.errors import (
    CannotDelete,
    GroupNotFound,
    LastGroupMember,
    NotInGroup,
    RoomUnavailable,
)
from frontdesk.engine.records import CHECKED_IN, Charge, ContactInfo, Discount

pytestmark = pytest.mark.asyncio

BILLING = ContactInfo(full_name="Acme Travel", email="billing@acme.example", phone="+15550142")


@pytest_asyncio.fixture
async def group(engine, rooms, make_request, actor):
    """Three-room group; room 101 is primary and carries the charges and discount."""
    return await engine.create_group_booking(
        [
            make_request(room_number="101", name="Ann Lee", email="ann@example.com"),
            make_request(room_number="102", name="Ben Ode", email="ben@example.com"),
            make_request(room_number="201", name="Cai Wu", email="cai@example.com"),
        ],
        BILLING,
        actor,
        charges=[Charge(description="Conference room", amount=Decimal("150.00"))],
        discount=Discount(type="percentage", value=Decimal("10"), amount=Decimal("45.00")),
    )


class TestCreateGroup:
    async def test_members_share_group_and_reference(self, group):
        group_ids = {b.group_id for b in group}
        references = {b.group_reference for b in group}

        assert len(group_ids) == 1 and None not in group_ids
        assert len(references) == 1
        assert next(iter(references)).startswith("GRP-")

    async def test_first_member_is_primary_with_adjustments(self, group):
        primary, *others = group

        assert primary.is_primary is True
        assert primary.additional_charges == [{"description": "Conference room", "amount": "150.00"}]
        assert primary.discount["amount"] == "45.00"
        for member in others:
            assert member.is_primary is False
            assert member.additional_charges == []
            assert member.discount is None

    async def test_member_level_adjustments_are_ignored(self, engine, rooms, make_request, actor):
        members = await engine.create_group_booking(
            [
                make_request(room_number="101", name="Ann Lee", email="ann@example.com"),
                make_request(
                    room_number="102",
                    name="Ben Ode",
                    email="ben@example.com",
                    additional_charges=[Charge(description="Minibar", amount=Decimal("20.00"))],
                    discount=Discount(type="fixed", value=Decimal("5"), amount=Decimal("5.00")),
                ),
            ],
            BILLING,
            actor,
        )

        assert members[1].additional_charges == []
        assert members[1].discount is None

    async def test_every_member_has_billing_contact(self, group):
        for member in group:
            assert member.billing_contact["full_name"] == "Acme Travel"

    async def test_empty_group_rejected(self, engine, actor):
        with pytest.raises(ValueError):
            await engine.create_group_booking([], BILLING, actor)

    async def test_failure_keeps_members_created_so_far(self, engine, store, rooms, make_request, actor):
        await engine.create_booking(make_request(room_number="102", name="Zed", email="zed@example.com"), actor)

        with pytest.raises(RoomUnavailable):
            await engine.create_group_booking(
                [
                    make_request(room_number="101", name="Ann Lee", email="ann@example.com"),
                    make_request(room_number="102", name="Ben Ode", email="ben@example.com"),
                ],
                BILLING,
                actor,
            )
        grouped = [b for b in await store.bookings.list() if b.group_id is not None]
        assert len(grouped) == 1


class TestAddMember:
    async def test_joins_as_non_primary(self, engine, group, make_request, actor):
        added = await engine.add_to_group(
            group[0].group_id,
            make_request(
                room_number="101",
                name="Dee Ray",
                email="dee@example.com",
                check_in=date(2025, 3, 12),
                check_out=date(2025, 3, 14),
            ),
            actor,
        )

        assert added.group_id == group[0].group_id
        assert added.group_reference == group[0].group_reference
        assert added.is_primary is False
        assert added.billing_contact["email"] == "billing@acme.example"

    async def test_unknown_group(self, engine, rooms, make_request, actor):
        with pytest.raises(GroupNotFound):
            await engine.add_to_group(uuid.uuid4(), make_request(), actor)


class TestRemoveMember:
    async def test_removing_primary_hands_over(self, engine, store, group, actor):
        primary = group[0]

        result = await engine.remove_from_group(primary.id, actor)

        assert result.remaining_count == 2
        assert result.new_primary_id == group[1].id
        successor = await store.bookings.get(group[1].id)
        assert successor.is_primary is True
        assert successor.additional_charges == [{"description": "Conference room", "amount": "150.00"}]
        assert successor.discount["type"] == "percentage"
        assert primary.id not in store.bookings.rows

    async def test_exactly_one_primary_remains(self, engine, store, group, actor):
        await engine.remove_from_group(group[0].id, actor)

        members = await store.bookings.list(where={"group_id": group[0].group_id})
        assert sum(m.is_primary for m in members) == 1

    async def test_removing_non_primary(self, engine, store, group, actor):
        result = await engine.remove_from_group(group[2].id, actor)

        assert result.remaining_count == 2
        assert result.new_primary_id is None
        assert (await store.bookings.get(group[0].id)).is_primary is True

    async def test_handover_prefers_active_members(self, engine, store, group, actor):
        await engine.update_booking_status(group[1].id, "cancelled", actor)

        result = await engine.remove_from_group(group[0].id, actor)

        assert result.new_primary_id == group[2].id

    async def test_last_member_cannot_be_removed(self, engine, group, actor):
        await engine.remove_from_group(group[1].id, actor)
        await engine.remove_from_group(group[2].id, actor)

        with pytest.raises(LastGroupMember):
            await engine.remove_from_group(group[0].id, actor)

    async def test_checked_in_member_cannot_be_removed(self, engine, group, actor):
        await engine.update_booking_status(group[1].id, CHECKED_IN, actor)

        with pytest.raises(CannotDelete):
            await engine.remove_from_group(group[1].id, actor)

    async def test_booking_outside_group(self, engine, rooms, make_request, actor):
        single = await engine.create_booking(make_request(), actor)

        with pytest.raises(NotInGroup):
            await engine.remove_from_group(single.id, actor)


class TestDeleteGroup:
    async def test_deletes_every_member(self, engine, store, group, actor):
        deleted = await engine.delete_group(group[0].group_id, actor)

        assert deleted == 3
        assert store.bookings.rows == {}
        assert store.guests.rows == {}

    async def test_refused_while_member_checked_in(self, engine, store, group, actor):
        await engine.update_booking_status(group[2].id, CHECKED_IN, actor)

        with pytest.raises(CannotDelete):
            await engine.delete_group(group[0].group_id, actor)
        assert len(store.bookings.rows) == 3

    async def test_unknown_group(self, engine, actor):
        with pytest.raises(GroupNotFound):
            await engine.delete_group(uuid.uuid4(), actor)
