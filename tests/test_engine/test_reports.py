"""Tests for canonical listings, conflict handling and the end-of-day report."""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from frontdesk.config import Settings
from frontdesk.engine.errors import InvalidDates, InvalidTransition, NotFound
from frontdesk.engine.records import CHECKED_IN
from frontdesk.engine.service import BookingEngine
from frontdesk.storage.memory import InMemoryStore

pytestmark = pytest.mark.asyncio

REPORT_DAY = date(2025, 3, 1)


def _fixed_clock():
    return datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


async def _raw_booking(store, guest, room, status="confirmed", **extra):
    return await store.bookings.create(
        {
            "guest_id": guest.id,
            "room_id": room.id,
            "check_in": date(2025, 3, 10),
            "check_out": date(2025, 3, 12),
            "status": status,
            **extra,
        }
    )


class TestCanonicalListing:
    async def test_duplicates_collapse_to_most_advanced(self, engine, store, rooms, make_request, actor):
        view = await engine.create_booking(make_request(), actor)
        await engine.update_booking_status(view.id, "cancelled", actor)
        guest = await store.guests.get(view.guest_id)
        keeper = await _raw_booking(store, guest, rooms["101"], status="reserved")

        listed = await engine.get_all_bookings()

        assert [b.id for b in listed] == [keeper.id]

    async def test_newest_first(self, engine, rooms, make_request, actor):
        first = await engine.create_booking(make_request(), actor)
        second = await engine.create_booking(make_request(room_number="102"), actor)

        listed = await engine.get_all_bookings()

        assert [b.id for b in listed] == [second.id, first.id]

    async def test_filter_by_status(self, engine, rooms, make_request, actor):
        first = await engine.create_booking(make_request(), actor)
        await engine.create_booking(make_request(room_number="102", status="reserved"), actor)

        confirmed = await engine.get_bookings_by_status("confirmed")

        assert [b.id for b in confirmed] == [first.id]

    async def test_filter_by_unknown_status(self, engine):
        with pytest.raises(InvalidTransition):
            await engine.get_bookings_by_status("lost")


class TestConflicts:
    async def _double_booked(self, store, rooms):
        ann = await store.guests.create({"name": "Ann", "email": "ann@example.com", "slug": "guest-ann"})
        ben = await store.guests.create({"name": "Ben", "email": "ben@example.com", "slug": "guest-ben"})
        # Written around the overlap guard, as legacy imports could
        first = await _raw_booking(store, ann, rooms["101"])
        second = await _raw_booking(store, ben, rooms["102"])
        store.bookings.rows[second.id]["room_id"] = rooms["101"].id
        return first, second

    async def test_lists_each_conflicted_booking_once(self, engine, store, rooms):
        first, second = await self._double_booked(store, rooms)

        conflicted = await engine.get_conflicted_bookings()

        assert {b.id for b in conflicted} == {first.id, second.id}
        assert all(b.conflict for b in conflicted)

    async def test_resolve_cancels_the_loser(self, engine, store, rooms, actor):
        first, second = await self._double_booked(store, rooms)

        cancelled = await engine.resolve_conflict(first.id, second.id, actor)

        assert cancelled.status == "cancelled"
        assert await engine.get_conflicted_bookings() == []

    async def test_resolve_same_booking(self, engine, store, rooms, actor):
        first, _ = await self._double_booked(store, rooms)

        with pytest.raises(InvalidTransition):
            await engine.resolve_conflict(first.id, first.id, actor)

    async def test_resolve_missing_booking(self, engine, store, rooms, actor):
        first, _ = await self._double_booked(store, rooms)

        with pytest.raises(NotFound):
            await engine.resolve_conflict(first.id, uuid.uuid4(), actor)


class TestAvailability:
    async def test_invalid_range(self, engine, rooms):
        with pytest.raises(InvalidDates):
            await engine.find_available_rooms(date(2025, 3, 12), date(2025, 3, 12))

    async def test_lists_free_rooms(self, engine, rooms, make_request, actor):
        await engine.create_booking(make_request(), actor)

        available = await engine.find_available_rooms(date(2025, 3, 11), date(2025, 3, 13))

        assert [r.room_number for r in available] == ["102", "201"]


class TestEndOfDayReport:
    @pytest.fixture
    def store(self):
        return InMemoryStore(clock=_fixed_clock)

    @pytest.fixture
    def engine(self, store, test_settings: Settings, outbox):
        return BookingEngine(store, test_settings, outbox, clock=_fixed_clock)

    async def test_counts_and_revenue(self, engine, rooms, make_request, actor):
        await engine.create_booking(
            make_request(amount_paid=Decimal("200.00"), payment_status="full", payment_method="card"),
            actor,
        )
        in_house = await engine.create_booking(
            make_request(
                room_number="102",
                name="John Roe",
                email="john@example.com",
                total_price=Decimal("300.00"),
                amount_paid=Decimal("120.00"),
                payment_status="part",
                payment_method="cash",
            ),
            actor,
        )
        await engine.update_booking_status(in_house.id, CHECKED_IN, actor)
        cancelled = await engine.create_booking(
            make_request(room_number="201", status="reserved", name="Ann", email="ann@example.com"), actor
        )
        await engine.update_booking_status(cancelled.id, "cancelled", actor)

        report = await engine.get_end_of_day_report(REPORT_DAY)

        assert report.day == REPORT_DAY
        assert report.total_bookings == 3
        assert report.confirmed_bookings == 2
        assert report.cancelled_bookings == 1
        assert report.revenue == Decimal("500.00")
        assert report.payments.card == Decimal("200.00")
        assert report.payments.cash == Decimal("120.00")
        assert report.payments.mobile_money == Decimal("0")
        assert report.conflicts == 0

    async def test_other_days_excluded(self, engine, rooms, make_request, actor):
        await engine.create_booking(make_request(), actor)

        report = await engine.get_end_of_day_report(date(2025, 3, 2))

        assert report.total_bookings == 0
        assert report.revenue == Decimal("0")
