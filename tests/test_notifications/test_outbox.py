"""Tests for the notification outbox and the logging notifier."""

import uuid
from datetime import date
from decimal import Decimal

import pytest

from frontdesk.engine.records import Attachment, BookingRecord, GuestRecord, PaymentSummary, RoomRecord
from frontdesk.notifications.notifier import LoggingNotifier
from frontdesk.notifications.outbox import (
    BOOKING_CONFIRMATION,
    CHECK_IN,
    CHECK_OUT,
    NotificationOutbox,
    OutboundMessage,
)
from frontdesk.notifications.templates import render

pytestmark = pytest.mark.asyncio


def _message(kind: str = BOOKING_CONFIRMATION, **extra) -> OutboundMessage:
    guest = GuestRecord(id=uuid.uuid4(), name="Jane Doe", email="jane@example.com", slug="guest-jane")
    room = RoomRecord(id=uuid.uuid4(), room_number="101")
    booking = BookingRecord(
        id=uuid.uuid4(),
        guest_id=guest.id,
        room_id=room.id,
        check_in=date(2025, 3, 10),
        check_out=date(2025, 3, 12),
        total_price=Decimal("200.00"),
    )
    return OutboundMessage(kind=kind, guest=guest, room=room, booking=booking, **extra)


class FlakyNotifier(LoggingNotifier):
    """Fails the first ``failures`` sends of every kind."""

    def __init__(self, failures: int) -> None:
        super().__init__("Test Hotel")
        self.failures = failures
        self.calls = 0

    async def send_booking_confirmation(self, *args, **kwargs) -> None:
        self.calls += 1
        if self.calls <= self.failures:
            raise ConnectionError("gateway timeout")
        await super().send_booking_confirmation(*args, **kwargs)


class TestDelivery:
    async def test_delivers_each_kind(self, notifier, outbox):
        for kind in (BOOKING_CONFIRMATION, CHECK_IN, CHECK_OUT):
            outbox.enqueue(_message(kind))
        await outbox.drain()

        assert [n.kind for n in notifier.sent] == ["booking_confirmation", "check_in", "check_out"]
        assert outbox.delivered == 3
        assert outbox.pending_count == 0

    async def test_retries_until_success(self):
        notifier = FlakyNotifier(failures=2)
        outbox = NotificationOutbox(notifier, max_attempts=3, retry_delay=0)
        message = _message()

        outbox.enqueue(message)
        await outbox.drain()

        assert message.attempts == 3
        assert message.errors == ["gateway timeout", "gateway timeout"]
        assert len(notifier.sent) == 1
        assert outbox.dead_letters == []

    async def test_dead_letter_after_max_attempts(self):
        notifier = FlakyNotifier(failures=5)
        outbox = NotificationOutbox(notifier, max_attempts=2, retry_delay=0)

        outbox.enqueue(_message())
        await outbox.drain()

        assert notifier.sent == []
        assert len(outbox.dead_letters) == 1
        assert outbox.dead_letters[0].attempts == 2
        assert outbox.delivered == 0

    async def test_attachment_included(self, notifier, outbox):
        async def render_invoice():
            return Attachment(filename="invoice.pdf", content="JVBERi0=")

        outbox.enqueue(_message(CHECK_OUT, attachment_factory=render_invoice))
        await outbox.drain()

        assert notifier.sent[0].attachments == ["invoice.pdf"]

    async def test_attachment_failure_sends_without_it(self, notifier, outbox):
        async def broken():
            raise RuntimeError("renderer crashed")

        outbox.enqueue(_message(BOOKING_CONFIRMATION, attachment_factory=broken))
        await outbox.drain()

        assert len(notifier.sent) == 1
        assert notifier.sent[0].attachments == []

    async def test_unknown_kind_is_dead_lettered(self, notifier, outbox):
        outbox.enqueue(_message("newsletter"))
        await outbox.drain()

        assert notifier.sent == []
        assert len(outbox.dead_letters) == 1


class TestTemplates:
    async def test_payment_line(self, notifier):
        message = _message()
        await notifier.send_booking_confirmation(
            message.guest,
            message.room,
            message.booking,
            payment=PaymentSummary(amount_paid=Decimal("80"), payment_status="part", total_price=Decimal("200.00")),
        )

        assert "- Paid: 80 (part)" in notifier.sent[0].body

    async def test_no_payment_line_when_unpaid(self, notifier):
        message = _message()
        await notifier.send_booking_confirmation(message.guest, message.room, message.booking)

        assert "Paid:" not in notifier.sent[0].body

    async def test_unknown_template(self):
        with pytest.raises(KeyError):
            render("newsletter", hotel_name="Test Hotel")
