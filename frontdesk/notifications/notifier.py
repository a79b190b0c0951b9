"""Notification port implementation that renders templates and logs a simulated send."""

import logging
from dataclasses import dataclass, field

from frontdesk.engine.records import (
    Attachment,
    BookingRecord,
    GuestRecord,
    PaymentSummary,
    RoomRecord,
)
from frontdesk.notifications.templates import render

logger = logging.getLogger(__name__)


@dataclass
class SentNotification:
    kind: str
    recipient_name: str
    recipient_email: str
    subject: str
    body: str
    attachments: list[str] = field(default_factory=list)


class LoggingNotifier:
    """Composes guest emails and logs them instead of handing them to a gateway.

    Every composed message is kept on ``sent`` for inspection.
    """

    def __init__(self, hotel_name: str) -> None:
        self.hotel_name = hotel_name
        self.sent: list[SentNotification] = []

    def _send(
        self,
        kind: str,
        guest: GuestRecord,
        room: RoomRecord,
        booking: BookingRecord,
        attachments: list[Attachment] | None = None,
        payment_line: str = "",
    ) -> SentNotification:
        subject, body = render(
            kind,
            hotel_name=self.hotel_name,
            guest_name=guest.name,
            room_number=room.room_number,
            check_in=booking.check_in.isoformat(),
            check_out=booking.check_out.isoformat(),
            num_guests=str(booking.num_guests),
            total_price=str(booking.total_price),
            payment_line=payment_line,
        )
        message = SentNotification(
            kind=kind,
            recipient_name=guest.name,
            recipient_email=guest.email,
            subject=subject,
            body=body,
            attachments=[a.filename for a in attachments or []],
        )
        self.sent.append(message)
        logger.info("Notification sent [%s] to %s <%s>: %s", kind, guest.name, guest.email, subject)
        return message

    async def send_booking_confirmation(
        self,
        guest: GuestRecord,
        room: RoomRecord,
        booking: BookingRecord,
        attachments: list[Attachment] | None = None,
        payment: PaymentSummary | None = None,
    ) -> None:
        payment_line = ""
        if payment is not None and payment.amount_paid > 0:
            payment_line = f"- Paid: {payment.amount_paid} ({payment.payment_status})\n"
        self._send("booking_confirmation", guest, room, booking, attachments, payment_line)

    async def send_check_in_notification(
        self,
        guest: GuestRecord,
        room: RoomRecord,
        booking: BookingRecord,
    ) -> None:
        self._send("check_in", guest, room, booking)

    async def send_check_out_notification(
        self,
        guest: GuestRecord,
        room: RoomRecord,
        booking: BookingRecord,
        attachments: list[Attachment] | None = None,
    ) -> None:
        self._send("check_out", guest, room, booking, attachments)
