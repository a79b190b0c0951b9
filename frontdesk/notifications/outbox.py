"""Outbound notification queue.

Lifecycle transitions enqueue messages and return immediately; delivery runs
as tasks on the event loop with bounded retry. A message that exhausts its
attempts lands in ``dead_letters`` so it can be inspected or replayed.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from frontdesk.engine.ports import NotificationPort
from frontdesk.engine.records import (
    Attachment,
    BookingRecord,
    GuestRecord,
    PaymentSummary,
    RoomRecord,
)

logger = logging.getLogger(__name__)

BOOKING_CONFIRMATION = "booking_confirmation"
CHECK_IN = "check_in"
CHECK_OUT = "check_out"


@dataclass
class OutboundMessage:
    kind: str
    guest: GuestRecord
    room: RoomRecord
    booking: BookingRecord
    payment: PaymentSummary | None = None
    # Rendered inside the delivery task so slow PDF work never blocks a transition
    attachment_factory: Callable[[], Awaitable[Attachment]] | None = None
    attempts: int = 0
    errors: list[str] = field(default_factory=list)


class NotificationOutbox:
    def __init__(
        self,
        notifier: NotificationPort,
        max_attempts: int = 3,
        retry_delay: float = 0.5,
    ) -> None:
        self._notifier = notifier
        self._max_attempts = max_attempts
        self._retry_delay = retry_delay
        self._pending: set[asyncio.Task] = set()
        self.delivered = 0
        self.dead_letters: list[OutboundMessage] = []

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def enqueue(self, message: OutboundMessage) -> None:
        """Schedule delivery of ``message`` without waiting for it."""
        task = asyncio.get_running_loop().create_task(self._deliver(message))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        logger.debug("Queued %s notification for booking %s", message.kind, message.booking.id)

    async def drain(self) -> None:
        """Wait until every queued message was delivered or dead-lettered."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _attachments(self, message: OutboundMessage) -> list[Attachment] | None:
        if message.attachment_factory is None:
            return None
        try:
            return [await message.attachment_factory()]
        except Exception:
            logger.exception("Attachment rendering failed for booking %s, sending without it", message.booking.id)
            return None

    async def _send(self, message: OutboundMessage, attachments: list[Attachment] | None) -> None:
        if message.kind == BOOKING_CONFIRMATION:
            await self._notifier.send_booking_confirmation(
                message.guest, message.room, message.booking, attachments, message.payment
            )
        elif message.kind == CHECK_IN:
            await self._notifier.send_check_in_notification(message.guest, message.room, message.booking)
        elif message.kind == CHECK_OUT:
            await self._notifier.send_check_out_notification(
                message.guest, message.room, message.booking, attachments
            )
        else:
            raise ValueError(f"Unknown notification kind {message.kind!r}")

    async def _deliver(self, message: OutboundMessage) -> None:
        attachments = await self._attachments(message)
        while True:
            message.attempts += 1
            try:
                await self._send(message, attachments)
            except Exception as exc:
                message.errors.append(str(exc))
                if message.attempts >= self._max_attempts:
                    logger.error(
                        "Giving up on %s notification for booking %s after %d attempts: %s",
                        message.kind,
                        message.booking.id,
                        message.attempts,
                        exc,
                    )
                    self.dead_letters.append(message)
                    return
                logger.warning(
                    "%s notification for booking %s failed (attempt %d): %s",
                    message.kind,
                    message.booking.id,
                    message.attempts,
                    exc,
                )
                await asyncio.sleep(self._retry_delay * message.attempts)
                continue

            self.delivered += 1
            logger.info("Delivered %s notification for booking %s", message.kind, message.booking.id)
            return
