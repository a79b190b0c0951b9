"""Identity resolution: natural keys (email, room number) to durable records.

Both resolvers are idempotent and race tolerant. When two callers create the
same guest or room concurrently, the loser's uniqueness violation is answered
by looking the winner up again.
"""

import logging
import re
import secrets
import time
import uuid

from frontdesk.config import Settings
from frontdesk.engine.errors import ResolutionFailed
from frontdesk.engine.ports import ConstraintViolation, Store
from frontdesk.engine.records import ROOM_AVAILABLE, ContactInfo, GuestRecord, RoomRecord

logger = logging.getLogger(__name__)

_SLUG_JUNK = re.compile(r"[^a-z0-9]+")


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def guest_slug(email: str, name: str) -> str:
    """Deterministic slug from the normalized email, else the name."""
    base = (email or name or "guest").lower()
    slug = _SLUG_JUNK.sub("-", base).strip("-")
    return f"guest-{slug or 'guest'}"


class IdentityResolver:
    """Resolves guests by email/slug and rooms by room number."""

    def __init__(self, store: Store, settings: Settings) -> None:
        self._store = store
        self._settings = settings

    # ------------------------------------------------------------------
    # Guests
    # ------------------------------------------------------------------

    async def find_guest(self, email: str, slug: str | None = None) -> GuestRecord | None:
        """Look a guest up by normalized email, then by slug."""
        if email:
            found = await self._store.guests.list(where={"email": email}, limit=1)
            if found:
                return found[0]
        if slug:
            found = await self._store.guests.list(where={"slug": slug}, limit=1)
            if found:
                return found[0]
        return None

    async def resolve_guest(self, details: ContactInfo) -> uuid.UUID:
        """Return the id of the guest identified by ``details``, creating it if needed."""
        guest_id, _ = await self.resolve_or_create_guest(details)
        return guest_id

    async def resolve_or_create_guest(self, details: ContactInfo) -> tuple[uuid.UUID, bool]:
        """Like :meth:`resolve_guest`, also reporting whether this call created the record.

        Falls back to a placeholder guest when lookup and creation both fail
        and ``allow_placeholder_guests`` is enabled.
        """
        email = normalize_email(details.email)
        name = details.full_name.strip() or "Guest"
        slug = guest_slug(email, name)

        try:
            existing = await self.find_guest(email, slug)
            if existing is not None:
                await self._refresh_guest(existing, details, name)
                return existing.id, False

            try:
                created = await self._store.guests.create(
                    {
                        "name": name,
                        "email": email or f"{slug}@{self._settings.placeholder_email_domain}",
                        "slug": slug,
                        "phone": details.phone,
                        "address": details.address,
                    }
                )
            except ConstraintViolation:
                winner = await self.find_guest(email, slug)
                if winner is None:
                    raise
                logger.info("Guest %s was created concurrently, using %s", slug, winner.id)
                return winner.id, False
            logger.info("Created guest %s (%s)", created.id, slug)
            return created.id, True
        except Exception:
            logger.exception("Guest resolution failed for %s", slug)

        return await self._placeholder_guest(details, name, email)

    async def _refresh_guest(self, guest: GuestRecord, details: ContactInfo, name: str) -> None:
        changes = {}
        if name != guest.name and details.full_name.strip():
            changes["name"] = name
        if details.phone and details.phone != guest.phone:
            changes["phone"] = details.phone
        if details.address and details.address != guest.address:
            changes["address"] = details.address
        if not changes:
            return
        try:
            await self._store.guests.update(guest.id, changes)
        except Exception as exc:
            logger.warning("Guest %s update failed (non-critical): %s", guest.id, exc)

    async def _placeholder_guest(self, details: ContactInfo, name: str, email: str) -> tuple[uuid.UUID, bool]:
        if not self._settings.allow_placeholder_guests:
            raise ResolutionFailed("Failed to resolve or create guest record")

        slug = f"guest-{int(time.time() * 1000)}-{secrets.token_hex(3)}"
        logger.warning("Creating placeholder guest %s for %r", slug, email or name)
        try:
            created = await self._store.guests.create(
                {
                    "name": name,
                    "email": email or f"{slug}@{self._settings.placeholder_email_domain}",
                    "slug": slug,
                    "phone": details.phone,
                    "address": details.address,
                    "is_placeholder": True,
                }
            )
        except ConstraintViolation as exc:
            winner = await self.find_guest(email)
            if winner is None:
                raise ResolutionFailed("Failed to resolve or create guest record") from exc
            return winner.id, False
        except Exception as exc:
            raise ResolutionFailed("Failed to resolve or create guest record") from exc
        return created.id, True

    # ------------------------------------------------------------------
    # Rooms
    # ------------------------------------------------------------------

    async def find_room(self, room_number: str) -> RoomRecord | None:
        found = await self._store.rooms.list(where={"room_number": room_number}, limit=1)
        return found[0] if found else None

    async def resolve_room(self, room_number: str, room_type_hint: str | None = None) -> RoomRecord:
        """Return the room with ``room_number``, synthesizing it from the property catalogue if missing."""
        room = await self.find_room(room_number)
        if room is not None:
            return room

        logger.warning("Room %s not in rooms, resolving from properties", room_number)
        properties = await self._store.properties.list(where={"room_number": room_number}, limit=1)
        if not properties:
            raise ResolutionFailed(f"Room not found for number: {room_number}")
        prop = properties[0]

        room_type_id = prop.property_type_id
        if room_type_id is None and room_type_hint:
            room_types = await self._store.room_types.list(where={"name": room_type_hint}, limit=1)
            if room_types:
                room_type_id = room_types[0].id
        if room_type_id is None:
            raise ResolutionFailed(f"Unable to resolve room type for room {room_number}")

        try:
            room = await self._store.rooms.create(
                {
                    "room_number": room_number,
                    "room_type_id": room_type_id,
                    "status": ROOM_AVAILABLE,
                    "price": prop.base_price,
                }
            )
        except ConstraintViolation as exc:
            room = await self.find_room(room_number)
            if room is None:
                raise ResolutionFailed(f"Room not found for number: {room_number}") from exc
            return room

        logger.info("Created room %s from property %s", room.id, prop.id)
        return room
