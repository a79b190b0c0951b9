"""Hotel reservation lifecycle engine."""

from frontdesk.engine.records import Actor, BookingRequest, BookingView, ContactInfo
from frontdesk.engine.service import BookingEngine

__all__ = ["Actor", "BookingEngine", "BookingRequest", "BookingView", "ContactInfo"]
