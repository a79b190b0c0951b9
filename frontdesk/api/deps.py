"""Shared API dependencies: a single import point for all routers.

Re-exports the engine and actor dependencies so that router modules can
import everything they need from one place::

    from frontdesk.api.deps import get_current_actor, get_engine
"""

from fastapi import Request

from frontdesk.auth.dependencies import get_current_actor
from frontdesk.engine.service import BookingEngine


def get_engine(request: Request) -> BookingEngine:
    """Return the engine built during application startup."""
    return request.app.state.engine


__all__ = [
    "get_current_actor",
    "get_engine",
]
