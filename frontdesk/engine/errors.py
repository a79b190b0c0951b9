"""Engine error taxonomy.

Every error carries the HTTP status the API layer answers with; the message
is surfaced to callers verbatim.
"""

from collections.abc import Sequence


class BookingEngineError(Exception):
    """Base class for rule violations raised by the booking engine."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFound(BookingEngineError):
    status_code = 404


class InvalidDates(BookingEngineError):
    status_code = 422


class ResolutionFailed(BookingEngineError):
    """A guest or room identity could not be produced."""

    status_code = 422


class RoomUnavailable(BookingEngineError):
    """The requested dates overlap an active booking on the room."""

    status_code = 409

    def __init__(
        self,
        message: str = "Room is not available for the selected dates",
        conflicts: Sequence = (),
    ) -> None:
        super().__init__(message)
        self.conflicts = list(conflicts)


class AlreadyOccupied(BookingEngineError):
    status_code = 409


class InvalidTransition(BookingEngineError):
    status_code = 409


class CannotCheckOut(InvalidTransition):
    pass


class CannotDelete(BookingEngineError):
    status_code = 409


class DuplicateBooking(BookingEngineError):
    status_code = 409


class GroupNotFound(BookingEngineError):
    status_code = 404


class NotInGroup(BookingEngineError):
    status_code = 409


class LastGroupMember(BookingEngineError):
    status_code = 409
