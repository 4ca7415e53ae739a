"""
Booking domain errors

Route handlers translate these into HTTP responses; anything else that
escapes a service is an infrastructure failure.
"""
from typing import Iterable, List


class BookingServiceError(Exception):
    """Base exception for booking service errors"""
    pass


class BookingValidationError(BookingServiceError):
    """Raised when a request is malformed (no seats, unknown seats, too many seats)"""
    pass


class SeatConflictError(BookingServiceError):
    """Raised when requested seats are held by another active booking"""

    def __init__(self, seat_ids: Iterable[str]):
        self.seat_ids: List[str] = sorted(set(seat_ids))
        if self.seat_ids:
            message = f"Seats {', '.join(self.seat_ids)} are already booked"
        else:
            message = "Seat availability changed while booking, please try again"
        super().__init__(message)


class ShowtimeNotFoundError(BookingServiceError):
    """Raised when showtime doesn't exist"""
    pass


class BookingNotFoundError(BookingServiceError):
    """Raised when booking doesn't exist"""
    pass


class BookingAlreadyConfirmedError(BookingServiceError):
    """Raised when confirming a booking twice"""
    pass


class BookingAlreadyCancelledError(BookingServiceError):
    """Raised when cancelling a booking twice"""
    pass


class BookingExpiredError(BookingServiceError):
    """Raised when the hold lapsed before the operation"""
    pass


class BookingStateError(BookingServiceError):
    """Raised when the booking's status does not allow the transition"""
    pass
