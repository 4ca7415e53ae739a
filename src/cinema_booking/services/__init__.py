"""
Services package exports
"""
from cinema_booking.services.errors import (
    BookingServiceError,
    BookingValidationError,
    SeatConflictError,
    ShowtimeNotFoundError,
    BookingNotFoundError,
    BookingAlreadyConfirmedError,
    BookingAlreadyCancelledError,
    BookingExpiredError,
    BookingStateError,
)
from cinema_booking.services.booking_service import BookingService
from cinema_booking.services.catalog_service import CatalogService
from cinema_booking.services.seat_availability import SeatAvailabilityService
from cinema_booking.services.expiry_sweeper import start_expiry_worker, stop_expiry_worker

__all__ = [
    "BookingService",
    "CatalogService",
    "SeatAvailabilityService",
    "BookingServiceError",
    "BookingValidationError",
    "SeatConflictError",
    "ShowtimeNotFoundError",
    "BookingNotFoundError",
    "BookingAlreadyConfirmedError",
    "BookingAlreadyCancelledError",
    "BookingExpiredError",
    "BookingStateError",
    "start_expiry_worker",
    "stop_expiry_worker",
]
