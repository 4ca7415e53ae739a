"""
Pydantic schemas for API request/response validation
"""
from cinema_booking.schemas.showtime import (
    OccupiedSeatsResponse,
    SeatMapSeat,
    SeatMapResponse,
    ReconcileResponse,
)
from cinema_booking.schemas.booking import (
    SeatSelection,
    CustomerInfo,
    BookingCreate,
    BookingConfirm,
    BookingSeatResponse,
    BookingResponse,
    BookingListResponse,
)

__all__ = [
    # Showtimes
    "OccupiedSeatsResponse",
    "SeatMapSeat",
    "SeatMapResponse",
    "ReconcileResponse",
    # Bookings
    "SeatSelection",
    "CustomerInfo",
    "BookingCreate",
    "BookingConfirm",
    "BookingSeatResponse",
    "BookingResponse",
    "BookingListResponse",
]
