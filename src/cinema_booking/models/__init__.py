"""
SQLAlchemy Models for the Cinema Ticket Booking API

Import all models here for easy access and to ensure proper relationship setup.
"""
from cinema_booking.core.database import Base

from cinema_booking.models.movie import Movie
from cinema_booking.models.screen import Screen, ScreenSeat
from cinema_booking.models.showtime import Showtime
from cinema_booking.models.booking import Booking, BookingSeat, BookingStatus, ACTIVE_STATUSES
from cinema_booking.models.seat_hold import SeatHold

__all__ = [
    "Base",
    "Movie",
    "Screen",
    "ScreenSeat",
    "Showtime",
    "Booking",
    "BookingSeat",
    "BookingStatus",
    "ACTIVE_STATUSES",
    "SeatHold",
]
