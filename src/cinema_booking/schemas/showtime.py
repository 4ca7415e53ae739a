"""
Pydantic schemas for showtime seat availability
"""
import datetime
from decimal import Decimal
from typing import List

from pydantic import BaseModel, Field


class OccupiedSeatsResponse(BaseModel):
    """Seat ids that a new booking cannot select"""
    showtime_id: int
    occupied_seats: List[str] = Field(default_factory=list)


class SeatMapSeat(BaseModel):
    seat_id: str
    row: str
    number: int
    seat_type: str
    status: str = Field(..., description="available or occupied")


class SeatMapResponse(BaseModel):
    """Screen layout with per-seat availability for one showtime"""
    showtime_id: int
    movie_id: int
    screen_id: int
    date: datetime.date
    time: str
    price: Decimal
    total_seats: int
    available_seats: int
    seats: List[SeatMapSeat]

    # Rows in layout order for easier frontend rendering
    rows: dict[str, List[SeatMapSeat]] = Field(default_factory=dict)


class ReconcileResponse(BaseModel):
    showtime_id: int
    previous_available_seats: int
    actual_available_seats: int
    drift: int
