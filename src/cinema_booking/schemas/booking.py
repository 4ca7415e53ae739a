"""Pydantic schemas for Booking resources"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from cinema_booking.core import clock
from cinema_booking.models.booking import BookingStatus


class SeatSelection(BaseModel):
    """
    A seat chosen by the customer. Row, number and price are optional;
    a missing or zero price means the showtime price.
    """
    seat_id: str = Field(..., min_length=1, max_length=10)
    row: Optional[str] = Field(None, max_length=5)
    number: Optional[int] = Field(None, ge=1)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)

    @field_validator('seat_id')
    @classmethod
    def normalize_seat_id(cls, v: str) -> str:
        return v.strip().upper()


class CustomerInfo(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., max_length=255, pattern=r"^\S+@\S+\.\S+$")
    phone: str = Field(..., min_length=1, max_length=50)

    @field_validator('name', 'phone')
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class BookingCreate(BaseModel):
    showtime_id: int = Field(..., gt=0)
    seats: List[SeatSelection] = Field(..., min_length=1)
    customer_info: CustomerInfo


class BookingConfirm(BaseModel):
    transaction_id: Optional[str] = Field(None, max_length=100)


class BookingSeatResponse(BaseModel):
    seat_id: str
    row: str
    number: int
    price: Decimal

    class Config:
        from_attributes = True


class BookingResponse(BaseModel):
    id: int
    showtime_id: int
    movie_id: int
    screen_id: int
    customer_info: CustomerInfo
    seats: List[BookingSeatResponse] = Field(default_factory=list)
    total_amount: Decimal
    status: BookingStatus
    transaction_id: Optional[str] = None
    created_at: datetime
    expires_at: datetime
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    time_remaining_seconds: int = 0

    @classmethod
    def from_booking(cls, booking):
        """Convert Booking ORM model to response"""
        return cls(
            id=booking.id,
            showtime_id=booking.showtime_id,
            movie_id=booking.movie_id,
            screen_id=booking.screen_id,
            customer_info=CustomerInfo(
                name=booking.customer_name,
                email=booking.customer_email,
                phone=booking.customer_phone,
            ),
            seats=[BookingSeatResponse.model_validate(seat) for seat in booking.seats],
            total_amount=booking.total_amount,
            status=booking.status,
            transaction_id=booking.transaction_id,
            created_at=booking.created_at,
            expires_at=booking.expires_at,
            confirmed_at=booking.confirmed_at,
            cancelled_at=booking.cancelled_at,
            time_remaining_seconds=booking.time_remaining_seconds(clock.utcnow()),
        )


class BookingListResponse(BaseModel):
    bookings: List[BookingResponse]
    total: int
    page: int
    limit: int
    total_pages: int
