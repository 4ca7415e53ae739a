"""
Booking model - seat reservations with pending/confirm flow
"""
from datetime import datetime, timedelta
from enum import Enum as PyEnum
from typing import List

from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey, Enum, Index, UniqueConstraint
from sqlalchemy.orm import relationship

from cinema_booking.core import clock
from cinema_booking.core.database import Base


class BookingStatus(PyEnum):
    """Enum for booking status"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


# Statuses that count against seat availability
ACTIVE_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        Index('ix_bookings_showtime_status', 'showtime_id', 'status'),
        Index('ix_bookings_customer_created', 'customer_email', 'created_at'),
    )

    id = Column(Integer, primary_key=True, index=True)
    showtime_id = Column(Integer, ForeignKey("showtimes.id", ondelete="CASCADE"), nullable=False)
    movie_id = Column(Integer, ForeignKey("movies.id", ondelete="CASCADE"), nullable=False)
    screen_id = Column(Integer, ForeignKey("screens.id", ondelete="CASCADE"), nullable=False)
    customer_name = Column(String(200), nullable=False)
    customer_email = Column(String(255), nullable=False)
    customer_phone = Column(String(50), nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(Enum(BookingStatus), nullable=False, default=BookingStatus.PENDING)
    transaction_id = Column(String(100), nullable=True)  # Set on confirmation only
    created_at = Column(DateTime, default=clock.utcnow, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
    confirmed_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)

    seats = relationship(
        "BookingSeat",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingSeat.id",
        lazy="selectin",
    )

    def __repr__(self):
        return (f"<Booking(id={self.id}, showtime_id={self.showtime_id}, "
                f"status='{self.status.value}', total={self.total_amount})>")

    @property
    def seat_ids(self) -> List[str]:
        return [seat.seat_id for seat in self.seats]

    @property
    def seat_count(self) -> int:
        return len(self.seats)

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def hold_lapsed(self, now: datetime) -> bool:
        """True when a pending hold is past its deadline"""
        return self.status == BookingStatus.PENDING and now > self.expires_at

    def time_remaining_seconds(self, now: datetime) -> int:
        if self.status != BookingStatus.PENDING:
            return 0
        return max(0, int((self.expires_at - now).total_seconds()))

    @classmethod
    def hold_expiry(cls, created_at: datetime, hold_duration_minutes: int) -> datetime:
        return created_at + timedelta(minutes=hold_duration_minutes)


class BookingSeat(Base):
    """A selected seat, with the price charged for it"""
    __tablename__ = "booking_seats"
    __table_args__ = (
        UniqueConstraint('booking_id', 'seat_id', name='uq_booking_seat'),
    )

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    seat_id = Column(String(10), nullable=False)
    row = Column(String(5), nullable=False)
    number = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    booking = relationship("Booking", back_populates="seats")

    def __repr__(self):
        return f"<BookingSeat(booking_id={self.booking_id}, seat_id='{self.seat_id}', price={self.price})>"
