"""
SeatHold model - CRITICAL for concurrency control

One row per seat held by an active (pending or confirmed) booking. The
unique constraint on (showtime_id, seat_id) makes a second insert for the
same seat fail atomically, so two racing bookings cannot both succeed.
"""
from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint

from cinema_booking.core.database import Base


class SeatHold(Base):
    __tablename__ = "seat_holds"
    __table_args__ = (
        UniqueConstraint('showtime_id', 'seat_id', name='uq_seat_hold_showtime_seat'),
    )

    id = Column(Integer, primary_key=True, index=True)
    showtime_id = Column(Integer, ForeignKey("showtimes.id", ondelete="CASCADE"), nullable=False)
    seat_id = Column(String(10), nullable=False)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)

    def __repr__(self):
        return f"<SeatHold(showtime_id={self.showtime_id}, seat_id='{self.seat_id}', booking_id={self.booking_id})>"
