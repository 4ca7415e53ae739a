"""
Showtime model - one screening of a movie on a screen
"""
import re

from sqlalchemy import Column, Integer, String, Date, DateTime, Numeric, ForeignKey, Index
from sqlalchemy.orm import relationship, validates

from cinema_booking.core import clock
from cinema_booking.core.database import Base

TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")


class Showtime(Base):
    __tablename__ = "showtimes"
    __table_args__ = (
        Index('ix_showtimes_movie_date_time', 'movie_id', 'date', 'time'),
        Index('ix_showtimes_date_screen', 'date', 'screen_id'),
    )

    id = Column(Integer, primary_key=True, index=True)
    movie_id = Column(Integer, ForeignKey("movies.id", ondelete="CASCADE"), nullable=False)
    screen_id = Column(Integer, ForeignKey("screens.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    time = Column(String(5), nullable=False)  # 'HH:MM', 24 hour
    price = Column(Numeric(10, 2), nullable=False)
    total_seats = Column(Integer, nullable=False)
    # Cache of total_seats minus seats held by active bookings
    available_seats = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=clock.utcnow, nullable=False)

    movie = relationship("Movie", lazy="joined", innerjoin=True)
    screen = relationship("Screen", lazy="joined", innerjoin=True)

    def __repr__(self):
        return (f"<Showtime(id={self.id}, movie_id={self.movie_id}, screen_id={self.screen_id}, "
                f"date='{self.date}', time='{self.time}', available={self.available_seats})>")

    @validates('time')
    def validate_time(self, key, value):
        if not TIME_PATTERN.match(value or ""):
            raise ValueError("Time must be in HH:MM format")
        return value

    @validates('price')
    def validate_price(self, key, value):
        if value is not None and value < 0:
            raise ValueError("Price cannot be negative")
        return value

    @property
    def is_sold_out(self) -> bool:
        return self.available_seats <= 0
