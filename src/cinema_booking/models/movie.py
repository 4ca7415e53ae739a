"""
Movie model - catalog entry, read-only for the booking core
"""
from sqlalchemy import Column, Integer, String, DateTime

from cinema_booking.core import clock
from cinema_booking.core.database import Base


class Movie(Base):
    __tablename__ = "movies"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(500), nullable=False, index=True)
    duration_minutes = Column(Integer, nullable=False, default=0)
    poster_url = Column(String(500))
    status = Column(String(20), nullable=False, default="now_showing", index=True)  # 'now_showing', 'coming_soon'
    created_at = Column(DateTime, default=clock.utcnow, nullable=False)

    def __repr__(self):
        return f"<Movie(id={self.id}, title='{self.title}')>"
