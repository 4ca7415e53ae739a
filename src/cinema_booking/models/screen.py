"""
Screen model and its static seat layout
"""
from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from cinema_booking.core.database import Base


class Screen(Base):
    __tablename__ = "screens"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True)
    screen_type = Column(String(20), nullable=False, default="Standard")  # 'Standard', '3D', 'IMAX', 'Dolby'
    total_seats = Column(Integer, nullable=False)
    price_multiplier = Column(Numeric(4, 2), nullable=False, default=1)

    seats = relationship(
        "ScreenSeat",
        back_populates="screen",
        cascade="all, delete-orphan",
        order_by="ScreenSeat.id",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<Screen(id={self.id}, name='{self.name}', seats={self.total_seats})>"


class ScreenSeat(Base):
    """A seat position in a screen's layout. Occupancy is never stored here."""
    __tablename__ = "screen_seats"
    __table_args__ = (
        UniqueConstraint('screen_id', 'seat_id', name='uq_screen_seat'),
    )

    id = Column(Integer, primary_key=True, index=True)
    screen_id = Column(Integer, ForeignKey("screens.id", ondelete="CASCADE"), nullable=False, index=True)
    seat_id = Column(String(10), nullable=False)  # 'A1', 'H12'
    row = Column(String(5), nullable=False)
    number = Column(Integer, nullable=False)
    seat_type = Column(String(20), nullable=False, default="regular")  # 'regular', 'premium', 'vip'

    screen = relationship("Screen", back_populates="seats")

    def __repr__(self):
        return f"<ScreenSeat(screen_id={self.screen_id}, seat_id='{self.seat_id}')>"
