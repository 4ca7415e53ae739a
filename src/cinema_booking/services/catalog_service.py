"""
Catalog lookups used by the booking core

Movies, screens and showtimes are managed elsewhere; this module only
reads them by id and maintains the showtime's available_seats counter.
"""
import logging
from typing import Dict

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from cinema_booking.models import Showtime, ScreenSeat
from cinema_booking.services.errors import ShowtimeNotFoundError

logger = logging.getLogger(__name__)


class CatalogService:
    """Read access to showtimes and screen layouts"""

    @staticmethod
    async def get_showtime(db: AsyncSession, showtime_id: int, for_update: bool = False) -> Showtime:
        """Get showtime by ID, optionally locking its row"""
        query = (
            select(Showtime)
            .where(Showtime.id == showtime_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            query = query.with_for_update(of=Showtime)

        result = await db.execute(query)
        showtime = result.unique().scalar_one_or_none()

        if not showtime:
            raise ShowtimeNotFoundError(f"Showtime {showtime_id} not found")
        return showtime

    @staticmethod
    async def ensure_showtime_exists(db: AsyncSession, showtime_id: int) -> None:
        result = await db.execute(select(Showtime.id).where(Showtime.id == showtime_id))
        if result.scalar_one_or_none() is None:
            raise ShowtimeNotFoundError(f"Showtime {showtime_id} not found")

    @staticmethod
    async def get_seat_layout(db: AsyncSession, screen_id: int) -> Dict[str, ScreenSeat]:
        """Screen seats keyed by seat id, in layout order"""
        query = (
            select(ScreenSeat)
            .where(ScreenSeat.screen_id == screen_id)
            .order_by(ScreenSeat.id)
        )
        result = await db.execute(query)
        return {seat.seat_id: seat for seat in result.scalars().all()}

    @staticmethod
    async def get_available_seats(db: AsyncSession, showtime_id: int) -> int:
        """Read the counter straight from the database"""
        result = await db.execute(
            select(Showtime.available_seats).where(Showtime.id == showtime_id)
        )
        available = result.scalar_one_or_none()
        if available is None:
            raise ShowtimeNotFoundError(f"Showtime {showtime_id} not found")
        return available

    @staticmethod
    async def adjust_available_seats(db: AsyncSession, showtime_id: int, delta: int) -> None:
        """Increment (release) or decrement (hold) the counter in one UPDATE"""
        await db.execute(
            update(Showtime)
            .where(Showtime.id == showtime_id)
            .values(available_seats=Showtime.available_seats + delta)
            .execution_options(synchronize_session=False)
        )
        logger.debug(
            f"Adjusted available seats by {delta}",
            extra={'showtime_id': showtime_id}
        )

    @staticmethod
    async def set_available_seats(db: AsyncSession, showtime_id: int, value: int) -> None:
        await db.execute(
            update(Showtime)
            .where(Showtime.id == showtime_id)
            .values(available_seats=value)
            .execution_options(synchronize_session=False)
        )
