"""
Hold expiry for pending bookings

Expiry is lazy: a lapsed hold is only expired when something reads the
booking (confirm, cancel, get, list). ExpiryWorker is an opt-in periodic
sweep (EXPIRY_SWEEPER_ENABLED) that frees lapsed seats without waiting for
a read, and reconciles the counters of the showtimes it touched.
"""
import asyncio
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cinema_booking.core import clock
from cinema_booking.core.config import settings
from cinema_booking.core.metrics import record_booking_metrics
from cinema_booking.models import Booking, BookingStatus
from cinema_booking.services.cache_service import CacheService
from cinema_booking.services.seat_availability import SeatAvailabilityService

logger = logging.getLogger(__name__)


async def expire_booking(db: AsyncSession, booking: Booking, trigger: str) -> None:
    """
    Move a lapsed pending booking to EXPIRED and release its seats.
    The caller commits and invalidates the cache.
    """
    booking.status = BookingStatus.EXPIRED
    released = await SeatAvailabilityService.release_seats(db, booking)
    record_booking_metrics('expire', trigger=trigger)
    logger.info(
        f"Expired booking {booking.id} - released {released} seats",
        extra={'booking_id': booking.id, 'showtime_id': booking.showtime_id}
    )


async def sweep_expired_bookings(
    db: AsyncSession,
    customer_email: Optional[str] = None,
    trigger: str = "list",
) -> List[Booking]:
    """
    Expire every pending booking whose hold has lapsed, optionally only a
    single customer's. Commits and returns the expired bookings.
    """
    now = clock.utcnow()
    query = (
        select(Booking)
        .where(
            Booking.status == BookingStatus.PENDING,
            Booking.expires_at < now,
        )
        .with_for_update(skip_locked=True)
    )
    if customer_email:
        query = query.where(Booking.customer_email == customer_email)

    try:
        result = await db.execute(query)
        lapsed = result.scalars().all()

        if not lapsed:
            await db.commit()
            return []

        for booking in lapsed:
            await expire_booking(db, booking, trigger=trigger)

        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await CacheService.invalidate_showtime_seats(*{b.showtime_id for b in lapsed})
    return list(lapsed)


class ExpiryWorker:
    """Background worker for expiring lapsed holds"""

    def __init__(self, session_factory: Optional[async_sessionmaker] = None):
        self.session_factory = session_factory
        self.running = False
        self.task = None

    def _sessions(self) -> async_sessionmaker:
        if self.session_factory is None:
            from cinema_booking.core.database import AsyncSessionLocal
            self.session_factory = AsyncSessionLocal
        return self.session_factory

    async def start(self):
        """Start the background worker"""
        if self.running:
            logger.warning("Expiry worker already running")
            return

        self.running = True
        self.task = asyncio.create_task(self._run())
        logger.info(f"Expiry worker started (interval: {settings.EXPIRY_SWEEP_INTERVAL_SECONDS}s)")

    async def stop(self):
        """Stop the background worker"""
        if not self.running:
            return

        self.running = False
        if self.task:
            self.task.cancel()
            try:
                await self.task
            except asyncio.CancelledError:
                pass
        logger.info("Expiry worker stopped")

    async def _run(self):
        while self.running:
            try:
                await self.run_once()
            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("Error in expiry worker")
            await asyncio.sleep(settings.EXPIRY_SWEEP_INTERVAL_SECONDS)

    async def run_once(self) -> int:
        """One sweep cycle. Returns the number of bookings expired."""
        async with self._sessions()() as db:
            expired = await sweep_expired_bookings(db, trigger="worker")
            if not expired:
                return 0

            logger.info(f"Expired {len(expired)} lapsed holds")

            if settings.RECONCILE_ON_SWEEP:
                for showtime_id in sorted({b.showtime_id for b in expired}):
                    try:
                        await SeatAvailabilityService.reconcile_available_seats(db, showtime_id)
                        await db.commit()
                    except Exception:
                        await db.rollback()
                        logger.exception(
                            "Counter reconciliation failed",
                            extra={'showtime_id': showtime_id}
                        )
            return len(expired)


# Global worker instance
expiry_worker = ExpiryWorker()


async def start_expiry_worker():
    """Start the expiry worker if enabled"""
    if settings.EXPIRY_SWEEPER_ENABLED:
        await expiry_worker.start()


async def stop_expiry_worker():
    await expiry_worker.stop()
