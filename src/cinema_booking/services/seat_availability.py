"""
Seat availability for a showtime, derived from active bookings
"""
import logging
from typing import Dict, Iterable, List, Set

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from cinema_booking.core.metrics import seat_counter_drift_total
from cinema_booking.models import Booking, BookingSeat, SeatHold, ACTIVE_STATUSES
from cinema_booking.schemas.showtime import SeatMapResponse, SeatMapSeat, ReconcileResponse
from cinema_booking.services.cache_service import CacheService
from cinema_booking.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)


class SeatAvailabilityService:
    """Occupied-seat scan, seat map and counter reconciliation"""

    @staticmethod
    async def get_occupied_seat_ids(db: AsyncSession, showtime_id: int) -> Set[str]:
        """
        Seat ids held by pending or confirmed bookings on the showtime.

        A pending booking whose hold lapsed still counts until something
        sweeps it; this method never sweeps.
        """
        await CatalogService.ensure_showtime_exists(db, showtime_id)
        return await SeatAvailabilityService._scan_occupied(db, showtime_id)

    @staticmethod
    async def _scan_occupied(db: AsyncSession, showtime_id: int) -> Set[str]:
        query = (
            select(BookingSeat.seat_id)
            .join(Booking, Booking.id == BookingSeat.booking_id)
            .where(
                Booking.showtime_id == showtime_id,
                Booking.status.in_(ACTIVE_STATUSES),
            )
        )
        result = await db.execute(query)
        seat_ids = [row[0] for row in result.all()]

        occupied = set(seat_ids)
        if len(occupied) != len(seat_ids):
            # Only possible if two active bookings share a seat
            logger.error(
                "Seat held by more than one active booking",
                extra={'showtime_id': showtime_id, 'seat_ids': sorted(occupied)}
            )
        return occupied

    @staticmethod
    async def find_conflicts(db: AsyncSession, showtime_id: int, seat_ids: Iterable[str]) -> Set[str]:
        """Requested seats that are already occupied"""
        occupied = await SeatAvailabilityService._scan_occupied(db, showtime_id)
        return occupied.intersection(seat_ids)

    @staticmethod
    async def get_held_seat_ids(db: AsyncSession, showtime_id: int, seat_ids: Iterable[str]) -> Set[str]:
        """Requested seats that have a row in seat_holds"""
        query = select(SeatHold.seat_id).where(
            SeatHold.showtime_id == showtime_id,
            SeatHold.seat_id.in_(list(seat_ids)),
        )
        result = await db.execute(query)
        return {row[0] for row in result.all()}

    @staticmethod
    def hold_seats(db: AsyncSession, booking: Booking) -> None:
        """Stage one seat_holds row per seat of a new booking"""
        for seat_id in booking.seat_ids:
            db.add(SeatHold(
                showtime_id=booking.showtime_id,
                seat_id=seat_id,
                booking_id=booking.id,
            ))

    @staticmethod
    async def release_seats(db: AsyncSession, booking: Booking) -> int:
        """
        Free a booking's seats: drop its holds and give the seats back to
        the showtime counter. Returns the number of seats released.
        """
        await db.execute(
            delete(SeatHold)
            .where(SeatHold.booking_id == booking.id)
            .execution_options(synchronize_session=False)
        )
        released = booking.seat_count
        await CatalogService.adjust_available_seats(db, booking.showtime_id, released)
        return released

    @staticmethod
    async def get_seat_map(db: AsyncSession, showtime_id: int) -> SeatMapResponse:
        """
        Screen layout with each seat marked available or occupied

        Cache key: showtime:{showtime_id}:seats
        """
        cached = await CacheService.get_showtime_seats(showtime_id)
        if cached:
            return SeatMapResponse(**cached)

        showtime = await CatalogService.get_showtime(db, showtime_id)
        layout = await CatalogService.get_seat_layout(db, showtime.screen_id)
        occupied = await SeatAvailabilityService._scan_occupied(db, showtime_id)
        available_seats = await CatalogService.get_available_seats(db, showtime_id)

        seats: List[SeatMapSeat] = []
        rows: Dict[str, List[SeatMapSeat]] = {}
        for seat in layout.values():
            entry = SeatMapSeat(
                seat_id=seat.seat_id,
                row=seat.row,
                number=seat.number,
                seat_type=seat.seat_type,
                status="occupied" if seat.seat_id in occupied else "available",
            )
            seats.append(entry)
            rows.setdefault(seat.row, []).append(entry)

        seat_map = SeatMapResponse(
            showtime_id=showtime.id,
            movie_id=showtime.movie_id,
            screen_id=showtime.screen_id,
            date=showtime.date,
            time=showtime.time,
            price=showtime.price,
            total_seats=showtime.total_seats,
            available_seats=available_seats,
            seats=seats,
            rows=rows,
        )

        await CacheService.set_showtime_seats(showtime_id, seat_map.model_dump(mode='json'))
        return seat_map

    @staticmethod
    async def reconcile_available_seats(db: AsyncSession, showtime_id: int) -> ReconcileResponse:
        """
        Recompute available_seats from active bookings and repair the
        counter if it drifted. The caller commits.
        """
        showtime = await CatalogService.get_showtime(db, showtime_id, for_update=True)
        occupied = await SeatAvailabilityService._scan_occupied(db, showtime_id)
        previous = await CatalogService.get_available_seats(db, showtime_id)
        actual = max(0, showtime.total_seats - len(occupied))
        drift = previous - actual

        if drift:
            seat_counter_drift_total.inc()
            logger.warning(
                f"available_seats drifted by {drift} (counter={previous}, actual={actual})",
                extra={'showtime_id': showtime_id}
            )
            await CatalogService.set_available_seats(db, showtime_id, actual)
            await CacheService.invalidate_showtime_seats(showtime_id)

        return ReconcileResponse(
            showtime_id=showtime_id,
            previous_available_seats=previous,
            actual_available_seats=actual,
            drift=drift,
        )
