"""
Booking Service - lifecycle of a seat reservation

    (none) --create--> PENDING --confirm--> CONFIRMED
                          |  \\--cancel--> CANCELLED <--cancel-- CONFIRMED
                          \\--lapsed hold, on read--> EXPIRED

Every transition keeps Showtime.available_seats in step: create takes
seats, cancel and expire give them back, confirm leaves the count alone.
"""
import logging
import random
import time
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cinema_booking.core import clock
from cinema_booking.core.config import settings
from cinema_booking.core.metrics import (
    booking_creation_duration_seconds,
    record_booking_metrics,
    seat_conflicts_total,
    track_time,
)
from cinema_booking.models import Booking, BookingSeat, BookingStatus, ACTIVE_STATUSES
from cinema_booking.schemas.booking import SeatSelection, CustomerInfo
from cinema_booking.services.cache_service import CacheService
from cinema_booking.services.catalog_service import CatalogService
from cinema_booking.services.errors import (
    BookingAlreadyCancelledError,
    BookingAlreadyConfirmedError,
    BookingExpiredError,
    BookingServiceError,
    BookingNotFoundError,
    BookingStateError,
    BookingValidationError,
    SeatConflictError,
)
from cinema_booking.services.expiry_sweeper import expire_booking, sweep_expired_bookings
from cinema_booking.services.seat_availability import SeatAvailabilityService

logger = logging.getLogger(__name__)


def generate_transaction_id() -> str:
    """Simulated payment reference; unique in practice, not cryptographically"""
    return f"TXN{int(time.time() * 1000)}{random.randint(0, 999)}"


class BookingService:
    """Service for managing bookings"""

    @staticmethod
    def _validate_selection(seats: Sequence[SeatSelection]) -> List[str]:
        if not seats:
            raise BookingValidationError("At least one seat must be selected")

        if len(seats) > settings.MAX_SEATS_PER_BOOKING:
            raise BookingValidationError(
                f"Maximum {settings.MAX_SEATS_PER_BOOKING} seats can be booked at once"
            )

        seat_ids = [seat.seat_id for seat in seats]
        duplicates = sorted({s for s in seat_ids if seat_ids.count(s) > 1})
        if duplicates:
            raise BookingValidationError(f"Seats selected more than once: {', '.join(duplicates)}")
        return seat_ids

    @staticmethod
    @track_time(booking_creation_duration_seconds)
    async def create_booking(
        db: AsyncSession,
        showtime_id: int,
        seats: Sequence[SeatSelection],
        customer: CustomerInfo,
    ) -> Booking:
        """
        Hold seats for a customer in PENDING status

        1. Load the showtime (row locked where the database supports it)
        2. Reject seats that are not in the screen layout
        3. Reject seats held by pending/confirmed bookings, naming them
        4. Insert booking, booking seats and seat holds, take the seats
           off the counter, all in one transaction

        The seat_holds unique constraint catches a racing booking that
        passed step 3 at the same time; it surfaces as SeatConflictError.
        """
        seat_ids = BookingService._validate_selection(seats)

        try:
            showtime = await CatalogService.get_showtime(db, showtime_id, for_update=True)

            layout = await CatalogService.get_seat_layout(db, showtime.screen_id)
            unknown = [seat_id for seat_id in seat_ids if seat_id not in layout]
            if unknown:
                raise BookingValidationError(
                    f"Seats {', '.join(unknown)} do not exist on this screen"
                )

            conflicts = await SeatAvailabilityService.find_conflicts(db, showtime_id, seat_ids)
            if conflicts:
                seat_conflicts_total.labels(stage='check').inc()
                raise SeatConflictError(conflicts)
        except BookingServiceError:
            await BookingService._end_read_only(db)
            raise
        except Exception:
            await db.rollback()
            raise

        try:
            booking_seats = []
            for selection in seats:
                layout_seat = layout[selection.seat_id]
                # A zero price counts as no price
                price = selection.price or showtime.price
                booking_seats.append(BookingSeat(
                    seat_id=layout_seat.seat_id,
                    row=layout_seat.row,
                    number=layout_seat.number,
                    price=price,
                ))

            now = clock.utcnow()
            booking = Booking(
                showtime_id=showtime.id,
                movie_id=showtime.movie_id,
                screen_id=showtime.screen_id,
                customer_name=customer.name,
                customer_email=customer.email,
                customer_phone=customer.phone,
                seats=booking_seats,
                total_amount=sum((Decimal(seat.price) for seat in booking_seats), Decimal("0")),
                status=BookingStatus.PENDING,
                created_at=now,
                expires_at=Booking.hold_expiry(now, settings.HOLD_DURATION_MINUTES),
            )
            db.add(booking)
            await db.flush()

            SeatAvailabilityService.hold_seats(db, booking)
            await db.flush()

            await CatalogService.adjust_available_seats(db, showtime_id, -len(booking_seats))
            await db.commit()

        except IntegrityError:
            await db.rollback()
            taken = await SeatAvailabilityService.get_held_seat_ids(db, showtime_id, seat_ids)
            taken |= await SeatAvailabilityService.find_conflicts(db, showtime_id, seat_ids)
            await BookingService._end_read_only(db)
            seat_conflicts_total.labels(stage='constraint').inc()
            logger.warning(
                "Concurrent booking took the same seats",
                extra={'showtime_id': showtime_id, 'seat_ids': sorted(taken)}
            )
            # Empty when the racing booking already let go of its seats
            raise SeatConflictError(taken)
        except Exception:
            await db.rollback()
            raise

        await CacheService.invalidate_showtime_seats(showtime_id)
        record_booking_metrics('create')
        logger.info(
            f"Booking {booking.id} created - holding {len(booking_seats)} seats until {booking.expires_at.isoformat()}",
            extra={'booking_id': booking.id, 'showtime_id': showtime_id, 'seat_ids': seat_ids}
        )
        return booking

    @staticmethod
    async def _load_booking(db: AsyncSession, booking_id: int, for_update: bool = False) -> Booking:
        query = (
            select(Booking)
            .where(Booking.id == booking_id)
            .options(selectinload(Booking.seats))
            .execution_options(populate_existing=True)
        )
        if for_update:
            query = query.with_for_update()

        result = await db.execute(query)
        booking = result.scalar_one_or_none()

        if not booking:
            raise BookingNotFoundError(f"Booking {booking_id} not found")
        return booking

    @staticmethod
    async def _end_read_only(db: AsyncSession) -> None:
        """
        Close the transaction of a request rejected before it wrote anything.
        A rollback would expire every object the caller still holds.
        """
        await db.commit()

    @staticmethod
    async def _expire_and_commit(db: AsyncSession, booking: Booking, trigger: str) -> None:
        await expire_booking(db, booking, trigger=trigger)
        await db.commit()
        await CacheService.invalidate_showtime_seats(booking.showtime_id)

    @staticmethod
    async def confirm_booking(
        db: AsyncSession,
        booking_id: int,
        transaction_id: Optional[str] = None,
    ) -> Booking:
        """
        Confirm a PENDING booking after (simulated) payment

        A hold that already lapsed is expired here, its seats released,
        and the confirmation rejected with BookingExpiredError.
        """
        try:
            booking = await BookingService._load_booking(db, booking_id, for_update=True)

            if booking.status == BookingStatus.CONFIRMED:
                raise BookingAlreadyConfirmedError("Booking is already confirmed")
            if booking.status == BookingStatus.CANCELLED:
                raise BookingStateError("Booking is cancelled and cannot be confirmed")
            if booking.status == BookingStatus.EXPIRED:
                raise BookingExpiredError("Booking has expired. Please book again.")

            now = clock.utcnow()
            if booking.hold_lapsed(now):
                await BookingService._expire_and_commit(db, booking, trigger='confirm')
                raise BookingExpiredError("Booking has expired. Please book again.")

            booking.status = BookingStatus.CONFIRMED
            booking.confirmed_at = now
            booking.transaction_id = transaction_id or generate_transaction_id()
            await db.commit()
        except BookingServiceError:
            await BookingService._end_read_only(db)
            raise
        except Exception:
            await db.rollback()
            raise

        record_booking_metrics('confirm')
        logger.info(
            f"Booking {booking.id} confirmed (transaction {booking.transaction_id})",
            extra={'booking_id': booking.id, 'showtime_id': booking.showtime_id}
        )
        return booking

    @staticmethod
    async def cancel_booking(db: AsyncSession, booking_id: int) -> Booking:
        """
        Cancel a PENDING or CONFIRMED booking and give its seats back

        Cancelling twice raises BookingAlreadyCancelledError without
        touching the counter again.
        """
        try:
            booking = await BookingService._load_booking(db, booking_id, for_update=True)

            if booking.status == BookingStatus.CANCELLED:
                raise BookingAlreadyCancelledError("Booking is already cancelled")
            if booking.status == BookingStatus.EXPIRED:
                raise BookingExpiredError("Booking has already expired")

            now = clock.utcnow()
            if booking.hold_lapsed(now):
                await BookingService._expire_and_commit(db, booking, trigger='cancel')
                raise BookingExpiredError("Booking has already expired")

            previous_status = booking.status
            booking.status = BookingStatus.CANCELLED
            booking.cancelled_at = now
            released = await SeatAvailabilityService.release_seats(db, booking)
            await db.commit()
        except BookingServiceError:
            await BookingService._end_read_only(db)
            raise
        except Exception:
            await db.rollback()
            raise

        await CacheService.invalidate_showtime_seats(booking.showtime_id)
        record_booking_metrics('cancel', previous_status=previous_status.value)
        logger.info(
            f"Booking {booking.id} cancelled - released {released} seats",
            extra={'booking_id': booking.id, 'showtime_id': booking.showtime_id}
        )
        return booking

    @staticmethod
    async def get_booking(db: AsyncSession, booking_id: int) -> Booking:
        """Get a booking, expiring it first if its hold lapsed"""
        try:
            booking = await BookingService._load_booking(db, booking_id)
            if booking.hold_lapsed(clock.utcnow()):
                booking = await BookingService._load_booking(db, booking_id, for_update=True)
                if booking.hold_lapsed(clock.utcnow()):
                    await BookingService._expire_and_commit(db, booking, trigger='read')
        except BookingServiceError:
            await BookingService._end_read_only(db)
            raise
        except Exception:
            await db.rollback()
            raise
        return booking

    @staticmethod
    async def list_bookings(
        db: AsyncSession,
        status: Optional[BookingStatus] = None,
        customer_email: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[Booking], int]:
        """
        List bookings newest first

        Lapsed holds in scope are expired before the query runs, so they
        never show up as active. Without a status filter only pending and
        confirmed bookings are returned.
        """
        if customer_email:
            customer_email = customer_email.strip().lower()

        await sweep_expired_bookings(db, customer_email=customer_email, trigger='list')

        query = select(Booking)
        if status:
            query = query.where(Booking.status == status)
        else:
            query = query.where(Booking.status.in_(ACTIVE_STATUSES))
        if customer_email:
            query = query.where(Booking.customer_email == customer_email)

        count_query = select(func.count()).select_from(query.subquery())
        total = (await db.execute(count_query)).scalar()

        query = (
            query.options(selectinload(Booking.seats))
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await db.execute(query)
        return list(result.scalars().all()), total
