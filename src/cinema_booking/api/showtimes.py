"""
Showtime seat availability endpoints
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cinema_booking.core.database import get_db
from cinema_booking.core.logging_config import get_trace_id
from cinema_booking.middleware.rate_limiter import limiter
from cinema_booking.schemas import OccupiedSeatsResponse, SeatMapResponse, ReconcileResponse
from cinema_booking.services import SeatAvailabilityService, ShowtimeNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter()


def _not_found(exc: ShowtimeNotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail={"error": "not_found", "message": str(exc)})


def _internal_error(operation: str, showtime_id: int) -> HTTPException:
    logger.exception(f"Unexpected error during {operation}", extra={'showtime_id': showtime_id})
    return HTTPException(
        status_code=500,
        detail={"error": "internal_error", "message": "Internal server error", "trace_id": get_trace_id()},
    )


@router.get("/showtimes/{showtime_id}/occupied-seats", response_model=OccupiedSeatsResponse)
@limiter.limit("60/minute")
async def get_occupied_seats(
    request: Request,
    showtime_id: int,
    db: AsyncSession = Depends(get_db),
):
    """
    Seat IDs held by pending or confirmed bookings, sorted

    - **showtime_id**: Showtime ID
    """
    try:
        occupied = await SeatAvailabilityService.get_occupied_seat_ids(db, showtime_id)
        return OccupiedSeatsResponse(showtime_id=showtime_id, occupied_seats=sorted(occupied))
    except ShowtimeNotFoundError as e:
        raise _not_found(e)
    except Exception:
        raise _internal_error("get_occupied_seats", showtime_id)


@router.get("/showtimes/{showtime_id}/seats", response_model=SeatMapResponse)
@limiter.limit("60/minute")
async def get_seat_map(
    request: Request,
    showtime_id: int,
    db: AsyncSession = Depends(get_db),
):
    """
    Seat map for a showtime: the screen layout with every seat marked
    available or occupied
    """
    try:
        return await SeatAvailabilityService.get_seat_map(db, showtime_id)
    except ShowtimeNotFoundError as e:
        raise _not_found(e)
    except Exception:
        raise _internal_error("get_seat_map", showtime_id)


@router.post("/showtimes/{showtime_id}/reconcile", response_model=ReconcileResponse)
@limiter.limit("10/minute")
async def reconcile_available_seats(
    request: Request,
    showtime_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Recompute available_seats from active bookings and repair drift"""
    try:
        report = await SeatAvailabilityService.reconcile_available_seats(db, showtime_id)
        await db.commit()
        return report
    except ShowtimeNotFoundError as e:
        await db.rollback()
        raise _not_found(e)
    except Exception:
        await db.rollback()
        raise _internal_error("reconcile_available_seats", showtime_id)
