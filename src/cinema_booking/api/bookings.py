"""Bookings API endpoints"""
import logging
import math
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cinema_booking.core.config import settings
from cinema_booking.core.database import get_db
from cinema_booking.core.logging_config import get_trace_id
from cinema_booking.middleware.rate_limiter import limiter
from cinema_booking.models.booking import BookingStatus
from cinema_booking.schemas import (
    BookingCreate,
    BookingConfirm,
    BookingResponse,
    BookingListResponse,
)
from cinema_booking.services import (
    BookingService,
    BookingServiceError,
    BookingValidationError,
    SeatConflictError,
    ShowtimeNotFoundError,
    BookingNotFoundError,
    BookingAlreadyConfirmedError,
    BookingAlreadyCancelledError,
    BookingExpiredError,
    BookingStateError,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _error(code: str, exc: Exception) -> dict:
    return {"error": code, "message": str(exc)}


def _internal_error(operation: str) -> HTTPException:
    logger.exception(f"Unexpected error during {operation}")
    return HTTPException(
        status_code=500,
        detail={"error": "internal_error", "message": "Internal server error", "trace_id": get_trace_id()},
    )


@router.post("/bookings", response_model=BookingResponse, status_code=201)
@limiter.limit("10/minute")
async def create_booking(
    request: Request,
    booking_data: BookingCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Hold seats for a showtime in PENDING status

    The hold lasts 10 minutes; confirm it with
    POST /bookings/{id}/confirm before it expires.
    """
    try:
        booking = await BookingService.create_booking(
            db=db,
            showtime_id=booking_data.showtime_id,
            seats=booking_data.seats,
            customer=booking_data.customer_info,
        )
        return BookingResponse.from_booking(booking)

    except ShowtimeNotFoundError as e:
        raise HTTPException(status_code=404, detail=_error("not_found", e))
    except SeatConflictError as e:
        raise HTTPException(
            status_code=409,
            detail={
                "error": "seat_conflict",
                "message": str(e),
                "unavailable_seats": e.seat_ids,
            },
        )
    except BookingValidationError as e:
        raise HTTPException(status_code=400, detail=_error("validation_error", e))
    except BookingServiceError as e:
        raise HTTPException(status_code=400, detail=_error("booking_error", e))
    except Exception:
        raise _internal_error("create_booking")


@router.post("/bookings/{booking_id}/confirm", response_model=BookingResponse)
@limiter.limit("10/minute")
async def confirm_booking(
    request: Request,
    booking_id: int,
    confirm_data: Optional[BookingConfirm] = None,
    db: AsyncSession = Depends(get_db),
):
    """
    Confirm a PENDING booking after payment

    A transaction ID is generated when none is supplied.
    Returns 410 if the hold has expired; the customer must start over.
    """
    try:
        booking = await BookingService.confirm_booking(
            db=db,
            booking_id=booking_id,
            transaction_id=confirm_data.transaction_id if confirm_data else None,
        )
        return BookingResponse.from_booking(booking)

    except BookingNotFoundError as e:
        raise HTTPException(status_code=404, detail=_error("not_found", e))
    except BookingAlreadyConfirmedError as e:
        raise HTTPException(status_code=409, detail=_error("already_confirmed", e))
    except BookingExpiredError as e:
        raise HTTPException(status_code=410, detail=_error("expired", e))
    except BookingStateError as e:
        raise HTTPException(status_code=409, detail=_error("invalid_state", e))
    except BookingServiceError as e:
        raise HTTPException(status_code=400, detail=_error("booking_error", e))
    except Exception:
        raise _internal_error("confirm_booking")


@router.delete("/bookings/{booking_id}", response_model=BookingResponse)
@limiter.limit("10/minute")
async def cancel_booking(
    request: Request,
    booking_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Cancel a pending or confirmed booking"""
    try:
        booking = await BookingService.cancel_booking(db=db, booking_id=booking_id)
        return BookingResponse.from_booking(booking)

    except BookingNotFoundError as e:
        raise HTTPException(status_code=404, detail=_error("not_found", e))
    except BookingAlreadyCancelledError as e:
        raise HTTPException(status_code=409, detail=_error("already_cancelled", e))
    except BookingExpiredError as e:
        raise HTTPException(status_code=410, detail=_error("expired", e))
    except BookingServiceError as e:
        raise HTTPException(status_code=400, detail=_error("booking_error", e))
    except Exception:
        raise _internal_error("cancel_booking")


@router.get("/bookings", response_model=BookingListResponse)
@limiter.limit("30/minute")
async def list_bookings(
    request: Request,
    status: Optional[BookingStatus] = Query(None, description="Filter by status; active bookings when omitted"),
    customer_email: Optional[str] = Query(None, description="Only this customer's bookings"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """List bookings, newest first. Lapsed holds are expired first."""
    try:
        bookings, total = await BookingService.list_bookings(
            db=db,
            status=status,
            customer_email=customer_email,
            page=page,
            limit=limit,
        )
        return BookingListResponse(
            bookings=[BookingResponse.from_booking(b) for b in bookings],
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit) if total else 0,
        )
    except Exception:
        raise _internal_error("list_bookings")


@router.get("/bookings/{booking_id}", response_model=BookingResponse)
@limiter.limit("60/minute")
async def get_booking(
    request: Request,
    booking_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Get a booking by ID"""
    try:
        booking = await BookingService.get_booking(db=db, booking_id=booking_id)
        return BookingResponse.from_booking(booking)
    except BookingNotFoundError as e:
        raise HTTPException(status_code=404, detail=_error("not_found", e))
    except Exception:
        raise _internal_error("get_booking")
