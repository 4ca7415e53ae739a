"""
Hold expiry: sweeps and the opt-in background worker
"""
import pytest

from conftest import seats
from cinema_booking.core.config import settings
from cinema_booking.models import BookingStatus
from cinema_booking.schemas import CustomerInfo
from cinema_booking.services import BookingService, CatalogService, SeatAvailabilityService
from cinema_booking.services.expiry_sweeper import ExpiryWorker, sweep_expired_bookings


@pytest.mark.asyncio
async def test_sweep_leaves_live_holds_alone(db, showtime_id, customer, advance_clock):
    booking = await BookingService.create_booking(db, showtime_id, seats("A1"), customer)
    advance_clock(minutes=9)

    expired = await sweep_expired_bookings(db)

    assert expired == []
    assert (await BookingService.get_booking(db, booking.id)).status == BookingStatus.PENDING


@pytest.mark.asyncio
async def test_sweep_scoped_to_customer(db, showtime_id, customer, advance_clock):
    other = CustomerInfo(name="Grace Hopper", email="grace@example.com", phone="555-0101")
    mine = await BookingService.create_booking(db, showtime_id, seats("A1"), customer)
    theirs = await BookingService.create_booking(db, showtime_id, seats("A2"), other)
    advance_clock(minutes=11)

    expired = await sweep_expired_bookings(db, customer_email="grace@example.com")

    assert [b.id for b in expired] == [theirs.id]
    assert await SeatAvailabilityService.get_occupied_seat_ids(db, showtime_id) == {"A1"}
    assert await CatalogService.get_available_seats(db, showtime_id) == 14

    # Reading mine expires it lazily
    assert (await BookingService.get_booking(db, mine.id)).status == BookingStatus.EXPIRED


@pytest.mark.asyncio
async def test_confirmed_booking_never_expires(db, showtime_id, customer, advance_clock):
    booking = await BookingService.create_booking(db, showtime_id, seats("A1"), customer)
    await BookingService.confirm_booking(db, booking.id)
    advance_clock(hours=2)

    assert await sweep_expired_bookings(db) == []
    assert (await BookingService.get_booking(db, booking.id)).status == BookingStatus.CONFIRMED
    assert await CatalogService.get_available_seats(db, showtime_id) == 14


@pytest.mark.asyncio
async def test_expired_seats_are_bookable_again(db, showtime_id, customer, advance_clock):
    await BookingService.create_booking(db, showtime_id, seats("C3", "C4"), customer)
    advance_clock(minutes=11)
    await BookingService.list_bookings(db)

    again = await BookingService.create_booking(db, showtime_id, seats("C4"), customer)

    assert again.status == BookingStatus.PENDING
    assert await CatalogService.get_available_seats(db, showtime_id) == 14


@pytest.mark.asyncio
async def test_worker_run_once_expires_and_reconciles(session_factory, showtime_id, customer, advance_clock, monkeypatch):
    monkeypatch.setattr(settings, "RECONCILE_ON_SWEEP", True)

    async with session_factory() as db:
        lapsed = await BookingService.create_booking(db, showtime_id, seats("A1", "A2"), customer)
        kept = await BookingService.create_booking(db, showtime_id, seats("B1"), customer)
        await BookingService.confirm_booking(db, kept.id)
        # Simulated drift the sweep should repair
        await CatalogService.set_available_seats(db, showtime_id, 5)
        await db.commit()

    advance_clock(minutes=11)
    worker = ExpiryWorker(session_factory)

    assert await worker.run_once() == 1
    assert await worker.run_once() == 0

    async with session_factory() as db:
        assert (await BookingService.get_booking(db, lapsed.id)).status == BookingStatus.EXPIRED
        assert await SeatAvailabilityService.get_occupied_seat_ids(db, showtime_id) == {"B1"}
        assert await CatalogService.get_available_seats(db, showtime_id) == 14


@pytest.mark.asyncio
async def test_worker_start_stop(session_factory):
    worker = ExpiryWorker(session_factory)

    await worker.start()
    assert worker.running
    await worker.stop()

    assert not worker.running
