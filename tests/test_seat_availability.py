"""
Occupied-seat calculation, seat map and counter reconciliation
"""
import pytest

from conftest import seats
from cinema_booking.services import (
    BookingService,
    CatalogService,
    SeatAvailabilityService,
    ShowtimeNotFoundError,
)


@pytest.mark.asyncio
async def test_no_bookings_no_occupied_seats(db, showtime_id):
    assert await SeatAvailabilityService.get_occupied_seat_ids(db, showtime_id) == set()


@pytest.mark.asyncio
async def test_occupied_is_union_of_active_bookings(db, showtime_id, customer):
    """Pending and confirmed count; cancelled does not"""
    pending = await BookingService.create_booking(db, showtime_id, seats("A1", "A2"), customer)
    confirmed = await BookingService.create_booking(db, showtime_id, seats("B1"), customer)
    cancelled = await BookingService.create_booking(db, showtime_id, seats("C1", "C2"), customer)
    await BookingService.confirm_booking(db, confirmed.id)
    await BookingService.cancel_booking(db, cancelled.id)

    occupied = await SeatAvailabilityService.get_occupied_seat_ids(db, showtime_id)

    assert occupied == set(pending.seat_ids) | {"B1"}


@pytest.mark.asyncio
async def test_occupied_seats_unknown_showtime(db):
    with pytest.raises(ShowtimeNotFoundError):
        await SeatAvailabilityService.get_occupied_seat_ids(db, 404)


@pytest.mark.asyncio
async def test_find_conflicts_returns_only_taken_seats(db, showtime_id, customer):
    await BookingService.create_booking(db, showtime_id, seats("A3"), customer)

    conflicts = await SeatAvailabilityService.find_conflicts(db, showtime_id, ["A3", "A4"])

    assert conflicts == {"A3"}


@pytest.mark.asyncio
async def test_seat_map_marks_occupied_seats(db, showtime_id, customer):
    await BookingService.create_booking(db, showtime_id, seats("B2", "B3"), customer)

    seat_map = await SeatAvailabilityService.get_seat_map(db, showtime_id)

    assert seat_map.total_seats == 15
    assert seat_map.available_seats == 13
    assert list(seat_map.rows) == ["A", "B", "C"]
    occupied = [seat.seat_id for seat in seat_map.seats if seat.status == "occupied"]
    assert occupied == ["B2", "B3"]
    assert seat_map.rows["C"][0].seat_type == "premium"
    assert seat_map.rows["A"][0].seat_type == "regular"


@pytest.mark.asyncio
async def test_seat_map_unknown_showtime(db):
    with pytest.raises(ShowtimeNotFoundError):
        await SeatAvailabilityService.get_seat_map(db, 404)


@pytest.mark.asyncio
async def test_counter_tracks_occupied_seats(db, showtime_id, customer):
    """available_seats stays equal to total_seats minus occupied seats"""
    first = await BookingService.create_booking(db, showtime_id, seats("A1", "A2", "A3"), customer)
    second = await BookingService.create_booking(db, showtime_id, seats("B1", "B2"), customer)
    await BookingService.confirm_booking(db, second.id)
    await BookingService.cancel_booking(db, first.id)
    await BookingService.create_booking(db, showtime_id, seats("A1"), customer)

    occupied = await SeatAvailabilityService.get_occupied_seat_ids(db, showtime_id)
    assert await CatalogService.get_available_seats(db, showtime_id) == 15 - len(occupied) == 12

    report = await SeatAvailabilityService.reconcile_available_seats(db, showtime_id)
    assert report.drift == 0


@pytest.mark.asyncio
async def test_reconcile_repairs_drift(db, showtime_id, customer):
    await BookingService.create_booking(db, showtime_id, seats("A1", "A2"), customer)
    await CatalogService.set_available_seats(db, showtime_id, 3)
    await db.commit()

    report = await SeatAvailabilityService.reconcile_available_seats(db, showtime_id)
    await db.commit()

    assert report.previous_available_seats == 3
    assert report.actual_available_seats == 13
    assert report.drift == -10
    assert await CatalogService.get_available_seats(db, showtime_id) == 13


@pytest.mark.asyncio
async def test_reconcile_unknown_showtime(db):
    with pytest.raises(ShowtimeNotFoundError):
        await SeatAvailabilityService.reconcile_available_seats(db, 404)
