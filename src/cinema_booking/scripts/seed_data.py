"""
Seed script to populate the catalog with sample movies, screens and showtimes

Usage:
    python -m cinema_booking.scripts.seed_data
"""
import asyncio
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Sequence

from sqlalchemy import select

from cinema_booking.core import clock
from cinema_booking.core.database import AsyncSessionLocal, init_db
from cinema_booking.models import Movie, Screen, ScreenSeat, Showtime

PREMIUM_ROWS = 2  # Back rows
DAILY_TIMES = ["10:00", "13:30", "17:00", "20:30"]


def build_screen(
    name: str,
    rows: Sequence[str],
    seats_per_row: int,
    screen_type: str = "Standard",
    price_multiplier: Decimal = Decimal("1.00"),
) -> Screen:
    """Screen with a rectangular layout: seat ids A1..A{n}, B1.., back rows premium"""
    seats: List[ScreenSeat] = []
    for index, row in enumerate(rows):
        seat_type = "premium" if index >= len(rows) - PREMIUM_ROWS else "regular"
        for number in range(1, seats_per_row + 1):
            seats.append(ScreenSeat(
                seat_id=f"{row}{number}",
                row=row,
                number=number,
                seat_type=seat_type,
            ))

    return Screen(
        name=name,
        screen_type=screen_type,
        total_seats=len(seats),
        price_multiplier=price_multiplier,
        seats=seats,
    )


def build_showtime(movie: Movie, screen: Screen, show_date: date, time: str, base_price: Decimal) -> Showtime:
    """Showtime priced by the screen's multiplier, with every seat free"""
    price = (base_price * Decimal(screen.price_multiplier)).quantize(Decimal("0.01"))
    return Showtime(
        movie=movie,
        screen=screen,
        date=show_date,
        time=time,
        price=price,
        total_seats=screen.total_seats,
        available_seats=screen.total_seats,
    )


async def create_sample_catalog(db, days: int = 3):
    """Create movies, screens and a few days of showtimes"""
    existing = await db.execute(select(Screen).limit(1))
    if existing.scalar_one_or_none():
        print("Catalog already seeded, skipping...")
        return

    movies = [
        Movie(title="The Last Projectionist", duration_minutes=124, status="now_showing"),
        Movie(title="Midnight at the Drive-In", duration_minutes=98, status="now_showing"),
        Movie(title="Silver Screen Heist", duration_minutes=141, status="now_showing"),
    ]
    screens = [
        build_screen("Screen 1", "ABCDEFGH", 12),
        build_screen("Screen 2 - 3D", "ABCDEF", 10, "3D", Decimal("1.30")),
        build_screen("IMAX", "ABCDEFGHIJ", 16, "IMAX", Decimal("1.50")),
    ]
    db.add_all(movies + screens)

    today = clock.utcnow().date()
    count = 0
    for offset in range(days):
        show_date = today + timedelta(days=offset)
        for movie, screen in zip(movies, screens):
            for time in DAILY_TIMES:
                db.add(build_showtime(movie, screen, show_date, time, Decimal("12.00")))
                count += 1

    await db.commit()
    print(f"Created {len(movies)} movies, {len(screens)} screens, {count} showtimes")


async def seed_database():
    print("Initializing database...")
    await init_db()

    async with AsyncSessionLocal() as db:
        await create_sample_catalog(db)

    print("Seeding complete")


if __name__ == "__main__":
    asyncio.run(seed_database())
