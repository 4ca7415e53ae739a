import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["EXPIRY_SWEEPER_ENABLED"] = "false"

from datetime import date, timedelta
from decimal import Decimal

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from cinema_booking.core import clock
from cinema_booking.core.database import Base, get_db
from cinema_booking.main import app
from cinema_booking.models import Movie
from cinema_booking.schemas import CustomerInfo, SeatSelection
from cinema_booking.scripts.seed_data import build_screen, build_showtime


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test"""
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def showtime_id(session_factory):
    """A showtime on a 3 row x 5 seat screen (A1..C5), 10.00 per seat"""
    async with session_factory() as session:
        movie = Movie(title="Test Feature", duration_minutes=110)
        screen = build_screen("Test Screen", "ABC", 5)
        showtime = build_showtime(movie, screen, date(2026, 11, 1), "19:30", Decimal("10.00"))
        session.add_all([movie, screen, showtime])
        await session.commit()
        return showtime.id


@pytest_asyncio.fixture
async def db(session_factory, showtime_id):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory, showtime_id):
    """HTTP client bound to the app, one session per request"""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
    app.dependency_overrides.clear()


@pytest.fixture
def advance_clock(monkeypatch):
    """Move the booking clock forward: advance_clock(minutes=11)"""
    real_utcnow = clock.utcnow
    offset = timedelta()

    def advance(**kwargs):
        nonlocal offset
        offset += timedelta(**kwargs)
        monkeypatch.setattr(clock, "utcnow", lambda: real_utcnow() + offset)

    return advance


@pytest.fixture
def customer():
    return CustomerInfo(name="Ada Lovelace", email="Ada@Example.com", phone="555-0100")


def seats(*seat_ids, price=None):
    return [SeatSelection(seat_id=seat_id, price=price) for seat_id in seat_ids]


def booking_payload(showtime_id, *seat_ids, email="ada@example.com"):
    return {
        "showtime_id": showtime_id,
        "seats": [{"seat_id": seat_id} for seat_id in seat_ids],
        "customer_info": {"name": "Ada Lovelace", "email": email, "phone": "555-0100"},
    }
