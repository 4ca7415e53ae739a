"""
FastAPI application entry point
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text

from cinema_booking.api import bookings, showtimes
from cinema_booking.core.config import settings
from cinema_booking.core.database import engine
from cinema_booking.core.logging_config import setup_logging, get_trace_id
from cinema_booking.core.metrics import get_metrics
from cinema_booking.core.redis import redis_client
from cinema_booking.middleware.rate_limiter import limiter
from cinema_booking.middleware.tracing import TracingMiddleware
from cinema_booking.services import start_expiry_worker, stop_expiry_worker

logger = logging.getLogger(__name__)


async def database_reachable() -> bool:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.exception("Database check failed")
        return False


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: logging, database check, Redis, optional expiry sweep"""
    setup_logging()
    logger.info(f"Starting {settings.APP_NAME} {settings.APP_VERSION} on {engine.dialect.name}")

    if not await database_reachable():
        raise RuntimeError("Database unreachable at startup")

    await redis_client.connect()

    # Holds are expired lazily on read; the periodic sweep is opt-in
    await start_expiry_worker()

    yield

    await stop_expiry_worker()
    await redis_client.close()
    await engine.dispose()
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Cinema seat holds, confirmations and cancellations",
    lifespan=lifespan,
)

app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.warning(f"Rate limit exceeded for {request.method} {request.url.path}")
    return JSONResponse(
        status_code=429,
        content={
            "error": "rate_limit_exceeded",
            "message": "Too many requests. Please slow down.",
            "detail": str(exc.detail),
            "trace_id": get_trace_id(),
        },
        headers={"Retry-After": "60"},
    )


app.add_middleware(TracingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness plus dependency status; Redis is optional"""
    database_ok = await database_reachable()
    return JSONResponse(
        status_code=200 if database_ok else 503,
        content={
            "status": "healthy" if database_ok else "degraded",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "database": "healthy" if database_ok else "unavailable",
            "redis": "healthy" if redis_client.is_connected else "unavailable",
            "expiry_sweeper": "enabled" if settings.EXPIRY_SWEEPER_ENABLED else "disabled",
        },
    )


@app.get("/metrics", tags=["Health"])
async def metrics():
    """Prometheus scrape endpoint"""
    body, content_type = get_metrics()
    return Response(content=body, media_type=content_type)


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": "Welcome to the Cinema Ticket Booking API",
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": "/health",
        "hold_duration_minutes": settings.HOLD_DURATION_MINUTES,
        "max_seats_per_booking": settings.MAX_SEATS_PER_BOOKING,
    }


app.include_router(showtimes.router, prefix="/api/v1", tags=["Showtimes"])
app.include_router(bookings.router, prefix="/api/v1", tags=["Bookings"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "cinema_booking.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
