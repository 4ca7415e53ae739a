"""
Rate limiting using SlowAPI
"""
from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from cinema_booking.core.config import settings


def get_identifier(request: Request) -> str:
    """
    Get identifier for rate limiting

    Always the client address: customer_email is caller-supplied, so keying
    on it would let a client rotate emails past the limit.
    """
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_identifier,
    default_limits=["100/minute"],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)
