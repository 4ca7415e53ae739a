"""
Cache service for the showtime seat map
"""
import logging
from typing import Optional, Dict, Any

from cinema_booking.core.config import settings
from cinema_booking.core.redis import redis_client

logger = logging.getLogger(__name__)


class CacheService:
    """Service for managing cache keys and invalidation"""

    SHOWTIME_SEATS_KEY = "showtime:{showtime_id}:seats"

    @staticmethod
    async def get_showtime_seats(showtime_id: int) -> Optional[Dict[str, Any]]:
        """Get cached seat map"""
        key = CacheService.SHOWTIME_SEATS_KEY.format(showtime_id=showtime_id)
        cached = await redis_client.get(key)
        if cached:
            logger.debug(f"Cache HIT: {key}")
        return cached

    @staticmethod
    async def set_showtime_seats(showtime_id: int, data: Dict[str, Any]) -> bool:
        """Cache seat map (short TTL due to high volatility)"""
        key = CacheService.SHOWTIME_SEATS_KEY.format(showtime_id=showtime_id)
        return await redis_client.set(key, data, ttl=settings.REDIS_SEATS_TTL)

    @staticmethod
    async def invalidate_showtime_seats(*showtime_ids: int) -> bool:
        """Drop cached seat maps after a booking transition"""
        if not showtime_ids:
            return False
        keys = [
            CacheService.SHOWTIME_SEATS_KEY.format(showtime_id=showtime_id)
            for showtime_id in showtime_ids
        ]
        return await redis_client.delete(*keys)
