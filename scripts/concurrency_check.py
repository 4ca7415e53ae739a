"""
Concurrency check: many customers race for the same seats of one showtime.

Run against a live server seeded with `python -m cinema_booking.scripts.seed_data`
and started with RATE_LIMIT_ENABLED=false:

    python scripts/concurrency_check.py --showtime-id 1 --seats A1 A2 --customers 100

Expected: exactly one booking succeeds, every other request gets 409, and
the occupied-seat list afterwards contains each target seat once.
"""
import argparse
import asyncio
import logging
import time
from collections import Counter
from typing import Dict, List

import aiohttp

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def attempt_booking(session: aiohttp.ClientSession, api_url: str, showtime_id: int,
                          seats: List[str], customer: int) -> Dict:
    """Attempt to book the target seats"""
    start_time = time.time()
    payload = {
        "showtime_id": showtime_id,
        "seats": [{"seat_id": seat_id} for seat_id in seats],
        "customer_info": {
            "name": f"Customer {customer}",
            "email": f"customer{customer}@example.com",
            "phone": f"555-{customer:04d}",
        },
    }

    try:
        async with session.post(f"{api_url}/bookings", json=payload) as response:
            result = {
                "customer": customer,
                "status_code": response.status,
                "success": response.status == 201,
                "duration_ms": (time.time() - start_time) * 1000,
                "body": await response.json(content_type=None),
            }
            return result
    except Exception as e:
        return {
            "customer": customer,
            "status_code": 0,
            "success": False,
            "duration_ms": (time.time() - start_time) * 1000,
            "body": {"error": str(e)},
        }


def analyze_results(results: List[Dict], total_duration: float) -> bool:
    """Returns True if exactly one customer got the seats"""
    successes = [r for r in results if r["success"]]
    status_codes = Counter(r["status_code"] for r in results)
    durations = [r["duration_ms"] for r in results]

    logger.info("=" * 60)
    logger.info(f"Total requests: {len(results)}")
    logger.info(f"Successful bookings: {len(successes)}")
    for code, count in sorted(status_codes.items()):
        logger.info(f"  HTTP {code}: {count}")
    logger.info(f"Average response: {sum(durations) / len(durations):.2f}ms "
                f"(min {min(durations):.2f}ms, max {max(durations):.2f}ms)")
    logger.info(f"Throughput: {len(results) / total_duration:.2f} req/s")
    logger.info("=" * 60)

    if status_codes.get(500):
        logger.error(f"{status_codes[500]} requests failed with HTTP 500")

    if len(successes) == 1:
        logger.info(f"PASS: one booking succeeded (customer {successes[0]['customer']})")
        return True
    if not successes:
        logger.error("FAIL: no booking succeeded")
    else:
        logger.error(f"FAIL: {len(successes)} bookings succeeded - DOUBLE BOOKING")
    return False


async def verify_occupied_seats(session: aiohttp.ClientSession, api_url: str,
                                showtime_id: int, seats: List[str]) -> bool:
    async with session.get(f"{api_url}/showtimes/{showtime_id}/occupied-seats") as response:
        occupied = (await response.json())["occupied_seats"]

    counts = Counter(occupied)
    duplicated = [seat_id for seat_id, n in counts.items() if n > 1]
    missing = [seat_id for seat_id in seats if seat_id not in counts]
    if duplicated or missing:
        logger.error(f"FAIL: duplicated={duplicated} missing={missing}")
        return False
    logger.info("PASS: occupied seats consistent")
    return True


async def main(args) -> bool:
    api_url = args.api_url.rstrip("/")
    connector = aiohttp.TCPConnector(limit=50, limit_per_host=50)
    timeout = aiohttp.ClientTimeout(total=30)

    async with aiohttp.ClientSession(connector=connector, timeout=timeout) as session:
        logger.info(f"Racing {args.customers} customers for seats {args.seats} "
                    f"on showtime {args.showtime_id}")
        start_time = time.time()
        results = await asyncio.gather(*[
            attempt_booking(session, api_url, args.showtime_id, args.seats, customer)
            for customer in range(1, args.customers + 1)
        ])
        passed = analyze_results(results, time.time() - start_time)
        passed = await verify_occupied_seats(session, api_url, args.showtime_id, args.seats) and passed

        # Leave the showtime as we found it
        for result in results:
            if result["success"]:
                async with session.delete(f"{api_url}/bookings/{result['body']['id']}") as response:
                    logger.info(f"Cancelled booking {result['body']['id']}: HTTP {response.status}")

    return passed


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Double-booking check against a running server")
    parser.add_argument("--api-url", default="http://localhost:8000/api/v1")
    parser.add_argument("--showtime-id", type=int, default=1)
    parser.add_argument("--seats", nargs="+", default=["A1", "A2", "A3"])
    parser.add_argument("--customers", type=int, default=100)
    ok = asyncio.run(main(parser.parse_args()))
    raise SystemExit(0 if ok else 1)
