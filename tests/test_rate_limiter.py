"""
Rate limit keys
"""
from starlette.requests import Request

from cinema_booking.middleware.rate_limiter import get_identifier


def make_request(query_string: bytes, client=("203.0.113.7", 5000)) -> Request:
    return Request({
        "type": "http",
        "method": "GET",
        "path": "/api/v1/bookings",
        "headers": [],
        "query_string": query_string,
        "client": client,
    })


def test_key_ignores_customer_email():
    keys = {
        get_identifier(make_request(f"customer_email=user{n}@example.com".encode()))
        for n in range(5)
    }

    assert keys == {"ip:203.0.113.7"}


def test_key_differs_per_client_address():
    first = get_identifier(make_request(b"", client=("203.0.113.7", 5000)))
    second = get_identifier(make_request(b"", client=("198.51.100.2", 5000)))

    assert first == "ip:203.0.113.7"
    assert second == "ip:198.51.100.2"
