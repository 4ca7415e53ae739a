"""
HTTP surface: status codes and payloads
"""
from decimal import Decimal

import pytest

from conftest import booking_payload


async def create(client, showtime_id, *seat_ids, **kwargs):
    response = await client.post("/api/v1/bookings", json=booking_payload(showtime_id, *seat_ids, **kwargs))
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["database"] == "healthy"
    assert "X-Trace-ID" in response.headers


@pytest.mark.asyncio
async def test_metrics_endpoint(client, showtime_id):
    await create(client, showtime_id, "A1")

    response = await client.get("/metrics")

    assert response.status_code == 200
    assert "bookings_created_total" in response.text
    assert "http_requests_total" in response.text


@pytest.mark.asyncio
async def test_create_booking(client, showtime_id):
    body = await create(client, showtime_id, "a1", "A2", email="Ada@Example.com")

    assert body["status"] == "pending"
    assert [seat["seat_id"] for seat in body["seats"]] == ["A1", "A2"]
    assert Decimal(body["total_amount"]) == Decimal("20.00")
    assert body["customer_info"]["email"] == "ada@example.com"
    assert body["transaction_id"] is None
    assert 0 < body["time_remaining_seconds"] <= 600


@pytest.mark.asyncio
async def test_create_booking_seat_prices(client, showtime_id):
    payload = booking_payload(showtime_id, "A1", "A2")
    payload["seats"] = [{"seat_id": "A1", "price": "0"}, {"seat_id": "A2", "price": "12.50"}]

    response = await client.post("/api/v1/bookings", json=payload)

    assert response.status_code == 201
    body = response.json()
    assert [Decimal(seat["price"]) for seat in body["seats"]] == [Decimal("10.00"), Decimal("12.50")]
    assert Decimal(body["total_amount"]) == Decimal("22.50")

    stored = await client.get(f"/api/v1/bookings/{body['id']}")
    assert Decimal(stored.json()["total_amount"]) == Decimal("22.50")


@pytest.mark.asyncio
async def test_create_booking_seat_conflict(client, showtime_id):
    await create(client, showtime_id, "B3")

    response = await client.post("/api/v1/bookings", json=booking_payload(showtime_id, "B3", "B4"))

    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["error"] == "seat_conflict"
    assert detail["unavailable_seats"] == ["B3"]


@pytest.mark.asyncio
async def test_create_booking_unknown_showtime(client):
    response = await client.post("/api/v1/bookings", json=booking_payload(999, "A1"))

    assert response.status_code == 404
    assert response.json()["detail"]["error"] == "not_found"


@pytest.mark.asyncio
async def test_create_booking_unknown_seat(client, showtime_id):
    response = await client.post("/api/v1/bookings", json=booking_payload(showtime_id, "Z1"))

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "validation_error"


@pytest.mark.asyncio
@pytest.mark.parametrize("payload_update", [
    {"seats": []},
    {"customer_info": {"name": "Ada", "email": "not-an-email", "phone": "555"}},
    {"customer_info": {"name": "  ", "email": "ada@example.com", "phone": "555"}},
    {"seats": [{"seat_id": "A1", "price": "10.005"}]},
    {"seats": [{"seat_id": "A1", "price": "-5"}]},
])
async def test_create_booking_rejects_bad_payload(client, showtime_id, payload_update):
    payload = booking_payload(showtime_id, "A1")
    payload.update(payload_update)

    response = await client.post("/api/v1/bookings", json=payload)

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_confirm_booking(client, showtime_id):
    booking = await create(client, showtime_id, "A1")

    response = await client.post(f"/api/v1/bookings/{booking['id']}/confirm")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "confirmed"
    assert body["transaction_id"].startswith("TXN")
    assert body["time_remaining_seconds"] == 0

    again = await client.post(f"/api/v1/bookings/{booking['id']}/confirm")
    assert again.status_code == 409
    assert again.json()["detail"]["error"] == "already_confirmed"


@pytest.mark.asyncio
async def test_confirm_with_transaction_id(client, showtime_id):
    booking = await create(client, showtime_id, "A1")

    response = await client.post(
        f"/api/v1/bookings/{booking['id']}/confirm",
        json={"transaction_id": "pay_42"},
    )

    assert response.json()["transaction_id"] == "pay_42"


@pytest.mark.asyncio
async def test_confirm_expired_booking_returns_gone(client, showtime_id, advance_clock):
    booking = await create(client, showtime_id, "A1", "A2")
    advance_clock(minutes=11)

    response = await client.post(f"/api/v1/bookings/{booking['id']}/confirm")

    assert response.status_code == 410
    assert response.json()["detail"]["error"] == "expired"

    stored = await client.get(f"/api/v1/bookings/{booking['id']}")
    assert stored.json()["status"] == "expired"
    occupied = await client.get(f"/api/v1/showtimes/{showtime_id}/occupied-seats")
    assert occupied.json()["occupied_seats"] == []


@pytest.mark.asyncio
async def test_confirm_cancelled_booking(client, showtime_id):
    booking = await create(client, showtime_id, "A1")
    await client.delete(f"/api/v1/bookings/{booking['id']}")

    response = await client.post(f"/api/v1/bookings/{booking['id']}/confirm")

    assert response.status_code == 409
    assert response.json()["detail"]["error"] == "invalid_state"


@pytest.mark.asyncio
async def test_cancel_booking(client, showtime_id):
    booking = await create(client, showtime_id, "C1", "C2")

    response = await client.delete(f"/api/v1/bookings/{booking['id']}")

    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"

    again = await client.delete(f"/api/v1/bookings/{booking['id']}")
    assert again.status_code == 409
    assert again.json()["detail"]["error"] == "already_cancelled"

    seat_map = (await client.get(f"/api/v1/showtimes/{showtime_id}/seats")).json()
    assert seat_map["available_seats"] == 15


@pytest.mark.asyncio
async def test_cancel_lapsed_booking_returns_gone(client, showtime_id, advance_clock):
    booking = await create(client, showtime_id, "A1")
    advance_clock(minutes=11)

    response = await client.delete(f"/api/v1/bookings/{booking['id']}")

    assert response.status_code == 410


@pytest.mark.asyncio
@pytest.mark.parametrize("method, path", [
    ("GET", "/api/v1/bookings/9999"),
    ("DELETE", "/api/v1/bookings/9999"),
    ("POST", "/api/v1/bookings/9999/confirm"),
    ("GET", "/api/v1/showtimes/9999/occupied-seats"),
    ("GET", "/api/v1/showtimes/9999/seats"),
    ("POST", "/api/v1/showtimes/9999/reconcile"),
])
async def test_unknown_ids_return_not_found(client, method, path):
    response = await client.request(method, path)

    assert response.status_code == 404
    assert response.json()["detail"]["error"] == "not_found"


@pytest.mark.asyncio
async def test_list_bookings(client, showtime_id):
    first = await create(client, showtime_id, "A1")
    second = await create(client, showtime_id, "A2")
    await create(client, showtime_id, "A3", email="grace@example.com")
    await client.delete(f"/api/v1/bookings/{first['id']}")

    response = await client.get("/api/v1/bookings", params={"customer_email": "ada@example.com"})

    body = response.json()
    assert response.status_code == 200
    assert [b["id"] for b in body["bookings"]] == [second["id"]]
    assert body["total"] == 1
    assert body["total_pages"] == 1

    cancelled = await client.get("/api/v1/bookings", params={"status": "cancelled"})
    assert [b["id"] for b in cancelled.json()["bookings"]] == [first["id"]]


@pytest.mark.asyncio
async def test_list_bookings_pagination(client, showtime_id):
    for seat_id in ("A1", "A2", "A3"):
        await create(client, showtime_id, seat_id)

    response = await client.get("/api/v1/bookings", params={"page": 2, "limit": 2})

    body = response.json()
    assert body["total"] == 3
    assert body["total_pages"] == 2
    assert len(body["bookings"]) == 1

    too_big = await client.get("/api/v1/bookings", params={"limit": 500})
    assert too_big.status_code == 422


@pytest.mark.asyncio
async def test_occupied_seats_sorted(client, showtime_id):
    await create(client, showtime_id, "B2", "A5")

    response = await client.get(f"/api/v1/showtimes/{showtime_id}/occupied-seats")

    assert response.status_code == 200
    assert response.json() == {"showtime_id": showtime_id, "occupied_seats": ["A5", "B2"]}


@pytest.mark.asyncio
async def test_reconcile_endpoint(client, showtime_id):
    await create(client, showtime_id, "A1")

    response = await client.post(f"/api/v1/showtimes/{showtime_id}/reconcile")

    assert response.status_code == 200
    assert response.json()["drift"] == 0
    assert response.json()["actual_available_seats"] == 14
