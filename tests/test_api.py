import pytest
from httpx import ASGITransport, AsyncClient

from app.api.deps import get_scheduler
from app.main import app
from tests.factories import PROVIDER_ID

BASE = "/api/v1"


@pytest.fixture
async def client(scheduler):
    app.dependency_overrides[get_scheduler] = lambda: scheduler
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def _booking(service, start="2026-10-26T10:00:00", **extra):
    body = {"customer_id": 42, "provider_id": PROVIDER_ID, "service_id": service.id, "start_time": start}
    body.update(extra)
    return body


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_slots_for_open_day(client):
    response = await client.get(f"{BASE}/providers/{PROVIDER_ID}/slots", params={"date": "2026-10-26"})
    assert response.status_code == 200
    data = response.json()
    assert data["date"] == "2026-10-26"
    assert data["all_slots"][0] == "09:00" and data["all_slots"][-1] == "17:00"
    assert data["booked_slots"] == []


async def test_slots_for_closed_day(client):
    response = await client.get(f"{BASE}/providers/{PROVIDER_ID}/slots", params={"date": "2026-10-27"})
    assert response.status_code == 409
    assert response.json()["code"] == "date_unavailable"


async def test_place_then_conflict(client, service):
    created = await client.post(f"{BASE}/bookings", json=_booking(service, duration_minutes=60))
    assert created.status_code == 201
    assert created.json()["end_time"] == "2026-10-26T11:00:00"

    clash = await client.post(f"{BASE}/bookings", json=_booking(service, "2026-10-26T10:30:00", customer_id=5))
    assert clash.status_code == 409
    assert clash.json()["code"] == "time_conflict"
    assert clash.json()["reason"] == "overlap"

    slots = await client.get(f"{BASE}/providers/{PROVIDER_ID}/slots", params={"date": "2026-10-26"})
    assert slots.json()["booked_slots"] == ["10:00", "10:30"]


async def test_timezone_aware_start_is_stored_as_utc(client, service):
    created = await client.post(f"{BASE}/bookings", json=_booking(service, "2026-10-26T12:00:00+02:00"))
    assert created.status_code == 201
    assert created.json()["start_time"] == "2026-10-26T10:00:00"


async def test_past_booking_is_unprocessable(client, service):
    response = await client.post(f"{BASE}/bookings", json=_booking(service, "2026-10-12T10:00:00"))
    assert response.status_code == 422
    assert response.json()["code"] == "booking_in_past"


async def test_recurring_returns_the_set(client, service):
    response = await client.post(
        f"{BASE}/bookings", json=_booking(service, recurring_type="weekly", recurring_count=2)
    )
    assert response.status_code == 201
    data = response.json()
    assert data["parent"]["start_time"] == "2026-10-26T10:00:00"
    assert [b["start_time"] for b in data["instances"]] == ["2026-11-02T10:00:00"]
    assert data["instances"][0]["recurring_parent_id"] == data["parent"]["id"]


async def test_status_and_reschedule(client, service):
    booking_id = (await client.post(f"{BASE}/bookings", json=_booking(service))).json()["id"]

    confirmed = await client.patch(f"{BASE}/bookings/{booking_id}/status", json={"status": "confirmed"})
    assert confirmed.status_code == 200
    assert confirmed.json()["status"] == "confirmed"

    moved = await client.patch(
        f"{BASE}/bookings/{booking_id}/reschedule", json={"start_time": "2026-10-26T14:00:00"}
    )
    assert moved.status_code == 200
    assert moved.json()["end_time"] == "2026-10-26T15:00:00"

    back = await client.patch(f"{BASE}/bookings/{booking_id}/status", json={"status": "pending"})
    assert back.status_code == 422
    assert back.json()["code"] == "invalid_status_transition"

    fetched = await client.get(f"{BASE}/bookings/{booking_id}")
    assert fetched.json()["start_time"] == "2026-10-26T14:00:00"


async def test_unknown_booking(client):
    response = await client.get(f"{BASE}/bookings/00000000-0000-0000-0000-000000000000")
    assert response.status_code == 404
    assert response.json()["code"] == "booking_not_found"


async def test_block_time(client, service):
    blocked = await client.post(
        f"{BASE}/providers/{PROVIDER_ID}/blocks",
        json={"start_time": "2026-10-26T12:00:00", "end_time": "2026-10-26T13:00:00"},
    )
    assert blocked.status_code == 201
    assert blocked.json()["status"] == "blocked"

    clash = await client.post(f"{BASE}/bookings", json=_booking(service, "2026-10-26T12:00:00"))
    assert clash.status_code == 409


async def test_request_validation_uses_framework_errors(client, service):
    response = await client.post(f"{BASE}/bookings", json={"provider_id": PROVIDER_ID})
    assert response.status_code == 422


async def test_closed_day_body_carries_empty_slot_lists(client):
    response = await client.get(f"{BASE}/providers/{PROVIDER_ID}/slots", params={"date": "2026-10-27"})
    data = response.json()
    assert data["all_slots"] == []
    assert data["available_slots"] == []
    assert data["booked_slots"] == []


async def test_list_and_delete_blocks(client, service):
    created = await client.post(
        f"{BASE}/providers/{PROVIDER_ID}/blocks",
        json={"start_time": "2026-10-26T12:00:00", "end_time": "2026-10-26T13:00:00", "notes": "lunch"},
    )
    block_id = created.json()["id"]

    listed = await client.get(f"{BASE}/providers/{PROVIDER_ID}/blocks", params={"date": "2026-10-26"})
    assert listed.status_code == 200
    assert [b["id"] for b in listed.json()] == [block_id]
    assert listed.json()[0]["notes"] == "lunch"

    deleted = await client.delete(f"{BASE}/providers/{PROVIDER_ID}/blocks/{block_id}")
    assert deleted.status_code == 204

    slots = await client.get(f"{BASE}/providers/{PROVIDER_ID}/slots", params={"date": "2026-10-26"})
    assert slots.json()["booked_slots"] == []
    listed = await client.get(f"{BASE}/providers/{PROVIDER_ID}/blocks", params={"date": "2026-10-26"})
    assert listed.json() == []


async def test_deleting_a_customer_booking_as_block_is_rejected(client, service):
    booking_id = (await client.post(f"{BASE}/bookings", json=_booking(service))).json()["id"]
    response = await client.delete(f"{BASE}/providers/{PROVIDER_ID}/blocks/{booking_id}")
    assert response.status_code == 422
    assert response.json()["code"] == "invalid_request"


async def test_block_over_booking_conflicts(client, service):
    await client.post(f"{BASE}/bookings", json=_booking(service))
    response = await client.post(
        f"{BASE}/providers/{PROVIDER_ID}/blocks",
        json={"start_time": "2026-10-26T10:30:00", "end_time": "2026-10-26T11:30:00"},
    )
    assert response.status_code == 409
    assert response.json()["reason"] == "overlap"
