#!/usr/bin/env python3
"""Manual smoke test against a running scheduling API (start it with `python -m salon_scheduling.main`)."""

import sys
from datetime import datetime, timedelta, timezone

import httpx


BASE_URL = "http://127.0.0.1:8001"
PREFIX = f"{BASE_URL}/api/v1/appointments"


def _tomorrow_at(hour: int) -> datetime:
    day = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0) + timedelta(days=1)
    return day.replace(hour=hour)


def test_create():
    """Book a cut and blow dry, letting the server derive the end time."""
    print("=" * 60)
    print("Testing POST /api/v1/appointments")
    print("=" * 60)

    payload = {
        "client_id": "smoke-client",
        "provider_id": "smoke-stylist",
        "start": _tomorrow_at(10).isoformat(),
        "service_ids": ["ladies-cut-blow-dry"],
        "notes": "smoke test",
    }

    try:
        response = httpx.post(PREFIX, json=payload, timeout=10.0)
        response.raise_for_status()
        data = response.json()
        print(f"✅ Created {data['id']} {data['start']} -> {data['end']}")
        return data["id"]
    except httpx.HTTPStatusError as e:
        print(f"❌ HTTP Error: {e.response.status_code}")
        print(f"Response: {e.response.text}")
        return None
    except Exception as e:
        print(f"❌ Error: {e}")
        return None


def test_conflict():
    print("\nTesting overlapping booking")
    payload = {
        "client_id": "smoke-client-2",
        "provider_id": "smoke-stylist",
        "start": _tomorrow_at(10).replace(minute=30).isoformat(),
        "service_ids": ["gents-wash-cut"],
    }
    response = httpx.post(PREFIX, json=payload, timeout=10.0)
    if response.status_code == 409:
        print(f"✅ Rejected: {response.json()['detail']['conflict']}")
        return True
    print(f"❌ Expected 409, got {response.status_code}: {response.text}")
    return False


def test_reschedule(appointment_id: str):
    print("\nTesting POST /api/v1/appointments/{id}/reschedule")
    payload = {"start": _tomorrow_at(14).isoformat(), "end": _tomorrow_at(15).isoformat()}
    response = httpx.post(f"{PREFIX}/{appointment_id}/reschedule", json=payload, timeout=10.0)
    if response.is_success:
        print(f"✅ Moved to {response.json()['start']}")
        return True
    print(f"❌ HTTP {response.status_code}: {response.text}")
    return False


def test_cancel(appointment_id: str):
    print("\nTesting PATCH /api/v1/appointments/{id}/cancel")
    response = httpx.patch(f"{PREFIX}/{appointment_id}/cancel", json={"reason": "smoke test cleanup"}, timeout=10.0)
    if response.is_success and response.json()["status"] == "CANCELLED":
        print("✅ Cancelled")
        return True
    print(f"❌ HTTP {response.status_code}: {response.text}")
    return False


def main():
    appointment_id = test_create()
    if not appointment_id:
        sys.exit(1)
    results = [test_conflict(), test_reschedule(appointment_id), test_cancel(appointment_id)]
    sys.exit(0 if all(results) else 1)


if __name__ == "__main__":
    main()
