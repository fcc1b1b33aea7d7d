"""Payment history and listings across property and apartment bookings."""
from datetime import UTC, datetime, timedelta

import pytest

from propbook.models import ApartmentBooking


@pytest.fixture
def mixed_payments(db_session, make_user, make_property, make_unit, make_payment):
    user = make_user()
    prop = make_property()
    unit = make_unit()
    base = datetime(2026, 1, 1, tzinfo=UTC)
    d1 = make_payment(user, prop.id, "100.00", payment_date=base)
    d2 = make_payment(user, prop.id, "200.00", payment_date=base + timedelta(days=10))
    d3 = make_payment(user, unit.apartment_id, "500.00", payment_date=base + timedelta(days=5))
    db_session.add(
        ApartmentBooking(user_id=user.id, apartment_id=unit.apartment_id, unit_id=unit.id, payment_id=d3.id)
    )
    db_session.commit()
    return user, d1, d2, d3


@pytest.mark.anyio("asyncio")
async def test_all_user_payments_merges_and_sorts_desc(client, mixed_payments):
    user, d1, d2, d3 = mixed_payments

    response = await client.get(f"/payments/users/{user.id}/all")

    assert response.status_code == 200
    payments = response.json()["payments"]
    assert [p["id"] for p in payments] == [d2.id, d3.id, d1.id]
    assert [p["payment_type"] for p in payments] == ["property", "apartment", "property"]
    assert payments[1]["unit_number"] == "101"
    assert payments[1]["booking_id"] is not None


@pytest.mark.anyio("asyncio")
async def test_history_lists_property_payments_only(client, mixed_payments):
    user, d1, d2, _ = mixed_payments

    response = await client.get(f"/payments/history/{user.id}")

    assert response.status_code == 200
    payload = response.json()
    assert payload["message"] == "Payments retrieved successfully"
    assert [p["id"] for p in payload["payments"]] == [d2.id, d1.id]
    assert payload["payments"][0]["property_name"] == "Lakeside Villa"


@pytest.mark.anyio("asyncio")
async def test_history_for_user_without_payments(client, make_user):
    user = make_user()

    response = await client.get(f"/payments/history/{user.id}")

    assert response.status_code == 200
    assert response.json() == {"message": "No payments found for this user", "payments": []}


@pytest.mark.anyio("asyncio")
async def test_all_payments_covers_both_domains(client, mixed_payments):
    _, d1, d2, d3 = mixed_payments

    response = await client.get("/payments")

    assert response.status_code == 200
    assert [p["id"] for p in response.json()["payments"]] == [d2.id, d3.id, d1.id]


@pytest.mark.anyio("asyncio")
async def test_all_payments_empty(client):
    response = await client.get("/payments")

    assert response.status_code == 200
    assert response.json() == {"message": "No payments found", "payments": []}
