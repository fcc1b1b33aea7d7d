"""Recording property payments."""
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from propbook.dependencies import get_payment_orchestrator
from propbook.main import app
from propbook.models import AuditLog, Payment
from propbook.schemas.payment import DETAIL_FIELDS, PaymentCreate
from propbook.services.apartments import ApartmentBookingService
from propbook.services.payments import PaymentOrchestrator, PaymentOutcome
from propbook.services.repository import PaymentRepository, RepositoryResult

CARD = {"card_holder": "Asha Menon", "card_number": "4111111111111234", "expiry_date": "12/30", "cvv": "123"}


def _payment_count(db_session) -> int:
    return db_session.scalar(select(func.count()).select_from(Payment))


@pytest.mark.anyio("asyncio")
async def test_card_alias_is_stored_as_credit_card(client, db_session, make_user, make_property):
    user = make_user()
    prop = make_property()

    response = await client.post(
        "/payments",
        json={
            "user_id": user.id,
            "property_id": prop.id,
            "total_price": "1000.00",
            "amount_paid": "1000.00",
            "payment_method": "card",
            "payment_details": CARD,
            "status": "completed",
            "invoice_number": "INV-1",
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Payment recorded successfully"
    assert body["soft_failures"] == []
    payload = body["payment"]
    assert payload["payment_method"] == "credit_card"
    assert set(payload["payment_details"]) == set(DETAIL_FIELDS)
    assert payload["payment_details"]["card_holder"] == "Asha Menon"
    assert payload["payment_details"]["upi_id"] is None
    assert Decimal(payload["amount_paid"]) == Decimal("1000")
    assert payload["invoice_number"] == "INV-1"

    audit = db_session.scalars(select(AuditLog).where(AuditLog.action == "PAYMENT_RECORDED")).one()
    assert audit.entity_id == payload["id"]
    assert audit.data_json["payment_details"]["card_number"] == "***1234"
    assert audit.data_json["payment_details"]["cvv"] == "***"


@pytest.mark.anyio("asyncio")
async def test_validation_errors_do_not_persist(client, db_session, make_user):
    user = make_user()

    response = await client.post(
        "/payments",
        json={"user_id": user.id, "payment_method": "credit_card", "payment_details": {"card_holder": "Asha"}},
    )

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_FAILED"
    assert error["details"]["errors"] == [
        "property_id is required",
        "amount_paid is required",
        "status is required",
        "card_number is required",
        "expiry_date is required",
        "cvv is required",
    ]
    assert _payment_count(db_session) == 0


@pytest.mark.anyio("asyncio")
async def test_invalid_razorpay_signature_is_rejected(client, db_session, make_user, make_property):
    user = make_user()
    prop = make_property()

    response = await client.post(
        "/payments",
        json={
            "user_id": user.id,
            "property_id": prop.id,
            "amount_paid": "250",
            "payment_method": "razorpay",
            "payment_details": {
                "razorpay_order_id": "order_1",
                "razorpay_payment_id": "pay_1",
                "razorpay_signature": "forged",
            },
            "status": "completed",
        },
    )

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "INVALID_SIGNATURE"
    assert error["message"] == "Invalid Razorpay signature"
    assert _payment_count(db_session) == 0


@pytest.mark.anyio("asyncio")
async def test_razorpay_payment_is_recorded(client, make_user, make_property, verifier):
    user = make_user()
    prop = make_property()

    response = await client.post(
        "/payments",
        json={
            "user_id": user.id,
            "property_id": prop.id,
            "amount_paid": "250",
            "payment_method": "razorpay",
            "payment_details": {
                "razorpay_order_id": "order_1",
                "razorpay_payment_id": "pay_1",
                "razorpay_signature": verifier.sign("order_1", "pay_1"),
            },
            "status": "completed",
        },
    )

    assert response.status_code == 200
    details = response.json()["payment"]["payment_details"]
    assert details["razorpay_payment_id"] == "pay_1"
    assert details["card_number"] is None


@pytest.mark.anyio("asyncio")
async def test_unknown_detail_keys_are_malformed(client, make_user):
    user = make_user()

    response = await client.post(
        "/payments",
        json={
            "user_id": user.id,
            "property_id": 1,
            "amount_paid": "10",
            "payment_method": "upi",
            "payment_details": {"upi_id": "a@b", "pin": "1234"},
            "status": "completed",
        },
    )

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_FAILED"
    assert error["message"] == "Malformed request"


@pytest.mark.anyio("asyncio")
async def test_deposit_without_total_price_uses_property_price(client, make_user, make_property):
    user = make_user()
    prop = make_property(price="1000.00")

    response = await client.post(
        "/payments",
        json={
            "user_id": user.id,
            "property_id": prop.id,
            "amount_paid": "250",
            "payment_method": "upi",
            "payment_details": {"upi_id": "asha@okbank"},
            "status": "completed",
            "is_deposit": True,
        },
    )

    assert response.status_code == 200
    payload = response.json()["payment"]
    assert payload["is_deposit"] is True
    assert Decimal(payload["total_price"]) == Decimal("1000")


def test_deposit_without_known_price_records_soft_failure(db_session, fake_gateway, verifier, make_user, make_property):
    user = make_user()
    prop = make_property(price=None)
    orchestrator = PaymentOrchestrator(fake_gateway, verifier, ApartmentBookingService(fake_gateway, verifier))

    outcome = orchestrator.create_payment(
        db_session,
        PaymentCreate(
            user_id=user.id,
            property_id=prop.id,
            amount_paid=Decimal("250"),
            payment_method="upi",
            payment_details={"upi_id": "asha@okbank"},
            status="completed",
            is_deposit=True,
        ),
    )

    assert isinstance(outcome, PaymentOutcome)
    assert outcome.payment.total_price is None
    assert outcome.message == "Payment recorded successfully"
    assert [failure.code for failure in outcome.soft_failures] == ["property_price_unavailable"]


@pytest.mark.anyio("asyncio")
async def test_soft_failures_are_returned_with_the_payment(client, make_user, make_property):
    user = make_user()
    prop = make_property(price=None)

    response = await client.post(
        "/payments",
        json={
            "user_id": user.id,
            "property_id": prop.id,
            "amount_paid": "250",
            "payment_method": "upi",
            "payment_details": {"upi_id": "asha@okbank"},
            "status": "completed",
            "is_deposit": True,
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Payment recorded successfully"
    assert [failure["code"] for failure in body["soft_failures"]] == ["property_price_unavailable"]
    assert body["payment"]["total_price"] is None


@pytest.mark.anyio("asyncio")
async def test_repository_failure_is_passed_through(client, db_session):
    response = await client.post(
        "/payments",
        json={
            "user_id": 999999,
            "property_id": 1,
            "amount_paid": "250",
            "payment_method": "upi",
            "payment_details": {"upi_id": "asha@okbank"},
            "status": "completed",
        },
    )

    assert response.status_code == 400
    assert response.json()["error"] == {
        "code": "PAYMENT_NOT_RECORDED",
        "message": "Failed to record payment: IntegrityError",
    }


@pytest.mark.anyio("asyncio")
async def test_unexpected_exception_becomes_internal_error_envelope(fake_gateway):
    class BrokenOrchestrator:
        def get_all_payments(self, db):
            raise RuntimeError("listing exploded")

    app.dependency_overrides[get_payment_orchestrator] = lambda: BrokenOrchestrator()
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as async_client:
            response = await async_client.get("/payments")
    finally:
        app.dependency_overrides.pop(get_payment_orchestrator, None)

    assert response.status_code == 500
    assert response.json() == {
        "error": {
            "code": "INTERNAL_SERVER_ERROR",
            "message": "An unexpected error occurred.",
            "details": {"error": "listing exploded"},
        }
    }


def test_deposit_price_lookup_error_records_soft_failure(monkeypatch, db_session, fake_gateway, verifier):
    def _broken_price(self, property_id):
        raise SQLAlchemyError("connection lost")

    def _insert(self, payment, *, actor="system"):
        return RepositoryResult(success=True, message="Payment recorded successfully", payment=payment)

    monkeypatch.setattr(PaymentRepository, "property_price", _broken_price)
    monkeypatch.setattr(PaymentRepository, "insert", _insert)
    orchestrator = PaymentOrchestrator(fake_gateway, verifier, ApartmentBookingService(fake_gateway, verifier))

    outcome = orchestrator.create_payment(
        db_session,
        PaymentCreate(
            user_id=1,
            property_id=7,
            amount_paid=Decimal("250"),
            payment_method="upi",
            payment_details={"upi_id": "asha@okbank"},
            status="completed",
            is_deposit=True,
        ),
    )

    assert outcome.payment.total_price is None
    assert len(outcome.soft_failures) == 1
    failure = outcome.soft_failures[0]
    assert failure.code == "property_price_unavailable"
    assert "connection lost" in failure.detail
