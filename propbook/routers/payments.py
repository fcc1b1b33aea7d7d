"""Booking payment endpoints."""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from propbook.db import get_db
from propbook.dependencies import get_payment_orchestrator
from propbook.schemas.apartment import ApartmentBookingRead
from propbook.schemas.payment import (
    InvoiceResponse,
    OrderCreate,
    OrderRead,
    PaymentCheckRead,
    PaymentCreate,
    PaymentListRead,
    PaymentRead,
    PaymentRecordedRead,
    PaymentVerify,
    PaymentVerifyRead,
    SoftFailureRead,
)
from propbook.services.payments import PaymentOrchestrator, PaymentOutcome

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/orders", response_model=OrderRead, status_code=status.HTTP_200_OK)
def create_order(
    payload: OrderCreate,
    db: Session = Depends(get_db),
    orchestrator: PaymentOrchestrator = Depends(get_payment_orchestrator),
) -> OrderRead:
    """Create a Razorpay order for a property or apartment-unit booking."""

    return orchestrator.create_order(db, payload)


@router.post("/verify", response_model=PaymentVerifyRead, status_code=status.HTTP_200_OK)
def verify_payment(
    payload: PaymentVerify,
    orchestrator: PaymentOrchestrator = Depends(get_payment_orchestrator),
) -> PaymentVerifyRead:
    """Verify a Razorpay checkout callback before the payment is recorded."""

    outcome = orchestrator.verify_payment(
        payload.razorpay_order_id, payload.razorpay_payment_id, payload.razorpay_signature
    )
    return PaymentVerifyRead(
        payment_id=outcome.payment_id,
        order_id=outcome.order_id,
        soft_failures=[SoftFailureRead.model_validate(failure) for failure in outcome.soft_failures],
    )


@router.post("", response_model=PaymentRecordedRead | ApartmentBookingRead, status_code=status.HTTP_200_OK)
def create_payment(
    payload: PaymentCreate,
    db: Session = Depends(get_db),
    orchestrator: PaymentOrchestrator = Depends(get_payment_orchestrator),
):
    """Record a property payment, or an apartment booking when a unit is given."""

    result = orchestrator.create_payment(db, payload)
    if isinstance(result, PaymentOutcome):
        return PaymentRecordedRead(
            message=result.message,
            payment=PaymentRead.model_validate(result.payment),
            soft_failures=[SoftFailureRead.model_validate(failure) for failure in result.soft_failures],
        )
    return result


@router.get("", response_model=PaymentListRead)
def get_all_payments(
    db: Session = Depends(get_db),
    orchestrator: PaymentOrchestrator = Depends(get_payment_orchestrator),
) -> PaymentListRead:
    return orchestrator.get_all_payments(db)


@router.get("/check", response_model=PaymentCheckRead)
def check_payment(
    user_id: int = Query(...),
    property_id: int = Query(...),
    db: Session = Depends(get_db),
    orchestrator: PaymentOrchestrator = Depends(get_payment_orchestrator),
) -> PaymentCheckRead:
    """Latest payment of a user for a property with the amount still pending."""

    return orchestrator.check_payment(db, user_id, property_id)


@router.get("/history/{user_id}", response_model=PaymentListRead)
def get_user_payment_history(
    user_id: int,
    db: Session = Depends(get_db),
    orchestrator: PaymentOrchestrator = Depends(get_payment_orchestrator),
) -> PaymentListRead:
    return orchestrator.get_user_payment_history(db, user_id)


@router.get("/users/{user_id}/all", response_model=PaymentListRead)
def get_all_user_payments(
    user_id: int,
    db: Session = Depends(get_db),
    orchestrator: PaymentOrchestrator = Depends(get_payment_orchestrator),
) -> PaymentListRead:
    """Property and apartment payments of a user, most recent first."""

    return orchestrator.get_all_user_payments(db, user_id)


@router.get("/{payment_id}/invoice", response_model=InvoiceResponse)
def generate_invoice(
    payment_id: int,
    db: Session = Depends(get_db),
    orchestrator: PaymentOrchestrator = Depends(get_payment_orchestrator),
) -> InvoiceResponse:
    return InvoiceResponse(invoice=orchestrator.generate_invoice(db, payment_id))
