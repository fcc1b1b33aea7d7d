"""Apartment-unit booking workflow."""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from propbook.models import ApartmentUnit, Payment
from propbook.schemas.apartment import ApartmentBookingRead
from propbook.schemas.payment import OrderCreate, OrderRead, PaymentCreate, PaymentRead, parse_payment_details
from propbook.services.gateway import GatewayProtocol, to_minor_units
from propbook.services.repository import PaymentRepository
from propbook.services.signature import SignatureVerifier
from propbook.services.validation import validate_payment_request
from propbook.utils.errors import (
    ConflictError,
    NotFoundError,
    PaymentValidationError,
    RepositoryError,
    ServerError,
    SignatureError,
)
from propbook.utils.time import epoch_millis, utcnow

logger = logging.getLogger(__name__)

BOOKING_REQUIRED_FIELDS = ("user_id", "unit_id", "amount_paid", "payment_method", "payment_details", "status")


class ApartmentBookingService:
    """Creates gateway orders for apartment units and records unit bookings."""

    def __init__(self, gateway: GatewayProtocol, verifier: SignatureVerifier) -> None:
        self.gateway = gateway
        self.verifier = verifier

    def _get_unit_or_404(self, repository: PaymentRepository, unit_id: int) -> ApartmentUnit:
        unit = repository.get_unit(unit_id)
        if unit is None:
            raise NotFoundError("UNIT_NOT_FOUND", "Apartment unit not found")
        return unit

    def create_order(self, db: Session, request: OrderCreate) -> OrderRead:
        if not (request.amount and request.currency and request.user_id and request.unit_id):
            raise PaymentValidationError(
                ["Amount, currency, user_id, and unit_id are required"],
                message="Amount, currency, user_id, and unit_id are required",
            )
        unit = self._get_unit_or_404(PaymentRepository(db), request.unit_id)

        receipt = f"apt_{request.user_id}_{unit.id}_{epoch_millis()}"
        notes = {
            "user_id": str(request.user_id),
            "apartment_id": str(unit.apartment_id),
            "unit_id": str(unit.id),
            "payment_type": "apartment",
        }
        try:
            order = self.gateway.create_order(to_minor_units(request.amount), request.currency, receipt, notes)
        except Exception as exc:
            logger.exception("Apartment order creation failed", extra={"unit_id": unit.id})
            raise ServerError(
                "ORDER_CREATION_FAILED", "Server error while creating apartment Razorpay order", exc
            ) from exc
        return OrderRead(order_id=order.id, amount=order.amount, currency=order.currency)

    def book(self, db: Session, request: PaymentCreate) -> ApartmentBookingRead:
        """Record the payment for an apartment unit and reserve the unit."""

        validation = validate_payment_request(request, self.verifier, required=BOOKING_REQUIRED_FIELDS)
        if validation.errors:
            raise PaymentValidationError(validation.errors)
        if validation.signature_error:
            raise SignatureError(validation.signature_error)

        repository = PaymentRepository(db)
        unit = self._get_unit_or_404(repository, request.unit_id)
        if not unit.is_available:
            raise ConflictError("UNIT_UNAVAILABLE", "Apartment unit is already booked")

        payment = Payment(
            user_id=request.user_id,
            property_id=unit.apartment_id,
            total_price=unit.price or request.total_price,
            amount_paid=request.amount_paid,
            payment_method=validation.method,
            payment_details=parse_payment_details(validation.method, request.payment_details).flatten(),
            status=request.status,
            payment_date=utcnow(),
            invoice_number=request.invoice_number or None,
            is_deposit=False,
        )
        result = repository.insert_apartment_booking(payment, unit)
        if not result.success:
            raise RepositoryError(result.message)

        booking = result.booking
        logger.info(
            "Apartment unit booked",
            extra={"booking_id": booking.id, "unit_id": booking.unit_id, "payment_id": booking.payment_id},
        )
        return ApartmentBookingRead(
            message=result.message,
            booking_id=booking.id,
            apartment_id=booking.apartment_id,
            unit_id=booking.unit_id,
            status=booking.status,
            payment=PaymentRead.model_validate(result.payment),
        )


__all__ = ["ApartmentBookingService", "BOOKING_REQUIRED_FIELDS"]
