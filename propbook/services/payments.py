"""Payment orchestration: gateway orders, verification, recording and invoices."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from propbook.models import Payment
from propbook.schemas.apartment import ApartmentBookingRead
from propbook.schemas.payment import (
    InvoiceRead,
    OrderCreate,
    OrderRead,
    PaymentCheckRead,
    PaymentCreate,
    PaymentListRead,
    PaymentRead,
    parse_payment_details,
)
from propbook.services.gateway import GatewayProtocol, to_minor_units
from propbook.services.invoices import (
    aggregate_property_summary,
    apartment_summary,
    inline_property_summary,
    unit_details,
)
from propbook.services.repository import PaymentRepository, RepositoryListResult
from propbook.services.signature import SignatureVerifier
from propbook.services.validation import validate_payment_request
from propbook.utils.errors import (
    NotFoundError,
    PaymentValidationError,
    RepositoryError,
    ServerError,
    SignatureError,
    UpstreamStatusError,
)
from propbook.utils.time import as_utc, epoch_millis, utcnow

logger = logging.getLogger(__name__)

ACCEPTED_GATEWAY_STATUSES = {"authorized", "captured"}


class ApartmentWorkflow(Protocol):
    """Sibling booking flow that owns apartment-unit orders and bookings."""

    def create_order(self, db: Session, request: OrderCreate) -> OrderRead: ...

    def book(self, db: Session, request: PaymentCreate) -> ApartmentBookingRead: ...


@dataclass(frozen=True)
class SoftFailure:
    """A non-critical step that failed; the request carried on without it."""

    code: str
    detail: str


@dataclass
class VerificationOutcome:
    payment_id: str
    order_id: str
    soft_failures: list[SoftFailure] = field(default_factory=list)


@dataclass
class PaymentOutcome:
    payment: Payment
    message: str
    soft_failures: list[SoftFailure] = field(default_factory=list)


def build_receipt(user_id: int, property_id: int, *, is_deposit: bool, millis: int | None = None) -> str:
    """Receipt key unique per user, property and millisecond."""

    payment_type = "deposit" if is_deposit else "full"
    millis = epoch_millis() if millis is None else millis
    return f"prop_{payment_type}_{user_id}_{property_id}_{millis}"


def _is_apartment_request(request: OrderCreate | PaymentCreate) -> bool:
    return bool(request.is_apartment and request.unit_id)


class PaymentOrchestrator:
    """Routes booking payments and reconciles them into invoices.

    Apartment-unit requests are handed to ``apartment_workflow`` untouched; every
    other request goes through validation, signature verification and the
    payment repository.
    """

    def __init__(
        self,
        gateway: GatewayProtocol,
        verifier: SignatureVerifier,
        apartment_workflow: ApartmentWorkflow,
    ) -> None:
        self.gateway = gateway
        self.verifier = verifier
        self.apartment_workflow = apartment_workflow

    # -- orders -----------------------------------------------------------
    def create_order(self, db: Session, request: OrderCreate) -> OrderRead:
        """Create a gateway order for a property booking (full or deposit)."""

        if _is_apartment_request(request):
            logger.info("Delegating order creation to apartment workflow", extra={"unit_id": request.unit_id})
            return self.apartment_workflow.create_order(db, request)

        if not (request.amount and request.currency and request.user_id and request.property_id):
            raise PaymentValidationError(
                ["Amount, currency, user_id, and property_id are required"],
                message="Amount, currency, user_id, and property_id are required",
            )

        payment_type = "deposit" if request.is_deposit else "full"
        amount_minor = to_minor_units(request.amount)
        receipt = build_receipt(request.user_id, request.property_id, is_deposit=request.is_deposit)
        notes = {
            "user_id": str(request.user_id),
            "property_id": str(request.property_id),
            "payment_type": payment_type,
        }
        try:
            order = self.gateway.create_order(amount_minor, request.currency, receipt, notes)
        except Exception as exc:
            logger.exception("Gateway order creation failed", extra={"receipt": receipt})
            raise ServerError(
                "ORDER_CREATION_FAILED", "Server error while creating Razorpay order", exc
            ) from exc

        logger.info(
            "Gateway order created",
            extra={"order_id": order.id, "receipt": receipt, "payment_type": payment_type},
        )
        return OrderRead(order_id=order.id, amount=order.amount, currency=order.currency)

    # -- verification -----------------------------------------------------
    def verify_payment(
        self, order_id: str | None, payment_id: str | None, signature: str | None
    ) -> VerificationOutcome:
        """Check the signature, then cross-check the payment with the gateway."""

        errors = [
            f"{name} is required"
            for name, value in (
                ("razorpay_order_id", order_id),
                ("razorpay_payment_id", payment_id),
                ("razorpay_signature", signature),
            )
            if not value
        ]
        if errors:
            logger.warning("Payment verification missing parameters", extra={"errors": errors})
            raise PaymentValidationError(errors, message="Payment verification failed: Missing required parameters")

        if not self.verifier.verify(order_id, payment_id, signature):
            logger.warning("Payment signature mismatch", extra={"order_id": order_id, "payment_id": payment_id})
            raise SignatureError()

        outcome = VerificationOutcome(payment_id=payment_id, order_id=order_id)
        try:
            gateway_payment = self.gateway.fetch_payment(payment_id)
        except Exception as exc:
            # Signature already proves integrity; the fetch is an extra layer.
            logger.warning(
                "Could not fetch payment from gateway",
                extra={"payment_id": payment_id, "error": str(exc)},
            )
            outcome.soft_failures.append(SoftFailure("payment_fetch_failed", str(exc)))
            return outcome

        payment_status = gateway_payment.get("status")
        if payment_status not in ACCEPTED_GATEWAY_STATUSES:
            logger.warning(
                "Gateway payment not authorized",
                extra={"payment_id": payment_id, "status": payment_status},
            )
            raise UpstreamStatusError(payment_status)

        failure = self._cross_check_order_amount(order_id, gateway_payment)
        if failure is not None:
            outcome.soft_failures.append(failure)
        logger.info("Payment verified", extra={"order_id": order_id, "payment_id": payment_id})
        return outcome

    def _cross_check_order_amount(self, order_id: str, gateway_payment: dict[str, Any]) -> SoftFailure | None:
        try:
            order = self.gateway.fetch_order(order_id)
        except Exception as exc:
            logger.warning("Could not fetch order from gateway", extra={"order_id": order_id, "error": str(exc)})
            return SoftFailure("order_fetch_failed", str(exc))

        order_amount = order.get("amount")
        payment_amount = gateway_payment.get("amount")
        if order_amount != payment_amount:
            logger.warning(
                "Payment amount mismatch",
                extra={"order_id": order_id, "order_amount": order_amount, "payment_amount": payment_amount},
            )
            return SoftFailure("order_amount_mismatch", f"order={order_amount} payment={payment_amount}")
        return None

    # -- recording --------------------------------------------------------
    def create_payment(self, db: Session, request: PaymentCreate) -> PaymentOutcome | ApartmentBookingRead:
        """Validate and record a property payment, or hand an apartment booking over."""

        if _is_apartment_request(request):
            logger.info("Delegating payment to apartment workflow", extra={"unit_id": request.unit_id})
            return self.apartment_workflow.book(db, request)

        validation = validate_payment_request(request, self.verifier)
        if validation.errors:
            logger.info("Payment validation failed", extra={"errors": validation.errors})
            raise PaymentValidationError(validation.errors)
        if validation.signature_error:
            logger.warning("Payment signature rejected", extra={"user_id": request.user_id})
            raise SignatureError(validation.signature_error)

        method = validation.method
        details = parse_payment_details(method, request.payment_details).flatten()
        repository = PaymentRepository(db)

        soft_failures: list[SoftFailure] = []
        total_price = request.total_price
        if request.is_deposit and not total_price:
            total_price, failure = self._deposit_total_price(repository, request.property_id)
            if failure is not None:
                soft_failures.append(failure)

        payment = Payment(
            user_id=request.user_id,
            property_id=request.property_id,
            total_price=total_price or None,
            amount_paid=request.amount_paid,
            payment_method=method,
            payment_details=details,
            status=request.status,
            payment_date=utcnow(),
            invoice_number=request.invoice_number or None,
            is_deposit=bool(request.is_deposit),
        )
        result = repository.insert(payment)
        if not result.success:
            raise RepositoryError(result.message)
        return PaymentOutcome(payment=result.payment, message=result.message, soft_failures=soft_failures)

    def _deposit_total_price(
        self, repository: PaymentRepository, property_id: int
    ) -> tuple[Decimal | None, SoftFailure | None]:
        """Property price for a deposit that arrived without its full price."""

        try:
            price = repository.property_price(property_id)
        except SQLAlchemyError as exc:
            repository.db.rollback()
            logger.warning(
                "Property price lookup failed for deposit",
                extra={"property_id": property_id, "error": str(exc)},
            )
            return None, SoftFailure("property_price_unavailable", str(exc))
        if not price:
            logger.warning("Property price unknown for deposit", extra={"property_id": property_id})
            return None, SoftFailure("property_price_unavailable", f"no price for property {property_id}")
        logger.info("Using property price for deposit", extra={"property_id": property_id, "price": str(price)})
        return price, None

    # -- reads ------------------------------------------------------------
    def check_payment(self, db: Session, user_id: int, property_id: int) -> PaymentCheckRead:
        aggregate = PaymentRepository(db).payment_aggregate(user_id, property_id)
        if aggregate is None:
            raise NotFoundError("PAYMENT_NOT_FOUND", "No payment found")
        summary = aggregate.payment_summary or aggregate_property_summary(Decimal("0"), [aggregate.payment])
        return PaymentCheckRead(payment=PaymentRead.model_validate(aggregate.payment), payment_summary=summary)

    def generate_invoice(self, db: Session, payment_id: int) -> InvoiceRead:
        """Assemble the invoice of one payment from its property or apartment data."""

        repository = PaymentRepository(db)
        row = repository.property_invoice_row(payment_id)
        if row is None:
            row = repository.apartment_invoice_row(payment_id)
        if row is None:
            raise NotFoundError("PAYMENT_NOT_FOUND", "Payment not found")

        logger.info(
            "Generating invoice",
            extra={"payment_id": payment_id, "payment_type": row.payment_type, "user_id": row.user_id},
        )
        if row.payment_type == "property":
            aggregate = repository.payment_aggregate(row.user_id, row.property_id)
            if aggregate is not None and aggregate.payment_summary is not None:
                summary = aggregate.payment_summary
            else:
                summary = inline_property_summary(row)
            return InvoiceRead(**row.model_dump(), **summary.model_dump())

        return InvoiceRead(
            **row.model_dump(),
            **apartment_summary(row).model_dump(),
            unit_details=unit_details(row),
        )

    def get_user_payment_history(self, db: Session, user_id: int) -> PaymentListRead:
        result = PaymentRepository(db).user_payments(user_id)
        logger.info(
            "Payment history fetched",
            extra={"user_id": user_id, "success": result.success, "count": len(result.payments)},
        )
        return self._list_response(result, empty_message="No payments found for this user")

    def get_all_payments(self, db: Session) -> PaymentListRead:
        return self._list_response(PaymentRepository(db).all_payments(), empty_message="No payments found")

    def get_all_user_payments(self, db: Session, user_id: int) -> PaymentListRead:
        """Property and apartment payments of a user, most recent first."""

        repository = PaymentRepository(db)
        property_rows = repository.property_rows_for_user(user_id)
        apartment_rows = repository.apartment_rows_for_user(user_id)
        payments = sorted(
            property_rows + apartment_rows,
            key=lambda row: as_utc(row.payment_date),
            reverse=True,
        )
        logger.info(
            "All user payments fetched",
            extra={"user_id": user_id, "property": len(property_rows), "apartment": len(apartment_rows)},
        )
        return PaymentListRead(payments=payments)

    @staticmethod
    def _list_response(result: RepositoryListResult, *, empty_message: str) -> PaymentListRead:
        if not result.success:
            raise RepositoryError(result.message)
        if not result.payments:
            return PaymentListRead(message=empty_message, payments=[])
        return PaymentListRead(message=result.message, payments=result.payments)


__all__ = [
    "ACCEPTED_GATEWAY_STATUSES",
    "ApartmentWorkflow",
    "PaymentOrchestrator",
    "PaymentOutcome",
    "SoftFailure",
    "VerificationOutcome",
    "build_receipt",
]
