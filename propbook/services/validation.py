"""Validation of incoming payment requests."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from propbook.models.payment import PAYMENT_METHOD_ALIASES, PaymentMethod
from propbook.schemas.payment import PaymentCreate
from propbook.services.signature import SignatureVerifier

REQUIRED_FIELDS = ("user_id", "property_id", "amount_paid", "payment_method", "payment_details", "status")
CARD_FIELDS = ("card_holder", "card_number", "expiry_date", "cvv")
RAZORPAY_FIELDS = ("razorpay_payment_id", "razorpay_order_id", "razorpay_signature")

INVALID_METHOD_MESSAGE = "Invalid payment method. Accepted methods: credit card, UPI, Razorpay"
UPI_REQUIRED_MESSAGE = "UPI ID is required for UPI payments"
INVALID_SIGNATURE_MESSAGE = "Invalid Razorpay signature"


@dataclass
class PaymentValidation:
    """Collected outcome of validating one payment request."""

    errors: list[str] = field(default_factory=list)
    signature_error: str | None = None
    method: PaymentMethod | None = None

    @property
    def ok(self) -> bool:
        return not self.errors and self.signature_error is None


def normalize_method(value: str | None) -> PaymentMethod | None:
    """Map an accepted method name (including the ``card`` alias) to its canonical member."""

    if not value:
        return None
    return PAYMENT_METHOD_ALIASES.get(value)


def _missing(values: dict, names: Sequence[str]) -> list[str]:
    return [f"{name} is required" for name in names if not values.get(name)]


def validate_payment_request(
    request: PaymentCreate,
    verifier: SignatureVerifier,
    *,
    required: Sequence[str] = REQUIRED_FIELDS,
) -> PaymentValidation:
    """Validate ``request`` and return every applicable error instead of stopping at the first."""

    result = PaymentValidation()
    result.errors.extend(_missing({name: getattr(request, name, None) for name in required}, required))

    if not request.payment_method:
        return result

    method = normalize_method(request.payment_method)
    if method is None:
        result.errors.append(INVALID_METHOD_MESSAGE)
        return result
    result.method = method

    if request.payment_details is None:
        return result
    details = request.payment_details.model_dump()

    if method is PaymentMethod.CREDIT_CARD:
        result.errors.extend(_missing(details, CARD_FIELDS))
    elif method is PaymentMethod.UPI:
        if not details.get("upi_id"):
            result.errors.append(UPI_REQUIRED_MESSAGE)
    elif method is PaymentMethod.RAZORPAY:
        razorpay_errors = _missing(details, RAZORPAY_FIELDS)
        result.errors.extend(razorpay_errors)
        if not razorpay_errors and not verifier.verify(
            details["razorpay_order_id"], details["razorpay_payment_id"], details["razorpay_signature"]
        ):
            result.signature_error = INVALID_SIGNATURE_MESSAGE

    return result


__all__ = [
    "CARD_FIELDS",
    "INVALID_METHOD_MESSAGE",
    "INVALID_SIGNATURE_MESSAGE",
    "PaymentValidation",
    "RAZORPAY_FIELDS",
    "REQUIRED_FIELDS",
    "UPI_REQUIRED_MESSAGE",
    "normalize_method",
    "validate_payment_request",
]
