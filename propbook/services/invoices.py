"""Payment summary arithmetic used by invoices and payment checks."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from propbook.models.payment import Payment
from propbook.schemas.payment import PaymentRow, PaymentSummary, UnitDetails

ZERO = Decimal("0")


def _dec(value: Decimal | int | float | str | None) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def percentage_of(paid: Decimal | None, price: Decimal | None) -> int:
    """Whole percentage of ``price`` covered by ``paid``, rounded half up; 0 when price is 0."""

    price_value = _dec(price)
    if price_value <= 0:
        return 0
    ratio = _dec(paid) * 100 / price_value
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def inline_property_summary(row: PaymentRow) -> PaymentSummary:
    """Summary of a single property payment row when no aggregate is available."""

    price = _dec(row.price)
    paid = _dec(row.amount_paid)
    return PaymentSummary(
        full_price=price,
        deposit_amount=_dec(row.total_price),
        total_paid=paid,
        pending_amount=price - paid,
        percentage_paid=percentage_of(paid, price),
    )


def aggregate_property_summary(price: Decimal | None, payments: Iterable[Payment]) -> PaymentSummary | None:
    """Summary across every payment a user made for one property; ``None`` without a known price."""

    if price is None:
        return None
    payments = list(payments)
    total_paid = sum((_dec(p.amount_paid) for p in payments), ZERO)
    deposit_amount = sum((_dec(p.amount_paid) for p in payments if p.is_deposit), ZERO)
    price = _dec(price)
    return PaymentSummary(
        full_price=price,
        deposit_amount=deposit_amount,
        total_paid=total_paid,
        pending_amount=max(price - total_paid, ZERO),
        percentage_paid=percentage_of(total_paid, price),
    )


def apartment_summary(row: PaymentRow) -> PaymentSummary:
    # Apartment units are paid in full at booking time.
    paid = _dec(row.amount_paid)
    full_price = row.total_price if row.total_price else paid
    return PaymentSummary(
        full_price=_dec(full_price),
        deposit_amount=paid,
        total_paid=paid,
        pending_amount=ZERO,
        percentage_paid=100,
    )


def unit_details(row: PaymentRow) -> UnitDetails:
    return UnitDetails(
        unit_number=row.unit_number,
        floor_number=row.floor_number,
        bedrooms=row.bedrooms,
        bathrooms=row.bathrooms,
        area=row.area,
    )


__all__ = [
    "aggregate_property_summary",
    "apartment_summary",
    "inline_property_summary",
    "percentage_of",
    "unit_details",
]
