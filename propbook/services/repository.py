"""Storage access for payments and the property/apartment rows joined to them."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from sqlalchemy import exists, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from propbook.models import (
    Apartment,
    ApartmentBooking,
    ApartmentUnit,
    Payment,
    Property,
    User,
)
from propbook.schemas.payment import PaymentRead, PaymentRow, PaymentSummary
from propbook.services.invoices import aggregate_property_summary
from propbook.utils.audit import log_audit
from propbook.utils.time import as_utc

logger = logging.getLogger(__name__)


@dataclass
class RepositoryResult:
    """Outcome of a write, passed through to callers unchanged."""

    success: bool
    message: str
    payment: Payment | None = None
    booking: ApartmentBooking | None = None


@dataclass
class RepositoryListResult:
    success: bool
    message: str
    payments: list[PaymentRow] = field(default_factory=list)


@dataclass
class PaymentAggregate:
    """Latest payment for a (user, property) pair plus the summary across all of them."""

    payment: Payment
    payment_summary: PaymentSummary | None


def _has_apartment_booking():
    return exists().where(ApartmentBooking.payment_id == Payment.id)


def _audit_payload(payment: Payment) -> dict[str, Any]:
    return {
        "user_id": payment.user_id,
        "property_id": payment.property_id,
        "amount_paid": str(payment.amount_paid),
        "total_price": str(payment.total_price) if payment.total_price is not None else None,
        "payment_method": payment.payment_method.value,
        "payment_details": payment.payment_details,
        "status": payment.status,
        "is_deposit": payment.is_deposit,
    }


def _property_row(payment: Payment, prop: Property | None, user: User | None) -> PaymentRow:
    base = PaymentRead.model_validate(payment).model_dump()
    return PaymentRow(
        **base,
        payment_type="property",
        property_name=prop.name if prop else None,
        location=prop.location if prop else None,
        price=prop.price if prop else None,
        user_name=user.full_name if user else None,
        email=user.email if user else None,
    )


def _apartment_row(
    payment: Payment,
    booking: ApartmentBooking,
    apartment: Apartment,
    unit: ApartmentUnit,
    user: User | None,
) -> PaymentRow:
    base = PaymentRead.model_validate(payment).model_dump()
    return PaymentRow(
        **base,
        payment_type="apartment",
        property_name=apartment.name,
        location=apartment.location,
        price=unit.price,
        user_name=user.full_name if user else None,
        email=user.email if user else None,
        booking_id=booking.id,
        unit_number=unit.unit_number,
        floor_number=unit.floor_number,
        bedrooms=unit.bedrooms,
        bathrooms=unit.bathrooms,
        area=unit.area,
    )


class PaymentRepository:
    """SQLAlchemy-backed payment storage."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # -- writes -----------------------------------------------------------
    def insert(self, payment: Payment, *, actor: str = "system") -> RepositoryResult:
        """Persist ``payment`` with its audit entry in one commit."""

        user_id = payment.user_id
        try:
            self.db.add(payment)
            self.db.flush()
            log_audit(
                self.db,
                actor=actor,
                action="PAYMENT_RECORDED",
                entity="Payment",
                entity_id=payment.id,
                data=_audit_payload(payment),
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Failed to record payment", extra={"user_id": user_id})
            return RepositoryResult(success=False, message=f"Failed to record payment: {exc.__class__.__name__}")
        self.db.refresh(payment)
        logger.info(
            "Payment recorded",
            extra={"payment_id": payment.id, "user_id": payment.user_id, "property_id": payment.property_id},
        )
        return RepositoryResult(success=True, message="Payment recorded successfully", payment=payment)

    def insert_apartment_booking(
        self, payment: Payment, unit: ApartmentUnit, *, actor: str = "system"
    ) -> RepositoryResult:
        """Persist an apartment payment, its booking row, and take the unit off the market."""

        unit_id = unit.id
        try:
            self.db.add(payment)
            self.db.flush()
            booking = ApartmentBooking(
                user_id=payment.user_id,
                apartment_id=unit.apartment_id,
                unit_id=unit.id,
                payment_id=payment.id,
                status="confirmed",
            )
            unit.is_available = False
            self.db.add_all([booking, unit])
            self.db.flush()
            log_audit(
                self.db,
                actor=actor,
                action="APARTMENT_BOOKED",
                entity="ApartmentBooking",
                entity_id=booking.id,
                data={**_audit_payload(payment), "unit_id": unit.id, "payment_id": payment.id},
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Failed to record apartment booking", extra={"unit_id": unit_id})
            return RepositoryResult(
                success=False, message=f"Failed to record apartment booking: {exc.__class__.__name__}"
            )
        self.db.refresh(payment)
        self.db.refresh(booking)
        return RepositoryResult(
            success=True, message="Apartment booked successfully", payment=payment, booking=booking
        )

    # -- lookups ----------------------------------------------------------
    def property_price(self, property_id: int) -> Decimal | None:
        return self.db.scalar(select(Property.price).where(Property.id == property_id))

    def get_unit(self, unit_id: int) -> ApartmentUnit | None:
        return self.db.get(ApartmentUnit, unit_id)

    def payment_aggregate(self, user_id: int, property_id: int) -> PaymentAggregate | None:
        """Latest property payment for the pair and the summary across all of them."""

        stmt = (
            select(Payment)
            .where(
                Payment.user_id == user_id,
                Payment.property_id == property_id,
                ~_has_apartment_booking(),
            )
            .order_by(Payment.payment_date.desc(), Payment.id.desc())
        )
        payments = list(self.db.scalars(stmt))
        if not payments:
            return None
        price = self.property_price(property_id)
        if price is None:
            price = next((p.total_price for p in payments if p.total_price), None)
        summary = aggregate_property_summary(price, payments)
        return PaymentAggregate(payment=payments[0], payment_summary=summary)

    def property_invoice_row(self, payment_id: int) -> PaymentRow | None:
        row = self.db.execute(self._property_query().where(Payment.id == payment_id)).first()
        if row is None:
            return None
        return _property_row(*row)

    def apartment_invoice_row(self, payment_id: int) -> PaymentRow | None:
        row = self.db.execute(self._apartment_query().where(Payment.id == payment_id)).first()
        if row is None:
            return None
        return _apartment_row(*row)

    def property_rows_for_user(self, user_id: int) -> list[PaymentRow]:
        stmt = self._property_query().where(Payment.user_id == user_id).order_by(Payment.id)
        return [_property_row(*row) for row in self.db.execute(stmt)]

    def apartment_rows_for_user(self, user_id: int) -> list[PaymentRow]:
        stmt = self._apartment_query().where(Payment.user_id == user_id).order_by(Payment.id)
        return [_apartment_row(*row) for row in self.db.execute(stmt)]

    def user_payments(self, user_id: int) -> RepositoryListResult:
        """Property payment history of one user, most recent first."""

        try:
            stmt = (
                self._property_query()
                .where(Payment.user_id == user_id)
                .order_by(Payment.payment_date.desc(), Payment.id.desc())
            )
            rows = [_property_row(*row) for row in self.db.execute(stmt)]
        except SQLAlchemyError as exc:
            logger.exception("Failed to load user payments", extra={"user_id": user_id})
            return RepositoryListResult(success=False, message=f"Failed to load payments: {exc.__class__.__name__}")
        return RepositoryListResult(success=True, message="Payments retrieved successfully", payments=rows)

    def all_payments(self) -> RepositoryListResult:
        """Every payment of both booking domains, most recent first."""

        try:
            rows = [_property_row(*row) for row in self.db.execute(self._property_query())]
            rows += [_apartment_row(*row) for row in self.db.execute(self._apartment_query())]
        except SQLAlchemyError as exc:
            logger.exception("Failed to load payments")
            return RepositoryListResult(success=False, message=f"Failed to load payments: {exc.__class__.__name__}")
        rows.sort(key=lambda row: as_utc(row.payment_date), reverse=True)
        return RepositoryListResult(success=True, message="Payments retrieved successfully", payments=rows)

    # -- query builders ---------------------------------------------------
    @staticmethod
    def _property_query():
        return (
            select(Payment, Property, User)
            .outerjoin(Property, Property.id == Payment.property_id)
            .outerjoin(User, User.id == Payment.user_id)
            .where(~_has_apartment_booking())
        )

    @staticmethod
    def _apartment_query():
        return (
            select(Payment, ApartmentBooking, Apartment, ApartmentUnit, User)
            .join(ApartmentBooking, ApartmentBooking.payment_id == Payment.id)
            .join(Apartment, Apartment.id == ApartmentBooking.apartment_id)
            .join(ApartmentUnit, ApartmentUnit.id == ApartmentBooking.unit_id)
            .outerjoin(User, User.id == Payment.user_id)
        )


__all__ = [
    "PaymentAggregate",
    "PaymentRepository",
    "RepositoryListResult",
    "RepositoryResult",
]
