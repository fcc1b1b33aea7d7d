"""Payment model definitions."""
import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Enum as SqlEnum, ForeignKey, Index, JSON, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class PaymentMethod(str, enum.Enum):
    """Canonical payment methods stored on a payment."""

    CREDIT_CARD = "credit_card"
    UPI = "upi"
    RAZORPAY = "razorpay"


# Accepted on input; "card" is stored as CREDIT_CARD.
PAYMENT_METHOD_ALIASES = {
    "credit_card": PaymentMethod.CREDIT_CARD,
    "card": PaymentMethod.CREDIT_CARD,
    "upi": PaymentMethod.UPI,
    "razorpay": PaymentMethod.RAZORPAY,
}


class Payment(Base):
    """A payment made by a user against a property or an apartment unit."""

    __tablename__ = "payments"
    __table_args__ = (
        Index("ix_payments_user_property", "user_id", "property_id"),
        Index("ix_payments_payment_date", "payment_date"),
    )

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    # Property id for property payments, apartment id for apartment payments.
    property_id: Mapped[int] = mapped_column(nullable=False)
    total_price: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    amount_paid: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    payment_method: Mapped[PaymentMethod] = mapped_column(SqlEnum(PaymentMethod), nullable=False)
    payment_details: Mapped[dict] = mapped_column(JSON, nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    payment_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    invoice_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    is_deposit: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
