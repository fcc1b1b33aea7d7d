"""Standalone property model."""
from decimal import Decimal

from sqlalchemy import CheckConstraint, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Property(Base):
    """A standalone property that can be booked in full or with a deposit."""

    __tablename__ = "properties"
    __table_args__ = (CheckConstraint("price >= 0", name="ck_property_price_non_negative"),)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    price: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
