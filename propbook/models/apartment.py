"""Apartment, unit and booking models."""
from decimal import Decimal

from sqlalchemy import Boolean, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class Apartment(Base):
    """An apartment building whose units are booked individually."""

    __tablename__ = "apartments"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)

    units = relationship("ApartmentUnit", back_populates="apartment", cascade="all, delete-orphan")


class ApartmentUnit(Base):
    """A numbered unit inside an apartment."""

    __tablename__ = "apartment_units"

    apartment_id: Mapped[int] = mapped_column(ForeignKey("apartments.id"), nullable=False, index=True)
    unit_number: Mapped[str] = mapped_column(String(32), nullable=False)
    floor_number: Mapped[int | None] = mapped_column(nullable=True)
    bedrooms: Mapped[int | None] = mapped_column(nullable=True)
    bathrooms: Mapped[int | None] = mapped_column(nullable=True)
    area: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    price: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    apartment = relationship("Apartment", back_populates="units")


class ApartmentBooking(Base):
    """Join row linking a payment to the apartment unit it paid for."""

    __tablename__ = "apartment_bookings"
    __table_args__ = (Index("ix_apartment_bookings_user", "user_id"),)

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    apartment_id: Mapped[int] = mapped_column(ForeignKey("apartments.id"), nullable=False)
    unit_id: Mapped[int] = mapped_column(ForeignKey("apartment_units.id"), nullable=False, index=True)
    payment_id: Mapped[int] = mapped_column(ForeignKey("payments.id"), nullable=False, unique=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="confirmed")
