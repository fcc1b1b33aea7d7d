"""ORM models package."""
from .apartment import Apartment, ApartmentBooking, ApartmentUnit
from .audit import AuditLog
from .base import Base
from .payment import PAYMENT_METHOD_ALIASES, Payment, PaymentMethod
from .property import Property
from .user import User

__all__ = [
    "Apartment",
    "ApartmentBooking",
    "ApartmentUnit",
    "AuditLog",
    "Base",
    "PAYMENT_METHOD_ALIASES",
    "Payment",
    "PaymentMethod",
    "Property",
    "User",
]
