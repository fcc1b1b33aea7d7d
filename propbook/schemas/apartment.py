"""Apartment booking schemas."""
from pydantic import BaseModel

from .payment import PaymentRead


class ApartmentBookingRead(BaseModel):
    message: str = "Apartment booked successfully"
    booking_id: int
    apartment_id: int
    unit_id: int
    status: str
    payment: PaymentRead
