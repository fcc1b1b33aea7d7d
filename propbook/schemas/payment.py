"""Schemas for payment requests, payment records and invoices."""
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from propbook.models.payment import PaymentMethod

DETAIL_FIELDS = (
    "card_holder",
    "card_number",
    "expiry_date",
    "cvv",
    "upi_id",
    "razorpay_payment_id",
    "razorpay_order_id",
    "razorpay_signature",
)


class PaymentDetailsIn(BaseModel):
    """Method-specific details as sent by the client; unknown keys are rejected."""

    card_holder: str | None = None
    card_number: str | None = None
    expiry_date: str | None = None
    cvv: str | None = None
    upi_id: str | None = None
    razorpay_payment_id: str | None = None
    razorpay_order_id: str | None = None
    razorpay_signature: str | None = None

    model_config = ConfigDict(extra="forbid", coerce_numbers_to_str=True)


class PaymentCreate(BaseModel):
    user_id: int | None = None
    property_id: int | None = None
    total_price: Decimal | None = None
    amount_paid: Decimal | None = None
    payment_method: str | None = None
    payment_details: PaymentDetailsIn | None = None
    status: str | None = None
    invoice_number: str | None = None
    is_deposit: bool = False
    is_apartment: bool = False
    unit_id: int | None = None


class _DetailsVariant(BaseModel):
    def flatten(self) -> dict[str, str | None]:
        """Every known detail key, with the ones this method does not use set to ``None``."""

        values = self.model_dump(exclude={"method"})
        return {name: values.get(name) for name in DETAIL_FIELDS}


class CardDetails(_DetailsVariant):
    method: Literal["credit_card"] = "credit_card"
    card_holder: str
    card_number: str
    expiry_date: str
    cvv: str


class UpiDetails(_DetailsVariant):
    method: Literal["upi"] = "upi"
    upi_id: str


class RazorpayDetails(_DetailsVariant):
    method: Literal["razorpay"] = "razorpay"
    razorpay_payment_id: str
    razorpay_order_id: str
    razorpay_signature: str


PaymentDetails = Annotated[Union[CardDetails, UpiDetails, RazorpayDetails], Field(discriminator="method")]
_payment_details_adapter: TypeAdapter[PaymentDetails] = TypeAdapter(PaymentDetails)


def parse_payment_details(method: PaymentMethod, details: PaymentDetailsIn) -> PaymentDetails:
    """Narrow already-validated raw details to the variant of ``method``."""

    return _payment_details_adapter.validate_python(
        {**details.model_dump(exclude_none=True), "method": method.value}
    )


class OrderCreate(BaseModel):
    amount: Decimal | None = None
    currency: str | None = None
    user_id: int | None = None
    property_id: int | None = None
    is_deposit: bool = False
    is_apartment: bool = False
    unit_id: int | None = None


class OrderRead(BaseModel):
    order_id: str
    amount: int
    currency: str


class PaymentVerify(BaseModel):
    razorpay_order_id: str | None = None
    razorpay_payment_id: str | None = None
    razorpay_signature: str | None = None


class SoftFailureRead(BaseModel):
    """A non-critical step that failed while the request still went through."""

    code: str
    detail: str

    model_config = ConfigDict(from_attributes=True)


class PaymentVerifyRead(BaseModel):
    message: str = "Payment verification successful"
    payment_id: str
    order_id: str
    soft_failures: list[SoftFailureRead] = []


class PaymentRead(BaseModel):
    id: int
    user_id: int
    property_id: int
    total_price: Decimal | None
    amount_paid: Decimal
    payment_method: PaymentMethod
    payment_details: dict[str, str | None]
    status: str
    payment_date: datetime
    invoice_number: str | None
    is_deposit: bool

    model_config = ConfigDict(from_attributes=True)


class PaymentRecordedRead(BaseModel):
    """Outcome of recording a property payment, with the storage message passed through."""

    message: str
    payment: PaymentRead
    soft_failures: list[SoftFailureRead] = []

    model_config = ConfigDict(extra="forbid")


class PaymentSummary(BaseModel):
    full_price: Decimal
    deposit_amount: Decimal
    total_paid: Decimal
    pending_amount: Decimal
    percentage_paid: int


class PaymentCheckRead(BaseModel):
    payment: PaymentRead
    payment_summary: PaymentSummary


class PaymentRow(PaymentRead):
    """A payment joined with the property or apartment data it belongs to."""

    payment_type: Literal["property", "apartment"]
    property_name: str | None = None
    location: str | None = None
    price: Decimal | None = None
    user_name: str | None = None
    email: str | None = None
    booking_id: int | None = None
    unit_number: str | None = None
    floor_number: int | None = None
    bedrooms: int | None = None
    bathrooms: int | None = None
    area: Decimal | None = None


class PaymentListRead(BaseModel):
    message: str | None = None
    payments: list[PaymentRow]


class UnitDetails(BaseModel):
    unit_number: str | None = None
    floor_number: int | None = None
    bedrooms: int | None = None
    bathrooms: int | None = None
    area: Decimal | None = None


class InvoiceRead(PaymentRow, PaymentSummary):
    """A payment row with its summary figures merged in at the top level."""

    unit_details: UnitDetails | None = None


class InvoiceResponse(BaseModel):
    invoice: InvoiceRead
