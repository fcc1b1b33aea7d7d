"""Schema package exports."""
from .apartment import ApartmentBookingRead
from .gateway import GatewayOrder
from .payment import (
    DETAIL_FIELDS,
    CardDetails,
    InvoiceRead,
    InvoiceResponse,
    OrderCreate,
    OrderRead,
    PaymentCheckRead,
    PaymentCreate,
    PaymentDetails,
    PaymentDetailsIn,
    PaymentListRead,
    PaymentRead,
    PaymentRecordedRead,
    PaymentRow,
    PaymentSummary,
    PaymentVerify,
    PaymentVerifyRead,
    RazorpayDetails,
    SoftFailureRead,
    UnitDetails,
    UpiDetails,
    parse_payment_details,
)

__all__ = [
    "ApartmentBookingRead",
    "GatewayOrder",
    "DETAIL_FIELDS",
    "CardDetails",
    "InvoiceRead",
    "InvoiceResponse",
    "OrderCreate",
    "OrderRead",
    "PaymentCheckRead",
    "PaymentCreate",
    "PaymentDetails",
    "PaymentDetailsIn",
    "PaymentListRead",
    "PaymentRead",
    "PaymentRecordedRead",
    "PaymentRow",
    "PaymentSummary",
    "PaymentVerify",
    "PaymentVerifyRead",
    "RazorpayDetails",
    "SoftFailureRead",
    "UnitDetails",
    "UpiDetails",
    "parse_payment_details",
]
