"""Razorpay SDK wrapper for order and payment lookups."""
from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Mapping, Protocol

import razorpay

from propbook.config import GatewayConfig
from propbook.schemas.gateway import GatewayOrder

logger = logging.getLogger(__name__)


def to_minor_units(amount: Decimal | float | int | str) -> int:
    """Convert a major-unit amount to paise, rounding half up to the nearest integer."""

    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class GatewayProtocol(Protocol):
    """Capabilities the payment services rely on."""

    def create_order(
        self, amount_minor: int, currency: str, receipt: str, notes: Mapping[str, str]
    ) -> GatewayOrder: ...

    def fetch_payment(self, payment_id: str) -> dict[str, Any]: ...

    def fetch_order(self, order_id: str) -> dict[str, Any]: ...


class RazorpayGateway:
    """Wrapper around the Razorpay Python SDK to isolate gateway concerns."""

    def __init__(self, config: GatewayConfig, client: razorpay.Client | None = None) -> None:
        self.config = config
        if client is None and config.configured:
            client = razorpay.Client(auth=(config.key_id, config.key_secret))
        self._client = client

    @property
    def client(self) -> razorpay.Client:
        if self._client is None:
            raise RuntimeError(
                "Razorpay credentials are missing; configure RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET."
            )
        return self._client

    def create_order(
        self, amount_minor: int, currency: str, receipt: str, notes: Mapping[str, str]
    ) -> GatewayOrder:
        """Create a Razorpay order for ``amount_minor`` paise."""

        data = self.client.order.create(
            {
                "amount": amount_minor,
                "currency": currency,
                "receipt": receipt,
                "notes": dict(notes),
            }
        )
        logger.info(
            "Razorpay order created",
            extra={"order_id": data.get("id"), "receipt": receipt, "amount": amount_minor},
        )
        # Razorpay renders empty notes as a JSON list.
        order_notes = data.get("notes")
        if not isinstance(order_notes, Mapping):
            order_notes = notes
        return GatewayOrder(
            id=data["id"],
            amount=int(data.get("amount", amount_minor)),
            currency=data.get("currency", currency),
            receipt=data.get("receipt", receipt),
            status=data.get("status"),
            notes={str(k): str(v) for k, v in order_notes.items()},
        )

    def fetch_payment(self, payment_id: str) -> dict[str, Any]:
        return dict(self.client.payment.fetch(payment_id))

    def fetch_order(self, order_id: str) -> dict[str, Any]:
        return dict(self.client.order.fetch(order_id))


__all__ = ["GatewayProtocol", "RazorpayGateway", "to_minor_units"]
