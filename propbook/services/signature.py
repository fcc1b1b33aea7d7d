"""Razorpay payment signature verification."""
from __future__ import annotations

import hashlib
import hmac


class SignatureVerifier:
    """Computes and checks the HMAC-SHA256 signature Razorpay attaches to a payment.

    The signed message is ``"{order_id}|{payment_id}"`` keyed with the account's
    key secret, rendered as lowercase hex. Without a key secret nothing verifies.
    """

    def __init__(self, secret: str | None) -> None:
        self._secret = secret.encode("utf-8") if secret else None

    @property
    def configured(self) -> bool:
        return self._secret is not None

    def sign(self, order_id: str, payment_id: str) -> str:
        if self._secret is None:
            raise RuntimeError("Razorpay key secret is not configured; cannot sign payments.")
        message = f"{order_id}|{payment_id}".encode("utf-8")
        return hmac.new(key=self._secret, msg=message, digestmod=hashlib.sha256).hexdigest()

    def verify(self, order_id: str, payment_id: str, signature: str | None) -> bool:
        if not signature or self._secret is None:
            return False
        expected = self.sign(order_id, payment_id)
        return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))


__all__ = ["SignatureVerifier"]
