"""FastAPI dependencies wiring the payment services together."""
from __future__ import annotations

from fastapi import Depends

from propbook.config import GatewayConfig, Settings, get_settings
from propbook.services.apartments import ApartmentBookingService
from propbook.services.gateway import GatewayProtocol, RazorpayGateway
from propbook.services.payments import PaymentOrchestrator
from propbook.services.signature import SignatureVerifier


def get_payment_gateway(settings: Settings = Depends(get_settings)) -> GatewayProtocol:
    """Razorpay client built from the configured credentials."""

    return RazorpayGateway(GatewayConfig.from_settings(settings))


def get_signature_verifier(settings: Settings = Depends(get_settings)) -> SignatureVerifier:
    return SignatureVerifier(settings.RAZORPAY_KEY_SECRET)


def get_payment_orchestrator(
    gateway: GatewayProtocol = Depends(get_payment_gateway),
    verifier: SignatureVerifier = Depends(get_signature_verifier),
) -> PaymentOrchestrator:
    return PaymentOrchestrator(
        gateway=gateway,
        verifier=verifier,
        apartment_workflow=ApartmentBookingService(gateway, verifier),
    )


__all__ = ["get_payment_gateway", "get_signature_verifier", "get_payment_orchestrator"]
