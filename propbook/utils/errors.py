"""Utility helpers for standardized error responses."""
from typing import Any

from fastapi import HTTPException, status


def error_response(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    """Return a standardized error payload."""

    payload: dict[str, Any] = {"error": {"code": code, "message": message}}
    if details:
        payload["error"]["details"] = details
    return payload


class PaymentValidationError(HTTPException):
    """Missing or malformed input, reported with every field-level error at once."""

    def __init__(self, errors: list[str], message: str = "Validation failed") -> None:
        self.errors = list(errors)
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_response("VALIDATION_FAILED", message, {"errors": self.errors}),
        )


class SignatureError(HTTPException):
    """The gateway signature does not match the order/payment pair."""

    def __init__(self, message: str = "Invalid payment signature. Payment verification failed.") -> None:
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_response("INVALID_SIGNATURE", message),
        )


class UpstreamStatusError(HTTPException):
    """The gateway reports the payment in a state other than authorized/captured."""

    def __init__(self, payment_status: str | None) -> None:
        self.payment_status = payment_status
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_response(
                "PAYMENT_NOT_AUTHORIZED",
                f"Payment verification failed. Payment status is {payment_status}",
            ),
        )


class RepositoryError(HTTPException):
    """A storage write or read reported failure; its message is passed through as is."""

    def __init__(self, message: str) -> None:
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_response("PAYMENT_NOT_RECORDED", message),
        )


class NotFoundError(HTTPException):
    def __init__(self, code: str, message: str) -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=error_response(code, message))


class ConflictError(HTTPException):
    def __init__(self, code: str, message: str) -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=error_response(code, message))


class ServerError(HTTPException):
    """Unexpected collaborator failure; the underlying message is kept for diagnostics."""

    def __init__(self, code: str, message: str, exc: BaseException | None = None) -> None:
        details = {"error": str(exc)} if exc is not None else None
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_response(code, message, details),
        )


__all__ = [
    "error_response",
    "PaymentValidationError",
    "SignatureError",
    "UpstreamStatusError",
    "RepositoryError",
    "NotFoundError",
    "ConflictError",
    "ServerError",
]
