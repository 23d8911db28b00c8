"""Error taxonomy and standardized error responses."""
from typing import Any


def error_response(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    """Return a standardized error payload."""

    payload: dict[str, Any] = {"success": False, "error": {"code": code, "message": message}}
    if details:
        payload["error"]["details"] = details
    return payload


class PaymentGatewayError(Exception):
    """Base class for errors rendered as ``error_response`` payloads."""

    code = "PAYMENT_GATEWAY_ERROR"
    status_code = 500

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details

    def to_response(self) -> dict[str, Any]:
        return error_response(self.code, self.message, self.details)


class ConfigurationError(PaymentGatewayError):
    """Missing credentials or insecure provider settings."""

    code = "PROVIDER_NOT_CONFIGURED"
    status_code = 503


class ProviderError(PaymentGatewayError):
    """The upstream payment processor failed or answered inconsistently."""

    code = "PROVIDER_ERROR"
    status_code = 502


class PaymentInitFailed(PaymentGatewayError):
    code = "PAYMENT_INIT_FAILED"
    status_code = 500


class SignatureInvalid(PaymentGatewayError):
    """Signature missing or wrong. Never says which."""

    code = "INVALID_SIGNATURE"
    status_code = 401


class ValidationError(PaymentGatewayError):
    code = "MISSING_FIELDS"
    status_code = 400


class NotFound(PaymentGatewayError):
    code = "NOT_FOUND"
    status_code = 404


__all__ = [
    "error_response",
    "PaymentGatewayError",
    "ConfigurationError",
    "ProviderError",
    "PaymentInitFailed",
    "SignatureInvalid",
    "ValidationError",
    "NotFound",
]
