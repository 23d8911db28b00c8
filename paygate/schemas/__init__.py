"""Schema package exports."""
from .payment import InitiatePaymentRequest, VerifyPaymentRequest

__all__ = ["InitiatePaymentRequest", "VerifyPaymentRequest"]
