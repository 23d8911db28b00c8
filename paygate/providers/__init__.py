"""Payment provider adapters."""
from .base import OrderResponse, PaymentProvider, compute_signature, signatures_match
from .pinelabs_adapter import PineLabsProvider
from .razorpay_adapter import RazorpayProvider
from .registry import ProviderName, active_provider, create_provider, parse_provider_name, provider_config

__all__ = [
    "OrderResponse",
    "PaymentProvider",
    "compute_signature",
    "signatures_match",
    "PineLabsProvider",
    "RazorpayProvider",
    "ProviderName",
    "active_provider",
    "create_provider",
    "parse_provider_name",
    "provider_config",
]
