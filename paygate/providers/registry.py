"""Resolve the configured provider into a concrete adapter."""
from __future__ import annotations

import enum

from paygate.config import PineLabsConfig, ProviderConfig, RazorpayConfig, Settings
from paygate.providers.base import PaymentProvider
from paygate.providers.pinelabs_adapter import PineLabsProvider
from paygate.providers.razorpay_adapter import RazorpayProvider
from paygate.utils.errors import ConfigurationError


class ProviderName(str, enum.Enum):
    """Supported payment processors."""

    RAZORPAY = "razorpay"
    PINELABS = "pinelabs"


def parse_provider_name(value: str | None) -> ProviderName:
    """Map a configured selector onto a supported provider."""

    if not value:
        raise ConfigurationError("PAYMENT_PROVIDER is not set.")
    try:
        return ProviderName(value.strip().lower())
    except ValueError:
        raise ConfigurationError(
            f"Invalid payment provider: {value}. Must be 'razorpay' or 'pinelabs'."
        ) from None


def provider_config(settings: Settings, name: ProviderName) -> ProviderConfig:
    """Build the immutable credential bundle for ``name``."""

    if name is ProviderName.RAZORPAY:
        return settings.razorpay_config()
    return settings.pinelabs_config()


def create_provider(config: ProviderConfig) -> PaymentProvider:
    """Construct the adapter matching the config variant."""

    if isinstance(config, RazorpayConfig):
        return RazorpayProvider(config)
    if isinstance(config, PineLabsConfig):
        return PineLabsProvider(config)
    raise ConfigurationError(f"Unsupported provider configuration: {type(config).__name__}")


def active_provider(settings: Settings) -> tuple[ProviderName, PaymentProvider]:
    """Return the provider selected by ``PAYMENT_PROVIDER`` and its adapter."""

    name = parse_provider_name(settings.payment_provider)
    return name, create_provider(provider_config(settings, name))


__all__ = [
    "ProviderName",
    "parse_provider_name",
    "provider_config",
    "create_provider",
    "active_provider",
]
