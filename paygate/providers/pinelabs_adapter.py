"""PineLabs (Plural Online) adapter implementing the payment provider contract."""
from __future__ import annotations

import logging
import secrets
from typing import Any, ClassVar, Mapping

from paygate.config import PINELABS_API_BASE_URL, PineLabsConfig
from paygate.providers.base import OrderResponse, PaymentProvider, compute_signature
from paygate.utils.errors import ConfigurationError
from paygate.utils.time import epoch_millis

logger = logging.getLogger(__name__)

SECURE_SCHEME_PREFIX = "https://"


def resolve_api_base_url(configured: str | None) -> str:
    """Return the PineLabs API base URL, refusing anything but ``https://``."""

    url = configured or PINELABS_API_BASE_URL
    if not url.startswith(SECURE_SCHEME_PREFIX):
        scheme = url.split("://", 1)[0] if "://" in url else None
        raise ConfigurationError(
            "PineLabs API URL must use HTTPS protocol for security "
            f"(expected the '{SECURE_SCHEME_PREFIX}' prefix, got "
            f"{'scheme ' + repr(scheme) if scheme is not None else 'no scheme'})."
        )
    return url.rstrip("/")


class PineLabsProvider(PaymentProvider):
    """PineLabs adapter: ``HMAC_SHA256(secret_key, order_id|payment_id|merchant_id)``.

    ``create_order`` synthesizes order ids locally; a live integration would
    POST to ``{api_base_url}/api/v1/orders`` keeping the same validation and
    signature scheme.
    """

    name: ClassVar[str] = "pinelabs"

    def __init__(self, config: PineLabsConfig) -> None:
        if not config.merchant_id or not config.access_code or not config.secret_key:
            raise ConfigurationError(
                "PINELABS_MERCHANT_ID, PINELABS_ACCESS_CODE and PINELABS_SECRET_KEY "
                "must be set to use PineLabs."
            )

        self._merchant_id = config.merchant_id
        self._secret_key = config.secret_key
        self._api_base_url = resolve_api_base_url(config.api_base_url)

    @property
    def api_base_url(self) -> str:
        return self._api_base_url

    @property
    def orders_endpoint(self) -> str:
        return f"{self._api_base_url}/api/v1/orders"

    def create_order(self, amount: int, currency: str, metadata: Mapping[str, Any] | None = None) -> OrderResponse:
        self._check_order_arguments(amount, currency)
        order_id = f"pl_{epoch_millis()}_{secrets.token_hex(4)}"
        logger.info("PineLabs order synthesized", extra={"order_id": order_id, "amount": amount})
        return OrderResponse(order_id=order_id, amount=amount, currency=currency)

    def expected_signature(self, order_id: str, payment_id: str) -> str:
        return compute_signature(self._secret_key, f"{order_id}|{payment_id}|{self._merchant_id}")

    def get_provider_key(self) -> str:
        return self._merchant_id


__all__ = ["PineLabsProvider", "resolve_api_base_url", "SECURE_SCHEME_PREFIX"]
