"""Razorpay SDK wrapper implementing the payment provider contract."""
from __future__ import annotations

import logging
from typing import Any, ClassVar, Mapping

import razorpay

from paygate.config import RazorpayConfig
from paygate.providers.base import OrderResponse, PaymentProvider, compute_signature
from paygate.utils.errors import ConfigurationError, ProviderError
from paygate.utils.time import epoch_millis

logger = logging.getLogger(__name__)


class RazorpayProvider(PaymentProvider):
    """Razorpay adapter: ``HMAC_SHA256(key_secret, order_id|payment_id)``."""

    name: ClassVar[str] = "razorpay"

    def __init__(self, config: RazorpayConfig) -> None:
        if not config.key_id or not config.key_secret:
            raise ConfigurationError(
                "RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET must be set to use Razorpay."
            )

        self._key_id = config.key_id
        self._key_secret = config.key_secret
        self._webhook_secret = config.webhook_secret or config.key_secret
        self._timeout = config.timeout_seconds
        # The SDK talks HTTPS to api.razorpay.com by default.
        self._client = razorpay.Client(auth=(self._key_id, self._key_secret))

    @property
    def webhook_secret(self) -> str:
        """Secret used to sign webhook bodies, defaulting to the key secret."""

        return self._webhook_secret

    def create_order(self, amount: int, currency: str, metadata: Mapping[str, Any] | None = None) -> OrderResponse:
        self._check_order_arguments(amount, currency)
        metadata = metadata or {}
        options = {
            "amount": amount,
            "currency": currency,
            "receipt": metadata.get("receipt") or f"receipt_{epoch_millis()}",
            "notes": dict(metadata.get("notes") or {}),
        }

        try:
            order = self._client.order.create(data=options, timeout=self._timeout)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Razorpay order creation failed", extra={"amount": amount, "currency": currency})
            reason = str(exc) or exc.__class__.__name__
            raise ProviderError(f"Failed to create Razorpay order: {reason}") from exc

        order_id = order.get("id") if isinstance(order, Mapping) else None
        if not order_id:
            raise ProviderError("Failed to create Razorpay order: response is missing the order id.")

        try:
            upstream_amount = int(order.get("amount"))
        except (TypeError, ValueError) as exc:
            raise ProviderError("Failed to create Razorpay order: response amount is not an integer.") from exc
        upstream_currency = order.get("currency")
        if upstream_amount != amount or upstream_currency != currency:
            logger.error(
                "Razorpay order does not echo the requested amount/currency",
                extra={"order_id": order_id, "amount": upstream_amount, "currency": upstream_currency},
            )
            raise ProviderError("Failed to create Razorpay order: amount or currency was altered upstream.")

        logger.info("Razorpay order created", extra={"order_id": order_id, "amount": amount})
        return OrderResponse(order_id=order_id, amount=upstream_amount, currency=upstream_currency)

    def expected_signature(self, order_id: str, payment_id: str) -> str:
        return compute_signature(self._key_secret, f"{order_id}|{payment_id}")

    def get_provider_key(self) -> str:
        return self._key_id


__all__ = ["RazorpayProvider"]
