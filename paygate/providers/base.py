"""Payment provider contract shared by every processor adapter."""
from __future__ import annotations

import hashlib
import hmac
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Mapping

from paygate.utils.errors import ProviderError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderResponse:
    """Order as acknowledged by the provider, amounts in the smallest currency unit."""

    order_id: str
    amount: int
    currency: str


def compute_signature(secret: str, message: str | bytes) -> str:
    """Return the hex encoded HMAC-SHA256 of ``message`` keyed with ``secret``."""

    if isinstance(message, str):
        message = message.encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def signatures_match(expected: str, provided: Any) -> bool:
    """Compare signatures in constant time; any malformed input is a mismatch."""

    try:
        if not isinstance(provided, str):
            return False
        return hmac.compare_digest(expected.encode("utf-8"), provided.encode("utf-8"))
    except Exception:  # noqa: BLE001
        return False


class PaymentProvider(ABC):
    """Base adapter for payment processors.

    Adapters are immutable once constructed: credentials are validated in
    ``__init__`` and never re-read from the environment afterwards.
    """

    name: ClassVar[str]

    @abstractmethod
    def create_order(self, amount: int, currency: str, metadata: Mapping[str, Any] | None = None) -> OrderResponse:
        """Create an order upstream.

        Args:
            amount: Amount in the smallest currency unit (e.g. paise).
            currency: ISO 4217 code.
            metadata: Free-form data forwarded to the provider where supported.

        Raises:
            ProviderError: If the upstream call fails or alters amount/currency.
        """

    @abstractmethod
    def expected_signature(self, order_id: str, payment_id: str) -> str:
        """Return the signature the provider would attach to this payment."""

    @abstractmethod
    def get_provider_key(self) -> str:
        """Return the public identifier used by checkout frontends."""

    def verify_payment(self, order_id: str, payment_id: str, signature: str) -> bool:
        """Return ``True`` iff ``signature`` authenticates the order/payment pair.

        Never raises: errors while computing or comparing collapse to ``False``.
        """

        try:
            expected = self.expected_signature(order_id, payment_id)
        except Exception:  # noqa: BLE001
            logger.warning("Signature computation failed", extra={"provider": self.name})
            return False
        return signatures_match(expected, signature)

    @staticmethod
    def _check_order_arguments(amount: Any, currency: Any) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 1:
            raise ProviderError("Order amount must be a positive integer in the smallest currency unit.")
        if not isinstance(currency, str) or not currency.strip():
            raise ProviderError("Order currency must be a non-empty ISO 4217 code.")

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(provider={self.name})>"


__all__ = ["OrderResponse", "PaymentProvider", "compute_signature", "signatures_match"]
