"""Routes initiate/verify/webhook calls to the configured provider and ledger."""
from __future__ import annotations

import logging
from typing import Any, Mapping

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from paygate.config import Settings, get_settings
from paygate.core.logging import masked_secrets
from paygate.models import PaymentOrder, PaymentOrderStatus, PaymentRecord, SubscriptionRecord
from paygate.providers.pinelabs_adapter import PineLabsProvider
from paygate.providers.razorpay_adapter import RazorpayProvider
from paygate.providers.registry import ProviderName, active_provider, create_provider, provider_config
from paygate.services import ledger
from paygate.services import subscriptions as subscriptions_service
from paygate.services.webhooks import (
    UNKNOWN_PLAN,
    CapturedPayment,
    PineLabsWebhookAuthenticator,
    RazorpayWebhookAuthenticator,
    Rejection,
    UnprocessablePayment,
    WebhookAuthenticator,
)
from paygate.utils.errors import (
    ConfigurationError,
    NotFound,
    PaymentInitFailed,
    SignatureInvalid,
    ValidationError,
)

logger = logging.getLogger(__name__)


class PaymentOrchestrator:
    """Entry point for the payment flows of a single request."""

    def __init__(self, db: Session, settings: Settings | None = None) -> None:
        self.db = db
        self.settings = settings or get_settings()

    # -- initiate -----------------------------------------------------------

    def initiate(self, *, plan_id: str, amount: int, billing_cycle: str) -> dict[str, Any]:
        """Open an order with the active provider.

        ``amount`` is already expressed in the smallest currency unit. Any
        failure, including a missing or unknown provider selector, surfaces
        as ``PAYMENT_INIT_FAILED``.
        """

        currency = self.settings.default_currency
        try:
            name, provider = active_provider(self.settings)
            order = provider.create_order(
                amount,
                currency,
                {"notes": {"planId": plan_id, "billingCycle": billing_cycle}},
            )
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "Payment initiation failed",
                extra={"plan_id": plan_id, "provider": self.settings.payment_provider, "reason": str(exc)},
            )
            raise PaymentInitFailed(str(exc) or "Failed to initiate payment") from exc

        self._remember_order(
            order_id=order.order_id,
            plan_id=plan_id,
            billing_cycle=billing_cycle,
            amount=order.amount,
            currency=order.currency,
            provider=name.value,
        )
        logger.info(
            "Payment initiated",
            extra={"provider": name.value, "order_id": order.order_id, "amount": order.amount},
        )
        return {
            "orderId": order.order_id,
            "amount": order.amount,
            "currency": order.currency,
            "provider": name.value,
            "providerKey": provider.get_provider_key(),
        }

    def _remember_order(self, **fields: Any) -> None:
        try:
            self.db.add(PaymentOrder(status=PaymentOrderStatus.CREATED, **fields))
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning("Order already stored", extra={"order_id": fields["order_id"]})

    # -- verify -------------------------------------------------------------

    def verify(
        self,
        *,
        order_id: str,
        payment_id: str,
        signature: str,
        plan_id: str,
        amount: int,
        provider_hint: str | None = None,
    ) -> SubscriptionRecord:
        """Verify a checkout callback and return the subscription it grants."""

        name, provider = active_provider(self.settings)
        if provider_hint and provider_hint.lower() != name.value:
            logger.warning(
                "Verify request names a provider other than the active one",
                extra={"requested": provider_hint, "active": name.value},
            )

        if not provider.verify_payment(order_id, payment_id, signature):
            logger.warning("Payment signature rejected", extra={"provider": name.value, "order_id": order_id})
            raise SignatureInvalid("Payment signature verification failed")

        payment = CapturedPayment(payment_id=payment_id, order_id=order_id, amount=amount, plan_id=plan_id)
        record = self._record(payment, name)
        return record.subscription

    # -- webhooks -----------------------------------------------------------

    def handle_webhook(
        self, provider_name: str, raw_body: bytes, headers: Mapping[str, str]
    ) -> dict[str, bool]:
        """Authenticate a webhook delivery and apply it idempotently.

        Accepted deliveries are acknowledged whether or not they were seen
        before; rejected deliveries never reach the ledger.
        """

        try:
            name = ProviderName(provider_name.lower())
        except ValueError:
            raise NotFound(f"Unknown payment provider: {provider_name}", code="UNKNOWN_PROVIDER") from None

        authenticator = self._authenticator(name)
        verdict = authenticator.authenticate(raw_body, headers)
        if not verdict.accepted:
            if verdict.rejection is Rejection.INVALID_SIGNATURE:
                raise SignatureInvalid(verdict.message)
            raise ValidationError(verdict.message, code=verdict.rejection.value)

        try:
            payment = authenticator.captured_payment(verdict.payload)
        except UnprocessablePayment as exc:
            # Accepted deliveries are always acknowledged.
            logger.warning(
                "Webhook acknowledged but not recorded",
                extra={"provider": name.value, "fields": exc.fields},
            )
            return {"success": True}

        if payment is None:
            logger.info("Webhook acknowledged without payment capture", extra={"provider": name.value})
            return {"success": True}

        self._record(payment, name)
        return {"success": True}

    def _authenticator(self, name: ProviderName) -> WebhookAuthenticator:
        config = provider_config(self.settings, name)
        try:
            adapter = create_provider(config)
        except ConfigurationError as exc:
            logger.error(
                "Webhook received for an unconfigured provider",
                extra={"provider": name.value, "psp_secret_status": masked_secrets(_secrets_of(config))},
            )
            raise ConfigurationError(str(exc), code="WEBHOOK_NOT_CONFIGURED") from exc

        if isinstance(adapter, RazorpayProvider):
            return RazorpayWebhookAuthenticator(adapter.webhook_secret)
        if isinstance(adapter, PineLabsProvider):
            return PineLabsWebhookAuthenticator(adapter)
        raise ConfigurationError(
            f"No webhook authenticator for {type(adapter).__name__}", code="WEBHOOK_NOT_CONFIGURED"
        )

    # -- shared -------------------------------------------------------------

    def _record(self, payment: CapturedPayment, name: ProviderName) -> PaymentRecord:
        order = self._find_order(payment.order_id)
        plan_id = payment.plan_id or (order.plan_id if order is not None else None) or UNKNOWN_PLAN

        entry = ledger.record_if_new(
            self.db,
            payment_id=payment.payment_id,
            order_id=payment.order_id,
            amount=payment.amount,
            plan_id=plan_id,
            provider=name.value,
        )
        if entry.created and order is not None and order.status is not PaymentOrderStatus.COMPLETED:
            order.status = PaymentOrderStatus.COMPLETED
            self.db.add(order)
            self.db.commit()
        return entry.record

    def _find_order(self, order_id: str) -> PaymentOrder | None:
        stmt = select(PaymentOrder).where(PaymentOrder.order_id == order_id).limit(1)
        return self.db.scalars(stmt).first()

    # -- lookups ------------------------------------------------------------

    def get_subscription(self, subscription_id: str) -> SubscriptionRecord:
        subscription = subscriptions_service.get_subscription(self.db, subscription_id)
        if subscription is None:
            raise NotFound("Subscription not found.", code="SUBSCRIPTION_NOT_FOUND")
        return subscription


def _secrets_of(config: Any) -> dict[str, str | None]:
    return {
        name: getattr(config, name)
        for name in ("key_secret", "webhook_secret", "secret_key", "access_code")
        if hasattr(config, name)
    }


__all__ = ["PaymentOrchestrator"]
