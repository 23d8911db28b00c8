"""Authentication of provider webhook callbacks.

Each delivery moves through ``RECEIVED_RAW -> SIGNATURE_EXTRACTED`` and ends
``ACCEPTED`` or ``REJECTED``. Authenticators never raise for bad input: the
verdict carries the rejection reason and the caller decides how to answer.
"""
from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from paygate.providers.base import compute_signature, signatures_match
from paygate.providers.pinelabs_adapter import PineLabsProvider
from paygate.providers.registry import ProviderName
from paygate.utils.sanitize import sanitize_text

logger = logging.getLogger(__name__)

RAZORPAY_SIGNATURE_HEADER = "x-razorpay-signature"
PINELABS_SIGNATURE_HEADER = "x-pinelabs-signature"
PINELABS_REQUIRED_FIELDS = ("order_id", "payment_id")

RAZORPAY_CAPTURED_EVENT = "payment.captured"
PINELABS_SUCCESS_STATUSES = {"success", "captured"}
UNKNOWN_PLAN = "unknown"

# Column bounds of the ledger tables.
MAX_AMOUNT = 2**63 - 1
MAX_IDENTIFIER_LENGTH = 200
MAX_PLAN_ID_LENGTH = 100


class WebhookState(str, enum.Enum):
    RECEIVED_RAW = "received_raw"
    SIGNATURE_EXTRACTED = "signature_extracted"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class Rejection(str, enum.Enum):
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    MISSING_FIELDS = "MISSING_FIELDS"
    INVALID_PAYLOAD = "INVALID_PAYLOAD"


@dataclass
class WebhookEvent:
    """Raw delivery as received, plus the signature once extracted."""

    provider: ProviderName
    raw_body: bytes
    headers: Mapping[str, str]
    signature: str | None = None
    state: WebhookState = WebhookState.RECEIVED_RAW


@dataclass(frozen=True)
class WebhookVerdict:
    state: WebhookState
    rejection: Rejection | None = None
    message: str = ""
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def accepted(self) -> bool:
        return self.state is WebhookState.ACCEPTED


@dataclass(frozen=True)
class CapturedPayment:
    """Payment details extracted from an accepted webhook."""

    payment_id: str
    order_id: str
    amount: int
    plan_id: str | None


def get_header(headers: Mapping[str, str], key: str) -> str | None:
    for h_key, value in headers.items():
        if h_key.lower() == key.lower():
            return value
    return None


def _reject(event: WebhookEvent, rejection: Rejection, message: str) -> WebhookVerdict:
    event.state = WebhookState.REJECTED
    logger.warning(
        "Webhook rejected",
        extra={"provider": event.provider.value, "reason": rejection.value},
    )
    return WebhookVerdict(state=WebhookState.REJECTED, rejection=rejection, message=message)


def _accept(event: WebhookEvent, payload: dict[str, Any]) -> WebhookVerdict:
    event.state = WebhookState.ACCEPTED
    return WebhookVerdict(state=WebhookState.ACCEPTED, payload=payload)


def _load_json_object(raw_body: bytes) -> dict[str, Any] | None:
    try:
        payload = json.loads(raw_body)
    except (TypeError, ValueError):
        return None
    return payload if isinstance(payload, dict) else None


def _as_amount(value: Any) -> int | None:
    """Return a storable positive amount, ``None`` for anything else."""

    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not (value.isascii() and value.isdigit()) or len(value) > len(str(MAX_AMOUNT)):
            return None
        value = int(value)
    if not isinstance(value, int) or not 1 <= value <= MAX_AMOUNT:
        return None
    return value


def _as_identifier(value: Any) -> str | None:
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        return None
    text = str(value).strip()
    if not text or len(text) > MAX_IDENTIFIER_LENGTH:
        return None
    return text


def _as_plan_id(value: Any) -> str | None:
    """Return the sanitized plan id; absent plans are ``None``, unusable ones raise."""

    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise UnprocessablePayment(["plan_id"])
    plan_id = sanitize_text(value)
    if not plan_id:
        return None
    if len(plan_id) > MAX_PLAN_ID_LENGTH:
        raise UnprocessablePayment(["plan_id"])
    return plan_id


def _dig(data: Any, *keys: str) -> Mapping[str, Any]:
    for key in keys:
        data = data.get(key) if isinstance(data, Mapping) else None
    return data if isinstance(data, Mapping) else {}


def _missing_fields_message(missing: list[str]) -> str:
    return f"Missing required webhook fields: {', '.join(missing)}"


class UnprocessablePayment(Exception):
    """An authenticated capture event whose payment details cannot be recorded."""

    def __init__(self, fields: list[str]) -> None:
        super().__init__(f"Unprocessable webhook payment fields: {', '.join(fields)}")
        self.fields = fields


def _captured(
    *,
    payment_id: tuple[str, Any],
    order_id: tuple[str, Any],
    amount: tuple[str, Any],
    plan_id: Any,
) -> CapturedPayment:
    """Validate raw capture fields against the ledger column bounds."""

    parsed_payment_id = _as_identifier(payment_id[1])
    parsed_order_id = _as_identifier(order_id[1])
    parsed_amount = _as_amount(amount[1])
    bad = [
        name
        for (name, _), value in (
            (payment_id, parsed_payment_id),
            (order_id, parsed_order_id),
            (amount, parsed_amount),
        )
        if value is None
    ]
    if bad:
        raise UnprocessablePayment(bad)
    return CapturedPayment(
        payment_id=parsed_payment_id,
        order_id=parsed_order_id,
        amount=parsed_amount,
        plan_id=_as_plan_id(plan_id),
    )


class RazorpayWebhookAuthenticator:
    """Verifies ``x-razorpay-signature`` over the exact raw body bytes."""

    provider = ProviderName.RAZORPAY

    def __init__(self, webhook_secret: str) -> None:
        self._secret = webhook_secret

    def authenticate(self, raw_body: bytes, headers: Mapping[str, str]) -> WebhookVerdict:
        event = WebhookEvent(provider=self.provider, raw_body=raw_body, headers=headers)

        signature = get_header(headers, RAZORPAY_SIGNATURE_HEADER)
        if not signature:
            return _reject(event, Rejection.INVALID_SIGNATURE, "Webhook signature is missing")
        event.signature = signature
        event.state = WebhookState.SIGNATURE_EXTRACTED

        expected = compute_signature(self._secret, raw_body)
        if not signatures_match(expected, signature):
            return _reject(event, Rejection.INVALID_SIGNATURE, "Webhook signature verification failed")

        payload = _load_json_object(raw_body)
        if payload is None:
            return _reject(event, Rejection.INVALID_PAYLOAD, "Webhook body must be a JSON object")
        return _accept(event, payload)

    @staticmethod
    def captured_payment(payload: Mapping[str, Any]) -> CapturedPayment | None:
        """Return the payment of a ``payment.captured`` event, ``None`` for other events."""

        if payload.get("event") != RAZORPAY_CAPTURED_EVENT:
            return None

        entity = _dig(payload, "payload", "payment", "entity")
        notes = entity.get("notes")
        return _captured(
            payment_id=("payment.id", entity.get("id")),
            order_id=("payment.order_id", entity.get("order_id")),
            amount=("payment.amount", entity.get("amount")),
            plan_id=notes.get("planId") if isinstance(notes, Mapping) else None,
        )


class PineLabsWebhookAuthenticator:
    """Verifies the ``signature`` body field with the adapter's payment scheme."""

    provider = ProviderName.PINELABS

    def __init__(self, adapter: PineLabsProvider) -> None:
        self._adapter = adapter

    def authenticate(self, raw_body: bytes, headers: Mapping[str, str]) -> WebhookVerdict:
        event = WebhookEvent(provider=self.provider, raw_body=raw_body, headers=headers)

        payload = _load_json_object(raw_body)
        if payload is None:
            return _reject(event, Rejection.INVALID_PAYLOAD, "Webhook body must be a JSON object")

        missing = [name for name in PINELABS_REQUIRED_FIELDS if not payload.get(name)]
        if missing:
            return _reject(event, Rejection.MISSING_FIELDS, _missing_fields_message(missing))

        signature = payload.get("signature") or get_header(headers, PINELABS_SIGNATURE_HEADER)
        if not signature:
            return _reject(event, Rejection.INVALID_SIGNATURE, "Webhook signature is missing")
        event.signature = signature
        event.state = WebhookState.SIGNATURE_EXTRACTED

        if not self._adapter.verify_payment(str(payload["order_id"]), str(payload["payment_id"]), signature):
            return _reject(event, Rejection.INVALID_SIGNATURE, "Webhook signature verification failed")
        return _accept(event, payload)

    @staticmethod
    def captured_payment(payload: Mapping[str, Any]) -> CapturedPayment | None:
        """Return the payment of a successful status update, ``None`` otherwise."""

        status = str(payload.get("status") or "").lower()
        if status not in PINELABS_SUCCESS_STATUSES:
            return None

        return _captured(
            payment_id=("payment_id", payload.get("payment_id")),
            order_id=("order_id", payload.get("order_id")),
            amount=("amount", payload.get("amount")),
            plan_id=payload.get("plan_id"),
        )


WebhookAuthenticator = RazorpayWebhookAuthenticator | PineLabsWebhookAuthenticator


__all__ = [
    "WebhookState",
    "Rejection",
    "WebhookEvent",
    "WebhookVerdict",
    "CapturedPayment",
    "UnprocessablePayment",
    "RazorpayWebhookAuthenticator",
    "PineLabsWebhookAuthenticator",
    "WebhookAuthenticator",
    "RAZORPAY_SIGNATURE_HEADER",
    "PINELABS_SIGNATURE_HEADER",
    "UNKNOWN_PLAN",
    "get_header",
]
