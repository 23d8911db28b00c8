"""Provider adapters: order creation and payment signatures."""
from __future__ import annotations

import pytest

from paygate.config import PINELABS_API_BASE_URL, PineLabsConfig, RazorpayConfig
from paygate.providers.base import compute_signature, signatures_match
from paygate.providers.pinelabs_adapter import PineLabsProvider, resolve_api_base_url
from paygate.providers.razorpay_adapter import RazorpayProvider
from paygate.utils.errors import ConfigurationError, ProviderError

RZP_SECRET = "rzp-unit-secret"
PL_SECRET = "pl-unit-secret"
PL_MERCHANT = "PL-UNIT-42"


@pytest.fixture
def razorpay_provider(razorpay_orders) -> RazorpayProvider:
    return RazorpayProvider(RazorpayConfig(key_id="rzp_unit_key", key_secret=RZP_SECRET, timeout_seconds=7.5))


@pytest.fixture
def pinelabs_provider() -> PineLabsProvider:
    return PineLabsProvider(
        PineLabsConfig(merchant_id=PL_MERCHANT, access_code="pl-access", secret_key=PL_SECRET)
    )


def test_compute_signature_is_hex_sha256():
    signature = compute_signature("secret", "order|payment")
    assert len(signature) == 64
    assert int(signature, 16) >= 0
    assert compute_signature("secret", b"order|payment") == signature


@pytest.mark.parametrize("provided", [None, 12345, b"abc", "", "not-hex", "é" * 64])
def test_signatures_match_rejects_malformed_input(provided):
    expected = compute_signature("secret", "order|payment")
    assert signatures_match(expected, provided) is False


def test_razorpay_signature_round_trip(razorpay_provider, sign):
    signature = sign(RZP_SECRET, "order_1|pay_1")

    assert razorpay_provider.expected_signature("order_1", "pay_1") == signature
    assert razorpay_provider.verify_payment("order_1", "pay_1", signature) is True


def test_razorpay_signature_is_bound_to_the_pair(razorpay_provider, sign):
    signature = sign(RZP_SECRET, "order_1|pay_1")

    assert razorpay_provider.verify_payment("pay_1", "order_1", signature) is False
    assert razorpay_provider.verify_payment("order_1", "pay_2", signature) is False
    assert razorpay_provider.verify_payment("order_1", "pay_1", sign("other-secret", "order_1|pay_1")) is False
    assert razorpay_provider.verify_payment("order_1", "pay_1", signature.upper()) is False


@pytest.mark.parametrize("signature", ["", "deadbeef", "z" * 64, None])
def test_razorpay_verify_never_raises(razorpay_provider, signature):
    assert razorpay_provider.verify_payment("order_1", "pay_1", signature) is False


@pytest.mark.parametrize(
    "config",
    [
        RazorpayConfig(key_id=None, key_secret="secret"),
        RazorpayConfig(key_id="rzp_key", key_secret=None),
        RazorpayConfig(),
    ],
)
def test_razorpay_requires_credentials(config, razorpay_orders):
    with pytest.raises(ConfigurationError):
        RazorpayProvider(config)


def test_razorpay_webhook_secret_defaults_to_key_secret(razorpay_orders):
    provider = RazorpayProvider(RazorpayConfig(key_id="rzp_key", key_secret="key-secret"))
    assert provider.webhook_secret == "key-secret"

    provider = RazorpayProvider(
        RazorpayConfig(key_id="rzp_key", key_secret="key-secret", webhook_secret="hook-secret")
    )
    assert provider.webhook_secret == "hook-secret"


def test_razorpay_provider_key_is_key_id(razorpay_provider):
    assert razorpay_provider.get_provider_key() == "rzp_unit_key"


def test_razorpay_create_order_forwards_options(razorpay_provider, razorpay_orders):
    order = razorpay_provider.create_order(
        99900, "INR", {"receipt": "receipt_custom", "notes": {"planId": "basic"}}
    )

    assert order.order_id == "order_fake_1"
    assert order.amount == 99900
    assert order.currency == "INR"
    data, kwargs = razorpay_orders.calls[0]
    assert data == {
        "amount": 99900,
        "currency": "INR",
        "receipt": "receipt_custom",
        "notes": {"planId": "basic"},
    }
    assert kwargs["timeout"] == 7.5


def test_razorpay_create_order_generates_receipt(razorpay_provider, razorpay_orders):
    razorpay_provider.create_order(500, "INR")

    data, _ = razorpay_orders.calls[0]
    assert data["receipt"].startswith("receipt_")
    assert data["receipt"].removeprefix("receipt_").isdigit()
    assert data["notes"] == {}


def test_razorpay_upstream_failure_becomes_provider_error(razorpay_provider, razorpay_orders):
    razorpay_orders.error = RuntimeError("gateway timeout")

    with pytest.raises(ProviderError) as excinfo:
        razorpay_provider.create_order(500, "INR")

    assert "Failed to create Razorpay order" in str(excinfo.value)
    assert "gateway timeout" in str(excinfo.value)


@pytest.mark.parametrize(
    "overrides",
    [{"amount": 499}, {"currency": "USD"}, {"id": None}, {"amount": "abc"}],
)
def test_razorpay_rejects_inconsistent_orders(razorpay_provider, razorpay_orders, overrides):
    razorpay_orders.response_overrides = overrides

    with pytest.raises(ProviderError):
        razorpay_provider.create_order(500, "INR")


@pytest.mark.parametrize("amount, currency", [(0, "INR"), (-5, "INR"), (10.5, "INR"), (True, "INR"), (100, "")])
def test_create_order_validates_arguments(razorpay_provider, pinelabs_provider, razorpay_orders, amount, currency):
    with pytest.raises(ProviderError):
        razorpay_provider.create_order(amount, currency)
    with pytest.raises(ProviderError):
        pinelabs_provider.create_order(amount, currency)
    assert razorpay_orders.calls == []


def test_pinelabs_signature_includes_merchant(pinelabs_provider, sign):
    signature = sign(PL_SECRET, f"order_1|pay_1|{PL_MERCHANT}")

    assert pinelabs_provider.verify_payment("order_1", "pay_1", signature) is True
    assert pinelabs_provider.verify_payment("order_1", "pay_1", sign(PL_SECRET, "order_1|pay_1")) is False
    assert pinelabs_provider.verify_payment("pay_1", "order_1", signature) is False


def test_pinelabs_provider_key_is_merchant_id(pinelabs_provider):
    assert pinelabs_provider.get_provider_key() == PL_MERCHANT


def test_pinelabs_create_order_echoes_request(pinelabs_provider):
    first = pinelabs_provider.create_order(49900, "INR")
    second = pinelabs_provider.create_order(49900, "INR")

    assert first.order_id.startswith("pl_")
    assert first.amount == 49900
    assert first.currency == "INR"
    assert first.order_id != second.order_id


@pytest.mark.parametrize(
    "fields",
    [
        {"merchant_id": None, "access_code": "a", "secret_key": "s"},
        {"merchant_id": "m", "access_code": None, "secret_key": "s"},
        {"merchant_id": "m", "access_code": "a", "secret_key": None},
    ],
)
def test_pinelabs_requires_credentials(fields):
    with pytest.raises(ConfigurationError):
        PineLabsProvider(PineLabsConfig(**fields))


def test_pinelabs_uses_default_https_endpoint(pinelabs_provider):
    assert pinelabs_provider.api_base_url == PINELABS_API_BASE_URL
    assert pinelabs_provider.orders_endpoint == f"{PINELABS_API_BASE_URL}/api/v1/orders"


@pytest.mark.parametrize(
    "url",
    [
        "http://api.pluralonline.com",
        "HTTP://api.pluralonline.com",
        "Http://api.pluralonline.com",
        "HTTPS://api.pluralonline.com",
        "ftp://api.pluralonline.com",
        "api.pluralonline.com",
        "//api.pluralonline.com",
    ],
)
def test_pinelabs_refuses_non_https_urls(url):
    with pytest.raises(ConfigurationError) as excinfo:
        resolve_api_base_url(url)
    assert "HTTPS" in str(excinfo.value)

    with pytest.raises(ConfigurationError):
        PineLabsProvider(
            PineLabsConfig(merchant_id="m", access_code="a", secret_key="s", api_base_url=url)
        )


def test_pinelabs_accepts_https_urls():
    assert resolve_api_base_url("https://sandbox.pluralonline.com/") == "https://sandbox.pluralonline.com"
    assert resolve_api_base_url(None) == PINELABS_API_BASE_URL
