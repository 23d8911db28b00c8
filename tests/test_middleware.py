import pytest
from httpx import ASGITransport, AsyncClient

from paygate.config import get_settings
from paygate.main import app


@pytest.mark.anyio("asyncio")
@pytest.mark.parametrize("env", ["prod", "production", "PROD"])
async def test_plain_http_refused_in_production(monkeypatch, client, env):
    monkeypatch.setattr(get_settings(), "app_env", env)

    response = await client.get("/health")

    assert response.status_code == 403
    payload = response.json()
    assert payload["success"] is False
    assert payload["error"]["code"] == "HTTPS_REQUIRED"


@pytest.mark.anyio("asyncio")
async def test_webhooks_also_require_https_in_production(monkeypatch, client):
    monkeypatch.setattr(get_settings(), "app_env", "prod")

    response = await client.post("/payment/webhook/razorpay", content=b"{}")

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "HTTPS_REQUIRED"


@pytest.mark.anyio("asyncio")
@pytest.mark.parametrize("forwarded", ["https", "HTTPS", "https, http"])
async def test_forwarded_https_allowed_in_production(monkeypatch, client, forwarded):
    monkeypatch.setattr(get_settings(), "app_env", "prod")

    response = await client.get("/health", headers={"X-Forwarded-Proto": forwarded})

    assert response.status_code == 200


@pytest.mark.anyio("asyncio")
async def test_forwarded_http_refused_in_production(monkeypatch, client):
    monkeypatch.setattr(get_settings(), "app_env", "prod")

    response = await client.get("/health", headers={"X-Forwarded-Proto": "http"})

    assert response.status_code == 403


@pytest.mark.anyio("asyncio")
async def test_direct_https_allowed_in_production(monkeypatch):
    monkeypatch.setattr(get_settings(), "app_env", "prod")

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="https://test") as secure_client:
        response = await secure_client.get("/health")

    assert response.status_code == 200


@pytest.mark.anyio("asyncio")
@pytest.mark.parametrize("env", ["dev", "test", "staging"])
async def test_plain_http_allowed_outside_production(monkeypatch, client, env):
    monkeypatch.setattr(get_settings(), "app_env", env)

    response = await client.get("/health")

    assert response.status_code == 200
