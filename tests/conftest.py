"""Test configuration."""
import hashlib
import hmac
import os
from collections.abc import AsyncIterator, Callable, Iterator
from pathlib import Path
from typing import Any

from alembic import command
from alembic.config import Config
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

# --- Default test environment
os.environ.setdefault("DATABASE_URL", "sqlite:///./paygate_test.db")
os.environ["PAYGATE_ENV"] = "test"
os.environ["PAYMENT_PROVIDER"] = "razorpay"
os.environ["RAZORPAY_KEY_ID"] = "rzp_test_key_id"
os.environ["RAZORPAY_KEY_SECRET"] = "rzp-test-key-secret"
os.environ["RAZORPAY_WEBHOOK_SECRET"] = "rzp-test-webhook-secret"
os.environ["PINELABS_MERCHANT_ID"] = "PL-MERCHANT-001"
os.environ["PINELABS_ACCESS_CODE"] = "pl-access-code"
os.environ["PINELABS_SECRET_KEY"] = "pl-test-secret-key"

from paygate.db import get_db  # noqa: E402
from paygate.main import app  # noqa: E402
from paygate.providers import razorpay_adapter  # noqa: E402

DB_PATH = Path("./paygate_test.db")
ROOT = Path(__file__).resolve().parents[1]


def _run_migrations() -> None:
    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("sqlalchemy.url", os.environ["DATABASE_URL"])
    command.upgrade(cfg, "head")


# --- (1) Fresh database file for the session
if DB_PATH.exists():
    DB_PATH.unlink()

engine = create_engine(
    os.environ["DATABASE_URL"],
    connect_args={"check_same_thread": False},
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

# --- (2) Schema comes from Alembic only
_run_migrations()


@pytest.fixture
def db_session() -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture(autouse=True)
def override_db_dependency(db_session: Session) -> Iterator[None]:
    def _get_db() -> Iterator[Session]:
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as async_client:
        yield async_client


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


class FakeOrderResource:
    """Stands in for ``razorpay.Client().order``."""

    def __init__(self) -> None:
        self.calls: list[tuple[dict[str, Any], dict[str, Any]]] = []
        self.error: Exception | None = None
        self.response_overrides: dict[str, Any] = {}

    def create(self, data: dict[str, Any] | None = None, **kwargs: Any) -> dict[str, Any]:
        data = data or {}
        self.calls.append((data, kwargs))
        if self.error is not None:
            raise self.error
        response = {
            "id": f"order_fake_{len(self.calls)}",
            "entity": "order",
            "amount": data.get("amount"),
            "currency": data.get("currency"),
            "receipt": data.get("receipt"),
            "status": "created",
        }
        response.update(self.response_overrides)
        return response


@pytest.fixture
def razorpay_orders(monkeypatch) -> FakeOrderResource:
    """Replace the Razorpay SDK client; every adapter shares one fake order resource."""

    orders = FakeOrderResource()

    class FakeRazorpayClient:
        def __init__(self, auth=None, **options) -> None:
            self.auth = auth
            self.order = orders

    monkeypatch.setattr(razorpay_adapter.razorpay, "Client", FakeRazorpayClient)
    return orders


@pytest.fixture
def sign() -> Callable[[str, str | bytes], str]:
    def _sign(secret: str, message: str | bytes) -> str:
        if isinstance(message, str):
            message = message.encode("utf-8")
        return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()

    return _sign
