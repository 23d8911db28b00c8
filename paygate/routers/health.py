"""Health check endpoint."""
from __future__ import annotations

import logging
from pathlib import Path

from alembic.config import Config
from alembic.script import ScriptDirectory
from fastapi import APIRouter
from sqlalchemy import text

from paygate import db
from paygate.config import Settings, get_settings
from paygate.core.logging import secret_fingerprint
from paygate.providers.registry import ProviderName, create_provider, parse_provider_name, provider_config
from paygate.utils.errors import ConfigurationError

router = APIRouter(prefix="/health", tags=["health"])
logger = logging.getLogger(__name__)

ALEMBIC_INI = Path(__file__).resolve().parents[2] / "alembic.ini"


def _db_status() -> str:
    """Return 'ok' if the DB is reachable, 'error' otherwise."""

    try:
        db.ping()
        return "ok"
    except Exception:  # noqa: BLE001
        logger.exception("DB health check failed")
        return "error"


def _expected_migration_head() -> str | None:
    try:
        script = ScriptDirectory.from_config(Config(str(ALEMBIC_INI)))
        return script.get_current_head()
    except Exception:  # noqa: BLE001
        logger.exception("Failed to load Alembic head revision")
        return None


def _migrations_status() -> tuple[bool, str]:
    expected_head = _expected_migration_head()
    try:
        with db.get_engine().connect() as conn:
            current = conn.execute(text("SELECT version_num FROM alembic_version")).scalar()
        if expected_head and current == expected_head:
            return True, "up_to_date"
        if expected_head is None:
            return False, "unknown"
        return False, "out_of_date"
    except Exception:  # noqa: BLE001
        logger.exception("Migration check failed")
        return False, "unknown"


def _provider_configured(settings: Settings, name: ProviderName) -> bool:
    try:
        create_provider(provider_config(settings, name))
    except ConfigurationError:
        return False
    return True


def _active_provider(settings: Settings) -> str | None:
    try:
        return parse_provider_name(settings.payment_provider).value
    except ConfigurationError:
        return None


def _secret_fingerprints(settings: Settings) -> dict[str, str | None]:
    return {
        "razorpay_key_secret": secret_fingerprint(settings.razorpay_key_secret),
        "razorpay_webhook_secret": secret_fingerprint(settings.razorpay_webhook_secret),
        "pinelabs_secret_key": secret_fingerprint(settings.pinelabs_secret_key),
    }


@router.get("", summary="Health check")
def healthcheck() -> dict[str, object]:
    """Return database reachability and provider configuration status."""

    settings = get_settings()
    active = _active_provider(settings)
    providers = {name.value: _provider_configured(settings, name) for name in ProviderName}
    db_status = _db_status()
    db_ok = db_status == "ok"
    if db_ok:
        migrations_ok, migrations_status = _migrations_status()
    else:
        migrations_ok, migrations_status = False, "unknown"

    provider_ok = active is not None and providers.get(active, False)
    degraded = not (db_ok and migrations_ok and provider_ok)
    return {
        "status": "degraded" if degraded else "ok",
        "active_provider": active,
        "providers_configured": providers,
        "secret_fingerprints": _secret_fingerprints(settings),
        "db_ok": db_ok,
        "db_status": db_status,
        "migrations_ok": migrations_ok,
        "migrations_status": migrations_status,
    }
