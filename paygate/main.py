from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from paygate import db
from paygate.config import AppInfo, get_settings
from paygate.core.logging import get_logger, setup_logging
from paygate.middleware import https_enforcement_middleware
import paygate.models  # registers the tables
from paygate.providers.registry import parse_provider_name
from paygate.routers import get_api_router
from paygate.utils.errors import ConfigurationError, PaymentGatewayError, error_response

logger = get_logger(__name__)
ALLOWED_CREATE_ENV = {"dev", "local", "test"}


def _current_settings():
    return get_settings()


def _configure_middlewares(fastapi_app: FastAPI) -> None:
    """Install request middleware; each one reads the settings per request."""

    fastapi_app.middleware("http")(https_enforcement_middleware)


def _assert_payment_provider(settings: Any) -> None:
    """Fail-fast when no usable provider is selected outside dev."""

    try:
        name = parse_provider_name(settings.payment_provider)
    except ConfigurationError as exc:
        env_lower = settings.app_env.lower()
        if env_lower not in {"dev", "test"}:
            logger.error(
                "PAYMENT_PROVIDER is missing or invalid; configure it before startup.",
                extra={"env": settings.app_env},
            )
            raise RuntimeError(str(exc)) from exc
        logger.warning(
            "PAYMENT_PROVIDER is missing or invalid; payment initiation will fail.",
            extra={"env": settings.app_env},
        )
        return
    logger.info("Payment provider selected", extra={"provider": name.value})


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    settings = _current_settings()
    logger.info("Application startup", extra={"env": settings.app_env})
    _assert_payment_provider(settings)

    db.init_engine()
    env_lower = settings.app_env.lower()
    if settings.ALLOW_DB_CREATE_ALL and env_lower in ALLOWED_CREATE_ENV:
        logger.warning(
            "Running Base.metadata.create_all() because APP_ENV=%s and ALLOW_DB_CREATE_ALL=True",
            settings.app_env,
        )
        db.create_all()
    else:
        logger.info(
            "Skipping create_all(); use Alembic migrations. APP_ENV=%s, ALLOW_DB_CREATE_ALL=%s",
            settings.app_env,
            settings.ALLOW_DB_CREATE_ALL,
        )
    try:
        yield
    finally:
        db.close_engine()
        logger.info("Application shutdown", extra={"env": settings.app_env})


app_info = AppInfo()

app = FastAPI(title=app_info.name, version=app_info.version, lifespan=lifespan)
_configure_middlewares(app)
app.include_router(get_api_router())


@app.exception_handler(PaymentGatewayError)
async def payment_error_handler(request: Request, exc: PaymentGatewayError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]
    payload = error_response("VALIDATION_ERROR", "Request validation failed.", {"errors": errors})
    return JSONResponse(status_code=400, content=payload)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict) and "error" in detail:
        content: dict[str, Any] = detail
    else:
        content = error_response("HTTP_ERROR", str(detail))
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception", exc_info=exc)
    payload = error_response("INTERNAL_SERVER_ERROR", "An unexpected error occurred.")
    return JSONResponse(status_code=500, content=payload)


__all__ = ["app"]
