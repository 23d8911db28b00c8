"""
Middleware for transport security.
"""
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from paygate.config import get_settings
from paygate.core.logging import get_logger
from paygate.utils.errors import error_response

logger = get_logger(__name__)

PRODUCTION_ENVS = {"prod", "production"}


def is_secure_request(request: Request) -> bool:
    """True when the client reached us over TLS, directly or through a proxy."""

    if request.url.scheme == "https":
        return True
    forwarded = request.headers.get("x-forwarded-proto", "")
    return forwarded.split(",")[0].strip().lower() == "https"


async def https_enforcement_middleware(request: Request, call_next: Callable) -> Response:
    """
    Refuse plain HTTP requests in production with 403 HTTPS_REQUIRED.
    Other environments pass everything through.
    """
    if get_settings().app_env.lower() in PRODUCTION_ENVS and not is_secure_request(request):
        logger.warning(
            "Plain HTTP request refused",
            extra={"path": request.url.path, "method": request.method},
        )
        return JSONResponse(
            status_code=403,
            content=error_response("HTTPS_REQUIRED", "HTTPS is required for all requests in production"),
        )
    return await call_next(request)


__all__ = ["https_enforcement_middleware", "is_secure_request"]
