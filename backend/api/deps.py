"""Shared API dependencies."""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from db.session import get_session
from services.context import ServiceContext
from services.database.map_config_store import MapConfigStore
from services.mapconfig.sanitizer import ConfigSanitizer

logger = logging.getLogger(__name__)

APP_TOKEN_HEADER = "X-App-Token"


def get_context(request: Request) -> ServiceContext:
    """Return the per-process ServiceContext stored on the application."""
    context = getattr(request.app.state, "context", None)
    if context is None:
        raise RuntimeError("Service context is not initialised on app.state")
    return context


async def get_map_config_store(db: AsyncSession = Depends(get_session)) -> MapConfigStore:
    return MapConfigStore(db)


def request_base_url(request: Request) -> str:
    """Origin the client used, honouring reverse-proxy forwarding headers."""
    proto = request.headers.get("x-forwarded-proto") or request.url.scheme or "https"
    host = request.headers.get("x-forwarded-host") or request.headers.get("host")
    if not host:
        return str(request.base_url).rstrip("/")
    return f"{proto.split(',')[0].strip()}://{host.split(',')[0].strip()}"


def get_base_url(request: Request, context: ServiceContext = Depends(get_context)) -> str:
    return context.public_base_url or request_base_url(request)


def get_sanitizer(
    base_url: str = Depends(get_base_url),
    context: ServiceContext = Depends(get_context),
) -> ConfigSanitizer:
    return context.sanitizer(base_url)


def client_identifier(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def enforce_rate_limit(request: Request, context: ServiceContext = Depends(get_context)) -> None:
    """Reject the request with 429 once the caller exceeds the fixed window."""
    client_id = client_identifier(request)
    result = context.rate_limiter.check(client_id)
    if not result.allowed:
        logger.warning(f"Rate limit exceeded for {client_id}")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={"error": "Too many requests", "retryAfter": result.retry_after},
            headers={"Retry-After": str(result.retry_after)},
        )


def _presented_token(request: Request) -> Optional[str]:
    return request.headers.get(APP_TOKEN_HEADER) or request.query_params.get("token")


def get_caller_app(
    request: Request, context: ServiceContext = Depends(get_context)
) -> Optional[str]:
    """Return the app type of a recognised caller token, else None.

    Unknown tokens are treated as anonymous rather than rejected.
    """
    app_type = context.app_type_for_token(_presented_token(request))
    if app_type:
        logger.info(f"Authenticated access: {app_type} from {client_identifier(request)}")
    return app_type


def require_caller_app(
    request: Request, context: ServiceContext = Depends(get_context)
) -> str:
    """Like :func:`get_caller_app` but 401 without a token and 403 for unknown ones."""
    token = _presented_token(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "Not authenticated", "message": f"{APP_TOKEN_HEADER} header required"},
        )
    app_type = context.app_type_for_token(token)
    if not app_type:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid app token")
    logger.info(f"Authenticated access: {app_type} from {client_identifier(request)}")
    return app_type
