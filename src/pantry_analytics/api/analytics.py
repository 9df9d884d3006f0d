"""Inventory analytics API endpoints with bearer token auth."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import uuid4

from fastapi import APIRouter, Depends, Header, Request, status
from fastapi.responses import JSONResponse

from pantry_analytics.domain.models import UserRecord  # noqa: TC001
from pantry_analytics.services.analytics import serialize_report
from pantry_analytics.services.windows import InvalidWindowError, parse_days

if TYPE_CHECKING:
    from pantry_analytics.containers import AppContainer

router = APIRouter(prefix="/inventory/analytics", tags=["analytics"])

_logger = logging.getLogger(__name__)


def get_request_id(request: Request) -> str:
    """Assign a short correlation id to the request."""
    request_id = uuid4().hex[:8]
    request.state.request_id = request_id
    return request_id


async def require_user(
    request: Request,
    request_id: str = Depends(get_request_id),
    authorization: str | None = Header(default=None),
) -> UserRecord:
    """Resolve the authenticated user from the bearer token."""
    container: AppContainer = request.app.state.container
    user = await asyncio.to_thread(container.auth_service.authenticate, authorization)
    _logger.info(
        "Authenticated user_id=%s", user.id, extra={"request_id": request_id}
    )
    return user


@router.get("/health")
async def analytics_health() -> dict[str, object]:
    """Unauthenticated check that the analytics routes are mounted."""
    return {
        "success": True,
        "message": "Inventory Analytics API is working!",
        "timestamp": datetime.now(tz=UTC).isoformat(),
        "endpoint": "/inventory/analytics/health",
    }


@router.get("")
@router.get("/usage")
async def usage_analytics(
    request: Request,
    days: str | None = None,
    user: UserRecord = Depends(require_user),
    request_id: str = Depends(get_request_id),
) -> JSONResponse:
    """Return consumption and wastage analytics for the trailing window."""
    container: AppContainer = request.app.state.container
    resolved_days = parse_days(days, container.settings.analytics_default_days)
    try:
        report = await container.analytics_service.build_report(
            user.id, resolved_days, request_id=request_id
        )
    except InvalidWindowError as exc:
        return _error_response(status.HTTP_400_BAD_REQUEST, str(exc), request_id)
    except Exception as exc:
        _logger.exception(
            "Failed to build analytics report",
            extra={"request_id": request_id, "user_id": str(user.id)},
        )
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to fetch analytics",
            request_id,
            details=_debug_details(container, exc),
        )
    return JSONResponse(
        {
            "success": True,
            "data": serialize_report(report),
            "requestId": request_id,
        }
    )


@router.get("/debug")
async def debug_analytics(
    request: Request,
    days: str | None = None,
    user: UserRecord = Depends(require_user),
    request_id: str = Depends(get_request_id),
) -> JSONResponse:
    """Return raw record counts to diagnose an empty analytics report."""
    container: AppContainer = request.app.state.container
    resolved_days = parse_days(days, container.settings.analytics_default_days)
    try:
        snapshot = await container.analytics_service.debug_snapshot(
            user.id, resolved_days
        )
    except InvalidWindowError as exc:
        return _error_response(status.HTTP_400_BAD_REQUEST, str(exc), request_id)
    except Exception as exc:
        _logger.exception(
            "Analytics debug failed",
            extra={"request_id": request_id, "user_id": str(user.id)},
        )
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Debug failed",
            request_id,
            details=_debug_details(container, exc),
        )
    return JSONResponse({"success": True, "debug": snapshot, "requestId": request_id})


def _error_response(
    status_code: int, error: str, request_id: str | None, details: str | None = None
) -> JSONResponse:
    body: dict[str, object] = {
        "success": False,
        "error": error,
        "requestId": request_id,
    }
    if details:
        body["details"] = details
    return JSONResponse(body, status_code=status_code)


def _debug_details(container: AppContainer, exc: Exception) -> str | None:
    """Return exception details only when running locally."""
    if container.settings.environment == "local":
        return f"{type(exc).__name__}: {exc}".strip()
    return None
