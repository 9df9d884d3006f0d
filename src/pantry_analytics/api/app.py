"""FastAPI application factory."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from pantry_analytics.api.analytics import router as analytics_router
from pantry_analytics.app_logging import configure_logging
from pantry_analytics.containers import AppContainer
from pantry_analytics.services.auth import AuthenticationError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    app = FastAPI()
    app.state.container = container

    app.include_router(analytics_router)

    @app.exception_handler(AuthenticationError)
    async def authentication_error(
        request: Request, exc: AuthenticationError
    ) -> JSONResponse:
        request_id = getattr(request.state, "request_id", None)
        logger.info(
            "Authentication failed: %s", exc.error, extra={"request_id": request_id}
        )
        return JSONResponse(
            {
                "success": False,
                "error": exc.error,
                "details": exc.details,
                "requestId": request_id,
            },
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
