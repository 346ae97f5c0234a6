"""FastAPI application for the webhook, liveness, and health endpoints."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from .. import __version__
from .schemas import ErrorResponse

logger = logging.getLogger(__name__)

DESCRIPTION = """
# Audio Relay

Receives Telegram updates on a webhook and republishes audio from the owner's
chat to a public channel, batching bursts and keeping their order.

- `GET /`: liveness check
- `GET /api/v1/health`: uptime and relay queue statistics
- `GET /metrics`: Prometheus metrics, when enabled

The webhook itself (`POST /<bot token>`) is not listed.
"""


def create_app(
    title: str = "Audio Relay",
    version: str = __version__,
    enable_metrics: bool = True,
) -> FastAPI:
    """
    Create the FastAPI application.

    Routes read their collaborators through `api.dependencies`, so the
    relay pipeline must be registered there before requests arrive.

    Args:
        title: API title for OpenAPI documentation
        version: API version
        enable_metrics: Expose Prometheus metrics at /metrics

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title=title,
        version=version,
        description=DESCRIPTION,
        license_info={"name": "MIT"},
        openapi_tags=[{"name": "health", "description": "Liveness and health checks"}],
    )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        # Never log request.url: the webhook path is the bot token.
        logger.error(f"Unhandled error in {request.method} handler: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(error="Internal server error").model_dump(),
        )

    from .routes import health, webhook

    app.include_router(health.router, tags=["health"])

    if enable_metrics:
        # Handlers are labelled by route template, so the token path shows up as /{token}.
        Instrumentator(
            should_group_status_codes=True,
            should_ignore_untemplated=True,
            should_respect_env_var=False,
            excluded_handlers=["/metrics"],
        ).instrument(app).expose(app, endpoint="/metrics", include_in_schema=True)
        logger.info("Prometheus metrics enabled at /metrics")

    # Catch-all POST route; registered last so /metrics and health win.
    app.include_router(webhook.router, tags=["webhook"])

    logger.info(f"FastAPI application created: {title} v{version}")
    return app
