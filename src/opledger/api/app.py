"""
FastAPI application factory.

``create_app()`` wires logging, middleware, the operations router and the
health endpoint into a single ``FastAPI`` instance. It is the only place
that touches ``FastAPI`` directly; the router itself lives next to the
registry in :mod:`opledger.operations.fastapi`.
"""

from __future__ import annotations

import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from opledger import __version__
from opledger.core.logging import LogContext, configure_from_settings, get_logger
from opledger.core.settings import OpLedgerSettings, get_settings
from opledger.operations.factory import create_registry
from opledger.operations.fastapi import create_operations_router
from opledger.operations.registry import OperationRegistry

logger = get_logger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a unique request ID to every request and its log lines."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request.state.request_id = request_id
        with LogContext(request_id=request_id):
            response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions — returns 500."""
    logger.exception("unhandled_exception", path=str(request.url.path))
    return JSONResponse(
        status_code=500,
        content={
            "title": "Internal Server Error",
            "status": 500,
            "detail": str(exc) if request.app.state.settings.debug else "An unexpected error occurred.",
            "instance": str(request.url),
        },
    )


def create_app(
    *,
    settings: OpLedgerSettings | None = None,
    registry: OperationRegistry | None = None,
) -> FastAPI:
    """Build and return a fully-configured FastAPI application.

    Parameters
    ----------
    settings : OpLedgerSettings | None
        Override settings (useful for testing). When ``None`` the cached
        singleton from :func:`get_settings` is used.
    registry : OperationRegistry | None
        Override the registry. When ``None`` one is built from *settings*.
    """
    settings = settings or get_settings()
    configure_from_settings(settings)

    registry = registry if registry is not None else create_registry(settings)

    app = FastAPI(title=settings.api_title, version=__version__)
    app.state.settings = settings
    app.state.registry = registry

    app.add_middleware(RequestIDMiddleware)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(
        create_operations_router(
            registry,
            prefix=settings.api_prefix,
            default_limit=settings.default_list_limit,
        )
    )

    @app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    return app
