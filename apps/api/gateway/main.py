"""FastAPI application for the LiveKit room gateway."""
from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from .core.config import Settings, settings as default_settings
from .core.errors import GatewayError, UpstreamFailureError
from .routers import rooms as rooms_router
from .services.host_registry import InMemoryHostRegistry
from .services.rooms import RoomGateway
from .services.rtc import MediaServer, TokenSigner

logger = logging.getLogger(__name__)

LIVENESS_TEXT = "LiveKit backend is running"


def build_gateway(settings: Settings) -> RoomGateway:
    """Wire the LiveKit collaborators and a fresh host registry."""

    return RoomGateway(
        media=MediaServer.from_settings(settings),
        signer=TokenSigner.from_settings(settings),
        hosts=InMemoryHostRegistry(),
        settings=settings,
    )


async def _gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    if isinstance(exc, UpstreamFailureError):
        logger.error("%s %s failed upstream: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ())[1:]) or 'body'}: {error.get('msg', 'invalid')}"
        for error in exc.errors()
    )
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": problems or "Invalid request body"})


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application; the gateway itself is created on startup."""

    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        gateway = build_gateway(settings)
        app.state.gateway = gateway
        logger.info("Room gateway ready (LiveKit host: %s)", settings.livekit_host or "<from environment>")
        try:
            yield
        finally:
            await gateway.media.aclose()

    app = FastAPI(title="LiveKit Room Gateway", version="0.1.0", lifespan=lifespan)

    if settings.cors_allow_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_allow_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(GatewayError, _gateway_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    @app.get("/", response_class=PlainTextResponse, tags=["meta"])
    async def index() -> PlainTextResponse:
        """Plain-text liveness string."""

        return PlainTextResponse(LIVENESS_TEXT)

    @app.head("/", tags=["meta"])
    async def index_head() -> Response:
        """Fast health checks issue HEAD /; answer with 200 to avoid noisy 405s."""

        return Response(status_code=200)

    @app.get("/api/health", tags=["meta"])
    async def health() -> dict[str, str]:
        """Simple liveness probe."""

        return {"status": "ok"}

    app.include_router(rooms_router.router, tags=["rooms"])
    return app


app = create_app()
