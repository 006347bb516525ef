"""
Gateway Service - Main Application
Public entry point that forwards API requests to the backend service
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import httpx
import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import GatewaySettings, get_settings
from app.routes import health, proxy
from app.services.proxy_service import ProxyForwarder
from app.utils.backend_client import BackendClient
from app.utils.body import RequestBodyError
from shared.utils.logger import setup_logging

logger = structlog.get_logger(__name__)


def create_app(
    settings: Optional[GatewaySettings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the gateway application.

    Settings are resolved once here and handed to the forwarder; request
    handlers only see them through app.state. A custom transport replaces
    the network when the backend is simulated in-process.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_format, settings.log_config_path)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan events"""
        logger.info(
            "Gateway started",
            port=settings.gateway_port,
            backend_url=settings.backend_url,
        )
        yield
        logger.info("Gateway shutdown complete")

    app = FastAPI(
        title="Gateway Service",
        description="Forwards public API requests to the backend service",
        version=settings.service_version,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.forwarder = ProxyForwarder(
        settings,
        BackendClient.from_settings(settings, transport=transport),
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all incoming requests"""
        path = request.url.path
        if request.url.query:
            path = f"{path}?{request.url.query}"
        logger.info(
            "Request received",
            method=request.method,
            path=path,
            client_ip=request.client.host if request.client else "unknown",
        )
        return await call_next(request)

    @app.exception_handler(RequestBodyError)
    async def request_body_exception_handler(request: Request, exc: RequestBodyError):
        logger.warning(
            "Rejected request body",
            method=request.method,
            path=request.url.path,
            error=exc.error,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.error, "message": exc.message},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            content = {"error": "Not found", "path": request.url.path}
        else:
            content = {"error": exc.detail, "path": request.url.path}
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler"""
        logger.error(
            "Unhandled exception",
            error=str(exc),
            method=request.method,
            url=str(request.url),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "message": "An unexpected error occurred",
            },
        )

    app.include_router(health.router, tags=["Health"])
    app.include_router(proxy.router, prefix=settings.api_prefix, tags=["Proxy"])

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "service": settings.service_name,
            "version": settings.service_version,
            "status": "running",
            "docs": "/docs",
        }

    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        app,
        host=settings.gateway_host,
        port=settings.gateway_port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
