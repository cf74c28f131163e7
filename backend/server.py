"""FastAPI application factory for the NewsPulse backend."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.routers import health, news, sentiment, summarize, translate
from backend.services.container import ServiceContainer, build_services
from core.errors import NewsPulseError
from core.logging import configure_logging
from core.settings import Settings, get_settings

log = logging.getLogger("newspulse.api")

PRIMARY_ROUTERS = [
    ("", health.router),
    ("/sentiment", sentiment.router),
    ("/summarize", summarize.router),
    ("/translate", translate.router),
    ("/news", news.router),
]


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "invalid value")
    return f"Invalid request: {location} {message}".replace("  ", " ").strip()


def create_app(
    settings: Optional[Settings] = None,
    services: Optional[ServiceContainer] = None,
    *,
    configure_logs: bool = True,
) -> FastAPI:
    """Build the API. ``services`` is constructed on startup unless injected."""

    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if configure_logs:
            configure_logging(settings.log_path, level=settings.log_level)
        container = getattr(app.state, "services", None) or build_services(settings)
        app.state.services = container
        await container.start()
        log.info(
            "api.startup",
            extra={
                "gemini_configured": container.gemini.is_configured(),
                "digest_enabled": container.scheduler is not None,
            },
        )
        try:
            yield
        finally:
            await container.aclose()
            log.info("api.shutdown")

    app = FastAPI(title="NewsPulse API", lifespan=lifespan)
    app.state.settings = settings
    if services is not None:
        app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def access_log(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        log.info(
            "http.request",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "elapsed_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return response

    @app.exception_handler(NewsPulseError)
    async def newspulse_error(request: Request, exc: NewsPulseError) -> JSONResponse:
        level = logging.ERROR if exc.status_code >= 500 else logging.INFO
        log.log(
            level,
            "api.error",
            extra={"path": request.url.path, "status": exc.status_code, "error": exc.message},
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": _first_validation_message(exc)})

    for prefix, router in PRIMARY_ROUTERS:
        app.include_router(router, prefix=prefix)

    return app


__all__ = ["create_app", "PRIMARY_ROUTERS"]
