"""FastAPI application factory."""
from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from certistage.api.routers import billing
from certistage.core.database import init_database
from certistage.core.logging import setup_logging
from certistage.core.observability import configure_observability
from certistage.core.rate_limiter import setup_rate_limiting
from certistage.core.settings import get_settings


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(app_name=settings.app_name, environment=settings.environment)
    init_database()

    app = FastAPI(title=settings.app_name, version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_rate_limiting(app)
    configure_observability(app)

    app.include_router(billing.router)

    @app.get("/healthz", tags=["monitoring"])
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return app


__all__ = ["create_app"]
