"""FastAPI application factory"""

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from credit_relay.api.errors import register_exception_handlers
from credit_relay.api.middleware import MetricsMiddleware, RequestIDMiddleware, SecurityHeadersMiddleware
from credit_relay.api.v1 import account, loan, tranche
from credit_relay.infrastructure.observability.logging import setup_logging
from credit_relay.config import settings
from credit_relay.utils.time_utils import utc_now_iso

# Setup structured logging
setup_logging(settings.log_level, settings.service_name)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Credit Relay",
        description="REST relay for invoice-backed loans and tranche deposits",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name, "timestamp": utc_now_iso()}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(loan.router, prefix="/api", tags=["loans"])
    app.include_router(tranche.router, prefix="/api", tags=["tranches"])
    app.include_router(account.router, prefix="/api", tags=["accounts"])

    return app


app = create_app()


def run() -> None:
    """Console entry point"""
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
