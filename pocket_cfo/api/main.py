"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from pocket_cfo.api.middleware import RequestIDMiddleware, MetricsMiddleware
from pocket_cfo.api.v1 import dashboard, planner
from pocket_cfo.infrastructure.observability.logging import setup_logging
from pocket_cfo.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Pocket CFO",
        description="Personal finance analytics, insights and purchase planning",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(dashboard.router, prefix="/v1", tags=["analytics"])
    app.include_router(planner.router, prefix="/v1", tags=["planner"])

    return app


app = create_app()
