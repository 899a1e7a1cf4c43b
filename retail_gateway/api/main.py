"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from retail_gateway.api.errors import register_exception_handlers
from retail_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from retail_gateway.api.v1 import clients, coupons, financial, installments, money_transfers, sales
from retail_gateway.infrastructure.observability.logging import setup_logging
from retail_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Retail Gateway",
        description="Point-of-sale checkout, installments, client debt status and branch ledger",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(sales.router, prefix="/api", tags=["sales"])
    app.include_router(installments.router, prefix="/api", tags=["installments"])
    app.include_router(clients.router, prefix="/api", tags=["clients"])
    app.include_router(money_transfers.router, prefix="/api", tags=["money-transfers"])
    app.include_router(financial.router, prefix="/api", tags=["financial"])
    app.include_router(coupons.router, prefix="/api", tags=["coupons"])

    return app


app = create_app()
