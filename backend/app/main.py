from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import sentry_sdk
import uvicorn
from fastapi import APIRouter, Depends, FastAPI, HTTPException
from fastapi.responses import JSONResponse
from sentry_sdk.integrations.fastapi import FastApiIntegration

from .api.routes import availability as availability_routes
from .api.routes import credits as credits_routes
from .api.routes import payments as payments_routes
from .api.routes import webhooks as webhooks_routes
from .config import APP_VERSION, SERVICE_NAME
from .health import health_checker
from .logging_config import configure_structlog, get_logger
from .metrics import PrometheusMiddleware, get_metrics
from .payments.factory import PaymentProcessorFactory, get_payment_factory
from .settings import settings
from .utils import add_cors, add_request_id_tracing, add_security_headers

# Configure structured logging (must be done before any logging calls)
configure_structlog(json_logs=not settings.DEBUG)

if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        release=settings.SENTRY_RELEASE or f"{SERVICE_NAME}@{APP_VERSION}",
        integrations=[FastApiIntegration()],
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        send_default_pii=False,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # close the shared provider connection pool on shutdown
    client = get_payment_factory().http_client
    aclose = getattr(client, "aclose", None)
    if aclose is not None:
        await aclose()


app = FastAPI(
    title="Venue Booking Payments API",
    version=APP_VERSION,
    description="Multi-currency payments, fee splits and booking slot availability",
    lifespan=lifespan,
)
add_cors(app)
add_security_headers(app)
add_request_id_tracing(app)
app.add_middleware(PrometheusMiddleware)

API_PREFIX = "/v1"

v1_router = APIRouter(prefix=API_PREFIX)
v1_router.include_router(payments_routes.router)
v1_router.include_router(webhooks_routes.router)
v1_router.include_router(availability_routes.router)
v1_router.include_router(credits_routes.router)
app.include_router(v1_router)

logger = get_logger(__name__)


@app.get("/health")
def health(factory: PaymentProcessorFactory = Depends(get_payment_factory)):
    """Return service health including processor configuration."""
    health_status = health_checker.check_all(factory)
    status_code = 200 if health_status["status"] == "healthy" else 503
    body: dict[str, Any] = {
        "status": health_status["status"],
        "timestamp": health_status["timestamp"],
        "checks": health_status["checks"],
        "service": SERVICE_NAME,
        "version": APP_VERSION,
    }
    if settings.DEBUG:
        body["cached_processors"] = factory.cached_currencies()
    return JSONResponse(content=body, status_code=status_code)


@app.get("/metrics")
def metrics():
    """Expose Prometheus metrics."""
    try:
        return get_metrics()
    except Exception:  # pragma: no cover - exporter failure
        logger.exception("metrics_export_failed")
        raise HTTPException(status_code=503, detail="metrics unavailable")


def serve() -> None:
    """Run the API under uvicorn using HOST/PORT from settings."""
    uvicorn.run(
        "backend.app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level="debug" if settings.DEBUG else "info",
    )
