"""
VIN Report Checkout - Main Application Entry Point

This module initializes the FastAPI application and sets up the core routing.
The service sits between the VIN report checkout page and the PayPal Orders
API: it creates orders, captures approved ones and optionally hands the
captured details to a spreadsheet webhook.
"""

from contextlib import asynccontextmanager
from datetime import UTC, datetime

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from pydantic import ValidationError as PydanticValidationError

from api import routes
from api.middleware import log_api_entry
from api.schemas import HealthOut
from core.dependencies import clear_settings, get_settings, init_settings
from core.logging import configure_logging
from core.metrics import add_metrics_auth_middleware, init_metrics
from core.settings import Settings
from core.tracing import init_tracer
from payments.errors import PaymentError

log = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI application startup and shutdown events."""
    # Startup
    init_settings()
    settings = get_settings()

    init_tracer(settings.OTEL_SERVICE_NAME, environment=settings.ENVIRONMENT)

    log.info(
        "app.startup",
        app_name=settings.APP_NAME,
        environment=settings.ENVIRONMENT,
        paypal_environment=settings.PAYPAL_ENVIRONMENT,
        sheets_forwarding=bool(settings.SHEETS_WEBHOOK_URL),
    )
    yield
    # Shutdown
    clear_settings()


def _boot_settings() -> Settings | None:
    # Middleware is wired before the lifespan runs, so read the environment here
    try:
        return Settings()
    except RuntimeError:
        return None
    except PydanticValidationError as e:
        log.warning("app.settings_invalid", errors=e.error_count(), detail=str(e))
        return None


app = FastAPI(
    title="VIN Report Checkout",
    description="""
    ## PayPal checkout backend for VIN report purchases

    - **Create order**: `POST /create-paypal-order` before the PayPal buttons open
    - **Capture order**: `POST /capture-paypal-order` after the buyer approves
    - **Record keeping**: captured orders are optionally forwarded to a spreadsheet webhook
    """,
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# Initialize FastAPI instrumentation
FastAPIInstrumentor.instrument_app(app)

_boot = _boot_settings()

# Initialize Prometheus metrics
if _boot is None or _boot.METRICS_ENABLED:
    init_metrics(app)

# Add metrics authentication middleware (for production)
add_metrics_auth_middleware(app)

# Add logging middleware first
app.middleware("http")(log_api_entry)

_origins = _boot.cors_origins if _boot else ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    # Browsers refuse credentialed requests against a wildcard origin
    allow_credentials="*" not in _origins,
)


@app.exception_handler(PaymentError)
async def payment_error_handler(request: Request, exc: PaymentError):
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    invalid = {}
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        invalid[".".join(loc) or "body"] = err.get("msg", "invalid")
    return JSONResponse(
        status_code=400, content={"error": "Invalid fields", "invalid": invalid}
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    log.error("api.unhandled_error", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "details": str(exc)},
    )


@app.get("/")
async def root():
    """Root endpoint providing API information."""
    return {
        "name": "VIN Report Checkout",
        "version": "1.0.0",
        "endpoints": {
            "health": "/health",
            "create_order": "POST /create-paypal-order",
            "capture_order": "POST /capture-paypal-order",
            "metrics": "/metrics",
            "docs": "/docs",
        },
    }


@app.get("/health", response_model=HealthOut)
async def health():
    """Liveness probe; does not touch PayPal."""
    return HealthOut(status="OK", timestamp=datetime.now(UTC))


@app.get("/healthz")
async def health_check(settings: Settings = Depends(get_settings)):
    """Health check endpoint with configuration summary."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "app_name": settings.APP_NAME,
        "environment": settings.ENVIRONMENT,
        "paypal_environment": settings.PAYPAL_ENVIRONMENT,
    }


app.include_router(routes.router)


def main():
    import uvicorn

    configure_logging()
    settings = Settings()
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    main()
