import logging
import sys
import structlog
import os
from opentelemetry.instrumentation.logging import LoggingInstrumentor

def get_log_level():
    """Get log level from environment or default to INFO"""
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_log_renderer():
    """Get log renderer based on environment"""
    env = os.getenv("ENVIRONMENT", "development")
    # Use JSON format for tests and production
    if env in ["test", "production"]:
        return structlog.processors.JSONRenderer()
    # Pretty printing for local development
    return structlog.dev.ConsoleRenderer(colors=True, sort_keys=False)


SENSITIVE_KEYS = frozenset(
    {"ssn_last4", "ssnLast4", "mothers_name", "mothersName", "client_secret", "access_token"}
)


def redact_sensitive_fields(logger, method_name, event_dict):
    """Mask customer identity answers and credentials before rendering."""
    for key in SENSITIVE_KEYS.intersection(event_dict):
        event_dict[key] = "***"
    return event_dict


def configure_logging():
    """Set up structlog + OTEL context injection."""
    shared_processors = [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.ExceptionPrettyPrinter(),
    ]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            redact_sensitive_fields,
            get_log_renderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        # Cached loggers ignore later reconfiguration, which tests rely on
        cache_logger_on_first_use=os.getenv("ENVIRONMENT", "development") == "production",
    )

    env = os.getenv("ENVIRONMENT", "development")
    if env == "test":
        # In test mode, write to stdout for easier capture
        handler = logging.StreamHandler(sys.stdout)
    else:
        handler = logging.StreamHandler()

    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger = logging.getLogger()
    root_logger.handlers = [handler]  # Replace any existing handlers
    root_logger.setLevel(get_log_level())

    # Silence Uvicorn noise but keep access logs routed through structlog
    logging.getLogger("uvicorn.error").handlers.clear()
    logging.getLogger("uvicorn.access").handlers.clear()

    # Must run after the handlers above are in place
    LoggingInstrumentor().instrument(set_logging_format=False)


# Business Event Log Names
class BusinessEvents:
    """Standard names for business event logs"""

    API_ENTRY = "api.request"
    TOKEN_FAILURE = "paypal.token.failure"
    ORDER_CREATE_ATTEMPT = "order.create.attempt"
    ORDER_CREATED = "order.created"
    ORDER_CREATE_FAILURE = "order.create.failure"
    CAPTURE_ATTEMPT = "order.capture.attempt"
    CAPTURE_SUCCESS = "order.captured"
    CAPTURE_FAILURE = "order.capture.failure"
    SHEETS_FORWARDED = "sheets.forwarded"
    SHEETS_FORWARD_FAILURE = "sheets.forward.failure"


# Configure logging when module is imported
configure_logging()
