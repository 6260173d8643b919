import os
from dataclasses import dataclass
from typing import Literal

from dotenv import load_dotenv
from pydantic import ConfigDict, field_validator
from pydantic_settings import BaseSettings

# Load .env file automatically
load_dotenv()

SANDBOX_BASE_URL = "https://api-m.sandbox.paypal.com"
LIVE_BASE_URL = "https://api-m.paypal.com"


def base_url_for(environment: str) -> str:
    """Map a PAYPAL_ENVIRONMENT value to the REST API host."""
    if environment in ("production", "live"):
        return LIVE_BASE_URL
    return SANDBOX_BASE_URL


@dataclass(frozen=True)
class PayPalConfig:
    """Connection parameters for the PayPal REST API."""

    client_id: str
    client_secret: str
    base_url: str = SANDBOX_BASE_URL
    timeout: float = 20.0


@dataclass(frozen=True)
class OrderPolicy:
    """Which request fields create/capture insist on."""

    require_order_metadata: bool = False
    require_customer_fields: bool = False


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # PayPal
    PAYPAL_CLIENT_ID: str
    PAYPAL_CLIENT_SECRET: str
    PAYPAL_ENVIRONMENT: Literal["sandbox", "production", "live"] = "sandbox"
    PAYPAL_TIMEOUT_SECONDS: float = 20.0

    # Field validation policy
    REQUIRE_ORDER_METADATA: bool = False
    REQUIRE_CUSTOMER_FIELDS: bool = False
    ECHO_CUSTOMER_METADATA: bool = False

    # Spreadsheet macro that stores captured orders (disabled when empty)
    SHEETS_WEBHOOK_URL: str | None = None

    # HTTP server
    PORT: int = 3000
    CORS_ORIGINS: str = "*"

    # App settings
    APP_NAME: str = "VIN Report Checkout"
    DEBUG: bool = False
    ENVIRONMENT: Literal["development", "test", "production"] = "development"

    # Observability (Optional)
    OTEL_SERVICE_NAME: str = "vin-report-checkout"
    METRICS_ENABLED: bool = True

    model_config = ConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    def __init__(self, **kwargs):
        # Fail with a readable message instead of a pydantic dump
        for name in ("PAYPAL_CLIENT_ID", "PAYPAL_CLIENT_SECRET"):
            if not kwargs.get(name) and not os.getenv(name):
                raise RuntimeError(
                    f"{name} not set; create .env or export the variable"
                )
        super().__init__(**kwargs)

    @field_validator("PAYPAL_ENVIRONMENT", mode="before")
    @classmethod
    def _normalize_environment(cls, value):
        return value.strip().lower() if isinstance(value, str) else value

    @property
    def paypal_base_url(self) -> str:
        return base_url_for(self.PAYPAL_ENVIRONMENT)

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    def paypal_config(self) -> PayPalConfig:
        return PayPalConfig(
            client_id=self.PAYPAL_CLIENT_ID,
            client_secret=self.PAYPAL_CLIENT_SECRET,
            base_url=self.paypal_base_url,
            timeout=self.PAYPAL_TIMEOUT_SECONDS,
        )

    def order_policy(self) -> OrderPolicy:
        return OrderPolicy(
            require_order_metadata=self.REQUIRE_ORDER_METADATA,
            require_customer_fields=self.REQUIRE_CUSTOMER_FIELDS,
        )
