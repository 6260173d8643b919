#!/usr/bin/env python3
"""
Verify that the configured PayPal credentials can obtain an access token.
Run after rotating secrets or switching PAYPAL_ENVIRONMENT.
"""

import sys
import os

# Add the project root to the Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.settings import Settings  # noqa: E402
from payments.errors import AuthError  # noqa: E402
from payments.paypal_client import PayPalClient  # noqa: E402
import structlog  # noqa: E402

log = structlog.get_logger(__name__)


def check_credentials() -> int:
    """Fetch one token against the configured environment. Returns an exit code."""
    settings = Settings()
    client = PayPalClient(settings.paypal_config())

    try:
        client.access_token()
    except AuthError as e:
        log.error(
            "paypal.credentials.invalid",
            environment=settings.PAYPAL_ENVIRONMENT,
            status_code=e.status_code,
            error=e.message,
        )
        print(f"❌ PayPal rejected the credentials ({settings.PAYPAL_ENVIRONMENT})")
        return 1

    log.info("paypal.credentials.ok", environment=settings.PAYPAL_ENVIRONMENT)
    print(f"✅ PayPal credentials valid for {settings.paypal_base_url}")
    return 0


if __name__ == "__main__":
    sys.exit(check_credentials())
