from fastapi import Depends

from core.settings import Settings
from payments.paypal_client import PayPalClient
from payments.paypal_service import PayPalOrderService
from payments.sheets import SheetsForwarder

# Settings singleton
_settings = None


def get_settings() -> Settings:
    """Dependency that provides application settings."""
    assert (
        _settings is not None
    ), "Settings not initialized. Make sure startup() was called."
    return _settings


def init_settings():
    """Initialize settings singleton."""
    global _settings
    _settings = Settings()


def clear_settings():
    """Clear settings singleton."""
    global _settings
    _settings = None


def get_order_service(settings: Settings = Depends(get_settings)) -> PayPalOrderService:
    """Build a fresh order service; nothing is shared between requests."""
    client = PayPalClient(settings.paypal_config())
    return PayPalOrderService(client, settings.order_policy())


def get_sheets_forwarder(
    settings: Settings = Depends(get_settings),
) -> SheetsForwarder | None:
    if not settings.SHEETS_WEBHOOK_URL:
        return None
    return SheetsForwarder(
        settings.SHEETS_WEBHOOK_URL, timeout=settings.PAYPAL_TIMEOUT_SECONDS
    )
