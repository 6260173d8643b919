"""Test configuration and fixtures."""

import os
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from core.dependencies import get_settings
from core.settings import OrderPolicy, PayPalConfig, Settings
from main import app
from payments.paypal_client import PayPalClient
from payments.paypal_service import PayPalOrderService

SANDBOX = "https://api-m.sandbox.paypal.com"
SHEETS_URL = "https://script.example.com/macros/s/abc/exec"


class MockResponse:
    """Stand-in for requests.Response with an explicit integer status code."""

    def __init__(self, status_code, json_data=None, text=""):
        self.status_code = status_code
        self._json_data = json_data
        self.text = text

    def json(self):
        if self._json_data is None:
            raise ValueError("No JSON object could be decoded")
        return self._json_data


class FakePayPal:
    """
    Replacement for requests.post that answers by URL and records every call.

    Routes are matched by URL suffix; a route value may be a MockResponse, a
    list of MockResponses (consumed in order) or an exception to raise.
    """

    def __init__(self):
        self.calls = []
        self.routes = {
            "/v1/oauth2/token": MockResponse(
                200,
                {"access_token": "A21AAtest", "token_type": "Bearer", "expires_in": 32400},
            ),
        }

    def on(self, suffix, response):
        self.routes[suffix] = response
        return self

    def __call__(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        for suffix, response in self.routes.items():
            if url.endswith(suffix):
                if isinstance(response, list):
                    response = response.pop(0)
                if isinstance(response, Exception):
                    raise response
                return response
        raise AssertionError(f"unexpected outbound call to {url}")

    def calls_to(self, suffix):
        return [c for c in self.calls if c["url"].endswith(suffix)]


def order_resource(order_id="5O190127TN364715T", status="CREATED"):
    return {
        "id": order_id,
        "status": status,
        "links": [
            {
                "href": f"https://www.sandbox.paypal.com/checkoutnow?token={order_id}",
                "rel": "approve",
                "method": "GET",
            }
        ],
    }


def capture_resource(
    order_id="5O190127TN364715T",
    capture_id="3C679366HH908993F",
    email="buyer@example.com",
):
    return {
        "id": order_id,
        "status": "COMPLETED",
        "payer": {
            "name": {"given_name": "John", "surname": "Doe"},
            "email_address": email,
            "payer_id": "QYR5Z8XDVJNXQ",
        },
        "purchase_units": [
            {
                "reference_id": "default",
                "payments": {
                    "captures": [
                        {
                            "id": capture_id,
                            "status": "COMPLETED",
                            "amount": {"currency_code": "USD", "value": "49.99"},
                        }
                    ]
                },
            }
        ],
    }


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Setup test environment variables before each test."""
    original_env = dict(os.environ)

    os.environ.update(
        {
            "PAYPAL_CLIENT_ID": "test_client_id",
            "PAYPAL_CLIENT_SECRET": "test_secret",
            "PAYPAL_ENVIRONMENT": "sandbox",
            "APP_NAME": "Test Checkout",
            "ENVIRONMENT": "development",
            "DISABLE_TRACING": "true",
            "DEBUG": "true",
        }
    )
    os.environ.pop("SHEETS_WEBHOOK_URL", None)
    os.environ.pop("REQUIRE_ORDER_METADATA", None)
    os.environ.pop("REQUIRE_CUSTOMER_FIELDS", None)

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def mock_settings():
    return Settings(
        PAYPAL_CLIENT_ID="test_client_id",
        PAYPAL_CLIENT_SECRET="test_secret",
        APP_NAME="Test Checkout",
        DEBUG=True,
        ENVIRONMENT="development",
    )


@pytest.fixture
def strict_settings():
    """Settings with every field requirement switched on and forwarding enabled."""
    return Settings(
        PAYPAL_CLIENT_ID="test_client_id",
        PAYPAL_CLIENT_SECRET="test_secret",
        REQUIRE_ORDER_METADATA=True,
        REQUIRE_CUSTOMER_FIELDS=True,
        ECHO_CUSTOMER_METADATA=True,
        SHEETS_WEBHOOK_URL=SHEETS_URL,
        ENVIRONMENT="development",
    )


@pytest.fixture
def fake_paypal():
    fake = FakePayPal()
    with patch("requests.post", side_effect=fake):
        yield fake


@pytest.fixture
def paypal_config():
    return PayPalConfig(
        client_id="test_client_id", client_secret="test_secret", base_url=SANDBOX
    )


@pytest.fixture
def order_service(paypal_config):
    return PayPalOrderService(PayPalClient(paypal_config), OrderPolicy())


@pytest.fixture
def strict_order_service(paypal_config):
    return PayPalOrderService(
        PayPalClient(paypal_config),
        OrderPolicy(require_order_metadata=True, require_customer_fields=True),
    )


@pytest.fixture
def client():
    """Test client using settings from the test environment."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def strict_client(strict_settings):
    """Test client running the strict validation policy."""
    app.dependency_overrides[get_settings] = lambda: strict_settings
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
