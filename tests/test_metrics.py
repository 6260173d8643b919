"""Test the metrics module."""

from unittest.mock import patch, MagicMock

import pytest

from core.metrics import (
    captures_total,
    init_metrics,
    orders_created,
    paypal_request_latency,
    sheets_forward_failures,
)
from payments.errors import UpstreamError
from payments.sheets import SheetsForwarder
from tests.conftest import SHEETS_URL, MockResponse, capture_resource, order_resource


def test_orders_created_counts_successful_creates(fake_paypal, order_service):
    fake_paypal.on("/v2/checkout/orders", MockResponse(201, order_resource()))
    initial_value = orders_created._value._value

    order_service.create_order("49.99")

    assert orders_created._value._value == initial_value + 1


def test_captures_total_by_outcome(fake_paypal, order_service):
    succeeded = captures_total.labels(outcome="succeeded")
    failed = captures_total.labels(outcome="failed")
    initial_ok = succeeded._value._value
    initial_failed = failed._value._value

    fake_paypal.on(
        "/capture",
        [MockResponse(201, capture_resource()), MockResponse(422, {"name": "UNPROCESSABLE_ENTITY"})],
    )
    order_service.capture_order("5O190127TN364715T")
    with pytest.raises(UpstreamError):
        order_service.capture_order("5O190127TN364715T")

    assert succeeded._value._value == initial_ok + 1
    assert failed._value._value == initial_failed + 1


def test_paypal_request_latency_observed(fake_paypal, order_service):
    fake_paypal.on("/v2/checkout/orders", MockResponse(201, order_resource()))

    order_service.create_order("5.00")

    assert paypal_request_latency.labels(operation="create")._sum._value >= 0


def test_sheets_forward_failures_counter(fake_paypal):
    fake_paypal.on("/exec", MockResponse(503, None, text="busy"))
    initial_value = sheets_forward_failures._value._value

    assert SheetsForwarder(SHEETS_URL).forward({"orderID": "X"}) is False

    assert sheets_forward_failures._value._value == initial_value + 1


def test_init_metrics_with_app():
    """Test metrics initialization with FastAPI app."""
    mock_app = MagicMock()

    with patch("core.metrics.Instrumentator") as mock_instrumentator:
        mock_inst = MagicMock()
        mock_instrumentator.return_value = mock_inst
        mock_inst.instrument.return_value = mock_inst
        mock_inst.expose.return_value = mock_inst

        result = init_metrics(mock_app)

        mock_instrumentator.assert_called_once()
        mock_inst.instrument.assert_called_with(mock_app)
        mock_inst.expose.assert_called_with(
            mock_app, endpoint="/metrics", include_in_schema=False
        )
        assert result == mock_inst


def test_metrics_endpoint_integration(client):
    """Test that metrics endpoint is available and returns Prometheus format."""
    response = client.get("/metrics")

    assert response.status_code == 200
    assert "text/plain" in response.headers.get("content-type", "")

    content = response.text
    assert "vinreport_orders_created_total" in content
    assert "vinreport_paypal_request_seconds" in content


def test_metrics_protected_in_production(client, monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "production")
    monkeypatch.setenv("METRICS_AUTH_TOKEN", "s3cret")

    # TestClient connects from "testclient", which is not a private address
    assert client.get("/metrics").status_code == 401
    assert client.get("/metrics", headers={"X-Metrics-Auth": "s3cret"}).status_code == 200


def test_metrics_naming_convention():
    assert orders_created._name == "vinreport_orders_created"  # Not _total
    assert captures_total._name == "vinreport_captures"
    assert paypal_request_latency._name == "vinreport_paypal_request_seconds"
