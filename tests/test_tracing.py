"""Test the tracing setup."""

from unittest.mock import patch

from opentelemetry.sdk.trace import TracerProvider

from core.tracing import build_resource, init_tracer


def test_resource_describes_the_deployment():
    attrs = build_resource("vin-report-checkout", "production").attributes

    assert attrs["service.name"] == "vin-report-checkout"
    assert attrs["deployment.environment"] == "production"
    assert attrs["service.version"] == "1.0.0"


def test_init_tracer_installs_provider_without_exporting(monkeypatch):
    monkeypatch.setenv("DISABLE_TRACING", "true")

    with patch("core.tracing.trace.set_tracer_provider") as set_provider, patch(
        "core.tracing.OTLPSpanExporter"
    ) as otlp:
        provider = init_tracer("checkout-test", environment="test")

    set_provider.assert_called_once_with(provider)
    otlp.assert_not_called()
    assert isinstance(provider, TracerProvider)
    assert provider.resource.attributes["service.name"] == "checkout-test"
    assert provider.resource.attributes["deployment.environment"] == "test"


def test_init_tracer_exports_over_otlp_when_enabled(monkeypatch):
    monkeypatch.delenv("DISABLE_TRACING", raising=False)

    with patch("core.tracing.trace.set_tracer_provider"), patch(
        "core.tracing.OTLPSpanExporter"
    ) as otlp, patch("core.tracing.BatchSpanProcessor") as batch:
        provider = init_tracer(environment="production")

    otlp.assert_called_once_with()
    batch.assert_called_once_with(otlp.return_value)
    assert provider.resource.attributes["service.name"] == "vin-report-checkout"
