"""
Payment error taxonomy.

Every failure raised by the PayPal client and the order service is a
PaymentError. The API layer turns each one into a JSON body using
``http_status`` and ``to_dict()``.
"""

from typing import Any


class PaymentError(Exception):
    """Base class for create/capture failures."""

    http_status = 500
    label = "Payment processing failed"

    def __init__(self, message: str = ""):
        super().__init__(message or self.label)
        self.message = message or self.label

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.label, "details": self.message}


class ValidationError(PaymentError):
    """Caller input is incomplete or malformed. Raised before any network call."""

    http_status = 400

    def __init__(
        self,
        missing: list[str] | None = None,
        invalid: dict[str, str] | None = None,
    ):
        self.missing = list(missing or [])
        self.invalid = dict(invalid or {})
        if self.missing:
            message = "Missing required fields: " + ", ".join(self.missing)
        else:
            message = "Invalid fields: " + ", ".join(sorted(self.invalid))
        super().__init__(message)

    @property
    def label(self) -> str:
        return "Missing required fields" if self.missing else "Invalid fields"

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.label}
        if self.missing:
            body["missing"] = self.missing
        if self.invalid:
            body["invalid"] = self.invalid
        return body


class _ProviderError(PaymentError):
    def __init__(
        self, message: str, status_code: int | None = None, body: Any = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.message}
        if self.body not in (None, ""):
            payload["details"] = self.body
        return payload


class AuthError(_ProviderError):
    """The client-credentials exchange failed or the token host was unreachable."""

    label = "PayPal authentication failed"


class UpstreamError(_ProviderError):
    """PayPal rejected the call or answered with an unexpected shape."""

    label = "PayPal request failed"

    @property
    def http_status(self) -> int:
        if self.status_code is not None and 400 <= self.status_code < 600:
            return self.status_code
        return 500


class TransportError(PaymentError):
    """Network, DNS or timeout failure while talking to PayPal."""

    label = "PayPal unreachable"
