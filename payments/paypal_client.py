"""
PayPal REST transport.

Fetches OAuth2 client-credentials tokens and performs authenticated JSON
POSTs against the Orders API. A token is fetched for every request and
never cached.
"""

import base64
from typing import Any

import requests
import structlog

from core.logging import BusinessEvents
from core.settings import PayPalConfig
from payments.errors import AuthError, TransportError, UpstreamError

log = structlog.get_logger(__name__)

TOKEN_PATH = "/v1/oauth2/token"


def _response_body(response) -> Any:
    """Best-effort decode of an error body for diagnostics."""
    try:
        return response.json()
    except ValueError:
        return response.text


def get_access_token(
    client_id: str, client_secret: str, base_url: str, timeout: float = 20.0
) -> str:
    """Exchange client credentials for a bearer token."""
    if not client_id or not client_secret:
        raise AuthError("PayPal client id and secret are required")

    basic = base64.b64encode(f"{client_id}:{client_secret}".encode()).decode()
    try:
        r = requests.post(
            f"{base_url}{TOKEN_PATH}",
            headers={
                "Authorization": f"Basic {basic}",
                "Content-Type": "application/x-www-form-urlencoded",
            },
            data={"grant_type": "client_credentials"},
            timeout=timeout,
        )
    except requests.RequestException as e:
        log.error(BusinessEvents.TOKEN_FAILURE, error=str(e))
        raise AuthError(f"PayPal token endpoint unreachable: {e}") from e

    if not 200 <= r.status_code < 300:
        log.error(
            BusinessEvents.TOKEN_FAILURE, status_code=r.status_code, body=r.text
        )
        raise AuthError(
            "PayPal authentication failed",
            status_code=r.status_code,
            body=_response_body(r),
        )

    try:
        token = r.json()["access_token"]
    except (ValueError, KeyError, TypeError) as e:
        log.error(BusinessEvents.TOKEN_FAILURE, error="access_token missing")
        raise AuthError(
            "PayPal token response missing access_token", body=r.text
        ) from e
    return token


class PayPalClient:
    def __init__(self, config: PayPalConfig):
        self.config = config

    @property
    def base(self) -> str:
        return self.config.base_url

    def access_token(self) -> str:
        return get_access_token(
            self.config.client_id,
            self.config.client_secret,
            self.config.base_url,
            timeout=self.config.timeout,
        )

    def post(
        self,
        path: str,
        token: str,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """POST a JSON body with bearer auth and return the decoded response."""
        all_headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        all_headers.update(headers or {})

        try:
            r = requests.post(
                f"{self.base}{path}",
                json=json if json is not None else {},
                headers=all_headers,
                timeout=self.config.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"PayPal request to {path} failed: {e}") from e

        if not 200 <= r.status_code < 300:
            body = _response_body(r)
            message = "PayPal request failed"
            if isinstance(body, dict):
                message = body.get("message") or body.get("name") or message
            raise UpstreamError(message, status_code=r.status_code, body=body)

        try:
            return r.json()
        except ValueError as e:
            raise UpstreamError(
                "PayPal returned a non-JSON response",
                status_code=r.status_code,
                body=r.text,
            ) from e

    def test_connection(self) -> bool:
        """Test the PayPal API connection."""
        try:
            self.access_token()
            return True
        except AuthError:
            return False
