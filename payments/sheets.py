"""
Forwarding of captured orders to the spreadsheet webhook.

The webhook is a spreadsheet macro that appends one row per capture. It is
best effort: the payment has already gone through by the time a record is
sent, so a failed forward is logged and counted but never raised.
"""

from datetime import UTC, datetime
from typing import Any

import requests
import structlog

from core.logging import BusinessEvents
from core.metrics import sheets_forward_failures
from payments.schemas import CaptureResult

log = structlog.get_logger(__name__)


def _join(*parts: Any, sep: str = " ") -> str:
    return sep.join(str(p).strip() for p in parts if p and str(p).strip())


def build_capture_record(
    order_id: str, capture: CaptureResult, metadata: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Flatten a capture and the buyer's details into one spreadsheet row."""
    m = metadata or {}
    street = _join(m.get("address"), m.get("city"), sep=", ")
    region = _join(m.get("state"), m.get("zip"))
    return {
        "orderID": order_id,
        "timestamp": datetime.now(UTC).isoformat(),
        "customerName": _join(m.get("firstName"), m.get("lastName")),
        "customerEmail": m.get("email") or "",
        "vin": m.get("vin") or "",
        "plan": m.get("plan") or "",
        "address": _join(street, region, sep=", "),
        "paymentId": capture.capture_id,
        "payerEmail": capture.payer_email or "",
        "ssnLast4": m.get("ssnLast4") or "",
        "mothersName": m.get("mothersName") or "",
    }


class SheetsForwarder:
    def __init__(self, url: str, timeout: float = 20.0):
        self.url = url
        self.timeout = timeout

    def forward(self, record: dict[str, Any]) -> bool:
        """Send one record. Returns False on failure instead of raising."""
        try:
            r = requests.post(self.url, json=record, timeout=self.timeout)
        except requests.RequestException as e:
            sheets_forward_failures.inc()
            log.error(
                BusinessEvents.SHEETS_FORWARD_FAILURE,
                order_id=record.get("orderID"),
                error=str(e),
            )
            return False

        if not 200 <= r.status_code < 300:
            sheets_forward_failures.inc()
            log.error(
                BusinessEvents.SHEETS_FORWARD_FAILURE,
                order_id=record.get("orderID"),
                status_code=r.status_code,
                body=r.text[:500],
            )
            return False

        log.info(BusinessEvents.SHEETS_FORWARDED, order_id=record.get("orderID"))
        return True
