"""
PayPal Order Service

Drives an order through the two calls this backend makes:
- Order creation (intent CAPTURE, one purchase unit)
- Capture of an order the buyer has approved

Input is validated against the configured OrderPolicy before any network
call. PayPal is the source of truth for order state; nothing is stored here.
"""

import time
from decimal import Context, Decimal, Inexact, InvalidOperation
from urllib.parse import quote
from typing import Any

import structlog

from core.logging import BusinessEvents
from core.metrics import captures_total, orders_created, paypal_request_latency
from core.settings import OrderPolicy
from payments.errors import PaymentError, ValidationError
from payments.paypal_client import PayPalClient
from payments.schemas import CaptureResult, Order, parse_capture, parse_order

log = structlog.get_logger(__name__)

DEFAULT_CURRENCY = "USD"
VIN_LENGTH = 17

# PayPal amount values allow at most 10 integer digits
MAX_INTEGER_DIGITS = 10

# Currencies PayPal rejects decimals for
ZERO_DECIMAL_CURRENCIES = frozenset({"HUF", "JPY", "TWD"})

CUSTOMER_FIELDS = (
    "firstName",
    "lastName",
    "email",
    "ssnLast4",
    "mothersName",
    "address",
    "city",
    "state",
    "zip",
)


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _decimal_places(currency: str) -> int:
    return 0 if currency in ZERO_DECIMAL_CURRENCIES else 2


def format_amount(amount: Decimal, currency: str) -> str:
    """Pad an already validated amount to the currency's fixed-point form."""
    places = _decimal_places(currency)
    exact = Context(prec=MAX_INTEGER_DIGITS + places, traps=[Inexact, InvalidOperation])
    return str(amount.quantize(Decimal(1).scaleb(-places), context=exact))


class PayPalOrderService:
    def __init__(self, client: PayPalClient, policy: OrderPolicy | None = None):
        self.client = client
        self.policy = policy or OrderPolicy()

    def _validate_create(self, amount, currency, vin, plan) -> tuple[Decimal, str]:
        missing: list[str] = []
        invalid: dict[str, str] = {}

        code = DEFAULT_CURRENCY if _blank(currency) else str(currency).strip().upper()
        if len(code) != 3 or not code.isascii() or not code.isalpha():
            invalid["currency"] = "must be a 3-letter ISO 4217 code"

        value = None
        if _blank(amount) or isinstance(amount, bool):
            missing.append("amount")
        else:
            try:
                value = Decimal(str(amount).strip())
            except InvalidOperation:
                invalid["amount"] = "must be a number"
            else:
                places = _decimal_places(code)
                if not value.is_finite() or value <= 0:
                    invalid["amount"] = "must be greater than zero"
                elif value.adjusted() + 1 > MAX_INTEGER_DIGITS:
                    invalid["amount"] = f"must be below 10^{MAX_INTEGER_DIGITS}"
                elif value.quantize(Decimal(1).scaleb(-places)) != value:
                    # Never round: the buyer is charged exactly what was sent
                    invalid["amount"] = f"must have at most {places} decimal places"

        if self.policy.require_order_metadata:
            if _blank(vin):
                missing.append("vin")
            elif len(vin.strip()) != VIN_LENGTH:
                invalid["vin"] = f"must be exactly {VIN_LENGTH} characters"
            if _blank(plan):
                missing.append("plan")

        if missing or invalid:
            raise ValidationError(missing=missing, invalid=invalid)
        return value, code

    def _validate_capture(self, order_id, metadata: dict[str, Any]) -> None:
        required = ["orderID"]
        if self.policy.require_order_metadata:
            required += ["vin", "plan"]
        if self.policy.require_customer_fields:
            required += list(CUSTOMER_FIELDS)

        fields = dict(metadata, orderID=order_id)
        missing = [name for name in required if _blank(fields.get(name))]
        if missing:
            raise ValidationError(missing=missing)

    def create_order(
        self,
        amount: Any,
        currency: str | None = DEFAULT_CURRENCY,
        vin: str | None = None,
        plan: str | None = None,
    ) -> Order:
        """
        Create a PayPal order for the VIN report.

        Args:
            amount: Order total, as a number or decimal string
            currency: ISO 4217 code, USD when omitted
            vin: Vehicle identification number the report is for
            plan: Report plan label

        Returns:
            Order with the provider id and status
        """
        value, code = self._validate_create(amount, currency, vin, plan)
        vin = vin.strip() if isinstance(vin, str) and vin.strip() else None
        plan = plan.strip() if isinstance(plan, str) and plan.strip() else None

        purchase_unit: dict[str, Any] = {
            "amount": {"currency_code": code, "value": format_amount(value, code)}
        }
        headers = {"Prefer": "return=representation"}
        if vin:
            now = time.time()
            purchase_unit["description"] = f"VIN Report - {plan or 'Standard'} - {vin}"
            purchase_unit["custom_id"] = vin
            purchase_unit["invoice_id"] = f"VIN-{vin}-{int(now)}"
            # Correlation only: a retry gets a new id and a new order
            headers["PayPal-Request-Id"] = f"vin-{vin}-{int(now * 1000)}"

        body = {"intent": "CAPTURE", "purchase_units": [purchase_unit]}

        log.info(
            BusinessEvents.ORDER_CREATE_ATTEMPT,
            amount=purchase_unit["amount"]["value"],
            currency=code,
            vin=vin,
            plan=plan,
        )
        try:
            with paypal_request_latency.labels(operation="create").time():
                token = self.client.access_token()
                data = self.client.post("/v2/checkout/orders", token, body, headers)
            order = parse_order(data)
        except PaymentError as e:
            log.error(
                BusinessEvents.ORDER_CREATE_FAILURE,
                error=e.message,
                error_type=type(e).__name__,
                vin=vin,
            )
            raise

        orders_created.inc()
        log.info(BusinessEvents.ORDER_CREATED, order_id=order.id, status=order.status)
        return order

    def capture_order(
        self, order_id: str | None, metadata: dict[str, Any] | None = None
    ) -> CaptureResult:
        """
        Capture an approved order.

        ``metadata`` carries the caller's vin/plan and customer fields keyed
        by their request names; they are only checked against the policy.
        """
        metadata = metadata or {}
        self._validate_capture(order_id, metadata)
        order_id = order_id.strip()

        log.info(
            BusinessEvents.CAPTURE_ATTEMPT,
            order_id=order_id,
            vin=metadata.get("vin"),
        )
        try:
            with paypal_request_latency.labels(operation="capture").time():
                token = self.client.access_token()
                data = self.client.post(
                    f"/v2/checkout/orders/{quote(order_id, safe='')}/capture", token, {}
                )
            result = parse_capture(data)
        except PaymentError as e:
            captures_total.labels(outcome="failed").inc()
            log.error(
                BusinessEvents.CAPTURE_FAILURE,
                order_id=order_id,
                error=e.message,
                error_type=type(e).__name__,
            )
            raise

        captures_total.labels(outcome="succeeded").inc()
        log.info(
            BusinessEvents.CAPTURE_SUCCESS,
            order_id=order_id,
            capture_id=result.capture_id,
            status=result.status,
        )
        return result
