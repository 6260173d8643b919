"""
Typed views of the PayPal order and capture resources.

Only the fields the service reads are declared; everything else the
provider sends is ignored. A response that lacks a declared field fails
validation and surfaces as UpstreamError.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as SchemaError

from payments.errors import UpstreamError


class _PayPalModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class PayPalMoney(_PayPalModel):
    currency_code: str
    value: str


class PayPalCapture(_PayPalModel):
    id: str = Field(min_length=1)
    status: Optional[str] = None
    amount: Optional[PayPalMoney] = None


class PayPalPayments(_PayPalModel):
    captures: list[PayPalCapture] = Field(min_length=1)


class PayPalPurchaseUnit(_PayPalModel):
    payments: PayPalPayments


class PayPalPayer(_PayPalModel):
    email_address: Optional[str] = None


class PayPalOrder(_PayPalModel):
    id: str = Field(min_length=1)
    status: str


class PayPalCaptureResponse(_PayPalModel):
    id: Optional[str] = None
    status: Optional[str] = None
    purchase_units: list[PayPalPurchaseUnit] = Field(min_length=1)
    payer: Optional[PayPalPayer] = None


class Order(BaseModel):
    """An order as returned to the checkout page."""

    id: str
    status: str


class CaptureResult(BaseModel):
    """Outcome of a successful capture call."""

    status: str
    capture_id: str
    payer_email: Optional[str] = None
    amount: Optional[str] = None
    currency: Optional[str] = None


def parse_order(data: Any) -> Order:
    try:
        resource = PayPalOrder.model_validate(data)
    except SchemaError as e:
        raise UpstreamError(
            "Unexpected PayPal order response", body=data
        ) from e
    return Order(id=resource.id, status=resource.status)


def parse_capture(data: Any) -> CaptureResult:
    try:
        resource = PayPalCaptureResponse.model_validate(data)
    except SchemaError as e:
        raise UpstreamError(
            "Unexpected PayPal capture response", body=data
        ) from e

    capture = resource.purchase_units[0].payments.captures[0]
    return CaptureResult(
        # PayPal omits the top-level status on some minimal representations
        status=resource.status or "COMPLETED",
        capture_id=capture.id,
        payer_email=resource.payer.email_address if resource.payer else None,
        amount=capture.amount.value if capture.amount else None,
        currency=capture.amount.currency_code if capture.amount else None,
    )
