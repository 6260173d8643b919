"""
API Schemas Module

This module defines Pydantic models for request/response validation.
Request fields are optional at this level; the order service decides which
ones are required and reports the missing ones by name.
"""

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CreateOrderRequest(BaseModel):
    amount: Optional[Union[str, float, int]] = None
    currency: Optional[str] = None
    vin: Optional[str] = None
    plan: Optional[str] = None


class CaptureOrderRequest(BaseModel):
    """Capture request; customer fields use the checkout page's camelCase names."""

    order_id: Optional[str] = Field(default=None, alias="orderID")
    vin: Optional[str] = None
    plan: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    ssn_last4: Optional[str] = None
    mothers_name: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def metadata(self) -> dict[str, Any]:
        """Everything except the order id, keyed by request name."""
        return self.model_dump(by_alias=True, exclude={"order_id"}, exclude_none=True)


class OrderOut(BaseModel):
    id: str
    status: str


class CaptureOut(BaseModel):
    status: str
    id: str
    payer_email: Optional[str] = None
    amount: Optional[str] = None
    currency: Optional[str] = None
    vin: Optional[str] = None
    plan: Optional[str] = None


class HealthOut(BaseModel):
    status: str
    timestamp: datetime


class ErrorOut(BaseModel):
    error: str
    details: Optional[Any] = None
    missing: Optional[list[str]] = None
    invalid: Optional[dict[str, str]] = None
