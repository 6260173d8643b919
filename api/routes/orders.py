"""
Checkout Routes

The two calls the browser makes during PayPal checkout: create the order
before the PayPal popup opens, capture it once the buyer approves.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends
from starlette.concurrency import run_in_threadpool

from api.schemas import (
    CaptureOrderRequest,
    CaptureOut,
    CreateOrderRequest,
    ErrorOut,
    OrderOut,
)
from core.dependencies import get_order_service, get_settings, get_sheets_forwarder
from core.settings import Settings
from payments.paypal_service import PayPalOrderService
from payments.sheets import SheetsForwarder, build_capture_record

log = structlog.get_logger(__name__)

router = APIRouter(tags=["checkout"])

ERROR_RESPONSES = {
    400: {"model": ErrorOut, "description": "Missing or invalid fields"},
    500: {"model": ErrorOut, "description": "PayPal or network failure"},
}


@router.post(
    "/create-paypal-order", response_model=OrderOut, responses=ERROR_RESPONSES
)
async def create_paypal_order(
    body: CreateOrderRequest,
    service: PayPalOrderService = Depends(get_order_service),
):
    order = await run_in_threadpool(
        service.create_order,
        body.amount,
        body.currency,
        vin=body.vin,
        plan=body.plan,
    )
    return OrderOut(id=order.id, status=order.status)


@router.post(
    "/capture-paypal-order",
    response_model=CaptureOut,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
)
async def capture_paypal_order(
    body: CaptureOrderRequest,
    background_tasks: BackgroundTasks,
    service: PayPalOrderService = Depends(get_order_service),
    forwarder: Optional[SheetsForwarder] = Depends(get_sheets_forwarder),
    settings: Settings = Depends(get_settings),
):
    metadata = body.metadata()
    result = await run_in_threadpool(service.capture_order, body.order_id, metadata)

    response = CaptureOut(
        status=result.status,
        id=result.capture_id,
        # Always present in the body, empty when PayPal omits the payer
        payer_email=result.payer_email or "",
        amount=result.amount,
        currency=result.currency,
    )
    if settings.ECHO_CUSTOMER_METADATA:
        response.vin = body.vin
        response.plan = body.plan

    if forwarder is not None:
        # Runs after the response is sent; failures are logged inside forward()
        record = build_capture_record(body.order_id, result, metadata)
        background_tasks.add_task(forwarder.forward, record)

    return response
