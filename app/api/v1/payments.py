"""Payment method selection and ATXP status endpoints"""

from fastapi import APIRouter, Depends, Query
from typing import Optional

from app.api.dependencies import get_payment_preferences, resolve_user_id
from app.schemas.tool_invocation import (
    AtxpStatusResponse,
    PaymentMethodRequest,
    PaymentMethodResponse,
)
from app.services import mcp_gateway
from app.services.payment_preferences import PaymentMethod, PaymentPreferences


router = APIRouter(tags=["Payments"])


@router.get("/payment-method", response_model=PaymentMethodResponse)
async def get_payment_method(
    user_id: Optional[str] = Query(None, alias="userId"),
    preferences: PaymentPreferences = Depends(get_payment_preferences)
):
    method = preferences.get(resolve_user_id(user_id))
    return PaymentMethodResponse(payment_method=method.value)


@router.post("/payment-method", response_model=PaymentMethodResponse)
async def set_payment_method(
    request: PaymentMethodRequest,
    preferences: PaymentPreferences = Depends(get_payment_preferences)
):
    """
    Select how the user's tool calls are paid for.

    Applies to the user's subsequent calls only; calls already in flight
    keep the method they started with.
    """
    method = preferences.set(resolve_user_id(request.user_id), PaymentMethod(request.method))
    return PaymentMethodResponse(
        payment_method=method.value,
        message=f"Payment method set to {method.value}",
    )


@router.get("/atxp/status", response_model=AtxpStatusResponse)
async def get_atxp_status(
    user_id: Optional[str] = Query(None, alias="userId"),
    preferences: PaymentPreferences = Depends(get_payment_preferences)
):
    """Whether the gateway is up and which payment mode is in effect"""
    mode = (
        "ATXP with API key fallback"
        if preferences.atxp_configured
        else "Direct HTTP (ATXP unavailable)"
    )
    return AtxpStatusResponse(
        connected=mcp_gateway.gateway is not None,
        mode=mode,
        payment_method=preferences.get(resolve_user_id(user_id)).value,
    )
