"""Callback endpoints for payment processors."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse

from charitypay.api.deps import get_payment_service
from charitypay.core.exceptions import ConfigurationError
from charitypay.gateways.base import ProviderType
from charitypay.gateways.factory import parse_provider
from charitypay.services.gateway_service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/{provider}", status_code=status.HTTP_200_OK)
async def payment_callback(
    provider: str,
    request: Request,
    service: Annotated[PaymentService, Depends(get_payment_service)],
):
    """Handle a processor callback.

    iyzico callbacks are re-verified through the detail call; PayTR callbacks
    are trusted only after their hash is validated.
    """
    try:
        provider_type = parse_provider(provider)
    except ConfigurationError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown payment provider: {provider}",
        ) from None

    form = {key: str(value) for key, value in (await request.form()).items()}

    verification = await service.handle_callback(provider_type, form)
    if verification is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid callback",
        )

    logger.info(
        f"{provider_type.value} callback for order {verification.order_id}: "
        f"{verification.status.value}"
    )

    # PayTR retries the notification until it reads a plain "OK"
    if provider_type == ProviderType.PAYTR:
        return PlainTextResponse("OK")

    return {
        "received": True,
        "status": verification.status.value,
        "order_id": verification.order_id,
    }
