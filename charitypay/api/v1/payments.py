"""Payment endpoints."""

import logging
import time
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Request, status

from charitypay.api.deps import get_app_settings, get_payment_service
from charitypay.config import Settings
from charitypay.core.exceptions import PaymentError, ValidationError
from charitypay.core.middleware import client_ip
from charitypay.domain.payment_state import assert_payment_transition
from charitypay.gateways.base import PaymentRequest, ProviderType
from charitypay.schemas.payment import (
    PaymentInitiateRequest,
    PaymentInitiateResponse,
    PaymentRefundRequest,
    PaymentResultResponse,
    PaymentVerifyRequest,
    PaymentVerifyResponse,
    ProvidersResponse,
    RefundResponse,
)
from charitypay.services.gateway_service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter()


def generate_order_id(donation_id) -> str:
    """Fresh processor order id for every payment attempt."""
    return f"DON_{donation_id}_{int(time.time() * 1000)}"


def default_callback_url(settings: Settings, provider: ProviderType) -> str:
    """Where the processor returns after checkout when the caller names no URL.

    iyzico posts the checkout token to its webhook. PayTR only redirects the
    donor's browser to <url>/success or <url>/fail; its server notification URL
    is set in the PayTR merchant panel and points at /webhooks/paytr.
    """
    base = f"{settings.app_url.rstrip('/')}{settings.api_prefix}"
    if provider == ProviderType.PAYTR:
        return (settings.payment_return_url or f"{base}/payments/result").rstrip("/")
    return f"{base}/webhooks/{provider.value}"


@router.get("/providers", response_model=ProvidersResponse)
async def list_providers(
    service: Annotated[PaymentService, Depends(get_payment_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> dict:
    """List the payment processors usable in this deployment."""
    providers = service.get_available_providers()
    default = ProviderType.IYZICO.value if ProviderType.IYZICO.value in providers else None
    return {
        "providers": providers,
        "default_provider": default or (providers[0] if providers else None),
        "currencies": settings.currencies,
    }


@router.post("/initiate", response_model=PaymentInitiateResponse, status_code=status.HTTP_201_CREATED)
async def initiate_payment(
    payment_data: PaymentInitiateRequest,
    http_request: Request,
    service: Annotated[PaymentService, Depends(get_payment_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> dict:
    """Start a donation payment with the selected processor."""
    order_id = generate_order_id(payment_data.donation_id)
    callback_url = payment_data.callback_url or default_callback_url(settings, payment_data.provider)
    metadata = {
        "donation_id": str(payment_data.donation_id),
        "identity_number": payment_data.customer_identity_number,
        "address": payment_data.billing_address,
        "city": payment_data.billing_city,
        "country": payment_data.billing_country,
        "zip_code": payment_data.billing_zip_code,
    }

    try:
        request = PaymentRequest(
            amount=payment_data.amount,
            currency=payment_data.currency,
            order_id=order_id,
            customer_email=payment_data.customer_email,
            customer_name=payment_data.customer_name,
            customer_phone=payment_data.customer_phone,
            customer_ip=client_ip(http_request),
            description=payment_data.description or f"Donation #{payment_data.donation_id}",
            callback_url=callback_url,
            metadata={key: value for key, value in metadata.items() if value},
        )
    except ValueError as e:
        raise ValidationError(str(e))

    response = await service.process_payment(payment_data.provider, request)
    if not response.success:
        raise PaymentError(
            f"Payment initiation failed: {response.error_message}",
            error_code=response.error_code,
        )

    return {
        "success": True,
        "provider": payment_data.provider,
        "order_id": order_id,
        "transaction_id": response.transaction_id,
        "payment_token": response.token,
        "payment_url": response.payment_url,
        "checkout_form": response.checkout_form_content,
    }


@router.post("/verify", response_model=PaymentVerifyResponse)
async def verify_payment(
    verify_data: PaymentVerifyRequest,
    service: Annotated[PaymentService, Depends(get_payment_service)],
) -> dict:
    """Check the status of a payment session."""
    verification = await service.verify_payment(verify_data.provider, verify_data.token)

    return {
        "success": verification.success,
        "status": verification.status,
        "authoritative": verification.authoritative,
        "transaction_id": verification.transaction_id,
        "order_id": verification.order_id,
        "amount": verification.amount,
        "currency": verification.currency,
        "message": (
            "Payment completed successfully"
            if verification.success
            else verification.error_message or "Payment failed"
        ),
    }


@router.post("/refund", response_model=RefundResponse)
async def refund_payment(
    refund_data: PaymentRefundRequest,
    service: Annotated[PaymentService, Depends(get_payment_service)],
) -> dict:
    """Refund a completed payment."""
    # Only completed payments may be refunded
    assert_payment_transition(refund_data.status, "refunded")

    response = await service.refund_payment(
        refund_data.provider,
        refund_data.transaction_id,
        refund_data.amount,
    )
    if not response.success:
        raise PaymentError(
            f"Refund failed: {response.error_message}",
            error_code=response.error_code,
        )

    logger.info(
        f"Refund accepted for {refund_data.transaction_id} "
        f"({refund_data.reason or 'no reason given'})"
    )
    return {
        "success": True,
        "transaction_id": response.transaction_id,
        "refund_amount": refund_data.amount,
        "message": "Refund processed successfully",
    }


@router.get("/result/{outcome}", response_model=PaymentResultResponse)
async def payment_result(outcome: Literal["success", "fail"]) -> dict:
    """Landing page for a donor redirected back from a hosted payment page.

    The redirect itself is unsigned; the payment is settled only by the
    processor callback.
    """
    return {
        "outcome": outcome,
        "message": (
            "Thank you, your donation is being confirmed"
            if outcome == "success"
            else "Your payment was not completed"
        ),
    }
