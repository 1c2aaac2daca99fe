"""Pydantic schemas for API validation."""

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

__all__ = [
    "PaymentInitiateRequest",
    "PaymentInitiateResponse",
    "PaymentRefundRequest",
    "PaymentResultResponse",
    "PaymentVerifyRequest",
    "PaymentVerifyResponse",
    "ProvidersResponse",
    "RefundResponse",
]
