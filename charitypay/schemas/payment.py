"""Payment-related Pydantic schemas."""

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from charitypay.gateways.base import ProviderType, VerificationStatus


class PaymentInitiateRequest(BaseModel):
    """Schema for initiating a donation payment."""

    provider: ProviderType
    donation_id: UUID
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    currency: str = Field("TRY", min_length=3, max_length=3)
    customer_email: EmailStr | None = None
    customer_name: str | None = Field(None, max_length=200)
    customer_phone: str | None = Field(None, max_length=30)
    customer_identity_number: str | None = Field(None, max_length=20)
    billing_address: str | None = Field(None, max_length=255)
    billing_city: str | None = Field(None, max_length=100)
    billing_country: str | None = Field(None, max_length=100)
    billing_zip_code: str | None = Field(None, max_length=20)
    description: str | None = Field(None, max_length=255)
    callback_url: str | None = None


class PaymentInitiateResponse(BaseModel):
    """Schema for a started payment session."""

    success: bool
    provider: ProviderType
    order_id: str
    transaction_id: str | None = None
    payment_token: str | None = None
    payment_url: str | None = None
    checkout_form: str | None = None


class PaymentVerifyRequest(BaseModel):
    """Schema for checking a payment session."""

    provider: ProviderType
    token: str = Field(..., min_length=1)


class PaymentVerifyResponse(BaseModel):
    """Schema for a payment status result."""

    success: bool
    status: VerificationStatus
    authoritative: bool
    transaction_id: str | None = None
    order_id: str | None = None
    amount: Decimal | None = None
    currency: str | None = None
    message: str


class PaymentRefundRequest(BaseModel):
    """Schema for refunding a payment."""

    provider: ProviderType
    transaction_id: str = Field(..., min_length=1)
    status: str = Field(..., description="Status recorded for this transaction by the ledger")
    amount: Decimal | None = Field(None, gt=0, decimal_places=2, description="Omit for a full refund")
    reason: str | None = Field(None, max_length=1000)


class RefundResponse(BaseModel):
    """Schema for refund response."""

    success: bool
    transaction_id: str | None = None
    refund_amount: Decimal | None = None
    message: str


class PaymentResultResponse(BaseModel):
    """Schema for the donor landing page after a hosted checkout."""

    outcome: str
    message: str


class ProvidersResponse(BaseModel):
    """Schema for the processors usable in this deployment."""

    providers: list[str]
    default_provider: str | None
    currencies: list[str]
