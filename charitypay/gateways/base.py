"""Provider-agnostic payment gateway contracts.

Every processor adapter satisfies the PaymentGateway protocol and exchanges
only the value objects defined here with the rest of the application.
Adapters hold no business logic - only processor communication.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Mapping, Protocol, runtime_checkable

SUPPORTED_CURRENCIES = frozenset({"TRY", "USD", "EUR", "GBP"})


class ProviderType(str, Enum):
    """Supported payment processors."""

    IYZICO = "iyzico"
    PAYTR = "paytr"


class Environment(str, Enum):
    """Processor environment."""

    SANDBOX = "sandbox"
    PRODUCTION = "production"


class VerificationStatus(str, Enum):
    """Normalized remote payment status."""

    COMPLETED = "completed"
    FAILED = "failed"
    PENDING = "pending"
    CANCELLED = "cancelled"


class TransportError(Exception):
    """Network failure, timeout or non-2xx answer from a processor."""


class UnexpectedResponseError(TransportError):
    """Processor answered but the body is not in the documented shape."""


def to_decimal(value: Any) -> Decimal:
    """Coerce an amount to Decimal without binary float artifacts."""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {value!r}") from exc


@dataclass(frozen=True)
class ProviderConfig:
    """Static credentials for one processor."""

    merchant_id: str
    secret_key: str
    api_key: str
    base_url: str
    environment: Environment = Environment.SANDBOX

    def __post_init__(self) -> None:
        object.__setattr__(self, "environment", Environment(self.environment))
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @property
    def is_sandbox(self) -> bool:
        return self.environment is Environment.SANDBOX

    def __repr__(self) -> str:
        # Secrets stay out of logs and tracebacks
        return (
            f"ProviderConfig(merchant_id={self.merchant_id!r}, "
            f"base_url={self.base_url!r}, environment={self.environment.value!r})"
        )


@dataclass(frozen=True)
class PaymentRequest:
    """A single donation payment attempt.

    order_id must be fresh for every initiation; reusing it collides with
    settlement records on the processor side.
    """

    amount: Decimal
    currency: str
    order_id: str
    customer_email: str | None = None
    customer_name: str | None = None
    customer_phone: str | None = None
    customer_ip: str | None = None
    description: str | None = None
    callback_url: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        amount = to_decimal(self.amount)
        if not amount.is_finite() or amount <= 0:
            raise ValueError("Payment amount must be positive")
        currency = (self.currency or "").strip().upper()
        if currency not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Unsupported currency: {self.currency!r}")
        if not self.order_id or not self.order_id.strip():
            raise ValueError("order_id is required")
        object.__setattr__(self, "amount", amount)
        object.__setattr__(self, "currency", currency)
        object.__setattr__(self, "metadata", dict(self.metadata or {}))


@dataclass(frozen=True)
class PaymentResponse:
    """Normalized result of initiate and refund calls."""

    success: bool
    transaction_id: str | None = None
    payment_url: str | None = None
    token: str | None = None
    error_code: str | None = None
    error_message: str | None = None
    checkout_form_content: str | None = None
    raw_response: dict | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.success and not (self.token or self.transaction_id):
            raise ValueError(
                "A successful PaymentResponse must carry a token or transaction_id"
            )

    @classmethod
    def failure(
        cls,
        message: str,
        code: str | None = None,
        raw: dict | None = None,
    ) -> PaymentResponse:
        return cls(success=False, error_code=code, error_message=message, raw_response=raw)


@dataclass(frozen=True)
class PaymentVerification:
    """Normalized result of a status check or processor callback.

    authoritative is False when the result does not come from the processor's
    source of truth and must not drive settlement.
    """

    success: bool
    status: VerificationStatus
    transaction_id: str | None = None
    amount: Decimal | None = None
    currency: str | None = None
    order_id: str | None = None
    error_message: str | None = None
    authoritative: bool = True
    raw_response: dict | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", VerificationStatus(self.status))
        if self.amount is not None:
            object.__setattr__(self, "amount", to_decimal(self.amount))
        if self.success and self.status is not VerificationStatus.COMPLETED:
            raise ValueError("Only a completed verification can be successful")


@runtime_checkable
class PaymentGateway(Protocol):
    """Operations every processor adapter provides."""

    provider: ProviderType
    config: ProviderConfig
    # True when verify_payment calls the processor and may be retried
    retries_verification: bool

    async def initiate_payment(self, request: PaymentRequest) -> PaymentResponse:
        """Start a payment session. Never raises for transport failures."""
        ...

    async def verify_payment(self, token: str) -> PaymentVerification:
        """Query the status of a session. Safe to repeat."""
        ...

    async def refund_payment(
        self,
        transaction_id: str,
        amount: Decimal | None = None,
    ) -> PaymentResponse:
        """Refund a settled payment, fully when amount is None."""
        ...

    async def verify_callback(
        self,
        form: Mapping[str, str],
    ) -> PaymentVerification | None:
        """Validate a processor callback; None when it cannot be trusted."""
        ...

    @staticmethod
    def has_credentials(config: ProviderConfig) -> bool:
        """Whether config carries every secret this processor needs."""
        ...
