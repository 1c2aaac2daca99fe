"""Payment processor adapters.

Each adapter talks to exactly one processor and exchanges only the
provider-agnostic contracts from gateways.base.
"""

from charitypay.gateways.base import (
    Environment,
    PaymentGateway,
    PaymentRequest,
    PaymentResponse,
    PaymentVerification,
    ProviderConfig,
    ProviderType,
    VerificationStatus,
)
from charitypay.gateways.factory import create_gateway
from charitypay.gateways.iyzico import IyzicoGateway
from charitypay.gateways.paytr import PayTRGateway

__all__ = [
    "Environment",
    "IyzicoGateway",
    "PayTRGateway",
    "PaymentGateway",
    "PaymentRequest",
    "PaymentResponse",
    "PaymentVerification",
    "ProviderConfig",
    "ProviderType",
    "VerificationStatus",
    "create_gateway",
]
