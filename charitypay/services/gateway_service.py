"""Payment gateway service.

Routes payment operations to the adapter registered for a provider key.
No business logic here - only gateway coordination.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping

import httpx

from charitypay.config import Settings, provider_configs
from charitypay.core.exceptions import ConfigurationError
from charitypay.gateways.base import (
    PaymentGateway,
    PaymentRequest,
    PaymentResponse,
    PaymentVerification,
    ProviderConfig,
    ProviderType,
)
from charitypay.gateways.factory import create_gateway, gateway_class, parse_provider

logger = logging.getLogger(__name__)


def build_registry(
    configs: Mapping[str | ProviderType, ProviderConfig],
    *,
    timeout: float = 30.0,
    client: httpx.AsyncClient | None = None,
    verify_retries: int = 2,
    allow_placeholder_buyer: bool = True,
) -> Mapping[ProviderType, PaymentGateway]:
    """Build the read-only provider registry.

    Providers whose config lacks a required secret are left out rather than
    registered with an adapter that can only fail.
    """
    registry: dict[ProviderType, PaymentGateway] = {}
    for key, config in configs.items():
        provider = parse_provider(key)
        if not gateway_class(provider).has_credentials(config):
            logger.info(f"Payment provider {provider.value} skipped: incomplete credentials")
            continue
        registry[provider] = create_gateway(
            provider,
            config,
            timeout=timeout,
            client=client,
            verify_retries=verify_retries,
            allow_placeholder_buyer=allow_placeholder_buyer,
        )
    return MappingProxyType(registry)


class PaymentService:
    """Uniform payment API over the configured processors."""

    def __init__(self, registry: Mapping[ProviderType, PaymentGateway]):
        self._gateways = MappingProxyType(dict(registry))

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        client: httpx.AsyncClient | None = None,
    ) -> PaymentService:
        registry = build_registry(
            provider_configs(settings),
            timeout=settings.gateway_timeout_seconds,
            client=client,
            verify_retries=settings.verify_retries,
            allow_placeholder_buyer=settings.allow_placeholder_buyer,
        )
        logger.info(f"Payment providers available: {', '.join(p.value for p in registry) or 'none'}")
        return cls(registry)

    def _get_gateway(self, provider: str | ProviderType) -> PaymentGateway:
        """Look up the adapter for a provider key.

        Raises:
            ConfigurationError: If the provider is unknown or not configured
        """
        provider = parse_provider(provider)
        gateway = self._gateways.get(provider)
        if gateway is None:
            raise ConfigurationError(f"Payment provider '{provider.value}' is not configured")
        return gateway

    def get_available_providers(self) -> list[str]:
        """Provider keys usable in this deployment."""
        return [provider.value for provider in self._gateways]

    async def process_payment(
        self,
        provider: str | ProviderType,
        request: PaymentRequest,
    ) -> PaymentResponse:
        """Initiate a payment. Never retried automatically."""
        gateway = self._get_gateway(provider)
        return await gateway.initiate_payment(request)

    async def verify_payment(
        self,
        provider: str | ProviderType,
        token: str,
    ) -> PaymentVerification:
        """Check a payment session status. Safe to call repeatedly.

        Results with authoritative=False must not be used to settle a payment.
        """
        gateway = self._get_gateway(provider)
        return await gateway.verify_payment(token)

    async def refund_payment(
        self,
        provider: str | ProviderType,
        transaction_id: str,
        amount: Decimal | None = None,
    ) -> PaymentResponse:
        """Refund a payment, fully when amount is None.

        Precondition: the caller must only refund a transaction whose tracked
        status is "completed" (see assert_payment_transition). Adapters do not
        know the prior status and will forward any request they receive.
        """
        gateway = self._get_gateway(provider)
        return await gateway.refund_payment(transaction_id, amount)

    async def handle_callback(
        self,
        provider: str | ProviderType,
        form: Mapping[str, str],
    ) -> PaymentVerification | None:
        """Validate a processor callback; None when it cannot be trusted."""
        gateway = self._get_gateway(provider)
        return await gateway.verify_callback(form)
