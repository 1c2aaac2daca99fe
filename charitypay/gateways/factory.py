"""Construct processor adapters by provider key."""

import httpx

from charitypay.core.exceptions import ConfigurationError
from charitypay.gateways.base import PaymentGateway, ProviderConfig, ProviderType
from charitypay.gateways.iyzico import IyzicoGateway
from charitypay.gateways.paytr import PayTRGateway

GATEWAY_CLASSES: dict[ProviderType, type] = {
    ProviderType.IYZICO: IyzicoGateway,
    ProviderType.PAYTR: PayTRGateway,
}


def parse_provider(provider: str | ProviderType) -> ProviderType:
    """Resolve a provider key.

    Raises:
        ConfigurationError: If the key names no known processor.
    """
    if isinstance(provider, ProviderType):
        return provider
    try:
        return ProviderType(str(provider).strip().lower())
    except ValueError:
        raise ConfigurationError(f"Unknown payment provider: {provider!r}") from None


def gateway_class(provider: str | ProviderType) -> type:
    """Adapter class registered for a provider key.

    Raises:
        ConfigurationError: If the key is unknown or has no adapter.
    """
    provider = parse_provider(provider)
    cls = GATEWAY_CLASSES.get(provider)
    if cls is None:
        raise ConfigurationError(f"No adapter registered for payment provider '{provider.value}'")
    return cls


def create_gateway(
    provider: str | ProviderType,
    config: ProviderConfig,
    *,
    timeout: float = 30.0,
    client: httpx.AsyncClient | None = None,
    verify_retries: int = 2,
    allow_placeholder_buyer: bool = True,
) -> PaymentGateway:
    """Build the adapter for a provider key with its config."""
    cls = gateway_class(provider)
    options = {
        "timeout": timeout,
        "client": client,
        "allow_placeholder_buyer": allow_placeholder_buyer,
    }
    # Adapters without a remote status call have nothing to retry
    if cls.retries_verification:
        options["verify_retries"] = verify_retries
    return cls(config, **options)
