"""Tests for the gateway factory, registry and PaymentService facade."""

from decimal import Decimal

import httpx
import pytest

from charitypay.config import Settings, provider_configs
from charitypay.core.exceptions import ConfigurationError
from charitypay.gateways import factory
from charitypay.gateways.base import Environment, ProviderConfig, ProviderType, VerificationStatus
from charitypay.gateways.factory import create_gateway, parse_provider
from charitypay.gateways.iyzico import IyzicoGateway
from charitypay.gateways.paytr import MANUAL_REFUND_MESSAGE, PayTRGateway
from charitypay.services.gateway_service import PaymentService, build_registry

from tests.helpers import (
    IYZICO_API_KEY,
    IYZICO_SECRET,
    PAYTR_MERCHANT_ID,
    PAYTR_MERCHANT_KEY,
    PAYTR_MERCHANT_SALT,
    make_client,
)


def make_settings(**overrides) -> Settings:
    values = {
        "iyzico_api_key": IYZICO_API_KEY,
        "iyzico_secret_key": IYZICO_SECRET,
        "paytr_merchant_id": PAYTR_MERCHANT_ID,
        "paytr_merchant_key": PAYTR_MERCHANT_KEY,
        "paytr_merchant_salt": PAYTR_MERCHANT_SALT,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestFactory:

    def test_creates_adapter_per_provider(self, iyzico_config, paytr_config):
        assert isinstance(create_gateway("iyzico", iyzico_config), IyzicoGateway)
        assert isinstance(create_gateway(ProviderType.PAYTR, paytr_config), PayTRGateway)

    def test_provider_keys_are_case_insensitive(self):
        assert parse_provider(" IyZiCo ") is ProviderType.IYZICO

    def test_unknown_provider(self, iyzico_config):
        with pytest.raises(ConfigurationError) as exc_info:
            create_gateway("stripe", iyzico_config)

        assert exc_info.value.status_code == 503

    def test_options_are_forwarded(self, iyzico_config):
        gateway = create_gateway("iyzico", iyzico_config, timeout=5.0, verify_retries=0)

        assert gateway.timeout == 5.0
        assert gateway.verify_retries == 0

    def test_paytr_receives_no_retry_option(self, paytr_config):
        gateway = create_gateway("paytr", paytr_config, verify_retries=4, allow_placeholder_buyer=False)

        assert isinstance(gateway, PayTRGateway)
        assert gateway.allow_placeholder_buyer is False
        assert not hasattr(gateway, "verify_retries")

    def test_provider_without_adapter(self, monkeypatch, paytr_config):
        monkeypatch.delitem(factory.GATEWAY_CLASSES, ProviderType.PAYTR)

        with pytest.raises(ConfigurationError) as exc_info:
            create_gateway(ProviderType.PAYTR, paytr_config)

        assert exc_info.value.status_code == 503
        assert "paytr" in exc_info.value.detail

    def test_dispatch_follows_registered_classes(self, monkeypatch, paytr_config):
        monkeypatch.setitem(factory.GATEWAY_CLASSES, ProviderType.PAYTR, IyzicoGateway)

        assert isinstance(create_gateway(ProviderType.PAYTR, paytr_config), IyzicoGateway)


class TestRegistry:

    def test_incomplete_config_is_skipped(self, iyzico_config):
        partial_paytr = ProviderConfig(
            merchant_id=PAYTR_MERCHANT_ID,
            secret_key="",
            api_key=PAYTR_MERCHANT_SALT,
            base_url="https://www.paytr.com",
        )
        registry = build_registry({"iyzico": iyzico_config, "paytr": partial_paytr})

        assert list(registry) == [ProviderType.IYZICO]

    def test_registry_is_read_only(self, iyzico_config, paytr_config):
        registry = build_registry({"iyzico": iyzico_config})

        with pytest.raises(TypeError):
            registry[ProviderType.PAYTR] = PayTRGateway(paytr_config)


class TestProviderConfigs:

    def test_non_production_forces_sandbox(self):
        configs = provider_configs(
            make_settings(environment="staging", payment_environment="production")
        )

        assert configs[ProviderType.IYZICO].environment is Environment.SANDBOX
        assert configs[ProviderType.IYZICO].base_url == "https://sandbox-api.iyzipay.com"
        assert configs[ProviderType.PAYTR].is_sandbox

    def test_production_endpoints(self):
        configs = provider_configs(
            make_settings(environment="production", payment_environment="production")
        )

        assert configs[ProviderType.IYZICO].base_url == "https://api.iyzipay.com"
        assert configs[ProviderType.PAYTR].environment is Environment.PRODUCTION

    def test_paytr_key_and_salt_mapping(self):
        config = provider_configs(make_settings())[ProviderType.PAYTR]

        assert config.merchant_id == PAYTR_MERCHANT_ID
        assert config.secret_key == PAYTR_MERCHANT_KEY
        assert config.api_key == PAYTR_MERCHANT_SALT


class TestPaymentService:

    def test_from_settings_registers_complete_providers(self):
        service = PaymentService.from_settings(make_settings(paytr_merchant_salt=None))

        assert service.get_available_providers() == ["iyzico"]

    def test_from_settings_without_credentials(self):
        service = PaymentService.from_settings(Settings(_env_file=None))

        assert service.get_available_providers() == []

    @pytest.mark.asyncio
    async def test_unconfigured_provider(self):
        service = PaymentService.from_settings(make_settings(paytr_merchant_id=""))

        with pytest.raises(ConfigurationError) as exc_info:
            await service.verify_payment("paytr", "token")

        assert exc_info.value.status_code == 503
        assert "paytr" in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_unknown_provider(self):
        service = PaymentService.from_settings(make_settings())

        with pytest.raises(ConfigurationError):
            await service.refund_payment("paypal", "tx-1")

    @pytest.mark.asyncio
    async def test_delegates_to_adapter(self, donation_request):
        seen = []

        def handler(request):
            seen.append(request.url.path)
            if request.url.path.endswith("/initialize/auth/ecom"):
                return httpx.Response(
                    200,
                    json={"status": "success", "token": "tok-1", "paymentPageUrl": "https://pay/tok-1"},
                )
            return httpx.Response(
                200,
                json={
                    "status": "success",
                    "paymentStatus": "SUCCESS",
                    "paymentId": "pay-1",
                    "paidPrice": 100.0,
                    "currency": "TRY",
                    "basketId": donation_request.order_id,
                },
            )

        service = PaymentService.from_settings(make_settings(), client=make_client(handler))

        initiated = await service.process_payment("iyzico", donation_request)
        verified = await service.verify_payment("iyzico", initiated.token)

        assert initiated.token == "tok-1"
        assert verified.status is VerificationStatus.COMPLETED
        assert verified.amount == Decimal("100.0")
        assert len(seen) == 2

    @pytest.mark.asyncio
    async def test_handle_callback_routes_to_provider(self):
        service = PaymentService.from_settings(make_settings())

        assert await service.handle_callback("paytr", {"merchant_oid": "DON_1"}) is None
        assert await service.handle_callback("iyzico", {}) is None

    @pytest.mark.asyncio
    async def test_paytr_refund_through_service(self):
        service = PaymentService.from_settings(make_settings())

        result = await service.refund_payment("paytr", "DON_1", Decimal("10"))

        assert result.success is False
        assert result.error_message == MANUAL_REFUND_MESSAGE
