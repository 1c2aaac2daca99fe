"""Tests for the provider-agnostic payment contracts."""

from decimal import Decimal

import pytest

from charitypay.gateways.base import (
    PaymentGateway,
    PaymentRequest,
    PaymentResponse,
    PaymentVerification,
    ProviderConfig,
    VerificationStatus,
)
from charitypay.gateways.iyzico import IyzicoGateway
from charitypay.gateways.paytr import PayTRGateway


class TestPaymentRequest:

    def test_amount_coerced_to_exact_decimal(self):
        request = PaymentRequest(amount=12.5, currency="try", order_id="DON_1")

        assert request.amount == Decimal("12.5")
        assert request.currency == "TRY"
        assert request.metadata == {}

    @pytest.mark.parametrize("amount", [0, -1, "-0.01", "NaN"])
    def test_amount_must_be_positive(self, amount):
        with pytest.raises(ValueError):
            PaymentRequest(amount=amount, currency="TRY", order_id="DON_1")

    @pytest.mark.parametrize("currency", ["", "TL", "XYZ", "TRYY"])
    def test_currency_must_be_recognized(self, currency):
        with pytest.raises(ValueError):
            PaymentRequest(amount=10, currency=currency, order_id="DON_1")

    def test_order_id_required(self):
        with pytest.raises(ValueError):
            PaymentRequest(amount=10, currency="TRY", order_id="  ")

    def test_immutable(self):
        request = PaymentRequest(amount=10, currency="TRY", order_id="DON_1")

        with pytest.raises(AttributeError):
            request.amount = Decimal("1")


class TestPaymentResponse:

    def test_success_requires_token_or_transaction(self):
        with pytest.raises(ValueError):
            PaymentResponse(success=True)

        assert PaymentResponse(success=True, token="tok").token == "tok"
        assert PaymentResponse(success=True, transaction_id="tx").transaction_id == "tx"

    def test_failure_helper(self):
        response = PaymentResponse.failure("declined", code="10051")

        assert response.success is False
        assert response.error_code == "10051"
        assert response.error_message == "declined"


class TestPaymentVerification:

    def test_status_is_enumerated(self):
        verification = PaymentVerification(success=False, status="failed")

        assert verification.status is VerificationStatus.FAILED

        with pytest.raises(ValueError):
            PaymentVerification(success=False, status="declined")

    def test_success_only_when_completed(self):
        with pytest.raises(ValueError):
            PaymentVerification(success=True, status=VerificationStatus.PENDING)

    def test_equality_ignores_raw_response(self):
        first = PaymentVerification(success=False, status="failed", raw_response={"a": 1})
        second = PaymentVerification(success=False, status="failed", raw_response={"a": 2})

        assert first == second


def test_provider_config_repr_hides_secrets(iyzico_config):
    assert iyzico_config.secret_key not in repr(iyzico_config)
    assert iyzico_config.api_key not in repr(iyzico_config)


def test_provider_config_strips_trailing_slash():
    config = ProviderConfig(
        merchant_id="1",
        secret_key="s",
        api_key="k",
        base_url="https://example.com/",
        environment="production",
    )

    assert config.base_url == "https://example.com"
    assert config.is_sandbox is False


def test_adapters_satisfy_gateway_protocol(iyzico_config, paytr_config):
    """Contract test: every adapter implements the full operation set."""
    for gateway in (IyzicoGateway(iyzico_config), PayTRGateway(paytr_config)):
        assert isinstance(gateway, PaymentGateway)
        for name in ("initiate_payment", "verify_payment", "refund_payment", "verify_callback"):
            assert callable(getattr(gateway, name)), f"{type(gateway).__name__} missing {name}"
