"""
Shared test configuration and fixtures for the payment gateway suite.
"""

import pytest

from charitypay.gateways.base import Environment, PaymentRequest, ProviderConfig

from tests.helpers import (
    IYZICO_API_KEY,
    IYZICO_SECRET,
    PAYTR_MERCHANT_ID,
    PAYTR_MERCHANT_KEY,
    PAYTR_MERCHANT_SALT,
)


@pytest.fixture
def iyzico_config():
    return ProviderConfig(
        merchant_id="",
        secret_key=IYZICO_SECRET,
        api_key=IYZICO_API_KEY,
        base_url="https://sandbox-api.iyzipay.com",
        environment=Environment.SANDBOX,
    )


@pytest.fixture
def paytr_config():
    return ProviderConfig(
        merchant_id=PAYTR_MERCHANT_ID,
        secret_key=PAYTR_MERCHANT_KEY,
        api_key=PAYTR_MERCHANT_SALT,
        base_url="https://www.paytr.com",
        environment=Environment.SANDBOX,
    )


@pytest.fixture
def donation_request():
    return PaymentRequest(
        amount="100.00",
        currency="TRY",
        order_id="DON_42_1700000000000",
        customer_email="donor@example.com",
        customer_name="Ayse Yilmaz",
        description="Donation #42",
        callback_url="https://charity.example.org/api/v1/webhooks/iyzico",
        metadata={"donation_id": "42"},
    )
