"""PayTR payment gateway adapter.

iFrame integration: get-token returns a session token for the hosted payment
page. The final outcome arrives only through PayTR's callback notification,
which is HMAC-signed with the merchant key and salt.
Documentation: https://dev.paytr.com
"""

import base64
import json
import logging
from decimal import Decimal
from typing import Mapping

import httpx

from charitypay.gateways import transport
from charitypay.gateways.base import (
    PaymentRequest,
    PaymentResponse,
    PaymentVerification,
    ProviderConfig,
    ProviderType,
    TransportError,
    VerificationStatus,
)
from charitypay.gateways.signing import (
    from_minor_units,
    hmac_sha256_signature,
    signatures_match,
    to_minor_units,
)

logger = logging.getLogger(__name__)

GET_TOKEN_PATH = "/odeme/api/get-token"
PAYMENT_PAGE_PATH = "/odeme/guvenli/"

MANUAL_REFUND_MESSAGE = (
    "PayTR refunds are not supported programmatically; "
    "manual process required through the PayTR merchant panel"
)
UNVERIFIED_MESSAGE = (
    "PayTR payments are confirmed only by the signed callback; "
    "synchronous verification is not authoritative"
)

# PayTR spells Turkish lira differently from ISO 4217
WIRE_CURRENCIES = {"TRY": "TL"}
ISO_CURRENCIES = {wire: iso for iso, wire in WIRE_CURRENCIES.items()}

DEFAULT_USER = {
    "email": "bagis@example.org",
    "name": "Anonim Bagisci",
    "address": "Istanbul, Turkey",
    "phone": "05000000000",
    "ip": "85.34.78.112",
}

TIMEOUT_LIMIT_MINUTES = "30"

# PaymentRequest.metadata key carrying the donor's postal address
ADDRESS_METADATA_KEY = "address"


def encode_basket(description: str, amount: Decimal) -> str:
    """Single-item basket, base64 encoded JSON as PayTR expects."""
    price = format(amount.quantize(Decimal("0.01")), "f")
    basket = [[description[:100], price, 1]]
    return base64.b64encode(json.dumps(basket).encode("utf-8")).decode("ascii")


class PayTRGateway:
    """PayTR iFrame gateway implementation."""

    provider = ProviderType.PAYTR
    retries_verification = False

    def __init__(
        self,
        config: ProviderConfig,
        *,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
        allow_placeholder_buyer: bool = True,
    ):
        self.config = config
        self.timeout = timeout
        self.client = client
        self.allow_placeholder_buyer = allow_placeholder_buyer

    @staticmethod
    def has_credentials(config: ProviderConfig) -> bool:
        return bool(
            config.merchant_id.strip()
            and config.secret_key.strip()
            and config.api_key.strip()
        )

    @property
    def test_mode(self) -> str:
        return "1" if self.config.is_sandbox else "0"

    def token_for(
        self,
        email: str,
        order_id: str,
        payment_amount: int,
        currency: str,
        user_basket: str,
    ) -> str:
        """Sign the get-token request.

        The concatenation order is fixed by PayTR; the merchant salt
        closes the message.
        """
        message = (
            f"{self.config.merchant_id}{email}{order_id}{payment_amount}"
            f"{currency}{self.test_mode}{user_basket}{self.config.api_key}"
        )
        return hmac_sha256_signature(self.config.secret_key, message)

    def user_details(self, request: PaymentRequest) -> dict[str, str | None]:
        """Donor fields keyed like DEFAULT_USER; placeholders only when allowed."""
        address = request.metadata.get(ADDRESS_METADATA_KEY)
        details = {
            "email": request.customer_email,
            "name": request.customer_name,
            "address": str(address).strip() if address else None,
            "phone": request.customer_phone,
            "ip": request.customer_ip,
        }
        if self.allow_placeholder_buyer:
            for field, value in details.items():
                if not value:
                    details[field] = DEFAULT_USER[field]
        return details

    def build_token_form(self, request: PaymentRequest) -> dict[str, str]:
        """Form body for get-token.

        Raises:
            ValueError: If the amount cannot be expressed in whole minor units
                or a required donor detail is missing.
        """
        user = self.user_details(request)
        missing = [field for field, value in user.items() if not value]
        if missing:
            raise ValueError(f"Missing donor details for PayTR: {', '.join(missing)}")

        payment_amount = to_minor_units(request.amount)
        currency = WIRE_CURRENCIES.get(request.currency, request.currency)
        email = user["email"]
        user_basket = encode_basket(request.description or "Donation", request.amount)
        callback = request.callback_url.rstrip("/")

        return {
            "merchant_id": self.config.merchant_id,
            "user_ip": user["ip"],
            "merchant_oid": request.order_id,
            "email": email,
            "payment_amount": str(payment_amount),
            "paytr_token": self.token_for(
                email, request.order_id, payment_amount, currency, user_basket
            ),
            "user_basket": user_basket,
            "debug_on": self.test_mode,
            "no_installment": "0",
            "max_installment": "0",
            "user_name": user["name"],
            "user_address": user["address"],
            "user_phone": user["phone"],
            "merchant_ok_url": f"{callback}/success",
            "merchant_fail_url": f"{callback}/fail",
            "timeout_limit": TIMEOUT_LIMIT_MINUTES,
            "currency": currency,
            "test_mode": self.test_mode,
            "lang": "tr",
        }

    async def initiate_payment(self, request: PaymentRequest) -> PaymentResponse:
        """Request a PayTR iFrame token."""
        if not request.callback_url:
            return PaymentResponse.failure(
                "callback_url is required for PayTR payments",
                code="missing_callback_url",
            )

        missing = [field for field, value in self.user_details(request).items() if not value]
        if missing:
            return PaymentResponse.failure(
                f"Missing donor details for PayTR: {', '.join(missing)}",
                code="missing_buyer_data",
            )

        try:
            form = self.build_token_form(request)
        except ValueError as e:
            return PaymentResponse.failure(str(e), code="invalid_amount")

        try:
            response = await transport.post(
                f"{self.config.base_url}{GET_TOKEN_PATH}",
                timeout=self.timeout,
                client=self.client,
                data=form,
            )
            data = transport.json_body(response)
        except TransportError as e:
            logger.warning(f"PayTR get-token failed for order {request.order_id}: {e}")
            return PaymentResponse.failure(str(e))

        if data.get("status") != "success" or not data.get("token"):
            reason = data.get("reason") or "PayTR rejected the payment request"
            logger.info(f"PayTR declined order {request.order_id}: {reason}")
            return PaymentResponse.failure(reason, raw=data)

        token = data["token"]
        logger.info(f"PayTR token issued for order {request.order_id}")
        return PaymentResponse(
            success=True,
            token=token,
            payment_url=f"{self.config.base_url}{PAYMENT_PAGE_PATH}{token}",
            raw_response=data,
        )

    async def verify_payment(self, token: str) -> PaymentVerification:
        """Placeholder status check.

        PayTR reports outcomes only through its signed callback, so this makes
        no remote call and always answers pending and non-authoritative.
        Use verify_callback to settle PayTR payments.
        """
        logger.warning(f"PayTR synchronous verification requested for {token}; result is not authoritative")
        return PaymentVerification(
            success=False,
            status=VerificationStatus.PENDING,
            transaction_id=token,
            error_message=UNVERIFIED_MESSAGE,
            authoritative=False,
        )

    async def refund_payment(
        self,
        transaction_id: str,
        amount: Decimal | None = None,
    ) -> PaymentResponse:
        """Programmatic refunds are unsupported; nothing is sent."""
        logger.info(f"PayTR refund requested for {transaction_id}; manual processing required")
        return PaymentResponse.failure(MANUAL_REFUND_MESSAGE, code="manual_refund_required")

    def callback_hash(self, merchant_oid: str, status: str, total_amount: str) -> str:
        return hmac_sha256_signature(
            self.config.secret_key,
            f"{merchant_oid}{self.config.api_key}{status}{total_amount}",
        )

    async def verify_callback(self, form: Mapping[str, str]) -> PaymentVerification | None:
        """Validate a PayTR callback notification.

        Returns None when the hash is missing or wrong; such a callback
        must not change any payment state.
        """
        merchant_oid = form.get("merchant_oid") or ""
        status = form.get("status") or ""
        total_amount = form.get("total_amount") or ""

        expected = self.callback_hash(merchant_oid, status, total_amount)
        if not merchant_oid or not signatures_match(expected, form.get("hash")):
            logger.warning(f"Rejected PayTR callback with invalid hash for order {merchant_oid!r}")
            return None

        try:
            amount = from_minor_units(total_amount)
        except ValueError:
            logger.warning(f"Rejected PayTR callback with malformed amount for order {merchant_oid}")
            return None

        completed = status == "success"
        wire_currency = form.get("currency")
        return PaymentVerification(
            success=completed,
            status=VerificationStatus.COMPLETED if completed else VerificationStatus.FAILED,
            transaction_id=merchant_oid,
            amount=amount,
            currency=ISO_CURRENCIES.get(wire_currency, wire_currency) if wire_currency else None,
            order_id=merchant_oid,
            error_message=None if completed else (
                form.get("failed_reason_msg") or "Payment was not completed"
            ),
            raw_response=dict(form),
        )
