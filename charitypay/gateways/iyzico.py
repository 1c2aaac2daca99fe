"""iyzico payment gateway adapter.

Checkout-form integration: initialization returns a token and a hosted
payment page; the result is read back through the checkout-form detail call.
Documentation: https://docs.iyzico.com
"""

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
    UnexpectedResponseError,
    VerificationStatus,
    to_decimal,
)
from charitypay.gateways.signing import (
    format_price,
    generate_nonce,
    serialize_body,
    sha1_signature,
)

logger = logging.getLogger(__name__)

INITIALIZE_PATH = "/payment/iyzipos/checkoutform/initialize/auth/ecom"
DETAIL_PATH = "/payment/iyzipos/checkoutform/auth/ecom/detail"
REFUND_PATH = "/payment/refund"

AUTH_SCHEME = "IYZWS"
NONCE_HEADER = "x-iyzi-rnd"
LOCALE = "tr"
ENABLED_INSTALLMENTS = [1, 2, 3, 6, 9]

# Substituted for buyer fields iyzico requires but donors may leave blank
DEFAULT_BUYER = {
    "name": "Anonim",
    "surname": "Bagisci",
    "gsmNumber": "+905000000000",
    "email": "bagis@example.org",
    "identityNumber": "11111111111",
    "address": "Istanbul, Turkey",
    "city": "Istanbul",
    "country": "Turkey",
    "zipCode": "34000",
    "ip": "85.34.78.112",
}

# Buyer fields iyzico rejects a checkout form without
REQUIRED_BUYER_FIELDS = ("name", "surname", "email", "identityNumber", "address", "city", "country", "ip")

# PaymentRequest.metadata keys carrying the donor's billing details
BUYER_METADATA_KEYS = {
    "identityNumber": "identity_number",
    "address": "address",
    "city": "city",
    "country": "country",
    "zipCode": "zip_code",
}


def split_name(full_name: str | None) -> tuple[str | None, str | None]:
    """Split a display name into iyzico's name/surname pair."""
    parts = (full_name or "").split()
    if not parts:
        return None, None
    if len(parts) == 1:
        return parts[0], None
    return " ".join(parts[:-1]), parts[-1]


class IyzicoGateway:
    """iyzico checkout-form gateway implementation."""

    provider = ProviderType.IYZICO
    retries_verification = True

    def __init__(
        self,
        config: ProviderConfig,
        *,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
        verify_retries: int = 2,
        allow_placeholder_buyer: bool = True,
    ):
        self.config = config
        self.timeout = timeout
        self.client = client
        self.verify_retries = verify_retries
        self.allow_placeholder_buyer = allow_placeholder_buyer

    @staticmethod
    def has_credentials(config: ProviderConfig) -> bool:
        return bool(config.api_key.strip() and config.secret_key.strip())

    def _signed_headers(self, body: str, nonce: str | None = None) -> dict[str, str]:
        """Build auth headers over the exact serialized body."""
        nonce = nonce or generate_nonce()
        signature = sha1_signature(self.config.secret_key, body)
        return {
            "Authorization": f"{AUTH_SCHEME} {self.config.api_key}:{signature}",
            NONCE_HEADER: nonce,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _call(self, path: str, payload: dict) -> dict:
        body = serialize_body(payload)
        response = await transport.post(
            f"{self.config.base_url}{path}",
            timeout=self.timeout,
            client=self.client,
            content=body.encode("utf-8"),
            headers=self._signed_headers(body),
        )
        data = transport.json_body(response)
        if "status" not in data:
            raise UnexpectedResponseError("iyzico response is missing a status")
        return data

    def donor_details(self, request: PaymentRequest) -> dict[str, str | None]:
        """Donor fields keyed like DEFAULT_BUYER.

        Gaps are filled from DEFAULT_BUYER only when placeholders are allowed;
        otherwise they stay None.
        """
        name, surname = split_name(request.customer_name)
        details = {
            "name": name,
            "surname": surname,
            "gsmNumber": request.customer_phone,
            "email": request.customer_email,
            "ip": request.customer_ip,
        }
        for field, key in BUYER_METADATA_KEYS.items():
            value = request.metadata.get(key)
            details[field] = str(value).strip() if value else None

        if self.allow_placeholder_buyer:
            for field, value in details.items():
                if not value:
                    details[field] = DEFAULT_BUYER[field]
        return details

    def _buyer(self, request: PaymentRequest, donor: dict) -> dict:
        buyer = {
            "id": str(request.metadata.get("donor_id") or request.order_id),
            "name": donor["name"],
            "surname": donor["surname"],
            "gsmNumber": donor["gsmNumber"],
            "email": donor["email"],
            "identityNumber": donor["identityNumber"],
            "registrationAddress": donor["address"],
            "ip": donor["ip"],
            "city": donor["city"],
            "country": donor["country"],
            "zipCode": donor["zipCode"],
        }
        return {key: value for key, value in buyer.items() if value}

    def _address(self, donor: dict) -> dict:
        address = {
            "contactName": f"{donor['name']} {donor['surname']}",
            "city": donor["city"],
            "country": donor["country"],
            "address": donor["address"],
            "zipCode": donor["zipCode"],
        }
        return {key: value for key, value in address.items() if value}

    def build_initialize_payload(self, request: PaymentRequest, donor: dict | None = None) -> dict:
        """Checkout-form initialization body for a donation."""
        donor = donor or self.donor_details(request)
        price = format_price(request.amount)
        return {
            "locale": LOCALE,
            "conversationId": request.order_id,
            "price": price,
            "paidPrice": price,
            "currency": request.currency,
            "basketId": request.order_id,
            "paymentGroup": "PRODUCT",
            "callbackUrl": request.callback_url,
            "enabledInstallments": ENABLED_INSTALLMENTS,
            "buyer": self._buyer(request, donor),
            "shippingAddress": self._address(donor),
            "billingAddress": self._address(donor),
            "basketItems": [
                {
                    "id": request.order_id,
                    "name": (request.description or "Donation")[:100],
                    "category1": "Donation",
                    "itemType": "VIRTUAL",
                    "price": price,
                }
            ],
        }

    async def initiate_payment(self, request: PaymentRequest) -> PaymentResponse:
        """Initialize an iyzico checkout form."""
        if not request.callback_url:
            return PaymentResponse.failure(
                "callback_url is required for iyzico payments",
                code="missing_callback_url",
            )

        donor = self.donor_details(request)
        missing = [field for field in REQUIRED_BUYER_FIELDS if not donor[field]]
        if missing:
            return PaymentResponse.failure(
                f"Missing donor details for iyzico: {', '.join(missing)}",
                code="missing_buyer_data",
            )

        try:
            data = await self._call(INITIALIZE_PATH, self.build_initialize_payload(request, donor))
        except TransportError as e:
            logger.warning(f"iyzico initialize failed for order {request.order_id}: {e}")
            return PaymentResponse.failure(str(e))

        if data.get("status") != "success" or not data.get("token"):
            logger.info(
                f"iyzico declined order {request.order_id}: "
                f"{data.get('errorCode')} {data.get('errorMessage')}"
            )
            return PaymentResponse.failure(
                data.get("errorMessage") or "iyzico rejected the payment request",
                code=data.get("errorCode"),
                raw=data,
            )

        logger.info(f"iyzico checkout form created for order {request.order_id}")
        return PaymentResponse(
            success=True,
            token=data["token"],
            payment_url=data.get("paymentPageUrl"),
            checkout_form_content=data.get("checkoutFormContent"),
            raw_response=data,
        )

    async def verify_payment(self, token: str) -> PaymentVerification:
        """Read the checkout-form result for a token.

        Transport failures are retried; they never change the remote state.
        """
        payload = {"locale": LOCALE, "conversationId": token, "token": token}
        attempts = 1 + max(self.verify_retries, 0)
        data: dict | None = None
        error: TransportError | None = None

        for attempt in range(1, attempts + 1):
            try:
                data = await self._call(DETAIL_PATH, payload)
                break
            except UnexpectedResponseError as e:
                error = e
                break
            except TransportError as e:
                error = e
                logger.warning(f"iyzico verify attempt {attempt}/{attempts} failed: {e}")

        if data is not None:
            try:
                return self._classify(token, data)
            except UnexpectedResponseError as e:
                logger.warning(f"iyzico detail for token {token} is malformed: {e}")
                error = e

        # Remote state unknown; the attempt stays pending
        return PaymentVerification(
            success=False,
            status=VerificationStatus.PENDING,
            transaction_id=token,
            error_message=str(error),
        )

    def _classify(self, token: str, data: dict) -> PaymentVerification:
        """Map a detail body to a verification.

        Raises:
            UnexpectedResponseError: If the reported amount is not a number.
        """
        completed = data.get("status") == "success" and data.get("paymentStatus") == "SUCCESS"
        amount = data.get("paidPrice") or data.get("price")
        if amount is not None:
            try:
                amount = to_decimal(amount)
            except ValueError:
                raise UnexpectedResponseError(f"iyzico reported a malformed amount: {amount!r}") from None
            if not amount.is_finite():
                raise UnexpectedResponseError(f"iyzico reported a malformed amount: {amount!r}")
        status = VerificationStatus.COMPLETED if completed else VerificationStatus.FAILED

        logger.info(f"iyzico verification for token {token}: {status.value}")
        return PaymentVerification(
            success=completed,
            status=status,
            transaction_id=str(data.get("paymentId") or token),
            amount=amount,
            currency=data.get("currency"),
            order_id=data.get("basketId") or data.get("conversationId"),
            error_message=None if completed else (data.get("errorMessage") or "Payment was not completed"),
            raw_response=data,
        )

    async def refund_payment(
        self,
        transaction_id: str,
        amount: Decimal | None = None,
    ) -> PaymentResponse:
        """Refund a payment transaction, fully when amount is None."""
        payload = {
            "locale": LOCALE,
            "conversationId": transaction_id,
            "paymentTransactionId": transaction_id,
        }
        if self.allow_placeholder_buyer:
            payload["ip"] = DEFAULT_BUYER["ip"]
        if amount is not None:
            try:
                value = to_decimal(amount)
            except ValueError as e:
                return PaymentResponse.failure(str(e), code="invalid_amount")
            if value <= 0:
                return PaymentResponse.failure("Refund amount must be positive", code="invalid_amount")
            payload["price"] = format_price(value)

        try:
            data = await self._call(REFUND_PATH, payload)
        except TransportError as e:
            logger.warning(f"iyzico refund failed for transaction {transaction_id}: {e}")
            return PaymentResponse.failure(str(e))

        if data.get("status") != "success":
            return PaymentResponse.failure(
                data.get("errorMessage") or "iyzico rejected the refund",
                code=data.get("errorCode"),
                raw=data,
            )

        logger.info(f"iyzico refund accepted for transaction {transaction_id}")
        return PaymentResponse(
            success=True,
            transaction_id=str(data.get("paymentTransactionId") or transaction_id),
            raw_response=data,
        )

    async def verify_callback(self, form: Mapping[str, str]) -> PaymentVerification | None:
        """Callbacks only carry a token; trust comes from re-verifying it."""
        token = (form.get("token") or "").strip()
        if not token:
            return None
        return await self.verify_payment(token)
