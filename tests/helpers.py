"""Helpers shared by the test modules."""

import base64
import hashlib
import hmac
import json
from typing import Callable
from urllib.parse import parse_qs

import httpx

IYZICO_API_KEY = "sandbox-api-key"
IYZICO_SECRET = "sandbox-secret-key"
PAYTR_MERCHANT_ID = "123456"
PAYTR_MERCHANT_KEY = "paytr-merchant-key"
PAYTR_MERCHANT_SALT = "paytr-merchant-salt"


def make_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    """AsyncClient whose every request is answered by handler."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def json_of(request: httpx.Request) -> dict:
    return json.loads(request.content.decode("utf-8"))


def form_of(request: httpx.Request) -> dict:
    return {key: values[0] for key, values in parse_qs(request.content.decode("utf-8")).items()}


def paytr_hmac(message: str) -> str:
    digest = hmac.new(PAYTR_MERCHANT_KEY.encode(), message.encode(), hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


def signed_callback(merchant_oid="DON_42_1", status="success", total_amount="1250", **extra) -> dict:
    """PayTR callback form signed with the test merchant key and salt."""
    form = {
        "merchant_oid": merchant_oid,
        "status": status,
        "total_amount": total_amount,
        "hash": paytr_hmac(f"{merchant_oid}{PAYTR_MERCHANT_SALT}{status}{total_amount}"),
    }
    form.update(extra)
    return form
