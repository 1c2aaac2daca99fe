"""Request signing and amount helpers shared by the processor adapters."""

import base64
import hashlib
import hmac
import json
import secrets
from decimal import Decimal

from charitypay.gateways.base import to_decimal

MINOR_UNITS = Decimal(100)


def generate_nonce(nbytes: int = 8) -> str:
    """Fresh random value for per-request replay protection."""
    return secrets.token_hex(nbytes)


def serialize_body(body: dict) -> str:
    """Serialize a JSON body exactly once so the signed and sent bytes match."""
    return json.dumps(body, separators=(",", ":"), ensure_ascii=False)


def sha1_signature(secret_key: str, payload: str) -> str:
    """base64(sha1(secret_key + payload)) used by iyzico request headers."""
    digest = hashlib.sha1((secret_key + payload).encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")


def hmac_sha256_signature(secret_key: str, message: str) -> str:
    """base64(HMAC-SHA256(secret_key, message)) used by PayTR tokens and callbacks."""
    digest = hmac.new(
        secret_key.encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha256,
    ).digest()
    return base64.b64encode(digest).decode("ascii")


def signatures_match(expected: str, received: str | None) -> bool:
    """Constant-time comparison of two signatures."""
    if not received:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), received.encode("utf-8"))


def to_minor_units(amount) -> int:
    """Convert a currency amount to integer minor units (x100), exactly.

    Raises:
        ValueError: If the amount has precision below one minor unit.
    """
    minor = to_decimal(amount) * MINOR_UNITS
    if minor != minor.to_integral_value():
        raise ValueError(f"Amount {amount} has sub-minor-unit precision")
    return int(minor)


def from_minor_units(minor: int | str) -> Decimal:
    """Convert integer minor units back to a two-place Decimal amount."""
    return (Decimal(int(minor)) / MINOR_UNITS).quantize(Decimal("0.01"))


def format_price(amount) -> str:
    """Plain decimal string without trailing zeros beyond one place.

    100.00 -> "100.0", 12.50 -> "12.5", 7.25 -> "7.25".
    """
    value = to_decimal(amount).normalize()
    text = format(value, "f")
    if "." not in text:
        text += ".0"
    return text
