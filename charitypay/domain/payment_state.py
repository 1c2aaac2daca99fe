"""Payment attempt state machine.

An attempt whose initiation fails never leaves "initiated"; it is abandoned
and the donor retries with a new attempt and a new order id.
"""

from charitypay.core.exceptions import ValidationError
from charitypay.gateways.base import PaymentVerification

PAYMENT_TRANSITIONS = {
    "initiated": {"pending"},
    "pending": {"completed", "failed", "cancelled"},
    "completed": {"refunded"},
    "failed": set(),
    "cancelled": set(),
    "refunded": set(),
}


def assert_payment_transition(current: str, target: str) -> None:
    allowed = PAYMENT_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise ValidationError(
            f"Invalid payment transition: {current} → {target}"
        )


def status_after_verification(verification: PaymentVerification) -> str:
    """Attempt status implied by a verification result.

    Non-authoritative results leave the attempt pending.
    """
    if not verification.authoritative:
        return "pending"
    return verification.status.value
