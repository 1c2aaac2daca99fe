"""Tests for the payment attempt state machine."""

import pytest

from charitypay.core.exceptions import ValidationError
from charitypay.domain.payment_state import (
    PAYMENT_TRANSITIONS,
    assert_payment_transition,
    status_after_verification,
)
from charitypay.gateways.base import PaymentVerification, VerificationStatus


@pytest.mark.parametrize(
    "current, target",
    [
        ("initiated", "pending"),
        ("pending", "completed"),
        ("pending", "failed"),
        ("pending", "cancelled"),
        ("completed", "refunded"),
    ],
)
def test_allowed_transitions(current, target):
    assert_payment_transition(current, target)


@pytest.mark.parametrize(
    "current, target",
    [
        ("initiated", "completed"),
        ("initiated", "failed"),
        ("pending", "refunded"),
        ("failed", "completed"),
        ("refunded", "completed"),
        ("cancelled", "pending"),
        ("unknown", "pending"),
    ],
)
def test_rejected_transitions(current, target):
    with pytest.raises(ValidationError) as exc_info:
        assert_payment_transition(current, target)

    assert exc_info.value.status_code == 422


def test_terminal_states_have_no_exits():
    for state in ("failed", "cancelled", "refunded"):
        assert PAYMENT_TRANSITIONS[state] == set()


def test_refund_only_from_completed():
    sources = [state for state, targets in PAYMENT_TRANSITIONS.items() if "refunded" in targets]

    assert sources == ["completed"]


class TestStatusAfterVerification:

    def test_authoritative_result_is_applied(self):
        verification = PaymentVerification(success=True, status=VerificationStatus.COMPLETED)

        assert status_after_verification(verification) == "completed"

    def test_non_authoritative_result_stays_pending(self):
        verification = PaymentVerification(
            success=False,
            status=VerificationStatus.FAILED,
            authoritative=False,
        )

        assert status_after_verification(verification) == "pending"
