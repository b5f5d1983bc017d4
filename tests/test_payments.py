"""Payment status classification against the provider's known states."""

import pytest

from models import PaymentLookup, ProviderPaymentStatus, Verdict
from payments import classify, provider_status


def _lookup(status):
    return PaymentLookup(payment_id="PAY-123", status=status)


def test_completed_is_completed():
    assert classify(_lookup("COMPLETED")) is Verdict.COMPLETED


@pytest.mark.parametrize("status", ["CREATED", "SAVED", "APPROVED", "VOIDED", "PAYER_ACTION_REQUIRED"])
def test_other_known_states_are_not_completed(status):
    assert classify(_lookup(status)) is Verdict.NOT_COMPLETED


@pytest.mark.parametrize("status", ["", "completed", " COMPLETED", "REFUNDED", "DENIED"])
def test_unknown_states_are_not_completed(status):
    assert provider_status(status) is ProviderPaymentStatus.UNRECOGNIZED
    assert classify(_lookup(status)) is Verdict.NOT_COMPLETED


def test_none_status_is_unrecognized():
    assert provider_status(None) is ProviderPaymentStatus.UNRECOGNIZED
