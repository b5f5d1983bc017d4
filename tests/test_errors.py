import pytest

from errors import (
    InvalidInputError,
    PaymentLookupError,
    PaymentNotCompletedError,
    UnexpectedError,
    ValidationError,
    from_failure_type,
)


@pytest.mark.parametrize(
    "error, status",
    [
        (ValidationError(), 400),
        (InvalidInputError("bad price"), 400),
        (PaymentNotCompletedError(), 400),
        (PaymentLookupError(), 500),
        (UnexpectedError(), 500),
    ],
)
def test_status_codes(error, status):
    assert error.status_code == status


def test_application_error_round_trip_keeps_type_and_message():
    failure = PaymentNotCompletedError("Payment PAY-1 is not completed").to_application_error()

    assert failure.type == "PaymentNotCompletedError"
    assert failure.non_retryable

    error = from_failure_type(failure.type, failure.message)
    assert isinstance(error, PaymentNotCompletedError)
    assert error.message == "Payment PAY-1 is not completed"


def test_invalid_input_maps_back_to_validation_error():
    assert isinstance(from_failure_type("InvalidInputError", "bad"), ValidationError)


@pytest.mark.parametrize("failure_type", [None, "", "TransportError", "KeyError"])
def test_unknown_failure_types_are_unexpected(failure_type):
    assert isinstance(from_failure_type(failure_type, "boom"), UnexpectedError)
