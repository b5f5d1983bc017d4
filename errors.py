"""Checkout errors, carried across workflows as ApplicationError types"""

from typing import Optional

from temporalio.exceptions import ApplicationError


class CheckoutError(Exception):
    """Base class for every checkout failure"""
    status_code = 500
    public_message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message

    def to_application_error(self) -> ApplicationError:
        return ApplicationError(self.message, type=type(self).__name__, non_retryable=True)


class ValidationError(CheckoutError):
    """Malformed or missing caller input"""
    status_code = 400
    public_message = "Invalid request"


class InvalidInputError(ValidationError):
    """Line items the pricing calculator refuses to price"""


class PaymentNotCompletedError(CheckoutError):
    status_code = 400
    public_message = "Payment has not been completed"


class PaymentLookupError(CheckoutError):
    """The payment provider call itself failed"""
    public_message = "Payment could not be verified"


class TransportError(CheckoutError):
    """An outbound HTTP call (webhook, mail, provider) failed"""


class NotificationDispatchFailure(CheckoutError):
    """One notification channel failed; logged, never surfaced"""


class UnexpectedError(CheckoutError):
    pass


_CALLER_VISIBLE = {
    cls.__name__: cls
    for cls in (ValidationError, InvalidInputError, PaymentNotCompletedError, PaymentLookupError)
}


def from_failure_type(failure_type: Optional[str], message: str) -> CheckoutError:
    """Map an ApplicationError type name back to its exception class"""
    cls = _CALLER_VISIBLE.get(failure_type or "")
    if cls is None:
        return UnexpectedError(message)
    return cls(message)
